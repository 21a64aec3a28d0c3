from typing import Dict, Iterable, List, Optional, Tuple

from resume_studio.models.suggestions import InlineSuggestion, SuggestionGroup

# Group key for suggestions that target a section rather than an item.
_NO_ITEM = object()

SEVERITY_WEIGHTS: Dict[str, int] = {
    "error": 100,
    "warning": 50,
    "suggestion": 10,
}

TYPE_BONUS: Dict[str, int] = {
    "typo": 20,
    "grammar": 15,
    "metric": 10,
}

TYPE_LABELS: Dict[str, str] = {
    "typo": "Typo",
    "grammar": "Grammar",
    "wording": "Wording",
    "metric": "Add Metric",
    "tone": "Tone",
    "formatting": "Formatting",
}


def group_key(suggestion: InlineSuggestion) -> Tuple[str, object, Optional[str]]:
    return (
        suggestion.target_section,
        suggestion.target_item_id or _NO_ITEM,
        suggestion.target_field,
    )


def group_suggestions(suggestions: Iterable[InlineSuggestion]) -> List[SuggestionGroup]:
    """
    Partition suggestions by (section, item id, field), keeping the
    order in which groups are first seen. Each group is sorted by start offset.
    """
    buckets: Dict[Tuple[str, object, Optional[str]], List[InlineSuggestion]] = {}
    for suggestion in suggestions:
        buckets.setdefault(group_key(suggestion), []).append(suggestion)

    groups = []
    for (section, item_id, field), items in buckets.items():
        groups.append(
            SuggestionGroup(
                section=section,
                item_id=None if item_id is _NO_ITEM else item_id,
                field=field,
                suggestions=sorted(items, key=lambda s: s.start_offset),
            )
        )
    return groups


def get_suggestion_priority(suggestion: InlineSuggestion) -> int:
    """Higher number = shown first."""
    return SEVERITY_WEIGHTS.get(suggestion.severity, 0) + TYPE_BONUS.get(suggestion.type, 0)


def sort_suggestions_by_priority(suggestions: Iterable[InlineSuggestion]) -> List[InlineSuggestion]:
    return sorted(suggestions, key=get_suggestion_priority, reverse=True)


def get_suggestion_type_label(suggestion: InlineSuggestion) -> str:
    # An empty original means the suggestion adds content rather than replacing it.
    if suggestion.type == "wording" and not suggestion.original_text:
        return "Add Keywords"
    return TYPE_LABELS.get(suggestion.type, "Suggestion")
