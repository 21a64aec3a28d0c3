"""
Offset-based text patching for inline suggestions.

All functions here are pure: they take text and suggestions and return new
values. Validity is never assumed from creation time; callers check
``is_suggestion_valid`` immediately before ``apply_suggestion``.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from resume_studio.models.suggestions import InlineSuggestion
from resume_studio.services.grouping import get_suggestion_priority

STALE = "stale"
CONFLICT = "conflict"


def is_suggestion_valid(current_text: str, suggestion: InlineSuggestion) -> bool:
    """True when the suggestion's range still holds its original text."""
    start, end = suggestion.start_offset, suggestion.end_offset
    if start > end or end > len(current_text):
        return False
    return current_text[start:end] == suggestion.original_text


def apply_suggestion(text: str, suggestion: InlineSuggestion) -> str:
    """Replace ``[start_offset, end_offset)`` with the suggested text. Does not validate."""
    return text[: suggestion.start_offset] + suggestion.suggested_text + text[suggestion.end_offset :]


def suggestions_overlap(a: InlineSuggestion, b: InlineSuggestion) -> bool:
    if a.start_offset == b.start_offset:
        return True
    return a.start_offset < b.end_offset and b.start_offset < a.end_offset


def rebase_suggestion(
    suggestion: InlineSuggestion,
    applied: InlineSuggestion,
) -> Optional[InlineSuggestion]:
    """
    Shift a suggestion's offsets to account for ``applied`` having been written
    into the same text. Returns None when the two ranges overlap, since the
    suggestion no longer addresses text that exists.
    """
    if suggestions_overlap(suggestion, applied):
        return None
    if suggestion.end_offset <= applied.start_offset:
        return suggestion
    delta = len(applied.suggested_text) - (applied.end_offset - applied.start_offset)
    if delta == 0:
        return suggestion
    return suggestion.model_copy(
        update={
            "start_offset": suggestion.start_offset + delta,
            "end_offset": suggestion.end_offset + delta,
        }
    )


@dataclass
class FieldPatchResult:
    text: str
    applied: List[InlineSuggestion] = field(default_factory=list)
    skipped: List[Tuple[InlineSuggestion, str]] = field(default_factory=list)


def _application_order(suggestions: Iterable[InlineSuggestion]) -> List[InlineSuggestion]:
    # Ascending position; on equal starts the higher-priority suggestion goes first.
    return sorted(
        suggestions,
        key=lambda s: (s.start_offset, -get_suggestion_priority(s), s.end_offset),
    )


def apply_suggestions_to_text(
    text: str,
    suggestions: Iterable[InlineSuggestion],
) -> FieldPatchResult:
    """
    Apply several suggestions to the text of a single field, one at a time.

    Each suggestion is rebased over everything applied before it and then
    revalidated against the current text. Overlapping suggestions are mutually
    exclusive: the first one applied wins and the others are skipped as
    conflicts. Suggestions that no longer match their original text are
    skipped as stale. Skipped suggestions keep their original offsets.
    """
    result = FieldPatchResult(text=text)
    for suggestion in _application_order(suggestions):
        current: Optional[InlineSuggestion] = suggestion
        for done in result.applied:
            current = rebase_suggestion(current, done)
            if current is None:
                break
        if current is None:
            result.skipped.append((suggestion, CONFLICT))
            continue
        if not is_suggestion_valid(result.text, current):
            result.skipped.append((suggestion, STALE))
            continue
        result.text = apply_suggestion(result.text, current)
        result.applied.append(current)
    return result
