"""
Heuristic suggestion scan.

Each rule is a plain function ``(text, context) -> list[InlineSuggestion]``.
``scan`` runs them in a fixed order and concatenates the results; overlapping
suggestions from different rules are expected and left to the caller.
Offsets always come from where a pattern actually matched in ``text``.
"""
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Sequence

from resume_studio.config.rule_tables import (
    COUNT_NOUNS,
    COUNT_NOUN_FOLLOWERS,
    INFORMAL_PHRASES,
    IRREGULAR_PLURALS,
    METRIC_MIN_LENGTH,
    METRIC_PLACEHOLDER,
    METRIC_SNIPPET_MAX_CHARS,
    PASSIVE_AGENTS,
    PASSIVE_PHRASES,
    TYPO_CORRECTIONS,
    WEAK_VERB_REPLACEMENTS,
    WORDY_PHRASES,
    build_month_pattern,
    build_phrase_patterns,
    with_capitalised_variants,
)
from resume_studio.models.suggestions import InlineSuggestion, ScanContext, create_inline_suggestion
from resume_studio.services.profile_patch import iter_text_targets

logger = logging.getLogger(__name__)

Rule = Callable[[str, ScanContext], List[InlineSuggestion]]

TYPO_PATTERNS = build_phrase_patterns(with_capitalised_variants(TYPO_CORRECTIONS))
WEAK_VERB_PATTERNS = build_phrase_patterns(WEAK_VERB_REPLACEMENTS)
WORDY_PATTERNS = build_phrase_patterns(WORDY_PHRASES)
INFORMAL_PATTERNS = build_phrase_patterns(INFORMAL_PHRASES, ignore_case=True)

PLURAL_PATTERN = re.compile(
    r"\b([2-9]|[1-9]\d+)(\+?\s+)(" + "|".join(map(re.escape, COUNT_NOUNS)) + r")\b"
    # the noun must end its phrase: end of text, punctuation or a linking word
    r"(?=\s*(?:$|[^\w\s-])|\s+(?:" + "|".join(map(re.escape, COUNT_NOUN_FOLLOWERS)) + r")\b)"
)
REPEATED_WORD_PATTERN = re.compile(r"\b([A-Za-z]+)\s+\1\b", re.I)
LOWERCASE_I_PATTERN = re.compile(r"(?<![\w.'])i(?=\s)")

PASSIVE_PHRASE_PATTERN = re.compile(
    r"\b(was|were)\s+(" + "|".join(map(re.escape, PASSIVE_PHRASES)) + r")\b",
    re.I,
)
PASSIVE_AGENT_PATTERN = re.compile(
    r"\b([A-Z][\w-]*(?: [\w-]+){0,4}?) (?:was|were) ([a-z]+ed) by ("
    + "|".join(map(re.escape, PASSIVE_AGENTS))
    + r")\b"
)

_MONTH = build_month_pattern()
DATE_RANGE_PATTERN = re.compile(
    r"\b(" + _MONTH + r")(?![a-z])\s*(?:\d{4}\s*)?(?:-|–|—|to)\s*(" + _MONTH + r")(?![a-z])",
    re.I,
)


def _match_case(template: str, replacement: str) -> str:
    """Give replacement the same leading-letter case as template."""
    if not template or not replacement:
        return replacement
    if template[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement[0].lower() + replacement[1:]


def _suggestion(
    text: str,
    context: ScanContext,
    start: int,
    end: int,
    suggested: str,
    *,
    type: str,
    severity: str,
    reason: str,
    impact: Optional[str] = None,
) -> InlineSuggestion:
    return create_inline_suggestion(
        type=type,
        severity=severity,
        target_section=context.section,
        target_item_id=context.item_id,
        target_field=context.field,
        original_text=text[start:end],
        start_offset=start,
        end_offset=end,
        suggested_text=suggested,
        reason=reason,
        impact=impact,
        source="scan",
    )


def _table_rule(text, context, patterns, *, type, severity, reason, impact=None, keep_case=False):
    suggestions = []
    for pattern, replacement in patterns:
        match = pattern.search(text)
        if not match:
            continue
        suggested = _match_case(match.group(0), replacement) if keep_case else replacement
        suggestions.append(
            _suggestion(
                text, context, match.start(), match.end(), suggested,
                type=type, severity=severity, reason=reason, impact=impact,
            )
        )
    return suggestions


def find_typos(text: str, context: ScanContext) -> List[InlineSuggestion]:
    return _table_rule(
        text, context, TYPO_PATTERNS,
        type="typo",
        severity="error",
        reason="Spelling mistake",
        impact="Typos are one of the fastest ways to get a resume rejected",
    )


def _pluralise(noun: str) -> str:
    return IRREGULAR_PLURALS.get(noun, noun + "s")


def find_grammar_issues(text: str, context: ScanContext) -> List[InlineSuggestion]:
    suggestions = []

    match = PLURAL_PATTERN.search(text)
    if match:
        suggested = match.group(1) + match.group(2) + _pluralise(match.group(3))
        suggestions.append(
            _suggestion(
                text, context, match.start(), match.end(), suggested,
                type="grammar", severity="error",
                reason="Counts above one take the plural form",
            )
        )

    match = REPEATED_WORD_PATTERN.search(text)
    if match:
        suggestions.append(
            _suggestion(
                text, context, match.start(), match.end(), match.group(1),
                type="grammar", severity="error",
                reason="Repeated word",
            )
        )

    match = LOWERCASE_I_PATTERN.search(text)
    if match:
        suggestions.append(
            _suggestion(
                text, context, match.start(), match.end(), "I",
                type="grammar", severity="error",
                reason='The pronoun "I" is always capitalized',
            )
        )
    return suggestions


def find_weak_verbs(text: str, context: ScanContext) -> List[InlineSuggestion]:
    return _table_rule(
        text, context, WEAK_VERB_PATTERNS,
        type="wording",
        severity="warning",
        reason="Action verbs are stronger and more impactful than passive phrases",
        impact="Makes you sound more proactive and leadership-oriented",
    )


def find_missing_metrics(text: str, context: ScanContext) -> List[InlineSuggestion]:
    if context.field != "description" or len(text) <= METRIC_MIN_LENGTH or re.search(r"\d", text):
        return []
    dot = text.find(".")
    end = min(dot if dot != -1 else len(text), METRIC_SNIPPET_MAX_CHARS)
    snippet = text[:end]
    return [
        _suggestion(
            text, context, 0, end, snippet + METRIC_PLACEHOLDER,
            type="metric",
            severity="warning",
            reason="Quantifiable achievements are more compelling to recruiters",
            impact="Makes impact measurable and improves ATS scoring",
        )
    ]


def find_wordiness(text: str, context: ScanContext) -> List[InlineSuggestion]:
    return _table_rule(
        text, context, WORDY_PATTERNS,
        type="wording",
        severity="suggestion",
        reason="Concise phrasing reads faster",
    )


def find_passive_voice(text: str, context: ScanContext) -> List[InlineSuggestion]:
    suggestions = []

    match = PASSIVE_PHRASE_PATTERN.search(text)
    if match:
        active = _match_case(match.group(1), PASSIVE_PHRASES[match.group(2).lower()])
        suggestions.append(
            _suggestion(
                text, context, match.start(), match.end(), active,
                type="wording", severity="suggestion",
                reason="Active voice shows ownership of the work",
            )
        )

    match = PASSIVE_AGENT_PATTERN.search(text)
    if match:
        subject, verb, agent = match.groups()
        # Keep acronyms ("API", "CI") as written.
        if len(subject) < 2 or not subject[1].isupper():
            subject = subject[0].lower() + subject[1:]
        actor = PASSIVE_AGENTS[agent]
        active = f"{actor[0].upper()}{actor[1:]} {verb} {subject}"
        suggestions.append(
            _suggestion(
                text, context, match.start(), match.end(), active,
                type="wording", severity="suggestion",
                reason="Lead with who did the work",
            )
        )
    return suggestions


def find_informal_tone(text: str, context: ScanContext) -> List[InlineSuggestion]:
    return _table_rule(
        text, context, INFORMAL_PATTERNS,
        type="tone",
        severity="suggestion",
        reason="Informal language weakens a professional document",
        keep_case=True,
    )


def find_date_capitalization(text: str, context: ScanContext) -> List[InlineSuggestion]:
    for match in DATE_RANGE_PATTERN.finditer(text):
        first, second = match.group(1), match.group(2)
        if first[0].isupper() and second[0].islower():
            return [
                _suggestion(
                    text, context, match.start(2), match.end(2), second[0].upper() + second[1:],
                    type="formatting",
                    severity="suggestion",
                    reason="Capitalize both months of a date range consistently",
                )
            ]
    return []


DEFAULT_RULES: Sequence[Rule] = (
    find_typos,
    find_grammar_issues,
    find_weak_verbs,
    find_missing_metrics,
    find_wordiness,
    find_passive_voice,
    find_informal_tone,
    find_date_capitalization,
)


def scan(text: str, context: ScanContext, rules: Sequence[Rule] = DEFAULT_RULES) -> List[InlineSuggestion]:
    """Run every rule over text in order and return the concatenated suggestions."""
    if not text:
        return []
    suggestions: List[InlineSuggestion] = []
    for rule in rules:
        suggestions.extend(rule(text, context))
    return suggestions


def scan_profile(profile: Dict[str, Any], rules: Sequence[Rule] = DEFAULT_RULES) -> List[InlineSuggestion]:
    """Scan every editable string in a profile."""
    suggestions: List[InlineSuggestion] = []
    for context, text in iter_text_targets(profile):
        suggestions.extend(scan(text, context, rules))
    logger.debug("Profile scan produced %d suggestions", len(suggestions))
    return suggestions
