"""
User decisions on suggestions: approve, deny, customize, and batch apply.

Every entry point returns a result value. Nothing raises for a stale,
unresolvable or already-decided suggestion, so one bad suggestion never
aborts the rest of a batch.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from resume_studio.models.suggestions import InlineSuggestion
from resume_studio.services.patching import CONFLICT, STALE, apply_suggestions_to_text, is_suggestion_valid
from resume_studio.services.profile_patch import (
    FieldTarget,
    Path,
    apply_suggestion_to_profile,
    apply_text_to_profile,
    resolve_suggestion_target,
)

logger = logging.getLogger(__name__)

APPLIED = "applied"
DENIED = "denied"
UNRESOLVABLE = "unresolvable"
NOT_PENDING = "not_pending"

MESSAGES: Dict[str, str] = {
    APPLIED: "Suggestion applied.",
    DENIED: "Suggestion dismissed.",
    STALE: "Cannot apply suggestion: the text has changed.",
    CONFLICT: "Cannot apply suggestion: it overlaps another change to the same text.",
    UNRESOLVABLE: "Cannot apply suggestion: its target no longer exists.",
    NOT_PENDING: "Suggestion was already decided.",
}


@dataclass
class DecisionResult:
    profile: Dict[str, Any]
    suggestion: InlineSuggestion
    outcome: str

    @property
    def applied(self) -> bool:
        return self.outcome == APPLIED

    @property
    def message(self) -> str:
        return MESSAGES[self.outcome]


@dataclass
class BatchResult:
    profile: Dict[str, Any]
    outcomes: List[Tuple[InlineSuggestion, str]] = field(default_factory=list)

    @property
    def applied(self) -> List[InlineSuggestion]:
        return [s for s, outcome in self.outcomes if outcome == APPLIED]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _gate(profile: Dict[str, Any], suggestion: InlineSuggestion) -> Optional[str]:
    """Outcome that blocks applying ``suggestion`` right now, or None if it may be applied."""
    if not suggestion.is_pending:
        return NOT_PENDING
    target = resolve_suggestion_target(profile, suggestion)
    if target is None:
        return UNRESOLVABLE
    if not is_suggestion_valid(target.text, suggestion):
        return STALE
    return None


def approve_suggestion(
    profile: Dict[str, Any],
    suggestion: InlineSuggestion,
    now: Optional[datetime] = None,
) -> DecisionResult:
    """Apply a pending suggestion after rechecking it against the current profile."""
    blocked = _gate(profile, suggestion)
    if blocked:
        logger.info("Suggestion %s not applied: %s", suggestion.id, blocked)
        return DecisionResult(profile=profile, suggestion=suggestion, outcome=blocked)
    approved = suggestion.model_copy(update={"status": "approved", "applied_at": now or _utc_now()})
    return DecisionResult(
        profile=apply_suggestion_to_profile(profile, suggestion),
        suggestion=approved,
        outcome=APPLIED,
    )


def customize_suggestion(
    profile: Dict[str, Any],
    suggestion: InlineSuggestion,
    custom_text: str,
    now: Optional[datetime] = None,
) -> DecisionResult:
    """Apply a user-edited replacement over the suggestion's range."""
    blocked = _gate(profile, suggestion)
    if blocked:
        return DecisionResult(profile=profile, suggestion=suggestion, outcome=blocked)
    customized = suggestion.model_copy(
        update={"suggested_text": custom_text, "status": "customized", "applied_at": now or _utc_now()}
    )
    return DecisionResult(
        profile=apply_suggestion_to_profile(profile, customized),
        suggestion=customized,
        outcome=APPLIED,
    )


def deny_suggestion(profile: Dict[str, Any], suggestion: InlineSuggestion) -> DecisionResult:
    """Dismiss a pending suggestion. The profile is returned untouched."""
    if not suggestion.is_pending:
        return DecisionResult(profile=profile, suggestion=suggestion, outcome=NOT_PENDING)
    denied = suggestion.model_copy(update={"status": "denied"})
    return DecisionResult(profile=profile, suggestion=denied, outcome=DENIED)


def apply_batch(
    profile: Dict[str, Any],
    suggestions: Iterable[InlineSuggestion],
    now: Optional[datetime] = None,
) -> BatchResult:
    """
    Approve many suggestions at once.

    Suggestions are grouped by the field they resolve to and each field is patched one
    suggestion at a time with offsets re-derived after every change.
    Already-decided suggestions are skipped, as are stale, overlapping and
    unresolvable ones; every input suggestion gets exactly one outcome.
    """
    now = now or _utc_now()
    result = BatchResult(profile=profile)
    pending = []
    for suggestion in suggestions:
        if suggestion.is_pending:
            pending.append(suggestion)
        else:
            result.outcomes.append((suggestion, NOT_PENDING))

    # Keyed by resolved path: "content" and a default field of None can name the same string.
    fields: Dict[Path, Tuple[FieldTarget, List[InlineSuggestion]]] = {}
    for suggestion in pending:
        target = resolve_suggestion_target(profile, suggestion)
        if target is None:
            result.outcomes.append((suggestion, UNRESOLVABLE))
            continue
        fields.setdefault(target.path, (target, []))[1].append(suggestion)

    for target, members in fields.values():
        patch = apply_suggestions_to_text(target.text, members)
        applied_ids = {s.id for s in patch.applied}
        if applied_ids:
            result.profile = apply_text_to_profile(result.profile, target, patch.text, patch.applied)
        for suggestion in members:
            if suggestion.id in applied_ids:
                result.outcomes.append(
                    (suggestion.model_copy(update={"status": "approved", "applied_at": now}), APPLIED)
                )
        result.outcomes.extend(patch.skipped)

    logger.info(
        "Batch apply: %d of %d suggestions applied",
        len(result.applied),
        len(result.outcomes),
    )
    return result
