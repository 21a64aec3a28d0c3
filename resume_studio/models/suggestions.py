import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, Field, NonNegativeInt

SuggestionType = Literal["typo", "grammar", "wording", "tone", "formatting", "metric"]
SuggestionSeverity = Literal["error", "warning", "suggestion"]
SuggestionStatus = Literal["pending", "approved", "denied", "customized"]
SuggestionSource = Literal["scan", "chat", "manual"]
TargetSection = Literal[
    "summary",
    "experience",
    "education",
    "skills",
    "projects",
    "certifications",
    "volunteer",
    "awards",
    "publications",
]

TARGET_SECTIONS: List[str] = list(get_args(TargetSection))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_suggestion_id() -> str:
    return f"sug_{uuid.uuid4().hex[:16]}"


class InlineSuggestion(BaseModel):
    """A proposed replacement of an exact character range inside one profile field."""
    id: str
    type: SuggestionType
    severity: SuggestionSeverity
    target_section: TargetSection
    target_item_id: Optional[str] = None
    target_field: Optional[str] = None  # e.g. "description", "achievements[2]"
    original_text: str
    start_offset: NonNegativeInt
    end_offset: NonNegativeInt
    suggested_text: str
    reason: str = ""
    impact: Optional[str] = None
    source: SuggestionSource = "scan"
    status: SuggestionStatus = "pending"
    created_at: datetime = Field(default_factory=_utc_now)
    applied_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


def create_inline_suggestion(**params: Any) -> InlineSuggestion:
    """
    Create a pending suggestion with a fresh id and creation time.
    Offsets are not checked here; the text they point into may not be final yet.
    """
    params.pop("id", None)
    params.pop("status", None)
    params.pop("created_at", None)
    return InlineSuggestion(
        id=generate_suggestion_id(),
        status="pending",
        created_at=_utc_now(),
        **params,
    )


class ScanContext(BaseModel):
    """Target triple a piece of text was taken from."""
    section: TargetSection
    item_id: Optional[str] = None
    field: Optional[str] = None


class SuggestionGroup(BaseModel):
    section: TargetSection
    item_id: Optional[str] = None
    field: Optional[str] = None
    suggestions: List[InlineSuggestion]


class SuggestionResponse(BaseModel):
    """Response containing all suggestions"""
    suggestions: List[InlineSuggestion]


class GroupedSuggestionResponse(BaseModel):
    groups: List[SuggestionGroup]


class GenerateSuggestionsRequest(BaseModel):
    """Text of one field, or a whole profile to scan field by field."""
    text: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None
    section: TargetSection = "summary"
    item_id: Optional[str] = None
    field: Optional[str] = None
    use_ai: bool = True


class SuggestionListRequest(BaseModel):
    suggestions: List[InlineSuggestion]


class ApplySuggestionRequest(BaseModel):
    profile: Dict[str, Any]
    suggestion: InlineSuggestion


class ApplyBatchRequest(BaseModel):
    profile: Dict[str, Any]
    suggestions: List[InlineSuggestion]


class StoreSuggestionsRequest(BaseModel):
    resume_id: str = Field(min_length=1)
    suggestions: List[InlineSuggestion]


class DecisionRequest(BaseModel):
    resume_id: str = Field(min_length=1)
    action: Literal["approve", "deny", "customize"]
    custom_text: Optional[str] = None


class DecisionResponse(BaseModel):
    outcome: str
    message: str
    suggestion: InlineSuggestion
    profile: Dict[str, Any]


class BatchItemResponse(BaseModel):
    suggestion_id: str
    outcome: str


class BatchResponse(BaseModel):
    profile: Dict[str, Any]
    applied: int
    results: List[BatchItemResponse]


class DiffSegmentModel(BaseModel):
    text: str
    type: Literal["unchanged", "removed", "added"]


class PreviewResponse(BaseModel):
    label: str
    priority: int
    original_segments: List[DiffSegmentModel]
    suggested_segments: List[DiffSegmentModel]
