import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from resume_studio.config.settings import Settings
from resume_studio.models.suggestions import (
    ApplyBatchRequest,
    ApplySuggestionRequest,
    BatchItemResponse,
    BatchResponse,
    DecisionRequest,
    DecisionResponse,
    DiffSegmentModel,
    GenerateSuggestionsRequest,
    GroupedSuggestionResponse,
    InlineSuggestion,
    PreviewResponse,
    ScanContext,
    StoreSuggestionsRequest,
    SuggestionListRequest,
    SuggestionResponse,
)
from resume_studio.services import ai_service, review
from resume_studio.services.grouping import (
    get_suggestion_priority,
    get_suggestion_type_label,
    group_suggestions,
    sort_suggestions_by_priority,
)
from resume_studio.services.rules import scan_profile
from resume_studio.services.scoring import ResumeScore, calculate_resume_score
from resume_studio.services.stores import (
    PersistenceError,
    ProfileNotFoundError,
    ProfileStore,
    SuggestionStore,
)
from resume_studio.utils.text_diff import get_word_diff

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["suggestions"]
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_suggestion_store(request: Request) -> SuggestionStore:
    return request.app.state.suggestion_store


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profile_store


def _decision_response(result: review.DecisionResult) -> DecisionResponse:
    return DecisionResponse(
        outcome=result.outcome,
        message=result.message,
        suggestion=result.suggestion,
        profile=result.profile,
    )


@router.post("/suggestions/inline", response_model=SuggestionResponse)
def generate_inline_suggestions(
    payload: GenerateSuggestionsRequest,
    settings: Settings = Depends(get_settings),
):
    if not payload.text and not payload.profile:
        raise HTTPException(status_code=400, detail="Text or profile required")

    if not payload.text:
        return {"suggestions": scan_profile(payload.profile)}

    context = ScanContext(section=payload.section, item_id=payload.item_id, field=payload.field)
    suggestions = ai_service.suggest_for_text(
        payload.text,
        context,
        payload.profile,
        settings=settings,
        use_ai=payload.use_ai,
    )
    return {"suggestions": suggestions}


@router.post("/suggestions/group", response_model=GroupedSuggestionResponse)
async def group(payload: SuggestionListRequest):
    return {"groups": group_suggestions(payload.suggestions)}


@router.post("/suggestions/prioritize", response_model=SuggestionResponse)
async def prioritize(payload: SuggestionListRequest):
    return {"suggestions": sort_suggestions_by_priority(payload.suggestions)}


@router.post("/suggestions/preview", response_model=PreviewResponse)
async def preview(suggestion: InlineSuggestion):
    original_segments, suggested_segments = get_word_diff(suggestion.original_text, suggestion.suggested_text)
    return PreviewResponse(
        label=get_suggestion_type_label(suggestion),
        priority=get_suggestion_priority(suggestion),
        original_segments=[DiffSegmentModel(text=s.text, type=s.type) for s in original_segments],
        suggested_segments=[DiffSegmentModel(text=s.text, type=s.type) for s in suggested_segments],
    )


@router.post("/suggestions/apply", response_model=DecisionResponse)
async def apply_one(payload: ApplySuggestionRequest):
    return _decision_response(review.approve_suggestion(payload.profile, payload.suggestion))


@router.post("/suggestions/apply-batch", response_model=BatchResponse)
async def apply_many(payload: ApplyBatchRequest):
    result = review.apply_batch(payload.profile, payload.suggestions)
    return BatchResponse(
        profile=result.profile,
        applied=len(result.applied),
        results=[BatchItemResponse(suggestion_id=s.id, outcome=outcome) for s, outcome in result.outcomes],
    )


@router.get("/suggestions", response_model=SuggestionResponse)
async def list_suggestions(
    resume_id: str = Query(..., min_length=1),
    store: SuggestionStore = Depends(get_suggestion_store),
):
    return {"suggestions": store.list(resume_id)}


@router.post("/suggestions")
async def save_suggestions(
    payload: StoreSuggestionsRequest,
    store: SuggestionStore = Depends(get_suggestion_store),
):
    count = store.save(payload.resume_id, payload.suggestions)
    return {"success": True, "count": count}


@router.delete("/suggestions")
async def clear_suggestions(
    resume_id: str = Query(..., min_length=1),
    store: SuggestionStore = Depends(get_suggestion_store),
):
    store.clear(resume_id)
    return {"success": True}


@router.delete("/suggestions/{suggestion_id}")
async def delete_suggestion(
    suggestion_id: str,
    store: SuggestionStore = Depends(get_suggestion_store),
):
    if not store.delete(suggestion_id):
        raise HTTPException(status_code=404, detail="Suggestion not found")
    return {"success": True}


@router.post("/suggestions/{suggestion_id}/decision", response_model=DecisionResponse)
async def decide(
    suggestion_id: str,
    payload: DecisionRequest,
    suggestions: SuggestionStore = Depends(get_suggestion_store),
    profiles: ProfileStore = Depends(get_profile_store),
):
    suggestion = suggestions.get(suggestion_id)
    if suggestion is None or suggestions.owner_of(suggestion_id) != payload.resume_id:
        raise HTTPException(status_code=404, detail="Suggestion not found")
    try:
        profile = profiles.load(payload.resume_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")

    if payload.action == "approve":
        result = review.approve_suggestion(profile, suggestion)
    elif payload.action == "deny":
        result = review.deny_suggestion(profile, suggestion)
    else:
        if payload.custom_text is None:
            raise HTTPException(status_code=400, detail="custom_text is required to customize a suggestion")
        result = review.customize_suggestion(profile, suggestion, payload.custom_text)

    if result.applied:
        try:
            profiles.save(payload.resume_id, result.profile)
        except PersistenceError as exc:
            logger.error("Saving resume %s failed: %s", payload.resume_id, exc)
            raise HTTPException(status_code=502, detail="Could not save resume. Please try again.")
    if result.suggestion is not suggestion:
        suggestions.update(result.suggestion)
    return _decision_response(result)


@router.put("/resumes/{resume_id}/profile")
async def put_profile(
    resume_id: str,
    profile: Dict[str, Any],
    profiles: ProfileStore = Depends(get_profile_store),
):
    try:
        profiles.save(resume_id, profile)
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return {"success": True}


@router.get("/resumes/{resume_id}/profile")
async def get_profile(
    resume_id: str,
    profiles: ProfileStore = Depends(get_profile_store),
):
    try:
        return {"profile": profiles.load(resume_id)}
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")


@router.post("/score", response_model=ResumeScore)
async def score(profile: Dict[str, Any]):
    return calculate_resume_score(profile)
