import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from openai import OpenAI
from pydantic import ValidationError

from resume_studio.config.settings import Settings
from resume_studio.models.suggestions import InlineSuggestion, ScanContext, create_inline_suggestion
from resume_studio.services.rules import scan

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a resume writing expert. Analyze text and return JSON inline suggestions."


@dataclass(frozen=True)
class AICompletion:
    """Outcome of one completion call: content on success, error text otherwise."""
    content: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.content is not None


@dataclass
class SuggestionParse:
    items: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


CompletionFn = Callable[[str], AICompletion]


def build_client(settings: Settings) -> Optional[OpenAI]:
    if not settings.openai_api_key:
        return None
    return OpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout_s)


def get_completion(prompt: str, settings: Settings, client: Optional[OpenAI] = None, **kwargs) -> AICompletion:
    client = client or build_client(settings)
    if not client:
        return AICompletion(error="OPENAI_API_KEY not configured")
    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=settings.openai_temperature,
            **kwargs
        )
        content = response.choices[0].message.content
    except Exception as exc:  # noqa: BLE001
        logger.warning("OpenAI completion failed: %s", exc)
        return AICompletion(error=str(exc))
    return AICompletion(content=(content or "").strip())


def build_suggestion_prompt(text: str, context: ScanContext, profile: Optional[Dict[str, Any]] = None) -> str:
    target_job = (profile or {}).get("targetJob") or "General resume"
    return f"""
    # Task
    Analyze this resume text and suggest improvements.

    # Find and suggest improvements for
    1. Typos and spelling errors
    2. Grammar mistakes
    3. Weak verbs -> strong action verbs (e.g., "Responsible for" -> "Led", "Managed")
    4. Passive voice -> active voice
    5. Vague statements -> specific metrics (add numbers, %, $)
    6. Wordiness -> concise phrasing

    # Constraints
    - Return ONLY valid JSON. No markdown, no explanation.
    - original_text must EXACTLY match a substring of the text.
    - start_offset/end_offset are the 0-indexed, end-exclusive character positions of original_text in the text.

    # Output Format
    {{
      "suggestions": [
        {{
          "type": "typo" | "grammar" | "wording" | "tone" | "formatting" | "metric",
          "severity": "error" | "warning" | "suggestion",
          "original_text": "exact text to replace",
          "suggested_text": "replacement text",
          "reason": "why this is better",
          "impact": "what this improves (optional)",
          "start_offset": 0,
          "end_offset": 0
        }}
      ]
    }}

    # Input Data
    Section: {context.section}
    Field: {context.field or "unknown"}
    Context: {target_job}
    <text>
    {text}
    </text>
    """


def parse_suggestion_payload(content: Optional[str]) -> SuggestionParse:
    """Pull the raw suggestion objects out of a completion; never raises."""
    if not content:
        return SuggestionParse(error="empty response")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        return SuggestionParse(error=f"invalid JSON: {exc}")
    if isinstance(data, dict):
        data = data.get("suggestions")
    if not isinstance(data, list):
        return SuggestionParse(error="expected a list of suggestions")
    return SuggestionParse(items=[item for item in data if isinstance(item, dict)])


def _anchor_offsets(text: str, item: Dict[str, Any]) -> Dict[str, Any]:
    """Point offsets at the first occurrence of original_text when the model's offsets miss it."""
    original = item.get("original_text")
    start, end = item.get("start_offset"), item.get("end_offset")
    if not isinstance(original, str):
        return item
    if isinstance(start, int) and isinstance(end, int) and text[start:end] == original and 0 <= start <= end:
        return item
    position = text.find(original)
    if position == -1:
        return item
    return {**item, "start_offset": position, "end_offset": position + len(original)}


def suggestions_from_payload(text: str, context: ScanContext, items: List[Dict[str, Any]]) -> List[InlineSuggestion]:
    suggestions = []
    for item in items:
        item = _anchor_offsets(text, item)
        try:
            suggestions.append(
                create_inline_suggestion(
                    type=item.get("type"),
                    severity=item.get("severity"),
                    target_section=context.section,
                    target_item_id=context.item_id,
                    target_field=context.field,
                    original_text=item.get("original_text"),
                    start_offset=item.get("start_offset"),
                    end_offset=item.get("end_offset"),
                    suggested_text=item.get("suggested_text"),
                    reason=item.get("reason") or "",
                    impact=item.get("impact"),
                    source="chat",
                )
            )
        except ValidationError as exc:
            logger.warning("Dropping malformed AI suggestion: %s", exc.errors()[:1])
    return suggestions


def _default_completion(settings: Settings) -> CompletionFn:
    return lambda prompt: get_completion(prompt, settings, response_format={"type": "json_object"})


def suggestions_from_completion(text: str, context: ScanContext, result: AICompletion) -> List[InlineSuggestion]:
    if not result.ok:
        return []
    parsed = parse_suggestion_payload(result.content)
    if parsed.error:
        logger.warning("Failed to parse AI suggestions (%s): %.200s", parsed.error, result.content)
        return []
    return suggestions_from_payload(text, context, parsed.items)


def generate_ai_suggestions(
    text: str,
    context: ScanContext,
    profile: Optional[Dict[str, Any]] = None,
    *,
    settings: Settings,
    completion: Optional[CompletionFn] = None,
) -> List[InlineSuggestion]:
    """
    Ask the language model for suggestions on one field.
    A failed call or an unparseable answer yields an empty list.
    """
    completion = completion or _default_completion(settings)
    result = completion(build_suggestion_prompt(text, context, profile))
    return suggestions_from_completion(text, context, result)


def suggest_for_text(
    text: str,
    context: ScanContext,
    profile: Optional[Dict[str, Any]] = None,
    *,
    settings: Settings,
    use_ai: bool = True,
    completion: Optional[CompletionFn] = None,
) -> List[InlineSuggestion]:
    """
    AI suggestions when available, heuristic scan otherwise.
    The scan also covers a completion call that fails outright; a call that
    succeeds with an unusable answer returns no suggestions.
    """
    if not use_ai or (completion is None and not settings.ai_available):
        return scan(text, context)

    completion = completion or _default_completion(settings)
    result = completion(build_suggestion_prompt(text, context, profile))
    if not result.ok:
        logger.info("AI suggestions unavailable (%s); falling back to heuristic scan", result.error)
        return scan(text, context)
    return suggestions_from_completion(text, context, result)
