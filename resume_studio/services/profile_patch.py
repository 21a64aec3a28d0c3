"""
Resolve a suggestion's (section, item id, field) target inside a resume
profile and write patched text back into a copy of that profile.

Profiles are plain JSON-like dicts owned by the caller. Nothing here mutates
the dict it is given: every write goes to a deep copy that is returned.
"""
import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from resume_studio.models.suggestions import InlineSuggestion, ScanContext
from resume_studio.services.patching import apply_suggestion

logger = logging.getLogger(__name__)

Path = Tuple[Any, ...]

# "description", "achievements[2]" or "achievements.2"
FIELD_PATTERN = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)(?:\[(\d+)\]|\.(\d+))?$")

SKILL_SEPARATOR = ", "

# Commas typed into a skills category start a new skill.
SKILL_BREAK = re.compile(r",\s*")


@dataclass(frozen=True)
class SectionSchema:
    """How one resume section is laid out and which of its strings are editable."""
    kind: str  # "text", "items" or "categories"
    default_field: Optional[str] = None
    text_fields: Tuple[str, ...] = ()
    list_fields: Tuple[str, ...] = ()
    aliases: Dict[str, str] = field(default_factory=dict)


SECTION_SCHEMAS: Dict[str, SectionSchema] = {
    "summary": SectionSchema(
        kind="text",
        default_field="content",
        text_fields=("content",),
    ),
    "experience": SectionSchema(
        kind="items",
        default_field="description",
        text_fields=("position", "company", "location", "description"),
        list_fields=("achievements",),
        aliases={"content": "description"},
    ),
    "education": SectionSchema(
        kind="items",
        default_field="degree",
        text_fields=("institution", "degree", "fieldOfStudy", "location", "gpa"),
        list_fields=("honors", "coursework", "activities"),
    ),
    "skills": SectionSchema(kind="categories"),
    "projects": SectionSchema(
        kind="items",
        default_field="description",
        text_fields=("name", "description", "role"),
        list_fields=("achievements",),
        aliases={"content": "description"},
    ),
    "certifications": SectionSchema(
        kind="items",
        default_field="name",
        text_fields=("name", "issuer", "credentialId"),
    ),
    "volunteer": SectionSchema(
        kind="items",
        default_field="description",
        text_fields=("organization", "role", "location", "description"),
        list_fields=("achievements",),
        aliases={"content": "description"},
    ),
    "awards": SectionSchema(
        kind="items",
        default_field="description",
        text_fields=("title", "issuer", "description"),
    ),
    "publications": SectionSchema(
        kind="items",
        default_field="description",
        text_fields=("title", "publisher", "description"),
        list_fields=("authors",),
    ),
}


@dataclass(frozen=True)
class FieldTarget:
    """A resolved location: the key path from the profile root and its current text."""
    path: Path
    text: str
    is_skill_list: bool = False
    # (start, end) of each separator between skills in ``text``
    separators: Tuple[Tuple[int, int], ...] = ()


def _parse_field(schema: SectionSchema, field_name: Optional[str]) -> Optional[Tuple[str, Optional[int]]]:
    name = field_name or schema.default_field
    if not name:
        return None
    match = FIELD_PATTERN.match(name.strip())
    if not match:
        return None
    base = schema.aliases.get(match.group(1), match.group(1))
    index = match.group(2) or match.group(3)
    if index is None:
        return (base, None) if base in schema.text_fields else None
    return (base, int(index)) if base in schema.list_fields else None


def _resolve_text_section(profile: Dict[str, Any], section: str, schema: SectionSchema,
                          field_name: Optional[str]) -> Optional[FieldTarget]:
    parsed = _parse_field(schema, field_name)
    container = profile.get(section)
    if parsed is None or parsed[1] is not None or not isinstance(container, dict):
        return None
    value = container.get(parsed[0])
    if not isinstance(value, str):
        return None
    return FieldTarget(path=(section, parsed[0]), text=value)


def _resolve_item(profile: Dict[str, Any], section: str, schema: SectionSchema,
                  item_id: Optional[str], field_name: Optional[str]) -> Optional[FieldTarget]:
    items = profile.get(section)
    parsed = _parse_field(schema, field_name)
    if not item_id or parsed is None or not isinstance(items, list):
        return None
    position = next(
        (
            i
            for i, item in enumerate(items)
            if isinstance(item, dict) and item.get("id") is not None and str(item["id"]) == item_id
        ),
        None,
    )
    if position is None:
        return None

    name, index = parsed
    value = items[position].get(name)
    if index is None:
        if not isinstance(value, str):
            return None
        return FieldTarget(path=(section, position, name), text=value)

    if not isinstance(value, list) or index >= len(value) or not isinstance(value[index], str):
        return None
    return FieldTarget(path=(section, position, name, index), text=value[index])


def _resolve_category(profile: Dict[str, Any], category: Optional[str]) -> Optional[FieldTarget]:
    skills = profile.get("skills")
    if not category or not isinstance(skills, dict):
        return None
    value = skills.get(category)
    if isinstance(value, str):
        return FieldTarget(path=("skills", category), text=value)
    if isinstance(value, list) and all(isinstance(s, str) for s in value):
        separators = []
        position = 0
        for skill in value[:-1]:
            position += len(skill)
            separators.append((position, position + len(SKILL_SEPARATOR)))
            position += len(SKILL_SEPARATOR)
        return FieldTarget(
            path=("skills", category),
            text=SKILL_SEPARATOR.join(value),
            is_skill_list=True,
            separators=tuple(separators),
        )
    return None


def resolve_target(
    profile: Dict[str, Any],
    section: str,
    item_id: Optional[str] = None,
    field_name: Optional[str] = None,
) -> Optional[FieldTarget]:
    """Locate the string a target triple addresses, or None if it does not exist."""
    schema = SECTION_SCHEMAS.get(section)
    if schema is None or not isinstance(profile, dict):
        return None
    if schema.kind == "text":
        return _resolve_text_section(profile, section, schema, field_name)
    if schema.kind == "categories":
        return _resolve_category(profile, item_id)
    return _resolve_item(profile, section, schema, item_id, field_name)


def resolve_suggestion_target(profile: Dict[str, Any], suggestion: InlineSuggestion) -> Optional[FieldTarget]:
    return resolve_target(
        profile,
        suggestion.target_section,
        suggestion.target_item_id,
        suggestion.target_field,
    )


def get_target_text(profile: Dict[str, Any], suggestion: InlineSuggestion) -> Optional[str]:
    target = resolve_suggestion_target(profile, suggestion)
    return target.text if target else None


def _split_skills(
    target: FieldTarget,
    new_text: str,
    edits: Optional[Sequence[InlineSuggestion]],
) -> List[str]:
    """
    Split patched category text back into skills.

    Separators are carried through ``edits`` (applied in order, offsets in the
    text as it was when each was applied), so a comma inside an existing skill
    never splits it. Without edits every comma is a break.
    """
    if edits is None:
        breaks = [(m.start(), m.end()) for m in SKILL_BREAK.finditer(new_text)]
    else:
        breaks = list(target.separators)
        for edit in edits:
            start, end = edit.start_offset, edit.end_offset
            delta = len(edit.suggested_text) - (end - start)
            moved = []
            for b_start, b_end in breaks:
                if b_end <= start:
                    moved.append((b_start, b_end))
                elif b_start >= end:
                    moved.append((b_start + delta, b_end + delta))
            moved.extend((start + m.start(), start + m.end()) for m in SKILL_BREAK.finditer(edit.suggested_text))
            breaks = sorted(moved)

    skills, position = [], 0
    for b_start, b_end in breaks:
        skills.append(new_text[position:b_start])
        position = b_end
    skills.append(new_text[position:])
    return [skill.strip() for skill in skills if skill.strip()]


def _write(
    profile: Dict[str, Any],
    target: FieldTarget,
    new_text: str,
    edits: Optional[Sequence[InlineSuggestion]] = None,
) -> None:
    node: Any = profile
    for key in target.path[:-1]:
        node = node[key]
    node[target.path[-1]] = _split_skills(target, new_text, edits) if target.is_skill_list else new_text


def apply_text_to_profile(
    profile: Dict[str, Any],
    target: FieldTarget,
    new_text: str,
    edits: Optional[Sequence[InlineSuggestion]] = None,
) -> Dict[str, Any]:
    """
    Return a deep copy of ``profile`` with ``new_text`` written at ``target``.
    Pass the applied ``edits`` when writing a skills category so untouched
    skills keep their boundaries.
    """
    new_profile = copy.deepcopy(profile)
    _write(new_profile, target, new_text, edits)
    return new_profile


def apply_suggestion_to_profile(profile: Dict[str, Any], suggestion: InlineSuggestion) -> Dict[str, Any]:
    """
    Apply a suggestion to the field it targets and return a new profile.

    The input profile is never modified. When the target cannot be resolved
    the returned copy is identical in content to the input. Offsets are not
    validated here; see services.review for the gated entry points.
    """
    new_profile = copy.deepcopy(profile)
    target = resolve_suggestion_target(new_profile, suggestion)
    if target is None:
        logger.info(
            "Suggestion %s target not found: section=%s item=%s field=%s",
            suggestion.id,
            suggestion.target_section,
            suggestion.target_item_id,
            suggestion.target_field,
        )
        return new_profile
    _write(new_profile, target, apply_suggestion(target.text, suggestion), [suggestion])
    return new_profile


def iter_text_targets(profile: Dict[str, Any]) -> Iterator[Tuple[ScanContext, str]]:
    """Yield every non-empty editable string in the profile with its target triple."""
    if not isinstance(profile, dict):
        return
    for section, schema in SECTION_SCHEMAS.items():
        container = profile.get(section)
        if schema.kind == "text":
            for name in schema.text_fields:
                target = resolve_target(profile, section, None, name)
                if target and target.text.strip():
                    yield ScanContext(section=section, field=name), target.text
        elif schema.kind == "categories":
            if isinstance(container, dict):
                for category in container:
                    target = resolve_target(profile, section, category)
                    if target and target.text.strip():
                        yield ScanContext(section=section, item_id=category), target.text
        elif isinstance(container, list):
            for item in container:
                if not isinstance(item, dict) or not item.get("id"):
                    continue
                item_id = str(item["id"])
                for name in schema.text_fields:
                    value = item.get(name)
                    if isinstance(value, str) and value.strip():
                        yield ScanContext(section=section, item_id=item_id, field=name), value
                for name in schema.list_fields:
                    values = item.get(name)
                    if not isinstance(values, list):
                        continue
                    for index, value in enumerate(values):
                        if isinstance(value, str) and value.strip():
                            yield ScanContext(section=section, item_id=item_id, field=f"{name}[{index}]"), value
