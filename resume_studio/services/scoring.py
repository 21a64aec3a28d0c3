"""
Deterministic resume score with an ATS focus.

Four categories (ATS compatibility 30, content quality 40, completeness 20,
professional polish 10) computed from the profile alone. Stateless: every call
works only on the profile it is given.
"""
import logging
import re
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from resume_studio.config.rule_tables import INFORMAL_PHRASES, TYPO_CORRECTIONS

logger = logging.getLogger(__name__)

CategoryStatus = Literal["excellent", "good", "needs-work", "critical"]

ACTION_VERBS = [
    "led", "managed", "developed", "created", "improved",
    "increased", "reduced", "achieved", "implemented", "designed",
]

_DIGIT = re.compile(r"\d")


class ActionableTip(BaseModel):
    message: str
    section: Optional[str] = None
    field: Optional[str] = None
    item_id: Optional[str] = None
    original_text: Optional[str] = None
    suggested_text: Optional[str] = None
    can_auto_fix: bool = False


class ScoreCategory(BaseModel):
    label: str
    score: int
    max_score: int
    description: str
    tips: List[str] = Field(default_factory=list)
    actionable_tips: List[ActionableTip] = Field(default_factory=list)
    status: CategoryStatus


class ResumeScore(BaseModel):
    categories: List[ScoreCategory]
    total_score: int
    max_total_score: int
    percentage: int
    ats_compatibility: int
    job_readiness: int
    overall_grade: Literal["A", "B", "C", "D", "F"]
    summary: str


def _status(score: int, excellent: int, good: int, needs_work: int) -> CategoryStatus:
    if score >= excellent:
        return "excellent"
    if score >= good:
        return "good"
    if score >= needs_work:
        return "needs-work"
    return "critical"


def _items(profile: Dict[str, Any], section: str) -> List[Dict[str, Any]]:
    value = profile.get(section)
    return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []


def _item_id(item: Dict[str, Any]) -> Optional[str]:
    return str(item["id"]) if item.get("id") is not None else None


def _strings(values: Any) -> List[str]:
    return [v for v in values if isinstance(v, str)] if isinstance(values, list) else []


def _skills(profile: Dict[str, Any]) -> Dict[str, List[str]]:
    skills = profile.get("skills")
    if not isinstance(skills, dict):
        return {}
    return {category: _strings(values) for category, values in skills.items()}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _contact(profile: Dict[str, Any]) -> Dict[str, Any]:
    contact = profile.get("contact")
    return contact if isinstance(contact, dict) else {}


def _summary_text(profile: Dict[str, Any]) -> str:
    summary = profile.get("summary")
    if isinstance(summary, dict):
        return _text(summary.get("content"))
    return ""


def _experience_text(exp: Dict[str, Any]) -> str:
    return " ".join([_text(exp.get("description"))] + _strings(exp.get("achievements")))


def _score_ats(profile: Dict[str, Any]) -> ScoreCategory:
    score = 0
    tips = []
    contact = _contact(profile)
    experience = _items(profile, "experience")
    skills = _skills(profile)

    has_contact = contact.get("firstName") and contact.get("lastName") and contact.get("email")
    has_education = bool(_items(profile, "education"))
    if has_contact and experience and has_education and skills:
        score += 10
    else:
        if not has_contact:
            tips.append("Complete contact information (name, email, phone)")
        if not experience:
            tips.append("Add work experience section")
        if not has_education:
            tips.append("Add education section")
        if not skills:
            tips.append("Add skills section")

    total_skills = sum(len(values) for values in skills.values())
    if total_skills >= 10:
        score += 10
    elif total_skills >= 5:
        score += 5
        tips.append(f"Add more skills ({total_skills}/10 recommended for ATS)")
    else:
        tips.append("Add at least 10 relevant skills for better ATS matching")

    if any(_DIGIT.search(_experience_text(exp)) for exp in experience):
        score += 10
    else:
        tips.append('Add numbers/metrics to achievements (e.g., "increased sales by 30%")')

    return ScoreCategory(
        label="ATS Compatibility",
        score=score,
        max_score=30,
        description="How likely your resume will pass automated screening systems",
        tips=tips,
        status=_status(score, 25, 20, 10),
    )


def _score_content(profile: Dict[str, Any], today: date) -> ScoreCategory:
    score = 0
    tips = []
    experience = _items(profile, "experience")

    summary_length = len(_summary_text(profile))
    if summary_length >= 150:
        score += 10
    elif summary_length >= 50:
        score += 5
        tips.append("Expand summary to 150+ characters for better impact")
    else:
        tips.append("Add a compelling professional summary (150+ characters)")

    detailed = [exp for exp in experience if _text(exp.get("description")) and len(_strings(exp.get("achievements"))) >= 2]
    if len(detailed) >= 2:
        score += 15
    elif len(detailed) == 1:
        score += 8
        tips.append("Add detailed descriptions and achievements to all experiences")
    else:
        tips.append("Each experience needs description + 2-3 achievements")

    if any(verb in _experience_text(exp).lower() for exp in experience for verb in ACTION_VERBS):
        score += 10
    else:
        tips.append("Use strong action verbs (led, managed, developed, achieved, etc.)")

    def start_year(exp: Dict[str, Any]) -> int:
        match = re.match(r"\s*(\d{4})", str(exp.get("startDate") or ""))
        return int(match.group(1)) if match else 0

    if any(start_year(exp) >= today.year - 3 for exp in experience):
        score += 5
    else:
        tips.append("Include recent experience (within last 3 years)")

    return ScoreCategory(
        label="Content Quality",
        score=score,
        max_score=40,
        description="Depth, relevance, and impact of your experience",
        tips=tips,
        status=_status(score, 35, 25, 15),
    )


def _score_completeness(profile: Dict[str, Any]) -> ScoreCategory:
    score = 0
    tips = []
    contact = _contact(profile)

    filled = sum(1 for key in ("firstName", "lastName", "email", "phone", "location") if contact.get(key))
    if filled >= 5:
        score += 5
    elif filled >= 3:
        score += 3
        tips.append("Complete all contact fields (name, email, phone, location)")
    else:
        tips.append("Add essential contact information")

    education = _items(profile, "education")
    complete = [e for e in education if e.get("institution") and e.get("degree") and e.get("fieldOfStudy")]
    if complete:
        score += 5
    elif education:
        score += 2
        tips.append("Complete education details (institution, degree, field of study)")
    else:
        tips.append("Add education information")

    categories = len(_skills(profile))
    if categories >= 2:
        score += 5
    elif categories == 1:
        score += 2
        tips.append("Organize skills into categories (Technical, Soft Skills, etc.)")
    else:
        tips.append("Add and categorize your skills")

    if contact.get("linkedin") or contact.get("github") or contact.get("website"):
        score += 5
    else:
        tips.append("Add LinkedIn, GitHub, or portfolio link")

    return ScoreCategory(
        label="Completeness",
        score=score,
        max_score=20,
        description="All essential resume sections are filled out",
        tips=tips,
        status=_status(score, 18, 14, 8),
    )


def _capitalization_tip(section: str, field: str, value: Any, label: str,
                        item_id: Optional[str] = None) -> Optional[ActionableTip]:
    if not isinstance(value, str) or not value or value[0] == value[0].upper():
        return None
    capitalized = value[0].upper() + value[1:]
    return ActionableTip(
        message=f'Capitalize {label}: "{value}" -> "{capitalized}"',
        section=section,
        field=field,
        item_id=item_id,
        original_text=value,
        suggested_text=capitalized,
        can_auto_fix=True,
    )


def _score_polish(profile: Dict[str, Any]) -> ScoreCategory:
    score = 10
    tips: List[str] = []
    actionable: List[ActionableTip] = []
    experience = _items(profile, "experience")
    projects = _items(profile, "projects")
    contact = _contact(profile)

    if experience and not all(exp.get("startDate") for exp in experience):
        score -= 2
        tips.append("Add dates to all experiences")

    if any(_strings(exp.get("achievements")) == [""] for exp in experience):
        score -= 2
        tips.append("Remove or fill empty achievement bullets")

    summary = _summary_text(profile).lower()
    for typo, correction in TYPO_CORRECTIONS.items():
        pattern = re.compile(r"\b" + re.escape(typo) + r"\b")
        message = f'Fix spelling: "{typo}" -> "{correction}"'
        if pattern.search(summary):
            score -= 1
            tips.append(message)
            actionable.append(ActionableTip(
                message=message, section="summary", field="content",
                original_text=typo, suggested_text=correction, can_auto_fix=True,
            ))
        for section, items, name_key in (("experience", experience, "company"), ("projects", projects, "name")):
            for item in items:
                if pattern.search(_experience_text(item).lower()):
                    score -= 1
                    tips.append(f'Fix spelling in {item.get(name_key) or section}: "{typo}" -> "{correction}"')
                    actionable.append(ActionableTip(
                        message=message, section=section, field="description", item_id=_item_id(item),
                        original_text=typo, suggested_text=correction, can_auto_fix=True,
                    ))

    all_text = " ".join(
        [summary]
        + [_experience_text(exp).lower() for exp in experience]
        + [_experience_text(proj).lower() for proj in projects]
    )
    informal = [
        f'"{word}" -> {formal}'
        for word, formal in INFORMAL_PHRASES.items()
        if re.search(r"\b" + re.escape(word) + r"\b", all_text)
    ]
    if informal:
        score -= 2
        tips.extend(f"Replace informal language: {issue}" for issue in informal)

    cap_tips = [
        _capitalization_tip("contact", "firstName", contact.get("firstName"), "first name"),
        _capitalization_tip("contact", "lastName", contact.get("lastName"), "last name"),
    ]
    for exp in experience:
        cap_tips.append(_capitalization_tip("experience", "position", exp.get("position"), "job title", _item_id(exp)))
        cap_tips.append(_capitalization_tip("experience", "company", exp.get("company"), "company", _item_id(exp)))
    cap_tips = [tip for tip in cap_tips if tip]
    if cap_tips:
        score -= 2
        tips.extend(tip.message for tip in cap_tips)
        actionable.extend(cap_tips)

    score = max(0, score)
    return ScoreCategory(
        label="Professional Polish",
        score=score,
        max_score=10,
        description="Formatting, consistency, and presentation quality",
        tips=tips,
        actionable_tips=actionable,
        status=_status(score, 9, 7, 4),
    )


def _grade(percentage: int) -> str:
    for threshold, grade in ((90, "A"), (80, "B"), (70, "C"), (60, "D")):
        if percentage >= threshold:
            return grade
    return "F"


def _summary_line(percentage: int) -> str:
    if percentage >= 85:
        return "Excellent! Your resume is highly competitive and ATS-optimized."
    if percentage >= 70:
        return "Good foundation. A few improvements will make your resume stand out."
    if percentage >= 50:
        return "Needs work. Focus on the critical areas below to improve your chances."
    return "Critical improvements needed. Your resume may not pass ATS screening."


def calculate_resume_score(profile: Dict[str, Any], today: Optional[date] = None) -> ResumeScore:
    today = today or date.today()
    ats = _score_ats(profile)
    content = _score_content(profile, today)
    completeness = _score_completeness(profile)
    polish = _score_polish(profile)
    categories = [ats, content, completeness, polish]

    total = sum(c.score for c in categories)
    max_total = sum(c.max_score for c in categories)
    percentage = round(total / max_total * 100)
    job_readiness = round(
        (content.score / content.max_score * 0.6 + completeness.score / completeness.max_score * 0.4) * 100
    )
    logger.debug("Resume score %d%% (%d/%d)", percentage, total, max_total)

    return ResumeScore(
        categories=categories,
        total_score=total,
        max_total_score=max_total,
        percentage=percentage,
        ats_compatibility=round(ats.score / ats.max_score * 100),
        job_readiness=job_readiness,
        overall_grade=_grade(percentage),
        summary=_summary_line(percentage),
    )
