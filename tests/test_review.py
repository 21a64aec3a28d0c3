import copy
from datetime import datetime, timezone

from resume_studio.models.suggestions import create_inline_suggestion
from resume_studio.services import review

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def _suggestion(original, suggested, start, section="experience", item_id="e1", field="description", **kw):
    params = dict(
        type="wording",
        severity="warning",
        target_section=section,
        target_item_id=item_id,
        target_field=field,
        original_text=original,
        start_offset=start,
        end_offset=start + len(original),
        suggested_text=suggested,
    )
    params.update(kw)
    return create_inline_suggestion(**params)


def test_approve_applies_and_marks_approved(profile):
    before = copy.deepcopy(profile)
    suggestion = _suggestion("Responsible for", "Led", 0)
    result = review.approve_suggestion(profile, suggestion, now=NOW)
    assert result.applied
    assert result.outcome == review.APPLIED
    assert result.profile["experience"][0]["description"] == "Led testing."
    assert result.suggestion.status == "approved"
    assert result.suggestion.applied_at == NOW
    assert suggestion.status == "pending"
    assert profile == before


def test_approve_twice_does_not_double_apply(profile):
    first = review.approve_suggestion(profile, _suggestion("Responsible for", "Led", 0))
    second = review.approve_suggestion(first.profile, first.suggestion)
    assert second.outcome == review.NOT_PENDING
    assert second.profile is first.profile
    assert second.profile["experience"][0]["description"] == "Led testing."


def test_deny_leaves_profile_untouched(profile):
    suggestion = _suggestion("Responsible for", "Led", 0)
    result = review.deny_suggestion(profile, suggestion)
    assert result.outcome == review.DENIED
    assert result.profile is profile
    assert result.suggestion.status == "denied"
    assert not result.applied


def test_denied_suggestion_cannot_be_applied(profile):
    denied = review.deny_suggestion(profile, _suggestion("Responsible for", "Led", 0)).suggestion
    result = review.approve_suggestion(profile, denied)
    assert result.outcome == review.NOT_PENDING
    assert result.profile["experience"][0]["description"] == "Responsible for testing."
    assert review.deny_suggestion(profile, denied).outcome == review.NOT_PENDING


def test_approve_stale_suggestion(profile):
    suggestion = _suggestion("Responsible for", "Led", 0)
    profile["experience"][0]["description"] = "In charge of testing."
    result = review.approve_suggestion(profile, suggestion)
    assert result.outcome == review.STALE
    assert result.message == "Cannot apply suggestion: the text has changed."
    assert result.suggestion.status == "pending"
    assert result.profile["experience"][0]["description"] == "In charge of testing."


def test_approve_unresolvable_target(profile):
    result = review.approve_suggestion(profile, _suggestion("Responsible for", "Led", 0, item_id="gone"))
    assert result.outcome == review.UNRESOLVABLE
    assert result.profile is profile


def test_customize_uses_custom_text(profile):
    suggestion = _suggestion("Responsible for", "Led", 0)
    result = review.customize_suggestion(profile, suggestion, "Owned", now=NOW)
    assert result.applied
    assert result.profile["experience"][0]["description"] == "Owned testing."
    assert result.suggestion.status == "customized"
    assert result.suggestion.suggested_text == "Owned"
    assert result.suggestion.applied_at == NOW


def test_apply_batch_mixed_outcomes(profile):
    before = copy.deepcopy(profile)
    verb = _suggestion("Responsible for", "Led", 0)
    noun = _suggestion("testing", "quality assurance", 16)
    overlapping = _suggestion("for testing", "for QA", 12)
    typo = _suggestion("Responsable", "Responsible", 5, section="summary", item_id=None, field="content",
                       type="typo", severity="error")
    missing = _suggestion("Acme", "Acme Inc", 0, item_id="e9", field="company")
    denied = review.deny_suggestion(profile, _suggestion("Handled", "Managed", 0, item_id="e2")).suggestion

    result = review.apply_batch(profile, [verb, noun, overlapping, typo, missing, denied], now=NOW)
    outcomes = {s.id: outcome for s, outcome in result.outcomes}

    assert outcomes == {
        verb.id: review.APPLIED,
        noun.id: review.APPLIED,
        overlapping.id: review.CONFLICT,
        typo.id: review.APPLIED,
        missing.id: review.UNRESOLVABLE,
        denied.id: review.NOT_PENDING,
    }
    assert result.profile["experience"][0]["description"] == "Led quality assurance."
    assert result.profile["summary"]["content"] == "I am Responsible for sales."
    assert result.profile["experience"][1]["description"] == "Handled inbound leads."
    assert {s.status for s in result.applied} == {"approved"}
    assert profile == before


def test_apply_batch_same_field_rebases_offsets(profile):
    first = _suggestion("Responsible for", "Led", 0)
    second = _suggestion("testing", "release testing", 16)
    result = review.apply_batch(profile, [second, first])
    assert len(result.applied) == 2
    assert result.profile["experience"][0]["description"] == "Led release testing."


def test_apply_batch_default_and_named_field_share_offsets():
    """A default field (None) and its explicit name address one string and are rebased together."""
    profile = {"summary": {"content": "aaaa"}}
    delete = _suggestion("a", "", 0, section="summary", item_id=None, field=None)
    replace = _suggestion("a", "B", 2, section="summary", item_id=None, field="content")
    result = review.apply_batch(profile, [delete, replace])
    assert [outcome for _, outcome in result.outcomes] == [review.APPLIED, review.APPLIED]
    assert result.profile["summary"]["content"] == "aBa"


def test_apply_batch_alias_fields_not_reported_stale():
    profile = {"summary": {"content": "Responsible for teh sales."}}
    verb = _suggestion("Responsible for", "Led", 0, section="summary", item_id=None, field=None)
    typo = _suggestion("teh", "the", 16, section="summary", item_id=None, field="content",
                       type="typo", severity="error")
    result = review.apply_batch(profile, [verb, typo])
    assert {outcome for _, outcome in result.outcomes} == {review.APPLIED}
    assert result.profile["summary"]["content"] == "Led the sales."


def test_apply_batch_list_element_spellings(profile):
    bracket = _suggestion("Worked on", "Developed", 0, field="achievements[1]")
    dotted = _suggestion("onboarding", "client onboarding", 10, field="achievements.1")
    content = _suggestion("testing", "QA", 16, field="content")
    description = _suggestion("Responsible for", "Led", 0, field="description")
    result = review.apply_batch(profile, [bracket, dotted, content, description])
    assert len(result.applied) == 4
    assert result.profile["experience"][0]["achievements"][1] == "Developed client onboarding"
    assert result.profile["experience"][0]["description"] == "Led QA."


def test_apply_batch_skills_keep_commas_inside_skills():
    profile = {"skills": {"Tools": ["Microsoft Office (Word, Excel)", "Salesforse"]}}
    typo = _suggestion("Salesforse", "Salesforce", 32, section="skills", item_id="Tools", field=None,
                       type="typo", severity="error")
    result = review.apply_batch(profile, [typo])
    assert result.profile["skills"]["Tools"] == ["Microsoft Office (Word, Excel)", "Salesforce"]


def test_apply_batch_skills_several_edits():
    profile = {"skills": {"Tools": ["Jira", "Microsoft Office (Word, Excel)", "Salesforse"]}}
    add = _suggestion("Jira", "Jira, Confluence", 0, section="skills", item_id="Tools", field=None)
    office = _suggestion("Word", "Word 365", 24, section="skills", item_id="Tools", field=None)
    typo = _suggestion("Salesforse", "Salesforce", 38, section="skills", item_id="Tools", field=None)
    result = review.apply_batch(profile, [typo, office, add])
    assert len(result.applied) == 3
    assert result.profile["skills"]["Tools"] == [
        "Jira",
        "Confluence",
        "Microsoft Office (Word 365, Excel)",
        "Salesforce",
    ]


def test_apply_batch_item_named_main():
    profile = {"skills": {"main": ["Pyhton", "SQL"]}}
    typo = _suggestion("Pyhton", "Python", 0, section="skills", item_id="main", field=None)
    result = review.apply_batch(profile, [typo])
    assert [outcome for _, outcome in result.outcomes] == [review.APPLIED]
    assert result.profile["skills"]["main"] == ["Python", "SQL"]


def test_apply_batch_stale_member_does_not_abort(profile):
    stale = _suggestion("Reporting", "Reports", 16)
    fresh = _suggestion("Responsible for", "Led", 0)
    result = review.apply_batch(profile, [stale, fresh])
    outcomes = {s.id: outcome for s, outcome in result.outcomes}
    assert outcomes == {stale.id: review.STALE, fresh.id: review.APPLIED}
    assert result.profile["experience"][0]["description"] == "Led testing."
