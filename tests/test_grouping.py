from resume_studio.models.suggestions import create_inline_suggestion
from resume_studio.services.grouping import (
    get_suggestion_priority,
    get_suggestion_type_label,
    group_suggestions,
    sort_suggestions_by_priority,
)


def _suggestion(type="wording", severity="warning", section="summary", item_id=None, field="content",
                start=0, original="x"):
    return create_inline_suggestion(
        type=type,
        severity=severity,
        target_section=section,
        target_item_id=item_id,
        target_field=field,
        original_text=original,
        start_offset=start,
        end_offset=start + len(original),
        suggested_text="y",
    )


def test_priority_weights():
    assert get_suggestion_priority(_suggestion(type="typo", severity="error")) == 120
    assert get_suggestion_priority(_suggestion(type="grammar", severity="error")) == 115
    assert get_suggestion_priority(_suggestion(type="metric", severity="warning")) == 60
    assert get_suggestion_priority(_suggestion(type="wording", severity="warning")) == 50
    assert get_suggestion_priority(_suggestion(type="tone", severity="suggestion")) == 10


def test_sort_by_priority_is_stable_and_descending():
    tone = _suggestion(type="tone", severity="suggestion")
    wording_a = _suggestion(type="wording", severity="warning")
    typo = _suggestion(type="typo", severity="error")
    wording_b = _suggestion(type="wording", severity="warning")
    items = [tone, wording_a, typo, wording_b]
    ordered = sort_suggestions_by_priority(items)
    assert [s.id for s in ordered] == [typo.id, wording_a.id, wording_b.id, tone.id]
    assert [s.id for s in items] == [tone.id, wording_a.id, typo.id, wording_b.id]


def test_group_suggestions_by_target():
    summary_late = _suggestion(start=10)
    e1_desc = _suggestion(section="experience", item_id="e1", field="description", start=4)
    summary_early = _suggestion(start=2)
    e1_title = _suggestion(section="experience", item_id="e1", field="position")
    e1_desc_early = _suggestion(section="experience", item_id="e1", field="description", start=0)

    groups = group_suggestions([summary_late, e1_desc, summary_early, e1_title, e1_desc_early])
    assert [(g.section, g.item_id, g.field) for g in groups] == [
        ("summary", None, "content"),
        ("experience", "e1", "description"),
        ("experience", "e1", "position"),
    ]
    assert [s.id for s in groups[0].suggestions] == [summary_early.id, summary_late.id]
    assert [s.id for s in groups[1].suggestions] == [e1_desc_early.id, e1_desc.id]


def test_group_suggestions_empty():
    assert group_suggestions([]) == []


def test_type_labels():
    assert get_suggestion_type_label(_suggestion(type="typo")) == "Typo"
    assert get_suggestion_type_label(_suggestion(type="metric")) == "Add Metric"
    assert get_suggestion_type_label(_suggestion(type="wording")) == "Wording"
    assert get_suggestion_type_label(_suggestion(type="wording", original="")) == "Add Keywords"
    assert get_suggestion_type_label(_suggestion(type="formatting")) == "Formatting"


def test_group_item_named_main_is_not_a_section_group():
    section_level = _suggestion(section="skills", item_id=None, field=None)
    category_main = _suggestion(section="skills", item_id="main", field=None)
    groups = group_suggestions([section_level, category_main])
    assert len(groups) == 2
    assert {g.item_id: [s.id for s in g.suggestions] for g in groups} == {
        None: [section_level.id],
        "main": [category_main.id],
    }
