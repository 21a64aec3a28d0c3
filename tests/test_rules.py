from resume_studio.config.rule_tables import METRIC_PLACEHOLDER
from resume_studio.models.suggestions import ScanContext
from resume_studio.services.rules import (
    find_date_capitalization,
    find_grammar_issues,
    find_informal_tone,
    find_missing_metrics,
    find_passive_voice,
    find_typos,
    find_weak_verbs,
    find_wordiness,
    scan,
    scan_profile,
)

SUMMARY = ScanContext(section="summary", field="content")
DESCRIPTION = ScanContext(section="experience", item_id="e1", field="description")


def _stable(suggestions):
    return [s.model_dump(exclude={"id", "created_at"}) for s in suggestions]


def test_scan_finds_capitalised_typo():
    text = "I am Responsable for sales."
    suggestions = scan(text, SUMMARY)
    assert len(suggestions) == 1
    typo = suggestions[0]
    assert typo.type == "typo"
    assert typo.severity == "error"
    assert typo.original_text == "Responsable"
    assert typo.suggested_text == "Responsible"
    assert (typo.start_offset, typo.end_offset) == (5, 16)
    assert typo.source == "scan"
    assert typo.target_section == "summary"
    assert typo.target_field == "content"


def test_scan_description_without_numbers_gets_metric():
    text = "Managed the regional sales team and improved customer relationships across the territory."
    suggestions = scan(text, DESCRIPTION)
    assert [s.type for s in suggestions] == ["metric"]
    metric = suggestions[0]
    snippet = text[: text.find(".")]
    assert metric.original_text == snippet
    assert metric.suggested_text == snippet + METRIC_PLACEHOLDER
    assert metric.start_offset == 0
    assert metric.severity == "warning"
    assert metric.target_item_id == "e1"


def test_metric_skipped_for_other_fields_and_numbers():
    text = "Managed the regional sales team and improved customer relationships across the territory."
    assert find_missing_metrics(text, SUMMARY) == []
    assert find_missing_metrics("Grew revenue by 30% while managing the regional sales team across the West.", DESCRIPTION) == []
    assert find_missing_metrics("Managed the sales team.", DESCRIPTION) == []


def test_metric_snippet_capped():
    text = "word " * 40
    metric = find_missing_metrics(text, DESCRIPTION)[0]
    assert metric.end_offset == 100
    assert metric.original_text == text[:100]


def test_scan_is_deterministic():
    text = "Responsible for teh rollout of stuff in order to help 3 client, i think."
    assert _stable(scan(text, DESCRIPTION)) == _stable(scan(text, DESCRIPTION))


def test_scan_empty_text():
    assert scan("", SUMMARY) == []


def test_offsets_address_original_text():
    text = "Responsible for teh rollout of stuff in order to help 3 client, i think."
    for suggestion in scan(text, DESCRIPTION):
        assert text[suggestion.start_offset:suggestion.end_offset] == suggestion.original_text


def test_find_typos_lowercase():
    typos = find_typos("Fixed teh build", SUMMARY)
    assert [(t.original_text, t.suggested_text, t.start_offset) for t in typos] == [("teh", "the", 6)]


def test_find_typos_whole_word_only():
    assert find_typos("Tehran office", SUMMARY) == []


def test_find_weak_verbs():
    verbs = find_weak_verbs("Responsible for testing.", DESCRIPTION)
    assert len(verbs) == 1
    assert verbs[0].suggested_text == "Led"
    assert (verbs[0].start_offset, verbs[0].end_offset) == (0, 15)
    assert verbs[0].type == "wording"
    assert verbs[0].severity == "warning"


def test_find_grammar_plural():
    issues = find_grammar_issues("Managed 5 engineer on the platform", SUMMARY)
    assert [(i.original_text, i.suggested_text) for i in issues] == [("5 engineer", "5 engineers")]


def test_find_grammar_irregular_plural():
    issues = find_grammar_issues("Hired 12 person in one quarter", SUMMARY)
    assert [(i.original_text, i.suggested_text) for i in issues] == [("12 person", "12 people")]


def test_find_grammar_plural_at_end_of_sentence():
    issues = find_grammar_issues("Expanded sales into 3 country.", SUMMARY)
    assert [i.suggested_text for i in issues] == ["3 countries"]


def test_find_grammar_skips_attributive_nouns():
    """A counted noun that modifies the next word is already correct."""
    for text in (
        "Led a 5 person team.",
        "Managed 10 team members.",
        "Shipped a 3 month project.",
        "Ran a 2 week sprint cadence",
    ):
        assert find_grammar_issues(text, SUMMARY) == [], text


def test_find_grammar_repeated_word():
    issues = find_grammar_issues("Shipped the the release", SUMMARY)
    assert [(i.original_text, i.suggested_text) for i in issues] == [("the the", "the")]


def test_find_grammar_lowercase_pronoun():
    issues = find_grammar_issues("Since 2019 i have led sales", SUMMARY)
    assert [(i.original_text, i.suggested_text, i.start_offset) for i in issues] == [("i", "I", 11)]


def test_find_wordiness():
    found = find_wordiness("Automated reports in order to save time", SUMMARY)
    assert [(w.original_text, w.suggested_text, w.severity) for w in found] == [("in order to", "to", "suggestion")]


def test_find_passive_phrase():
    found = find_passive_voice("I was responsible for hiring", SUMMARY)
    assert [(p.original_text, p.suggested_text) for p in found] == [("was responsible for", "led")]


def test_find_passive_agent():
    found = find_passive_voice("The dashboard was designed by me.", SUMMARY)
    assert len(found) == 1
    assert found[0].original_text == "The dashboard was designed by me"
    assert found[0].suggested_text == "I designed the dashboard"


def test_find_informal_tone_keeps_case():
    found = find_informal_tone("Handled Lots of requests", SUMMARY)
    assert [(t.original_text, t.suggested_text, t.type) for t in found] == [("Lots of", "Many", "tone")]


def test_find_date_capitalization():
    found = find_date_capitalization("Jan 2020 - march 2021", SUMMARY)
    assert len(found) == 1
    assert found[0].original_text == "march"
    assert found[0].suggested_text == "March"
    assert (found[0].start_offset, found[0].end_offset) == (11, 16)
    assert found[0].type == "formatting"


def test_date_capitalization_consistent_range():
    assert find_date_capitalization("Jan 2020 - March 2021", SUMMARY) == []
    assert find_date_capitalization("jan 2020 - march 2021", SUMMARY) == []


def test_scan_profile_targets_each_field(profile):
    suggestions = scan_profile(profile)
    by_target = {(s.target_section, s.target_item_id, s.target_field, s.original_text) for s in suggestions}
    assert ("summary", None, "content", "Responsable") in by_target
    assert ("experience", "e1", "description", "Responsible for") in by_target
    assert ("experience", "e1", "achievements[1]", "Worked on") in by_target
