import pytest

from carbonlab.objective_parser import (
    ParsedObjective,
    format_objective_text,
    parse_objective_text,
)


FULL_REPORT = """Objective: Raise graphene yield from lot L-12
Experiment Details: KOH activation at 800C
    under argon for 2 hours
Result: Yield improved to 14%
Conclusion: Activation time matters more than temperature
Recommended Action: Repeat with 3 hour hold
"""


def test_parses_all_sections():
    parsed = parse_objective_text(FULL_REPORT)
    assert parsed == ParsedObjective(
        objective="Raise graphene yield from lot L-12",
        experiment_details="KOH activation at 800C\nunder argon for 2 hours",
        result="Yield improved to 14%",
        conclusion="Activation time matters more than temperature",
        recommended_action="Repeat with 3 hour hold",
    )


def test_labels_are_case_insensitive_and_colon_optional():
    parsed = parse_objective_text("OBJECTIVE test the oven\nresult\nno change")
    assert parsed.objective == "test the oven"
    assert parsed.result == "no change"
    assert parsed.experiment_details == ""


def test_sections_end_at_any_following_label():
    # out of the usual order, each section still stops at the next label
    parsed = parse_objective_text("Result: 9%\nObjective: find the limit\nConclusion: done")
    assert parsed.result == "9%"
    assert parsed.objective == "find the limit"
    assert parsed.conclusion == "done"


def test_first_occurrence_of_repeated_label_wins():
    parsed = parse_objective_text("Objective: first\nResult: r\nObjective: second")
    assert parsed.objective == "first"
    assert parsed.result == "r"


def test_plural_labels():
    parsed = parse_objective_text("Objectives: a\nResults: b\nConclusions: c")
    assert (parsed.objective, parsed.result, parsed.conclusion) == ("a", "b", "c")


def test_label_prefix_inside_word_is_not_a_label():
    assert parse_objective_text("Resultant mass was low") is None


def test_only_secondary_sections():
    parsed = parse_objective_text("Conclusion: works\nRecommended action: scale up")
    assert parsed.objective == ""
    assert parsed.conclusion == "works"
    assert parsed.recommended_action == "scale up"


def test_crlf_input():
    parsed = parse_objective_text("Objective: a\r\nResult: b\r\n")
    assert parsed.objective == "a"
    assert parsed.result == "b"


@pytest.mark.parametrize("text", [None, "", 42, ["Objective: x"], "just some notes", "   \n  "])
def test_unrecognized_input_returns_none(text):
    assert parse_objective_text(text) is None


def test_line_scan_picks_up_labels_the_structured_pass_misses():
    # a non-breaking space before the label hides it from the structured pass
    parsed = parse_objective_text("\u00a0Objective: grow flakes\nConclusion: done")
    assert parsed.objective == "grow flakes"
    assert parsed.conclusion == "done"


def test_line_scan_only_fills_empty_fields():
    parsed = parse_objective_text("Conclusion: a\n\u00a0Objective: b")
    assert parsed.conclusion == "a\nObjective: b"
    assert parsed.objective == "b"


def test_line_scan_skipped_when_a_primary_field_is_found():
    parsed = parse_objective_text("Result: r\n\u00a0Objective: b")
    assert parsed.result == "r\nObjective: b"
    assert parsed.objective == ""


def test_empty_label_alone_is_not_recognized():
    assert parse_objective_text("Objective:") is None


def test_format_skips_empty_fields():
    text = format_objective_text(ParsedObjective(objective="a", conclusion="c"))
    assert text == "Objective: a\nConclusion: c"
    assert format_objective_text(None) == ""


@pytest.mark.parametrize(
    "text",
    [
        FULL_REPORT,
        "objective x\nexperiment details\n  y\n\n\n  z\nRESULT: w",
        "Conclusion: only this",
    ],
)
def test_reparse_of_formatted_output_is_stable(text):
    parsed = parse_objective_text(text)
    assert parsed is not None
    assert parse_objective_text(format_objective_text(parsed)) == parsed


def test_as_dict_has_all_fields():
    parsed = parse_objective_text("Result: ok")
    assert parsed.as_dict() == {
        "objective": "",
        "experiment_details": "",
        "result": "ok",
        "conclusion": "",
        "recommended_action": "",
    }


def test_weekly_update_example():
    parsed = parse_objective_text(
        "Objective: Increase yield\n"
        "Experiment details: Used reactor AV1 at 180C\n"
        "Result: Yield improved 12%\n"
        "Conclusion: Higher temp helps\n"
        "Recommended action: Repeat at 190C"
    )
    assert parsed.as_dict() == {
        "objective": "Increase yield",
        "experiment_details": "Used reactor AV1 at 180C",
        "result": "Yield improved 12%",
        "conclusion": "Higher temp helps",
        "recommended_action": "Repeat at 190C",
    }
