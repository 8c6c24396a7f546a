"""
Tests for the Survey Analyzer.

Tests verify that the analyzer correctly:
    - Counts sections, questions and question types
    - Detects duplicate names
    - Flags choice questions without choices and stale choices
    - Leaves the survey untouched
"""

from surveybuilder.analyzer import analyze_survey
from surveybuilder.examples import build_example_feedback_survey
from surveybuilder.model import QuestionType, new_survey
from surveybuilder.serialization import survey_from_schema, survey_to_schema


def test_clean_example_survey():
    """The example survey has no problems."""
    report = analyze_survey(build_example_feedback_survey())

    assert report.survey_title == "Customer Feedback"
    assert report.total_sections == 2
    assert report.total_questions == 7
    assert report.required_questions == 3
    assert report.conditional_sections == 1
    assert report.conditional_questions == 1
    assert report.questions_by_type == {
        "text": 2,
        "radiogroup": 1,
        "rating": 1,
        "boolean": 1,
        "checkbox": 1,
        "comment": 1,
    }
    assert report.ok
    assert report.warnings == []


def test_duplicate_names_from_decoded_document():
    """Decoding keeps duplicate names; the analyzer reports them."""
    doc = {"pages": [
        {"name": "p", "elements": [{"type": "text", "name": "q"}, {"type": "text", "name": "q"}]},
        {"name": "p", "elements": [{"type": "text", "name": "r"}]},
    ]}
    report = analyze_survey(survey_from_schema(doc))

    assert report.duplicate_section_names == {"p"}
    assert report.duplicate_question_names == {"q"}
    assert "Duplicate section names: p" in report.warnings
    assert "Duplicate question names: q" in report.warnings
    assert not report.ok


def test_choice_problems():
    """Choice types need choices; other types should not carry them."""
    survey = new_survey()
    survey.update_question(1, 1, choices=["left over"])
    dropdown = survey.add_question(1)
    survey.update_question(1, dropdown.id, type=QuestionType.DROPDOWN)

    report = analyze_survey(survey)

    assert report.stale_choices == ["question1"]
    assert report.choice_questions_without_choices == [dropdown.name]
    assert len(report.warnings) == 2


def test_untitled_items():
    survey = new_survey()
    survey.update_survey(title="")
    survey.update_section(1, title=" ")
    survey.update_question(1, 1, title="")

    report = analyze_survey(survey)

    assert report.untitled_items == ["section1", "question1"]
    assert "Survey has no title" in report.warnings


def test_analysis_does_not_modify_survey():
    survey = build_example_feedback_survey()
    before = survey_to_schema(survey)
    analyze_survey(survey)
    assert survey_to_schema(survey) == before


def test_warnings_are_not_repeated():
    report = analyze_survey(new_survey())
    report.add_warning("x")
    report.add_warning("x")
    assert report.warnings == ["x"]
