#!/usr/bin/env python3
"""
Builder Session Demo: edit → publish → reload → collect answers

Shows the full workflow:
1. Open an editing session on the configured file store
2. Build a survey through the session's edit operations
3. Analyze and publish it
4. Reload it from the store (ids are reassigned, names survive)
5. Submit a set of answers and list them
"""

from surveybuilder.analyzer import analyze_survey
from surveybuilder.config import configure_logging, load_settings
from surveybuilder.errors import InvariantViolation
from surveybuilder.examples import build_example_feedback_survey
from surveybuilder.model import Direction
from surveybuilder.session import EditingSession
from surveybuilder.storage import FileSurveyStore


def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    store = FileSurveyStore.from_settings(settings)

    print("=" * 80)
    print("BUILDER SESSION DEMO: Edit → Publish → Reload → Results")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Build
    # =========================================================================
    print("\n1. BUILDING SURVEY...")
    session = EditingSession(
        store,
        survey=build_example_feedback_survey(settings.default_locale),
        default_locale=settings.default_locale,
    )
    survey = session.survey
    about = survey.sections[0]
    session.move_question(about.id, about.questions[-1].id, Direction.UP)
    print(f"   ✓ Title: {survey.title}")
    print(f"   ✓ Sections: {len(survey.sections)}")
    print(f"   ✓ Questions: {sum(len(s.questions) for s in survey.sections)}")

    try:
        for section in list(survey.sections):
            session.delete_section(section.id)
    except InvariantViolation as e:
        print(f"   ✓ Refused: {e}")

    # =========================================================================
    # STEP 2: Analyze + Publish
    # =========================================================================
    print("\n2. ANALYZING + PUBLISHING...")
    report = analyze_survey(session.survey)
    print(f"   ✓ Question types: {report.questions_by_type}")
    print(f"   ✓ Warnings: {report.warnings or 'none'}")
    survey_id = session.publish()
    print(f"   ✓ Stored as {survey_id}")

    # =========================================================================
    # STEP 3: Reload
    # =========================================================================
    print("\n3. RELOADING...")
    session.new()
    session.load(survey_id)
    for section in session.survey.sections:
        names = ", ".join(q.name for q in section.questions)
        print(f"   ✓ [{section.id}] {section.name}: {names}")

    # =========================================================================
    # STEP 4: Answers
    # =========================================================================
    print("\n4. SUBMITTING ANSWERS...")
    store.submit_results(survey_id, {
        "full_name": "Ada",
        "channel": "Friend",
        "satisfaction": 5,
        "may_contact": False,
    })
    for result in store.list_results(survey_id):
        print(f"   ✓ {result.created_at}: {result.content}")

    print("\n5. EXPORTED SCHEMA:")
    print("-" * 80)
    print(session.export_json())


if __name__ == "__main__":
    main()
