"""
Survey Analyzer: read-only diagnostics for a Survey document.

Produces an inventory and a list of warnings an author should look at
before publishing:
    - Duplicate section or question names (possible in decoded documents)
    - Choice questions with no choices
    - Non-choice questions still carrying choices (omitted on publish)
    - Sections or questions with blank titles

IMPORTANT: This module does NOT modify the survey and does NOT evaluate
visible_if expressions.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Set

from surveybuilder.model import Survey


@dataclass
class SurveyReport:
    """Analysis report for a survey."""

    survey_title: str
    total_sections: int = 0
    total_questions: int = 0
    required_questions: int = 0
    conditional_sections: int = 0
    conditional_questions: int = 0

    # Question type inventory, keyed by renderer type string
    questions_by_type: Dict[str, int] = field(default_factory=dict)

    # Structural problems
    duplicate_section_names: Set[str] = field(default_factory=set)
    duplicate_question_names: Set[str] = field(default_factory=set)
    choice_questions_without_choices: List[str] = field(default_factory=list)
    stale_choices: List[str] = field(default_factory=list)
    untitled_items: List[str] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    @property
    def ok(self) -> bool:
        return not self.warnings


def _duplicates(names: List[str]) -> Set[str]:
    return {name for name, count in Counter(names).items() if count > 1}


def analyze_survey(survey: Survey) -> SurveyReport:
    """
    Inventory a Survey and flag problems.

    Returns a SurveyReport with counts and warnings.
    """
    report = SurveyReport(survey_title=survey.title)

    report.total_sections = len(survey.sections)

    section_names = []
    question_names = []
    type_counts: Counter = Counter()

    for section in survey.sections:
        section_names.append(section.name)
        if section.visible_if:
            report.conditional_sections += 1
        if not section.title.strip():
            report.untitled_items.append(section.name)

        for question in section.questions:
            report.total_questions += 1
            question_names.append(question.name)
            type_counts[question.type.value] += 1

            if question.is_required:
                report.required_questions += 1
            if question.visible_if:
                report.conditional_questions += 1
            if not question.title.strip():
                report.untitled_items.append(question.name)

            if question.type.has_choices and not question.choices:
                report.choice_questions_without_choices.append(question.name)
            elif not question.type.has_choices and question.choices:
                report.stale_choices.append(question.name)

    report.questions_by_type = dict(type_counts)
    report.duplicate_section_names = _duplicates(section_names)
    report.duplicate_question_names = _duplicates(question_names)

    # =========================================================================
    # WARNING FLAGS
    # =========================================================================

    if not survey.title.strip():
        report.add_warning("Survey has no title")

    if report.duplicate_section_names:
        report.add_warning(
            f"Duplicate section names: {', '.join(sorted(report.duplicate_section_names))}"
        )

    if report.duplicate_question_names:
        report.add_warning(
            f"Duplicate question names: {', '.join(sorted(report.duplicate_question_names))}"
        )

    if report.choice_questions_without_choices:
        report.add_warning(
            f"Choice questions without choices: {', '.join(report.choice_questions_without_choices)}"
        )

    if report.stale_choices:
        report.add_warning(
            f"Choices ignored for non-choice questions: {', '.join(report.stale_choices)}"
        )

    if report.untitled_items:
        report.add_warning(f"Untitled items: {', '.join(report.untitled_items)}")

    return report
