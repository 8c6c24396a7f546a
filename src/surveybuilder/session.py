"""
Editing session: one Survey document, a cursor, and the store round trips.

The session is the only place that talks to a SurveyStore. It decodes on
load, encodes on publish, and otherwise forwards edits to the Survey
mutators while keeping the cursor (which node is being edited) pointed at
something that exists.

State:
    survey               the document being edited
    selection            active section/question ids and editing mode
    survey_id            store id of the loaded/published document, or None
    has_unsaved_changes  advisory flag; set by edits once survey_id is bound,
                         cleared by a successful load or publish
    busy                 True while a load or publish is in flight

Single-threaded: no locking. Re-entrant load/publish raises SessionBusy.
A failed round trip raises ExternalIOFailure and leaves all state as it was.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from .analyzer import analyze_survey
from .errors import (
    ExternalIOFailure,
    InvariantViolation,
    PublishRejected,
    SchemaError,
    SessionBusy,
    StorageError,
)
from .model import Direction, Locale, Question, Section, Survey, new_survey
from .serialization import survey_from_schema, survey_to_json, survey_to_schema
from .storage import SurveyStore, SurveySummary


logger = logging.getLogger(__name__)


class EditingMode(Enum):
    """Which kind of node the editor panel is showing."""
    SURVEY = "survey"
    SECTION = "section"
    QUESTION = "question"


@dataclass
class Selection:
    """
    The editing cursor.

    A pure lookup key into the Survey: holds ids, never objects.
    """
    active_section_id: Optional[int] = None
    active_question_id: Optional[int] = None
    mode: EditingMode = EditingMode.QUESTION


def _initial_selection(survey: Survey) -> Selection:
    if not survey.sections:
        raise InvariantViolation("Survey must have at least one section")
    for section in survey.sections:
        if not section.questions:
            raise InvariantViolation(f"Section {section.name!r} has no questions")
    section = survey.sections[0]
    return Selection(
        active_section_id=section.id,
        active_question_id=section.questions[0].id,
        mode=EditingMode.QUESTION,
    )


class EditingSession:
    """
    Edits one Survey against a SurveyStore.

    Args:
        store: where load, publish, list and delete go
        survey: document to start from; a fresh new_survey() when omitted
        default_locale: locale for fresh documents (here and in new())

    Raises:
        InvariantViolation: if ``survey`` has no sections or an empty section
        ValueError: for an unknown default_locale
    """

    def __init__(
        self,
        store: SurveyStore,
        survey: Optional[Survey] = None,
        default_locale: Union[Locale, str] = Locale.EN,
    ):
        self.store = store
        self.default_locale = Locale(default_locale)
        self.survey = survey if survey is not None else new_survey(self.default_locale)
        self.selection = _initial_selection(self.survey)
        self.survey_id: Optional[str] = None
        self.has_unsaved_changes = False
        self.busy = False

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    @property
    def active_section(self) -> Optional[Section]:
        if self.selection.active_section_id is None:
            return None
        return self.survey.get_section(self.selection.active_section_id)

    @property
    def active_question(self) -> Optional[Question]:
        if self.selection.active_question_id is None:
            return None
        found = self.survey.find_question(self.selection.active_question_id)
        return found[1] if found else None

    def select_survey_settings(self) -> None:
        self.selection.mode = EditingMode.SURVEY

    def select_section(self, section_id: int) -> bool:
        if self.survey.get_section(section_id) is None:
            return False
        self.selection = Selection(section_id, None, EditingMode.SECTION)
        return True

    def select_question(self, section_id: int, question_id: int) -> bool:
        if self.survey.get_question(section_id, question_id) is None:
            return False
        self.selection = Selection(section_id, question_id, EditingMode.QUESTION)
        return True

    def _mark_dirty(self, action: str) -> None:
        logger.debug("Edit: %s", action)
        if self.survey_id is not None:
            self.has_unsaved_changes = True

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def update_survey(self, **fields) -> None:
        self.survey.update_survey(**fields)
        self._mark_dirty("update survey")

    def add_section(self) -> Section:
        section = self.survey.add_section()
        self.selection = Selection(section.id, None, EditingMode.SECTION)
        self._mark_dirty(f"add section {section.id}")
        return section

    def delete_section(self, section_id: int) -> Optional[Section]:
        removed = self.survey.delete_section(section_id)
        if removed is None:
            return None
        if self.selection.active_section_id == section_id:
            fallback = self.survey.sections[0]
            self.selection = Selection(fallback.id, None, EditingMode.SECTION)
        self._mark_dirty(f"delete section {section_id}")
        return removed

    def update_section(self, section_id: int, **fields) -> bool:
        updated = self.survey.update_section(section_id, **fields)
        if updated:
            self._mark_dirty(f"update section {section_id}")
        return updated

    def add_question(self, section_id: int) -> Optional[Question]:
        question = self.survey.add_question(section_id)
        if question is None:
            return None
        self.selection = Selection(section_id, question.id, EditingMode.QUESTION)
        self._mark_dirty(f"add question {question.id}")
        return question

    def delete_question(self, section_id: int, question_id: int) -> Optional[Question]:
        removed = self.survey.delete_question(section_id, question_id)
        if removed is None:
            return None
        if self.selection.active_question_id == question_id:
            section = self.survey.get_section(section_id)
            if section.questions:
                self.selection = Selection(section_id, section.questions[0].id, EditingMode.QUESTION)
            else:
                self.selection = Selection(section_id, None, EditingMode.SECTION)
        self._mark_dirty(f"delete question {question_id}")
        return removed

    def update_question(self, section_id: int, question_id: int, **fields) -> bool:
        updated = self.survey.update_question(section_id, question_id, **fields)
        if updated:
            self._mark_dirty(f"update question {question_id}")
        return updated

    def move_question(self, section_id: int, question_id: int, direction: Union[Direction, str]) -> bool:
        moved = self.survey.move_question(section_id, question_id, direction)
        if moved:
            self._mark_dirty(f"move question {question_id} {Direction(direction).value}")
        return moved

    def set_choices(self, section_id: int, question_id: int, raw_text: str) -> bool:
        updated = self.survey.set_choices(section_id, question_id, raw_text)
        if updated:
            self._mark_dirty(f"set choices of question {question_id}")
        return updated

    # ------------------------------------------------------------------
    # Store round trips
    # ------------------------------------------------------------------

    @contextmanager
    def _in_flight(self, action: str):
        if self.busy:
            raise SessionBusy(f"Cannot {action}: another load or publish is in progress")
        self.busy = True
        try:
            yield
        finally:
            self.busy = False

    def new(self) -> None:
        """Start over with a fresh, unbound document."""
        self.survey = new_survey(self.default_locale)
        self.selection = _initial_selection(self.survey)
        self.survey_id = None
        self.has_unsaved_changes = False

    def load(self, survey_id: str, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """
        Replace the document with a stored one.

        Args:
            survey_id: Store id to load
            confirm: Asked before discarding unsaved changes; returning False
                cancels the load

        Returns:
            True if the document was loaded, False if cancelled

        Raises:
            SessionBusy: if a load or publish is already in flight
            ExternalIOFailure: if reading or decoding fails
        """
        if self.has_unsaved_changes and confirm is not None and not confirm():
            return False

        with self._in_flight("load"):
            try:
                survey = survey_from_schema(self.store.read(survey_id))
            except (StorageError, SchemaError, OSError) as e:
                logger.error("Failed to load survey %s: %s", survey_id, e)
                raise ExternalIOFailure(f"Failed to load survey {survey_id}: {e}") from e

        self.survey = survey
        self.selection = _initial_selection(survey)
        self.survey_id = survey_id
        self.has_unsaved_changes = False
        logger.info("Loaded survey %s (%r)", survey_id, survey.title)
        return True

    def publish(self) -> str:
        """
        Encode the document and save it to the store.

        Creates a new stored document on first publish; later publishes
        overwrite it.

        Returns:
            The store id

        Raises:
            PublishRejected: if the survey title is blank
            SessionBusy: if a load or publish is already in flight
            ExternalIOFailure: if the store rejects the write
        """
        if not self.survey.title.strip():
            raise PublishRejected("Please enter a survey title")

        with self._in_flight("publish"):
            for warning in analyze_survey(self.survey).warnings:
                logger.warning("Publishing %r: %s", self.survey.title, warning)
            schema = survey_to_schema(self.survey)
            try:
                survey_id = self.store.save(schema, self.survey_id)
            except (StorageError, OSError) as e:
                logger.error("Failed to publish survey %r: %s", self.survey.title, e)
                raise ExternalIOFailure(f"Failed to publish survey: {e}") from e

        self.survey_id = survey_id
        self.has_unsaved_changes = False
        logger.info("Published survey %s (%r)", survey_id, self.survey.title)
        return survey_id

    def export_json(self) -> str:
        """The encoded document as indented JSON text."""
        return survey_to_json(self.survey, indent=2)

    def list_surveys(self) -> List[SurveySummary]:
        try:
            return self.store.list_surveys()
        except (StorageError, OSError) as e:
            logger.error("Failed to list surveys: %s", e)
            raise ExternalIOFailure(f"Failed to list surveys: {e}") from e

    def delete_survey(self, survey_id: str) -> None:
        """Delete a stored survey. Unbinds the session if it was the loaded one."""
        try:
            self.store.delete(survey_id)
        except (StorageError, OSError) as e:
            logger.error("Failed to delete survey %s: %s", survey_id, e)
            raise ExternalIOFailure(f"Failed to delete survey {survey_id}: {e}") from e
        if self.survey_id == survey_id:
            self.survey_id = None
        logger.info("Deleted survey %s", survey_id)
