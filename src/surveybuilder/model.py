"""
Core Survey Document Model

Defines the in-memory tree an author edits:
    - Survey (root: metadata + ordered sections)
    - Section (a page: ordered questions + optional visibility condition)
    - Question (a single form element)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about storage, HTTP or the form renderer
        - Do no I/O
        - Treat condition expressions as opaque text (never parsed)
        - Only change through the mutators on Survey, which keep the
          structural invariants intact

INVARIANTS (for any Survey built by new_survey() or the schema decoder):
    - At least one Section exists
    - Every Section holds at least one Question
    - Section ids are unique and never reused; same for Question ids
    - Section names are unique; Question names are unique
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from .errors import InvariantViolation


DEFAULT_SURVEY_TITLE = "My Survey"
DEFAULT_QUESTION_TITLE = "New Question"


class QuestionType(Enum):
    """
    Element types understood by the form renderer.

    The values are the renderer's own type strings and are written to the
    schema document unchanged.
    """

    TEXT = "text"
    COMMENT = "comment"
    RADIOGROUP = "radiogroup"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"
    RATING = "rating"
    BOOLEAN = "boolean"

    @property
    def label(self) -> str:
        """Human-readable name shown in the type picker."""
        return _QUESTION_TYPE_LABELS[self]

    @property
    def has_choices(self) -> bool:
        """True for types whose answers come from a choices list."""
        return self in CHOICE_TYPES


_QUESTION_TYPE_LABELS = {
    QuestionType.TEXT: "Text Input",
    QuestionType.COMMENT: "Long Text (Comment)",
    QuestionType.RADIOGROUP: "Multiple Choice (Single)",
    QuestionType.CHECKBOX: "Multiple Choice (Multiple)",
    QuestionType.DROPDOWN: "Dropdown",
    QuestionType.RATING: "Rating Scale",
    QuestionType.BOOLEAN: "Yes/No",
}

CHOICE_TYPES = frozenset({
    QuestionType.RADIOGROUP,
    QuestionType.CHECKBOX,
    QuestionType.DROPDOWN,
})


class Locale(Enum):
    """Languages the renderer is configured with."""
    EN = "en"
    JA = "ja"


class Direction(Enum):
    """Direction for moving a question within its section."""
    UP = "up"
    DOWN = "down"


def parse_choices(raw_text: str) -> List[str]:
    """
    Split the choices text area into a choices list.

    One choice per line. Lines are trimmed, blank lines dropped, order and
    duplicates kept.

    Example:
        parse_choices("a\\n b \\n\\nc\\n") == ["a", "b", "c"]
    """
    if not raw_text:
        return []
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def format_choices(choices: List[str]) -> str:
    """Inverse of parse_choices for editing: one choice per line."""
    return "\n".join(choices)


@dataclass
class Question:
    """
    A single form element.

    Properties:
        id:
            Session-local identifier, unique among the survey's questions.
            Not preserved across save/load.

        name:
            Machine identifier, unique among the survey's questions.
            This is the stable business key: answers are keyed by it.

        title:
            Question text shown to the respondent

        type:
            QuestionType

        is_required:
            Whether an answer is mandatory

        choices:
            Ordered answer options. Only written to the schema document
            when the type is choice-bearing, but kept here regardless so
            switching type back and forth does not lose them.

        visible_if:
            Condition expression text, opaque to the builder ("" = always)
    """

    id: int
    name: str
    title: str = DEFAULT_QUESTION_TITLE
    type: QuestionType = QuestionType.TEXT
    is_required: bool = False
    choices: List[str] = field(default_factory=list)
    visible_if: str = ""


@dataclass
class Section:
    """
    An ordered group of questions, rendered as one page.

    Properties:
        id: Session-local identifier, unique among the survey's sections
        name: Machine identifier, unique among the survey's sections
        title: Display title
        visible_if: Condition expression text ("" = always visible)
        questions: Ordered questions; position is the display order
    """

    id: int
    name: str
    title: str
    visible_if: str = ""
    questions: List[Question] = field(default_factory=list)

    def get_question(self, question_id: int) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def index_of(self, question_id: int) -> Optional[int]:
        for index, question in enumerate(self.questions):
            if question.id == question_id:
                return index
        return None


_SECTION_FIELDS = frozenset({"name", "title", "visible_if"})
_QUESTION_FIELDS = frozenset({"name", "title", "type", "is_required", "choices", "visible_if"})
_SURVEY_FIELDS = frozenset({"title", "description", "locale"})


def _check_fields(kind: str, fields: Dict[str, object], allowed: frozenset) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise TypeError(f"Unknown {kind} field(s): {', '.join(sorted(unknown))}")


def _check_name(kind: str, name: object, current: str, taken: Set[str]) -> None:
    if not isinstance(name, str) or not name.strip():
        raise InvariantViolation(f"{kind} name must not be blank")
    if name != current and name in taken:
        raise InvariantViolation(f"{kind} name already in use: {name}")


@dataclass
class Survey:
    """
    Root of the document tree.

    Properties:
        title: Survey title
        description: Survey description
        locale: Locale the renderer should use
        sections: Ordered sections

    Identifier counters are kept per survey so ids are never handed out
    twice, even after the highest-numbered item has been deleted.

    Mutators:
        Structural edits (add/delete/move) and field-level updates all go
        through the methods below. Updates and deletes that reference a
        missing id do nothing and report it through their return value.
        Edits that would break an invariant raise InvariantViolation and
        leave the survey unchanged.
    """

    title: str = DEFAULT_SURVEY_TITLE
    description: str = ""
    locale: Locale = Locale.EN
    sections: List[Section] = field(default_factory=list)
    _last_section_id: int = field(default=0, init=False, repr=False, compare=False)
    _last_question_id: int = field(default=0, init=False, repr=False, compare=False)

    def __post_init__(self):
        for section in self.sections:
            self._last_section_id = max(self._last_section_id, section.id)
            for question in section.questions:
                self._last_question_id = max(self._last_question_id, question.id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_section(self, section_id: int) -> Optional[Section]:
        """
        Retrieve a section by ID.

        Returns:
            Section object or None if not found
        """
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_question(self, section_id: int, question_id: int) -> Optional[Question]:
        section = self.get_section(section_id)
        if section is None:
            return None
        return section.get_question(question_id)

    def find_question(self, question_id: int) -> Optional[Tuple[Section, Question]]:
        """Locate a question anywhere in the survey, with its owning section."""
        for section, question in self.iter_questions():
            if question.id == question_id:
                return section, question
        return None

    def iter_questions(self) -> Iterator[Tuple[Section, Question]]:
        for section in self.sections:
            for question in section.questions:
                yield section, question

    def section_names(self) -> Set[str]:
        return {section.name for section in self.sections}

    def question_names(self) -> Set[str]:
        return {question.name for _, question in self.iter_questions()}

    # ------------------------------------------------------------------
    # Low-level builders (no minimum-count checks; used by the decoder)
    # ------------------------------------------------------------------

    def next_section_id(self) -> int:
        self._last_section_id += 1
        return self._last_section_id

    def next_question_id(self) -> int:
        self._last_question_id += 1
        return self._last_question_id

    def append_section(self, name: str, title: str, visible_if: str = "") -> Section:
        """Attach an empty section with a fresh id. The caller fills it."""
        section = Section(
            id=self.next_section_id(),
            name=name,
            title=title,
            visible_if=visible_if or "",
        )
        self.sections.append(section)
        return section

    def append_question(
        self,
        section: Section,
        name: str,
        title: str = DEFAULT_QUESTION_TITLE,
        type: QuestionType = QuestionType.TEXT,
        is_required: bool = False,
        choices: Optional[List[str]] = None,
        visible_if: str = "",
    ) -> Question:
        """Attach a question with a fresh id to the end of ``section``."""
        question = Question(
            id=self.next_question_id(),
            name=name,
            title=title,
            type=type,
            is_required=is_required,
            choices=list(choices or []),
            visible_if=visible_if or "",
        )
        section.questions.append(question)
        return question

    @staticmethod
    def _unique_name(prefix: str, number: int, taken: Set[str]) -> str:
        name = f"{prefix}{number}"
        suffix = 2
        while name in taken:
            name = f"{prefix}{number}_{suffix}"
            suffix += 1
        return name

    def _new_default_question(self, section: Section) -> Question:
        question_id = self._last_question_id + 1
        name = self._unique_name("question", question_id, self.question_names())
        return self.append_question(section, name=name)

    # ------------------------------------------------------------------
    # Survey-level edits
    # ------------------------------------------------------------------

    def update_survey(self, **fields) -> None:
        """Partial update of title, description and locale."""
        _check_fields("survey", fields, _SURVEY_FIELDS)
        if "locale" in fields:
            fields["locale"] = Locale(fields["locale"])
        for key, value in fields.items():
            setattr(self, key, value)

    # ------------------------------------------------------------------
    # Section edits
    # ------------------------------------------------------------------

    def add_section(self) -> Section:
        """
        Append a new section holding one default question.

        Always succeeds.
        """
        section_id = self._last_section_id + 1
        section = self.append_section(
            name=self._unique_name("section", section_id, self.section_names()),
            title=f"Section {section_id}",
        )
        self._new_default_question(section)
        return section

    def delete_section(self, section_id: int) -> Optional[Section]:
        """
        Remove a section.

        Returns:
            The removed section, or None if no section has that id

        Raises:
            InvariantViolation: if it is the only section left
        """
        section = self.get_section(section_id)
        if section is None:
            return None
        if len(self.sections) == 1:
            raise InvariantViolation("Cannot delete the last section")
        self.sections.remove(section)
        return section

    def update_section(self, section_id: int, **fields) -> bool:
        """
        Partial update of a section's name, title and visible_if.

        Returns:
            True if the section exists and was updated

        Raises:
            TypeError: for fields other than name/title/visible_if
            InvariantViolation: if the new name is blank or belongs to another section
        """
        _check_fields("section", fields, _SECTION_FIELDS)
        section = self.get_section(section_id)
        if section is None:
            return False
        if "name" in fields:
            _check_name("Section", fields["name"], section.name, self.section_names())
        if "visible_if" in fields:
            fields["visible_if"] = fields["visible_if"] or ""
        for key, value in fields.items():
            setattr(section, key, value)
        return True

    # ------------------------------------------------------------------
    # Question edits
    # ------------------------------------------------------------------

    def add_question(self, section_id: int) -> Optional[Question]:
        """
        Append a default question (single-line text, optional, no choices).

        Returns:
            The new question, or None if the section does not exist
        """
        section = self.get_section(section_id)
        if section is None:
            return None
        return self._new_default_question(section)

    def delete_question(self, section_id: int, question_id: int) -> Optional[Question]:
        """
        Remove a question from a section.

        Returns:
            The removed question, or None if it does not exist

        Raises:
            InvariantViolation: if it is the section's only question
        """
        section = self.get_section(section_id)
        if section is None:
            return None
        question = section.get_question(question_id)
        if question is None:
            return None
        if len(section.questions) == 1:
            raise InvariantViolation("Cannot delete the last question in a section")
        section.questions.remove(question)
        return question

    def update_question(self, section_id: int, question_id: int, **fields) -> bool:
        """
        Partial update of any question field, including type and choices.

        ``type`` accepts a QuestionType or its string value. Changing the
        type keeps the choices list as it is.

        Returns:
            True if the question exists and was updated

        Raises:
            TypeError: for unknown field names
            ValueError: for an unknown type value
            InvariantViolation: if the new name is blank or belongs to another question
        """
        _check_fields("question", fields, _QUESTION_FIELDS)
        question = self.get_question(section_id, question_id)
        if question is None:
            return False
        if "name" in fields:
            _check_name("Question", fields["name"], question.name, self.question_names())
        if "type" in fields:
            fields["type"] = QuestionType(fields["type"])
        if "choices" in fields:
            fields["choices"] = [str(choice) for choice in fields["choices"]]
        if "is_required" in fields:
            fields["is_required"] = bool(fields["is_required"])
        if "visible_if" in fields:
            fields["visible_if"] = fields["visible_if"] or ""
        for key, value in fields.items():
            setattr(question, key, value)
        return True

    def move_question(
        self,
        section_id: int,
        question_id: int,
        direction: Union[Direction, str],
    ) -> bool:
        """
        Swap a question with its neighbour above or below.

        Moving the first question up or the last question down does nothing.

        Returns:
            True if two questions were swapped
        """
        direction = Direction(direction)
        section = self.get_section(section_id)
        if section is None:
            return False
        index = section.index_of(question_id)
        if index is None:
            return False
        target = index - 1 if direction is Direction.UP else index + 1
        if target < 0 or target >= len(section.questions):
            return False
        questions = section.questions
        questions[index], questions[target] = questions[target], questions[index]
        return True

    def set_choices(self, section_id: int, question_id: int, raw_text: str) -> bool:
        """Replace a question's choices from multi-line text (see parse_choices)."""
        return self.update_question(section_id, question_id, choices=parse_choices(raw_text))


def new_survey(locale: Union[Locale, str] = Locale.EN) -> Survey:
    """
    Build the document a fresh editing session starts from.

    One section with one required text question.
    """
    survey = Survey(locale=Locale(locale))
    section = survey.add_section()
    question = section.questions[0]
    question.title = "What is your name?"
    question.is_required = True
    return survey
