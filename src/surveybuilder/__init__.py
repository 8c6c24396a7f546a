"""
Survey Builder Package

Document model and schema codec for authoring multi-section questionnaires.

ARCHITECTURAL GUARANTEE:
------------------------
The model and codec contain ZERO knowledge of:
    - HTTP transport
    - The storage backend
    - Editor chrome
    - How the form renderer evaluates visibleIf expressions

The editing session is the only component that talks to a store, and it
only ever exchanges schema documents with it.
"""

from .errors import (
    ExternalIOFailure,
    InvariantViolation,
    PublishRejected,
    SchemaError,
    SessionBusy,
    StorageError,
    SurveyBuilderError,
    SurveyNotFound,
)
from .model import Direction, Locale, Question, QuestionType, Section, Survey, new_survey
from .serialization import survey_from_schema, survey_to_schema
from .session import EditingMode, EditingSession, Selection
from .storage import FileSurveyStore, SurveyStore

__version__ = "0.1.0"

__all__ = [
    "Direction",
    "EditingMode",
    "EditingSession",
    "ExternalIOFailure",
    "FileSurveyStore",
    "InvariantViolation",
    "Locale",
    "PublishRejected",
    "Question",
    "QuestionType",
    "SchemaError",
    "Section",
    "Selection",
    "SessionBusy",
    "StorageError",
    "Survey",
    "SurveyBuilderError",
    "SurveyNotFound",
    "SurveyStore",
    "new_survey",
    "survey_from_schema",
    "survey_to_schema",
]
