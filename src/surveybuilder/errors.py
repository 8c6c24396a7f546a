"""
Error taxonomy for the survey builder.

Three kinds of outcome are kept apart:
    - InvariantViolation: the operation would break the document structure
      (deleting the last section or question, renaming onto a taken name).
      Rejected, model unchanged.
    - "Not found" on update/select: silently ignored, never raised.
    - ExternalIOFailure: a load or publish round trip failed. Raised from
      the underlying cause; the local document is left untouched.
"""


class SurveyBuilderError(Exception):
    """Base class for all survey builder errors."""
    pass


class InvariantViolation(SurveyBuilderError):
    """Raised when an edit would break a structural invariant."""
    pass


class SchemaError(SurveyBuilderError, ValueError):
    """Raised when a schema document does not have the expected shape."""
    pass


class StorageError(SurveyBuilderError):
    """Raised by a survey store when a document cannot be read or written."""
    pass


class SurveyNotFound(StorageError):
    """Raised by a survey store for an unknown survey id."""

    def __init__(self, survey_id: str):
        super().__init__(f"Survey not found: {survey_id}")
        self.survey_id = survey_id


class ExternalIOFailure(SurveyBuilderError):
    """Raised by the editing session when a store round trip fails."""
    pass


class SessionBusy(SurveyBuilderError):
    """Raised when load or publish is requested while another is in flight."""
    pass


class PublishRejected(SurveyBuilderError):
    """Raised when a survey is not in a publishable state."""
    pass
