"""
Custom exceptions for the assessment engine.
"""
from typing import Any, Optional


class AssessmentError(Exception):
    """Base exception for the assessment engine."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class TaxonomyLoadError(AssessmentError):
    """Raised when a taxonomy document cannot be loaded or fails validation."""


class AssessmentValidationError(AssessmentError, ValueError):
    """Raised when a submission is malformed. Never retryable."""
    status_code = 400

    def to_dict(self) -> dict[str, Any]:
        """Payload an HTTP layer can return as-is."""
        return {"error": type(self).__name__, "message": self.message}


class EmptyAnswerSet(AssessmentValidationError):
    """Raised when zero answers are submitted."""
    def __init__(self, message: str = "Answers must be a non-empty array"):
        super().__init__(message)


class MissingAnswerField(AssessmentValidationError):
    """Raised when an answer lacks questionId or value."""
    def __init__(self, index: int, field: str, message: Optional[str] = None):
        self.index = index
        self.field = field
        super().__init__(message or f"Answer #{index} is missing required field '{field}'")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"index": self.index, "field": self.field})
        return payload


class InvalidAnswerValue(MissingAnswerField):
    """Raised when an answer value cannot be parsed as an integer."""
    def __init__(self, index: int, value: Any):
        self.value = value
        super().__init__(
            index,
            "value",
            f"Answer #{index} has a non-integer value: {value!r}",
        )


class UnknownQuestionId(AssessmentValidationError):
    """Raised when a question id belongs to no category of the taxonomy."""
    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"Unknown questionId: {question_id}")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["questionId"] = self.question_id
        return payload
