from __future__ import annotations


class ValidationError(ValueError):
    """A required interest field is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class SubmissionError(RuntimeError):
    """The submission backend rejected the request or could not be reached."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ConfigurationError(ValueError):
    """Content or deployment configuration cannot be used."""

    def __init__(self, message: str, record: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.record = record
