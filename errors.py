# errors.py
from __future__ import annotations


class ContentPipelineError(Exception):
    """Base class for everything the content pipeline raises."""
    retryable: bool = False


class ConfigurationError(ContentPipelineError):
    """Service credentials or settings are missing. Fatal, never retried."""


class RequestParseError(ContentPipelineError):
    """Caller input is malformed. Fatal, surfaced immediately."""


class TransportError(ContentPipelineError):
    """Network/service failure, timeouts included."""
    retryable = True


class ResponseParseError(ContentPipelineError):
    """The service answered, but not with a JSON object."""
    retryable = True

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class ValidationError(ContentPipelineError):
    """Parsed payload is missing a required field or has the wrong type."""
    retryable = True

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []
