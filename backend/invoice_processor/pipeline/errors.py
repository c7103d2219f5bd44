"""
Domain-specific exception hierarchy for the invoice processor.

All processor exceptions inherit from ProcessorError so callers can
catch broadly or narrowly as needed.  Each exception carries structured
context (step name, execution ID, etc.) for logging/debugging.
"""

from __future__ import annotations


class ProcessorError(Exception):
    """Base exception for all processor errors."""

    def __init__(
        self,
        message: str,
        *,
        execution_id: str | None = None,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.execution_id = execution_id
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(ProcessorError, ValueError):
    """The processor was built with a missing or invalid collaborator/setting."""
    pass


class RetrievalError(ProcessorError):
    """Raw documents could not be retrieved.  Fatal for the whole run."""
    pass


class ParseError(ProcessorError):
    """A raw document could not be parsed into a record."""
    pass


class RectificationError(ProcessorError):
    """Automated repair of a parsed record failed."""
    pass


class LoadError(ProcessorError):
    """Loading a record into the target system failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        **kwargs,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, **kwargs)


class SaveError(ProcessorError):
    """Saving a result or sending its notification failed."""
    pass


class DisposeError(ProcessorError):
    """Releasing the raw documents of a run failed."""
    pass
