"""Error types raised by the daily build cycle."""

from __future__ import annotations


class DailyBuilderError(RuntimeError):
    """Base class for fatal build-cycle errors."""


class BacklogError(DailyBuilderError):
    """Backlog document is missing, malformed, or cannot be advanced."""


class GenerationError(DailyBuilderError):
    """Generation service call failed or returned no text."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PublishError(DailyBuilderError):
    """Version-control step failed."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
