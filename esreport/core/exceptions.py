# esreport/core/exceptions.py
"""Typed errors raised by the log report pipeline.

Each error carries the HTTP status the API answers with. Failures resolving
an individual field path never raise: they degrade to an empty cell.
"""

from typing import Any, Dict, Optional


class LogReportError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.details:
            detail["details"] = self.details
        return detail


class InvalidSpecError(LogReportError):
    """The request cannot be executed as written (no query, unknown column, ...)."""

    status_code = 400


class BackendUnavailableError(LogReportError):
    """The search backend could not be reached or timed out."""

    status_code = 503


class BackendError(LogReportError):
    """The search backend answered with a non-success status."""

    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.status = status


class MalformedResponseError(LogReportError):
    """The search backend answered with a body of unexpected shape."""

    status_code = 502


class PaginationLimitError(LogReportError):
    """Pagination exceeded the configured page or row guard."""

    status_code = 502
