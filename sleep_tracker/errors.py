"""Exception hierarchy for the sleep tracker.

Services raise (or return inside a ``Rejected`` outcome) one of these
typed errors; the API layer maps each to a problem+json response.
"""

from __future__ import annotations


class SleepTrackerError(Exception):
    """Base class for all business-rule errors."""

    status_code = 500
    problem_type = "internal-error"
    title = "Internal Server Error"

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class NotFoundError(SleepTrackerError):
    """Referenced user or session does not exist (or is owned by someone else)."""

    status_code = 404
    problem_type = "not-found"
    title = "Not Found"


class ConflictError(SleepTrackerError):
    """Candidate interval overlaps an existing session for the same user."""

    status_code = 409
    problem_type = "conflict"
    title = "Conflict"


class InvalidInputError(SleepTrackerError):
    """Structurally valid but semantically wrong input."""

    status_code = 422
    problem_type = "validation-error"
    title = "Validation Error"


class CursorDecodeError(SleepTrackerError):
    """Pagination cursor could not be decoded."""

    status_code = 400
    problem_type = "bad-request"
    title = "Bad Request"

    def __init__(self, message: str = "Invalid pagination cursor"):
        super().__init__(message, field="cursor")


class LLMUnavailableError(SleepTrackerError):
    """Insights were requested but the LLM is not configured or failed."""

    status_code = 503
    problem_type = "service-unavailable"
    title = "Service Unavailable"
