"""
Shared contract with the frontend: the enumerated schedule states, the error
body every non-2xx response carries, and the exception base that maps onto it.
"""

from enum import Enum
from typing import Any

from utils.pydantic_tools import BaseModelWithMethods


class MovieStatus(str, Enum):
    SCHEDULED = "scheduled"
    WATCHED = "watched"
    CANCELLED = "cancelled"


# States a client may request when adding a movie; cancelled is internal only.
SUBMITTABLE_STATUSES = (MovieStatus.SCHEDULED, MovieStatus.WATCHED)


class ErrorCategory(str, Enum):
    VALIDATION = "Validation error"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "Not found"
    METHOD_NOT_ALLOWED = "Method not allowed"
    CONFLICT = "Conflict"
    INTERNAL = "Internal server error"


class ErrorResponse(BaseModelWithMethods):
    """Body of every non-2xx response."""

    error: str
    message: str
    details: Any | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ServiceError(Exception):
    """
    Base for errors that map to an HTTP response.

    Subclasses set status_code and category; details is optional context
    that is echoed to the client.
    """

    status_code: int = 500
    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(self, message: str, details: Any | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.category.value, message=self.message, details=self.details
        )
