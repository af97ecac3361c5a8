"""
Schedule Services - movie club discussion queue.

handlers.py exposes the HTTP surface, wrappers.py holds the add/list logic,
models.py the entry, payload and error types.
"""

from api.schedule.models import (
    AddMovieRequest,
    AddMovieResponse,
    GetScheduleResponse,
    IdentityError,
    MovieAlreadyExistsError,
    ScheduledMovie,
    ScheduleEntry,
    ScheduleValidationError,
    StoreUnavailableError,
)

__all__ = [
    "AddMovieRequest",
    "AddMovieResponse",
    "GetScheduleResponse",
    "ScheduleEntry",
    "ScheduledMovie",
    "IdentityError",
    "MovieAlreadyExistsError",
    "ScheduleValidationError",
    "StoreUnavailableError",
]
