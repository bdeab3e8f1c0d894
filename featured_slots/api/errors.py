# featured_slots/api/errors.py
from fastapi import HTTPException, status

from featured_slots.core.exceptions import (
    ConcurrentModificationError,
    NotSchedulableError,
    SlotRequestNotFoundError,
    SlotSchedulingError,
    SlotValidationError,
    StoreUnavailableError,
)

_STATUS_CODES = {
    SlotValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    SlotRequestNotFoundError: status.HTTP_404_NOT_FOUND,
    NotSchedulableError: status.HTTP_409_CONFLICT,
    ConcurrentModificationError: status.HTTP_409_CONFLICT,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(exc: SlotSchedulingError) -> HTTPException:
    """Map a scheduling error to the HTTP error the endpoints return."""
    for exc_type, status_code in _STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
    )
