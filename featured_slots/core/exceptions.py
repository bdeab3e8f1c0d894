# featured_slots/core/exceptions.py
"""
Error taxonomy for slot scheduling.

Every mutation is all-or-nothing: when one of these is raised the
surrounding transaction has been rolled back and nothing changed.
"""

from typing import Optional


class SlotSchedulingError(Exception):
    """Base class for all slot scheduling failures."""
    pass


class SlotValidationError(SlotSchedulingError):
    """Raised when a duration, timestamp or resource key is rejected before any mutation."""
    pass


class SlotRequestNotFoundError(SlotSchedulingError):
    """Raised when a reschedule/cancel targets an id that does not exist in the pool."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Slot request {request_id} not found")


class NotSchedulableError(SlotSchedulingError):
    """Raised when a mutation targets a completed or cancelled request."""

    def __init__(self, request_id: str, status: Optional[str] = None):
        self.request_id = request_id
        self.status = status
        super().__init__(
            f"Slot request {request_id} is {status or 'not scheduled'} and cannot be modified"
        )


class ConcurrentModificationError(SlotSchedulingError):
    """Raised on a pool version conflict. Callers should retry the whole operation."""
    pass


class StoreUnavailableError(SlotSchedulingError):
    """Raised when the persistence layer fails. The operation did not commit."""
    pass
