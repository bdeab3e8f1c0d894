# featured_slots/services/slots/presenter.py
"""
Maps a slot request and "now" to what callers display.

Pure functions: no store access, no clock reads. The pool timezone only
affects the formatted strings.
"""

from datetime import datetime, timedelta
from typing import Optional

from featured_slots.schemas.slot import (
    LifecycleStatus,
    PresentationState,
    PresentedSlotRequest,
)
from featured_slots.services.slots.config import SlotPoolConfig
from featured_slots.utils.time_utils import ensure_utc, format_local, to_local_input


def derive_state(
    status: str,
    effective_start_at: Optional[datetime],
    effective_end_at: Optional[datetime],
    now: datetime,
    recent_ended_window: timedelta,
) -> Optional[PresentationState]:
    """
    Presentation state of a request, or None once it has aged out of the
    recent-ended window (such rows are history only and not displayed).
    """
    if status == LifecycleStatus.CANCELLED.value:
        return PresentationState.CANCELLED

    now = ensure_utc(now)
    start = ensure_utc(effective_start_at) if effective_start_at else None
    end = ensure_utc(effective_end_at) if effective_end_at else None

    if status == LifecycleStatus.SCHEDULED.value:
        if start is None or end is None:
            # Not planned yet
            return PresentationState.UPCOMING
        if start <= now < end:
            return PresentationState.ACTIVE
        if now < start:
            return PresentationState.UPCOMING

    if end is None:
        return None
    if now - end < recent_ended_window:
        return PresentationState.RECENT_ENDED
    return None


def present(
    request,
    now: datetime,
    pool_config: SlotPoolConfig,
    queue_position: Optional[int] = None,
    event_name: Optional[str] = None,
    include_aged: bool = False,
) -> Optional[PresentedSlotRequest]:
    """
    Build the display view of `request` at `now`.

    `queue_position` comes from the planner and is only kept for upcoming
    requests. Returns None for rows past the recent-ended window unless
    `include_aged` is set, in which case they are shown as recent-ended.
    """
    status = request.status.value if isinstance(request.status, LifecycleStatus) else request.status
    state = derive_state(
        status,
        request.effective_start_at,
        request.effective_end_at,
        now,
        pool_config.recent_ended_window,
    )
    if state is None:
        if not include_aged:
            return None
        state = PresentationState.RECENT_ENDED

    zone = pool_config.zone
    return PresentedSlotRequest(
        id=request.id,
        tier=request.tier,
        resource_key=request.resource_key,
        requested_start_at=ensure_utc(request.requested_start_at),
        duration_hours=request.duration_hours,
        status=status,
        effective_start_at=ensure_utc(request.effective_start_at) if request.effective_start_at else None,
        effective_end_at=ensure_utc(request.effective_end_at) if request.effective_end_at else None,
        created_by=request.created_by,
        created_at=ensure_utc(request.created_at),
        updated_at=ensure_utc(request.updated_at),
        event_name=event_name or request.resource_key,
        presentation_state=state,
        queue_position=queue_position if state is PresentationState.UPCOMING else None,
        requested_start_local=format_local(request.requested_start_at, zone),
        requested_start_input=to_local_input(request.requested_start_at, zone),
        effective_start_local=format_local(request.effective_start_at, zone),
        effective_end_local=format_local(request.effective_end_at, zone),
    )
