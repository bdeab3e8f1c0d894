from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from featured_slots.crud import crud_slot_request
from featured_slots.models.slot_request import SlotRequest
from featured_slots.schemas.slot import LifecycleStatus, SlotTier
from featured_slots.services.slots.config import SlotPoolConfig

T0 = datetime(2026, 6, 1, 10, 0, tzinfo=timezone.utc)


def hours(n: float) -> timedelta:
    return timedelta(hours=n)


class FrozenClock:
    """Callable clock for the queue service that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


def make_pool_config(
    tier: SlotTier = SlotTier.SPOTLIGHT,
    max_concurrent: int = 1,
    recent_ended_window_hours: int = 48,
) -> SlotPoolConfig:
    return SlotPoolConfig(
        tier=tier,
        max_concurrent=max_concurrent,
        default_duration_hours=48,
        timezone="Europe/Paris",
        recent_ended_window_hours=recent_ended_window_hours,
    )


def create_slot_request(
    db: Session,
    resource_key: str = "evt_test",
    tier: SlotTier = SlotTier.SPOTLIGHT,
    requested_start_at: datetime = T0,
    duration_hours: int = 1,
    status: Optional[LifecycleStatus] = None,
) -> SlotRequest:
    """
    Creates a slot request row directly through the store, bypassing the planner.
    """
    request = crud_slot_request.slot_request.create_request(
        db,
        tier=tier,
        resource_key=resource_key,
        requested_start_at=requested_start_at,
        duration_hours=duration_hours,
        created_by="admin-panel",
    )
    if status is not None:
        crud_slot_request.slot_request.set_status(db, request=request, status=status)
    db.commit()
    return request
