# featured_slots/crud/crud_slot_request.py
from typing import Iterable, List, Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from featured_slots.crud.base import CRUDBase
from featured_slots.models.slot_request import SlotRequest
from featured_slots.schemas.slot import (
    LifecycleStatus,
    SlotRequestCreateDTO,
    SlotRescheduleDTO,
    SlotTier,
)
from featured_slots.utils.time_utils import ensure_utc

HISTORY_STATUSES = (LifecycleStatus.COMPLETED.value, LifecycleStatus.CANCELLED.value)


class CRUDSlotRequest(CRUDBase[SlotRequest, SlotRequestCreateDTO, SlotRescheduleDTO]):
    """
    Store for slot request rows. No scheduling logic lives here.

    Writes only flush: the queue service commits once per mutation so the
    row change and the replan land in the same transaction.
    """

    def get_in_tier(self, db: Session, *, tier: SlotTier, id: str) -> Optional[SlotRequest]:
        return db.query(self.model).filter(
            self.model.id == id,
            self.model.tier == SlotTier(tier).value,
        ).first()

    def list_by_tier(
        self,
        db: Session,
        *,
        tier: SlotTier,
        statuses: Optional[Iterable[LifecycleStatus]] = None,
    ) -> List[SlotRequest]:
        """All rows of a pool, ordered for display (effective start, then submission)."""
        query = db.query(self.model).filter(self.model.tier == SlotTier(tier).value)
        if statuses:
            query = query.filter(
                self.model.status.in_([LifecycleStatus(status).value for status in statuses])
            )
        return query.order_by(
            self.model.effective_start_at.asc(),
            self.model.created_at.asc(),
            self.model.id.asc(),
        ).all()

    def list_scheduled(self, db: Session, *, tier: SlotTier) -> List[SlotRequest]:
        """The pool's live set, in planning order."""
        return db.query(self.model).filter(
            self.model.tier == SlotTier(tier).value,
            self.model.status == LifecycleStatus.SCHEDULED.value,
        ).order_by(
            self.model.requested_start_at.asc(),
            self.model.created_at.asc(),
            self.model.resource_key.asc(),
            self.model.id.asc(),
        ).all()

    def count_history(self, db: Session, *, tier: SlotTier) -> int:
        return db.query(self.model).filter(
            self.model.tier == SlotTier(tier).value,
            self.model.status.in_(HISTORY_STATUSES),
        ).count()

    def create_request(
        self,
        db: Session,
        *,
        tier: SlotTier,
        resource_key: str,
        requested_start_at: datetime,
        duration_hours: int,
        created_by: str,
    ) -> SlotRequest:
        now = datetime.now(timezone.utc)
        db_obj = self.model(
            tier=SlotTier(tier).value,
            resource_key=resource_key,
            requested_start_at=requested_start_at,
            duration_hours=duration_hours,
            status=LifecycleStatus.SCHEDULED.value,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def apply_reschedule(
        self,
        db: Session,
        *,
        request: SlotRequest,
        requested_start_at: datetime,
        duration_hours: int,
    ) -> SlotRequest:
        """Replace the requested booking. The old admission is dropped so the planner starts fresh."""
        request.requested_start_at = requested_start_at
        request.duration_hours = duration_hours
        request.effective_start_at = None
        request.effective_end_at = None
        request.updated_at = datetime.now(timezone.utc)
        db.flush()
        return request

    def set_status(self, db: Session, *, request: SlotRequest, status: LifecycleStatus) -> SlotRequest:
        request.status = LifecycleStatus(status).value
        request.updated_at = datetime.now(timezone.utc)
        db.flush()
        return request

    def set_window(
        self,
        request: SlotRequest,
        *,
        effective_start_at: datetime,
        effective_end_at: datetime,
    ) -> bool:
        """Store a planned window on the row. Returns True if it changed."""
        if (
            request.effective_start_at is not None
            and request.effective_end_at is not None
            and ensure_utc(request.effective_start_at) == ensure_utc(effective_start_at)
            and ensure_utc(request.effective_end_at) == ensure_utc(effective_end_at)
        ):
            return False
        request.effective_start_at = effective_start_at
        request.effective_end_at = effective_end_at
        request.updated_at = datetime.now(timezone.utc)
        return True

    def cancel_all_scheduled(self, db: Session, *, tier: SlotTier) -> int:
        now = datetime.now(timezone.utc)
        count = db.query(self.model).filter(
            self.model.tier == SlotTier(tier).value,
            self.model.status == LifecycleStatus.SCHEDULED.value,
        ).update(
            {"status": LifecycleStatus.CANCELLED.value, "updated_at": now},
            synchronize_session="fetch",
        )
        return count

    def delete_history(self, db: Session, *, tier: SlotTier) -> int:
        return db.query(self.model).filter(
            self.model.tier == SlotTier(tier).value,
            self.model.status.in_(HISTORY_STATUSES),
        ).delete(synchronize_session="fetch")

    def delete_all(self, db: Session, *, tier: SlotTier) -> int:
        return db.query(self.model).filter(
            self.model.tier == SlotTier(tier).value,
        ).delete(synchronize_session="fetch")


slot_request = CRUDSlotRequest(SlotRequest)
