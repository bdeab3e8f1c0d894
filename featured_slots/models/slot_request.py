# featured_slots/models/slot_request.py
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint, Index, func

from featured_slots.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SlotRequest(Base):
    """
    One promotional booking in a slot pool.

    `status` is the lifecycle (scheduled, completed, cancelled). The
    effective window columns hold the last committed admission from the
    planner; they are rewritten on every replan and never edited directly.
    """
    __tablename__ = "slot_requests"

    id = Column(String, primary_key=True, default=lambda: f"slot_{uuid.uuid4().hex[:12]}")
    tier = Column(String(20), nullable=False, index=True)  # spotlight, promoted
    resource_key = Column(String, nullable=False, index=True)  # external catalog key, not validated

    # Requested booking
    requested_start_at = Column(DateTime(timezone=True), nullable=False)
    duration_hours = Column(Integer, nullable=False, server_default="48")

    # Lifecycle
    status = Column(String(20), nullable=False, server_default="scheduled")  # scheduled, completed, cancelled

    # Admission (planner output)
    effective_start_at = Column(DateTime(timezone=True), nullable=True)
    effective_end_at = Column(DateTime(timezone=True), nullable=True)

    created_by = Column(String(64), nullable=False, server_default="admin-panel")

    # Timestamps (set in Python for sub-second FIFO ordering)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (
        CheckConstraint("duration_hours BETWEEN 1 AND 168", name="check_slot_duration_hours"),
        CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled')", name="check_slot_status"
        ),
        CheckConstraint("tier IN ('spotlight', 'promoted')", name="check_slot_tier"),
        Index("idx_slot_requests_tier_status", "tier", "status"),
        Index("idx_slot_requests_requested", "tier", "requested_start_at", "created_at"),
    )
