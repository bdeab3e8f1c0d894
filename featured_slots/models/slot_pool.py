# featured_slots/models/slot_pool.py
from sqlalchemy import Column, String, Integer, DateTime, func

from featured_slots.db.base_class import Base


class SlotPool(Base):
    """
    Lock anchor for one slot pool (one row per tier).

    Mutations take `SELECT ... FOR UPDATE` on this row before reading the
    pool's scheduled set. `version` is the mapper's version counter, so a
    writer that raced past the lock fails with StaleDataError instead of
    committing a plan computed from a stale set.
    """
    __tablename__ = "slot_pools"

    tier = Column(String(20), primary_key=True)
    version = Column(Integer, nullable=False, server_default="1")
    last_replanned_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __mapper_args__ = {"version_id_col": version}
