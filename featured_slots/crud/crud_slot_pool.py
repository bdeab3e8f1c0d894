# featured_slots/crud/crud_slot_pool.py
from datetime import datetime
from sqlalchemy.orm import Session

from featured_slots.models.slot_pool import SlotPool
from featured_slots.schemas.slot import SlotTier


class CRUDSlotPool:
    """Lock row per slot pool. Nothing here commits; the caller owns the transaction."""

    def lock(self, db: Session, tier: SlotTier) -> SlotPool:
        """
        SELECT ... FOR UPDATE the pool row, creating it on first use.
        Held until the caller commits or rolls back.
        """
        tier_value = SlotTier(tier).value
        pool = db.query(SlotPool).filter(SlotPool.tier == tier_value).with_for_update().first()
        if pool is None:
            db.add(SlotPool(tier=tier_value))
            db.flush()
            pool = db.query(SlotPool).filter(SlotPool.tier == tier_value).with_for_update().one()
        return pool

    def touch(self, db: Session, pool: SlotPool, now: datetime) -> SlotPool:
        """Record a replan. The flush bumps the version and fails on a stale row."""
        pool.last_replanned_at = now
        db.flush()
        return pool


# Singleton instance
slot_pool = CRUDSlotPool()
