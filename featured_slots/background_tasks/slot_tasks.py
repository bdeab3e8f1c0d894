# featured_slots/background_tasks/slot_tasks.py
"""
Background tasks for slot pools.

- sweep_completed_slots(): Every SLOT_SWEEP_INTERVAL_MINUTES

Listings and mutations already sweep lazily; this job keeps history and
active counts current when nobody is looking at the queue.
"""

import logging

from featured_slots.db.session import SessionLocal
from featured_slots.core.exceptions import SlotSchedulingError
from featured_slots.schemas.slot import SlotTier
from featured_slots.services.slots.queue_service import SlotQueueService

logger = logging.getLogger(__name__)


def sweep_completed_slots() -> bool:
    """
    Background task: mark scheduled requests whose window has ended as completed.

    Each tier is swept in its own transaction so a failure in one pool does
    not block the other.
    """
    db = SessionLocal()
    ok = True

    try:
        for tier in SlotTier:
            try:
                completed = SlotQueueService(db, tier).sweep()
                if completed:
                    logger.info(f"Swept {completed} completed {tier.value} slot requests")
            except SlotSchedulingError as e:
                logger.error(f"Error sweeping {tier.value} slot pool: {e}")
                ok = False
        return ok
    finally:
        db.close()
