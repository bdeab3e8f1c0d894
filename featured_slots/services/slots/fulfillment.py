# featured_slots/services/slots/fulfillment.py
"""
Partner placement fulfillment.

A paid placement (e.g. a purchased "promoted" boost) becomes an ordinary
scheduled request in the matching pool. It queues like any other request;
payment does not buy priority.
"""
import logging
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from featured_slots.models.slot_request import SlotRequest
from featured_slots.schemas.slot import SlotTier
from featured_slots.services.slots.queue_service import SlotQueueService

logger = logging.getLogger(__name__)

FULFILLMENT_CREATED_BY = "partner-fulfillment"


def fulfill_placement(
    db: Session,
    *,
    tier: SlotTier,
    resource_key: str,
    requested_start_at: Union[str, datetime, None] = None,
    duration_hours: Optional[int] = None,
    order_ref: Optional[str] = None,
    service: Optional[SlotQueueService] = None,
) -> SlotRequest:
    """
    Schedule the request for a fulfilled placement order.

    Args:
        db: Database session
        tier: Pool the placement was bought for
        resource_key: Event being placed
        requested_start_at: Requested start, defaults to now
        duration_hours: Placement length, defaults to the pool default
        order_ref: Partner order reference, only used for logging
        service: Pre-built queue service (tests)

    Returns:
        The scheduled SlotRequest
    """
    service = service or SlotQueueService(db, tier)
    request = service.create(
        resource_key,
        requested_start_at=requested_start_at,
        duration_hours=duration_hours,
        created_by=FULFILLMENT_CREATED_BY,
    )
    logger.info(
        f"Fulfilled placement order {order_ref or '-'} for {resource_key} "
        f"as {request.id} in {service.tier.value} pool"
    )
    return request
