# featured_slots/api/v1/endpoints/internals.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from featured_slots.api import deps
from featured_slots.api.errors import to_http_exception
from featured_slots.core.exceptions import SlotSchedulingError
from featured_slots.db.session import get_db
from featured_slots.schemas.slot import FulfillmentDTO, PresentedSlotRequest
from featured_slots.services.slots.catalog import EventCatalog
from featured_slots.services.slots.fulfillment import fulfill_placement
from featured_slots.services.slots.queue_service import SlotQueueService

router = APIRouter(prefix="/internal", tags=["Internal"])


@router.post(
    "/slots/fulfillments",
    response_model=PresentedSlotRequest,
    status_code=status.HTTP_201_CREATED,
)
def create_fulfillment(
    fulfillment_in: FulfillmentDTO,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """
    Internal endpoint for the payment service: turn a paid placement into a
    scheduled slot request.
    """
    service = SlotQueueService(db, fulfillment_in.tier, catalog=catalog)
    try:
        request = fulfill_placement(
            db,
            tier=fulfillment_in.tier,
            resource_key=fulfillment_in.resource_key,
            requested_start_at=fulfillment_in.requested_start_at,
            duration_hours=fulfillment_in.duration_hours,
            order_ref=fulfillment_in.order_ref,
            service=service,
        )
        return service.present_request(request)
    except SlotSchedulingError as e:
        raise to_http_exception(e)
