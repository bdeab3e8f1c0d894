# featured_slots/api/v1/endpoints/slots.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from featured_slots.api import deps
from featured_slots.api.errors import to_http_exception
from featured_slots.core.exceptions import SlotSchedulingError
from featured_slots.db.session import get_db
from featured_slots.schemas.slot import (
    ClearConfirmationDTO,
    ClearResultResponse,
    PresentedSlotRequest,
    QueueListingResponse,
    SlotProjectionResponse,
    SlotRequestCreateDTO,
    SlotRescheduleDTO,
    SlotTier,
)
from featured_slots.services.slots.catalog import EventCatalog
from featured_slots.services.slots.queue_service import SlotQueueService

router = APIRouter(prefix="/slots", tags=["Featured Slots"])


def _service(db: Session, tier: SlotTier, catalog: EventCatalog) -> SlotQueueService:
    return SlotQueueService(db, tier, catalog=catalog)


def _require_confirmation(body: ClearConfirmationDTO) -> None:
    if not body.confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Bulk clear requires {\"confirm\": true}",
        )


# ==================== Admin Queue Endpoints ====================

@router.get("/{tier}/queue", response_model=QueueListingResponse)
def list_queue(
    tier: SlotTier,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """
    Admin view of a pool: every displayable request with its presentation
    state, queue position and local-time strings.
    """
    try:
        return _service(db, tier, catalog).list_queue()
    except SlotSchedulingError as e:
        raise to_http_exception(e)


@router.post(
    "/{tier}/requests",
    response_model=PresentedSlotRequest,
    status_code=status.HTTP_201_CREATED,
)
def create_request(
    tier: SlotTier,
    request_in: SlotRequestCreateDTO,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """
    Schedule a resource in the pool.

    **Validations**:
    - resource_key must not be blank
    - requested_start_at is ISO 8601 with offset, or local wall-clock
      `YYYY-MM-DDTHH:MM` in the pool timezone; omitted means now
    - duration_hours must be between 1 and 168
    """
    service = _service(db, tier, catalog)
    try:
        created = service.create(
            request_in.resource_key,
            requested_start_at=request_in.requested_start_at,
            duration_hours=request_in.duration_hours,
        )
        return service.present_request(created)
    except SlotSchedulingError as e:
        raise to_http_exception(e)


@router.put("/{tier}/requests/{request_id}", response_model=PresentedSlotRequest)
def reschedule_request(
    tier: SlotTier,
    request_id: str,
    request_in: SlotRescheduleDTO,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """
    Move a scheduled request. Only scheduled requests can be rescheduled.
    """
    service = _service(db, tier, catalog)
    try:
        updated = service.reschedule(
            request_id,
            request_in.requested_start_at,
            duration_hours=request_in.duration_hours,
        )
        return service.present_request(updated)
    except SlotSchedulingError as e:
        raise to_http_exception(e)


@router.post(
    "/{tier}/requests/{request_id}/cancel",
    status_code=status.HTTP_204_NO_CONTENT,
)
def cancel_request(
    tier: SlotTier,
    request_id: str,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    try:
        _service(db, tier, catalog).cancel(request_id)
    except SlotSchedulingError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{tier}/clear-scheduled", response_model=ClearResultResponse)
def clear_scheduled(
    tier: SlotTier,
    body: ClearConfirmationDTO,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """Cancel every scheduled request of the pool."""
    _require_confirmation(body)
    try:
        count = _service(db, tier, catalog).clear_scheduled()
    except SlotSchedulingError as e:
        raise to_http_exception(e)
    return ClearResultResponse(tier=tier, count=count)


@router.post("/{tier}/clear-history", response_model=ClearResultResponse)
def clear_history(
    tier: SlotTier,
    body: ClearConfirmationDTO,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """Delete completed and cancelled requests of the pool."""
    _require_confirmation(body)
    try:
        count = _service(db, tier, catalog).clear_history()
    except SlotSchedulingError as e:
        raise to_http_exception(e)
    return ClearResultResponse(tier=tier, count=count)


@router.post("/{tier}/clear-all", response_model=ClearResultResponse)
def clear_all(
    tier: SlotTier,
    body: ClearConfirmationDTO,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """Delete every request of the pool."""
    _require_confirmation(body)
    try:
        count = _service(db, tier, catalog).clear_all()
    except SlotSchedulingError as e:
        raise to_http_exception(e)
    return ClearResultResponse(tier=tier, count=count)


# ==================== Public Endpoints ====================

@router.get("/{tier}/projection", response_model=SlotProjectionResponse)
def get_projection(
    tier: SlotTier,
    db: Session = Depends(get_db),
    catalog: EventCatalog = Depends(deps.get_catalog),
):
    """
    What is featured right now, what is coming up, and what just ended.
    No authentication required.
    """
    try:
        return _service(db, tier, catalog).get_projection()
    except SlotSchedulingError as e:
        raise to_http_exception(e)
