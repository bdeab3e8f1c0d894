# featured_slots/schemas/slot.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class SlotTier(str, Enum):
    SPOTLIGHT = "spotlight"
    PROMOTED = "promoted"


class LifecycleStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PresentationState(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    RECENT_ENDED = "recent-ended"
    CANCELLED = "cancelled"


# ==================== Request DTOs ====================

class SlotRequestCreateDTO(BaseModel):
    resource_key: str = Field(..., min_length=1, json_schema_extra={"example": "evt_fete_de_la_musique"})
    # Blank or omitted means "feature now". Naive values are pool-local wall-clock time.
    requested_start_at: Optional[str] = Field(None, json_schema_extra={"example": "2026-06-21T18:00"})
    duration_hours: Optional[int] = Field(None, json_schema_extra={"example": 48})


class SlotRescheduleDTO(BaseModel):
    requested_start_at: str = Field(..., json_schema_extra={"example": "2026-06-22T10:00"})
    duration_hours: Optional[int] = Field(None, json_schema_extra={"example": 24})


class ClearConfirmationDTO(BaseModel):
    confirm: bool = False


class FulfillmentDTO(BaseModel):
    tier: SlotTier
    resource_key: str = Field(..., min_length=1)
    requested_start_at: Optional[str] = None
    duration_hours: Optional[int] = None
    order_ref: Optional[str] = Field(None, json_schema_extra={"example": "cs_test_a1b2c3"})


# ==================== Response DTOs ====================

class SlotRequestResponse(BaseModel):
    id: str
    tier: SlotTier
    resource_key: str
    requested_start_at: datetime
    duration_hours: int
    status: LifecycleStatus
    effective_start_at: Optional[datetime] = None
    effective_end_at: Optional[datetime] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PresentedSlotRequest(SlotRequestResponse):
    event_name: str
    presentation_state: PresentationState
    queue_position: Optional[int] = None
    requested_start_local: str
    requested_start_input: str
    effective_start_local: Optional[str] = None
    effective_end_local: Optional[str] = None


class SlotPoolConfigResponse(BaseModel):
    tier: SlotTier
    max_concurrent: int
    default_duration_hours: int
    timezone: str
    recent_ended_window_hours: int


class QueueListingResponse(BaseModel):
    tier: SlotTier
    active_count: int
    history_count: int
    slot_config: SlotPoolConfigResponse
    queue: List[PresentedSlotRequest]


class SlotProjectionResponse(BaseModel):
    tier: SlotTier
    active: List[PresentedSlotRequest]
    upcoming: List[PresentedSlotRequest]
    recent_ended: List[PresentedSlotRequest]


class ClearResultResponse(BaseModel):
    tier: SlotTier
    count: int
