from unittest.mock import MagicMock

from featured_slots.schemas.slot import SlotTier
from featured_slots.services.slots.fulfillment import FULFILLMENT_CREATED_BY, fulfill_placement
from featured_slots.services.slots.queue_service import SlotQueueService
from featured_slots.utils.time_utils import ensure_utc
from tests.utils.slot_request import T0, FrozenClock, hours, make_pool_config


def test_fulfillment_schedules_into_selected_pool(db_session):
    service = SlotQueueService(
        db_session,
        SlotTier.PROMOTED,
        clock=FrozenClock(T0 - hours(1)),
        pool_config=make_pool_config(tier=SlotTier.PROMOTED, max_concurrent=5),
    )

    request = fulfill_placement(
        db_session,
        tier=SlotTier.PROMOTED,
        resource_key="evt_partner",
        requested_start_at="2026-06-01T10:00:00Z",
        duration_hours=24,
        order_ref="cs_test_123",
        service=service,
    )

    assert request.tier == "promoted"
    assert request.created_by == FULFILLMENT_CREATED_BY
    assert ensure_utc(request.effective_start_at) == T0
    assert ensure_utc(request.effective_end_at) == T0 + hours(24)


def test_fulfillment_passes_through_to_create():
    service = MagicMock()
    service.tier = SlotTier.SPOTLIGHT

    fulfill_placement(
        MagicMock(),
        tier=SlotTier.SPOTLIGHT,
        resource_key="evt_partner",
        service=service,
    )

    service.create.assert_called_once_with(
        "evt_partner",
        requested_start_at=None,
        duration_hours=None,
        created_by=FULFILLMENT_CREATED_BY,
    )
