"""
Tests for the periodic slot sweep job.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from featured_slots.background_tasks.slot_tasks import sweep_completed_slots
from featured_slots.core.exceptions import StoreUnavailableError
from featured_slots.models.slot_request import SlotRequest
from featured_slots.schemas.slot import SlotTier
from featured_slots.services.slots.queue_service import SlotQueueService
from tests.utils.slot_request import FrozenClock, hours, make_pool_config

LONG_AGO = datetime(2020, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_sweep_marks_ended_requests_completed(db_session):
    service = SlotQueueService(
        db_session,
        SlotTier.SPOTLIGHT,
        clock=FrozenClock(LONG_AGO - hours(1)),
        pool_config=make_pool_config(max_concurrent=3),
    )
    request = service.create("evt_old", requested_start_at=LONG_AGO, duration_hours=2)
    request_id = request.id

    with patch("featured_slots.background_tasks.slot_tasks.SessionLocal", return_value=db_session):
        assert sweep_completed_slots() is True

    assert db_session.get(SlotRequest, request_id).status == "completed"


@patch("featured_slots.background_tasks.slot_tasks.SlotQueueService")
@patch("featured_slots.background_tasks.slot_tasks.SessionLocal")
def test_sweep_reports_failure_and_continues(mock_session_local, mock_service_cls):
    db = MagicMock()
    mock_session_local.return_value = db
    failing = MagicMock()
    failing.sweep.side_effect = StoreUnavailableError("database is down")
    healthy = MagicMock()
    healthy.sweep.return_value = 0
    mock_service_cls.side_effect = [failing, healthy]

    assert sweep_completed_slots() is False

    healthy.sweep.assert_called_once()
    db.close.assert_called_once()
