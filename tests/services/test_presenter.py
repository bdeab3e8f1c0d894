"""
Tests for slot request presentation.

State is a pure function of status, effective window and "now";
the pool timezone only changes the formatted strings.
"""

from datetime import datetime, timedelta, timezone

from featured_slots.models.slot_request import SlotRequest
from featured_slots.schemas.slot import PresentationState, SlotTier
from featured_slots.services.slots.presenter import derive_state, present
from tests.utils.slot_request import make_pool_config

T0 = datetime(2026, 6, 20, 10, 0, tzinfo=timezone.utc)
WINDOW = timedelta(hours=48)


def make_request(status="scheduled", start=T0, end=T0 + timedelta(hours=2)):
    return SlotRequest(
        id="slot_abc123",
        tier=SlotTier.SPOTLIGHT.value,
        resource_key="evt_fete",
        requested_start_at=T0,
        duration_hours=2,
        status=status,
        effective_start_at=start,
        effective_end_at=end,
        created_by="admin-panel",
        created_at=T0 - timedelta(days=1),
        updated_at=T0 - timedelta(days=1),
    )


class TestDeriveState:

    def test_upcoming_before_start(self):
        assert derive_state("scheduled", T0, T0 + timedelta(hours=2), T0 - timedelta(minutes=1), WINDOW) is PresentationState.UPCOMING

    def test_active_from_start_inclusive(self):
        assert derive_state("scheduled", T0, T0 + timedelta(hours=2), T0, WINDOW) is PresentationState.ACTIVE

    def test_recent_ended_at_end_exclusive(self):
        end = T0 + timedelta(hours=2)
        assert derive_state("scheduled", T0, end, end, WINDOW) is PresentationState.RECENT_ENDED

    def test_completed_within_window(self):
        end = T0 + timedelta(hours=2)
        assert derive_state("completed", T0, end, end + timedelta(hours=47), WINDOW) is PresentationState.RECENT_ENDED

    def test_completed_past_window_is_filtered_out(self):
        end = T0 + timedelta(hours=2)
        assert derive_state("completed", T0, end, end + WINDOW, WINDOW) is None

    def test_cancelled_wins_over_time(self):
        assert derive_state("cancelled", T0, T0 + timedelta(hours=2), T0, WINDOW) is PresentationState.CANCELLED
        assert derive_state("cancelled", None, None, T0, WINDOW) is PresentationState.CANCELLED

    def test_unplanned_scheduled_row_is_upcoming(self):
        assert derive_state("scheduled", None, None, T0, WINDOW) is PresentationState.UPCOMING


class TestPresent:

    def setup_method(self):
        self.config = make_pool_config(max_concurrent=3)

    def test_formats_times_in_pool_timezone(self):
        item = present(make_request(), T0 - timedelta(hours=1), self.config, queue_position=2)

        assert item.presentation_state is PresentationState.UPCOMING
        assert item.queue_position == 2
        # Paris is UTC+2 in June
        assert item.effective_start_local == "20/06/2026, 12:00"
        assert item.effective_end_local == "20/06/2026, 14:00"
        assert item.requested_start_input == "2026-06-20T12:00"

    def test_queue_position_dropped_once_active(self):
        item = present(make_request(), T0 + timedelta(minutes=5), self.config, queue_position=1)

        assert item.presentation_state is PresentationState.ACTIVE
        assert item.queue_position is None

    def test_event_name_falls_back_to_resource_key(self):
        assert present(make_request(), T0, self.config).event_name == "evt_fete"
        assert present(make_request(), T0, self.config, event_name="Fête").event_name == "Fête"

    def test_aged_out_row_returns_none(self):
        request = make_request(status="completed")

        assert present(request, T0 + timedelta(days=5), self.config) is None

    def test_aged_out_row_shown_when_asked_for(self):
        request = make_request(status="completed")

        item = present(request, T0 + timedelta(days=5), self.config, include_aged=True)

        assert item.presentation_state is PresentationState.RECENT_ENDED

    def test_same_input_same_output(self):
        request = make_request()
        now = T0 + timedelta(minutes=30)

        assert present(request, now, self.config) == present(request, now, self.config)
