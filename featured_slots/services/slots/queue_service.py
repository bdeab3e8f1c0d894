# featured_slots/services/slots/queue_service.py
"""
Slot Queue Service

Handles the mutations of one slot pool:
- Schedule / reschedule / cancel a request
- Bulk clear of the queue or of history
- Completion sweep

Every mutation locks the pool, writes the row change, re-runs the planner
over the whole live set and commits once. Either all of it lands or none.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Set, TypeVar, Union

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from featured_slots import crud
from featured_slots.core.exceptions import (
    ConcurrentModificationError,
    NotSchedulableError,
    SlotRequestNotFoundError,
    SlotValidationError,
    StoreUnavailableError,
)
from featured_slots.models.slot_request import SlotRequest
from featured_slots.schemas.slot import (
    LifecycleStatus,
    PresentationState,
    PresentedSlotRequest,
    QueueListingResponse,
    SlotProjectionResponse,
    SlotTier,
)
from featured_slots.services.slots.catalog import EventCatalog, NullEventCatalog
from featured_slots.services.slots.config import (
    MAX_DURATION_HOURS,
    MAX_LEAD_TIME,
    MIN_DURATION_HOURS,
    SlotPoolConfig,
    get_pool_config,
)
from featured_slots.services.slots.planner import (
    PlannedWindow,
    PlanningEntry,
    allocate_windows,
    queue_positions,
    scheduling_order,
)
from featured_slots.services.slots.presenter import present
from featured_slots.utils.time_utils import ensure_utc, parse_requested_start, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CREATED_BY = "admin-panel"


class SlotQueueService:
    """Mutations and listings for one slot pool (spotlight or promoted)."""

    def __init__(
        self,
        db: Session,
        tier: SlotTier,
        *,
        catalog: Optional[EventCatalog] = None,
        clock: Callable[[], datetime] = utc_now,
        pool_config: Optional[SlotPoolConfig] = None,
    ):
        self.db = db
        self.tier = SlotTier(tier)
        self.config = pool_config or get_pool_config(self.tier)
        self.catalog = catalog or NullEventCatalog()
        self.clock = clock

    def _now(self) -> datetime:
        return ensure_utc(self.clock())

    # ========================================
    # Validation
    # ========================================

    def _validate_resource_key(self, resource_key: str) -> str:
        key = (resource_key or "").strip()
        if not key:
            raise SlotValidationError("resource_key is required")
        return key

    def _validate_duration(self, duration_hours: Optional[int], fallback: int) -> int:
        if duration_hours is None:
            return fallback
        # bool is an int subclass; reject it explicitly
        if isinstance(duration_hours, bool) or not isinstance(duration_hours, int):
            raise SlotValidationError(
                f"duration_hours must be an integer, got {duration_hours!r}"
            )
        if not MIN_DURATION_HOURS <= duration_hours <= MAX_DURATION_HOURS:
            raise SlotValidationError(
                f"duration_hours must be between {MIN_DURATION_HOURS} and "
                f"{MAX_DURATION_HOURS}, got {duration_hours}"
            )
        return duration_hours

    def _validate_requested_start(
        self, raw: Union[str, datetime, None], now: datetime
    ) -> datetime:
        start = parse_requested_start(raw, self.config.zone, now=now)
        if abs(start - now) > MAX_LEAD_TIME:
            raise SlotValidationError(
                f"requested_start_at {start.isoformat()} is more than "
                f"{MAX_LEAD_TIME.days} days from now"
            )
        return start

    def _validate_window(self, start: datetime, duration_hours: int) -> None:
        try:
            start + timedelta(hours=duration_hours)
        except OverflowError as e:
            raise SlotValidationError(
                f"A {duration_hours}h window starting {start.isoformat()} is out of range"
            ) from e

    # ========================================
    # Transaction boundary
    # ========================================

    def _in_transaction(self, operation: Callable[[], T], now: datetime) -> T:
        """
        Run `operation` under the pool lock, replan and commit.

        Any failure rolls back the whole unit and is re-raised as one of the
        scheduling errors where the store is the cause.
        """
        try:
            pool = crud.slot_pool.lock(self.db, self.tier)
            result = operation()
            self._replan(now)
            crud.slot_pool.touch(self.db, pool, now)
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            logger.warning(f"Concurrent modification on {self.tier.value} pool: {e}")
            raise ConcurrentModificationError(
                f"The {self.tier.value} pool was modified concurrently. Retry the operation."
            ) from e
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Conflicting write on {self.tier.value} pool: {e}")
            raise ConcurrentModificationError(
                f"Conflicting write on the {self.tier.value} pool. Retry the operation."
            ) from e
        except (OperationalError, InterfaceError) as e:
            self.db.rollback()
            logger.error(f"Store unavailable for {self.tier.value} pool: {e}")
            raise StoreUnavailableError(str(e)) from e
        except Exception:
            self.db.rollback()
            raise
        return result

    def _replan(self, now: datetime) -> int:
        """
        Recompute every scheduled window and sweep the ones that have ended.

        Returns the number of requests moved to completed.
        """
        rows = crud.slot_request.list_scheduled(self.db, tier=self.tier)
        by_id = {row.id: row for row in rows}
        windows = allocate_windows(
            [PlanningEntry.from_row(row) for row in rows],
            self.config.max_concurrent,
            now=now,
        )

        changed = 0
        for window in windows:
            if crud.slot_request.set_window(
                by_id[window.id],
                effective_start_at=window.effective_start_at,
                effective_end_at=window.effective_end_at,
            ):
                changed += 1

        swept = 0
        for window in windows:
            if window.effective_end_at <= now:
                crud.slot_request.set_status(
                    self.db, request=by_id[window.id], status=LifecycleStatus.COMPLETED
                )
                swept += 1

        self.db.flush()
        if changed or swept:
            logger.info(
                f"Replanned {self.tier.value} pool: {len(windows)} scheduled, "
                f"{changed} windows changed, {swept} completed"
            )
        return swept

    def _get_scheduled(self, request_id: str) -> SlotRequest:
        request = crud.slot_request.get_in_tier(self.db, tier=self.tier, id=request_id)
        if request is None:
            raise SlotRequestNotFoundError(request_id)
        if request.status != LifecycleStatus.SCHEDULED.value:
            logger.warning(
                f"Rejected mutation of {request_id} in {self.tier.value} pool: status {request.status}"
            )
            raise NotSchedulableError(request_id, request.status)
        return request

    # ========================================
    # Mutations
    # ========================================

    def create(
        self,
        resource_key: str,
        requested_start_at: Union[str, datetime, None] = None,
        duration_hours: Optional[int] = None,
        created_by: str = DEFAULT_CREATED_BY,
    ) -> SlotRequest:
        """Schedule a new request. An omitted start means "feature now"."""
        now = self._now()
        key = self._validate_resource_key(resource_key)
        duration = self._validate_duration(duration_hours, self.config.default_duration_hours)
        start = self._validate_requested_start(requested_start_at, now)
        self._validate_window(start, duration)

        def operation() -> SlotRequest:
            return crud.slot_request.create_request(
                self.db,
                tier=self.tier,
                resource_key=key,
                requested_start_at=start,
                duration_hours=duration,
                created_by=(created_by or DEFAULT_CREATED_BY).strip(),
            )

        request = self._in_transaction(operation, now)
        logger.info(
            f"Scheduled {request.id} ({key}) in {self.tier.value} pool: requested "
            f"{start.isoformat()}, effective {request.effective_start_at} -> {request.effective_end_at}"
        )
        return request

    def reschedule(
        self,
        request_id: str,
        requested_start_at: Union[str, datetime],
        duration_hours: Optional[int] = None,
    ) -> SlotRequest:
        """Move a scheduled request. An omitted duration keeps the current one."""
        now = self._now()
        if requested_start_at is None or (
            isinstance(requested_start_at, str) and not requested_start_at.strip()
        ):
            raise SlotValidationError("requested_start_at is required to reschedule")
        start = self._validate_requested_start(requested_start_at, now)
        if duration_hours is not None:
            self._validate_duration(duration_hours, self.config.default_duration_hours)
        self._validate_window(start, duration_hours or MAX_DURATION_HOURS)

        def operation() -> SlotRequest:
            request = self._get_scheduled(request_id)
            duration = duration_hours if duration_hours is not None else request.duration_hours
            return crud.slot_request.apply_reschedule(
                self.db,
                request=request,
                requested_start_at=start,
                duration_hours=duration,
            )

        request = self._in_transaction(operation, now)
        logger.info(
            f"Rescheduled {request.id} in {self.tier.value} pool: requested {start.isoformat()}, "
            f"effective {request.effective_start_at} -> {request.effective_end_at}"
        )
        return request

    def cancel(self, request_id: str) -> None:
        """Cancel a scheduled request and free its slot."""
        now = self._now()

        def operation() -> None:
            request = self._get_scheduled(request_id)
            crud.slot_request.set_status(self.db, request=request, status=LifecycleStatus.CANCELLED)

        self._in_transaction(operation, now)
        logger.info(f"Cancelled {request_id} in {self.tier.value} pool")

    def clear_scheduled(self) -> int:
        """Cancel (not delete) every scheduled request in the pool."""
        now = self._now()
        count = self._in_transaction(
            lambda: crud.slot_request.cancel_all_scheduled(self.db, tier=self.tier), now
        )
        logger.info(f"Cleared {count} scheduled requests from {self.tier.value} pool")
        return count

    def clear_history(self) -> int:
        """Delete every completed or cancelled request in the pool."""
        now = self._now()
        count = self._in_transaction(
            lambda: crud.slot_request.delete_history(self.db, tier=self.tier), now
        )
        logger.info(f"Deleted {count} history rows from {self.tier.value} pool")
        return count

    def clear_all(self) -> int:
        """Delete every request in the pool, scheduled ones included."""
        now = self._now()
        count = self._in_transaction(
            lambda: crud.slot_request.delete_all(self.db, tier=self.tier), now
        )
        logger.info(f"Deleted all {count} rows from {self.tier.value} pool")
        return count

    def sweep(self) -> int:
        """Mark scheduled requests whose window has ended by the service clock as completed."""
        now = self._now()
        return self._in_transaction(lambda: self._replan(now), now)

    # ========================================
    # Listings
    # ========================================

    def _stored_windows(self, rows: List[SlotRequest]) -> List[PlannedWindow]:
        """Committed windows of the scheduled rows, in scheduling order."""
        scheduled = [
            row for row in rows
            if row.status == LifecycleStatus.SCHEDULED.value
            and row.effective_start_at is not None
            and row.effective_end_at is not None
        ]
        ordered = scheduling_order(PlanningEntry.from_row(row) for row in scheduled)
        return [
            PlannedWindow(entry.id, entry.effective_start_at, entry.effective_end_at)
            for entry in ordered
        ]

    def _present_rows(self, rows: List[SlotRequest], now: datetime) -> List[PresentedSlotRequest]:
        positions = queue_positions(self._stored_windows(rows), now)
        names = self.catalog.lookup(row.resource_key for row in rows)
        presented = []
        for row in rows:
            entry = names.get(row.resource_key)
            item = present(
                row,
                now,
                self.config,
                queue_position=positions.get(row.id),
                event_name=entry.name if entry else None,
            )
            if item is not None:
                presented.append(item)
        return presented

    def present_request(self, request: SlotRequest, now: Optional[datetime] = None) -> PresentedSlotRequest:
        """
        Display view of a single request, with its queue position in the pool.

        Rows past the recent-ended window still get a view here (state
        recent-ended) since the caller asked for them by id.
        """
        now = ensure_utc(now) if now is not None else self._now()
        rows = crud.slot_request.list_scheduled(self.db, tier=self.tier)
        positions = queue_positions(self._stored_windows(rows), now)
        names = self.catalog.lookup([request.resource_key])
        entry = names.get(request.resource_key)
        return present(
            request,
            now,
            self.config,
            queue_position=positions.get(request.id),
            event_name=entry.name if entry else None,
            include_aged=True,
        )

    def list_queue(self, now: Optional[datetime] = None) -> QueueListingResponse:
        """
        Sweep the pool and return the presented queue.

        The sweep always runs at the service clock. `now` only picks the
        instant the rows are presented at and never reaches the store.
        """
        self._in_transaction(lambda: None, self._now())
        now = ensure_utc(now) if now is not None else self._now()

        rows = crud.slot_request.list_by_tier(self.db, tier=self.tier)
        items = self._present_rows(rows, now)
        return QueueListingResponse(
            tier=self.tier,
            active_count=sum(1 for item in items if item.presentation_state is PresentationState.ACTIVE),
            history_count=crud.slot_request.count_history(self.db, tier=self.tier),
            slot_config=self.config.to_response(),
            queue=items,
        )

    def get_projection(self, now: Optional[datetime] = None) -> SlotProjectionResponse:
        """
        Active, upcoming and recently ended requests, each ordered by effective start.

        A plain read of the committed windows: no lock, no sweep, no commit.
        Rows whose window has ended but that the sweep has not reached yet
        already present as recent-ended.
        """
        now = ensure_utc(now) if now is not None else self._now()
        try:
            rows = crud.slot_request.list_by_tier(self.db, tier=self.tier)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Store unavailable for {self.tier.value} projection: {e}")
            raise StoreUnavailableError(str(e)) from e
        items = self._present_rows(rows, now)

        def by_state(state: PresentationState) -> List[PresentedSlotRequest]:
            selected = [item for item in items if item.presentation_state is state]
            return sorted(
                selected,
                key=lambda item: (item.effective_start_at or item.requested_start_at, item.id),
            )

        return SlotProjectionResponse(
            tier=self.tier,
            active=by_state(PresentationState.ACTIVE),
            upcoming=by_state(PresentationState.UPCOMING),
            recent_ended=by_state(PresentationState.RECENT_ENDED),
        )

    def active_resource_keys(self, now: Optional[datetime] = None) -> Set[str]:
        """Resource keys currently occupying a slot."""
        return {item.resource_key for item in self.get_projection(now).active}
