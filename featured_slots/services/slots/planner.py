# featured_slots/services/slots/planner.py
"""
Admission planner for slot pools.

Each of the pool's `max_concurrent` slots behaves like a machine and each
request is a job with a release time (`requested_start_at`) and a fixed
duration. Requests are taken in (requested_start_at, created_at) order and
each goes to the slot that frees up earliest:

    effective_start = max(requested_start_at, slot_free_at)
    effective_end   = effective_start + duration_hours

No slot ever serves two overlapping windows, so at any instant at most
`max_concurrent` windows are open.

The planner holds no state. Given `now`, a request whose previous window
has started by `now` keeps that window and occupies its slot until it
ends, so a replan never moves anything backward past a started request.

Every other request is placed from scratch: it is pushed forward only by
contention, never by `now`. A past-dated request starts at its requested
time when a slot is free.
"""

import heapq
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from featured_slots.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)

# Slots that have never been used are free since forever.
ALWAYS_FREE = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class PlanningEntry:
    id: str
    requested_start_at: datetime
    duration_hours: int
    created_at: datetime
    resource_key: str = ""
    effective_start_at: Optional[datetime] = None
    effective_end_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "PlanningEntry":
        return cls(
            id=row.id,
            requested_start_at=ensure_utc(row.requested_start_at),
            duration_hours=row.duration_hours,
            created_at=ensure_utc(row.created_at),
            resource_key=row.resource_key or "",
            effective_start_at=ensure_utc(row.effective_start_at) if row.effective_start_at else None,
            effective_end_at=ensure_utc(row.effective_end_at) if row.effective_end_at else None,
        )


@dataclass(frozen=True)
class PlannedWindow:
    id: str
    effective_start_at: datetime
    effective_end_at: datetime

    def is_active(self, now: datetime) -> bool:
        return self.effective_start_at <= now < self.effective_end_at


def scheduling_order(entries: Iterable[PlanningEntry]) -> List[PlanningEntry]:
    """FIFO by requested start, then submission time; key and id only break exact ties."""
    return sorted(
        entries,
        key=lambda entry: (
            ensure_utc(entry.requested_start_at),
            ensure_utc(entry.created_at),
            entry.resource_key,
            entry.id,
        ),
    )


def _is_held(entry: PlanningEntry, now: Optional[datetime]) -> bool:
    return (
        now is not None
        and entry.effective_start_at is not None
        and entry.effective_end_at is not None
        and ensure_utc(entry.effective_start_at) <= now
    )


def allocate_windows(
    entries: Sequence[PlanningEntry],
    max_concurrent: int,
    now: Optional[datetime] = None,
) -> List[PlannedWindow]:
    """
    Compute the effective window of every scheduled request.

    Args:
        entries: The pool's scheduled requests (cancelled/completed excluded)
        max_concurrent: Number of slots in the pool
        now: Replan instant. Windows started by `now` are held; None holds nothing.

    Returns:
        One PlannedWindow per entry, in scheduling order.
    """
    if max_concurrent < 1:
        raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")

    now = ensure_utc(now) if now is not None else None
    ordered = scheduling_order(entries)

    free_at = [ALWAYS_FREE] * max_concurrent
    heapq.heapify(free_at)
    windows: Dict[str, PlannedWindow] = {}

    held = sorted(
        (entry for entry in ordered if _is_held(entry, now)),
        key=lambda entry: ensure_utc(entry.effective_start_at),
    )
    for entry in held:
        start = ensure_utc(entry.effective_start_at)
        end = ensure_utc(entry.effective_end_at)
        slot_free_at = heapq.heappop(free_at)
        if slot_free_at > start:
            # Started windows overlap beyond capacity (capacity was lowered)
            logger.warning(
                f"Held window {entry.id} [{start.isoformat()}, {end.isoformat()}) "
                f"exceeds max_concurrent={max_concurrent}; keeping it until it ends"
            )
        heapq.heappush(free_at, max(slot_free_at, end))
        windows[entry.id] = PlannedWindow(entry.id, start, end)

    for entry in ordered:
        if entry.id in windows:
            continue

        start = max(ensure_utc(entry.requested_start_at), free_at[0])
        end = start + timedelta(hours=entry.duration_hours)

        heapq.heapreplace(free_at, end)
        windows[entry.id] = PlannedWindow(entry.id, start, end)

    return [windows[entry.id] for entry in ordered]


def queue_positions(windows: Sequence[PlannedWindow], now: datetime) -> Dict[str, int]:
    """
    1-based rank of every window that has not started yet, by effective start.

    `windows` must be in scheduling order; ties on effective start keep that order.
    """
    now = ensure_utc(now)
    waiting = [
        (window.effective_start_at, index, window.id)
        for index, window in enumerate(windows)
        if window.effective_start_at > now
    ]
    waiting.sort()
    return {window_id: position for position, (_, _, window_id) in enumerate(waiting, start=1)}


def count_active(windows: Iterable[PlannedWindow], now: datetime) -> int:
    now = ensure_utc(now)
    return sum(1 for window in windows if window.is_active(now))
