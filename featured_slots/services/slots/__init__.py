# featured_slots/services/slots/__init__.py
"""
Featured slot scheduling.

Planner: pure admission of scheduled requests into capacity-bounded windows
Presenter: display state of a request at a given instant
Queue service: transactional mutations of a pool
"""

from .config import SlotPoolConfig, get_pool_config
from .planner import PlannedWindow, PlanningEntry, allocate_windows, queue_positions
from .presenter import derive_state, present
from .queue_service import SlotQueueService
from .fulfillment import fulfill_placement

__all__ = [
    "SlotPoolConfig",
    "get_pool_config",
    "PlannedWindow",
    "PlanningEntry",
    "allocate_windows",
    "queue_positions",
    "derive_state",
    "present",
    "SlotQueueService",
    "fulfill_placement",
]
