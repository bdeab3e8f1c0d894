# featured_slots/crud/__init__.py

from .crud_slot_pool import slot_pool
from .crud_slot_request import slot_request
