# featured_slots/models/__init__.py
# Import all models so Base.metadata knows every table.

from featured_slots.db.base_class import Base
from featured_slots.models.slot_pool import SlotPool
from featured_slots.models.slot_request import SlotRequest
