# featured_slots/db/base_class.py

from sqlalchemy.orm import declarative_base

# All SQLAlchemy models in the project inherit from this class.
Base = declarative_base()
