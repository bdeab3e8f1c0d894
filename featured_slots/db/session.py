# featured_slots/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from featured_slots.core.config import settings

# The engine owns the connection pool for the configured database.
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

# One Session per request or background job; mutations commit explicitly.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        # Always close, even if the request failed.
        db.close()
