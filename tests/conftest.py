# tests/conftest.py
import os

# Settings are read at import time; point them at SQLite before importing the app.
os.environ["ENV"] = "local"
os.environ["DATABASE_URL_LOCAL"] = "sqlite://"
os.environ["INTERNAL_API_KEY"] = "test-key"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["EVENT_SERVICE_URL"] = ""

import pytest
from starlette.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from featured_slots.main import app
from featured_slots.api import deps
from featured_slots.db.session import get_db
from featured_slots.models import Base
from featured_slots.services.slots.catalog import NullEventCatalog

API_KEY_HEADERS = {"X-Internal-Api-Key": "test-key"}


# --- Test Database Setup ---
@pytest.fixture(scope="function")
def engine():
    """A fresh in-memory database per test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def test_client_e2e(db_session):
    """
    Provides a TestClient that uses the test database and no event catalog.
    """

    def override_get_db_e2e():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db_e2e
    app.dependency_overrides[deps.get_catalog] = lambda: NullEventCatalog()

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def api_headers():
    return dict(API_KEY_HEADERS)
