# featured_slots/api/deps.py
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from featured_slots.core.config import settings
from featured_slots.services.slots.catalog import EventCatalog, get_event_catalog


# Define the header we expect the key to be in
api_key_header = APIKeyHeader(name="X-Internal-Api-Key", auto_error=False)


def get_internal_api_key(api_key: str = Security(api_key_header)) -> str:
    """
    Checks for and validates the internal API key from the request header.
    """
    if settings.INTERNAL_API_KEY and api_key == settings.INTERNAL_API_KEY:
        return api_key
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing Internal API Key",
    )


def get_catalog() -> EventCatalog:
    return get_event_catalog()
