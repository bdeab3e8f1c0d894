# featured_slots/services/slots/catalog.py
"""
Event catalog client for slot listings.

The catalog is an external, read-only collaborator: it maps a resource key
to a display name and date. It is never consulted for scheduling decisions,
so lookup failures degrade to showing the raw resource key.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol

import httpx

from featured_slots.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    date: Optional[str] = None


class EventCatalog(Protocol):
    def lookup(self, resource_keys: Iterable[str]) -> Dict[str, CatalogEntry]:
        ...


class NullEventCatalog:
    """Used when no catalog is configured. Every item displays as its key."""

    def lookup(self, resource_keys: Iterable[str]) -> Dict[str, CatalogEntry]:
        return {}


class HttpEventCatalog:
    """
    Looks up events through the event service internal API.

    GET {base_url}/internal/events/{key} -> {"name": ..., "date": ...}
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 5.0):
        base_url = base_url.rstrip("/")
        # Strip /graphql suffix if present (common misconfiguration)
        if base_url.endswith("/graphql"):
            base_url = base_url[:-8]
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout

    def lookup(self, resource_keys: Iterable[str]) -> Dict[str, CatalogEntry]:
        entries: Dict[str, CatalogEntry] = {}
        keys = sorted(set(resource_keys))
        if not keys:
            return entries

        headers = {"x-api-key": self.api_key} if self.api_key else {}
        try:
            with httpx.Client(timeout=self.timeout, headers=headers) as client:
                for key in keys:
                    response = client.get(f"{self.base_url}/internal/events/{key}")
                    if response.status_code == 200:
                        data = response.json()
                        entries[key] = CatalogEntry(
                            name=data.get("name") or key,
                            date=data.get("date"),
                        )
                    elif response.status_code != 404:
                        logger.warning(
                            f"Event catalog returned {response.status_code} for {key}"
                        )
        except httpx.HTTPError as e:
            logger.warning(f"Event catalog lookup failed: {e}")

        return entries


def get_event_catalog() -> EventCatalog:
    if settings.EVENT_SERVICE_URL:
        return HttpEventCatalog(settings.EVENT_SERVICE_URL, api_key=settings.INTERNAL_API_KEY)
    return NullEventCatalog()
