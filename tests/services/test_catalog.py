from unittest.mock import MagicMock, patch

import httpx

from featured_slots.services.slots.catalog import HttpEventCatalog, NullEventCatalog


def _response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    return response


def test_null_catalog_knows_nothing():
    assert NullEventCatalog().lookup(["evt_a"]) == {}


def test_strips_graphql_suffix():
    catalog = HttpEventCatalog("http://event-service:8000/graphql/")
    assert catalog.base_url == "http://event-service:8000"


@patch("featured_slots.services.slots.catalog.httpx.Client")
def test_lookup_resolves_found_events(mock_client_cls):
    client = mock_client_cls.return_value.__enter__.return_value
    client.get.side_effect = lambda url: (
        _response(200, {"name": "Fête", "date": "2026-06-21"})
        if url.endswith("/evt_a")
        else _response(404)
    )

    entries = HttpEventCatalog("http://event-service:8000", api_key="k").lookup(["evt_a", "evt_b"])

    assert set(entries) == {"evt_a"}
    assert entries["evt_a"].name == "Fête"
    assert entries["evt_a"].date == "2026-06-21"


@patch("featured_slots.services.slots.catalog.httpx.Client")
def test_lookup_failure_degrades_to_empty(mock_client_cls):
    client = mock_client_cls.return_value.__enter__.return_value
    client.get.side_effect = httpx.ConnectError("refused")

    assert HttpEventCatalog("http://event-service:8000").lookup(["evt_a"]) == {}
