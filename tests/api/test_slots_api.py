# tests/api/test_slots_api.py
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

BASE = "/api/v1/slots"


def _future(hours: int) -> str:
    start = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(hours=hours)
    return start.isoformat().replace("+00:00", "Z")


def test_queue_requires_api_key(test_client_e2e: TestClient):
    response = test_client_e2e.get(f"{BASE}/spotlight/queue")
    assert response.status_code == 401


def test_unknown_tier_is_rejected(test_client_e2e: TestClient, api_headers):
    response = test_client_e2e.get(f"{BASE}/gold/queue", headers=api_headers)
    assert response.status_code == 422


def test_create_and_list(test_client_e2e: TestClient, api_headers):
    payload = {"resource_key": "evt_fete", "requested_start_at": _future(24), "duration_hours": 12}

    response = test_client_e2e.post(f"{BASE}/spotlight/requests", json=payload, headers=api_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "scheduled"
    assert data["presentation_state"] == "upcoming"
    assert data["queue_position"] == 1
    assert data["created_by"] == "admin-panel"

    listing = test_client_e2e.get(f"{BASE}/spotlight/queue", headers=api_headers).json()
    assert listing["tier"] == "spotlight"
    assert listing["active_count"] == 0
    assert [item["id"] for item in listing["queue"]] == [data["id"]]
    assert listing["slot_config"]["max_concurrent"] == 3


def test_create_without_start_is_active_now(test_client_e2e: TestClient, api_headers):
    response = test_client_e2e.post(
        f"{BASE}/promoted/requests", json={"resource_key": "evt_now"}, headers=api_headers
    )

    assert response.status_code == 201
    assert response.json()["presentation_state"] == "active"
    assert response.json()["duration_hours"] == 48


def test_invalid_duration_is_422(test_client_e2e: TestClient, api_headers):
    response = test_client_e2e.post(
        f"{BASE}/spotlight/requests",
        json={"resource_key": "evt_a", "duration_hours": 200},
        headers=api_headers,
    )
    assert response.status_code == 422


def test_invalid_start_is_422(test_client_e2e: TestClient, api_headers):
    response = test_client_e2e.post(
        f"{BASE}/spotlight/requests",
        json={"resource_key": "evt_a", "requested_start_at": "someday"},
        headers=api_headers,
    )
    assert response.status_code == 422
    assert "Invalid schedule time" in response.json()["detail"]


def test_far_future_start_is_422(test_client_e2e: TestClient, api_headers):
    response = test_client_e2e.post(
        f"{BASE}/spotlight/requests",
        json={"resource_key": "evt_a", "requested_start_at": "9999-12-31T23:00:00Z", "duration_hours": 48},
        headers=api_headers,
    )
    assert response.status_code == 422

    listing = test_client_e2e.get(f"{BASE}/spotlight/queue", headers=api_headers).json()
    assert listing["queue"] == []


def test_reschedule_and_cancel(test_client_e2e: TestClient, api_headers):
    created = test_client_e2e.post(
        f"{BASE}/spotlight/requests",
        json={"resource_key": "evt_a", "requested_start_at": _future(24), "duration_hours": 2},
        headers=api_headers,
    ).json()

    new_start = _future(48)
    response = test_client_e2e.put(
        f"{BASE}/spotlight/requests/{created['id']}",
        json={"requested_start_at": new_start, "duration_hours": 3},
        headers=api_headers,
    )
    assert response.status_code == 200
    assert response.json()["duration_hours"] == 3
    assert response.json()["effective_start_at"].startswith(new_start[:16])

    response = test_client_e2e.post(
        f"{BASE}/spotlight/requests/{created['id']}/cancel", headers=api_headers
    )
    assert response.status_code == 204

    response = test_client_e2e.post(
        f"{BASE}/spotlight/requests/{created['id']}/cancel", headers=api_headers
    )
    assert response.status_code == 409


def test_cancel_unknown_is_404(test_client_e2e: TestClient, api_headers):
    response = test_client_e2e.post(f"{BASE}/spotlight/requests/slot_nope/cancel", headers=api_headers)
    assert response.status_code == 404


def test_bulk_clear_requires_confirmation(test_client_e2e: TestClient, api_headers):
    test_client_e2e.post(
        f"{BASE}/spotlight/requests",
        json={"resource_key": "evt_a", "requested_start_at": _future(24)},
        headers=api_headers,
    )

    response = test_client_e2e.post(f"{BASE}/spotlight/clear-scheduled", json={}, headers=api_headers)
    assert response.status_code == 400

    response = test_client_e2e.post(
        f"{BASE}/spotlight/clear-scheduled", json={"confirm": True}, headers=api_headers
    )
    assert response.status_code == 200
    assert response.json() == {"tier": "spotlight", "count": 1}

    response = test_client_e2e.post(
        f"{BASE}/spotlight/clear-history", json={"confirm": True}, headers=api_headers
    )
    assert response.json()["count"] == 1

    response = test_client_e2e.post(
        f"{BASE}/spotlight/clear-all", json={"confirm": True}, headers=api_headers
    )
    assert response.json()["count"] == 0


def test_projection_is_public(test_client_e2e: TestClient, api_headers):
    test_client_e2e.post(f"{BASE}/spotlight/requests", json={"resource_key": "evt_live"}, headers=api_headers)

    response = test_client_e2e.get(f"{BASE}/spotlight/projection")

    assert response.status_code == 200
    data = response.json()
    assert [item["resource_key"] for item in data["active"]] == ["evt_live"]
    assert data["upcoming"] == []
    assert data["recent_ended"] == []


def test_fulfillment_endpoint(test_client_e2e: TestClient, api_headers):
    response = test_client_e2e.post(
        "/api/v1/internal/slots/fulfillments",
        json={"tier": "promoted", "resource_key": "evt_paid", "duration_hours": 24, "order_ref": "cs_1"},
        headers=api_headers,
    )

    assert response.status_code == 201
    assert response.json()["tier"] == "promoted"
    assert response.json()["created_by"] == "partner-fulfillment"


def test_health(test_client_e2e: TestClient):
    response = test_client_e2e.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
