"""
Integration tests for the REST API endpoints.

Runs the app against a fresh in-memory store seeded with the demo data.
Lifespan events are not triggered by ``ASGITransport``, so the workers stay
stopped; the notification queue is inspected directly instead.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chauffeur.api.app import create_app
from chauffeur.api.middleware import limiter
from chauffeur.config import Settings
from chauffeur.infrastructure.seed import seed
from chauffeur.services.container import build_services


@pytest_asyncio.fixture
async def services():
    services = build_services(
        Settings(seed_demo_data=False, telemetry_enabled=False)
    )
    await seed(services.store)
    return services


@pytest_asyncio.fixture
async def client(services):
    limiter.enabled = False
    app = create_app(services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    limiter.enabled = True


NEW_BOOKING = {
    "client_id": "1",
    "booking_type": "PointToPoint",
    "pickup_location": "123 Main St",
    "pickup_time": "2026-11-02T14:30:00",
    "dropoff_location": "Airport",
    "passengers": 2,
}


async def _create(client: AsyncClient, **overrides) -> dict:
    resp = await client.post("/api/v1/bookings", json={**NEW_BOOKING, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_request_booking_returns_201(client: AsyncClient, services):
    data = await _create(client)
    assert data["id"] == "7"
    assert data["status"] == "Pending"
    assert data["payment_status"] == "Pending"
    assert data["driver_id"] is None
    assert data["total_fare"] is None
    assert services.notifier.pending == 1


@pytest.mark.asyncio
async def test_request_hourly_booking(client: AsyncClient):
    data = await _create(
        client, booking_type="Hourly", dropoff_location=None, duration_hours=3
    )
    assert data["booking_type"] == "Hourly"
    assert data["dropoff_location"] == "As Directed for 3 hours"
    assert data["duration_hours"] == 3


@pytest.mark.asyncio
async def test_request_booking_validation_error(client: AsyncClient):
    resp = await client.post(
        "/api/v1/bookings", json={**NEW_BOOKING, "dropoff_location": ""}
    )
    assert resp.status_code == 422
    assert "dropoff_location" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_request_booking_unknown_client(client: AsyncClient):
    resp = await client.post(
        "/api/v1/bookings", json={**NEW_BOOKING, "client_id": "404"}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_airport_booking_has_flight_info(client: AsyncClient):
    data = await _create(
        client, is_airport_pickup=True, flight_number="UA123", airline="United"
    )
    assert data["flight_info"]["status"] == "Scheduled"
    assert data["flight_info"]["terminal"] == "TBD"


@pytest.mark.asyncio
async def test_get_booking(client: AsyncClient):
    resp = await client.get("/api/v1/bookings/6")
    assert resp.status_code == 200
    assert resp.json()["flight_number"] == "UA123"


@pytest.mark.asyncio
async def test_get_booking_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/bookings/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_assign_and_unassign_driver(client: AsyncClient, services):
    booking_id = (await _create(client))["id"]

    resp = await client.put(
        f"/api/v1/bookings/{booking_id}/driver", json={"driver_id": "1"}
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "Confirmed"
    assert resp.json()["driver_id"] == "1"
    assert services.notifier.pending == 3  # request + driver + client

    resp = await client.put(
        f"/api/v1/bookings/{booking_id}/driver", json={"driver_id": None}
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "Pending"
    assert resp.json()["driver_id"] is None


@pytest.mark.asyncio
async def test_assign_to_confirmed_booking_conflicts(client: AsyncClient):
    resp = await client.put("/api/v1/bookings/1/driver", json={"driver_id": "2"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_fare_and_payment_flow(client: AsyncClient):
    booking_id = (await _create(client))["id"]

    resp = await client.post(f"/api/v1/bookings/{booking_id}/payment-request")
    assert resp.status_code == 409

    resp = await client.put(f"/api/v1/bookings/{booking_id}/fare", json={"amount": -5})
    assert resp.status_code == 422

    resp = await client.put(f"/api/v1/bookings/{booking_id}/fare", json={"amount": 95})
    assert resp.json()["total_fare"] == 95.0

    resp = await client.post(f"/api/v1/bookings/{booking_id}/payment-request")
    assert resp.status_code == 200
    assert resp.json()["payment_status"] == "Pending"

    for _ in range(2):
        resp = await client.post(f"/api/v1/bookings/{booking_id}/payment")
        assert resp.status_code == 200
        assert resp.json()["payment_status"] == "Paid"


@pytest.mark.asyncio
async def test_advance_status(client: AsyncClient):
    resp = await client.post("/api/v1/bookings/1/status", json={"status": "InProgress"})
    assert resp.status_code == 200
    resp = await client.post("/api/v1/bookings/1/status", json={"status": "Completed"})
    assert resp.json()["status"] == "Completed"


@pytest.mark.asyncio
async def test_advance_pending_booking_conflicts(client: AsyncClient):
    resp = await client.post("/api/v1/bookings/3/status", json={"status": "InProgress"})
    assert resp.status_code == 409
    assert (await client.get("/api/v1/bookings/3")).json()["status"] == "Pending"


@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient):
    resp = await client.post(
        "/api/v1/admin/bookings/1/cancel", json={"reason": "client request"}
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "Cancelled"
    assert resp.json()["driver_id"] is None


@pytest.mark.asyncio
async def test_cancel_completed_booking_conflicts(client: AsyncClient):
    resp = await client.post("/api/v1/admin/bookings/4/cancel")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_read_surface(client: AsyncClient):
    drivers = (await client.get("/api/v1/drivers")).json()
    assert {d["id"] for d in drivers} == {"1", "2", "3"}
    assert drivers[0]["location"]["latitude"] == pytest.approx(42.3601)

    clients = (await client.get("/api/v1/clients")).json()
    assert [c["name"] for c in clients] == ["John Doe", "Jane Smith"]

    bookings = (await client.get("/api/v1/bookings")).json()
    assert len(bookings) == 6

    snap = (await client.get("/api/v1/snapshot")).json()
    assert len(snap["bookings"]) == 6
    assert len(snap["drivers"]) == 3
    assert len(snap["clients"]) == 2


@pytest.mark.asyncio
async def test_notification_failures_endpoint(client: AsyncClient, services):
    services.notifier.transport = _FailingTransport()
    await _create(client)
    await services.notifier.deliver_pending()

    resp = await client.get("/api/v1/admin/notifications/failures")
    assert resp.status_code == 200
    [failure] = resp.json()
    assert failure["event_type"] == "BookingRequested"
    assert failure["phone"] == "555-1234"


class _FailingTransport:
    async def send(self, phone, message):
        return False
