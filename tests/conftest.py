"""
Shared test fixtures.

Everything runs against a fresh in-memory ``Store`` per test.  The
dispatch engine publishes into a ``RecordingPublisher`` so tests can
inspect emitted events without a running notification dispatcher.
"""

from __future__ import annotations

from datetime import datetime

import pytest
import pytest_asyncio

from chauffeur.domain.entities import BookingDraft, Client, Driver, Location
from chauffeur.domain.enums import BookingKind
from chauffeur.infrastructure.repositories import Store
from chauffeur.services.dispatch import DispatchEngine

PICKUP_TIME = datetime(2026, 11, 2, 14, 30)


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, events):
        self.events.extend(events)

    def clear(self):
        self.events.clear()


def point_to_point_draft(**overrides) -> BookingDraft:
    fields = dict(
        client_id="client-1",
        kind=BookingKind.POINT_TO_POINT,
        pickup_location="123 Main St",
        pickup_time=PICKUP_TIME,
        dropoff_location="Airport",
        passengers=2,
    )
    fields.update(overrides)
    return BookingDraft(**fields)


def airport_draft(**overrides) -> BookingDraft:
    fields = dict(
        is_airport_pickup=True,
        flight_number="UA123",
        airline="United",
        pickup_location="Logan International Airport (BOS)",
        dropoff_location="Four Seasons Hotel, Boston, MA",
    )
    fields.update(overrides)
    return point_to_point_draft(**fields)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def store() -> Store:
    store = Store()
    await store.clients.add(Client(id="client-1", name="John Doe", phone="555-1234"))
    await store.clients.add(Client(id="client-2", name="Jane Smith", phone="555-5678"))
    await store.drivers.add(
        Driver(id="driver-7", name="Mike Johnson", phone="555-1111",
               location=Location(42.3601, -71.0589))
    )
    await store.drivers.add(
        Driver(id="driver-8", name="Sarah Chen", phone="555-2222")
    )
    return store


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def engine(store: Store, publisher: RecordingPublisher) -> DispatchEngine:
    return DispatchEngine(
        store,
        publisher,
        brand_name="WAYNE LIMO",
        payment_link_base_url="https://pay.wayne-limo.com",
    )


@pytest_asyncio.fixture
async def pending_booking(engine: DispatchEngine, publisher: RecordingPublisher):
    booking = await engine.request_booking(point_to_point_draft())
    publisher.clear()
    return booking


@pytest_asyncio.fixture
async def confirmed_booking(engine, publisher, pending_booking):
    booking = await engine.assign_driver(pending_booking.id, "driver-7")
    publisher.clear()
    return booking


@pytest_asyncio.fixture
async def in_progress_booking(engine, publisher, confirmed_booking):
    booking = await engine.advance_status(confirmed_booking.id, "InProgress")
    publisher.clear()
    return booking
