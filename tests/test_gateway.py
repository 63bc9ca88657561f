"""Read surface: snapshots and the self-scheduling poller."""

from __future__ import annotations

import asyncio

import pytest

from chauffeur.config import Settings
from chauffeur.domain.errors import NotFound
from chauffeur.infrastructure.repositories import Store
from chauffeur.infrastructure.seed import seed
from chauffeur.services.container import build_services
from chauffeur.services.gateway import LivePoller, PollingGateway


class TestPollingGateway:
    @pytest.mark.asyncio
    async def test_snapshot_lists_everything(self, store, pending_booking):
        snap = await PollingGateway(store).snapshot()
        assert [b.id for b in snap.bookings] == [pending_booking.id]
        assert {d.id for d in snap.drivers} == {"driver-7", "driver-8"}
        assert {c.id for c in snap.clients} == {"client-1", "client-2"}

    @pytest.mark.asyncio
    async def test_snapshot_is_independent_of_later_changes(
        self, engine, store, pending_booking
    ):
        gateway = PollingGateway(store)
        before = await gateway.list_bookings()

        await engine.assign_driver(pending_booking.id, "driver-7")

        assert before[0].driver_id is None
        assert (await gateway.list_bookings())[0].driver_id == "driver-7"

    @pytest.mark.asyncio
    async def test_get_booking_not_found(self, store):
        with pytest.raises(NotFound):
            await PollingGateway(store).get_booking("missing")

    @pytest.mark.asyncio
    async def test_seeded_demo_data(self):
        store = Store()
        assert await seed(store) is True
        assert await seed(store) is False
        snap = await PollingGateway(store).snapshot()
        assert len(snap.bookings) == 6
        assert len(snap.drivers) == 3
        assert len(snap.clients) == 2
        statuses = {b.status.value for b in snap.bookings}
        assert statuses == {"Pending", "Confirmed", "InProgress", "Completed"}
        [airport] = [b for b in snap.bookings if b.is_airport_pickup]
        assert airport.flight_info.terminal == "B"


class TestLivePoller:
    @pytest.mark.asyncio
    async def test_poll_once_invokes_callback(self, store):
        received = []
        poller = LivePoller(PollingGateway(store), received.append, interval=1)
        snap = await poller.poll_once()
        assert received == [snap]
        assert poller.fetches == 1

    @pytest.mark.asyncio
    async def test_fetches_never_overlap(self, store):
        in_flight = 0
        peak = 0

        async def slow_consumer(snapshot):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.02)
            in_flight -= 1

        poller = LivePoller(PollingGateway(store), slow_consumer, interval=0.005)
        await poller.start()
        await asyncio.sleep(0.15)
        await poller.stop()

        assert poller.fetches >= 2
        assert peak == 1

    @pytest.mark.asyncio
    async def test_fetch_errors_do_not_stop_polling(self, store):
        calls = 0

        def flaky(snapshot):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("render failed")

        poller = LivePoller(PollingGateway(store), flaky, interval=0.01)
        await poller.start()
        await asyncio.sleep(0.08)
        await poller.stop()
        assert calls >= 2

    @pytest.mark.asyncio
    async def test_services_poller_uses_configured_interval(self):
        services = build_services(
            Settings(
                poll_interval_seconds=0.01,
                seed_demo_data=False,
                telemetry_enabled=False,
            )
        )
        await seed(services.store)
        received = []

        poller = services.poller(received.append)
        assert poller.interval == 0.01
        assert poller.gateway is services.gateway

        await poller.start()
        await asyncio.sleep(0.08)
        await poller.stop()
        assert len(received) >= 2
        assert len(received[0].bookings) == 6
