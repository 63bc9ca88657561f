"""
Telemetry Simulator
===================

Two independent periodic tasks stand in for live external feeds:

* **Position drift** (default every 3 s): every driver on an in-progress
  trip who has a known position is moved by the ``PositionFeed``.
* **Flight drift** (default every 5 s): every airport-pickup booking with
  flight info that is not yet completed gets a fresh reading from the
  ``FlightFeed``.

Concurrency safety
------------------
The simulator keeps no entity state of its own.  Each mutation re-reads
the canonical record under that record's lock, so it interleaves safely
with dispatch operations.  Both loops watch one ``asyncio.Event`` and
exit within a single tick period of ``stop()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from chauffeur.domain.entities import Booking
from chauffeur.domain.enums import BookingStatus
from chauffeur.domain.feeds import FlightFeed, PositionFeed
from chauffeur.infrastructure.repositories import Store

logger = logging.getLogger(__name__)


def tracks_flight(booking: Booking) -> bool:
    return (
        booking.is_airport_pickup
        and booking.flight_info is not None
        and booking.status != BookingStatus.COMPLETED
    )


class TelemetrySimulator:
    def __init__(
        self,
        store: Store,
        position_feed: PositionFeed,
        flight_feed: FlightFeed,
        position_interval: float = 3.0,
        flight_interval: float = 5.0,
    ):
        self.store = store
        self.position_feed = position_feed
        self.flight_feed = flight_feed
        self.position_interval = position_interval
        self.flight_interval = flight_interval
        self._tasks: list[asyncio.Task] = []
        self._stop_event: Optional[asyncio.Event] = None

    # ── Public API ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._tasks = [
            asyncio.create_task(
                self._loop("position drift", self.tick_positions, self.position_interval)
            ),
            asyncio.create_task(
                self._loop("flight drift", self.tick_flights, self.flight_interval)
            ),
        ]
        logger.info(
            "Telemetry simulator started (position=%ss, flight=%ss)",
            self.position_interval,
            self.flight_interval,
        )

    async def stop(self) -> None:
        if self._stop_event:
            self._stop_event.set()
        # A tick in flight finishes; wait_for cancels anything slower
        timeout = max(self.position_interval, self.flight_interval)
        for task in self._tasks:
            try:
                await asyncio.wait_for(task, timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("Telemetry task did not stop in time, cancelled")
        self._tasks = []
        logger.info("Telemetry simulator stopped")

    async def tick_positions(self) -> int:
        """Move every driver on an active trip once.  Returns drivers moved."""
        moved = 0
        drivers = self.store.drivers
        for booking in await self.store.bookings.get_active_trips():
            async with drivers.lock(booking.driver_id):
                driver = await drivers.get_by_id(booking.driver_id)
                if driver is None or driver.location is None:
                    continue
                await drivers.set_location(
                    driver.id, self.position_feed.next_position(driver.location)
                )
                moved += 1
        return moved

    async def tick_flights(self) -> int:
        """Refresh every tracked flight once.  Returns flights updated."""
        updated = 0
        bookings = self.store.bookings
        for snapshot in await bookings.list_all():
            if not tracks_flight(snapshot):
                continue
            async with bookings.lock(snapshot.id):
                booking = await bookings.get_by_id(snapshot.id)
                if booking is None or not tracks_flight(booking):
                    continue
                await bookings.update(
                    booking.id,
                    flight_info=self.flight_feed.next_flight(booking.flight_info),
                )
                updated += 1
        return updated

    # ── Internals ─────────────────────────────────────────────────────

    async def _loop(
        self, name: str, tick: Callable[[], Awaitable[int]], interval: float
    ) -> None:
        """Periodic loop: sleep one interval then tick, until stopped."""
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass  # next tick
            try:
                changed = await tick()
                logger.debug("Telemetry %s tick: %d record(s) updated", name, changed)
            except Exception:
                logger.exception("Unhandled error in telemetry %s tick", name)
