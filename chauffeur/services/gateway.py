"""
Polling Gateway
===============

Read path for presentation.  Every call returns an independent snapshot
(deep copies), so a caller can hold on to it while the engine and the
telemetry simulator keep mutating the store.

``LivePoller`` implements the intended call pattern: one initial fetch,
then a re-fetch ``interval`` seconds after the previous fetch *completes*.
Fetches therefore never overlap, however slow one of them is.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from chauffeur.domain.entities import Booking, Client, Driver
from chauffeur.domain.errors import NotFound
from chauffeur.infrastructure.repositories import Store

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    bookings: list[Booking]
    drivers: list[Driver]
    clients: list[Client]
    taken_at: datetime = field(default_factory=datetime.now)


class PollingGateway:
    def __init__(self, store: Store):
        self.store = store

    async def list_bookings(self) -> list[Booking]:
        return await self.store.bookings.list_all()

    async def list_drivers(self) -> list[Driver]:
        return await self.store.drivers.list_all()

    async def list_clients(self) -> list[Client]:
        return await self.store.clients.list_all()

    async def get_booking(self, booking_id: str) -> Booking:
        booking = await self.store.bookings.get_by_id(booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    async def snapshot(self) -> Snapshot:
        bookings, drivers, clients = await asyncio.gather(
            self.list_bookings(), self.list_drivers(), self.list_clients()
        )
        return Snapshot(bookings=bookings, drivers=drivers, clients=clients)


SnapshotCallback = Callable[[Snapshot], Union[Awaitable[Any], Any]]


class LivePoller:
    """Self-scheduling refresh loop over a ``PollingGateway``."""

    def __init__(
        self,
        gateway: PollingGateway,
        on_snapshot: SnapshotCallback,
        interval: float = 3.0,
    ):
        self.gateway = gateway
        self.on_snapshot = on_snapshot
        self.interval = interval
        self.fetches = 0
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    async def poll_once(self) -> Snapshot:
        snapshot = await self.gateway.snapshot()
        self.fetches += 1
        result = self.on_snapshot(snapshot)
        if inspect.isawaitable(result):
            await result
        return snapshot

    async def start(self) -> None:
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._stop_event:
            self._stop_event.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _loop(self) -> None:
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Failed to fetch live data")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass
