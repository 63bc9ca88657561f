"""
Repository Pattern -- the single authoritative store of entity state.

The in-memory implementation keeps bookings, clients and drivers in
dicts keyed by id.  Reads hand out deep copies so no caller ever holds a
live reference to a stored record; writes go through ``update`` which
merges only the supplied fields.

Concurrency
-----------
``update`` itself is atomic on the event loop (it never awaits), but a
read-validate-write sequence is not.  Writers that read first must hold
``repo.lock(id)`` for the whole sequence.  Repositories never check
cross-field invariants; that is the dispatch engine's job.

A durable backend only has to implement the same coroutine signatures.
"""

from __future__ import annotations

import copy
import itertools
from dataclasses import fields
from typing import Any, Generic, Optional, TypeVar

from .locks import KeyedLock
from chauffeur.domain.entities import Booking, Client, Driver, Location
from chauffeur.domain.enums import BookingStatus

T = TypeVar("T")


class _InMemoryRepository(Generic[T]):
    namespace = "record"

    def __init__(self):
        self._records: dict[str, T] = {}
        self.lock = KeyedLock(self.namespace)

    def _copy(self, record: T) -> T:
        return copy.deepcopy(record)

    async def get_by_id(self, record_id: str) -> Optional[T]:
        record = self._records.get(record_id)
        return self._copy(record) if record is not None else None

    async def list_all(self) -> list[T]:
        """Snapshot of every record, in insertion order."""
        return [self._copy(r) for r in self._records.values()]

    async def count(self) -> int:
        return len(self._records)

    async def update(self, record_id: str, **changes: Any) -> Optional[T]:
        """Merge *changes* into the stored record; ``None`` if absent."""
        record = self._records.get(record_id)
        if record is None:
            return None
        updatable = {f.name for f in fields(record)} - {"id"}
        for name in changes:
            if name not in updatable:
                raise AttributeError(
                    f"{type(record).__name__}.{name} cannot be updated"
                )
        for name, value in changes.items():
            setattr(record, name, copy.deepcopy(value))
        return self._copy(record)


class BookingRepository(_InMemoryRepository[Booking]):
    namespace = "booking"

    def __init__(self):
        super().__init__()
        self._ids = itertools.count(1)

    def _next_id(self) -> str:
        booking_id = str(next(self._ids))
        while booking_id in self._records:
            booking_id = str(next(self._ids))
        return booking_id

    async def create(self, booking: Booking) -> str:
        """Store *booking*, allocating an id if it has none.  Returns the id."""
        stored = copy.deepcopy(booking)
        if stored.id is None:
            stored.id = self._next_id()
        elif stored.id in self._records:
            raise KeyError(f"Booking {stored.id} already exists")
        self._records[stored.id] = stored
        return stored.id

    async def get_active_trips(self) -> list[Booking]:
        """In-progress bookings with an assigned driver."""
        return [
            self._copy(b)
            for b in self._records.values()
            if b.status == BookingStatus.IN_PROGRESS and b.driver_id
        ]


class ClientRepository(_InMemoryRepository[Client]):
    namespace = "client"

    async def add(self, client: Client) -> Client:
        self._records[client.id] = client
        return client

    async def update(self, record_id: str, **changes: Any) -> Optional[Client]:
        raise TypeError("Client records are immutable")


class DriverRepository(_InMemoryRepository[Driver]):
    namespace = "driver"

    async def add(self, driver: Driver) -> Driver:
        self._records[driver.id] = copy.deepcopy(driver)
        return self._copy(driver)

    async def set_location(
        self, driver_id: str, location: Optional[Location]
    ) -> Optional[Driver]:
        return await self.update(driver_id, location=location)


class Store:
    """Bundle of the three repositories shared by every component."""

    def __init__(self):
        self.bookings = BookingRepository()
        self.clients = ClientRepository()
        self.drivers = DriverRepository()
