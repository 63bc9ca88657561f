"""
Per-identifier asyncio locks.

Every mutation of a booking or driver record is serialised on the lock
for that record's id, so two concurrent read-modify-write sequences on
the same id can never lose an update.  Different ids proceed in
parallel.

A lock exists only while some task holds or waits on it; the last one
out removes the entry, so ids that are never seen again (including ids
that do not exist) leave nothing behind.

Lock ordering
-------------
An operation that needs both a booking and a driver lock must take the
booking lock first.  All call sites in this package follow that order,
which rules out deadlock.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from contextlib import asynccontextmanager
from typing import AsyncIterator


class KeyedLock:
    def __init__(self, namespace: str):
        self.namespace = namespace
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: Counter[str] = Counter()

    @asynccontextmanager
    async def __call__(self, key: str) -> AsyncIterator[None]:
        """Hold the lock guarding *key* for the body of an ``async with``."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return bool(lock and lock.locked())

    def __len__(self) -> int:
        return len(self._locks)

    def __repr__(self) -> str:
        return f"KeyedLock({self.namespace!r}, keys={len(self._locks)})"
