"""
Live telemetry feeds  (Strategy Pattern)
========================================

The telemetry simulator asks a ``PositionFeed`` for a driver's next
position and a ``FlightFeed`` for a flight's next status.  The random
implementations below stand in for a GPS provider and a flight-data API;
a real integration replaces them without touching the dispatch engine.

Assumption
----------
The position random walk is deliberately unbounded: there is no routing
engine, so a driver never snaps to the destination.

Complexity: O(1) per call.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import timedelta
from typing import Optional

from .entities import FlightInfo, Location
from .enums import FlightStatus

LIVE_FLIGHT_STATUSES = (
    FlightStatus.ON_TIME,
    FlightStatus.DELAYED,
    FlightStatus.EN_ROUTE,
    FlightStatus.LANDED,
)
TERMINALS = ("A", "B", "C", "E")


# ── Strategy hierarchy ────────────────────────────────────────────────


class PositionFeed(ABC):
    @abstractmethod
    def next_position(self, current: Location) -> Location: ...


class FlightFeed(ABC):
    @abstractmethod
    def next_flight(self, current: FlightInfo) -> FlightInfo: ...


class RandomWalkPositionFeed(PositionFeed):
    """Offsets each axis independently by U(-max_offset, +max_offset)."""

    def __init__(
        self, max_offset: float = 0.0025, rng: Optional[random.Random] = None
    ):
        self.max_offset = max_offset
        self.rng = rng or random.Random()

    def next_position(self, current: Location) -> Location:
        return Location(
            latitude=current.latitude
            + self.rng.uniform(-self.max_offset, self.max_offset),
            longitude=current.longitude
            + self.rng.uniform(-self.max_offset, self.max_offset),
        )


class SimulatedFlightFeed(FlightFeed):
    """
    Resamples status and terminal uniformly on every call.

    The estimated arrival is always recomputed from the *scheduled* time:
    ``scheduled + delay`` where delay is 0 unless the new status is
    ``Delayed``, in which case it is a whole number of minutes in
    ``[0, max_delay_minutes)``.
    """

    def __init__(
        self, max_delay_minutes: int = 60, rng: Optional[random.Random] = None
    ):
        self.max_delay_minutes = max_delay_minutes
        self.rng = rng or random.Random()

    def next_flight(self, current: FlightInfo) -> FlightInfo:
        status = self.rng.choice(LIVE_FLIGHT_STATUSES)
        terminal = self.rng.choice(TERMINALS)
        delay_minutes = (
            self.rng.randrange(self.max_delay_minutes)
            if status is FlightStatus.DELAYED
            else 0
        )
        return replace(
            current,
            status=status,
            terminal=terminal,
            estimated_arrival_time=current.scheduled_arrival_time
            + timedelta(minutes=delay_minutes),
        )
