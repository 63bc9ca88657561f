"""
Domain entities.

Patterns used
-------------
- **Tagged variant** for the itinerary: ``PointToPoint`` carries stops and
  a dropoff, ``Hourly`` carries a duration.  A booking can never hold
  both, nor neither.
- **State Pattern** on ``Booking``: enforces valid lifecycle transitions
  (Pending -> Confirmed -> InProgress -> Completed, Cancelled from any
  non-terminal state, Confirmed -> Pending on unassignment).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from .enums import (
    BOOKING_TRANSITIONS,
    BookingKind,
    BookingStatus,
    FlightStatus,
    PaymentStatus,
    TERMINAL_STATUSES,
)
from .errors import InvalidTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class PointToPoint:
    pickup: str
    dropoff: str
    stops: tuple[str, ...] = ()

    kind = BookingKind.POINT_TO_POINT

    @property
    def dropoff_label(self) -> str:
        return self.dropoff


@dataclass(frozen=True)
class Hourly:
    pickup: str
    duration_hours: int

    kind = BookingKind.HOURLY

    @property
    def dropoff_label(self) -> str:
        return f"As Directed for {self.duration_hours} hours"


Itinerary = Union[PointToPoint, Hourly]


@dataclass
class FlightInfo:
    airline: str
    scheduled_arrival_time: datetime
    estimated_arrival_time: datetime
    status: FlightStatus = FlightStatus.SCHEDULED
    terminal: str = "TBD"


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    phone: str


@dataclass
class Driver:
    id: str
    name: str
    phone: str
    location: Optional[Location] = None


@dataclass
class Booking:
    client_id: str
    itinerary: Itinerary
    pickup_time: datetime
    passengers: int = 1
    id: Optional[str] = None
    driver_id: Optional[str] = None
    special_requests: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    total_fare: Optional[float] = None
    is_airport_pickup: bool = False
    flight_number: Optional[str] = None
    airline: Optional[str] = None
    flight_info: Optional[FlightInfo] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def kind(self) -> BookingKind:
        return self.itinerary.kind

    @property
    def pickup_location(self) -> str:
        return self.itinerary.pickup

    @property
    def dropoff_location(self) -> str:
        return self.itinerary.dropoff_label

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, new_status: BookingStatus) -> bool:
        return new_status in BOOKING_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: BookingStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        if not self.can_transition_to(new_status):
            raise InvalidTransition(
                f"Cannot transition booking {self.id} from "
                f"{self.status.value} to {new_status.value}"
            )
        self.status = new_status


@dataclass
class BookingDraft:
    """Unvalidated booking request as submitted by a client.

    Every field is optional here; ``DispatchEngine.request_booking`` decides
    what is required for the chosen kind.
    """

    client_id: Optional[str] = None
    kind: BookingKind = BookingKind.POINT_TO_POINT
    pickup_location: Optional[str] = None
    pickup_time: Optional[datetime] = None
    dropoff_location: Optional[str] = None
    stops: list[str] = field(default_factory=list)
    duration_hours: Optional[int] = None
    passengers: int = 1
    special_requests: Optional[str] = None
    is_airport_pickup: bool = False
    flight_number: Optional[str] = None
    airline: Optional[str] = None
