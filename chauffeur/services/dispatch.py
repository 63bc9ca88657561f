"""
Dispatch Engine
===============

The only writer of booking lifecycle state.  Every public operation:

1. takes the booking's lock (``store.bookings.lock(id)``) so operations on
   one booking apply in call order and never lose an update,
2. validates against the state machine in ``chauffeur.domain.enums``,
3. writes the change through the repository,
4. hands the resulting notification events to the publisher.

Step 4 only enqueues; SMS delivery happens later on the notification
dispatcher's task and cannot fail or roll back the transition.

State machine
-------------
::

    Pending --assign--> Confirmed --advance--> InProgress --advance--> Completed
       ^                    |
       +-----unassign-------+

    cancel: Pending | Confirmed | InProgress  ->  Cancelled
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Protocol, Union

from chauffeur.domain import messages
from chauffeur.domain.entities import (
    Booking,
    BookingDraft,
    Client,
    FlightInfo,
    Hourly,
    Itinerary,
    PointToPoint,
)
from chauffeur.domain.enums import (
    ADVANCE_TRANSITIONS,
    BookingKind,
    BookingStatus,
    PaymentStatus,
)
from chauffeur.domain.errors import (
    InvalidTransition,
    NotFound,
    PreconditionFailed,
    ValidationError,
)
from chauffeur.domain.events import Audience, EventType, NotificationEvent
from chauffeur.infrastructure.repositories import Store

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    def publish(self, events: Iterable[NotificationEvent]) -> None: ...


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class DispatchEngine:
    def __init__(
        self,
        store: Store,
        publisher: EventPublisher,
        brand_name: str = "WAYNE LIMO",
        payment_link_base_url: str = "https://pay.wayne-limo.com",
    ):
        self.store = store
        self.publisher = publisher
        self.brand_name = brand_name
        self.payment_link_base_url = payment_link_base_url

    # ── Reads ─────────────────────────────────────────────────────────

    async def get_booking(self, booking_id: str) -> Booking:
        booking = await self.store.bookings.get_by_id(booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    async def _get_client(self, client_id: str) -> Client:
        client = await self.store.clients.get_by_id(client_id)
        if client is None:
            raise NotFound(f"Client {client_id} not found")
        return client

    # ── RequestBooking ────────────────────────────────────────────────

    async def request_booking(self, draft: BookingDraft) -> Booking:
        """Validate *draft* and persist it as a new ``Pending`` booking."""
        itinerary = self._validate_draft(draft)
        client = await self._get_client(draft.client_id)

        flight_info = None
        if draft.is_airport_pickup:
            flight_info = FlightInfo(
                airline=draft.airline.strip(),
                scheduled_arrival_time=draft.pickup_time,
                estimated_arrival_time=draft.pickup_time,
            )

        booking = Booking(
            client_id=client.id,
            itinerary=itinerary,
            pickup_time=draft.pickup_time,
            passengers=draft.passengers,
            special_requests=(draft.special_requests or "").strip() or None,
            is_airport_pickup=draft.is_airport_pickup,
            flight_number=draft.flight_number.strip() if flight_info else None,
            airline=draft.airline.strip() if flight_info else None,
            flight_info=flight_info,
        )
        booking_id = await self.store.bookings.create(booking)
        booking = await self.get_booking(booking_id)
        logger.info(
            "Booking #%s requested by client %s (%s)",
            booking.id,
            client.id,
            booking.kind.value,
        )

        self._publish(
            [
                NotificationEvent(
                    type=EventType.BOOKING_REQUESTED,
                    booking_id=booking.id,
                    audience=Audience.CLIENT,
                    phone=client.phone,
                    message=messages.booking_requested(self.brand_name, booking),
                )
            ]
        )
        return booking

    def _validate_draft(self, draft: BookingDraft) -> Itinerary:
        problems: list[str] = []

        if _blank(draft.client_id):
            problems.append("client_id is required")
        if _blank(draft.pickup_location):
            problems.append("pickup_location is required")
        if draft.pickup_time is None:
            problems.append("pickup_time is required")
        if (
            isinstance(draft.passengers, bool)
            or not isinstance(draft.passengers, int)
            or draft.passengers < 1
        ):
            problems.append("passengers must be at least 1")

        kind = draft.kind
        if kind == BookingKind.POINT_TO_POINT:
            if _blank(draft.dropoff_location):
                problems.append("dropoff_location is required for PointToPoint")
        elif kind == BookingKind.HOURLY:
            duration = draft.duration_hours
            if duration is None:
                problems.append("duration_hours is required for Hourly")
            elif (
                isinstance(duration, bool)
                or not isinstance(duration, int)
                or duration <= 0
            ):
                problems.append("duration_hours must be a positive whole number")
        else:
            problems.append(f"unknown booking kind {kind!r}")

        if draft.is_airport_pickup:
            if _blank(draft.flight_number):
                problems.append("flight_number is required for airport pickups")
            if _blank(draft.airline):
                problems.append("airline is required for airport pickups")

        if problems:
            raise ValidationError("; ".join(problems))

        pickup = draft.pickup_location.strip()
        if kind == BookingKind.HOURLY:
            return Hourly(pickup=pickup, duration_hours=draft.duration_hours)
        return PointToPoint(
            pickup=pickup,
            dropoff=draft.dropoff_location.strip(),
            stops=tuple(s.strip() for s in draft.stops if not _blank(s)),
        )

    # ── AssignDriver ──────────────────────────────────────────────────

    async def assign_driver(
        self, booking_id: str, driver_id: Optional[str]
    ) -> Booking:
        """Assign *driver_id* (confirming the booking) or unassign with ``None``."""
        async with self.store.bookings.lock(booking_id):
            booking = await self.get_booking(booking_id)
            if driver_id is None:
                return await self._unassign(booking)

            driver = await self.store.drivers.get_by_id(driver_id)
            if driver is None:
                raise NotFound(f"Driver {driver_id} not found")

            if not booking.can_transition_to(BookingStatus.CONFIRMED):
                raise InvalidTransition(
                    f"Cannot assign a driver to booking {booking.id} in status "
                    f"{booking.status.value}"
                )

            updated = await self.store.bookings.update(
                booking.id, driver_id=driver.id, status=BookingStatus.CONFIRMED
            )
            client = await self.store.clients.get_by_id(updated.client_id)

        logger.info("Booking #%s confirmed with driver %s", updated.id, driver.id)

        events = []
        if client is None:
            logger.warning(
                "Client %s missing for booking #%s; assignment SMS skipped",
                updated.client_id,
                updated.id,
            )
        else:
            events.append(
                NotificationEvent(
                    type=EventType.DRIVER_ASSIGNED,
                    booking_id=updated.id,
                    audience=Audience.DRIVER,
                    phone=driver.phone,
                    message=messages.driver_trip_assigned(
                        self.brand_name, updated, client
                    ),
                )
            )
            events.append(
                NotificationEvent(
                    type=EventType.DRIVER_ASSIGNED,
                    booking_id=updated.id,
                    audience=Audience.CLIENT,
                    phone=client.phone,
                    message=messages.client_booking_confirmed(
                        self.brand_name, updated, driver
                    ),
                )
            )
        self._publish(events)
        return updated

    async def _unassign(self, booking: Booking) -> Booking:
        # Caller holds the booking lock
        if booking.status == BookingStatus.CONFIRMED:
            booking.transition_to(BookingStatus.PENDING)
        elif booking.status != BookingStatus.PENDING:
            raise InvalidTransition(
                f"Cannot unassign the driver of booking {booking.id} in status "
                f"{booking.status.value}"
            )

        previous = booking.driver_id
        updated = await self.store.bookings.update(
            booking.id, driver_id=None, status=BookingStatus.PENDING
        )
        logger.info("Booking #%s unassigned (was %s)", updated.id, previous)
        self._publish(
            [
                self._operator_event(
                    EventType.DRIVER_UNASSIGNED,
                    updated.id,
                    f"Driver unassigned from booking #{updated.id}.",
                )
            ]
        )
        return updated

    # ── Fare & payment ────────────────────────────────────────────────

    async def set_fare(self, booking_id: str, amount: Union[int, float]) -> Booking:
        if (
            isinstance(amount, bool)
            or not isinstance(amount, (int, float))
            or not math.isfinite(amount)
            or amount <= 0
        ):
            raise ValidationError("Fare must be a positive amount")

        async with self.store.bookings.lock(booking_id):
            await self.get_booking(booking_id)
            updated = await self.store.bookings.update(
                booking_id, total_fare=float(amount)
            )

        logger.info("Fare for booking #%s set to %.2f", updated.id, updated.total_fare)
        self._publish(
            [
                self._operator_event(
                    EventType.FARE_SET,
                    updated.id,
                    f"Fare for booking #{updated.id} set to ${updated.total_fare:.2f}.",
                )
            ]
        )
        return updated

    async def request_payment(self, booking_id: str) -> Booking:
        """Send the client a payment link.  Does not mark the booking paid."""
        async with self.store.bookings.lock(booking_id):
            booking = await self.get_booking(booking_id)
            if booking.total_fare is None:
                raise PreconditionFailed(
                    f"Booking {booking.id} has no fare set; set a fare first"
                )
            client = await self._get_client(booking.client_id)

        link = messages.payment_link(self.payment_link_base_url, booking.id)
        logger.info("Payment link issued for booking #%s", booking.id)
        self._publish(
            [
                NotificationEvent(
                    type=EventType.PAYMENT_LINK_ISSUED,
                    booking_id=booking.id,
                    audience=Audience.CLIENT,
                    phone=client.phone,
                    message=messages.payment_reminder(self.brand_name, booking, link),
                )
            ]
        )
        return booking

    async def confirm_payment(self, booking_id: str) -> Booking:
        """Mark the booking paid.  A no-op when it already is."""
        async with self.store.bookings.lock(booking_id):
            booking = await self.get_booking(booking_id)
            if booking.payment_status == PaymentStatus.PAID:
                return booking
            updated = await self.store.bookings.update(
                booking_id, payment_status=PaymentStatus.PAID
            )

        logger.info("Payment confirmed for booking #%s", updated.id)
        self._publish(
            [
                self._operator_event(
                    EventType.PAYMENT_CONFIRMED,
                    updated.id,
                    f"Payment received for booking #{updated.id}.",
                )
            ]
        )
        return updated

    # ── Trip execution ────────────────────────────────────────────────

    async def advance_status(
        self, booking_id: str, target: Union[BookingStatus, str]
    ) -> Booking:
        """Apply ``Confirmed -> InProgress`` or ``InProgress -> Completed``."""
        try:
            target = BookingStatus(target)
        except ValueError:
            raise ValidationError(f"Unknown booking status {target!r}") from None

        async with self.store.bookings.lock(booking_id):
            booking = await self.get_booking(booking_id)
            if ADVANCE_TRANSITIONS.get(booking.status) != target:
                raise InvalidTransition(
                    f"Cannot advance booking {booking.id} from "
                    f"{booking.status.value} to {target.value}"
                )
            previous = booking.status
            booking.transition_to(target)
            updated = await self.store.bookings.update(booking_id, status=target)

        logger.info(
            "Booking #%s advanced %s -> %s", updated.id, previous.value, target.value
        )
        self._publish(
            [
                self._operator_event(
                    EventType.STATUS_ADVANCED,
                    updated.id,
                    f"Booking #{updated.id} is now {target.value}.",
                )
            ]
        )
        return updated

    async def cancel_booking(
        self, booking_id: str, reason: Optional[str] = None
    ) -> Booking:
        """Administrative override: cancel from any non-terminal status."""
        async with self.store.bookings.lock(booking_id):
            booking = await self.get_booking(booking_id)
            booking.transition_to(BookingStatus.CANCELLED)
            updated = await self.store.bookings.update(
                booking_id, status=BookingStatus.CANCELLED, driver_id=None
            )

        logger.info("Booking #%s cancelled (%s)", updated.id, reason or "no reason given")
        message = f"Booking #{updated.id} cancelled."
        if reason:
            message = f"{message} Reason: {reason}"
        self._publish(
            [self._operator_event(EventType.BOOKING_CANCELLED, updated.id, message)]
        )
        return updated

    # ── Internals ─────────────────────────────────────────────────────

    @staticmethod
    def _operator_event(
        event_type: EventType, booking_id: str, message: str
    ) -> NotificationEvent:
        return NotificationEvent(
            type=event_type,
            booking_id=booking_id,
            audience=Audience.OPERATOR,
            message=message,
        )

    def _publish(self, events: list[NotificationEvent]) -> None:
        if events:
            self.publisher.publish(events)
