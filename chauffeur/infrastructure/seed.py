"""
Demo data set -- two clients, three drivers around Boston and six bookings
covering every lifecycle stage, an hourly charter and an airport pickup.

Loaded into the store at application start when ``SEED_DEMO_DATA`` is
true.  Pickup times are relative to *now* so the data never goes stale.

Print it with:
    python -m chauffeur.infrastructure.seed
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from .repositories import Store
from chauffeur.domain.entities import (
    Booking,
    Client,
    Driver,
    FlightInfo,
    Hourly,
    Location,
    PointToPoint,
)
from chauffeur.domain.enums import BookingStatus, FlightStatus, PaymentStatus

CLIENTS = [
    Client(id="1", name="John Doe", phone="555-1234"),
    Client(id="2", name="Jane Smith", phone="555-5678"),
]

DRIVERS = [
    Driver(id="1", name="Mike Johnson", phone="555-1111",
           location=Location(42.3601, -71.0589)),
    Driver(id="2", name="Sarah Chen", phone="555-2222",
           location=Location(42.3584, -71.0637)),
    Driver(id="3", name="David Lee", phone="555-3333",
           location=Location(42.3656, -71.0694)),
]


def demo_bookings(now: Optional[datetime] = None) -> list[Booking]:
    now = now or datetime.now()
    airport_arrival = now + timedelta(days=2)
    return [
        Booking(
            id="1", client_id="1", driver_id="1",
            itinerary=PointToPoint(
                pickup="123 Beacon St, Boston, MA",
                stops=("Faneuil Hall Marketplace, Boston, MA",),
                dropoff="Logan International Airport (BOS)",
            ),
            pickup_time=now + timedelta(days=1),
            passengers=2,
            special_requests="Need a child seat.",
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            total_fare=150.0,
        ),
        Booking(
            id="2", client_id="2", driver_id="2",
            itinerary=PointToPoint(
                pickup="The Ritz-Carlton, Boston, MA",
                dropoff="Fenway Park, Boston, MA",
            ),
            pickup_time=now - timedelta(hours=1),
            passengers=4,
            status=BookingStatus.IN_PROGRESS,
            payment_status=PaymentStatus.PAID,
            total_fare=85.0,
        ),
        Booking(
            id="3", client_id="1",
            itinerary=PointToPoint(
                pickup="South Station, Boston, MA",
                dropoff="Harvard University, Cambridge, MA",
            ),
            pickup_time=now + timedelta(days=3),
            passengers=1,
            special_requests="Extra luggage.",
        ),
        Booking(
            id="4", client_id="2", driver_id="1",
            itinerary=PointToPoint(
                pickup="TD Garden, Boston, MA",
                dropoff="Encore Boston Harbor, Everett, MA",
            ),
            pickup_time=now - timedelta(days=1),
            passengers=3,
            status=BookingStatus.COMPLETED,
            payment_status=PaymentStatus.PAID,
            total_fare=95.0,
        ),
        Booking(
            id="5", client_id="2", driver_id="3",
            itinerary=Hourly(pickup="Museum of Fine Arts, Boston, MA", duration_hours=4),
            pickup_time=now + timedelta(days=2),
            passengers=2,
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            total_fare=480.0,  # $120/hr
        ),
        Booking(
            id="6", client_id="1", driver_id="2",
            itinerary=PointToPoint(
                pickup="Logan International Airport (BOS)",
                dropoff="Four Seasons Hotel, Boston, MA",
            ),
            pickup_time=airport_arrival,
            passengers=1,
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            total_fare=120.0,
            is_airport_pickup=True,
            flight_number="UA123",
            airline="United Airlines",
            flight_info=FlightInfo(
                airline="United Airlines",
                status=FlightStatus.SCHEDULED,
                scheduled_arrival_time=airport_arrival,
                estimated_arrival_time=airport_arrival,
                terminal="B",
            ),
        ),
    ]


async def seed(store: Store, now: Optional[datetime] = None) -> bool:
    """Populate an empty store.  Returns ``False`` if it already held data."""
    if await store.bookings.count() or await store.drivers.count():
        return False
    for client in CLIENTS:
        await store.clients.add(client)
    for driver in DRIVERS:
        await store.drivers.add(driver)
    for booking in demo_bookings(now):
        await store.bookings.create(booking)
    return True


async def main():
    store = Store()
    await seed(store)
    for booking in await store.bookings.list_all():
        driver = booking.driver_id or "unassigned"
        print(
            f"  #{booking.id:<3} {booking.status.value:<11} {booking.kind.value:<13} "
            f"{booking.pickup_location} -> {booking.dropoff_location} ({driver})"
        )
    print(
        f"\n{await store.clients.count()} clients, "
        f"{await store.drivers.count()} drivers, "
        f"{await store.bookings.count()} bookings"
    )


if __name__ == "__main__":
    asyncio.run(main())
