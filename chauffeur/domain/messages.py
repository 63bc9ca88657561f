"""Rendering of outbound SMS text.  Pure functions, no I/O."""

from __future__ import annotations

from datetime import datetime

from .entities import Booking, Client, Driver, Hourly

TIME_FORMAT = "%m/%d/%Y, %I:%M %p"


def format_time(value: datetime) -> str:
    return value.strftime(TIME_FORMAT)


def payment_link(base_url: str, booking_id: str) -> str:
    return f"{base_url.rstrip('/')}/booking/{booking_id}"


def trip_details(booking: Booking) -> str:
    itinerary = booking.itinerary
    if isinstance(itinerary, Hourly):
        details = f"Hourly service for {itinerary.duration_hours} hours."
    else:
        stops = " -> ".join(itinerary.stops) or "None"
        details = f"Stops: {stops}. Dropoff: {itinerary.dropoff}."

    if booking.is_airport_pickup and booking.flight_number:
        details += (
            f" Airport pickup for flight {booking.airline} {booking.flight_number}."
        )
    return details


def booking_requested(brand: str, booking: Booking) -> str:
    return (
        f"{brand}: Your booking request #{booking.id} for "
        f"{format_time(booking.pickup_time)} has been received. "
        "We'll send a confirmation once a driver is assigned."
    )


def driver_trip_assigned(
    brand: str, booking: Booking, client: Client
) -> str:
    return (
        f"{brand}: New trip assigned! Booking #{booking.id} for {client.name}. "
        f"Pickup: {booking.pickup_location} on {format_time(booking.pickup_time)}. "
        f"Details: {trip_details(booking)}"
    )


def client_booking_confirmed(
    brand: str, booking: Booking, driver: Driver
) -> str:
    return (
        f"{brand}: Your booking #{booking.id} is confirmed! Your driver, "
        f"{driver.name}, will pick you up from {booking.pickup_location} "
        f"on {format_time(booking.pickup_time)}."
    )


def payment_reminder(brand: str, booking: Booking, link: str) -> str:
    return (
        f"{brand}: Payment reminder for booking #{booking.id} "
        f"(Total: ${booking.total_fare:.2f}). Please pay securely here: {link}"
    )
