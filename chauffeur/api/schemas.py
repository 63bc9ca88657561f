"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from chauffeur.domain.entities import Booking, BookingDraft, Driver, Hourly
from chauffeur.domain.enums import (
    BookingKind,
    BookingStatus,
    FlightStatus,
    PaymentStatus,
)
from chauffeur.workers.notifier import DeliveryFailure


# ── Requests ──────────────────────────────────────────────────────────


class BookingCreateRequest(BaseModel):
    """Field presence per booking kind is checked by the dispatch engine."""

    client_id: str
    booking_type: BookingKind = BookingKind.POINT_TO_POINT
    pickup_location: Optional[str] = None
    pickup_time: Optional[datetime] = None
    dropoff_location: Optional[str] = None
    stops: list[str] = []
    duration_hours: Optional[int] = None
    passengers: int = 1
    special_requests: Optional[str] = None
    is_airport_pickup: bool = False
    flight_number: Optional[str] = None
    airline: Optional[str] = None

    def to_draft(self) -> BookingDraft:
        return BookingDraft(
            client_id=self.client_id,
            kind=self.booking_type,
            pickup_location=self.pickup_location,
            pickup_time=self.pickup_time,
            dropoff_location=self.dropoff_location,
            stops=list(self.stops),
            duration_hours=self.duration_hours,
            passengers=self.passengers,
            special_requests=self.special_requests,
            is_airport_pickup=self.is_airport_pickup,
            flight_number=self.flight_number,
            airline=self.airline,
        )


class AssignDriverRequest(BaseModel):
    driver_id: Optional[str] = Field(
        None, description="Driver to assign; null unassigns the current driver."
    )


class FareRequest(BaseModel):
    amount: float


class StatusRequest(BaseModel):
    status: BookingStatus


class CancelRequest(BaseModel):
    reason: Optional[str] = None


# ── Responses ─────────────────────────────────────────────────────────


class LocationResponse(BaseModel):
    latitude: float
    longitude: float


class FlightInfoResponse(BaseModel):
    airline: str
    status: FlightStatus
    scheduled_arrival_time: datetime
    estimated_arrival_time: datetime
    terminal: str

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: str
    client_id: str
    driver_id: Optional[str] = None
    booking_type: BookingKind
    pickup_location: str
    stops: list[str] = []
    dropoff_location: str
    duration_hours: Optional[int] = None
    pickup_time: datetime
    passengers: int
    special_requests: Optional[str] = None
    status: BookingStatus
    payment_status: PaymentStatus
    total_fare: Optional[float] = None
    is_airport_pickup: bool = False
    flight_number: Optional[str] = None
    airline: Optional[str] = None
    flight_info: Optional[FlightInfoResponse] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponse":
        itinerary = booking.itinerary
        hourly = isinstance(itinerary, Hourly)
        return cls(
            id=booking.id,
            client_id=booking.client_id,
            driver_id=booking.driver_id,
            booking_type=booking.kind,
            pickup_location=booking.pickup_location,
            stops=[] if hourly else list(itinerary.stops),
            dropoff_location=booking.dropoff_location,
            duration_hours=itinerary.duration_hours if hourly else None,
            pickup_time=booking.pickup_time,
            passengers=booking.passengers,
            special_requests=booking.special_requests,
            status=booking.status,
            payment_status=booking.payment_status,
            total_fare=booking.total_fare,
            is_airport_pickup=booking.is_airport_pickup,
            flight_number=booking.flight_number,
            airline=booking.airline,
            flight_info=(
                FlightInfoResponse.model_validate(booking.flight_info)
                if booking.flight_info
                else None
            ),
        )


class DriverResponse(BaseModel):
    id: str
    name: str
    phone: str
    location: Optional[LocationResponse] = None

    @classmethod
    def from_entity(cls, driver: Driver) -> "DriverResponse":
        location = None
        if driver.location is not None:
            location = LocationResponse(
                latitude=driver.location.latitude,
                longitude=driver.location.longitude,
            )
        return cls(id=driver.id, name=driver.name, phone=driver.phone, location=location)


class ClientResponse(BaseModel):
    id: str
    name: str
    phone: str

    model_config = {"from_attributes": True}


class SnapshotResponse(BaseModel):
    bookings: list[BookingResponse]
    drivers: list[DriverResponse]
    clients: list[ClientResponse]
    taken_at: datetime


class NotificationFailureResponse(BaseModel):
    event_type: str
    booking_id: str
    phone: Optional[str] = None
    message: str
    reason: str
    failed_at: datetime

    @classmethod
    def from_failure(cls, failure: DeliveryFailure) -> "NotificationFailureResponse":
        return cls(
            event_type=failure.event.type.value,
            booking_id=failure.event.booking_id,
            phone=failure.event.phone,
            message=failure.event.message,
            reason=failure.reason,
            failed_at=failure.failed_at,
        )


class HealthResponse(BaseModel):
    status: str = "ok"
    telemetry_running: bool = False
    notifier_running: bool = False
    pending_notifications: int = 0


class ErrorResponse(BaseModel):
    detail: str
