"""
Booking endpoints
=================

POST /api/v1/bookings                         -- request a booking (201)
GET  /api/v1/bookings                         -- list bookings
GET  /api/v1/bookings/{id}                    -- get one booking
PUT  /api/v1/bookings/{id}/driver             -- assign / unassign driver
PUT  /api/v1/bookings/{id}/fare               -- set the fare
POST /api/v1/bookings/{id}/payment-request    -- SMS a payment link
POST /api/v1/bookings/{id}/payment            -- mark paid (idempotent)
POST /api/v1/bookings/{id}/status             -- advance trip status

Dispatch failures are turned into HTTP errors by the handlers registered
in ``chauffeur.api.app``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from chauffeur.api.dependencies import get_engine, get_gateway
from chauffeur.api.middleware import limiter
from chauffeur.api.schemas import (
    AssignDriverRequest,
    BookingCreateRequest,
    BookingResponse,
    ErrorResponse,
    FareRequest,
    StatusRequest,
)
from chauffeur.config import settings
from chauffeur.services.dispatch import DispatchEngine
from chauffeur.services.gateway import PollingGateway

router = APIRouter(prefix="/bookings", tags=["bookings"])

_errors = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=BookingResponse,
    summary="Request a booking",
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def request_booking(
    request: Request,
    body: BookingCreateRequest,
    engine: DispatchEngine = Depends(get_engine),
):
    booking = await engine.request_booking(body.to_draft())
    return BookingResponse.from_entity(booking)


@router.get("", response_model=list[BookingResponse], summary="List bookings")
@limiter.limit(settings.rate_limit)
async def list_bookings(
    request: Request,
    gateway: PollingGateway = Depends(get_gateway),
):
    return [BookingResponse.from_entity(b) for b in await gateway.list_bookings()]


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking",
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def get_booking(
    request: Request,
    booking_id: str,
    gateway: PollingGateway = Depends(get_gateway),
):
    return BookingResponse.from_entity(await gateway.get_booking(booking_id))


@router.put(
    "/{booking_id}/driver",
    response_model=BookingResponse,
    summary="Assign or unassign a driver",
    description=(
        "Assigning confirms a Pending booking and texts the driver and the "
        "client.  A null driver_id reverts a Confirmed booking to Pending."
    ),
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def assign_driver(
    request: Request,
    booking_id: str,
    body: AssignDriverRequest,
    engine: DispatchEngine = Depends(get_engine),
):
    booking = await engine.assign_driver(booking_id, body.driver_id)
    return BookingResponse.from_entity(booking)


@router.put(
    "/{booking_id}/fare",
    response_model=BookingResponse,
    summary="Set the total fare",
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def set_fare(
    request: Request,
    booking_id: str,
    body: FareRequest,
    engine: DispatchEngine = Depends(get_engine),
):
    return BookingResponse.from_entity(await engine.set_fare(booking_id, body.amount))


@router.post(
    "/{booking_id}/payment-request",
    response_model=BookingResponse,
    summary="Send the client a payment link",
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def request_payment(
    request: Request,
    booking_id: str,
    engine: DispatchEngine = Depends(get_engine),
):
    return BookingResponse.from_entity(await engine.request_payment(booking_id))


@router.post(
    "/{booking_id}/payment",
    response_model=BookingResponse,
    summary="Confirm payment",
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def confirm_payment(
    request: Request,
    booking_id: str,
    engine: DispatchEngine = Depends(get_engine),
):
    return BookingResponse.from_entity(await engine.confirm_payment(booking_id))


@router.post(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Advance trip status",
    description="Only Confirmed -> InProgress and InProgress -> Completed.",
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def advance_status(
    request: Request,
    booking_id: str,
    body: StatusRequest,
    engine: DispatchEngine = Depends(get_engine),
):
    booking = await engine.advance_status(booking_id, body.status)
    return BookingResponse.from_entity(booking)
