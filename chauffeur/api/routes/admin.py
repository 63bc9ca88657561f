"""
Admin / observability endpoints
===============================

POST /api/v1/admin/bookings/{id}/cancel     -- administrative cancellation
GET  /api/v1/admin/notifications/failures   -- recent SMS delivery failures
GET  /api/v1/admin/health                   -- health check
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from chauffeur.api.dependencies import get_engine, get_notifier, get_services
from chauffeur.api.middleware import limiter
from chauffeur.api.schemas import (
    BookingResponse,
    CancelRequest,
    ErrorResponse,
    HealthResponse,
    NotificationFailureResponse,
)
from chauffeur.config import settings
from chauffeur.services.container import Services
from chauffeur.services.dispatch import DispatchEngine
from chauffeur.workers.notifier import NotificationDispatcher

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/bookings/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
    description=(
        "Transitions a Pending, Confirmed or InProgress booking to Cancelled "
        "and releases its driver.  Completed and Cancelled bookings are final."
    ),
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def cancel_booking(
    request: Request,
    booking_id: str,
    body: Optional[CancelRequest] = None,
    engine: DispatchEngine = Depends(get_engine),
):
    reason = body.reason if body else None
    return BookingResponse.from_entity(await engine.cancel_booking(booking_id, reason))


@router.get(
    "/notifications/failures",
    response_model=list[NotificationFailureResponse],
    summary="Recent notification delivery failures, newest first",
)
@limiter.limit(settings.rate_limit)
async def notification_failures(
    request: Request,
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    return [
        NotificationFailureResponse.from_failure(f)
        for f in reversed(notifier.failures)
    ]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(services: Services = Depends(get_services)):
    return HealthResponse(
        telemetry_running=services.telemetry.running,
        notifier_running=services.notifier.running,
        pending_notifications=services.notifier.pending,
    )
