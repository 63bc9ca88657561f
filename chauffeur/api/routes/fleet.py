"""
Read surface for drivers, clients and combined snapshots
========================================================

GET /api/v1/drivers   -- drivers with live positions
GET /api/v1/clients   -- clients
GET /api/v1/snapshot  -- bookings + drivers + clients in one fetch
"""

from fastapi import APIRouter, Depends, Request

from chauffeur.api.dependencies import get_gateway
from chauffeur.api.middleware import limiter
from chauffeur.api.schemas import (
    BookingResponse,
    ClientResponse,
    DriverResponse,
    SnapshotResponse,
)
from chauffeur.config import settings
from chauffeur.services.gateway import PollingGateway

router = APIRouter(tags=["fleet"])


@router.get("/drivers", response_model=list[DriverResponse], summary="List drivers")
@limiter.limit(settings.rate_limit)
async def list_drivers(
    request: Request,
    gateway: PollingGateway = Depends(get_gateway),
):
    return [DriverResponse.from_entity(d) for d in await gateway.list_drivers()]


@router.get("/clients", response_model=list[ClientResponse], summary="List clients")
@limiter.limit(settings.rate_limit)
async def list_clients(
    request: Request,
    gateway: PollingGateway = Depends(get_gateway),
):
    return [ClientResponse.model_validate(c) for c in await gateway.list_clients()]


@router.get(
    "/snapshot",
    response_model=SnapshotResponse,
    summary="Bookings, drivers and clients in one consistent fetch",
)
@limiter.limit(settings.rate_limit)
async def snapshot(
    request: Request,
    gateway: PollingGateway = Depends(get_gateway),
):
    snap = await gateway.snapshot()
    return SnapshotResponse(
        bookings=[BookingResponse.from_entity(b) for b in snap.bookings],
        drivers=[DriverResponse.from_entity(d) for d in snap.drivers],
        clients=[ClientResponse.model_validate(c) for c in snap.clients],
        taken_at=snap.taken_at,
    )
