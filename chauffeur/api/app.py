"""
FastAPI application factory.

* Registers routes for bookings, fleet read surface and admin.
* Seeds demo data, starts / stops the notification dispatcher and the
  telemetry simulator via lifespan events.
* Maps dispatch failures to HTTP errors.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from chauffeur.api.middleware import limiter
from chauffeur.api.routes import admin, bookings, fleet
from chauffeur.config import settings
from chauffeur.domain.errors import (
    DispatchError,
    InvalidTransition,
    NotFound,
    PreconditionFailed,
    ValidationError,
)
from chauffeur.infrastructure.seed import seed
from chauffeur.services.container import Services, build_services

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[DispatchError], int] = {
    ValidationError: 422,
    NotFound: 404,
    InvalidTransition: 409,
    PreconditionFailed: 409,
}


async def _dispatch_error_handler(request: Request, exc: DispatchError):
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400
    )
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def create_app(services: Optional[Services] = None) -> FastAPI:
    services = services or build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Seed and start workers on startup; stop them on shutdown."""
        config = services.settings
        if config.seed_demo_data and await seed(services.store):
            logger.info("Demo data loaded")
        await services.notifier.start()
        if config.telemetry_enabled:
            await services.telemetry.start()
        yield
        await services.telemetry.stop()
        await services.notifier.stop()

    app = FastAPI(
        title="Chauffeur Dispatch API",
        description=(
            "Booking lifecycle and dispatch engine for an on-demand "
            "chauffeured-vehicle service: ride requests, driver assignment, "
            "fares and payment links, live driver and flight tracking, and "
            "SMS notifications."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(DispatchError, _dispatch_error_handler)

    # Routers
    app.include_router(bookings.router, prefix="/api/v1")
    app.include_router(fleet.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
