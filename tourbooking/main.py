"""FastAPI application for the tour booking administration service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from tourbooking import __version__
from tourbooking.config import ENVIRONMENT, SEED_MOCK_DATA, configure_logging
from tourbooking.errors import DomainError, format_validation_errors
from tourbooking.mock_data import seed_repository
from tourbooking.rate_limit import limiter
from tourbooking.repository import InMemoryRepository
from tourbooking.routers import (
    activities,
    agencies,
    agency_schedules,
    agents,
    bookings,
    health,
    unavailable_dates,
)
from tourbooking.services.bookings import ActivityLocks

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    repository = InMemoryRepository()
    if SEED_MOCK_DATA:
        await seed_repository(repository)
    app.state.repository = repository
    app.state.activity_locks = ActivityLocks()
    logger.info("Tour booking API started (environment=%s)", ENVIRONMENT)
    yield
    logger.info("Tour booking API stopped")


app = FastAPI(
    title="Tour Booking API",
    description="Slot availability and conflict validation for tour bookings",
    version=__version__,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

for module in (health, activities, unavailable_dates, agencies, agents, agency_schedules, bookings):
    app.include_router(module.router)


# ── Error handlers ─────────────────────────────────────────────────────────


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = format_validation_errors(exc.errors())
    message = details[0]["message"] if details else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": message, "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded for %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"success": False, "error": f"Rate limit exceeded: {exc.detail}"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )
