import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import bookings, slots
from app.core.config import settings, _ENV_FILE
from app.core.db import init_db
from app.core.errors import (
    AdvanceWindowError,
    AvailabilityError,
    BookingNotFoundError,
    ConflictError,
    PastBookingError,
    PersistenceError,
    SchedulingError,
    ValidationError,
)
from app.services.slot_service import SlotClassification

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)

# Most specific first
_ERROR_STATUS: list[tuple[type[SchedulingError], int]] = [
    (BookingNotFoundError, 404),
    (ValidationError, 422),
    (AvailabilityError, 409),
    (ConflictError, 409),
    (PastBookingError, 422),
    (AdvanceWindowError, 422),
    (PersistenceError, 503),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Recurrence policy: %s, skip conflicts for unassigned services: %s",
        settings.recurrence_policy,
        settings.skip_conflicts_for_unassigned_services,
    )
    if settings.create_tables_on_startup:
        await init_db()
    yield


app = FastAPI(
    title="Booking Scheduler API",
    description="Slot availability, booking placement and rescheduling",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(slots.router, prefix="/api/v1")
app.include_router(bookings.router, prefix="/api/v1")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


def status_for(exc: SchedulingError) -> int:
    for kind, code in _ERROR_STATUS:
        if isinstance(exc, kind):
            return code
    return 400


@app.exception_handler(SchedulingError)
async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    code = status_for(exc)
    if isinstance(exc, PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("Rejected %s %s: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    content = {"code": exc.code, "detail": exc.message}
    if isinstance(exc, ConflictError):
        content["reason"] = exc.reason
    if isinstance(exc, AvailabilityError):
        classification = exc.classification or SlotClassification()
        content.update(
            all_slots=classification.all_slots,
            available_slots=classification.available_slots,
            booked_slots=classification.booked_slots,
        )
    return JSONResponse(status_code=code, content=content, headers=_cors_headers(request.headers.get("origin")))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return actual error in JSON; include CORS so 500 responses are not blocked by browser."""
    origin = request.headers.get("origin")
    headers = _cors_headers(origin)
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )
    logger.exception("Unhandled exception: %s", exc)
    detail = f"{type(exc).__name__}: {str(exc)}"
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
        headers=headers,
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
