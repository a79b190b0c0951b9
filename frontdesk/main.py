"""Frontdesk: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from frontdesk.api.v1.bookings import router as bookings_router
from frontdesk.api.v1.groups import router as groups_router
from frontdesk.api.v1.reports import router as reports_router
from frontdesk.api.v1.rooms import housekeeping_router
from frontdesk.api.v1.rooms import router as rooms_router
from frontdesk.config import settings
from frontdesk.engine.errors import BookingEngineError, RoomUnavailable
from frontdesk.engine.service import BookingEngine
from frontdesk.notifications.notifier import LoggingNotifier
from frontdesk.notifications.outbox import NotificationOutbox

# Configure root logger so all frontdesk.* loggers output to stderr.
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the engine on startup; flush notifications and dispose connections on shutdown."""
    from frontdesk.database import async_session_factory, engine
    from frontdesk.storage.sqlalchemy_store import SqlAlchemyStore

    outbox = NotificationOutbox(
        LoggingNotifier(settings.hotel_name),
        max_attempts=settings.notification_max_attempts,
        retry_delay=settings.notification_retry_delay_seconds,
    )
    app.state.engine = BookingEngine(SqlAlchemyStore(async_session_factory), settings, outbox)
    yield
    # Shutdown: let queued notifications finish, then dispose engine connections
    await outbox.drain()
    if outbox.dead_letters:
        logger.warning("%d notifications were never delivered", len(outbox.dead_letters))
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Hotel reservation lifecycle engine: bookings, check-in/out, groups and housekeeping.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookingEngineError)
async def booking_engine_error_handler(request: Request, exc: BookingEngineError) -> JSONResponse:
    """Surface engine rule violations verbatim with their HTTP status."""
    content: dict = {"detail": exc.message}
    if isinstance(exc, RoomUnavailable) and exc.conflicts:
        content["conflicts"] = [c.model_dump(mode="json") for c in exc.conflicts]
    return JSONResponse(status_code=exc.status_code, content=content)


# Routers
app.include_router(bookings_router)
app.include_router(groups_router)
app.include_router(rooms_router)
app.include_router(housekeeping_router)
app.include_router(reports_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}
