"""Encomienda FastAPI application.

Serves the order lifecycle, tracking, notifications, chat and review
routers. Both Protean domains are initialized on import. The Notifications
domain is subscribed to the event relay when the app starts, so every
accepted order write fans out to pushes in the background while the HTTP
response returns immediately.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat.api.routes import router as chat_router
from notifications.api.routes import router as notifications_router
from notifications.domain import notifications
from notifications.notification.ordering_events import drain_deliveries, pending_deliveries
from ordering.api.routes import router as ordering_router
from ordering.domain import ordering
from ordering.order import events as ordering_events  # noqa: F401
from reviews.api.routes import router as reviews_router
from shared.config import get_settings
from shared.events.relay import get_relay
from shared.exceptions import (
    AlreadyClaimed,
    ChatSessionInvalid,
    DeliveryFailed,
    DomainError,
    InvalidOrder,
    InvalidTransition,
    NotificationNotFound,
    OrderNotFound,
    ReviewAlreadySubmitted,
    ReviewNotAllowed,
    StaleRecord,
    StoreUnavailable,
    Unauthorized,
)
from shared.logging import configure_logging

logger = structlog.get_logger(__name__)

ordering.init()
notifications.init()

# ---------------------------------------------------------------------------
# Error → HTTP status mapping
# ---------------------------------------------------------------------------
_STATUS_CODES = {
    OrderNotFound: 404,
    NotificationNotFound: 404,
    Unauthorized: 403,
    InvalidTransition: 409,
    AlreadyClaimed: 409,
    StaleRecord: 409,
    ReviewAlreadySubmitted: 409,
    ReviewNotAllowed: 409,
    InvalidOrder: 422,
    ChatSessionInvalid: 422,
    DeliveryFailed: 502,
    StoreUnavailable: 503,
}


def status_code_for(error: DomainError) -> int:
    for error_cls in type(error).__mro__:
        if error_cls in _STATUS_CODES:
            return _STATUS_CODES[error_cls]
    return 400


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_code_for(exc)
    log = logger.warning if status_code >= 500 else logger.info
    log("Request rejected", path=request.url.path, code=exc.code, status_code=status_code, message=exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings)
    get_relay().subscribe(notifications)
    logger.info("Encomienda API started", env=settings.env)
    yield
    # Let in-flight pushes finish before the loop goes away
    await drain_deliveries(timeout=5)
    logger.info("Encomienda API stopped")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title="Encomienda API",
        description="Delivery marketplace — order lifecycle and live delivery coordination",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, domain_error_handler)

    app.include_router(ordering_router)
    app.include_router(notifications_router)
    app.include_router(chat_router)
    app.include_router(reviews_router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "env": get_settings().env,
                "pending_deliveries": pending_deliveries(),
                "event_subscribers": get_relay().subscribers,
            }
        )

    return app


app = create_app()
