# backend/trailblazers/main.py
"""
TrailBlazers booking API.

Mounts the v1 routers under /api/v1, converts domain exceptions to their
HTTP form and owns the notification broadcaster's lifecycle.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.broadcast import connect_broadcast, disconnect_broadcast
from .core.config import is_running_tests, settings
from .core.constants import ALLOWED_ORIGINS, API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .core.exceptions import DomainException
from .routes.v1 import (
    auth as auth_v1,
    bookings as bookings_v1,
    health as health_v1,
    hikes as hikes_v1,
    notifications as notifications_v1,
)

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    await connect_broadcast()
    try:
        yield
    finally:
        await disconnect_broadcast()
        logger.info(f"{BRAND_NAME} API shut down")


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Render any DomainException the way its to_http_exception() describes."""
    http_exc = exc.to_http_exception()
    if http_exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(
            "%s %s -> %s %s", request.method, request.url.path, http_exc.status_code, exc.code
        )
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=app_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(set(ALLOWED_ORIGINS) | {settings.app_url.rstrip("/")}),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DomainException, domain_exception_handler)  # type: ignore[arg-type]

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(auth_v1.router, prefix="/auth")
    api_v1.include_router(hikes_v1.router, prefix="/hikes")
    api_v1.include_router(bookings_v1.router, prefix="/bookings")
    api_v1.include_router(notifications_v1.router, prefix="/notifications")
    api_v1.include_router(health_v1.router)
    app.include_router(api_v1)
    return app


app = create_app()
