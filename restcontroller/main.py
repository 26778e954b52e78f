"""
restcontroller — FastAPI Application Factory
==============================================

What:  Builds a FastAPI app with logging, error handlers, the built-in health
       controller and any controllers the host passes in.
How:   create_app(*controllers) returns a configured FastAPI instance;
       `app` below is the default instance for `uvicorn restcontroller.main:app`.

Request flow:
    ┌──────────────────────────────────────────────────────────┐
    │  RequestLoggingMiddleware (X-Request-ID, access log)     │
    │    └─ Router                                             │
    │         └─ RestRoute                                     │
    │              OPTIONS → preflight response                │
    │              else    → corsFilter → contentNegotiator    │
    │                        → authenticator → action          │
    └──────────────────────────────────────────────────────────┘

Exception handlers:
    RestControllerError → its own status (400 / 401 / 406 ...)
    Exception           → 500, details logged server-side only
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from restcontroller import __version__
from restcontroller.config import settings
from restcontroller.controller import RestController
from restcontroller.exceptions import RestControllerError, error_response
from restcontroller.filters.auth import IdentityResolver
from restcontroller.middleware.logging import RequestLoggingMiddleware, get_request_id
from restcontroller.routes.health import build_health_controller

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging from `settings.log_level`.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("restcontroller %s starting", __version__)
    logger.info("CORS origins: %s", ", ".join(settings.cors_origins_list))
    if "*" in settings.cors_origins_list and settings.cors_allow_credentials:
        logger.warning(
            "Credentialed CORS with wildcard origin; set REST_CORS_ORIGINS to restrict it"
        )

    yield

    logger.info("restcontroller shutting down")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map controller errors to their HTTP status and format.

    Errors raised inside a RestController pipeline are rendered by the route
    itself (so CORS headers are still applied); these handlers cover errors
    raised elsewhere, e.g. in dependencies of plain routes.
    """

    @app.exception_handler(RestControllerError)
    async def handle_controller_error(request: Request, exc: RestControllerError):
        rid = get_request_id(request)
        logger.warning("[%s] %s: %s", rid, exc.error, exc.message)
        return error_response(exc, rid)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = get_request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    *controllers: RestController,
    identity_resolver: Optional[IdentityResolver] = None,
    title: str = "REST API",
) -> FastAPI:
    """
    Create a FastAPI app serving the given controllers.

    Args:
        controllers:       RestController instances to mount, in order.
        identity_resolver: Used by the built-in health controller to report
                           whether the caller is authenticated.
    """
    app = FastAPI(title=title, version=__version__, lifespan=lifespan)

    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(build_health_controller(identity_resolver))
    for controller in controllers:
        app.include_router(controller)

    return app


app = create_app()
