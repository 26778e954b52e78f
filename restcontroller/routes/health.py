"""
restcontroller — Health Check Route
=====================================

What:  GET /health, served by a RestController so probes exercise the same
       pipeline (CORS, JSON negotiation, optional bearer auth) as real
       endpoints.
How:   Auth is optional on this action: a valid token is reported as
       `authenticated: true`, a missing or invalid one as `false`.
"""

import time
from typing import Optional

from starlette.requests import Request

from restcontroller import __version__
from restcontroller.config import RestControllerConfig
from restcontroller.controller import RestController
from restcontroller.filters.auth import IdentityResolver, get_identity
from restcontroller.schemas import ErrorResponse, HealthResponse

_start_time = time.time()


def build_health_controller(identity_resolver: Optional[IdentityResolver] = None) -> RestController:
    router = RestController(
        config=RestControllerConfig(optional_auth_routes=["health_check"]),
        identity_resolver=identity_resolver,
        tags=["Health"],
    )

    @router.get(
        "/health",
        response_model=HealthResponse,
        responses={406: {"model": ErrorResponse}},
        summary="Service health check",
    )
    async def health_check(request: Request) -> HealthResponse:
        return HealthResponse(
            status="healthy",
            version=__version__,
            authenticated=get_identity(request) is not None,
            uptime_seconds=round(time.time() - _start_time, 2),
        )

    return router
