"""
restcontroller — Request Logging Middleware
=============================================

What:  Access log line per request, correlated by a request ID.
How:   Takes the client's X-Request-ID or generates a short one, stores it in
       a ContextVar and on request.state (error bodies include it), echoes it
       on the response, and logs method, path, status and duration once the
       response is ready. Requests that raise are logged as 500 and re-raised.

Log level by outcome:
    5xx → ERROR, 4xx → WARNING, preflight → DEBUG, everything else → INFO

Request bodies and Authorization headers are never logged.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("restcontroller.access")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id(request: Request) -> str:
    """Request ID assigned by RequestLoggingMiddleware, or "" outside it."""
    return getattr(request.state, "request_id", "") or request_id_var.get("")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception:
            # ServerErrorMiddleware renders the 500 body after this frame unwinds;
            # its handler reads the ID from request.state.
            self.log_request(request, 500, start_time, rid)
            raise
        request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        self.log_request(request, response.status_code, start_time, rid)
        return response

    @staticmethod
    def log_request(request: Request, status: int, start_time: float, rid: str) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        elif request.method == "OPTIONS":
            log_level = logging.DEBUG
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
