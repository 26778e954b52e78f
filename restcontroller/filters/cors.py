"""
restcontroller — CORS Filter
==============================

What:  Adds CORS response headers to actual (non-preflight) cross-origin
       requests.
Why:   Browsers drop responses to cross-origin calls unless the response
       names the origin, and only expose the headers listed in
       Access-Control-Expose-Headers (the pagination headers here).
How:   The policy is held by a Starlette CORSMiddleware instance, which does
       the origin allow-listing and builds the simple-response headers. The
       filter only adds per-action scoping: headers are computed in
       before_action (so they survive a later filter raising) and written in
       after_action. Preflight requests never reach this filter; the
       controller's OPTIONS interceptor answers them.

Wildcard origin with credentials:
    Browsers reject `Access-Control-Allow-Origin: *` on credentialed
    requests. When the policy allows every origin AND credentials, the
    filter echoes the concrete request origin and adds `Vary: Origin`, even
    when the request carries no cookie (bearer tokens are credentials too).
    The app lifespan logs a warning at startup; restrict `REST_CORS_ORIGINS`
    to silence it.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response

from restcontroller.filters.base import ActionFilter

logger = logging.getLogger(__name__)

_STATE_KEY = "cors_headers"


class CorsFilter(ActionFilter):
    """
    CORS policy keyed the same way browsers name the headers:

        {
            "Origin": ["*"],
            "Access-Control-Allow-Credentials": True,
            "Access-Control-Request-Headers": ["content-type", ...],
            "Access-Control-Expose-Headers": ["x-pagination-total-count", ...],
        }
    """

    def __init__(
        self,
        cors: Optional[Mapping[str, Any]] = None,
        only: Optional[Sequence[str]] = None,
        except_: Optional[Sequence[str]] = None,
    ):
        super().__init__(only=only, except_=except_)
        cors = dict(cors or {})
        # Never called as an ASGI app; the filter drives it per action.
        self.middleware = CORSMiddleware(
            app=None,
            allow_origins=list(cors.get("Origin", ["*"])),
            allow_methods=["*"],
            allow_headers=list(cors.get("Access-Control-Request-Headers", [])),
            allow_credentials=bool(cors.get("Access-Control-Allow-Credentials", False)),
            expose_headers=list(cors.get("Access-Control-Expose-Headers", [])),
        )

        if self.middleware.allow_all_origins and self.allow_credentials:
            logger.debug(
                "CORS policy allows any origin with credentials; "
                "the request origin will be echoed instead of '*'"
            )

    @property
    def allow_credentials(self) -> bool:
        return "Access-Control-Allow-Credentials" in self.middleware.simple_headers

    @property
    def allow_headers(self) -> Sequence[str]:
        return self.middleware.allow_headers

    def is_origin_allowed(self, origin: str) -> bool:
        return self.middleware.is_allowed_origin(origin)

    def prepare_headers(self, request: Request) -> Dict[str, str]:
        origin = request.headers.get("origin")
        if not origin or not self.is_origin_allowed(origin):
            return {}

        headers = dict(self.middleware.simple_headers)
        if not self.middleware.allow_all_origins or self.allow_credentials:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Vary"] = "Origin"
        return headers

    async def before_action(self, request: Request, action_id: str) -> Optional[Response]:
        setattr(request.state, _STATE_KEY, self.prepare_headers(request))
        return None

    def after_action(self, request: Request, response: Response) -> Response:
        headers = getattr(request.state, _STATE_KEY, None)
        if headers is None:
            headers = self.prepare_headers(request)
        for name, value in headers.items():
            if name == "Vary":
                response.headers.add_vary_header(value)
            else:
                response.headers[name] = value
        return response
