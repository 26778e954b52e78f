"""
restcontroller — REST Controller
==================================

What:  An APIRouter whose routes run through a per-controller pipeline of
       CORS, content negotiation and bearer authentication, and which answers
       CORS preflight requests itself.
Why:   Every REST endpoint group needs the same cross-cutting setup. Putting
       it on the router means an endpoint module only declares its routes and
       which of them require a token.
How:   Each RestController builds its own APIRoute subclass bound to itself.
       The bound route wraps FastAPI's handler:

           OPTIONS request ──► preflight_response()       (no filter, no action)
           anything else   ──► behaviors() → filters.before_action (in order)
                               → action
                               → filters.after_action (reverse order)

       The behavior registry is rebuilt for every request, so a subclass can
       make it depend on anything it likes.

Usage:
    router = RestController(
        prefix="/api/posts",
        config=RestControllerConfig(only_auth_routes=["create_post"]),
        identity_resolver=find_user_by_token,
    )

    @router.post("")
    async def create_post(request: Request): ...
"""

import logging
from typing import Any, Callable, Coroutine, Dict, List, Optional

from fastapi import APIRouter
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response

from restcontroller.config import RestControllerConfig, settings
from restcontroller.exceptions import RestControllerError, error_response
from restcontroller.filters import (
    ActionFilter,
    BehaviorSpec,
    ContentNegotiator,
    CorsFilter,
    CsrfValidator,
    HttpBearerAuth,
)
from restcontroller.filters.auth import IdentityResolver
from restcontroller.middleware.logging import get_request_id

logger = logging.getLogger(__name__)

OPTIONS_ACTION = "options"

ActionHandler = Callable[[Request], Coroutine[Any, Any, Response]]


async def options_action() -> Response:
    """Endpoint registered for OPTIONS; preflight is answered before it runs."""
    return Response(status_code=200)


class RestRoute(APIRoute):
    """Route class whose handler runs through its controller's pipeline."""

    controller: "RestController"

    def get_route_handler(self) -> ActionHandler:
        action_handler = super().get_route_handler()
        controller = self.controller
        action_id = self.name

        async def rest_route_handler(request: Request) -> Response:
            if request.method == "OPTIONS":
                return controller.preflight_response(request)
            return await controller.run_action(request, action_id, action_handler)

        return rest_route_handler


class RestController(APIRouter):
    """
    Router for REST endpoints with CORS, JSON-only responses and bearer auth.

    Args:
        config:            Route classification; defaults to auth optional on
                           every action and mandatory on none.
        identity_resolver: Callable (sync or async) mapping a bearer token to
                           an identity, or None if the token is invalid.
        **router_kwargs:   Passed to APIRouter (prefix, tags, ...).
    """

    def __init__(
        self,
        *,
        config: Optional[RestControllerConfig] = None,
        identity_resolver: Optional[IdentityResolver] = None,
        **router_kwargs: Any,
    ):
        self.config = config or RestControllerConfig()
        self.identity_resolver = identity_resolver
        # Routes copied by include_router keep their class, and with it the controller.
        route_class = type(f"{type(self).__name__}Route", (RestRoute,), {"controller": self})
        router_kwargs.setdefault("route_class", route_class)
        super().__init__(**router_kwargs)

    @property
    def enable_csrf_validation(self) -> bool:
        return self.config.enable_csrf_validation

    # ══════════════════════════════════════════════════════════════════════
    # Error helper
    # ══════════════════════════════════════════════════════════════════════

    @staticmethod
    def error(response: Response, message: Any, code: int = 400) -> Any:
        """
        Set the response status and hand the payload back unchanged.

        Usage inside an action:
            if post is None:
                return RestController.error(response, "not found", 404)
        """
        response.status_code = code
        return message

    # ══════════════════════════════════════════════════════════════════════
    # Route classification
    # ══════════════════════════════════════════════════════════════════════

    def get_optional_auth_routes(self) -> List[str]:
        """Action ids where auth is attempted but not required."""
        return list(self.config.optional_auth_routes)

    def get_only_auth_routes(self) -> List[str]:
        """Action ids where auth is required."""
        return list(self.config.only_auth_routes)

    # ══════════════════════════════════════════════════════════════════════
    # Behavior assembly
    # ══════════════════════════════════════════════════════════════════════

    def base_behaviors(self) -> Dict[str, BehaviorSpec]:
        """Pipeline inherited from a parent controller; empty here."""
        return {}

    def behaviors(self) -> Dict[str, BehaviorSpec]:
        behaviors = self.base_behaviors()
        behaviors = self.add_cors_behaviors(behaviors)

        behaviors["authenticator"].update(
            optional=self.get_optional_auth_routes(),
            only=self.get_only_auth_routes(),
        )

        if self.enable_csrf_validation:
            behaviors["csrfValidator"] = BehaviorSpec(CsrfValidator, {"except_": [OPTIONS_ACTION]})

        return behaviors

    def add_cors_behaviors(self, behaviors: Dict[str, BehaviorSpec]) -> Dict[str, BehaviorSpec]:
        behaviors.pop("authenticator", None)

        behaviors["corsFilter"] = BehaviorSpec(
            CorsFilter,
            {
                "cors": {
                    "Origin": settings.cors_origins_list,
                    "Access-Control-Allow-Credentials": settings.cors_allow_credentials,
                    "Access-Control-Request-Headers": settings.cors_request_headers_list,
                    "Access-Control-Expose-Headers": settings.cors_expose_headers_list,
                },
            },
        )

        behaviors = self.add_content_negotiator_behavior(behaviors)
        behaviors = self.add_auth_behavior(behaviors)
        return behaviors

    def add_content_negotiator_behavior(self, behaviors: Dict[str, BehaviorSpec]) -> Dict[str, BehaviorSpec]:
        behaviors["contentNegotiator"] = BehaviorSpec(
            ContentNegotiator,
            {"formats": {"application/json": "json"}},
        )
        return behaviors

    def add_auth_behavior(self, behaviors: Dict[str, BehaviorSpec]) -> Dict[str, BehaviorSpec]:
        behaviors.pop("authenticator", None)
        behaviors["authenticator"] = BehaviorSpec(
            HttpBearerAuth,
            {
                "identity_resolver": self.identity_resolver,
                "except_": [OPTIONS_ACTION],
                "optional": ["*"],
            },
        )
        return behaviors

    # ══════════════════════════════════════════════════════════════════════
    # Request handling
    # ══════════════════════════════════════════════════════════════════════

    def preflight_response(self, request: Request) -> Response:
        """Answer a preflight by echoing what the browser asked for."""
        cors = self.prepare_cors(request)
        logger.debug(
            "Preflight from %s for %s %s",
            cors["origin"] or "<no origin>",
            cors["method"] or "<no method>",
            request.url.path,
        )
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": cors["origin"],
                "Access-Control-Allow-Methods": cors["method"],
                "Access-Control-Allow-Headers": cors["headers"],
                "Access-Control-Allow-Credentials": "true",
                "Allow": cors["method"],
            },
        )

    @staticmethod
    def prepare_cors(request: Request) -> Dict[str, str]:
        return {
            "origin": request.headers.get("origin", ""),
            "method": request.headers.get("access-control-request-method", ""),
            "headers": request.headers.get("access-control-request-headers", ""),
        }

    async def run_action(self, request: Request, action_id: str, action_handler: ActionHandler) -> Response:
        filters = [behavior.build() for behavior in self.behaviors().values()]
        ran: List[ActionFilter] = []
        response: Optional[Response] = None

        try:
            for action_filter in filters:
                if not action_filter.is_active(action_id):
                    continue
                ran.append(action_filter)
                response = await action_filter.before_action(request, action_id)
                if response is not None:
                    break
            if response is None:
                response = await action_handler(request)
        except RestControllerError as exc:
            logger.debug("Action '%s' failed with %d: %s", action_id, exc.status_code, exc.message)
            response = error_response(exc, get_request_id(request))
        except StarletteHTTPException as exc:
            logger.debug("Action '%s' raised HTTP %d: %s", action_id, exc.status_code, exc.detail)
            response = await http_exception_handler(request, exc)
        except RequestValidationError as exc:
            logger.debug("Action '%s' rejected invalid request: %s", action_id, exc.errors())
            response = await request_validation_exception_handler(request, exc)

        for action_filter in reversed(ran):
            response = action_filter.after_action(request, response)
        return response

    # ══════════════════════════════════════════════════════════════════════
    # Route registration
    # ══════════════════════════════════════════════════════════════════════

    def add_api_route(self, path: str, endpoint: Callable[..., Any], **kwargs: Any) -> None:
        super().add_api_route(path, endpoint, **kwargs)
        self._ensure_options_route(path)

    def _ensure_options_route(self, path: str) -> None:
        full_path = self.prefix + path
        for route in self.routes:
            if isinstance(route, APIRoute) and route.path == full_path and "OPTIONS" in route.methods:
                return
        super().add_api_route(
            path,
            options_action,
            methods=["OPTIONS"],
            name=OPTIONS_ACTION,
            include_in_schema=False,
        )
