"""
restcontroller — Bearer Token Authentication Filter
=====================================================

What:  Resolves `Authorization: Bearer <token>` into an identity and enforces
       it on mandatory-auth actions.
Why:   Token verification belongs to the host application (database lookup,
       JWT validation...). This filter only extracts the token, hands it to
       the host's resolver, and decides what a missing identity means.
How:   Action classification:

           except_  → filter inactive, nothing attempted ("options" always)
           only     → token mandatory
           optional → token checked if present, guest allowed
           other    → inactive when `only` is set, mandatory otherwise

       `only` is checked before `optional`, so a controller can force auth on
       a few actions while the default `optional=["*"]` leaves the rest open.

Failure semantics on mandatory actions:
    no header / scheme other than Bearer / resolver returned None
        → 401 UnauthorizedError with `WWW-Authenticate: Bearer realm="api"`
    On optional actions the same cases continue as guest (identity None).
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from fastapi.security import HTTPBearer
from starlette.requests import Request
from starlette.responses import Response

from restcontroller.config import settings
from restcontroller.exceptions import UnauthorizedError
from restcontroller.filters.base import ActionFilter, match_action

logger = logging.getLogger(__name__)

IdentityResolver = Callable[[str], Union[Any, Awaitable[Any]]]


def get_identity(request: Request) -> Any:
    """Identity set by HttpBearerAuth for this request, or None for guests."""
    return getattr(request.state, "identity", None)


class HttpBearerAuth(ActionFilter):
    def __init__(
        self,
        identity_resolver: Optional[IdentityResolver] = None,
        optional: Optional[Sequence[str]] = None,
        only: Optional[Sequence[str]] = None,
        except_: Optional[Sequence[str]] = None,
        realm: Optional[str] = None,
    ):
        super().__init__(only=only, except_=except_)
        self.identity_resolver = identity_resolver
        self.optional = list(optional or [])
        self.realm = realm if realm is not None else settings.auth_realm
        self.scheme = HTTPBearer(auto_error=False)

    def is_active(self, action_id: str) -> bool:
        if match_action(action_id, self.except_):
            return False
        if self.only and not match_action(action_id, self.only):
            return self.is_optional(action_id)
        return True

    def is_optional(self, action_id: str) -> bool:
        if match_action(action_id, self.only):
            return False
        return match_action(action_id, self.optional)

    async def extract_token(self, request: Request) -> Optional[str]:
        credentials = await self.scheme(request)
        if credentials is None:
            return None
        return credentials.credentials

    async def authenticate(self, request: Request) -> Any:
        """
        Return the identity for the request's token, None if no token was sent.

        Raises UnauthorizedError when a token was sent but did not resolve.
        """
        token = await self.extract_token(request)
        if token is None:
            return None
        if self.identity_resolver is None:
            logger.warning("Bearer token received but no identity resolver is configured")
            raise UnauthorizedError(realm=self.realm)

        identity = self.identity_resolver(token)
        if inspect.isawaitable(identity):
            identity = await identity
        if identity is None:
            raise UnauthorizedError(realm=self.realm)
        return identity

    async def before_action(self, request: Request, action_id: str) -> Optional[Response]:
        request.state.identity = None
        optional = self.is_optional(action_id)
        try:
            identity = await self.authenticate(request)
        except UnauthorizedError:
            if optional:
                logger.debug("Invalid bearer token on optional action '%s'; continuing as guest", action_id)
                return None
            logger.info("Rejected invalid bearer token for action '%s'", action_id)
            raise

        if identity is not None:
            request.state.identity = identity
            return None
        if optional:
            return None

        logger.info("Missing bearer token for action '%s'", action_id)
        raise UnauthorizedError(realm=self.realm)
