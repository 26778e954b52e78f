"""
restcontroller — CSRF Validation Filter
=========================================

Double-submit check for controllers that opt in with
`RestControllerConfig(enable_csrf_validation=True)`: an unsafe request must
echo the CSRF cookie value in the CSRF header. Bearer-token APIs leave this
off, which is the default.
"""

import hmac
from typing import Optional, Sequence

from starlette.requests import Request
from starlette.responses import Response

from restcontroller.config import settings
from restcontroller.exceptions import CsrfValidationError
from restcontroller.filters.base import ActionFilter

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class CsrfValidator(ActionFilter):
    def __init__(
        self,
        param: Optional[str] = None,
        header: Optional[str] = None,
        only: Optional[Sequence[str]] = None,
        except_: Optional[Sequence[str]] = None,
    ):
        super().__init__(only=only, except_=except_)
        self.param = param or settings.csrf_param
        self.header = header or settings.csrf_header

    def validate(self, request: Request) -> bool:
        if request.method in SAFE_METHODS:
            return True
        expected = request.cookies.get(self.param)
        submitted = request.headers.get(self.header)
        if not expected or not submitted:
            return False
        return hmac.compare_digest(expected, submitted)

    async def before_action(self, request: Request, action_id: str) -> Optional[Response]:
        if not self.validate(request):
            raise CsrfValidationError(context={"action": action_id})
        return None
