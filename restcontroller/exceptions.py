"""
restcontroller — Exception Hierarchy
======================================

What:  Errors raised by the controller filters and by host actions.
Why:   Each filter failure maps to exactly one HTTP status. Raising a typed
       exception keeps filters free of response-building code and lets one
       renderer produce a consistent JSON body.
How:   Every exception carries a message, an optional context dict, and the
       headers the response must include (e.g. an auth challenge).
       `error_response()` turns any of them into a JSONResponse; both the
       route pipeline and the app-level handlers use it.

Exception Hierarchy:
    RestControllerError (base)      → 500
    ├── BadRequestError             → 400
    │   └── CsrfValidationError     → 400
    ├── UnauthorizedError           → 401 (+ WWW-Authenticate)
    └── NotAcceptableError          → 406
"""

from typing import Any, Dict, Optional

from starlette.responses import JSONResponse


class RestControllerError(Exception):
    """
    Base exception for all controller errors.

    Attributes:
        message:  User-facing error description (safe to return in the body)
        context:  Extra detail returned under "details"
        headers:  Response headers required by the error
    """

    status_code: int = 500
    error: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.headers = headers or {}
        super().__init__(self.message)


class BadRequestError(RestControllerError):
    status_code = 400
    error = "bad_request"


class CsrfValidationError(BadRequestError):
    """Unsafe request without a matching CSRF token."""

    error = "csrf_validation_failed"

    def __init__(
        self,
        message: str = "Unable to verify your data submission.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(RestControllerError):
    """
    Raised when a mandatory-auth action is called without valid credentials.

    The challenge header tells the client which scheme to retry with:
        WWW-Authenticate: Bearer realm="api"
    """

    status_code = 401
    error = "unauthorized"

    def __init__(
        self,
        message: str = "Your request was made with invalid credentials.",
        realm: str = "api",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            context=context,
            headers={"WWW-Authenticate": f'Bearer realm="{realm}"'},
        )
        self.realm = realm


class NotAcceptableError(RestControllerError):
    """The client accepts none of the formats the controller can produce."""

    status_code = 406
    error = "not_acceptable"

    def __init__(
        self,
        message: str = "None of your requested content types is supported.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


def error_response(exc: RestControllerError, request_id: str = "") -> JSONResponse:
    """Render a controller error as the standard JSON error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error,
            "message": exc.message,
            "details": exc.context,
            "request_id": request_id,
        },
        headers=dict(exc.headers),
    )
