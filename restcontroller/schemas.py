"""
restcontroller — Response Schemas
===================================

Pydantic models for the bodies this package produces itself. Host actions
declare their own response models.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Error body rendered for every RestControllerError.

    Example:
        {
            "error": "unauthorized",
            "message": "Your request was made with invalid credentials.",
            "details": {},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Service status")
    version: str = Field(description="Package version")
    authenticated: bool = Field(description="Whether the caller presented a valid bearer token")
    uptime_seconds: float = Field(description="Seconds since the service started")
