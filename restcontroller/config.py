"""
restcontroller — Configuration
================================

What:  Process-wide settings (pydantic-settings) plus the per-controller
       route classification model.
Why:   CORS policy, auth header parsing and logging verbosity are deployment
       concerns and come from the environment; which actions need a bearer
       token is a property of each controller and is declared in code.
How:   `Settings` reads `REST_*` environment variables (or `.env`) once at
       import time. `RestControllerConfig` is handed to a controller when it
       is constructed; every field has a default, so a controller that
       declares nothing gets "auth optional everywhere, mandatory nowhere".
"""

from typing import List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults matching the stock REST controller behavior,
    so an application with no environment configured still works.
    """

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated; "*" allows any origin.
    cors_origins: str = Field(default="*")
    cors_allow_credentials: bool = Field(default=True)
    cors_request_headers: str = Field(default="content-type,authorization,accept")
    cors_expose_headers: str = Field(
        default=(
            "x-pagination-current-page,"
            "x-pagination-page-count,"
            "x-pagination-per-page,"
            "x-pagination-total-count"
        )
    )

    @property
    def cors_origins_list(self) -> List[str]:
        return _split_csv(self.cors_origins)

    @property
    def cors_request_headers_list(self) -> List[str]:
        return _split_csv(self.cors_request_headers)

    @property
    def cors_expose_headers_list(self) -> List[str]:
        return _split_csv(self.cors_expose_headers)

    # ── Content Negotiation ───────────────────────────────────────────────
    # Query parameter that forces a response format, e.g. ?_format=json
    format_param: str = Field(default="_format", min_length=1)

    # ── Bearer Authentication ─────────────────────────────────────────────
    auth_realm: str = Field(default="api")

    # ── CSRF (only used by controllers that enable validation) ───────────
    csrf_param: str = Field(default="_csrf", min_length=1)
    csrf_header: str = Field(default="X-CSRF-Token", min_length=1)

    model_config = {
        "env_prefix": "REST_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


class RestControllerConfig(BaseModel):
    """
    Route classification for a single controller.

    Attributes:
        optional_auth_routes: Action ids where a bearer token is checked if
            present but not required. Wildcards allowed; "*" means every action.
        only_auth_routes: Action ids where a bearer token is mandatory.
        enable_csrf_validation: Token APIs are stateless, so CSRF checks are
            off unless a controller opts in.
    """

    optional_auth_routes: List[str] = Field(default_factory=lambda: ["*"])
    only_auth_routes: List[str] = Field(default_factory=list)
    enable_csrf_validation: bool = False


settings = Settings()
