"""
restcontroller — REST controller layer for FastAPI
====================================================

What: Routers that give REST endpoints CORS handling, JSON-only content
      negotiation and bearer-token authentication out of the box.

Layout:

    ┌─────────────────────────────────────┐
    │  main.py        app factory         │  ← logging, error handlers
    ├─────────────────────────────────────┤
    │  controller.py  RestController      │  ← preflight + behavior pipeline
    ├─────────────────────────────────────┤
    │  filters/       CORS, negotiation,  │  ← one behavior per module
    │                 bearer auth, CSRF   │
    ├─────────────────────────────────────┤
    │  config.py      settings            │  ← REST_* environment variables
    ├─────────────────────────────────────┤
    │  pagination.py  X-Pagination-*      │  ← list endpoint headers
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"

from restcontroller.config import RestControllerConfig  # noqa: E402
from restcontroller.controller import RestController  # noqa: E402
from restcontroller.pagination import Pagination, set_pagination_headers  # noqa: E402

__all__ = ["Pagination", "RestController", "RestControllerConfig", "__version__", "set_pagination_headers"]
