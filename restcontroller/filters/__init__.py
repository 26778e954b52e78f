# Filters package init
"""
restcontroller — Controller Behaviors
=======================================

Request filters a RestController assembles into its pipeline, in registry
order:

    corsFilter         → CorsFilter          (cors.py)
    contentNegotiator  → ContentNegotiator   (negotiator.py)
    authenticator      → HttpBearerAuth      (auth.py)
    csrfValidator      → CsrfValidator       (csrf.py, opt-in)
"""

from restcontroller.filters.auth import HttpBearerAuth, get_identity
from restcontroller.filters.base import ActionFilter, BehaviorSpec, match_action
from restcontroller.filters.cors import CorsFilter
from restcontroller.filters.csrf import CsrfValidator
from restcontroller.filters.negotiator import ContentNegotiator

__all__ = [
    "ActionFilter",
    "BehaviorSpec",
    "ContentNegotiator",
    "CorsFilter",
    "CsrfValidator",
    "HttpBearerAuth",
    "get_identity",
    "match_action",
]
