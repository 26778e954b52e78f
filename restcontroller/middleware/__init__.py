# Middleware package init
"""
restcontroller — App-wide Middleware
======================================

What:  Concerns that apply to every request, before any controller is chosen.

Per-controller concerns (CORS, content negotiation, bearer auth) are NOT
middleware here: they depend on which action is being called, so they run
as controller filters (see restcontroller.filters) after routing.

    Request → [Request logging] → Router → RestRoute pipeline → Action
"""
