# Routes package init
"""
restcontroller — Built-in Routes
==================================

    - health.py:  GET /health   (service probe, optional bearer auth)

Host applications mount their own RestController instances next to these.
"""
