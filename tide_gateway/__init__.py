"""
Tide-Data Gateway - A CORS proxy in front of the CHS tide-data API.

Browser pages cannot call the CHS IWLS API directly because it does not
permit cross-origin requests. This service:
1. Accepts /proxy requests as path segments or an ``endpoint`` parameter
2. Forwards them, read-only, to the fixed CHS API origin
3. Returns the JSON body, or an error envelope, with CORS headers

Invariants:
    - The upstream origin is a constant, never taken from the request
    - One upstream call per inbound request, no retries, no caching
    - Every response is JSON (or an empty preflight) with CORS headers
"""

from ._version import __version__
from .app import create_app
from .routes import router

__all__ = ["__version__", "create_app", "router"]
