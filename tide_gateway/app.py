"""
FastAPI application factory for the Tide-Data Gateway.

This module creates the main FastAPI app with:
- Upstream client lifecycle management
- CORS headers on every response, including preflight
- A last-resort error middleware returning the JSON envelope
- Proxy and health routes
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI, Request
from starlette.responses import Response

from ._version import __version__
from .config import Settings
from .errors import TransportFailure
from .proxy import apply_cors_headers, error_response, preflight_response
from .routes import router
from .upstream import UpstreamClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage upstream client lifecycle."""
    upstream = UpstreamClient(transport=app.state.upstream_transport)

    await upstream.connect()
    app.state.upstream = upstream

    yield

    await upstream.close()


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Gateway configuration (loaded from env if not provided)
        transport: Optional httpx transport for the upstream client
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Tide-Data Gateway",
        description=(
            "Read-only proxy for the CHS tide-data API. "
            "Adds CORS headers so browser pages can consume it."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upstream_transport = transport

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return preflight_response()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"HTTP handler error: {e}", exc_info=True)
            response = error_response(TransportFailure.from_exception(e))

        return apply_cors_headers(response)

    # API routes
    app.include_router(router, prefix=settings.route_prefix)

    # Health endpoint at root
    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "tide-gateway"}

    return app


# Default app instance
app = create_app()
