"""
API routes for the Tide-Data Gateway.

Two GET shapes reach the same relay:
- /proxy/{path...}?<query>   path segments plus a verbatim query string
- /proxy?endpoint=<path>     a literal upstream path

OPTIONS on any path is answered by the app middleware.
"""

from fastapi import APIRouter, Depends, Query, Request

from .proxy import relay, target_from_endpoint, target_from_segments
from .upstream import UpstreamClient

router = APIRouter(tags=["Tide Gateway"])


# --- Dependencies ---


def get_upstream(request: Request) -> UpstreamClient:
    """Get upstream client from app state."""
    return request.app.state.upstream


def get_endpoint(
    request: Request,
    endpoint: str | None = Query(None, description="Upstream path, e.g. /stations/123/data"),
) -> str | None:
    """Get the first ``endpoint`` value; later repeats are ignored."""
    values = request.query_params.getlist("endpoint")
    return values[0] if values else endpoint


# --- Proxy Routes ---


@router.get("/proxy")
async def proxy_endpoint(
    endpoint: str | None = Depends(get_endpoint),
    upstream: UpstreamClient = Depends(get_upstream),
):
    """
    Relay a CHS API request named by the ``endpoint`` parameter.

    Responds 400 without calling upstream when ``endpoint`` is missing.
    """
    return await relay(upstream, lambda: target_from_endpoint(endpoint))


@router.get("/proxy/{path:path}")
async def proxy_path(
    path: str,
    request: Request,
    upstream: UpstreamClient = Depends(get_upstream),
):
    """
    Relay a CHS API request named by the path below /proxy.

    The inbound query string is forwarded unchanged.
    """
    query = request.url.query
    return await relay(upstream, lambda: target_from_segments(path.split("/"), query))
