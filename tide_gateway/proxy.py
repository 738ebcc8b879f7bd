"""
Request relay for the Tide-Data Gateway.

Both inbound route shapes (path segments or an ``endpoint`` query
parameter) are adapters that produce an UpstreamTarget. From there a
single relay step calls the CHS API and turns the outcome into a
response. CORS headers are attached by one decorating function, used
for every outbound response including preflight.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Optional
from urllib.parse import quote

from starlette.responses import JSONResponse, Response

from .errors import GatewayError, InvalidRequestError, TransportFailure
from .upstream import UpstreamClient, UpstreamTarget

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# RFC 3986 pchar minus unreserved (always kept) and '%'
SEGMENT_SAFE = ":@!$&'()*+,;="


def apply_cors_headers(response: Response) -> Response:
    """Attach the permissive CORS headers to a response in place."""
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


def preflight_response() -> Response:
    """Empty 200 answer to a CORS preflight request."""
    return apply_cors_headers(Response(status_code=200))


# --- Input adapters ---


def target_from_segments(segments: Sequence[str], query: str = "") -> UpstreamTarget:
    """Build a target from decoded path segments and a raw query string.

    Empty segments (from doubled or trailing slashes) are dropped. Each
    segment is percent-encoded again, so a decoded ``?`` or ``#`` stays
    inside its segment. The query string is kept byte-for-byte.
    """
    path = "/".join(quote(segment, safe=SEGMENT_SAFE) for segment in segments if segment)
    return UpstreamTarget(path=f"/{path}", query=query)


def target_from_endpoint(endpoint: Optional[str]) -> UpstreamTarget:
    """Build a target from the literal ``endpoint`` parameter.

    Raises:
        InvalidRequestError: If the parameter is missing or empty
    """
    if not endpoint:
        raise InvalidRequestError("Endpoint parameter is required", parameter="endpoint")
    return UpstreamTarget(path=endpoint)


# --- Relay ---


def error_response(error: GatewayError) -> JSONResponse:
    return JSONResponse(content=error.to_envelope().to_body(), status_code=error.status_code)


async def relay(
    upstream: UpstreamClient,
    resolve: Callable[[], UpstreamTarget],
) -> Response:
    """Resolve the target, call the CHS API once and build the response.

    Never raises: every failure becomes an error envelope.
    """
    try:
        target = resolve()
        data = await upstream.fetch_json(target)
    except GatewayError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error proxying CHS API request: {e}", exc_info=True)
        return error_response(TransportFailure.from_exception(e))

    return JSONResponse(content=data)
