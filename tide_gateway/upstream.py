"""
HTTP client for the CHS tide-data API.

This is a thin read-only wrapper around httpx that knows exactly one
origin. Callers hand it an UpstreamTarget (a path and a raw query
string); the base origin is always prepended here, so nothing in an
inbound request can point the gateway at another host.

Invariants:
    - One GET per fetch, no retries
    - Non-success statuses raise UpstreamError with the status preserved
    - Transport and JSON decoding problems raise TransportFailure
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .errors import TransportFailure, UpstreamError

logger = logging.getLogger(__name__)

CHS_API_BASE = "https://api.iwls-sine.azure.cloud-nuage.dfo-mpo.gc.ca/api/v1"


@dataclass(frozen=True)
class UpstreamTarget:
    """Resolved upstream resource.

    Attributes:
        path: Path below the CHS API base, e.g. ``/stations/123/data``
        query: Raw query string, appended unmodified when non-empty
    """

    path: str
    query: str = ""

    @property
    def url(self) -> str:
        url = f"{CHS_API_BASE}{self.path}"
        if self.query:
            url = f"{url}?{self.query}"
        return url


class UpstreamClient:
    """
    Async client for the CHS API.

    Holds a single httpx.AsyncClient for the lifetime of the app. The
    client carries no per-request state, so concurrent fetches are
    independent of each other.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        if self._client:
            return

        self._client = httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=True,
        )
        logger.info(f"Upstream client ready for {CHS_API_BASE}")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_json(self, target: UpstreamTarget) -> Any:
        """Fetch a CHS API resource and decode it as JSON.

        Args:
            target: Resolved upstream path and query

        Returns:
            The decoded JSON body, unchanged

        Raises:
            UpstreamError: If the CHS API answered with a non-2xx status
            TransportFailure: If the call failed or the body is not JSON
        """
        if not self._client:
            raise RuntimeError("Not connected")

        url = target.url
        logger.info(f"Proxying to: {url}")

        try:
            request = self._client.build_request(
                "GET", url, headers={"Accept": "application/json"}
            )
            response = await self._client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Error proxying CHS API request to {url}: {e}")
            raise TransportFailure.from_exception(e) from e

        try:
            if not response.is_success:
                logger.warning(f"CHS API returned {response.status_code} for {url}")
                raise UpstreamError(response.status_code, await _read_text(response))

            try:
                await response.aread()
                return response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Invalid CHS API response from {url}: {e}")
                raise TransportFailure.from_exception(e) from e
        finally:
            await response.aclose()


async def _read_text(response: httpx.Response) -> Optional[str]:
    """Read an error body, returning None if the read itself fails."""
    try:
        await response.aread()
        return response.text
    except httpx.HTTPError as e:
        logger.debug(f"Could not read CHS API error body: {e}")
        return None
