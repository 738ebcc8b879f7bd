"""
Error types for the Tide-Data Gateway.

This module defines all exception types raised while relaying a request:
- GatewayError: Base exception
- InvalidRequestError: Required inbound input is missing
- UpstreamError: The CHS API answered with a non-success status
- TransportFailure: Network, DNS, timeout or parse failure

Invariants:
    - All errors inherit from GatewayError
    - Every error renders to the same {"error", "details"?} envelope
    - Upstream status codes are preserved, local failures map to 400/500
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    """JSON body returned for every failed request."""

    error: str = Field(..., description="Human-readable error message")
    details: Optional[str] = Field(None, description="Best-effort diagnostic detail")

    def to_body(self) -> dict[str, Any]:
        """Serialize, leaving out ``details`` when it was not captured."""
        return self.model_dump(exclude_none=True)


class GatewayError(Exception):
    """Base exception for all gateway errors.

    Attributes:
        message: Error message, sent to the caller as ``error``
        code: Error code for programmatic handling
        status_code: HTTP status of the outbound response
        details: Optional diagnostic text, sent as ``details``
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "GATEWAY_ERROR"
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_envelope(self) -> ErrorEnvelope:
        return ErrorEnvelope(error=self.message, details=self.details)


class InvalidRequestError(GatewayError):
    """Required inbound input is missing.

    Raised before any upstream call is made, e.g. when the
    ``endpoint`` query parameter is absent or empty.
    """

    status_code = 400

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(message, code="INVALID_REQUEST")
        self.parameter = parameter


class UpstreamError(GatewayError):
    """The CHS API responded with a non-success status.

    The upstream status is mirrored on the outbound response and the
    upstream body, when it could be read, is carried as ``details``.
    """

    def __init__(self, upstream_status: int, body: Optional[str] = None) -> None:
        super().__init__(
            f"CHS API error: {upstream_status}",
            code="UPSTREAM_ERROR",
            details=body,
            status_code=upstream_status,
        )
        self.upstream_status = upstream_status


class TransportFailure(GatewayError):
    """Talking to the CHS API failed locally.

    Raised when:
    - Connection or DNS resolution fails
    - The request times out
    - A success response does not contain valid JSON
    - Any other unexpected exception occurs while relaying
    """

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__(
            "Failed to fetch tide data",
            code="TRANSPORT_FAILURE",
            details=details,
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> TransportFailure:
        """Wrap an arbitrary exception, keeping its message as details."""
        return cls(details=str(exc) or type(exc).__name__)
