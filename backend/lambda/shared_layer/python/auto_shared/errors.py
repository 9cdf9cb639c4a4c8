"""auto_shared.errors — Error taxonomy for the gateway.

Each error class carries a tag and the HTTP status the response layer maps it
to. Only authorization and routing failures get their own statuses; every
functional failure surfaces as 500 for compatibility with existing clients.
"""

from __future__ import annotations

from typing import Iterable, Optional

__all__ = [
    "AuthorizationError",
    "GatewayError",
    "RouteNotFoundError",
    "UnsupportedOperationError",
    "UpstreamServiceError",
    "ValidationError",
]


class GatewayError(Exception):
    """Base class for failures the gateway reports to callers."""

    tag = "Internal"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthorizationError(GatewayError):
    tag = "Auth"
    status_code = 401


class RouteNotFoundError(GatewayError):
    tag = "NotFound"
    status_code = 404


class ValidationError(GatewayError, ValueError):
    """Raised when required input is missing or empty, before any external call."""

    tag = "Validation"

    def __init__(self, message: str, missing: Optional[Iterable[str]] = None) -> None:
        super().__init__(message)
        self.missing = tuple(missing or ())


class UnsupportedOperationError(GatewayError):
    tag = "Unsupported"


class UpstreamServiceError(GatewayError):
    """Raised when a call to AWS or GitHub fails."""

    tag = "Upstream"

    def __init__(self, message: str, service: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.service = service
        self.status = status
