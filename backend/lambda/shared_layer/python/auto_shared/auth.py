"""auto_shared.auth — Shared-secret authorization gate.

Privileged routes require the ``AUTO_ADMIN_TOKEN`` secret, presented either in
the ``x-auto-token`` header or in ``Authorization`` (with or without a
``Bearer`` prefix). When no secret is configured every route is open.
"""

from __future__ import annotations

import hmac
from typing import Any, Mapping, Optional

from auto_shared.errors import AuthorizationError
from auto_shared.http_utils import _header

__all__ = ["TOKEN_HEADERS", "_check_auth", "authorize"]

TOKEN_HEADERS = ("x-auto-token", "authorization")


def _presented_token(headers: Optional[Mapping[str, Any]]) -> str:
    for name in TOKEN_HEADERS:
        value = _header(headers, name).strip()
        if value:
            return value
    return ""


def authorize(headers: Optional[Mapping[str, Any]], secret: str) -> bool:
    if not secret:
        return True
    token = _presented_token(headers)
    if not token:
        return False
    presented = token.encode("utf-8")
    return hmac.compare_digest(presented, secret.encode("utf-8")) or hmac.compare_digest(
        presented, f"Bearer {secret}".encode("utf-8")
    )


def _check_auth(headers: Optional[Mapping[str, Any]], secret: str) -> None:
    if not authorize(headers, secret):
        raise AuthorizationError("Unauthorized")
