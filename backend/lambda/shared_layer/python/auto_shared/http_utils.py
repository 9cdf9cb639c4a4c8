"""auto_shared.http_utils — Response envelope, CORS headers, request parsing.

Every response carries the same CORS header set and a JSON body. Failures are
rendered as ``{"error": message}`` with the status taken from the error's tag.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from auto_shared.config import CONFIG
from auto_shared.errors import GatewayError

__all__ = [
    "_cors_headers",
    "_error",
    "_header",
    "_parse_body",
    "_path_method",
    "_query_params",
    "_request_origin",
    "_response",
    "error_status",
]

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET,POST,OPTIONS"
ALLOW_HEADERS = "Content-Type,Authorization,x-auto-token"

_STATUS_BY_TAG = {
    "Auth": 401,
    "NotFound": 404,
    "Validation": 500,
    "Unsupported": 500,
    "Upstream": 500,
}


def _cors_headers(origin: Optional[str] = None) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin or CONFIG.allowed_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Cache-Control": "no-store",
    }


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    return str(obj)


def _response(status_code: int, payload: Any, origin: Optional[str] = None) -> Dict[str, Any]:
    """Build an API Gateway proxy response with CORS headers."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json", **_cors_headers(origin)},
        "body": json.dumps(payload, default=_json_default),
    }


def _error(status_code: int, message: str, origin: Optional[str] = None) -> Dict[str, Any]:
    return _response(status_code, {"error": message or "Internal error"}, origin)


def error_status(exc: BaseException) -> int:
    """Map a failure to its HTTP status. Anything untagged is a 500."""
    if isinstance(exc, GatewayError):
        return _STATUS_BY_TAG.get(exc.tag, 500)
    return 500


def _header(headers: Optional[Mapping[str, Any]], name: str) -> str:
    """Case-insensitive header lookup; returns "" when absent."""
    if not headers:
        return ""
    value = headers.get(name)
    if value is None:
        wanted = name.lower()
        for key, candidate in headers.items():
            if str(key).lower() == wanted:
                value = candidate
                break
    return "" if value is None else str(value)


def _request_origin(event: Dict[str, Any]) -> str:
    return _header(event.get("headers"), "origin")


def _parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Parse the JSON body. Malformed or non-object bodies become ``{}``."""
    raw = event.get("body")
    if raw in (None, ""):
        return {}
    if event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, TypeError):
            return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _query_params(event: Dict[str, Any]) -> Dict[str, str]:
    params = event.get("queryStringParameters") or {}
    return {str(k): "" if v is None else str(v) for k, v in params.items()}


def _path_method(event: Dict[str, Any]) -> Tuple[str, str]:
    """Extract HTTP method and path from an API Gateway v1 or v2 event."""
    rc = event.get("requestContext") or {}
    http = rc.get("http") or {}
    method = str(http.get("method") or event.get("httpMethod") or "GET").upper()
    path = str(http.get("path") or event.get("rawPath") or event.get("path") or "/")
    return method, path
