"""auto_shared.serialization — DynamoDB serialization and id/timestamp helpers."""

from __future__ import annotations

import datetime as dt
import time
import uuid
from decimal import Decimal
from typing import Any, Dict

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

__all__ = ["_deserialize", "_new_id", "_now_z", "_serialize", "_serialize_item"]

_SER = TypeSerializer()
_DESER = TypeDeserializer()


def _to_ddb_value(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {str(k): _to_ddb_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_ddb_value(v) for v in value]
    return value


def _serialize(value: Any) -> Any:
    """Serialize a Python value for DynamoDB (floats become Decimals)."""
    return _SER.serialize(_to_ddb_value(value))


def _serialize_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k): _serialize(v) for k, v in item.items()}


def _deserialize(item: Dict[str, Any]) -> Dict[str, Any]:
    """Deserialize a DynamoDB item to a plain Python dict."""
    out: Dict[str, Any] = {}
    for k, v in item.items():
        out[k] = _plain(_DESER.deserialize(v))
    return out


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == int(value) else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, set):
        return sorted(_plain(v) for v in value)
    return value


def _now_z() -> str:
    """Current UTC timestamp in ISO 8601 format with Z suffix."""
    return dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _new_id(prefix: str) -> str:
    """``<prefix>_<epoch millis>_<8 hex chars>``, e.g. ``ws_1717000000000_1a2b3c4d``."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"
