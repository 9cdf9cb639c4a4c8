"""auto_shared.operations — Allow-listed AWS operations run with caller credentials.

Each operation has a typed input with its required fields declared once, and an
executor that builds exactly one scope-bound client and performs one action.

Supported operations:
    s3_put_object          bucket, key
    s3_delete_object       bucket, key
    cloudfront_invalidate  distributionId
    dynamodb_put_item      tableName, item
    lambda_update_env      functionName, environment

Input is validated in a single pass before any client is constructed, so a
rejected request never has side effects.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Sequence, Tuple

from auto_shared.aws_clients import scoped_client, upstream_errors
from auto_shared.credentials import CredentialBundle
from auto_shared.errors import UnsupportedOperationError, ValidationError
from auto_shared.serialization import _serialize_item

__all__ = [
    "OPERATIONS",
    "CloudFrontInvalidateInput",
    "DynamoDbPutItemInput",
    "LambdaUpdateEnvInput",
    "OperationSpec",
    "S3DeleteObjectInput",
    "S3PutObjectInput",
    "coerce_input",
    "execute",
    "list_operations",
]

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"
DEFAULT_INVALIDATION_PATHS = ("/*",)


# ---------------------------------------------------------------------------
# Input shaping
# ---------------------------------------------------------------------------


def coerce_input(raw: Any) -> Any:
    """Parse string input as JSON; unparseable strings pass through unchanged."""
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


def _fields(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _object(value: Any) -> Dict[str, Any]:
    value = coerce_input(value) if isinstance(value, str) else value
    return value if isinstance(value, dict) else {}


def _flag(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value.strip().lower() not in {"false", "0", "no", "off"}
    return bool(value)


def _join_fields(names: Sequence[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def _require(required: Sequence[str], values: Mapping[str, Any]) -> None:
    """Raise one ValidationError listing every required field that is empty."""
    missing = [name for name in required if not values.get(name)]
    if missing:
        raise ValidationError(
            f"{_join_fields(required)} required (missing: {', '.join(missing)})",
            missing=missing,
        )


def _content_body(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _invalidation_paths(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        value = []
    paths = []
    for entry in value:
        path = _text(entry)
        if not path:
            continue
        paths.append(path if path.startswith("/") else f"/{path}")
    return paths or list(DEFAULT_INVALIDATION_PATHS)


# ---------------------------------------------------------------------------
# Typed inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class S3PutObjectInput:
    required_fields: ClassVar[Tuple[str, ...]] = ("bucket", "key")

    bucket: str
    key: str
    content: str = ""
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def from_input(cls, raw: Any) -> "S3PutObjectInput":
        data = _fields(raw)
        values = {
            "bucket": _text(data.get("bucket")),
            "key": _text(data.get("key")).lstrip("/"),
        }
        _require(cls.required_fields, values)
        return cls(
            content=_content_body(data.get("content")),
            content_type=_text(data.get("contentType")) or DEFAULT_CONTENT_TYPE,
            **values,
        )


@dataclass(frozen=True)
class S3DeleteObjectInput:
    required_fields: ClassVar[Tuple[str, ...]] = ("bucket", "key")

    bucket: str
    key: str

    @classmethod
    def from_input(cls, raw: Any) -> "S3DeleteObjectInput":
        data = _fields(raw)
        values = {
            "bucket": _text(data.get("bucket")),
            "key": _text(data.get("key")).lstrip("/"),
        }
        _require(cls.required_fields, values)
        return cls(**values)


@dataclass(frozen=True)
class CloudFrontInvalidateInput:
    required_fields: ClassVar[Tuple[str, ...]] = ("distributionId",)

    distribution_id: str
    paths: Tuple[str, ...] = DEFAULT_INVALIDATION_PATHS

    @classmethod
    def from_input(cls, raw: Any) -> "CloudFrontInvalidateInput":
        data = _fields(raw)
        distribution_id = _text(data.get("distributionId"))
        _require(cls.required_fields, {"distributionId": distribution_id})
        return cls(
            distribution_id=distribution_id,
            paths=tuple(_invalidation_paths(data.get("paths"))),
        )


@dataclass(frozen=True)
class DynamoDbPutItemInput:
    required_fields: ClassVar[Tuple[str, ...]] = ("tableName", "item")

    table_name: str
    item: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_input(cls, raw: Any) -> "DynamoDbPutItemInput":
        data = _fields(raw)
        table_name = _text(data.get("tableName"))
        item = _object(data.get("item"))
        _require(cls.required_fields, {"tableName": table_name, "item": item})
        return cls(table_name=table_name, item=item)


@dataclass(frozen=True)
class LambdaUpdateEnvInput:
    required_fields: ClassVar[Tuple[str, ...]] = ("functionName", "environment")

    function_name: str
    environment: Dict[str, str] = field(default_factory=dict)
    merge: bool = True

    @classmethod
    def from_input(cls, raw: Any) -> "LambdaUpdateEnvInput":
        data = _fields(raw)
        function_name = _text(data.get("functionName"))
        environment = _object(data.get("environment"))
        _require(cls.required_fields, {"functionName": function_name, "environment": environment})
        return cls(
            function_name=function_name,
            # Lambda only accepts string values.
            environment={str(k): _content_body(v) for k, v in environment.items()},
            merge=_flag(data.get("merge"), True),
        )


# ---------------------------------------------------------------------------
# Executors
# ---------------------------------------------------------------------------


def _s3_put_object(params: S3PutObjectInput, scope: CredentialBundle) -> Dict[str, Any]:
    body = params.content.encode("utf-8")
    scoped_client("s3", scope).put_object(
        Bucket=params.bucket,
        Key=params.key,
        Body=body,
        ContentType=params.content_type,
    )
    return {
        "bucket": params.bucket,
        "key": params.key,
        "bytes": len(body),
        "contentType": params.content_type,
    }


def _s3_delete_object(params: S3DeleteObjectInput, scope: CredentialBundle) -> Dict[str, Any]:
    scoped_client("s3", scope).delete_object(Bucket=params.bucket, Key=params.key)
    return {"bucket": params.bucket, "key": params.key}


def _cloudfront_invalidate(params: CloudFrontInvalidateInput, scope: CredentialBundle) -> Dict[str, Any]:
    caller_reference = f"auto-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
    resp = scoped_client("cloudfront", scope).create_invalidation(
        DistributionId=params.distribution_id,
        InvalidationBatch={
            "Paths": {"Quantity": len(params.paths), "Items": list(params.paths)},
            "CallerReference": caller_reference,
        },
    )
    invalidation = resp.get("Invalidation") or {}
    return {
        "distributionId": params.distribution_id,
        "invalidationId": invalidation.get("Id", ""),
        "status": invalidation.get("Status", ""),
        "paths": list(params.paths),
    }


def _dynamodb_put_item(params: DynamoDbPutItemInput, scope: CredentialBundle) -> Dict[str, Any]:
    scoped_client("dynamodb", scope).put_item(
        TableName=params.table_name,
        Item=_serialize_item(params.item),
    )
    return {"tableName": params.table_name, "attributes": sorted(params.item)}


def _lambda_update_env(params: LambdaUpdateEnvInput, scope: CredentialBundle) -> Dict[str, Any]:
    client = scoped_client("lambda", scope)
    variables: Dict[str, str] = {}
    if params.merge:
        current = client.get_function_configuration(FunctionName=params.function_name)
        variables.update((current.get("Environment") or {}).get("Variables") or {})
    variables.update(params.environment)

    client.update_function_configuration(
        FunctionName=params.function_name,
        Environment={"Variables": variables},
    )
    return {
        "functionName": params.function_name,
        "merge": params.merge,
        "updatedKeys": sorted(params.environment),
        "variableNames": sorted(variables),
    }


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperationSpec:
    name: str
    service: str
    input_type: Any
    executor: Callable[[Any, CredentialBundle], Dict[str, Any]]

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return self.input_type.required_fields


OPERATIONS: Mapping[str, OperationSpec] = MappingProxyType(
    {
        spec.name: spec
        for spec in (
            OperationSpec("s3_put_object", "s3", S3PutObjectInput, _s3_put_object),
            OperationSpec("s3_delete_object", "s3", S3DeleteObjectInput, _s3_delete_object),
            OperationSpec("cloudfront_invalidate", "cloudfront", CloudFrontInvalidateInput, _cloudfront_invalidate),
            OperationSpec("dynamodb_put_item", "dynamodb", DynamoDbPutItemInput, _dynamodb_put_item),
            OperationSpec("lambda_update_env", "lambda", LambdaUpdateEnvInput, _lambda_update_env),
        )
    }
)


def list_operations() -> List[Dict[str, Any]]:
    return [
        {"name": spec.name, "requiredFields": list(spec.required_fields)}
        for spec in OPERATIONS.values()
    ]


def execute(name: Any, raw_input: Any, scope: CredentialBundle) -> Dict[str, Any]:
    """Validate and run one allow-listed operation with the caller's credentials."""
    op_name = _text(name)
    if not op_name:
        raise ValidationError("operation required", missing=("operation",))

    spec = OPERATIONS.get(op_name)
    if spec is None:
        raise UnsupportedOperationError(f"Unsupported operation: {op_name}")

    params = spec.input_type.from_input(coerce_input(raw_input))

    with upstream_errors(spec.service):
        result = spec.executor(params, scope)

    logger.info("[SUCCESS] Operation %s completed", spec.name)
    return {"ok": True, "operation": spec.name, **result}
