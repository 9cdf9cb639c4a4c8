"""auto_shared.credentials — Caller-supplied AWS credential bundles.

The bundle is built fresh from each request body, used for one operation and
dropped. It is never logged, cached or echoed back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from auto_shared.errors import ValidationError

__all__ = ["CREDENTIALS_FIELD", "CredentialBundle", "build_scope"]

CREDENTIALS_FIELD = "awsCredentials"


@dataclass(frozen=True)
class CredentialBundle:
    access_key_id: str
    secret_access_key: str = field(repr=False)
    region: str
    session_token: Optional[str] = field(default=None, repr=False)

    def session_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
            "region_name": self.region,
        }
        if self.session_token:
            kwargs["aws_session_token"] = self.session_token
        return kwargs


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def build_scope(body: Dict[str, Any], default_region: str) -> CredentialBundle:
    raw = body.get(CREDENTIALS_FIELD) if isinstance(body, dict) else None
    if not isinstance(raw, dict):
        raw = {}

    access_key_id = _text(raw.get("accessKeyId"))
    secret_access_key = _text(raw.get("secretAccessKey"))
    if not access_key_id or not secret_access_key:
        missing = [
            name
            for name, value in (("accessKeyId", access_key_id), ("secretAccessKey", secret_access_key))
            if not value
        ]
        raise ValidationError("accessKeyId and secretAccessKey required", missing=missing)

    return CredentialBundle(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        region=_text(raw.get("region")) or default_region,
        session_token=_text(raw.get("sessionToken")) or None,
    )
