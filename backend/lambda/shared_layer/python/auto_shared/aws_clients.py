"""auto_shared.aws_clients — boto3 client construction and error wrapping.

Two kinds of clients:
    - process-role clients used by the built-in handlers, memoized per
      (service, region) since boto3 clients are thread-safe and stateless;
    - scope-bound clients built from a caller's CredentialBundle, created
      per call and never cached.

Neither retries: a failed call fails the request.
"""

from __future__ import annotations

import contextlib
import functools
import logging
from typing import Any, Iterator

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from auto_shared.credentials import CredentialBundle
from auto_shared.errors import UpstreamServiceError

__all__ = ["_client", "_upstream_message", "scoped_client", "upstream_errors"]

logger = logging.getLogger(__name__)

_NO_RETRY = Config(retries={"max_attempts": 1, "mode": "standard"})


@functools.lru_cache(maxsize=None)
def _client(service: str, region: str) -> Any:
    """Get (or create) the process-role client for ``service`` in ``region``."""
    return boto3.client(service, region_name=region, config=_NO_RETRY)


def scoped_client(service: str, scope: CredentialBundle) -> Any:
    """Build a transient client for ``service`` bound to the caller's credentials."""
    logger.info("[INFO] Building caller-scoped %s client in %s", service, scope.region)
    session = boto3.session.Session(**scope.session_kwargs())
    return session.client(service, config=_NO_RETRY)


def _upstream_message(exc: Exception, service: str) -> str:
    """The service's own error message when it sent one, else a generic fallback."""
    if isinstance(exc, ClientError):
        message = (exc.response.get("Error") or {}).get("Message")
        if message:
            return str(message)
    text = str(exc).strip()
    return text or f"{service} request failed"


@contextlib.contextmanager
def upstream_errors(service: str) -> Iterator[None]:
    """Re-raise boto failures inside the block as UpstreamServiceError."""
    try:
        yield
    except (BotoCoreError, ClientError) as exc:
        message = _upstream_message(exc, service)
        logger.error("[ERROR] %s call failed: %s", service, message)
        raise UpstreamServiceError(message, service=service) from exc
