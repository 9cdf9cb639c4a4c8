"""whatsapp_webhook/lambda_function.py — WhatsApp Cloud API webhook stub for AUTO.

Routes:
    GET     — Meta webhook verification (hub.mode / hub.verify_token / hub.challenge)
    POST    — accept an inbound message payload (not yet routed to /chat)
    OPTIONS — CORS preflight

Environment variables:
    WHATSAPP_VERIFY_TOKEN   token configured on the Meta app
    ALLOWED_ORIGIN          default: *
"""

from __future__ import annotations

import hmac
import logging
from typing import Any, Dict

from auto_shared.config import CONFIG
from auto_shared.http_utils import _cors_headers, _error, _parse_body, _path_method, _query_params, _response

logger = logging.getLogger("whatsapp_webhook")
logger.setLevel(logging.INFO)


def _verify(event: Dict[str, Any]) -> Dict[str, Any]:
    params = _query_params(event)
    mode = params.get("hub.mode", "")
    token = params.get("hub.verify_token", "")
    challenge = params.get("hub.challenge", "")
    secret = CONFIG.whatsapp_verify_token
    if mode == "subscribe" and secret and hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8")):
        logger.info("[SUCCESS] Webhook verification accepted")
        return {
            "statusCode": 200,
            "headers": {**_cors_headers(), "Content-Type": "text/plain"},
            "body": challenge,
        }
    logger.warning("[WARNING] Webhook verification failed (mode=%s)", mode or "-")
    return _error(403, "Webhook verification failed")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    event = event or {}
    method, _path = _path_method(event)

    if method == "OPTIONS":
        return _response(200, {"ok": True})
    if method == "GET":
        return _verify(event)
    if method == "POST":
        payload = _parse_body(event)
        entries = payload.get("entry") if isinstance(payload.get("entry"), list) else []
        logger.info("[INFO] Webhook payload received with %d entries", len(entries))
        # Payloads are acknowledged only; signatures are not checked and nothing reaches /chat.
        return _response(
            202,
            {
                "status": "accepted",
                "message": "Webhook stub received payload. Routing to AUTO chat is not enabled in scaffold mode.",
            },
        )
    return _error(405, "Method not allowed")
