"""auto_api/lambda_function.py — AUTO control-plane API.

Routes (via API Gateway proxy; any base path prefix):
    POST /chat                 — Bedrock (Nova) chat reply
    POST /chat/speak           — Polly text-to-speech (base64 mp3)
    POST /image/generate       — Bedrock (Nova Canvas) text-to-image
    POST /image/analyze        — Bedrock (Nova) image description
    POST /github/analyze       — summarize a GitHub repository
    POST /github/push          — commit one file to a GitHub repository
    POST /workspace/create     — allocate a workspace id
    POST /workspace/patch      — write a workspace file            [auth]
    GET  /workspace/list       — list workspace files
    GET  /workspace/read       — read a workspace file
    POST /runs/start           — record and start a run             [auth]
    GET  /runs/status          — fetch run metadata
    POST /aws/validate         — check caller-supplied credentials  [auth]
    POST /aws/execute          — run an allow-listed AWS operation  [auth]
    OPTIONS *                  — CORS preflight

Auth:
    [auth] routes require AUTO_ADMIN_TOKEN via x-auto-token or Authorization
    (optionally "Bearer <token>"). With no token configured all routes are open.

Errors:
    401 unauthorized, 404 unknown route, 500 for every other failure.
    The body is always JSON: {"error": "<message>"}.

Workspace files live in S3 under workspaces/{workspaceId}/...; run metadata in
DynamoDB. See auto_shared.config for environment variables.
"""

from __future__ import annotations

import base64
import json
import logging
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import ClientError

from auto_shared.auth import _check_auth
from auto_shared.aws_clients import _client, scoped_client, upstream_errors
from auto_shared.config import CONFIG
from auto_shared.credentials import build_scope
from auto_shared.errors import GatewayError, RouteNotFoundError, UpstreamServiceError, ValidationError
from auto_shared.http_utils import (
    _error,
    _path_method,
    _query_params,
    _request_origin,
    _response,
    error_status,
)
from auto_shared.operations import execute, list_operations
from auto_shared.routing import Request, Route, Router
from auto_shared.serialization import _deserialize, _new_id, _now_z, _serialize, _serialize_item

logger = logging.getLogger("auto_api")
logger.setLevel(logging.INFO)

SYSTEM_PROMPT = (
    "You are AUTO, an AWS-only app-building assistant. "
    "Reply with concise steps first, then the next actionable step."
)
CHAT_HISTORY_TURNS = 8
SPEECH_MAX_CHARS = 3000
WORKSPACE_PREFIX = "workspaces"
WORKSPACE_MARKER = ".init"
GITHUB_FILE_LIST_LIMIT = 200

_RE_GITHUB_REPO = re.compile(
    r"^(?:https?://github\.com/|git@github\.com:)?(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?/?$"
)

_CONTENT_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".md": "text/markdown; charset=utf-8",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


# ---------------------------------------------------------------------------
# Bedrock / Polly helpers
# ---------------------------------------------------------------------------


def _invoke_model(model_id: str, payload: Dict[str, Any]) -> Tuple[Dict[str, Any], str]:
    """Invoke a Bedrock model; returns (parsed JSON or {}, raw text)."""
    with upstream_errors("bedrock"):
        resp = _client("bedrock-runtime", CONFIG.region).invoke_model(
            modelId=model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(payload).encode("utf-8"),
        )
        raw = resp["body"].read().decode("utf-8")
    try:
        out = json.loads(raw)
    except json.JSONDecodeError:
        out = {}
    return (out if isinstance(out, dict) else {}), raw


def _reply_text(out: Dict[str, Any], raw: str) -> str:
    content = ((out.get("output") or {}).get("message") or {}).get("content") or []
    first = content[0] if content and isinstance(content[0], dict) else {}
    reply = (
        first.get("text")
        or (out.get("output") or {}).get("text")
        or out.get("reply")
        or out.get("completion")
        or raw
    )
    return str(reply or "")


def _converse(user_content: List[Dict[str, Any]], temperature: float = 0.25, max_tokens: int = 900) -> str:
    payload = {
        "system": [{"text": SYSTEM_PROMPT}],
        "messages": [{"role": "user", "content": user_content}],
        "inferenceConfig": {"temperature": temperature, "max_new_tokens": max_tokens},
    }
    out, raw = _invoke_model(CONFIG.model_id, payload)
    return _reply_text(out, raw)


# ---------------------------------------------------------------------------
# Chat / speech / image handlers
# ---------------------------------------------------------------------------


def _handle_chat(request: Request) -> Dict[str, Any]:
    messages = request.body.get("messages")
    if not isinstance(messages, list):
        messages = []
    user_turns = [
        _text(m.get("content"))
        for m in messages
        if isinstance(m, dict) and m.get("role") == "user" and _text(m.get("content"))
    ]
    user_text = "\n\n".join(user_turns[-CHAT_HISTORY_TURNS:])
    if not user_text:
        return {"reply": "messages[] required"}
    return {"reply": _converse([{"text": user_text}])}


def _handle_speak(request: Request) -> Dict[str, Any]:
    text = _text(request.body.get("text"))[:SPEECH_MAX_CHARS]
    if not text:
        raise ValidationError("text required", missing=("text",))
    voice_id = _text(request.body.get("voiceId")) or CONFIG.voice_id
    with upstream_errors("polly"):
        resp = _client("polly", CONFIG.region).synthesize_speech(
            Text=text,
            OutputFormat="mp3",
            VoiceId=voice_id,
        )
        audio = resp["AudioStream"].read()
    return {"audio": base64.b64encode(audio).decode("ascii"), "voiceId": voice_id}


def _handle_image_generate(request: Request) -> Dict[str, Any]:
    prompt = _text(request.body.get("prompt"))
    if not prompt:
        raise ValidationError("prompt required", missing=("prompt",))
    payload = {
        "taskType": "TEXT_IMAGE",
        "textToImageParams": {"text": prompt[:1024]},
        "imageGenerationConfig": {"numberOfImages": 1, "width": 1024, "height": 1024, "cfgScale": 8.0},
    }
    out, _raw = _invoke_model(CONFIG.image_model_id, payload)
    if out.get("error"):
        raise UpstreamServiceError(str(out["error"]), service="bedrock")
    images = out.get("images") or []
    if not images:
        raise UpstreamServiceError("Image generation returned no image", service="bedrock")
    return {"image": images[0]}


def _handle_image_analyze(request: Request) -> Dict[str, Any]:
    image = _text(request.body.get("image"))
    if image.startswith("data:") and "," in image:
        image = image.split(",", 1)[1]
    if not image:
        raise ValidationError("image required", missing=("image",))
    image_format = _text(request.body.get("format")).lower() or "png"
    prompt = _text(request.body.get("prompt")) or "Describe this image and note anything relevant to building an app."
    analysis = _converse(
        [
            {"image": {"format": image_format, "source": {"bytes": image}}},
            {"text": prompt},
        ]
    )
    return {"analysis": analysis}


# ---------------------------------------------------------------------------
# GitHub handlers
# ---------------------------------------------------------------------------


def _parse_repo(value: str) -> Tuple[str, str]:
    match = _RE_GITHUB_REPO.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid GitHub repository: {value}")
    return match.group("owner"), match.group("repo")


def _github_request(
    method: str,
    path: str,
    token: str = "",
    payload: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Call the GitHub REST API; raises UpstreamServiceError with GitHub's message."""
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": "auto-control-plane",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    data = None
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        headers["Content-Type"] = "application/json"

    req = urllib.request.Request(f"{CONFIG.github_api_base}{path}", data=data, method=method, headers=headers)
    try:
        with urllib.request.urlopen(req, timeout=15) as resp:
            return json.loads(resp.read() or b"{}")
    except urllib.error.HTTPError as exc:
        body_text = exc.read().decode("utf-8", errors="replace")
        try:
            message = json.loads(body_text).get("message") or ""
        except (json.JSONDecodeError, AttributeError):
            message = ""
        logger.error("[ERROR] GitHub %s %s failed: %s %s", method, path, exc.code, body_text[:500])
        raise UpstreamServiceError(
            message or f"GitHub request failed ({exc.code})", service="github", status=exc.code
        ) from exc
    except urllib.error.URLError as exc:
        logger.error("[ERROR] GitHub %s %s unreachable: %s", method, path, exc.reason)
        raise UpstreamServiceError("GitHub request failed", service="github") from exc


def _handle_github_analyze(request: Request) -> Dict[str, Any]:
    url = _text(request.body.get("url"))
    if not url:
        raise ValidationError("url required", missing=("url",))
    owner, repo = _parse_repo(url)
    token = _text(request.body.get("token"))

    info = _github_request("GET", f"/repos/{owner}/{repo}", token)
    branch = info.get("default_branch") or "main"
    tree = _github_request(
        "GET",
        f"/repos/{owner}/{repo}/git/trees/{urllib.parse.quote(branch, safe='')}?recursive=1",
        token,
    )
    files = [entry.get("path", "") for entry in tree.get("tree") or [] if entry.get("type") == "blob"]

    summary_prompt = (
        f"Repository: {info.get('full_name') or f'{owner}/{repo}'}\n"
        f"Description: {info.get('description') or '(none)'}\n"
        f"Primary language: {info.get('language') or 'unknown'}\n"
        f"Files ({len(files)} total):\n" + "\n".join(files[:GITHUB_FILE_LIST_LIMIT]) + "\n\n"
        "Summarize what this repository does, how it is structured, and how to deploy it on AWS."
    )
    return {
        "repo": info.get("full_name") or f"{owner}/{repo}",
        "language": info.get("language") or "unknown",
        "description": info.get("description") or "",
        "defaultBranch": branch,
        "fileCount": len(files),
        "analysis": _converse([{"text": summary_prompt}]),
    }


def _handle_github_push(request: Request) -> Dict[str, Any]:
    body = request.body
    token = _text(body.get("token"))
    repo_ref = _text(body.get("repo"))
    file_path = _text(body.get("path")).lstrip("/")
    missing = [name for name, value in (("token", token), ("repo", repo_ref), ("path", file_path)) if not value]
    if missing:
        raise ValidationError(f"token, repo and path required (missing: {', '.join(missing)})", missing=missing)
    owner, repo = _parse_repo(repo_ref)
    content = body.get("content")
    content = "" if content is None else str(content)
    message = _text(body.get("message")) or "Update via AUTO"
    branch = _text(body.get("branch")) or _github_request("GET", f"/repos/{owner}/{repo}", token).get(
        "default_branch", "main"
    )

    contents_path = f"/repos/{owner}/{repo}/contents/{urllib.parse.quote(file_path)}"
    sha = ""
    try:
        existing = _github_request("GET", f"{contents_path}?ref={urllib.parse.quote(branch, safe='')}", token)
        sha = existing.get("sha") or ""
    except UpstreamServiceError as exc:
        if exc.status != 404:
            raise

    payload: Dict[str, Any] = {
        "message": message,
        "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        "branch": branch,
    }
    if sha:
        payload["sha"] = sha
    out = _github_request("PUT", contents_path, token, payload)

    logger.info("[SUCCESS] Pushed %s to %s/%s (%s)", file_path, owner, repo, branch)
    return {
        "ok": True,
        "repo": f"{owner}/{repo}",
        "path": file_path,
        "branch": branch,
        "commit": (out.get("commit") or {}).get("sha", ""),
        "htmlUrl": (out.get("content") or {}).get("html_url", ""),
    }


# ---------------------------------------------------------------------------
# Workspace handlers
# ---------------------------------------------------------------------------


def _workspace_bucket() -> str:
    if not CONFIG.workspace_bucket:
        raise ValidationError("WORKSPACE_BUCKET not configured")
    return CONFIG.workspace_bucket


def _workspace_key(workspace_id: str, file_path: str = "") -> str:
    return f"{WORKSPACE_PREFIX}/{workspace_id}/{file_path}"


def _content_type(file_path: str) -> str:
    for suffix, content_type in _CONTENT_TYPES.items():
        if file_path.lower().endswith(suffix):
            return content_type
    return "text/plain; charset=utf-8"


def _handle_workspace_create(request: Request) -> Dict[str, Any]:
    workspace_id = _new_id("ws")
    if CONFIG.workspace_bucket:
        with upstream_errors("s3"):
            _client("s3", CONFIG.region).put_object(
                Bucket=CONFIG.workspace_bucket,
                Key=_workspace_key(workspace_id, WORKSPACE_MARKER),
                Body=b"initialized",
                ContentType="text/plain",
            )
    logger.info("[SUCCESS] Created workspace %s", workspace_id)
    return {"workspaceId": workspace_id}


def _handle_workspace_patch(request: Request) -> Dict[str, Any]:
    body = request.body
    workspace_id = _text(body.get("workspaceId"))
    file_path = _text(body.get("filePath")).lstrip("/")
    content = body.get("content")
    content = "" if content is None else str(content)
    if not workspace_id or not file_path:
        raise ValidationError("workspaceId and filePath required")
    bucket = _workspace_bucket()

    data = content.encode("utf-8")
    with upstream_errors("s3"):
        _client("s3", CONFIG.region).put_object(
            Bucket=bucket,
            Key=_workspace_key(workspace_id, file_path),
            Body=data,
            ContentType=_content_type(file_path),
        )
    return {"ok": True, "workspaceId": workspace_id, "filePath": file_path, "bytes": len(data)}


def _handle_workspace_list(request: Request) -> Dict[str, Any]:
    workspace_id = _text(request.query.get("workspaceId"))
    if not workspace_id:
        raise ValidationError("workspaceId required")
    bucket = _workspace_bucket()

    prefix = _workspace_key(workspace_id)
    files: List[str] = []
    with upstream_errors("s3"):
        paginator = _client("s3", CONFIG.region).get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            for obj in page.get("Contents") or []:
                key = str(obj.get("Key") or "")
                if not key or key.endswith(f"/{WORKSPACE_MARKER}"):
                    continue
                files.append(key[len(prefix):])
    return {"workspaceId": workspace_id, "files": files}


def _handle_workspace_read(request: Request) -> Dict[str, Any]:
    workspace_id = _text(request.query.get("workspaceId"))
    file_path = _text(request.query.get("filePath")).lstrip("/")
    if not workspace_id or not file_path:
        raise ValidationError("workspaceId and filePath required")
    bucket = _workspace_bucket()

    with upstream_errors("s3"):
        try:
            resp = _client("s3", CONFIG.region).get_object(
                Bucket=bucket, Key=_workspace_key(workspace_id, file_path)
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"NoSuchKey", "404"}:
                raise ValidationError(f"File not found: {file_path}") from exc
            raise
        content = resp["Body"].read().decode("utf-8", errors="replace")
    return {"workspaceId": workspace_id, "filePath": file_path, "content": content}


# ---------------------------------------------------------------------------
# Run handlers
# ---------------------------------------------------------------------------


def _handle_runs_start(request: Request) -> Dict[str, Any]:
    workspace_id = _text(request.body.get("workspaceId"))
    prompt = _text(request.body.get("prompt"))
    if not workspace_id:
        raise ValidationError("workspaceId required")
    run_id = _new_id("run")

    if CONFIG.runs_table:
        with upstream_errors("dynamodb"):
            _client("dynamodb", CONFIG.region).put_item(
                TableName=CONFIG.runs_table,
                Item=_serialize_item(
                    {
                        "runId": run_id,
                        "workspaceId": workspace_id,
                        "prompt": prompt,
                        "status": "queued",
                        "createdAt": _now_z(),
                    }
                ),
            )

    if CONFIG.codebuild_project:
        with upstream_errors("codebuild"):
            _client("codebuild", CONFIG.region).start_build(
                projectName=CONFIG.codebuild_project,
                environmentVariablesOverride=[
                    {"name": "AUTO_RUN_ID", "value": run_id, "type": "PLAINTEXT"},
                    {"name": "AUTO_WORKSPACE_ID", "value": workspace_id, "type": "PLAINTEXT"},
                ],
            )

    status = "started" if CONFIG.codebuild_project else "queued"
    logger.info("[SUCCESS] Run %s %s for workspace %s", run_id, status, workspace_id)
    return {"runId": run_id, "status": status}


def _handle_runs_status(request: Request) -> Dict[str, Any]:
    run_id = _text(request.query.get("runId"))
    if not run_id:
        raise ValidationError("runId required")
    if not CONFIG.runs_table:
        return {"runId": run_id, "status": "unknown", "note": "RUNS_TABLE not configured"}
    with upstream_errors("dynamodb"):
        resp = _client("dynamodb", CONFIG.region).get_item(
            TableName=CONFIG.runs_table,
            Key={"runId": _serialize(run_id)},
        )
    item = resp.get("Item")
    if not item:
        return {"runId": run_id, "status": "not_found"}
    return _deserialize(item)


# ---------------------------------------------------------------------------
# Caller-credential handlers
# ---------------------------------------------------------------------------


def _handle_aws_validate(request: Request) -> Dict[str, Any]:
    scope = build_scope(request.body, CONFIG.region)
    with upstream_errors("sts"):
        identity = scoped_client("sts", scope).get_caller_identity()
    return {
        "ok": True,
        "identity": {
            "account": identity.get("Account", ""),
            "arn": identity.get("Arn", ""),
            "userId": identity.get("UserId", ""),
        },
        "region": scope.region,
        "operations": list_operations(),
    }


def _handle_aws_execute(request: Request) -> Dict[str, Any]:
    body = request.body
    scope = build_scope(body, CONFIG.region)
    return execute(body.get("operation"), body.get("input"), scope)


# ---------------------------------------------------------------------------
# Route table
# ---------------------------------------------------------------------------

ROUTER = Router(
    (
        Route("POST", "/chat/speak", False, _handle_speak),
        Route("POST", "/chat", False, _handle_chat),
        Route("POST", "/image/generate", False, _handle_image_generate),
        Route("POST", "/image/analyze", False, _handle_image_analyze),
        Route("POST", "/github/analyze", False, _handle_github_analyze),
        Route("POST", "/github/push", False, _handle_github_push),
        Route("POST", "/workspace/create", False, _handle_workspace_create),
        Route("POST", "/workspace/patch", True, _handle_workspace_patch),
        Route("GET", "/workspace/list", False, _handle_workspace_list),
        Route("GET", "/workspace/read", False, _handle_workspace_read),
        Route("POST", "/runs/start", True, _handle_runs_start),
        Route("GET", "/runs/status", False, _handle_runs_status),
        Route("POST", "/aws/validate", True, _handle_aws_validate),
        Route("POST", "/aws/execute", True, _handle_aws_execute),
    )
)


# ---------------------------------------------------------------------------
# Lambda handler
# ---------------------------------------------------------------------------


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    event = event or {}
    method, path = _path_method(event)
    origin = _request_origin(event)

    # CORS preflight
    if method == "OPTIONS":
        return _response(200, {"ok": True}, origin)

    logger.info("[START] %s %s", method, path)
    headers = event.get("headers") or {}
    try:
        if ROUTER.requires_auth(path):
            _check_auth(headers, CONFIG.admin_token)
        route = ROUTER.match(method, path)
        if route is None:
            raise RouteNotFoundError("Route not found")
        result = route.handler(Request(method, path, headers, _query_params(event), event))
    except GatewayError as exc:
        status = error_status(exc)
        logger.error("[ERROR] %s %s -> %s %s: %s", method, path, status, exc.tag, exc.message)
        return _error(status, exc.message, origin)
    except Exception as exc:
        logger.exception("[ERROR] %s %s failed", method, path)
        return _error(500, str(exc) or "Internal error", origin)

    logger.info("[SUCCESS] %s %s", method, route.path_suffix)
    return _response(200, result, origin)
