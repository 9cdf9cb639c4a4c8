"""test_lambda_function.py — Mock-based tests for the AUTO control-plane API.

Covers preflight, the auth gate, suffix routing, body parsing, the caller-credential
execute/validate routes and the built-in chat/workspace/run handlers. AWS and
GitHub are replaced with fakes, so the suite runs without credentials.

Run: python3 -m pytest test_lambda_function.py -v
"""

from __future__ import annotations

import base64
import dataclasses
import importlib.util
import io
import json
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

sys.path.insert(
    0,
    os.path.join(os.path.dirname(os.path.abspath(__file__)), os.pardir, "shared_layer", "python"),
)

_spec = importlib.util.spec_from_file_location(
    "auto_api_lambda",
    os.path.join(os.path.dirname(__file__), "lambda_function.py"),
)
auto_api = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(auto_api)

SECRET = "s3cret-token"
CREDS = {"accessKeyId": "AKIAEXAMPLE", "secretAccessKey": "shh", "region": "us-west-2"}


def _make_event(method="POST", path="/prod/chat", body=None, headers=None, query=None):
    """Build a mock API Gateway v2 event."""
    event = {
        "requestContext": {"http": {"method": method, "path": path}},
        "rawPath": path,
        "headers": headers if headers is not None else {"origin": "https://auto.example"},
        "queryStringParameters": query,
    }
    if body is not None:
        event["body"] = json.dumps(body) if isinstance(body, dict) else body
    return event


def _config(**overrides):
    return dataclasses.replace(auto_api.CONFIG, **overrides)


def _body(resp):
    return json.loads(resp["body"])


class _FakeClients:
    """Stand-in for auto_api._client keyed by service name."""

    def __init__(self, **clients):
        self.clients = clients
        self.requested = []

    def __call__(self, service, region):
        self.requested.append((service, region))
        return self.clients.setdefault(service, MagicMock(name=service))


class PreflightTests(unittest.TestCase):
    def test_options_returns_200_without_auth_or_handler(self):
        with patch.object(auto_api, "CONFIG", _config(admin_token=SECRET)), patch.object(
            auto_api, "_check_auth"
        ) as mock_auth, patch.object(auto_api, "_client") as mock_client:
            for path in ("/aws/execute", "/workspace/patch", "/nowhere"):
                resp = auto_api.lambda_handler(_make_event(method="OPTIONS", path=path), None)
                self.assertEqual(resp["statusCode"], 200)
                self.assertEqual(_body(resp), {"ok": True})
                self.assertEqual(resp["headers"]["Access-Control-Allow-Origin"], "https://auto.example")
        mock_auth.assert_not_called()
        mock_client.assert_not_called()


class AuthGateTests(unittest.TestCase):
    gated = (
        ("POST", "/workspace/patch"),
        ("POST", "/runs/start"),
        ("POST", "/aws/validate"),
        ("POST", "/aws/execute"),
    )

    def test_gated_routes_reject_missing_or_wrong_token(self):
        header_sets = (
            {},
            {"x-auto-token": "wrong"},
            {"Authorization": "Bearer wrong"},
            {"authorization": "wrong"},
        )
        fake = _FakeClients()
        with patch.object(auto_api, "CONFIG", _config(admin_token=SECRET, workspace_bucket="ws-bucket")), patch.object(
            auto_api, "_client", fake
        ), patch("auto_shared.operations.scoped_client") as mock_scoped:
            for method, path in self.gated:
                for headers in header_sets:
                    event = _make_event(
                        method=method,
                        path=f"/prod{path}",
                        headers=headers,
                        body={"workspaceId": "ws_1", "filePath": "a.txt", "awsCredentials": CREDS,
                              "operation": "s3_delete_object", "input": {"bucket": "b", "key": "k"}},
                    )
                    resp = auto_api.lambda_handler(event, None)
                    self.assertEqual(resp["statusCode"], 401, (path, headers))
                    self.assertEqual(_body(resp), {"error": "Unauthorized"})
        self.assertEqual(fake.requested, [])
        mock_scoped.assert_not_called()

    def test_gated_route_accepts_each_header_form(self):
        header_sets = (
            {"x-auto-token": SECRET},
            {"X-Auto-Token": SECRET},
            {"Authorization": f"Bearer {SECRET}"},
            {"authorization": SECRET},
        )
        fake = _FakeClients()
        with patch.object(auto_api, "CONFIG", _config(admin_token=SECRET)), patch.object(auto_api, "_client", fake):
            for headers in header_sets:
                resp = auto_api.lambda_handler(
                    _make_event(path="/runs/start", headers=headers, body={"workspaceId": "ws_1"}), None
                )
                self.assertEqual(resp["statusCode"], 200, headers)

    def test_open_routes_ignore_token(self):
        with patch.object(auto_api, "CONFIG", _config(admin_token=SECRET)):
            resp = auto_api.lambda_handler(_make_event(path="/chat", body={"messages": []}, headers={}), None)
        self.assertEqual(resp["statusCode"], 200)

    def test_open_mode_reaches_gated_routes(self):
        body = {
            "workspaceId": "ws_1",
            "filePath": "a.txt",
            "content": "x",
            "awsCredentials": CREDS,
            "operation": "s3_delete_object",
            "input": {"bucket": "b", "key": "k"},
        }
        fake = _FakeClients()
        config = _config(admin_token="", workspace_bucket="ws-bucket", runs_table="", codebuild_project="")
        with patch.object(auto_api, "CONFIG", config), patch.object(auto_api, "_client", fake), patch.object(
            auto_api, "scoped_client"
        ) as mock_validate_client, patch("auto_shared.operations.scoped_client") as mock_execute_client:
            mock_validate_client.return_value.get_caller_identity.return_value = {"Account": "123456789012"}
            responses = {
                path: auto_api.lambda_handler(_make_event(path=f"/prod{path}", headers={}, body=body), None)
                for _method, path in self.gated
            }

        for path, resp in responses.items():
            self.assertEqual(resp["statusCode"], 200, path)
        self.assertEqual(_body(responses["/runs/start"])["status"], "queued")
        self.assertEqual(_body(responses["/workspace/patch"])["filePath"], "a.txt")
        self.assertEqual(_body(responses["/aws/validate"])["identity"]["account"], "123456789012")
        self.assertEqual(
            _body(responses["/aws/execute"]),
            {"ok": True, "operation": "s3_delete_object", "bucket": "b", "key": "k"},
        )
        mock_execute_client.return_value.delete_object.assert_called_once_with(Bucket="b", Key="k")

    def test_auth_checked_before_route_match(self):
        with patch.object(auto_api, "CONFIG", _config(admin_token=SECRET)):
            resp = auto_api.lambda_handler(_make_event(method="GET", path="/aws/execute", headers={}), None)
        self.assertEqual(resp["statusCode"], 401)


class RoutingTests(unittest.TestCase):
    def test_unknown_path_returns_404(self):
        resp = auto_api.lambda_handler(_make_event(path="/prod/unknown"), None)
        self.assertEqual(resp["statusCode"], 404)
        self.assertEqual(_body(resp), {"error": "Route not found"})

    def test_wrong_method_returns_404(self):
        resp = auto_api.lambda_handler(_make_event(method="GET", path="/chat"), None)
        self.assertEqual(resp["statusCode"], 404)

    def test_cors_headers_on_every_response(self):
        resp = auto_api.lambda_handler(_make_event(path="/nope", headers={}), None)
        headers = resp["headers"]
        self.assertEqual(headers["Access-Control-Allow-Origin"], auto_api.CONFIG.allowed_origin)
        self.assertEqual(headers["Access-Control-Allow-Methods"], "GET,POST,OPTIONS")
        self.assertEqual(headers["Cache-Control"], "no-store")

    def test_route_table_contract(self):
        table = {(r.method, r.path_suffix): r.auth_required for r in auto_api.ROUTER.routes}
        self.assertEqual(
            table,
            {
                ("POST", "/chat"): False,
                ("POST", "/chat/speak"): False,
                ("POST", "/image/generate"): False,
                ("POST", "/image/analyze"): False,
                ("POST", "/github/analyze"): False,
                ("POST", "/github/push"): False,
                ("POST", "/workspace/create"): False,
                ("POST", "/workspace/patch"): True,
                ("GET", "/workspace/list"): False,
                ("GET", "/workspace/read"): False,
                ("POST", "/runs/start"): True,
                ("GET", "/runs/status"): False,
                ("POST", "/aws/validate"): True,
                ("POST", "/aws/execute"): True,
            },
        )

    def test_unexpected_exception_becomes_500_json(self):
        with patch.object(auto_api, "_invoke_model", side_effect=RuntimeError("model exploded")):
            resp = auto_api.lambda_handler(
                _make_event(path="/chat", body={"messages": [{"role": "user", "content": "hi"}]}), None
            )
        self.assertEqual(resp["statusCode"], 500)
        self.assertEqual(_body(resp), {"error": "model exploded"})


class BodyParsingTests(unittest.TestCase):
    def test_malformed_json_matches_empty_object(self):
        with patch.object(auto_api, "CONFIG", _config(admin_token="")):
            for path in ("/aws/execute", "/aws/validate", "/chat", "/workspace/patch", "/runs/start"):
                malformed = auto_api.lambda_handler(_make_event(path=path, body="{not json"), None)
                empty = auto_api.lambda_handler(_make_event(path=path, body={}), None)
                self.assertEqual(malformed["statusCode"], empty["statusCode"], path)
                self.assertEqual(_body(malformed), _body(empty), path)

    def test_chat_without_user_messages(self):
        resp = auto_api.lambda_handler(_make_event(path="/chat", body="{oops"), None)
        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(_body(resp), {"reply": "messages[] required"})


class AwsExecuteTests(unittest.TestCase):
    def _execute(self, body, headers=None):
        with patch.object(auto_api, "CONFIG", _config(admin_token=SECRET)):
            return auto_api.lambda_handler(
                _make_event(path="/prod/aws/execute", body=body, headers=headers or {"x-auto-token": SECRET}),
                None,
            )

    @patch("auto_shared.operations.scoped_client")
    def test_s3_delete_object_end_to_end(self, mock_scoped):
        resp = self._execute(
            {"awsCredentials": CREDS, "operation": "s3_delete_object", "input": {"bucket": "b", "key": "/a/b.txt"}}
        )

        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(
            _body(resp),
            {"ok": True, "operation": "s3_delete_object", "bucket": "b", "key": "a/b.txt"},
        )
        service, scope = mock_scoped.call_args[0]
        self.assertEqual(service, "s3")
        self.assertEqual(scope.access_key_id, "AKIAEXAMPLE")
        self.assertEqual(scope.region, "us-west-2")
        mock_scoped.return_value.delete_object.assert_called_once_with(Bucket="b", Key="a/b.txt")

    @patch("auto_shared.operations.scoped_client")
    def test_input_as_json_string(self, mock_scoped):
        resp = self._execute(
            {"awsCredentials": CREDS, "operation": "s3_delete_object", "input": '{"bucket": "b", "key": "k"}'}
        )
        self.assertEqual(resp["statusCode"], 200)

    @patch("auto_shared.operations.scoped_client")
    def test_unknown_operation_is_500_with_stable_message(self, mock_scoped):
        resp = self._execute({"awsCredentials": CREDS, "operation": "ec2_terminate", "input": {}})
        self.assertEqual(resp["statusCode"], 500)
        self.assertEqual(_body(resp), {"error": "Unsupported operation: ec2_terminate"})
        mock_scoped.assert_not_called()

    @patch("auto_shared.operations.scoped_client")
    def test_missing_credentials(self, mock_scoped):
        resp = self._execute({"operation": "s3_delete_object", "input": {"bucket": "b", "key": "k"}})
        self.assertEqual(resp["statusCode"], 500)
        self.assertEqual(_body(resp), {"error": "accessKeyId and secretAccessKey required"})
        mock_scoped.assert_not_called()

    @patch("auto_shared.operations.scoped_client")
    def test_validation_error_is_500_and_no_call(self, mock_scoped):
        resp = self._execute({"awsCredentials": CREDS, "operation": "s3_put_object", "input": {"bucket": "b"}})
        self.assertEqual(resp["statusCode"], 500)
        self.assertIn("key", _body(resp)["error"])
        mock_scoped.assert_not_called()

    @patch("auto_shared.operations.scoped_client")
    def test_upstream_message_surfaces(self, mock_scoped):
        mock_scoped.return_value.put_item.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "Requested resource not found"}},
            "PutItem",
        )
        resp = self._execute(
            {"awsCredentials": CREDS, "operation": "dynamodb_put_item", "input": {"tableName": "t", "item": {"pk": "1"}}}
        )
        self.assertEqual(resp["statusCode"], 500)
        self.assertEqual(_body(resp), {"error": "Requested resource not found"})

    @patch("auto_shared.operations.scoped_client")
    def test_secret_never_echoed(self, mock_scoped):
        resp = self._execute({"awsCredentials": CREDS, "operation": "nope"})
        self.assertNotIn("shh", resp["body"])
        resp = self._execute(
            {"awsCredentials": CREDS, "operation": "s3_delete_object", "input": {"bucket": "b", "key": "k"}}
        )
        self.assertNotIn("shh", resp["body"])


class AwsValidateTests(unittest.TestCase):
    @patch.object(auto_api, "scoped_client")
    def test_validate_returns_identity(self, mock_scoped):
        mock_scoped.return_value.get_caller_identity.return_value = {
            "Account": "123456789012",
            "Arn": "arn:aws:iam::123456789012:user/dev",
            "UserId": "AIDAEXAMPLE",
        }
        with patch.object(auto_api, "CONFIG", _config(admin_token="")):
            resp = auto_api.lambda_handler(_make_event(path="/aws/validate", body={"awsCredentials": CREDS}), None)

        self.assertEqual(resp["statusCode"], 200)
        body = _body(resp)
        self.assertEqual(body["identity"]["account"], "123456789012")
        self.assertEqual(body["region"], "us-west-2")
        self.assertIn("s3_put_object", [op["name"] for op in body["operations"]])
        self.assertEqual(mock_scoped.call_args[0][0], "sts")


class ChatTests(unittest.TestCase):
    def _bedrock(self, payload):
        fake = _FakeClients()
        fake.clients["bedrock-runtime"] = MagicMock()
        fake.clients["bedrock-runtime"].invoke_model.return_value = {
            "body": io.BytesIO(json.dumps(payload).encode("utf-8"))
        }
        return fake

    def test_chat_reply_from_nova_output(self):
        fake = self._bedrock({"output": {"message": {"content": [{"text": "Step 1: create a bucket"}]}}})
        messages = [{"role": "user", "content": f"m{i}"} for i in range(10)]
        messages.append({"role": "assistant", "content": "ignored"})
        with patch.object(auto_api, "_client", fake):
            resp = auto_api.lambda_handler(_make_event(path="/chat", body={"messages": messages}), None)

        self.assertEqual(_body(resp), {"reply": "Step 1: create a bucket"})
        kwargs = fake.clients["bedrock-runtime"].invoke_model.call_args.kwargs
        self.assertEqual(kwargs["modelId"], auto_api.CONFIG.model_id)
        sent = json.loads(kwargs["body"])
        user_text = sent["messages"][0]["content"][0]["text"]
        self.assertEqual(user_text.split("\n\n"), [f"m{i}" for i in range(2, 10)])

    def test_speak_returns_base64_audio(self):
        fake = _FakeClients()
        fake.clients["polly"] = MagicMock()
        fake.clients["polly"].synthesize_speech.return_value = {"AudioStream": io.BytesIO(b"ID3audio")}
        with patch.object(auto_api, "_client", fake):
            resp = auto_api.lambda_handler(_make_event(path="/chat/speak", body={"text": "hello"}), None)

        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(base64.b64decode(_body(resp)["audio"]), b"ID3audio")

    def test_speak_requires_text(self):
        resp = auto_api.lambda_handler(_make_event(path="/chat/speak", body={}), None)
        self.assertEqual(resp["statusCode"], 500)
        self.assertEqual(_body(resp), {"error": "text required"})

    def test_image_generate(self):
        fake = self._bedrock({"images": ["aW1hZ2U="]})
        with patch.object(auto_api, "_client", fake):
            resp = auto_api.lambda_handler(_make_event(path="/image/generate", body={"prompt": "a cat"}), None)
        self.assertEqual(_body(resp), {"image": "aW1hZ2U="})


class GithubTests(unittest.TestCase):
    def test_push_creates_file_with_existing_sha(self):
        calls = []

        def fake_github(method, path, token="", payload=None):
            calls.append((method, path, payload))
            if method == "GET" and path == "/repos/octo/site":
                return {"default_branch": "main"}
            if method == "GET":
                return {"sha": "abc123"}
            return {"commit": {"sha": "def456"}, "content": {"html_url": "https://github.com/octo/site/blob/main/index.html"}}

        with patch.object(auto_api, "_github_request", side_effect=fake_github):
            resp = auto_api.lambda_handler(
                _make_event(
                    path="/github/push",
                    body={"token": "ghp_x", "repo": "https://github.com/octo/site.git", "path": "/index.html", "content": "<h1>hi</h1>"},
                ),
                None,
            )

        self.assertEqual(resp["statusCode"], 200)
        body = _body(resp)
        self.assertEqual(body["repo"], "octo/site")
        self.assertEqual(body["path"], "index.html")
        self.assertEqual(body["commit"], "def456")
        method, path, payload = calls[-1]
        self.assertEqual((method, path), ("PUT", "/repos/octo/site/contents/index.html"))
        self.assertEqual(payload["sha"], "abc123")
        self.assertEqual(base64.b64decode(payload["content"]).decode(), "<h1>hi</h1>")
        self.assertEqual(payload["message"], "Update via AUTO")

    def test_push_requires_token(self):
        resp = auto_api.lambda_handler(_make_event(path="/github/push", body={"repo": "octo/site", "path": "a"}), None)
        self.assertEqual(resp["statusCode"], 500)
        self.assertIn("token", _body(resp)["error"])

    def test_analyze_counts_files(self):
        def fake_github(method, path, token="", payload=None):
            if "/git/trees/" in path:
                return {"tree": [{"path": "a.py", "type": "blob"}, {"path": "src", "type": "tree"}, {"path": "src/b.py", "type": "blob"}]}
            return {"full_name": "octo/site", "language": "Python", "default_branch": "main"}

        with patch.object(auto_api, "_github_request", side_effect=fake_github), patch.object(
            auto_api, "_converse", return_value="A small Python app."
        ):
            resp = auto_api.lambda_handler(_make_event(path="/github/analyze", body={"url": "octo/site"}), None)

        body = _body(resp)
        self.assertEqual(body["fileCount"], 2)
        self.assertEqual(body["language"], "Python")
        self.assertEqual(body["analysis"], "A small Python app.")


class WorkspaceTests(unittest.TestCase):
    def setUp(self):
        self.fake = _FakeClients()
        self.s3 = MagicMock(name="s3")
        self.fake.clients["s3"] = self.s3
        patcher_config = patch.object(auto_api, "CONFIG", _config(admin_token="", workspace_bucket="ws-bucket"))
        patcher_client = patch.object(auto_api, "_client", self.fake)
        patcher_config.start()
        patcher_client.start()
        self.addCleanup(patcher_config.stop)
        self.addCleanup(patcher_client.stop)

    def test_create_writes_marker(self):
        resp = auto_api.lambda_handler(_make_event(path="/workspace/create"), None)
        workspace_id = _body(resp)["workspaceId"]
        self.assertTrue(workspace_id.startswith("ws_"))
        self.assertEqual(self.s3.put_object.call_args.kwargs["Key"], f"workspaces/{workspace_id}/.init")

    def test_patch_strips_leading_slashes(self):
        resp = auto_api.lambda_handler(
            _make_event(path="/workspace/patch", body={"workspaceId": "ws_1", "filePath": "/index.html", "content": "<p>"}),
            None,
        )
        self.assertEqual(_body(resp), {"ok": True, "workspaceId": "ws_1", "filePath": "index.html", "bytes": 3})
        kwargs = self.s3.put_object.call_args.kwargs
        self.assertEqual(kwargs["Key"], "workspaces/ws_1/index.html")
        self.assertEqual(kwargs["ContentType"], "text/html; charset=utf-8")

    def test_patch_requires_ids(self):
        resp = auto_api.lambda_handler(_make_event(path="/workspace/patch", body={"workspaceId": "ws_1"}), None)
        self.assertEqual(resp["statusCode"], 500)
        self.assertEqual(_body(resp), {"error": "workspaceId and filePath required"})
        self.s3.put_object.assert_not_called()

    def test_list_skips_marker(self):
        self.s3.get_paginator.return_value.paginate.return_value = [
            {"Contents": [{"Key": "workspaces/ws_1/.init"}, {"Key": "workspaces/ws_1/index.html"}]},
            {"Contents": [{"Key": "workspaces/ws_1/css/site.css"}]},
        ]
        resp = auto_api.lambda_handler(
            _make_event(method="GET", path="/workspace/list", query={"workspaceId": "ws_1"}), None
        )
        self.assertEqual(_body(resp), {"workspaceId": "ws_1", "files": ["index.html", "css/site.css"]})

    def test_read_missing_file(self):
        self.s3.get_object.side_effect = ClientError({"Error": {"Code": "NoSuchKey", "Message": "nope"}}, "GetObject")
        resp = auto_api.lambda_handler(
            _make_event(method="GET", path="/workspace/read", query={"workspaceId": "ws_1", "filePath": "x.txt"}), None
        )
        self.assertEqual(resp["statusCode"], 500)
        self.assertEqual(_body(resp), {"error": "File not found: x.txt"})

    def test_read_returns_content(self):
        self.s3.get_object.return_value = {"Body": io.BytesIO(b"hello")}
        resp = auto_api.lambda_handler(
            _make_event(method="GET", path="/workspace/read", query={"workspaceId": "ws_1", "filePath": "a.txt"}), None
        )
        self.assertEqual(_body(resp)["content"], "hello")

    def test_unconfigured_bucket(self):
        with patch.object(auto_api, "CONFIG", _config(workspace_bucket="")):
            resp = auto_api.lambda_handler(
                _make_event(method="GET", path="/workspace/list", query={"workspaceId": "ws_1"}), None
            )
        self.assertEqual(_body(resp), {"error": "WORKSPACE_BUCKET not configured"})


class RunTests(unittest.TestCase):
    def test_start_records_and_starts_build(self):
        fake = _FakeClients()
        config = _config(admin_token="", runs_table="runs", codebuild_project="auto-runner")
        with patch.object(auto_api, "CONFIG", config), patch.object(auto_api, "_client", fake):
            resp = auto_api.lambda_handler(
                _make_event(path="/runs/start", body={"workspaceId": "ws_1", "prompt": "build it"}), None
            )

        body = _body(resp)
        self.assertEqual(body["status"], "started")
        item = fake.clients["dynamodb"].put_item.call_args.kwargs["Item"]
        self.assertEqual(item["runId"], {"S": body["runId"]})
        self.assertEqual(item["status"], {"S": "queued"})
        overrides = fake.clients["codebuild"].start_build.call_args.kwargs["environmentVariablesOverride"]
        self.assertEqual(overrides[0], {"name": "AUTO_RUN_ID", "value": body["runId"], "type": "PLAINTEXT"})

    def test_status_without_table(self):
        with patch.object(auto_api, "CONFIG", _config(runs_table="")):
            resp = auto_api.lambda_handler(_make_event(method="GET", path="/runs/status", query={"runId": "run_1"}), None)
        self.assertEqual(_body(resp), {"runId": "run_1", "status": "unknown", "note": "RUNS_TABLE not configured"})

    def test_status_not_found_and_found(self):
        fake = _FakeClients()
        ddb = fake.clients.setdefault("dynamodb", MagicMock())
        ddb.get_item.side_effect = [
            {},
            {"Item": {"runId": {"S": "run_1"}, "status": {"S": "queued"}}},
        ]
        with patch.object(auto_api, "CONFIG", _config(runs_table="runs")), patch.object(auto_api, "_client", fake):
            event = _make_event(method="GET", path="/runs/status", query={"runId": "run_1"})
            missing = auto_api.lambda_handler(event, None)
            found = auto_api.lambda_handler(event, None)
        self.assertEqual(_body(missing), {"runId": "run_1", "status": "not_found"})
        self.assertEqual(_body(found), {"runId": "run_1", "status": "queued"})

    def test_status_requires_run_id(self):
        resp = auto_api.lambda_handler(_make_event(method="GET", path="/runs/status"), None)
        self.assertEqual(_body(resp), {"error": "runId required"})


if __name__ == "__main__":
    unittest.main()
