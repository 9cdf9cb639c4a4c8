"""auto_shared.config — Process-wide configuration, read once from env.

Environment variables:
    AWS_REGION              default: us-east-1
    AUTO_ADMIN_TOKEN        shared secret for privileged routes (empty = open mode)
    NOVA_MODEL_ID           default: amazon.nova-lite-v1:0
    NOVA_IMAGE_MODEL_ID     default: amazon.nova-canvas-v1:0
    POLLY_VOICE_ID          default: Joanna
    ALLOWED_ORIGIN          default: *
    WORKSPACE_BUCKET        S3 bucket for workspace files
    RUNS_TABLE              DynamoDB table for run metadata
    CODEBUILD_PROJECT       CodeBuild project started by /runs/start
    GITHUB_API_BASE         default: https://api.github.com
    WHATSAPP_VERIFY_TOKEN   webhook verification token
"""

from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = ["CONFIG", "GatewayConfig"]


@dataclass(frozen=True)
class GatewayConfig:
    region: str = "us-east-1"
    admin_token: str = ""
    model_id: str = "amazon.nova-lite-v1:0"
    image_model_id: str = "amazon.nova-canvas-v1:0"
    voice_id: str = "Joanna"
    allowed_origin: str = "*"
    workspace_bucket: str = ""
    runs_table: str = ""
    codebuild_project: str = ""
    github_api_base: str = "https://api.github.com"
    whatsapp_verify_token: str = ""

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            region=os.environ.get("AWS_REGION") or "us-east-1",
            admin_token=os.environ.get("AUTO_ADMIN_TOKEN", "").strip(),
            model_id=os.environ.get("NOVA_MODEL_ID") or "amazon.nova-lite-v1:0",
            image_model_id=os.environ.get("NOVA_IMAGE_MODEL_ID") or "amazon.nova-canvas-v1:0",
            voice_id=os.environ.get("POLLY_VOICE_ID") or "Joanna",
            allowed_origin=os.environ.get("ALLOWED_ORIGIN") or "*",
            workspace_bucket=os.environ.get("WORKSPACE_BUCKET", ""),
            runs_table=os.environ.get("RUNS_TABLE", ""),
            codebuild_project=os.environ.get("CODEBUILD_PROJECT", ""),
            github_api_base=(os.environ.get("GITHUB_API_BASE") or "https://api.github.com").rstrip("/"),
            whatsapp_verify_token=os.environ.get("WHATSAPP_VERIFY_TOKEN", ""),
        )


CONFIG = GatewayConfig.from_env()
