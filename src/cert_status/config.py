"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (CERT_STATUS_ prefix)
  - Fall back to a .env file in the working directory
  - Validate types and constraints before any API call is made

Command-line options override these values; see cert_status.cli.

Architecture: Only AppSettings is a BaseSettings instance. KubeSettings is a
plain BaseModel populated via env_nested_delimiter="__", so the env var
CERT_STATUS_KUBE__CONTEXT maps to kube.context, and so on.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class KubeSettings(BaseModel):
    """Where to find the Kubernetes API server and its credentials."""

    config_file: Path | None = Field(
        default=None,
        description="Path to a kubeconfig file (default: $KUBECONFIG or ~/.kube/config)",
    )
    context: str | None = Field(default=None, description="kubeconfig context to use")
    in_cluster: bool = Field(
        default=False,
        description="Use the pod's service account instead of a kubeconfig",
    )


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CERT_STATUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    kube: KubeSettings = Field(default_factory=KubeSettings)

    default_namespace: str | None = Field(
        default=None,
        description="Namespace used when neither --namespace nor the kubeconfig sets one",
    )
    request_timeout_seconds: int = Field(default=30, ge=1)
    retry_attempts: int = Field(default=3, ge=1, le=10)
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Reject names the logging module does not know."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level
