"""
Unit tests for AppSettings — environment loading and validation.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cert_status.config import AppSettings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run from an empty directory so no stray .env file is picked up."""
    monkeypatch.chdir(tmp_path)
    for var in (
        "CERT_STATUS_LOG_LEVEL",
        "CERT_STATUS_DEFAULT_NAMESPACE",
        "CERT_STATUS_RETRY_ATTEMPTS",
        "CERT_STATUS_KUBE__CONTEXT",
        "CERT_STATUS_KUBE__IN_CLUSTER",
    ):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_defaults(self) -> None:
        settings = AppSettings()

        assert settings.log_level == "WARNING"
        assert settings.request_timeout_seconds == 30
        assert settings.retry_attempts == 3
        assert settings.default_namespace is None
        assert settings.kube.config_file is None
        assert settings.kube.in_cluster is False


class TestEnvironment:
    def test_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CERT_STATUS_LOG_LEVEL", "debug")
        monkeypatch.setenv("CERT_STATUS_DEFAULT_NAMESPACE", "cert-manager")

        settings = AppSettings()

        assert settings.log_level == "DEBUG"
        assert settings.default_namespace == "cert-manager"

    def test_nested_kube_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """
        GIVEN CERT_STATUS_KUBE__CONTEXT and CERT_STATUS_KUBE__IN_CLUSTER
        WHEN settings are loaded
        THEN they populate the nested kube section.
        """
        monkeypatch.setenv("CERT_STATUS_KUBE__CONTEXT", "staging")
        monkeypatch.setenv("CERT_STATUS_KUBE__IN_CLUSTER", "true")

        settings = AppSettings()

        assert settings.kube.context == "staging"
        assert settings.kube.in_cluster is True

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("CERT_STATUS_DEFAULT_NAMESPACE=from-dotenv\n")
        assert AppSettings().default_namespace == "from-dotenv"


class TestValidation:
    def test_unknown_log_level_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CERT_STATUS_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError, match="Unknown log level"):
            AppSettings()

    @pytest.mark.parametrize("attempts", ["0", "11"])
    def test_retry_attempts_bounds(self, monkeypatch: pytest.MonkeyPatch, attempts: str) -> None:
        monkeypatch.setenv("CERT_STATUS_RETRY_ATTEMPTS", attempts)
        with pytest.raises(ValidationError):
            AppSettings()
