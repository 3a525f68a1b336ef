"""
Unit tests for the typer CLI.

The object store is replaced with the MagicMock ``store`` fixture, so the
command runs end to end without a cluster.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from cert_status import __version__
from cert_status.cli import app
from cert_status.domain.outcome import FailureKind, LookupOutcome
from tests.builders import CRT_NAME, NAMESPACE

runner = CliRunner()


@pytest.fixture(autouse=True)
def _wired_store(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, store: MagicMock) -> MagicMock:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CERT_STATUS_LOG_LEVEL", raising=False)
    monkeypatch.setattr("cert_status.cli.create_object_store", lambda _settings: LookupOutcome.present(store))
    return store


def _status(*args: str):
    return runner.invoke(app, ["status", "certificate", *args])


class TestStatusCertificate:
    def test_prints_report(self, store: MagicMock) -> None:
        """
        GIVEN a Certificate whose lookups all succeed
        WHEN `status certificate my-crt -n my-namespace` runs
        THEN the report is printed and the exit code is 0.
        """
        result = _status(CRT_NAME, "--namespace", NAMESPACE)

        assert result.exit_code == 0, result.output
        assert f"Name: {CRT_NAME}" in result.output
        assert f"Namespace: {NAMESPACE}" in result.output
        store.get_certificate.assert_called_once_with(NAMESPACE, CRT_NAME)

    def test_partial_failure_still_exits_zero(self, store: MagicMock) -> None:
        store.get_secret.return_value = LookupOutcome.failed(
            FailureKind.NOT_FOUND, 'error when finding Secret "my-crt-tls"'
        )

        result = _status(CRT_NAME, "-n", NAMESPACE)

        assert result.exit_code == 0
        assert 'error when finding Secret "my-crt-tls"' in result.output

    def test_missing_certificate_exits_one(self, store: MagicMock) -> None:
        store.get_certificate.return_value = LookupOutcome.failed(
            FailureKind.NOT_FOUND, "error when getting Certificate 'missing'"
        )

        result = _status("missing", "-n", NAMESPACE)

        assert result.exit_code == 1
        assert "error when getting Certificate resource" in result.output

    def test_client_configuration_failure_exits_one(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "cert_status.cli.create_object_store",
            lambda _settings: LookupOutcome.failed(
                FailureKind.API_ERROR, "error when loading Kubernetes client configuration"
            ),
        )

        result = _status(CRT_NAME, "-n", NAMESPACE)

        assert result.exit_code == 1
        assert "error when loading Kubernetes client configuration" in result.output

    def test_invalid_settings_exit_one(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CERT_STATUS_LOG_LEVEL", "chatty")

        result = _status(CRT_NAME, "-n", NAMESPACE)

        assert result.exit_code == 1
        assert "invalid configuration" in result.output


class TestUsage:
    def test_missing_name_is_usage_error(self) -> None:
        assert _status().exit_code == 2

    def test_extra_argument_is_usage_error(self) -> None:
        assert _status("one", "two").exit_code == 2

    def test_help(self) -> None:
        result = _status("--help")
        assert result.exit_code == 0
        assert "--namespace" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
