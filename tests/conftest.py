"""
Shared test fixtures for the cert-status test suite.

Object-store ports are faked with MagicMock, each method returning a
LookupOutcome the way a real adapter would.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
import structlog

from cert_status.domain.outcome import LookupOutcome
from tests.builders import make_certificate, make_issuer, make_secret


@pytest.fixture()
def store() -> MagicMock:
    """An ObjectStore mock where every lookup succeeds with default data."""
    mock = MagicMock()
    mock.get_certificate.return_value = LookupOutcome.present(make_certificate())
    mock.list_requests.return_value = LookupOutcome.present(())
    mock.get_secret.return_value = LookupOutcome.present(make_secret())
    mock.search_events.return_value = LookupOutcome.present(())
    mock.get_issuer.return_value = LookupOutcome.present(make_issuer())
    mock.get_cluster_issuer.return_value = LookupOutcome.present(
        make_issuer(kind="ClusterIssuer", namespace="")
    )
    return mock


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """CLI tests point structlog at the runner's stderr; undo that after each test."""
    yield
    structlog.reset_defaults()
