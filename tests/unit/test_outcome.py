"""
Unit tests for LookupOutcome — Present/Failed values and their combinators.
"""

from __future__ import annotations

import pytest

from cert_status.domain.outcome import (
    Failed,
    FailureKind,
    FailureReason,
    LookupOutcome,
    Present,
)


class TestConstruction:
    def test_present_holds_value(self) -> None:
        outcome = LookupOutcome.present(42)
        assert outcome.is_present()
        assert not outcome.is_failed()
        assert outcome.unwrap() == 42

    def test_present_rejects_none(self) -> None:
        with pytest.raises(TypeError):
            Present(None)

    def test_failed_holds_reason(self) -> None:
        outcome = LookupOutcome.failed(FailureKind.NOT_FOUND, "secret not found")
        assert outcome.is_failed()
        assert outcome.failure() == FailureReason(FailureKind.NOT_FOUND, "secret not found")

    def test_unwrap_failed_raises(self) -> None:
        with pytest.raises(ValueError, match="secret not found"):
            LookupOutcome.failed(FailureKind.NOT_FOUND, "secret not found").unwrap()

    def test_failure_of_present_raises(self) -> None:
        with pytest.raises(ValueError):
            LookupOutcome.present(1).failure()

    def test_from_optional(self) -> None:
        assert LookupOutcome.from_optional("x", "missing") == Present("x")
        missing = LookupOutcome.from_optional(None, "missing")
        assert missing.failure().kind is FailureKind.NOT_FOUND


class TestFromComputation:
    def test_success_is_present(self) -> None:
        outcome = LookupOutcome.from_computation(lambda: "ok", FailureKind.API_ERROR, "boom")
        assert outcome == Present("ok")

    def test_exception_is_captured(self) -> None:
        """
        GIVEN a computation that raises
        WHEN wrapped with from_computation
        THEN a Failed outcome carries the kind, message and exception.
        """
        error = ConnectionError("connection refused")

        def _raise() -> str:
            raise error

        outcome = LookupOutcome.from_computation(_raise, FailureKind.API_ERROR, "error when getting Issuer")

        reason = outcome.failure()
        assert reason.kind is FailureKind.API_ERROR
        assert reason.message == "error when getting Issuer"
        assert reason.exception is error
        assert reason.describe() == "error when getting Issuer: connection refused"


class TestCombinators:
    def test_map_transforms_present(self) -> None:
        assert LookupOutcome.present(2).map(lambda n: n * 3) == Present(6)

    def test_map_passes_failure_through(self) -> None:
        failed = LookupOutcome.failed(FailureKind.NOT_FOUND, "gone")
        assert failed.map(lambda n: n * 3) == failed

    def test_flat_map_chains(self) -> None:
        outcome = LookupOutcome.present(2).flat_map(
            lambda n: LookupOutcome.failed(FailureKind.MALFORMED, f"bad {n}")
        )
        assert outcome.failure().message == "bad 2"

    def test_map_failure_rewrites_reason(self) -> None:
        failed = LookupOutcome.failed(FailureKind.API_ERROR, "inner")
        rewritten = failed.map_failure(lambda r: FailureReason(FailureKind.NOT_FOUND, r.message))
        assert rewritten.failure().kind is FailureKind.NOT_FOUND

    def test_map_failure_ignores_present(self) -> None:
        present = LookupOutcome.present(1)
        assert present.map_failure(lambda r: r) is present

    def test_peek_failure_runs_only_on_failure(self) -> None:
        seen: list[str] = []
        LookupOutcome.present(1).peek_failure(lambda r: seen.append(r.message))
        LookupOutcome.failed(FailureKind.NOT_FOUND, "gone").peek_failure(lambda r: seen.append(r.message))
        assert seen == ["gone"]

    def test_either(self) -> None:
        assert LookupOutcome.present(1).either(lambda v: f"v={v}", lambda r: r.message) == "v=1"
        failed = LookupOutcome.failed(FailureKind.NOT_FOUND, "gone")
        assert failed.either(lambda v: f"v={v}", lambda r: r.message) == "gone"

    def test_get_or_else(self) -> None:
        assert LookupOutcome.present(1).get_or_else(0) == 1
        assert LookupOutcome.failed(FailureKind.NOT_FOUND, "gone").get_or_else(0) == 0


class TestEquality:
    def test_exception_ignored_in_equality(self) -> None:
        a = Failed(FailureReason(FailureKind.API_ERROR, "x", RuntimeError("a")))
        b = Failed(FailureReason(FailureKind.API_ERROR, "x", RuntimeError("b")))
        assert a == b

    def test_present_and_failed_never_equal(self) -> None:
        assert Present("x") != LookupOutcome.failed(FailureKind.NOT_FOUND, "x")

    def test_pattern_matching(self) -> None:
        match LookupOutcome.present("value"):
            case Present(v):
                assert v == "value"
            case Failed(_):
                pytest.fail("expected Present")

    def test_describe_without_exception(self) -> None:
        assert FailureReason(FailureKind.UNSUPPORTED, "unsupported issuer group").describe() == (
            "unsupported issuer group"
        )
