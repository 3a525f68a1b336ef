"""
Lookup outcomes — explicit success/failure values for dependent lookups.

A LookupOutcome[T] is either Present(value: T) or Failed(reason: FailureReason).
Every object-store call returns one, never raises. The status aggregator stores
these values as-is, so a failed lookup is data in the snapshot rather than an
exception that aborts the whole report.

    ┌──────────────┐            ┌──────────────┐            ┌──────────────┐
    │ get_secret   │──Present──▶│ with_secret  │──snapshot─▶│   render     │
    │              │──Failed───▶│              │            │ (reason text)│
    └──────────────┘            └──────────────┘            └──────────────┘

Consumers either pattern-match (`case Present(v)` / `case Failed(r)`) or use the
combinators below. There is no implicit unwrap on the happy path:
each call site inspects the tag.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


@unique
class FailureKind(Enum):
    """Why a lookup did not produce a value."""

    NOT_FOUND = "NOT_FOUND"
    """The object does not exist (API 404)."""

    API_ERROR = "API_ERROR"
    """Transport, authorization or server-side failure talking to the API."""

    UNSUPPORTED = "UNSUPPORTED"
    """The lookup was not attempted because the target is outside our scope."""

    MALFORMED = "MALFORMED"
    """The object exists but its content could not be interpreted."""


@dataclass(frozen=True, slots=True)
class FailureReason:
    """
    Human-readable reason attached to a Failed outcome.

    The originating exception is kept for diagnostics but excluded from
    equality, so two failures with the same kind and message compare equal.
    """

    kind: FailureKind
    message: str
    exception: BaseException | None = field(default=None, repr=False, compare=False)

    def describe(self) -> str:
        """Message plus the underlying exception text, when there is one."""
        if self.exception is None:
            return self.message
        detail = str(self.exception).strip()
        if not detail:
            detail = type(self.exception).__name__
        return f"{self.message}: {detail}"


class LookupOutcome(Generic[T]):
    """
    Result of one lookup: Present(value) or Failed(reason).

        >>> LookupOutcome.present(3).map(lambda n: n + 1)
        Present(value=4)
        >>> LookupOutcome.failed(FailureKind.NOT_FOUND, "gone").get_or_else(0)
        0
    """

    __slots__ = ()

    def is_present(self) -> bool:
        return isinstance(self, Present)

    def is_failed(self) -> bool:
        return isinstance(self, Failed)

    def unwrap(self) -> T:
        """Return the value; raises ValueError on a Failed outcome."""
        match self:
            case Present(value):
                return value
            case Failed(reason):
                raise ValueError(f"Cannot unwrap a failed lookup: {reason.describe()}")
        raise TypeError("unreachable")  # pragma: no cover

    def failure(self) -> FailureReason:
        """Return the failure reason; raises ValueError on a Present outcome."""
        match self:
            case Failed(reason):
                return reason
            case Present(value):
                raise ValueError(f"Lookup did not fail, it holds: {value!r}")
        raise TypeError("unreachable")  # pragma: no cover

    def either(
        self,
        on_present: Callable[[T], R],
        on_failed: Callable[[FailureReason], R],
    ) -> R:
        """Apply one of two functions depending on the tag."""
        match self:
            case Present(value):
                return on_present(value)
            case Failed(reason):
                return on_failed(reason)
        raise TypeError("unreachable")  # pragma: no cover

    def map(self, mapper: Callable[[T], U]) -> LookupOutcome[U]:
        """Transform the present value; failures pass through untouched."""
        match self:
            case Present(value):
                return Present(mapper(value))
            case Failed(reason):
                return Failed(reason)
        raise TypeError("unreachable")  # pragma: no cover

    def flat_map(self, mapper: Callable[[T], LookupOutcome[U]]) -> LookupOutcome[U]:
        match self:
            case Present(value):
                return mapper(value)
            case Failed(reason):
                return Failed(reason)
        raise TypeError("unreachable")  # pragma: no cover

    def map_failure(self, mapper: Callable[[FailureReason], FailureReason]) -> LookupOutcome[T]:
        """Rewrite the failure reason; present values pass through untouched."""
        match self:
            case Present(_):
                return self
            case Failed(reason):
                return Failed(mapper(reason))
        raise TypeError("unreachable")  # pragma: no cover

    def peek_failure(self, action: Callable[[FailureReason], Any]) -> LookupOutcome[T]:
        """Run a side effect (usually logging) on failure, returning self."""
        match self:
            case Failed(reason):
                action(reason)
        return self

    def get_or_else(self, default: T) -> T:
        match self:
            case Present(value):
                return value
            case _:
                return default

    @staticmethod
    def present(value: T) -> LookupOutcome[T]:
        return Present(value)

    @staticmethod
    def failed(
        kind: FailureKind,
        message: str,
        exception: BaseException | None = None,
    ) -> LookupOutcome[Any]:
        return Failed(FailureReason(kind=kind, message=message, exception=exception))

    @staticmethod
    def from_optional(value: T | None, message: str) -> LookupOutcome[T]:
        """Present when value is not None, otherwise Failed(NOT_FOUND)."""
        if value is not None:
            return Present(value)
        return LookupOutcome.failed(FailureKind.NOT_FOUND, message)

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        kind: FailureKind,
        message: str,
    ) -> LookupOutcome[T]:
        """
        Run a computation that may raise and capture the exception as Failed.

        This is the adapter boundary: client calls go through here so that
        nothing raised by a transport library reaches the status core.
        """
        try:
            return Present(computation())
        except Exception as e:
            return LookupOutcome.failed(kind, message, e)


@dataclass(frozen=True, slots=True)
class Present(LookupOutcome[T]):
    """The lookup produced a value."""

    value: T

    def __post_init__(self) -> None:
        if self.value is None:
            raise TypeError("Present value must not be None")


@dataclass(frozen=True, slots=True)
class Failed(LookupOutcome[T]):
    """The lookup did not produce a value; `reason` says why."""

    reason: FailureReason
