"""
Status aggregation — fold lookup outcomes into one immutable StatusSnapshot.

Domain layer — PURE BUSINESS LOGIC. No side effects, no I/O.

A snapshot is seeded from the Certificate and then enriched step by step:

  from_certificate(crt)
    → with_events(events)
      → with_secret(secret)
        → with_request(match, request_events)
          → with_issuer(issuer) | with_cluster_issuer(cluster_issuer)

Each step returns a NEW snapshot and writes only its own fields, so any two
distinct steps commute and a failure in one field never touches another.
A field left as None has not been looked up yet.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from cert_status.domain.matching import Matched, MatchResult
from cert_status.domain.models import (
    CertificateState,
    EventList,
    IssuerKind,
    IssuerState,
    SecretState,
)
from cert_status.domain.outcome import FailureKind, LookupOutcome, Present

UNSUPPORTED_ISSUER_GROUP = "unsupported issuer group"


@dataclass(frozen=True, slots=True)
class IssuerLookup:
    """Issuer lookup result, tagged with whether an Issuer or ClusterIssuer was wanted."""

    kind: IssuerKind
    outcome: LookupOutcome[IssuerState]


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """
    Consolidated view of a Certificate and its related objects.

    `request` is a LookupOutcome so that failing to list requests stays
    distinguishable from listing them and finding no match.
    """

    certificate: CertificateState
    events: LookupOutcome[EventList] | None = None
    secret: LookupOutcome[SecretState] | None = None
    request: LookupOutcome[MatchResult] | None = None
    request_events: LookupOutcome[EventList] | None = None
    issuer: IssuerLookup | None = None


def from_certificate(certificate: CertificateState) -> StatusSnapshot:
    """Seed a snapshot holding only the Certificate; everything else is unlooked-up."""
    return StatusSnapshot(certificate=certificate)


def with_events(snapshot: StatusSnapshot, outcome: LookupOutcome[EventList]) -> StatusSnapshot:
    """Attach the Certificate's own events."""
    return replace(snapshot, events=outcome)


def with_secret(snapshot: StatusSnapshot, outcome: LookupOutcome[SecretState]) -> StatusSnapshot:
    """Attach the Secret lookup; a Failed outcome is stored as-is."""
    return replace(snapshot, secret=outcome)


def with_request(
    snapshot: StatusSnapshot,
    match: MatchResult | LookupOutcome[MatchResult],
    events_outcome: LookupOutcome[EventList] | None = None,
) -> StatusSnapshot:
    """
    Attach the request match and, when a request matched, its events.

    `match` is either a bare MatchResult (the candidates were listed) or a
    LookupOutcome wrapping one (Failed when listing requests failed).
    Request events are only kept for Matched; for anything else there is
    no request whose events could belong in the report.
    """
    request = match if isinstance(match, LookupOutcome) else Present(match)
    match request:
        case Present(Matched()):
            request_events = events_outcome
        case _:
            request_events = None
    return replace(snapshot, request=request, request_events=request_events)


def _issuer_lookup(
    snapshot: StatusSnapshot,
    kind: IssuerKind,
    outcome: LookupOutcome[IssuerState],
) -> StatusSnapshot:
    if not snapshot.certificate.issuer_ref.is_supported:
        outcome = LookupOutcome.failed(FailureKind.UNSUPPORTED, UNSUPPORTED_ISSUER_GROUP)
    return replace(snapshot, issuer=IssuerLookup(kind=kind, outcome=outcome))


def with_issuer(snapshot: StatusSnapshot, outcome: LookupOutcome[IssuerState]) -> StatusSnapshot:
    """
    Attach a namespaced Issuer lookup.

    Issuers outside cert-manager.io are never resolved: the stored outcome is
    Failed(UNSUPPORTED) whatever was passed in.
    """
    return _issuer_lookup(snapshot, IssuerKind.ISSUER, outcome)


def with_cluster_issuer(
    snapshot: StatusSnapshot,
    outcome: LookupOutcome[IssuerState],
) -> StatusSnapshot:
    """Attach a ClusterIssuer lookup; same group rule as with_issuer."""
    return _issuer_lookup(snapshot, IssuerKind.CLUSTER_ISSUER, outcome)


def with_issuer_lookup(
    snapshot: StatusSnapshot,
    kind: IssuerKind,
    outcome: LookupOutcome[IssuerState],
) -> StatusSnapshot:
    """Dispatch to with_issuer or with_cluster_issuer by kind."""
    if kind is IssuerKind.CLUSTER_ISSUER:
        return with_cluster_issuer(snapshot, outcome)
    return with_issuer(snapshot, outcome)
