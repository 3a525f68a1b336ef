"""
Pipeline — gathers every lookup and folds them into one StatusSnapshot.

Application layer — all I/O is injected via the ObjectStore port (Protocol).
The matching and aggregation it drives are pure; this module only decides
WHICH lookups to run and in what order:

  get_certificate(namespace, name)           structural: Failed aborts
    → validate certificate reference         structural: Failed aborts
      → search_events(certificate)           partial
        → get_secret(secret_name)            partial
          → list_requests + match_request    partial (NoMatch / Ambiguous are data)
            → search_events(request)         partial, only when Matched
              → get_issuer | get_cluster_issuer | unsupported group (no lookup)

Partial failures are recorded in the snapshot and logged; only the two
structural steps can make gather_status return Failed.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from cert_status.domain.matching import Matched, MatchResult, match_request
from cert_status.domain.models import CertificateState, EventList, IssuerKind, IssuerState
from cert_status.domain.outcome import (
    FailureKind,
    FailureReason,
    Failed,
    LookupOutcome,
    Present,
)
from cert_status.domain.ports import ObjectStore
from cert_status.domain.status import (
    StatusSnapshot,
    from_certificate,
    with_events,
    with_issuer_lookup,
    with_request,
    with_secret,
)

log = structlog.get_logger()


def _log_partial(step: str) -> Callable[[FailureReason], None]:
    def _log(reason: FailureReason) -> None:
        log.warning(f"status.{step}_failed", kind=reason.kind.value, error=reason.describe())

    return _log


def _validate_reference(certificate: CertificateState) -> LookupOutcome[CertificateState]:
    """A Certificate without a complete identity cannot own anything or be searched for."""
    ref = certificate.ref
    missing = [f for f, v in [
        ("name", ref.name),
        ("namespace", ref.namespace),
        ("kind", ref.kind),
        ("uid", ref.uid),
    ] if not v]
    if missing:
        return LookupOutcome.failed(
            FailureKind.MALFORMED,
            f"Certificate reference is missing: {', '.join(missing)}",
        )
    return Present(certificate)


def _get_certificate(
    store: ObjectStore,
    namespace: str,
    name: str,
) -> LookupOutcome[CertificateState]:
    return store.get_certificate(namespace, name).map_failure(
        lambda reason: FailureReason(
            reason.kind,
            f"error when getting Certificate resource: {reason.describe()}",
        )
    )


def _match_request(
    store: ObjectStore,
    certificate: CertificateState,
) -> LookupOutcome[MatchResult]:
    return (
        store.list_requests(certificate.ref.namespace)
        .peek_failure(_log_partial("request_list"))
        .map(lambda candidates: match_request(certificate, certificate.ref, candidates))
    )


def _request_events(
    store: ObjectStore,
    request: LookupOutcome[MatchResult],
) -> LookupOutcome[EventList] | None:
    match request:
        case Present(Matched(record)):
            return store.search_events(record.ref).peek_failure(_log_partial("request_events"))
        case Present(result):
            log.info("status.request_not_matched", result=type(result).__name__)
    return None


def _lookup_issuer(
    store: ObjectStore,
    certificate: CertificateState,
) -> tuple[IssuerKind, LookupOutcome[IssuerState]]:
    issuer_ref = certificate.issuer_ref
    kind = IssuerKind.CLUSTER_ISSUER if issuer_ref.is_cluster_scoped else IssuerKind.ISSUER

    if not issuer_ref.is_supported:
        # Aggregation replaces this with the fixed unsupported-group failure.
        log.info("status.issuer_unsupported", group=issuer_ref.group, name=issuer_ref.name)
        skipped: LookupOutcome[IssuerState] = LookupOutcome.failed(
            FailureKind.UNSUPPORTED, "lookup skipped"
        )
        return kind, skipped

    if kind is IssuerKind.CLUSTER_ISSUER:
        outcome = store.get_cluster_issuer(issuer_ref.name)
    else:
        outcome = store.get_issuer(certificate.ref.namespace, issuer_ref.name)
    return kind, outcome.peek_failure(_log_partial("issuer"))


def build_snapshot(store: ObjectStore, certificate: CertificateState) -> StatusSnapshot:
    """
    Run every dependent lookup for an already-fetched Certificate.

    Never fails: each lookup's outcome, good or bad, lands in the snapshot.
    """
    events = store.search_events(certificate.ref).peek_failure(_log_partial("events"))
    secret = store.get_secret(certificate.ref.namespace, certificate.secret_name).peek_failure(
        _log_partial("secret")
    )
    request = _match_request(store, certificate)
    request_events = _request_events(store, request)
    issuer_kind, issuer = _lookup_issuer(store, certificate)

    snapshot = from_certificate(certificate)
    snapshot = with_events(snapshot, events)
    snapshot = with_secret(snapshot, secret)
    snapshot = with_request(snapshot, request, request_events)
    return with_issuer_lookup(snapshot, issuer_kind, issuer)


def gather_status(store: ObjectStore, namespace: str, name: str) -> LookupOutcome[StatusSnapshot]:
    """
    Produce the StatusSnapshot for Certificate `namespace/name`.

    Returns Present(snapshot) whenever the Certificate could be read, however
    many of its related lookups failed. Returns Failed only for structural
    problems: the Certificate is missing or unreadable, or its reference is
    malformed.
    """
    log.debug("status.gather", namespace=namespace, name=name)
    outcome = (
        _get_certificate(store, namespace, name)
        .flat_map(_validate_reference)
        .map(lambda certificate: build_snapshot(store, certificate))
    )
    match outcome:
        case Failed(reason):
            log.info("status.certificate_unavailable", kind=reason.kind.value, error=reason.message)
    return outcome
