"""
Ports — Protocol-based interfaces for infrastructure adapters.

These define WHAT the status pipeline needs (contracts) without specifying
HOW it's done (implementation). Following hexagonal architecture:

  Domain ← Ports (protocols) ← Adapters (implementations)

The port is a Protocol (structural typing) so adapters satisfy the contract
simply by implementing the methods — no inheritance.

Every method returns a LookupOutcome and must not raise: a missing or
unreadable object is a Failed outcome, which the pipeline records in the
snapshot instead of aborting the report.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cert_status.domain.models import (
    CertificateState,
    EventList,
    IssuerState,
    ObjectRef,
    RequestRecord,
    SecretState,
)
from cert_status.domain.outcome import LookupOutcome


@runtime_checkable
class ObjectStore(Protocol):
    """
    Port: read the objects that make up a Certificate's status.

    Namespaces are always passed explicitly; implementations hold no notion
    of a "current" namespace.
    """

    def get_certificate(self, namespace: str, name: str) -> LookupOutcome[CertificateState]: ...

    def list_requests(self, namespace: str) -> LookupOutcome[tuple[RequestRecord, ...]]:
        """All CertificateRequests in the namespace, unfiltered."""
        ...

    def get_secret(self, namespace: str, name: str) -> LookupOutcome[SecretState]: ...

    def get_issuer(self, namespace: str, name: str) -> LookupOutcome[IssuerState]: ...

    def get_cluster_issuer(self, name: str) -> LookupOutcome[IssuerState]: ...

    def search_events(self, ref: ObjectRef) -> LookupOutcome[EventList]:
        """
        Events whose involvedObject is `ref`.

        Best-effort: failures come back as Failed, never as an exception.
        """
        ...
