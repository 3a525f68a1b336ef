"""
Revision matching — pick the CertificateRequest for a Certificate's next revision.

Domain layer — PURE: no I/O, no mutation of the candidate sequence.

CertificateRequest revisions start at 1. A Certificate with no recorded
revision has never completed an issuance, so the request it is waiting on
carries revision 1; otherwise it is waiting on `revision + 1`.

A candidate qualifies when BOTH hold:
  - its revision annotation equals the next revision
  - its controller owner reference points at the Certificate (UID, kind, group)

  0 qualifying → NoMatch   (not issued yet, or the request was garbage-collected)
  1 qualifying → Matched   (the in-flight or most recent attempt)
  2+           → Ambiguous (duplicate annotations under one owner; never guessed)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from cert_status.domain.models import CertificateState, ObjectRef, RequestRecord


@dataclass(frozen=True, slots=True)
class NoMatch:
    """No request carries the expected revision and owner."""


@dataclass(frozen=True, slots=True)
class Matched:
    record: RequestRecord


@dataclass(frozen=True, slots=True)
class Ambiguous:
    """More than one request qualified; `count` is how many."""

    count: int


MatchResult = NoMatch | Matched | Ambiguous


def next_revision(certificate: CertificateState) -> int:
    """Revision annotation expected on the request for the next issuance."""
    if certificate.revision is None:
        return 1
    return certificate.revision + 1


def _qualifies(record: RequestRecord, revision: int, owner: ObjectRef) -> bool:
    return (
        record.revision == revision
        and record.owner is not None
        and record.owner.refers_to(owner)
    )


def match_request(
    certificate: CertificateState,
    owner: ObjectRef,
    candidates: Iterable[RequestRecord],
) -> MatchResult:
    """
    Select the request representing the certificate's current issuance attempt.

    Args:
        certificate: The Certificate whose revision drives the match.
        owner: Identity the request must be controlled by (normally certificate.ref).
        candidates: Unfiltered requests from the Certificate's namespace.

    Returns:
        NoMatch, Matched(record) or Ambiguous(count).
    """
    revision = next_revision(certificate)
    survivors = [c for c in candidates if _qualifies(c, revision, owner)]

    if not survivors:
        return NoMatch()
    if len(survivors) == 1:
        return Matched(survivors[0])
    return Ambiguous(len(survivors))
