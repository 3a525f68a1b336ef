"""
Report rendering — StatusSnapshot → human-readable text.

Deterministic: the same snapshot always renders to the same text (timestamps
are absolute RFC 3339, never relative ages). Every field is rendered, and
every Failed outcome shows its reason, so nothing a lookup reported is lost
between the snapshot and the terminal.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TypeVar

from cert_status.domain.matching import Ambiguous, Matched, MatchResult, NoMatch
from cert_status.domain.models import (
    CertificateDetails,
    Condition,
    EventList,
    IssuerState,
    RequestRecord,
    SecretState,
)
from cert_status.domain.outcome import Failed, LookupOutcome, Present
from cert_status.domain.status import IssuerLookup, StatusSnapshot

T = TypeVar("T")

NONE = "<none>"
NOT_LOOKED_UP = "<not looked up>"
_INDENT = "  "


def format_time(value: datetime | None) -> str:
    if value is None:
        return NONE
    return value.isoformat().replace("+00:00", "Z")


def _format_list(items: Iterable[str], depth: int) -> list[str]:
    prefix = _INDENT * depth
    return [f"{prefix}- {item}" for item in items]


def _conditions(conditions: tuple[Condition, ...], depth: int) -> list[str]:
    prefix = _INDENT * depth
    if not conditions:
        return [f"{prefix}Conditions: {NONE}"]
    lines = [f"{prefix}Conditions:"]
    for c in conditions:
        line = f"{prefix}{_INDENT}{c.type}: {c.status}, Reason: {c.reason or NONE}, Message: {c.message or NONE}"
        lines.append(line)
    return lines


def _events(outcome: LookupOutcome[EventList] | None, depth: int) -> list[str]:
    prefix = _INDENT * depth
    match outcome:
        case None:
            return [f"{prefix}Events: {NOT_LOOKED_UP}"]
        case Failed(reason):
            return [f"{prefix}Events: error: {reason.describe()}"]
        case Present(events) if not events:
            return [f"{prefix}Events: {NONE}"]
        case Present(events):
            lines = [f"{prefix}Events:"]
            for e in events:
                lines.append(
                    f"{prefix}{_INDENT}{e.type}\t{e.reason}\t{e.count}x"
                    f"\t{format_time(e.last_timestamp)}\t{e.source or NONE}\t{e.message}"
                )
            return lines
    raise TypeError("unreachable")  # pragma: no cover


def _outcome_block(
    title: str,
    outcome: LookupOutcome[T] | None,
    body: Callable[[T], list[str]],
) -> list[str]:
    """Render `title:` followed by the body, or the failure / not-looked-up marker."""
    match outcome:
        case None:
            return [f"{title}: {NOT_LOOKED_UP}"]
        case Failed(reason):
            return [f"{title}:", f"{_INDENT}Error: {reason.describe()}"]
        case Present(value):
            return [f"{title}:", *body(value)]
    raise TypeError("unreachable")  # pragma: no cover


def _certificate_details(details: CertificateDetails) -> list[str]:
    d = _INDENT * 2
    return [
        f"{_INDENT}Certificate:",
        f"{d}Subject: {details.subject or NONE}",
        f"{d}Issuer: {details.issuer or NONE}",
        f"{d}Serial Number: {details.serial_number}",
        f"{d}Not Before: {format_time(details.not_before)}",
        f"{d}Not After: {format_time(details.not_after)}",
        f"{d}DNS Names: {', '.join(details.dns_names) or NONE}",
        f"{d}Is a CA certificate: {str(details.is_ca).lower()}",
        f"{d}Key Usages: {', '.join(details.key_usages) or NONE}",
        f"{d}Extended Key Usages: {', '.join(details.extended_key_usages) or NONE}",
        f"{d}Public Key Algorithm: {details.public_key_algorithm or NONE}",
        f"{d}Signature Algorithm: {details.signature_algorithm or NONE}",
    ]


def _secret(secret: SecretState) -> list[str]:
    lines = [
        f"{_INDENT}Name: {secret.name}",
        f"{_INDENT}Keys: {', '.join(secret.keys) or NONE}",
    ]
    match secret.certificate:
        case None:
            lines.append(f"{_INDENT}Certificate: {NONE}")
        case Failed(reason):
            lines.append(f"{_INDENT}Certificate: error: {reason.describe()}")
        case Present(details):
            lines.extend(_certificate_details(details))
    return lines


def _issuer(lookup: IssuerLookup | None, snapshot: StatusSnapshot) -> list[str]:
    issuer_ref = snapshot.certificate.issuer_ref
    title = lookup.kind.value if lookup is not None else issuer_ref.effective_kind

    def body(issuer: IssuerState) -> list[str]:
        return [
            f"{_INDENT}Name: {issuer.ref.name}",
            f"{_INDENT}Kind: {issuer.ref.kind}",
            f"{_INDENT}Type: {issuer.issuer_type}",
            *_conditions(issuer.conditions, 1),
        ]

    match lookup:
        case IssuerLookup(outcome=Failed(reason)):
            return [
                f"{title}:",
                f"{_INDENT}Name: {issuer_ref.name}",
                f"{_INDENT}Group: {issuer_ref.group or NONE}",
                f"{_INDENT}Error: {reason.describe()}",
            ]
        case IssuerLookup(outcome=outcome):
            return _outcome_block(title, outcome, body)
    return [f"{title}: {NOT_LOOKED_UP}"]


def _request_record(record: RequestRecord, events: LookupOutcome[EventList] | None) -> list[str]:
    return [
        f"{_INDENT}Name: {record.ref.name}",
        f"{_INDENT}Namespace: {record.ref.namespace}",
        f"{_INDENT}Revision: {record.revision}",
        f"{_INDENT}Created at: {format_time(record.creation_timestamp)}",
        *_conditions(record.conditions, 1),
        *_events(events, 1),
    ]


def _request(snapshot: StatusSnapshot) -> list[str]:
    def body(result: MatchResult) -> list[str]:
        match result:
            case Matched(record):
                return _request_record(record, snapshot.request_events)
            case NoMatch():
                return [f"{_INDENT}No CertificateRequest found for this Certificate"]
            case Ambiguous(count):
                return [
                    f"{_INDENT}Error: found {count} CertificateRequests with the expected "
                    "revision and owner"
                ]
        raise TypeError("unreachable")  # pragma: no cover

    return _outcome_block("CertificateRequest", snapshot.request, body)


def render(snapshot: StatusSnapshot) -> str:
    """Render the full status report for a snapshot."""
    crt = snapshot.certificate
    lines = [
        f"Name: {crt.ref.name}",
        f"Namespace: {crt.ref.namespace}",
        f"Created at: {format_time(crt.creation_timestamp)}",
        f"Revision: {crt.revision if crt.revision is not None else NONE}",
        *_conditions(crt.conditions, 0),
    ]
    if crt.dns_names:
        lines.append("DNS Names:")
        lines.extend(_format_list(crt.dns_names, 0))
    else:
        lines.append(f"DNS Names: {NONE}")
    lines.extend(_events(snapshot.events, 0))
    lines.extend(_issuer(snapshot.issuer, snapshot))
    lines.extend(_outcome_block("Secret", snapshot.secret, _secret))
    lines.extend(
        [
            f"Not Before: {format_time(crt.not_before)}",
            f"Not After: {format_time(crt.not_after)}",
            f"Renewal Time: {format_time(crt.renewal_time)}",
        ]
    )
    lines.extend(_request(snapshot))
    return "\n".join(lines) + "\n"
