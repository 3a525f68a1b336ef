"""
Kubernetes object mapping — raw API payloads → domain models.

cert-manager CRDs are read through ``CustomObjectsApi``, which returns plain
``dict`` objects, so those mappers use ``dict.get()``. Secrets and Events come
from ``CoreV1Api`` as typed SDK models and are read with attribute access.

Mappers are lenient: absent fields become empty values rather than errors.
Whether an object is usable (e.g. has a UID) is decided by the pipeline.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Any

from kubernetes.client import CoreV1Event, V1Secret

from cert_status.adapters.x509_inspector import inspect_certificate
from cert_status.domain.models import (
    REVISION_ANNOTATION,
    CertificateState,
    Condition,
    Event,
    IssuerRef,
    IssuerState,
    ObjectRef,
    OwnerReference,
    RequestRecord,
    SecretState,
)
from cert_status.domain.outcome import FailureKind, LookupOutcome

TLS_CERT_KEY = "tls.crt"

# Issuer .spec keys, one per issuer type
_ISSUER_TYPE_KEYS = ("acme", "ca", "vault", "selfSigned", "venafi")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 string (or pass through a datetime); None if unusable."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def parse_revision(value: Any) -> int | None:
    """Parse a revision number; anything that is not a positive integer is None."""
    try:
        revision = int(value)
    except (TypeError, ValueError):
        return None
    return revision if revision >= 1 else None


def object_ref_from_k8s(obj: dict[str, Any], default_kind: str = "") -> ObjectRef:
    metadata: dict[str, Any] = obj.get("metadata") or {}
    return ObjectRef(
        name=metadata.get("name", ""),
        namespace=metadata.get("namespace", ""),
        uid=metadata.get("uid", ""),
        kind=obj.get("kind") or default_kind,
        api_version=obj.get("apiVersion", ""),
    )


def conditions_from_k8s(status: dict[str, Any]) -> tuple[Condition, ...]:
    """Parse ``.status.conditions`` into Condition values."""
    raw: list[dict[str, Any]] = status.get("conditions") or []
    return tuple(
        Condition(
            type=c.get("type", ""),
            status=c.get("status", "Unknown"),
            reason=c.get("reason", ""),
            message=c.get("message", ""),
            last_transition_time=parse_timestamp(c.get("lastTransitionTime")),
        )
        for c in raw
    )


def owner_from_k8s(metadata: dict[str, Any]) -> OwnerReference | None:
    """Return the controller owner reference, if the object has one."""
    for ref in metadata.get("ownerReferences") or []:
        if ref.get("controller"):
            return OwnerReference(
                api_version=ref.get("apiVersion", ""),
                kind=ref.get("kind", ""),
                name=ref.get("name", ""),
                uid=ref.get("uid", ""),
                controller=True,
            )
    return None


def certificate_from_k8s(obj: dict[str, Any]) -> CertificateState:
    spec: dict[str, Any] = obj.get("spec") or {}
    status: dict[str, Any] = obj.get("status") or {}
    metadata: dict[str, Any] = obj.get("metadata") or {}
    issuer: dict[str, Any] = spec.get("issuerRef") or {}
    return CertificateState(
        ref=object_ref_from_k8s(obj, default_kind="Certificate"),
        secret_name=spec.get("secretName", ""),
        issuer_ref=IssuerRef(
            name=issuer.get("name", ""),
            kind=issuer.get("kind", ""),
            group=issuer.get("group", ""),
        ),
        revision=parse_revision(status.get("revision")),
        dns_names=tuple(spec.get("dnsNames") or ()),
        conditions=conditions_from_k8s(status),
        creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        not_before=parse_timestamp(status.get("notBefore")),
        not_after=parse_timestamp(status.get("notAfter")),
        renewal_time=parse_timestamp(status.get("renewalTime")),
    )


def request_from_k8s(obj: dict[str, Any]) -> RequestRecord:
    metadata: dict[str, Any] = obj.get("metadata") or {}
    annotations: dict[str, str] = metadata.get("annotations") or {}
    return RequestRecord(
        ref=object_ref_from_k8s(obj, default_kind="CertificateRequest"),
        owner=owner_from_k8s(metadata),
        revision=parse_revision(annotations.get(REVISION_ANNOTATION)),
        conditions=conditions_from_k8s(obj.get("status") or {}),
        creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
    )


def _detect_issuer_type(spec: dict[str, Any]) -> str:
    for key in _ISSUER_TYPE_KEYS:
        if key in spec:
            return key
    return "unknown"


def issuer_from_k8s(obj: dict[str, Any], default_kind: str) -> IssuerState:
    return IssuerState(
        ref=object_ref_from_k8s(obj, default_kind=default_kind),
        issuer_type=_detect_issuer_type(obj.get("spec") or {}),
        conditions=conditions_from_k8s(obj.get("status") or {}),
    )


def _decode_tls_crt(encoded: str) -> LookupOutcome[bytes]:
    try:
        return LookupOutcome.present(base64.b64decode(encoded, validate=True))
    except (binascii.Error, ValueError) as e:
        return LookupOutcome.failed(FailureKind.MALFORMED, "error when decoding 'tls.crt'", e)


def secret_from_k8s(secret: V1Secret) -> SecretState:
    """Map a Secret, decoding tls.crt when present. Key material is never kept."""
    data: dict[str, str] = secret.data or {}
    certificate = None
    if TLS_CERT_KEY in data:
        certificate = _decode_tls_crt(data[TLS_CERT_KEY]).flat_map(inspect_certificate)
    return SecretState(
        name=secret.metadata.name if secret.metadata else "",
        keys=tuple(sorted(data)),
        certificate=certificate,
    )


def event_from_k8s(event: CoreV1Event) -> Event:
    source = ""
    if event.source is not None:
        source = event.source.component or ""
    if not source:
        source = event.reporting_component or ""
    return Event(
        type=event.type or "",
        reason=event.reason or "",
        message=(event.message or "").strip(),
        count=event.count or 1,
        first_timestamp=event.first_timestamp or event.event_time,
        last_timestamp=event.last_timestamp or event.event_time,
        source=source,
    )
