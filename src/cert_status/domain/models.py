"""
Domain models — immutable snapshots of the cert-manager objects we report on.

These are pure value objects with no behavior beyond small derived properties.
They hold what the object store read at one point in time; nothing in the
status core ever mutates them.

All models are frozen dataclasses (immutable) following functional principles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, unique

from cert_status.domain.outcome import LookupOutcome

CERT_MANAGER_GROUP = "cert-manager.io"
"""The API group whose issuers this tool knows how to look up."""

REVISION_ANNOTATION = "cert-manager.io/certificate-revision"
"""Annotation carrying a CertificateRequest's issuance revision."""


def api_group(api_version: str) -> str:
    """
    Extract the API group from an apiVersion string.

        >>> api_group("cert-manager.io/v1")
        'cert-manager.io'
        >>> api_group("v1")
        ''
    """
    group, sep, _ = api_version.rpartition("/")
    return group if sep else ""


@dataclass(frozen=True, slots=True)
class ObjectRef:
    """
    Identity of an API object: where it lives and which instance it is.

    The UID disambiguates recreated objects that share a name, so ownership
    checks must compare it rather than namespace/name.
    """

    name: str
    namespace: str
    uid: str
    kind: str
    api_version: str

    @property
    def group(self) -> str:
        return api_group(self.api_version)


CertificateRef = ObjectRef


@dataclass(frozen=True, slots=True)
class OwnerReference:
    """An owner reference as recorded in an object's metadata."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False

    @property
    def group(self) -> str:
        return api_group(self.api_version)

    def refers_to(self, ref: ObjectRef) -> bool:
        """True iff this reference points at `ref` (same UID, kind and API group)."""
        return self.uid == ref.uid and self.kind == ref.kind and self.group == ref.group


@unique
class IssuerKind(Enum):
    ISSUER = "Issuer"
    CLUSTER_ISSUER = "ClusterIssuer"


@dataclass(frozen=True, slots=True)
class IssuerRef:
    """
    A Certificate's pointer at the issuer that should fulfil it.

    A blank kind means Issuer and a blank group means cert-manager.io,
    matching how cert-manager itself defaults these fields.
    """

    name: str
    kind: str = ""
    group: str = ""

    @property
    def effective_kind(self) -> str:
        return self.kind or IssuerKind.ISSUER.value

    @property
    def is_cluster_scoped(self) -> bool:
        return self.effective_kind == IssuerKind.CLUSTER_ISSUER.value

    @property
    def is_supported(self) -> bool:
        """Only issuers of our own API group can be looked up."""
        return self.group in ("", CERT_MANAGER_GROUP)


@dataclass(frozen=True, slots=True)
class Condition:
    """A status condition (`.status.conditions[]`)."""

    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class CertificateState:
    """
    Read-only snapshot of a Certificate resource.

    `revision` is absent until the first issuance completes; afterwards it
    counts completed issuances starting from 1.
    """

    ref: ObjectRef
    secret_name: str
    issuer_ref: IssuerRef
    revision: int | None = None
    dns_names: tuple[str, ...] = ()
    conditions: tuple[Condition, ...] = ()
    creation_timestamp: datetime | None = None
    not_before: datetime | None = None
    not_after: datetime | None = None
    renewal_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class RequestRecord:
    """
    A CertificateRequest: one issuance attempt for a Certificate.

    `owner` is the controller owner reference, `revision` the value of the
    certificate-revision annotation (None when missing or not an integer).
    """

    ref: ObjectRef
    owner: OwnerReference | None
    revision: int | None
    conditions: tuple[Condition, ...] = ()
    creation_timestamp: datetime | None = None


@dataclass(frozen=True, slots=True)
class CertificateDetails:
    """Fields decoded from the X.509 certificate stored in a Secret's tls.crt."""

    subject: str
    issuer: str
    serial_number: str
    not_before: datetime
    not_after: datetime
    dns_names: tuple[str, ...] = ()
    is_ca: bool = False
    key_usages: tuple[str, ...] = ()
    extended_key_usages: tuple[str, ...] = ()
    public_key_algorithm: str = ""
    signature_algorithm: str = ""


@dataclass(frozen=True, slots=True)
class SecretState:
    """
    The Secret a Certificate writes its key pair into.

    Only key names are kept, never key material. `certificate` is None when
    the Secret has no tls.crt entry.
    """

    name: str
    keys: tuple[str, ...] = ()
    certificate: LookupOutcome[CertificateDetails] | None = field(default=None)


@dataclass(frozen=True, slots=True)
class IssuerState:
    """An Issuer or ClusterIssuer, reduced to what the report shows."""

    ref: ObjectRef
    issuer_type: str = "unknown"
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True, slots=True)
class Event:
    """A Kubernetes Event recorded against an object."""

    type: str
    reason: str
    message: str
    count: int = 1
    first_timestamp: datetime | None = None
    last_timestamp: datetime | None = None
    source: str = ""


EventList = tuple[Event, ...]
