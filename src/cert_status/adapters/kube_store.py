"""
Kubernetes adapter — reads cert-manager objects via the official Python client.

Adapter layer — implements the ObjectStore port using:
  - CustomObjectsApi: Certificates, CertificateRequests, Issuers, ClusterIssuers
  - CoreV1Api: Secrets and Events

Retry/backoff via tenacity on transient errors (connection failures, HTTP 429
and 5xx). All API errors are captured into LookupOutcome failures — no
exceptions leak to the status core. A 404 becomes FailureKind.NOT_FOUND,
anything else FailureKind.API_ERROR.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

import structlog
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.exceptions import HTTPError

from cert_status.adapters.kube_mapping import (
    certificate_from_k8s,
    event_from_k8s,
    issuer_from_k8s,
    request_from_k8s,
    secret_from_k8s,
)
from cert_status.domain.models import (
    CERT_MANAGER_GROUP,
    CertificateState,
    Event,
    EventList,
    IssuerKind,
    IssuerState,
    ObjectRef,
    RequestRecord,
    SecretState,
)
from cert_status.domain.outcome import FailureKind, FailureReason, LookupOutcome

T = TypeVar("T")

log = structlog.get_logger()

CERT_MANAGER_VERSION = "v1"
CERTIFICATE_PLURAL = "certificates"
CERTIFICATE_REQUEST_PLURAL = "certificaterequests"
ISSUER_PLURAL = "issuers"
CLUSTER_ISSUER_PLURAL = "clusterissuers"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _is_transient(error: BaseException) -> bool:
    """Connection-level failures, throttling and server errors are worth retrying."""
    if isinstance(error, ApiException):
        return error.status == 429 or (error.status or 0) >= 500
    return isinstance(error, HTTPError)


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    log.warning("kube.request_retry", attempt=state.attempt_number, error=str(error))


def _classify(reason: FailureReason) -> FailureReason:
    """Re-tag API 404s as NOT_FOUND."""
    if isinstance(reason.exception, ApiException) and reason.exception.status == 404:
        return FailureReason(FailureKind.NOT_FOUND, reason.message, reason.exception)
    return reason


def _event_sort_key(event: Event) -> datetime:
    return event.last_timestamp or event.first_timestamp or _EPOCH


def _event_field_selector(ref: ObjectRef) -> str:
    """Field selector matching Events whose involvedObject is `ref`."""
    selectors = [
        ("involvedObject.name", ref.name),
        ("involvedObject.namespace", ref.namespace),
        ("involvedObject.kind", ref.kind),
        ("involvedObject.uid", ref.uid),
    ]
    return ",".join(f"{key}={value}" for key, value in selectors if value)


def create_api_client(
    config_file: Path | None = None,
    context: str | None = None,
    in_cluster: bool = False,
) -> client.ApiClient:
    """
    Build an ApiClient from a kubeconfig file or the in-cluster service account.

    Raises kubernetes.config.ConfigException when no usable configuration exists.
    """
    if in_cluster:
        config.load_incluster_config()
        return client.ApiClient()
    return config.new_client_from_config(
        config_file=str(config_file) if config_file else None,
        context=context,
    )


def kubeconfig_namespace(config_file: Path | None = None, context: str | None = None) -> str | None:
    """Namespace configured on the selected kubeconfig context, if any."""
    contexts, active = config.list_kube_config_contexts(
        config_file=str(config_file) if config_file else None,
    )
    selected = active
    if context is not None:
        selected = next((c for c in contexts if c.get("name") == context), None)
    if not selected:
        return None
    return (selected.get("context") or {}).get("namespace")


class KubernetesObjectStore:
    """
    Read Certificates and their related objects from a Kubernetes API server.

    Implements the ObjectStore port.
    All exceptions are caught at this adapter boundary via LookupOutcome.from_computation().
    """

    def __init__(
        self,
        api_client: client.ApiClient,
        timeout: int = 30,
        retry_attempts: int = 3,
    ) -> None:
        self._custom = client.CustomObjectsApi(api_client)
        self._core = client.CoreV1Api(api_client)
        self._timeout = timeout
        self._retrying = Retrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential(multiplier=1, min=0.1, max=10),
            retry=retry_if_exception(_is_transient),
            before_sleep=_log_retry,
            reraise=True,
        )

    def _fetch(self, call: Callable[[], T], message: str) -> LookupOutcome[T]:
        """Run an API call with retry; failures become classified Failed outcomes."""
        return LookupOutcome.from_computation(
            lambda: self._retrying(call),
            FailureKind.API_ERROR,
            message,
        ).map_failure(_classify)

    def _get_namespaced(self, namespace: str, plural: str, name: str) -> dict[str, Any]:
        return self._custom.get_namespaced_custom_object(
            CERT_MANAGER_GROUP,
            CERT_MANAGER_VERSION,
            namespace,
            plural,
            name,
            _request_timeout=self._timeout,
        )

    def get_certificate(self, namespace: str, name: str) -> LookupOutcome[CertificateState]:
        log.debug("kube.get_certificate", namespace=namespace, name=name)
        return self._fetch(
            lambda: self._get_namespaced(namespace, CERTIFICATE_PLURAL, name),
            f"error when getting Certificate {name!r}",
        ).map(certificate_from_k8s)

    def list_requests(self, namespace: str) -> LookupOutcome[tuple[RequestRecord, ...]]:
        log.debug("kube.list_requests", namespace=namespace)

        def _list() -> list[dict[str, Any]]:
            result = self._custom.list_namespaced_custom_object(
                CERT_MANAGER_GROUP,
                CERT_MANAGER_VERSION,
                namespace,
                CERTIFICATE_REQUEST_PLURAL,
                _request_timeout=self._timeout,
            )
            return result.get("items") or []

        return self._fetch(
            _list,
            "error when listing CertificateRequest resources",
        ).map(lambda items: tuple(request_from_k8s(item) for item in items))

    def get_secret(self, namespace: str, name: str) -> LookupOutcome[SecretState]:
        log.debug("kube.get_secret", namespace=namespace, name=name)
        return self._fetch(
            lambda: self._core.read_namespaced_secret(
                name, namespace, _request_timeout=self._timeout
            ),
            f'error when finding Secret "{name}"',
        ).map(secret_from_k8s)

    def get_issuer(self, namespace: str, name: str) -> LookupOutcome[IssuerState]:
        log.debug("kube.get_issuer", namespace=namespace, name=name)
        return self._fetch(
            lambda: self._get_namespaced(namespace, ISSUER_PLURAL, name),
            "error when getting Issuer",
        ).map(lambda obj: issuer_from_k8s(obj, IssuerKind.ISSUER.value))

    def get_cluster_issuer(self, name: str) -> LookupOutcome[IssuerState]:
        log.debug("kube.get_cluster_issuer", name=name)
        return self._fetch(
            lambda: self._custom.get_cluster_custom_object(
                CERT_MANAGER_GROUP,
                CERT_MANAGER_VERSION,
                CLUSTER_ISSUER_PLURAL,
                name,
                _request_timeout=self._timeout,
            ),
            "error when getting ClusterIssuer",
        ).map(lambda obj: issuer_from_k8s(obj, IssuerKind.CLUSTER_ISSUER.value))

    def search_events(self, ref: ObjectRef) -> LookupOutcome[EventList]:
        log.debug("kube.search_events", kind=ref.kind, name=ref.name, namespace=ref.namespace)
        return self._fetch(
            lambda: self._core.list_namespaced_event(
                ref.namespace,
                field_selector=_event_field_selector(ref),
                _request_timeout=self._timeout,
            ),
            f"error when searching events for {ref.kind} {ref.name!r}",
        ).map(
            lambda events: tuple(
                sorted((event_from_k8s(e) for e in events.items or []), key=_event_sort_key)
            )
        )
