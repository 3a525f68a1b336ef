"""
Composition root — configures logging and wires the object store.

This is the ONLY place where the concrete Kubernetes adapter is instantiated.
Everything else depends on the ObjectStore Protocol.

Responsibilities:
  1. Configure structlog (to stderr, so the report on stdout stays clean)
  2. Build the Kubernetes ApiClient from settings
  3. Resolve the namespace to query
  4. Create the KubernetesObjectStore
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from kubernetes.config import ConfigException

from cert_status.adapters.kube_store import (
    KubernetesObjectStore,
    create_api_client,
    kubeconfig_namespace,
)
from cert_status.config import AppSettings
from cert_status.domain.outcome import FailureKind, LookupOutcome

DEFAULT_NAMESPACE = "default"


def configure_structlog(log_level: str = "WARNING") -> None:
    """
    Configure structlog for human-readable console logging on stderr.

    Unknown level names fall back to WARNING.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def resolve_namespace(
    settings: AppSettings,
    explicit: str | None = None,
) -> str:
    """
    Pick the namespace to query.

    Order: --namespace, the kubeconfig context's namespace, the configured
    default, then "default". In-cluster runs skip the kubeconfig.
    """
    if explicit:
        return explicit
    if not settings.kube.in_cluster:
        try:
            from_kubeconfig = kubeconfig_namespace(settings.kube.config_file, settings.kube.context)
        except ConfigException:
            from_kubeconfig = None
        if from_kubeconfig:
            return from_kubeconfig
    return settings.default_namespace or DEFAULT_NAMESPACE


def create_object_store(settings: AppSettings) -> LookupOutcome[KubernetesObjectStore]:
    """
    Build the Kubernetes-backed object store.

    Failure to load credentials is structural: nothing can be looked up.
    """
    log = structlog.get_logger()
    log.debug(
        "app.create_object_store",
        in_cluster=settings.kube.in_cluster,
        context=settings.kube.context,
        config_file=str(settings.kube.config_file) if settings.kube.config_file else None,
    )
    return LookupOutcome.from_computation(
        lambda: create_api_client(
            config_file=settings.kube.config_file,
            context=settings.kube.context,
            in_cluster=settings.kube.in_cluster,
        ),
        FailureKind.API_ERROR,
        "error when loading Kubernetes client configuration",
    ).map(
        lambda api_client: KubernetesObjectStore(
            api_client,
            timeout=settings.request_timeout_seconds,
            retry_attempts=settings.retry_attempts,
        )
    )


def settings_with_overrides(
    settings: AppSettings,
    kubeconfig: Path | None = None,
    context: str | None = None,
) -> AppSettings:
    """Apply command-line overrides on top of loaded settings."""
    kube_updates: dict[str, object] = {}
    if kubeconfig is not None:
        kube_updates["config_file"] = kubeconfig
    if context is not None:
        kube_updates["context"] = context
    if not kube_updates:
        return settings
    return settings.model_copy(update={"kube": settings.kube.model_copy(update=kube_updates)})
