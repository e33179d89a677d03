"""Operator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .constants import (
    CERT_ANNOTATION_KEY,
    CERT_MANAGER_GROUP,
    DEFAULT_CERT_MANAGER_NAMESPACE,
    DEFAULT_ISSUER_KIND,
    DEFAULT_PRIVATE_KEY_ALGORITHM,
    DEFAULT_PRIVATE_KEY_SIZE,
    FINALIZER,
    ISSUER_ANNOTATION_KEY,
    REQUEUE_DEFAULT_INTERVAL,
    REQUEUE_ERROR_INTERVAL,
    ROUTE_RECHECK_ANNOTATION_KEY,
    ROUTE_UPDATE_ANNOTATION_KEY,
)


@dataclass(frozen=True)
class OperatorConfig:
    """Immutable settings passed to every component of the operator."""

    certificate_namespace: str = DEFAULT_CERT_MANAGER_NAMESPACE
    issuer_annotation_key: str = ISSUER_ANNOTATION_KEY
    index_annotation_key: str = CERT_ANNOTATION_KEY
    update_annotation_key: str = ROUTE_UPDATE_ANNOTATION_KEY
    recheck_annotation_key: str = ROUTE_RECHECK_ANNOTATION_KEY
    finalizer: str = FINALIZER
    issuer_kind: str = DEFAULT_ISSUER_KIND
    issuer_group: str = CERT_MANAGER_GROUP
    private_key_algorithm: str = DEFAULT_PRIVATE_KEY_ALGORITHM
    private_key_size: int = DEFAULT_PRIVATE_KEY_SIZE
    requeue_default_seconds: float = float(REQUEUE_DEFAULT_INTERVAL)
    requeue_error_seconds: float = float(REQUEUE_ERROR_INTERVAL)
    k8s_rate_limit_per_second: float = 10.0

    @classmethod
    def from_env(cls) -> OperatorConfig:
        """Build the configuration from environment variables.

        Environment Variables:
            CERT_MANAGER_NAMESPACE: Namespace holding Certificates (default: cert-manager)
            ISSUER_ANNOTATION_KEY: Route annotation naming the issuer
            CERT_ANNOTATION_KEY: Certificate annotation holding the Route index
            ROUTE_UPDATE_ANNOTATION_KEY: Route annotation holding the TLS update trail
            ROUTE_RECHECK_ANNOTATION_KEY: Route annotation touched to request a re-check
            ROUTE_FINALIZER: Finalizer installed on managed Routes
            ISSUER_KIND: Kind of the issuer referenced by Certificates
            ISSUER_GROUP: API group of the issuer referenced by Certificates
            REQUEUE_DEFAULT_INTERVAL: Slow re-check delay in seconds (default: 3600)
            REQUEUE_ERROR_INTERVAL: Fast retry delay in seconds (default: 5)
            K8S_RATE_LIMIT_PER_SECOND: Maximum Kubernetes API calls per second (default: 10)
        """
        return cls(
            certificate_namespace=os.getenv("CERT_MANAGER_NAMESPACE", DEFAULT_CERT_MANAGER_NAMESPACE),
            issuer_annotation_key=os.getenv("ISSUER_ANNOTATION_KEY", ISSUER_ANNOTATION_KEY),
            index_annotation_key=os.getenv("CERT_ANNOTATION_KEY", CERT_ANNOTATION_KEY),
            update_annotation_key=os.getenv("ROUTE_UPDATE_ANNOTATION_KEY", ROUTE_UPDATE_ANNOTATION_KEY),
            recheck_annotation_key=os.getenv("ROUTE_RECHECK_ANNOTATION_KEY", ROUTE_RECHECK_ANNOTATION_KEY),
            finalizer=os.getenv("ROUTE_FINALIZER", FINALIZER),
            issuer_kind=os.getenv("ISSUER_KIND", DEFAULT_ISSUER_KIND),
            issuer_group=os.getenv("ISSUER_GROUP", CERT_MANAGER_GROUP),
            requeue_default_seconds=float(os.getenv("REQUEUE_DEFAULT_INTERVAL", str(REQUEUE_DEFAULT_INTERVAL))),
            requeue_error_seconds=float(os.getenv("REQUEUE_ERROR_INTERVAL", str(REQUEUE_ERROR_INTERVAL))),
            k8s_rate_limit_per_second=float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0")),
        )
