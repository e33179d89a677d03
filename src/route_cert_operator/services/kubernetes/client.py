"""Kubernetes API implementation of the cluster store."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import FIELD_MANAGER
from ...utils.errors import ConflictError, NotFoundError, StoreError, TransportError
from ...utils.rate_limit import RateLimiter, handle_rate_limit_error, is_rate_limit_error
from .base import ResourceKind

logger = logging.getLogger(__name__)

MERGE_PATCH = "application/merge-patch+json"


def load_kubernetes_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubernetesStore:
    """Cluster store backed by the Kubernetes API.

    Custom resources go through CustomObjectsApi, core resources through
    CoreV1Api; core objects (Secrets) can only be read. ApiException is
    translated into the operator error taxonomy.
    """

    def __init__(
        self,
        api_client: client.ApiClient | None = None,
        rate_limit_per_second: float = 10.0,
        max_retries: int = 3,
    ) -> None:
        """Initialize the store.

        Args:
            api_client: Configured API client (default: a new one from the loaded config)
            rate_limit_per_second: Maximum API calls per second
            max_retries: Retries after rate limit errors
        """
        self.api_client = api_client or client.ApiClient()
        self.custom = client.CustomObjectsApi(self.api_client)
        self.core = client.CoreV1Api(self.api_client)
        self.limiter = RateLimiter(rate_limit_per_second)
        self.max_retries = max_retries

    def _call(self, kind: ResourceKind, operation: str, fn: Callable[[], Any]) -> Any:
        start_time = time.time()
        attempt = 0
        try:
            while True:
                try:
                    result = self.limiter(fn)()
                    metrics.api_call_total.labels(kind=kind.kind, operation=operation, result="success").inc()
                    return result
                except ApiException as e:
                    if is_rate_limit_error(e):
                        metrics.rate_limit_hits_total.inc()
                    if handle_rate_limit_error(e, attempt, self.max_retries):
                        attempt += 1
                        continue
                    metrics.api_call_total.labels(kind=kind.kind, operation=operation, result="error").inc()
                    raise self._translate(kind, operation, e) from e
                except Exception as e:
                    metrics.api_call_total.labels(kind=kind.kind, operation=operation, result="error").inc()
                    raise TransportError(f"{operation} {kind.kind} failed: {e}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(kind=kind.kind, operation=operation).observe(duration)

    @staticmethod
    def _translate(kind: ResourceKind, operation: str, e: ApiException) -> StoreError:
        message = f"{operation} {kind.kind} failed: {e.status} {e.reason}"
        if e.status == 404:
            return NotFoundError(message)
        if e.status == 409:
            return ConflictError(message)
        return TransportError(message)

    @staticmethod
    def _require_custom(kind: ResourceKind, operation: str) -> None:
        if not kind.group:
            raise ValueError(f"{operation} is not supported for {kind.kind}; core objects can only be read")

    def _serialize(self, obj: Any) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self.api_client.sanitize_for_serialization(obj)

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        """Fetch a single object."""
        if not kind.group:
            obj = self._call(kind, "get", lambda: self.core.read_namespaced_secret(name=name, namespace=namespace))
            return self._serialize(obj)
        return self._call(
            kind,
            "get",
            lambda: self.custom.get_namespaced_custom_object(
                group=kind.group,
                version=kind.version,
                namespace=namespace,
                plural=kind.plural,
                name=name,
            ),
        )

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Create an object in the namespace named by its metadata."""
        self._require_custom(kind, "create")
        namespace = body.get("metadata", {}).get("namespace", "default")
        return self._call(
            kind,
            "create",
            lambda: self.custom.create_namespaced_custom_object(
                group=kind.group,
                version=kind.version,
                namespace=namespace,
                plural=kind.plural,
                body=body,
                field_manager=FIELD_MANAGER,
            ),
        )

    def patch(self, kind: ResourceKind, namespace: str, name: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Apply a JSON merge patch."""
        self._require_custom(kind, "patch")
        return self._call(
            kind,
            "patch",
            lambda: self.custom.patch_namespaced_custom_object(
                group=kind.group,
                version=kind.version,
                namespace=namespace,
                plural=kind.plural,
                name=name,
                body=patch,
                field_manager=FIELD_MANAGER,
                _content_type=MERGE_PATCH,
            ),
        )

    def list(self, kind: ResourceKind) -> list[dict[str, Any]]:
        """List objects of a kind across all namespaces."""
        self._require_custom(kind, "list")
        result = self._call(
            kind,
            "list",
            lambda: self.custom.list_cluster_custom_object(
                group=kind.group,
                version=kind.version,
                plural=kind.plural,
            ),
        )
        return list(result.get("items") or [])
