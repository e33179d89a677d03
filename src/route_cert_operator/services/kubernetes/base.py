"""Base cluster store interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from ...constants import (
    CERT_MANAGER_GROUP,
    CERT_MANAGER_VERSION,
    CERTIFICATE_PLURAL,
    KIND_CERTIFICATE,
    KIND_ROUTE,
    KIND_SECRET,
    ROUTE_GROUP,
    ROUTE_PLURAL,
    ROUTE_VERSION,
)


@dataclass(frozen=True)
class ResourceKind:
    """API coordinates of a resource kind; an empty group is the core API."""

    group: str
    version: str
    plural: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


ROUTE = ResourceKind(ROUTE_GROUP, ROUTE_VERSION, ROUTE_PLURAL, KIND_ROUTE)
CERTIFICATE = ResourceKind(CERT_MANAGER_GROUP, CERT_MANAGER_VERSION, CERTIFICATE_PLURAL, KIND_CERTIFICATE)
SECRET = ResourceKind("", "v1", "secrets", KIND_SECRET)


class ClusterStore(Protocol):
    """Protocol defining the object store operations the reconciler relies on.

    Objects are plain dicts in their API (camelCase) form. Implementations
    raise NotFoundError, ConflictError or TransportError from
    ``utils.errors``. Secrets are only ever read.
    """

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        """Fetch a single object."""
        ...

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Create an object in the namespace named by its metadata."""
        ...

    def patch(self, kind: ResourceKind, namespace: str, name: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Apply a JSON merge patch; explicit None clears a field."""
        ...

    def list(self, kind: ResourceKind) -> list[dict[str, Any]]:
        """List objects of a kind across all namespaces."""
        ...
