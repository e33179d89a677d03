"""Route predicates and the finalizer guard."""

from __future__ import annotations

from typing import Any

from ..config import OperatorConfig
from ..services.kubernetes.base import ROUTE
from ..utils.references import RouteRef
from .base import BaseHandler


def route_host(route: dict[str, Any]) -> str | None:
    return (route.get("spec") or {}).get("host") or None


def issuer_directive(route: dict[str, Any], config: OperatorConfig) -> str | None:
    """Issuer named by the Route's annotations, if any."""
    annotations = route.get("metadata", {}).get("annotations") or {}
    return annotations.get(config.issuer_annotation_key)


def is_valid_route(route: dict[str, Any], config: OperatorConfig) -> bool:
    """A Route is managed iff it has a host and an issuer directive."""
    return route_host(route) is not None and issuer_directive(route, config) is not None


def is_being_deleted(route: dict[str, Any]) -> bool:
    return bool(route.get("metadata", {}).get("deletionTimestamp"))


def has_finalizer(route: dict[str, Any], config: OperatorConfig) -> bool:
    return config.finalizer in (route.get("metadata", {}).get("finalizers") or [])


def route_ref(route: dict[str, Any]) -> RouteRef:
    return RouteRef.from_meta(route.get("metadata", {}))


class FinalizerGuard(BaseHandler):
    """Installs and removes the deletion-blocking finalizer on Routes."""

    def add_finalizer(self, route: dict[str, Any]) -> dict[str, Any]:
        """Ensure the guard finalizer is present on the Route."""
        ref = route_ref(route)
        finalizers = list(route.get("metadata", {}).get("finalizers") or [])
        if self.config.finalizer not in finalizers:
            finalizers.append(self.config.finalizer)
        return self.store.patch(ROUTE, ref.namespace, ref.name, {"metadata": {"finalizers": finalizers}})

    def remove_finalizer(self, route: dict[str, Any]) -> dict[str, Any]:
        """Remove the guard finalizer, keeping finalizers owned by others.

        The list is cleared (set to null) when the guard was the only entry.
        """
        ref = route_ref(route)
        finalizers = [f for f in route.get("metadata", {}).get("finalizers") or [] if f != self.config.finalizer]
        return self.store.patch(
            ROUTE,
            ref.namespace,
            ref.name,
            {"metadata": {"finalizers": finalizers or None}},
        )
