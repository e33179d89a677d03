"""Certificate lifecycle and the Route back-reference index."""

from __future__ import annotations

from typing import Any

from ..builders.certificate import build_certificate
from ..services.kubernetes.base import CERTIFICATE
from ..utils import references
from ..utils.errors import StoreError
from .base import BaseHandler
from .route import is_valid_route, issuer_directive, route_host, route_ref


class CertificateManager(BaseHandler):
    """Creates Certificates for Route hostnames and maintains their Route index."""

    def exists(self, name: str) -> bool:
        """Check whether a Certificate exists.

        Any lookup failure, transient or not, counts as "does not exist".
        """
        try:
            self.store.get(CERTIFICATE, self.config.certificate_namespace, name)
        except StoreError:
            return False
        return True

    def create(self, route: dict[str, Any]) -> dict[str, Any]:
        """Create the Certificate requested by a valid Route.

        Raises:
            ValueError: If the Route has no host or no issuer directive
            ConflictError: If the Certificate already exists
            TransportError: On any other store failure
        """
        if not is_valid_route(route, self.config):
            raise ValueError("Route needs a host and an issuer directive to request a Certificate")
        body = build_certificate(route_host(route), issuer_directive(route, self.config), self.config)
        return self.store.create(CERTIFICATE, body)

    def _index_value(self, certificate: dict[str, Any]) -> str | None:
        annotations = certificate.get("metadata", {}).get("annotations") or {}
        return annotations.get(self.config.index_annotation_key)

    def annotate(self, cert_name: str, route: dict[str, Any], add: bool) -> dict[str, Any]:
        """Add or remove a Route in a Certificate's index.

        Re-reads the Certificate and writes back only the index annotation.
        There is no resourceVersion precondition: a concurrent writer can
        overwrite this update, and lost additions are repaired by the sweep.

        Returns:
            The patched Certificate
        """
        namespace = self.config.certificate_namespace
        current = self._index_value(self.store.get(CERTIFICATE, namespace, cert_name))
        ref = route_ref(route)
        value = references.add_route(current, ref) if add else references.remove_route(current, ref)
        return self.store.patch(
            CERTIFICATE,
            namespace,
            cert_name,
            {"metadata": {"annotations": {self.config.index_annotation_key: value}}},
        )

    def is_annotated(self, cert_name: str, route: dict[str, Any]) -> bool:
        """Check whether a Certificate's index lists the Route; fetch errors propagate."""
        certificate = self.store.get(CERTIFICATE, self.config.certificate_namespace, cert_name)
        return references.contains(self._index_value(certificate), route_ref(route))
