"""Synchronization of Route TLS blocks with the signed material of their Certificate."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..constants import (
    CA_CRT,
    DEFAULT_INSECURE_EDGE_POLICY,
    DEFAULT_TLS_TERMINATION,
    TLS_CRT,
    TLS_KEY,
    UPDATE_TRAIL_DELIMITER,
)
from ..services.kubernetes.base import CERTIFICATE, ROUTE, SECRET
from ..utils.errors import MissingResourceError
from .base import BaseHandler
from .route import route_ref


@dataclass(frozen=True)
class SignedMaterial:
    """Certificate, key and optional CA issued for a Certificate."""

    certificate: bytes
    key: bytes
    ca: bytes | None = None

    @classmethod
    def from_secret(cls, secret: dict[str, Any]) -> SignedMaterial:
        """Decode signed material from a Secret in its API form.

        Raises:
            MissingResourceError: If tls.crt or tls.key is absent, or a field
                is not base64-encoded UTF-8 text
        """
        data = secret.get("data") or {}
        name = secret.get("metadata", {}).get("name", "unknown")
        if not data.get(TLS_CRT) or not data.get(TLS_KEY):
            raise MissingResourceError(f"Secret {name} has no {TLS_CRT}/{TLS_KEY} data")
        ca = data.get(CA_CRT)
        return cls(
            certificate=_decode_field(name, TLS_CRT, data[TLS_CRT]),
            key=_decode_field(name, TLS_KEY, data[TLS_KEY]),
            ca=_decode_field(name, CA_CRT, ca) if ca else None,
        )


def _decode_field(secret_name: str, field: str, encoded: str) -> bytes:
    try:
        value = base64.b64decode(encoded, validate=True)
        value.decode("utf-8")
    except ValueError as e:
        raise MissingResourceError(f"Secret {secret_name} field {field} is not base64-encoded UTF-8 text") from e
    return value


def format_update_trail(current: str | None, now: datetime | None = None) -> str:
    """Prepend the current UTC timestamp to a Route's TLS update trail."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    return f"{stamp}{UPDATE_TRAIL_DELIMITER}{current}" if current else stamp


def _as_bytes(value: str | None) -> bytes | None:
    return value.encode("utf-8") if value is not None else None


class TLSSynchronizer(BaseHandler):
    """Compares and populates Route TLS blocks from signed material."""

    def signed_material(self, cert_name: str) -> SignedMaterial:
        """Fetch the signed material produced for a Certificate.

        Raises:
            NotFoundError: If the Certificate or its Secret does not exist
            MissingResourceError: If the Secret lacks certificate or key data
        """
        namespace = self.config.certificate_namespace
        certificate = self.store.get(CERTIFICATE, namespace, cert_name)
        secret_name = certificate.get("spec", {}).get("secretName")
        if not secret_name:
            raise MissingResourceError(f"Certificate {cert_name} declares no secretName")
        return SignedMaterial.from_secret(self.store.get(SECRET, namespace, secret_name))

    def is_up_to_date(self, route: dict[str, Any], cert_name: str) -> bool:
        """Check whether the Route's TLS block matches the signed material byte for byte."""
        material = self.signed_material(cert_name)
        tls = route.get("spec", {}).get("tls") or {}
        if not tls.get("certificate") or not tls.get("key"):
            return False
        if _as_bytes(tls["certificate"]) != material.certificate or _as_bytes(tls["key"]) != material.key:
            return False
        if material.ca is not None and _as_bytes(tls.get("caCertificate")) != material.ca:
            return False
        return True

    def populate(self, route: dict[str, Any], cert_name: str) -> dict[str, Any]:
        """Write the signed material into the Route's TLS block.

        Termination and insecure edge policy are kept from the existing block,
        defaulting to edge termination with redirect.
        """
        material = self.signed_material(cert_name)
        tls = route.get("spec", {}).get("tls") or {}
        annotations = route.get("metadata", {}).get("annotations") or {}
        ref = route_ref(route)
        patch = {
            "metadata": {
                "annotations": {
                    self.config.update_annotation_key: format_update_trail(
                        annotations.get(self.config.update_annotation_key)
                    ),
                },
            },
            "spec": {
                "tls": {
                    "termination": tls.get("termination") or DEFAULT_TLS_TERMINATION,
                    "insecureEdgeTerminationPolicy": (
                        tls.get("insecureEdgeTerminationPolicy") or DEFAULT_INSECURE_EDGE_POLICY
                    ),
                    "certificate": material.certificate.decode("utf-8"),
                    "key": material.key.decode("utf-8"),
                    "caCertificate": material.ca.decode("utf-8") if material.ca is not None else None,
                },
            },
        }
        return self.store.patch(ROUTE, ref.namespace, ref.name, patch)
