"""Builder for cert-manager Certificate bodies."""

from __future__ import annotations

from typing import Any

from ..config import OperatorConfig
from ..constants import CERTIFICATE_NAME_SUFFIX, SECRET_NAME_SUFFIX
from ..services.kubernetes.base import CERTIFICATE


def certificate_name(hostname: str) -> str:
    """Name of the Certificate managed for a hostname (``<hostname>-cert``)."""
    return f"{hostname}{CERTIFICATE_NAME_SUFFIX}"


def secret_name(hostname: str) -> str:
    """Name of the Secret holding the signed material (``<hostname>-tls``)."""
    return f"{hostname}{SECRET_NAME_SUFFIX}"


def build_certificate(hostname: str, issuer_name: str, config: OperatorConfig) -> dict[str, Any]:
    """Create a Certificate body for a hostname.

    Args:
        hostname: DNS name to request a certificate for
        issuer_name: Name of the issuer, taken from the Route's issuer directive
        config: Operator configuration

    Returns:
        Certificate body ready to be submitted to the store
    """
    return {
        "apiVersion": CERTIFICATE.api_version,
        "kind": CERTIFICATE.kind,
        "metadata": {
            "name": certificate_name(hostname),
            "namespace": config.certificate_namespace,
        },
        "spec": {
            "secretName": secret_name(hostname),
            "dnsNames": [hostname],
            "issuerRef": {
                "name": issuer_name,
                "kind": config.issuer_kind,
                "group": config.issuer_group,
            },
            "isCA": False,
            "privateKey": {
                "algorithm": config.private_key_algorithm,
                "size": config.private_key_size,
            },
        },
    }
