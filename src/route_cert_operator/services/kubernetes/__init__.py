"""Kubernetes-backed cluster store."""

from .base import CERTIFICATE, ROUTE, SECRET, ClusterStore, ResourceKind
from .client import KubernetesStore

__all__ = [
    "CERTIFICATE",
    "ROUTE",
    "SECRET",
    "ClusterStore",
    "KubernetesStore",
    "ResourceKind",
]
