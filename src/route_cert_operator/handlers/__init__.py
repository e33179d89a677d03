"""Reconciler components for Routes and Certificates."""

from .base import BaseHandler
from .certificate import CertificateManager
from .mapper import map_certificate_to_routes
from .reconciler import Action, ReconcileState, RouteReconciler, error_policy
from .route import FinalizerGuard, is_valid_route
from .tls import SignedMaterial, TLSSynchronizer

__all__ = [
    "Action",
    "BaseHandler",
    "CertificateManager",
    "FinalizerGuard",
    "ReconcileState",
    "RouteReconciler",
    "SignedMaterial",
    "TLSSynchronizer",
    "error_policy",
    "is_valid_route",
    "map_certificate_to_routes",
]
