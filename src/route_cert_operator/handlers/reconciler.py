"""Route reconciliation state machine and the back-reference sweep."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .. import metrics
from ..builders.certificate import certificate_name
from ..config import OperatorConfig
from ..constants import (
    EVENT_ACTION_CREATE,
    EVENT_ACTION_PATCH,
    EVENT_REASON_INVALID_ROUTE_TLS,
    EVENT_REASON_MISSING_CERTIFICATE,
    EVENT_REASON_MISSING_ROUTE_FINALIZER,
    EVENT_REASON_MISSING_ROUTE_IN_ANNOTATION,
    EVENT_REASON_ROUTE_DELETION,
    EVENT_REASON_UNMANAGE_ROUTE,
)
from ..services.kubernetes.base import ROUTE, ClusterStore
from ..tracing import trace_span
from ..utils.errors import NotFoundError, OperatorError, sanitize_exception
from ..utils.references import RouteRef
from .base import BaseHandler
from .certificate import CertificateManager
from .route import (
    FinalizerGuard,
    has_finalizer,
    is_being_deleted,
    is_valid_route,
    issuer_directive,
    route_host,
    route_ref,
)
from .tls import TLSSynchronizer

logger = logging.getLogger(__name__)


class ReconcileState(str, Enum):
    """Stage a reconcile reached; not persisted anywhere."""

    DELETING = "Deleting"
    UNMANAGED = "Unmanaged"
    MANAGING_CERT = "ManagingCert"
    SYNCING_TLS = "SyncingTLS"
    ENSURING_FINALIZER = "EnsuringFinalizer"
    CONVERGED = "Converged"
    ERROR = "Error"


@dataclass(frozen=True)
class Action:
    """Outcome of one reconcile: when to look at the Route again."""

    requeue_after: float
    state: ReconcileState
    failed: bool = False
    changed: bool = False


def error_policy(ref: RouteRef, error: Exception, config: OperatorConfig) -> Action:
    """Action for an error that escaped reconcile: always the fast retry."""
    logger.error(f"Error reconciling Route {ref}: {sanitize_exception(error)}")
    metrics.error_total.labels(error_type=type(error).__name__).inc()
    metrics.reconcile_total.labels(state=ReconcileState.ERROR.value, result="error").inc()
    return Action(config.requeue_error_seconds, ReconcileState.ERROR, failed=True)


class RouteReconciler(BaseHandler):
    """Drives one Route towards its managed state per invocation.

    Steps, in order:

    1. A Route being deleted that still carries the guard finalizer is
       removed from its Certificate's index, then the finalizer is removed.
    2. A Route that was just released, or that lost its issuer directive,
       is removed from the index of the Certificate for its host.
    3. A valid Route gets its Certificate, its TLS block and the finalizer.
    4. The sweep adds every valid Route missing from its Certificate's index.

    Every failed mutation is recorded and answered with the fast retry delay.
    Every mutation is idempotent, so a reconcile interrupted at any point is
    safe to run again.
    """

    def __init__(self, store: ClusterStore, config: OperatorConfig):
        super().__init__(store, config)
        self.certificates = CertificateManager(store, config)
        self.tls = TLSSynchronizer(store, config)
        self.finalizers = FinalizerGuard(store, config)

    def _retry(self, state: ReconcileState, changed: bool = False) -> Action:
        metrics.reconcile_total.labels(state=state.value, result="failed").inc()
        return Action(self.config.requeue_error_seconds, state, failed=True, changed=changed)

    def reconcile(self, ref: RouteRef) -> Action:
        """Reconcile the Route with the given identity.

        Store failures while fetching the Route or listing Routes for the
        sweep propagate; pass them to ``error_policy``.
        """
        with trace_span("reconcile_route", attributes={"route.namespace": ref.namespace, "route.name": ref.name}):
            start_time = time.time()
            try:
                try:
                    route = self.store.get(ROUTE, ref.namespace, ref.name)
                except NotFoundError:
                    logger.info(f"Route {ref} no longer exists")
                    return self._finish(ReconcileState.UNMANAGED, changed=False)
                return self.reconcile_route(route)
            finally:
                metrics.reconcile_duration_seconds.observe(time.time() - start_time)

    def request_recheck(self, ref: RouteRef) -> dict[str, Any]:
        """Touch the Route's re-check annotation so its update handlers run again.

        Raises:
            NotFoundError: If the Route no longer exists
            TransportError: On any other store failure
        """
        stamp = datetime.now(timezone.utc).isoformat()
        return self.store.patch(
            ROUTE,
            ref.namespace,
            ref.name,
            {"metadata": {"annotations": {self.config.recheck_annotation_key: stamp}}},
        )

    def reconcile_route(self, route: dict[str, Any]) -> Action:
        """Reconcile a Route snapshot."""
        deleting = is_being_deleted(route)
        state = ReconcileState.DELETING if deleting else ReconcileState.UNMANAGED
        changed = False
        released = False

        if deleting and has_finalizer(route, self.config):
            ok, did_release = self._release(route, EVENT_REASON_ROUTE_DELETION)
            changed |= did_release
            if not ok:
                return self._retry(state, changed)
            try:
                self.finalizers.remove_finalizer(route)
            except OperatorError as e:
                self.record_failure(
                    route,
                    EVENT_ACTION_PATCH,
                    EVENT_REASON_ROUTE_DELETION,
                    f"Error removing finalizer from Route {route_ref(route)}",
                    e,
                )
                return self._retry(state, changed)
            self.record_success(
                route,
                EVENT_ACTION_PATCH,
                EVENT_REASON_ROUTE_DELETION,
                f"Removed finalizer from Route {route_ref(route)}",
            )
            changed = True
            released = True

        if (released or issuer_directive(route, self.config) is None) and route_host(route) is not None:
            if not released:
                ok, did_release = self._release(route, EVENT_REASON_UNMANAGE_ROUTE)
                changed |= did_release
                if not ok:
                    return self._retry(state, changed)
        elif is_valid_route(route, self.config) and not deleting:
            outcome = self._manage(route)
            if outcome.failed:
                return outcome
            state, changed = outcome.state, outcome.changed

        return self._finish(state, changed)

    def _finish(self, state: ReconcileState, changed: bool) -> Action:
        if not self.sweep():
            return self._retry(state, changed)
        metrics.reconcile_total.labels(state=state.value, result="success").inc()
        return Action(self.config.requeue_default_seconds, state, changed=changed)

    def _release(self, route: dict[str, Any], reason: str) -> tuple[bool, bool]:
        """Remove a Route from the index of the Certificate for its host.

        Returns:
            (succeeded, index was patched)
        """
        host = route_host(route)
        if host is None:
            return True, False
        cert_name = certificate_name(host)
        if not self.certificates.exists(cert_name):
            return True, False
        try:
            listed = self.certificates.is_annotated(cert_name, route)
        except OperatorError:
            listed = True
        if not listed:
            return True, False

        ref = route_ref(route)
        try:
            self.certificates.annotate(cert_name, route, add=False)
        except OperatorError as e:
            self.record_failure(
                route,
                EVENT_ACTION_PATCH,
                reason,
                f"Error removing Route {ref} from Certificate "
                f"{self.config.certificate_namespace}/{cert_name} annotation",
                e,
            )
            return False, False
        self.record_success(
            route,
            EVENT_ACTION_PATCH,
            reason,
            f"Removed Route {ref} from Certificate {self.config.certificate_namespace}/{cert_name} annotation",
            cert_name=cert_name,
        )
        return True, True

    def _manage(self, route: dict[str, Any]) -> Action:
        """Ensure Certificate, TLS block and finalizer for a valid Route."""
        ref = route_ref(route)
        cert_name = certificate_name(route_host(route))
        changed = False

        state = ReconcileState.MANAGING_CERT
        if not self.certificates.exists(cert_name):
            try:
                self.certificates.create(route)
            except OperatorError as e:
                self.record_failure(
                    route,
                    EVENT_ACTION_CREATE,
                    EVENT_REASON_MISSING_CERTIFICATE,
                    f"Error creating Certificate {self.config.certificate_namespace}/{cert_name} "
                    f"requested by Route {ref}",
                    e,
                )
                return self._retry(state, changed)
            self.record_success(
                route,
                EVENT_ACTION_CREATE,
                EVENT_REASON_MISSING_CERTIFICATE,
                f"Created Certificate {self.config.certificate_namespace}/{cert_name} requested by Route {ref}",
                cert_name=cert_name,
            )
            changed = True

        state = ReconcileState.SYNCING_TLS
        try:
            up_to_date = self.tls.is_up_to_date(route, cert_name)
        except OperatorError as e:
            self.log_info(route, f"TLS freshness check failed, populating: {sanitize_exception(e)}", reason="TLSCheck")
            up_to_date = False
        if not up_to_date:
            try:
                self.tls.populate(route, cert_name)
            except OperatorError as e:
                self.record_failure(
                    route,
                    EVENT_ACTION_PATCH,
                    EVENT_REASON_INVALID_ROUTE_TLS,
                    f"Error populating TLS for Route {ref}",
                    e,
                )
                return self._retry(state, changed)
            self.record_success(
                route,
                EVENT_ACTION_PATCH,
                EVENT_REASON_INVALID_ROUTE_TLS,
                f"Populated TLS for Route {ref}",
                cert_name=cert_name,
            )
            changed = True

        state = ReconcileState.ENSURING_FINALIZER
        if not has_finalizer(route, self.config):
            try:
                self.finalizers.add_finalizer(route)
            except OperatorError as e:
                self.record_failure(
                    route,
                    EVENT_ACTION_PATCH,
                    EVENT_REASON_MISSING_ROUTE_FINALIZER,
                    f"Error adding finalizer to Route {ref}",
                    e,
                )
                return self._retry(state, changed)
            self.record_success(
                route,
                EVENT_ACTION_PATCH,
                EVENT_REASON_MISSING_ROUTE_FINALIZER,
                f"Added finalizer to Route {ref}",
            )
            changed = True

        return Action(self.config.requeue_default_seconds, ReconcileState.CONVERGED, changed=changed)

    def sweep(self) -> bool:
        """Add every valid Route missing from its Certificate's index.

        Only missing entries are repaired; stale entries are left to the
        deletion and unmanage paths. A failed membership check counts as
        "missing". Routes being deleted are skipped so a released Route is
        not listed again. The first failed repair stops the sweep.

        Returns:
            False if a repair failed
        """
        with trace_span("sweep_certificate_index"):
            for route in self.store.list(ROUTE):
                if not is_valid_route(route, self.config) or is_being_deleted(route):
                    continue
                ref = route_ref(route)
                cert_name = certificate_name(route_host(route))
                try:
                    if self.certificates.is_annotated(cert_name, route):
                        continue
                except OperatorError as e:
                    self.log_warning(
                        route,
                        f"Could not check Certificate {cert_name} index: {sanitize_exception(e)}",
                        reason=EVENT_REASON_MISSING_ROUTE_IN_ANNOTATION,
                    )

                try:
                    self.certificates.annotate(cert_name, route, add=True)
                except OperatorError as e:
                    self.record_failure(
                        route,
                        EVENT_ACTION_PATCH,
                        EVENT_REASON_MISSING_ROUTE_IN_ANNOTATION,
                        f"Error annotating Certificate {self.config.certificate_namespace}/{cert_name} "
                        f"requested by Route {ref}",
                        e,
                    )
                    return False
                self.record_success(
                    route,
                    EVENT_ACTION_PATCH,
                    EVENT_REASON_MISSING_ROUTE_IN_ANNOTATION,
                    f"Annotated Certificate {self.config.certificate_namespace}/{cert_name} for Route {ref}",
                    cert_name=cert_name,
                )
                metrics.index_repairs_total.inc()
            return True
