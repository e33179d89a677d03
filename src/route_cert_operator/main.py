"""Main entry point for the Route Certificate Operator."""

from __future__ import annotations

import logging
import os
import time
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from .config import OperatorConfig
from .constants import (
    CERT_MANAGER_GROUP,
    CERT_MANAGER_VERSION,
    CERTIFICATE_PLURAL,
    CONTROLLER_NAME,
    RECHECK_ATTEMPTS,
    ROUTE_GROUP,
    ROUTE_PLURAL,
    ROUTE_VERSION,
)
from .handlers.mapper import map_certificate_to_routes
from .handlers.reconciler import Action, RouteReconciler, error_policy
from .services.kubernetes.client import KubernetesStore, load_kubernetes_config
from .tracing import initialize_tracing
from .utils.errors import NotFoundError, OperatorError, sanitize_exception
from .utils.locks import KeyedLock
from .utils.references import RouteRef

logger = logging.getLogger(__name__)

CONFIG = OperatorConfig.from_env()

_route_locks = KeyedLock()
_reconciler: RouteReconciler | None = None


def get_reconciler() -> RouteReconciler:
    """Return the process-wide reconciler, creating it on first use."""
    global _reconciler
    if _reconciler is None:
        load_kubernetes_config()
        store = KubernetesStore(rate_limit_per_second=CONFIG.k8s_rate_limit_per_second)
        _reconciler = RouteReconciler(store, CONFIG)
    return _reconciler


def run_reconcile(ref: RouteRef) -> Action:
    """Reconcile one Route identity, at most once at a time per identity."""
    with _route_locks.hold(ref):
        try:
            return get_reconciler().reconcile(ref)
        except Exception as e:
            return error_policy(ref, e, CONFIG)


def _reconcile_or_retry(meta: dict[str, Any]) -> None:
    ref = RouteRef.from_meta(meta)
    action = run_reconcile(ref)
    if action.failed:
        raise kopf.TemporaryError(
            f"Reconcile of Route {ref} stopped at {action.state.value}",
            delay=action.requeue_after,
        )


def schedule_fast_retry(ref: RouteRef) -> bool:
    """Hand a failed reconcile over to the Route's own handlers.

    Touching the re-check annotation makes kopf run the Route's update
    handler, which retries with ``TemporaryError(delay=requeue_error_seconds)``.
    The annotation patch itself is attempted ``RECHECK_ATTEMPTS`` times,
    ``requeue_error_seconds`` apart.

    Returns:
        True if the re-check was requested
    """
    for attempt in range(1, RECHECK_ATTEMPTS + 1):
        try:
            get_reconciler().request_recheck(ref)
            return True
        except NotFoundError:
            logger.info(f"Route {ref} no longer exists, no re-check needed")
            return False
        except OperatorError as e:
            logger.warning(
                f"Requesting re-check of Route {ref} failed (attempt {attempt}/{RECHECK_ATTEMPTS}): "
                f"{sanitize_exception(e)}"
            )
            if attempt < RECHECK_ATTEMPTS:
                time.sleep(CONFIG.requeue_error_seconds)
    logger.error(f"Could not request re-check of Route {ref}; the periodic timer will pick it up")
    return False


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()

    # Keep kopf's bookkeeping in annotations so Route status is left alone
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=f"{CONTROLLER_NAME}.kopf.dev")
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(prefix=f"{CONTROLLER_NAME}.kopf.dev")

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    initialize_tracing()

    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    health.start_http_server(metrics_port)

    get_reconciler()
    health.mark_ready()
    logger.info(
        f"{CONTROLLER_NAME} started (pod={os.getenv('CONTROLLER_POD_NAME', 'unknown')}, "
        f"certificate namespace={CONFIG.certificate_namespace})"
    )


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not ready while the operator stops."""
    health.mark_not_ready()


@kopf.on.resume(ROUTE_GROUP, ROUTE_VERSION, ROUTE_PLURAL)
@kopf.on.create(ROUTE_GROUP, ROUTE_VERSION, ROUTE_PLURAL)
@kopf.on.update(ROUTE_GROUP, ROUTE_VERSION, ROUTE_PLURAL)
def handle_route(meta: dict[str, Any], **_: Any) -> None:
    """Reconcile a Route on every change."""
    _reconcile_or_retry(meta)


@kopf.on.delete(ROUTE_GROUP, ROUTE_VERSION, ROUTE_PLURAL, optional=True)
def handle_route_delete(meta: dict[str, Any], **_: Any) -> None:
    """Release a deleted Route; the operator's own finalizer keeps it around until then."""
    _reconcile_or_retry(meta)


@kopf.timer(ROUTE_GROUP, ROUTE_VERSION, ROUTE_PLURAL, interval=CONFIG.requeue_default_seconds, initial_delay=60.0)
def recheck_route(meta: dict[str, Any], **_: Any) -> None:
    """Periodic slow re-check of every Route."""
    _reconcile_or_retry(meta)


@kopf.on.event(
    CERT_MANAGER_GROUP,
    CERT_MANAGER_VERSION,
    CERTIFICATE_PLURAL,
    annotations={CONFIG.index_annotation_key: kopf.PRESENT},
)
def handle_certificate_event(body: dict[str, Any], **_: Any) -> None:
    """Re-reconcile the Routes listed in a changed Certificate's index."""
    for ref in map_certificate_to_routes(body, CONFIG):
        if not ref:
            continue
        action = run_reconcile(ref)
        if action.failed:
            logger.warning(
                f"Reconcile of Route {ref} after Certificate event stopped at {action.state.value}; "
                f"requesting a fast retry"
            )
            schedule_fast_retry(ref)
