"""Base handler class with common functionality for all reconciler components."""

from __future__ import annotations

import logging
from typing import Any

from .. import metrics
from ..config import OperatorConfig
from ..constants import CONTROLLER_NAME, KIND_ROUTE
from ..logging import log_resource_event
from ..services.kubernetes.base import ClusterStore
from ..utils.errors import sanitize_exception
from ..utils.events import emit_failure, emit_success


class BaseHandler:
    """Base class for components that act on Routes through the cluster store."""

    def __init__(self, store: ClusterStore, config: OperatorConfig):
        """Initialize base handler.

        Args:
            store: Cluster store used for every read and write
            config: Operator configuration
        """
        self.store = store
        self.config = config
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, body: dict[str, Any]) -> dict[str, Any]:
        """Extract common resource context from a resource body."""
        meta = body.get("metadata", {})
        return {
            "kind": body.get("kind", KIND_ROUTE),
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(self, level: int, body: dict[str, Any], message: str, event: str, reason: str, **kwargs: Any) -> None:
        ctx = self._get_resource_context(body)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=ctx["kind"],
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        body: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message.

        Args:
            body: Resource body
            message: Log message
            event: Event type (default: "info")
            reason: Reason for the event (default: "Info")
            **kwargs: Additional fields to include in the log
        """
        self._log(logging.INFO, body, message, event, reason, **kwargs)

    def log_warning(
        self,
        body: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, body, message, event, reason, **kwargs)

    def log_error(
        self,
        body: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            body: Resource body
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()
        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
        self._log(logging.ERROR, body, message, event, reason, **log_data)

    def record_success(self, body: dict[str, Any], action: str, reason: str, note: str, **kwargs: Any) -> None:
        """Record a completed action as a Normal event and a log line."""
        self.log_info(body, note, event=action, reason=reason, **kwargs)
        emit_success(body, action, reason, note)
        metrics.certificate_operations_total.labels(operation=reason, result="success").inc()

    def record_failure(
        self,
        body: dict[str, Any],
        action: str,
        reason: str,
        note: str,
        error: Exception,
        **kwargs: Any,
    ) -> None:
        """Record a failed action as a Warning event, an error log line and metrics."""
        message = f"{note}: {sanitize_exception(error)}"
        self.log_error(body, message, error=error, event=action, reason=reason, **kwargs)
        emit_failure(body, action, reason, message)
        metrics.certificate_operations_total.labels(operation=reason, result="failed").inc()
        metrics.error_total.labels(error_type=type(error).__name__).inc()
