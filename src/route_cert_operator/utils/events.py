"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event about a resource.

    Args:
        body: Full resource body (apiVersion, kind and metadata are used)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_success(body: dict[str, Any], action: str, reason: str, note: str) -> None:
    """Emit a Normal event for a completed action."""
    emit_event(body, reason, f"{action}: {note}")


def emit_failure(body: dict[str, Any], action: str, reason: str, note: str) -> None:
    """Emit a Warning event for a failed action."""
    emit_event(body, reason, f"{action}: {note}", type_="Warning")
