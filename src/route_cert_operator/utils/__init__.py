"""Utility functions for the Route Certificate Operator."""

from .errors import (
    ConflictError,
    MissingResourceError,
    NotFoundError,
    OperatorError,
    StoreError,
    TransportError,
    sanitize_exception,
)
from .events import emit_event, emit_failure, emit_success
from .locks import KeyedLock
from .rate_limit import RateLimiter, handle_rate_limit_error
from .references import RouteRef, add_route, contains, decode, encode, remove_route

__all__ = [
    "OperatorError",
    "StoreError",
    "NotFoundError",
    "ConflictError",
    "TransportError",
    "MissingResourceError",
    "sanitize_exception",
    "emit_event",
    "emit_success",
    "emit_failure",
    "KeyedLock",
    "RateLimiter",
    "handle_rate_limit_error",
    "RouteRef",
    "encode",
    "decode",
    "contains",
    "add_route",
    "remove_route",
]
