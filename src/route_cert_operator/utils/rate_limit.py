"""Rate limiting utilities for Kubernetes API calls."""

from __future__ import annotations

import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from kubernetes.client.exceptions import ApiException

_F = TypeVar("_F", bound=Callable[..., Any])


class RateLimiter:
    """Minimum-interval limiter shared by all calls made through one store.

    Implements a simple token bucket-like rate limiter to prevent overwhelming
    the Kubernetes API server.
    """

    def __init__(self, per_second: float) -> None:
        self.min_interval = 1.0 / per_second if per_second > 0 else 0.0
        self._last_call_time = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        """Block until the next call is allowed."""
        with self._lock:
            time_since_last_call = time.time() - self._last_call_time
            if time_since_last_call < self.min_interval:
                time.sleep(self.min_interval - time_since_last_call)
            self._last_call_time = time.time()

    def __call__(self, func: _F) -> _F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            self.wait()
            return func(*args, **kwargs)

        return wrapper  # type: ignore


def is_rate_limit_error(e: Exception) -> bool:
    """Check if an exception is a Kubernetes API rate limit error."""
    if not isinstance(e, ApiException):
        return False
    # Kubernetes API rate limit errors typically return 429 or 503
    return e.status == 429 or (e.status == 503 and "rate limit" in str(e).lower())


def handle_rate_limit_error(e: Exception, attempt: int, max_retries: int = 3) -> bool:
    """Back off after a rate limit error.

    Args:
        e: Exception raised by the API call
        attempt: Zero-based number of retries already made
        max_retries: Maximum number of retries

    Returns:
        True if the caller should retry, False otherwise
    """
    if not is_rate_limit_error(e) or attempt >= max_retries:
        return False
    # Exponential backoff: 1s, 2s, 4s
    time.sleep(2**attempt)
    return True
