"""Error types and sanitization utilities."""

from __future__ import annotations

import re
from typing import Any


class OperatorError(Exception):
    """Base class for all operator errors."""


class StoreError(OperatorError):
    """A cluster store operation failed."""


class NotFoundError(StoreError):
    """The requested object does not exist."""


class ConflictError(StoreError):
    """The object already exists."""


class TransportError(StoreError):
    """Any other store or network failure."""


class MissingResourceError(OperatorError):
    """Signed material lacks the expected fields."""


# PEM blocks are redacted as a whole
PEM_PATTERN = re.compile(
    r"-----BEGIN ([A-Z0-9 ]+)-----.*?-----END \1-----",
    flags=re.DOTALL,
)

# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"token[:\s]+([A-Za-z0-9\-_\.=/+]+)",
    r"password[:\s]+([^\s,;\)]+)",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "key",
    "certificate",
    "cacertificate",
    "tls.crt",
    "tls.key",
    "ca.crt",
    "password",
    "token",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with PEM material and tokens redacted
    """
    sanitized = PEM_PATTERN.sub(r"[REDACTED \1]", message)

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, lambda m: m.group(0).replace(m.group(1), "[REDACTED]"), sanitized, flags=re.IGNORECASE)

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        if key.lower() in all_sensitive:
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
