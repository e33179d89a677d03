"""Mapping of Certificate events to the Routes that must be reconciled."""

from __future__ import annotations

from typing import Any

from ..config import OperatorConfig
from ..constants import REFERENCE_DELIMITER
from ..utils.references import RouteRef

UNROUTABLE = RouteRef("", "")


def map_certificate_to_routes(certificate: dict[str, Any], config: OperatorConfig) -> list[RouteRef]:
    """Return the Route identities listed in a Certificate's index.

    Entries that do not parse as ``namespace/name`` map to the empty
    identity instead of being skipped; callers treat it as a no-op.
    """
    annotations = certificate.get("metadata", {}).get("annotations") or {}
    value = annotations.get(config.index_annotation_key)
    if value is None:
        return []
    return [RouteRef.parse(entry) or UNROUTABLE for entry in value.split(REFERENCE_DELIMITER)]
