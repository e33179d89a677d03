"""Codec for the Route back-reference index stored on Certificates.

The index is a single annotation value of the form
``namespace/name(,namespace/name)*``. Entries are de-duplicated and the
order of existing entries is kept when the index is rewritten. Entries that
cannot be parsed are dropped on decode so that values written by older
releases never break reconciliation.
"""

from __future__ import annotations

from typing import Any, Iterable, NamedTuple

from ..constants import IDENTITY_SEPARATOR, REFERENCE_DELIMITER


class RouteRef(NamedTuple):
    """Identity of a namespaced Route."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}{IDENTITY_SEPARATOR}{self.name}"

    def __bool__(self) -> bool:
        return bool(self.namespace and self.name)

    @classmethod
    def parse(cls, value: str) -> RouteRef | None:
        """Parse ``namespace/name``, returning None when malformed."""
        namespace, sep, name = value.strip().partition(IDENTITY_SEPARATOR)
        if not sep or not namespace or not name:
            return None
        return cls(namespace, name)

    @classmethod
    def from_meta(cls, meta: dict[str, Any]) -> RouteRef:
        """Build the identity of a resource from its metadata."""
        return cls(meta.get("namespace", ""), meta.get("name", ""))


def _decode_ordered(value: str | None) -> list[RouteRef]:
    refs: dict[RouteRef, None] = {}
    for entry in (value or "").split(REFERENCE_DELIMITER):
        ref = RouteRef.parse(entry)
        if ref is not None:
            refs[ref] = None
    return list(refs)


def encode(refs: Iterable[RouteRef]) -> str:
    """Encode Route identities into an index annotation value."""
    return REFERENCE_DELIMITER.join(str(ref) for ref in dict.fromkeys(refs))


def decode(value: str | None) -> set[RouteRef]:
    """Decode an index annotation value, dropping malformed entries."""
    return set(_decode_ordered(value))


def contains(value: str | None, ref: RouteRef) -> bool:
    """Check whether an index annotation value lists a Route."""
    return ref in decode(value)


def add_route(current: str | None, ref: RouteRef) -> str:
    """Return the index value with ``ref`` added.

    An absent or empty index yields the bare identity.
    """
    if not current:
        return str(ref)
    refs = _decode_ordered(current)
    if ref not in refs:
        refs.append(ref)
    return encode(refs)


def remove_route(current: str | None, ref: RouteRef) -> str:
    """Return the index value with ``ref`` removed.

    An absent or empty index yields an empty string.
    """
    if not current:
        return ""
    return encode(r for r in _decode_ordered(current) if r != ref)
