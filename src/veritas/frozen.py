"""Deep-frozen views of plain JSON-style data.

Sealed values (ledger events, error details) are stored as read-only
mappings and tuples so they cannot be edited in place after sealing.
``thaw`` turns them back into independent dicts and lists.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any


def freeze(value: Any) -> Any:
    """Return a read-only deep copy of ``value``.

    Mappings become ``MappingProxyType`` over a fresh dict, lists and
    tuples become tuples. Scalars are returned as is. ``value`` must be
    acyclic.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Return a mutable deep copy of ``value`` using dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


__all__ = ["freeze", "thaw"]
