"""Canonical serialization used as hash input.

One structured value maps to exactly one byte string: mapping keys are
sorted by code point, sequences keep their order, and no whitespace is
emitted. The output is meant for hashing, not for people.
"""

import json
import math
from collections.abc import Mapping
from typing import Any

from .errors import KernelError, Stage
from .identity import get_kernel_identity


def canonical_json(value: Any) -> str:
    """Serialize ``value`` to its canonical JSON text.

    Args:
        value: None, bool, int, float, str, list/tuple or a mapping with
            string keys, nested arbitrarily.

    Returns:
        Canonical text with sorted keys and no whitespace.

    Raises:
        KernelError: INVALID_INPUT for unsupported values (non-finite
            floats, non-string keys, foreign types); INVARIANT_VIOLATION
            when the value contains a reference cycle.
    """
    parts: list[str] = []
    # Ids of containers on the current descent path; lives for this call only.
    _encode(value, parts, set())
    return "".join(parts)


def canonical_bytes(value: Any) -> bytes:
    """Canonical text of ``value`` encoded with the kernel's canonical encoding."""
    text = canonical_json(value)
    try:
        return text.encode(get_kernel_identity().canonical_encoding)
    except UnicodeEncodeError as exc:
        raise KernelError.invalid_input(
            "Value contains text that cannot be canonically encoded",
            stage=Stage.CANONICAL,
            details={"reason": exc.reason},
        ) from exc


def _encode_int(value: int) -> str:
    try:
        return str(int(value))
    except ValueError as exc:
        # Past sys.get_int_max_str_digits()
        raise KernelError.invalid_input(
            "Integer is too large to serialize",
            stage=Stage.CANONICAL,
            details={"bits": value.bit_length()},
        ) from exc


def _encode_float(value: float) -> str:
    if not math.isfinite(value):
        raise KernelError.invalid_input(
            "Non-finite numbers have no canonical form",
            stage=Stage.CANONICAL,
            details={"value": repr(value)},
        )
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _encode(value: Any, out: list[str], active: set[int]) -> None:
    if value is None:
        out.append("null")
    elif isinstance(value, bool):
        out.append("true" if value else "false")
    elif isinstance(value, int):
        out.append(_encode_int(value))
    elif isinstance(value, float):
        out.append(_encode_float(value))
    elif isinstance(value, str):
        out.append(json.dumps(value, ensure_ascii=False))
    elif isinstance(value, Mapping):
        _enter(value, active)
        keys = list(value.keys())
        for key in keys:
            if not isinstance(key, str):
                raise KernelError.invalid_input(
                    "Mapping keys must be strings",
                    stage=Stage.CANONICAL,
                    details={"key_type": type(key).__name__},
                )
        out.append("{")
        for position, key in enumerate(sorted(keys)):
            if position:
                out.append(",")
            out.append(json.dumps(key, ensure_ascii=False))
            out.append(":")
            _encode(value[key], out, active)
        out.append("}")
        active.discard(id(value))
    elif isinstance(value, (list, tuple)):
        _enter(value, active)
        out.append("[")
        for position, item in enumerate(value):
            if position:
                out.append(",")
            _encode(item, out, active)
        out.append("]")
        active.discard(id(value))
    else:
        raise KernelError.invalid_input(
            "Value is not canonically serializable",
            stage=Stage.CANONICAL,
            details={"type": type(value).__name__},
        )


def _enter(container: Any, active: set[int]) -> None:
    marker = id(container)
    if marker in active:
        raise KernelError.invariant_violation(
            "Cyclic structure cannot be canonicalized",
            stage=Stage.CANONICAL,
            details={"type": type(container).__name__},
        )
    active.add(marker)


__all__ = ["canonical_bytes", "canonical_json"]
