"""Deterministic digests over canonical bytes."""

import hashlib
from typing import Any

from .canonical import canonical_bytes
from .errors import KernelError, Stage
from .identity import get_kernel_identity


def digest_bytes(data: bytes) -> str:
    """Return the lowercase hex digest of ``data`` using the kernel algorithm."""
    if not isinstance(data, (bytes, bytearray)):
        raise KernelError.invalid_input(
            "Digest input must be bytes",
            stage=Stage.DIGEST,
            details={"type": type(data).__name__},
        )
    return hashlib.new(get_kernel_identity().hash_algorithm, bytes(data)).hexdigest()


def digest_text(text: str) -> str:
    """Digest of ``text`` encoded with the canonical encoding."""
    if not isinstance(text, str):
        raise KernelError.invalid_input(
            "Digest input must be a string",
            stage=Stage.DIGEST,
            details={"type": type(text).__name__},
        )
    return digest_bytes(text.encode(get_kernel_identity().canonical_encoding))


def hash_value(value: Any) -> str:
    """Digest of the canonical serialization of ``value``."""
    return digest_bytes(canonical_bytes(value))


__all__ = ["digest_bytes", "digest_text", "hash_value"]
