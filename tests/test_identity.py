"""Tests for the kernel identity."""

import pytest
from pydantic import ValidationError

from veritas.identity import get_kernel_identity


def test_identity_values():
    identity = get_kernel_identity()
    assert identity.kernel_version == "1.0.0"
    assert identity.spec_version == "1.0.0"
    assert identity.hash_algorithm == "sha256"
    assert identity.canonical_encoding == "utf-8"


def test_identity_is_cached():
    """Test that every caller sees the same identity object."""
    assert get_kernel_identity() is get_kernel_identity()


def test_identity_is_read_only():
    with pytest.raises(ValidationError):
        get_kernel_identity().kernel_version = "9.9.9"


def test_header_fields():
    """Test that headers carry versions and algorithm but not the encoding."""
    assert get_kernel_identity().header_fields() == {
        "kernel_version": "1.0.0",
        "spec_version": "1.0.0",
        "hash_algorithm": "sha256",
    }
