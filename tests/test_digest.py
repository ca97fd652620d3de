"""Tests for digest helpers."""

import hashlib

import pytest

from veritas.digest import digest_bytes, digest_text, hash_value
from veritas.errors import KernelError


def test_digest_bytes_is_sha256_hex():
    """Test that digests are lowercase SHA-256 hex."""
    assert digest_bytes(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert digest_bytes(b"abc") == hashlib.sha256(b"abc").hexdigest()


def test_digest_text_uses_utf8():
    """Test that text is encoded as UTF-8 before hashing."""
    assert digest_text("café") == hashlib.sha256("café".encode("utf-8")).hexdigest()


def test_hash_value_hashes_canonical_form():
    """Test that hash_value digests the canonical serialization."""
    expected = hashlib.sha256(b'{"a":1,"b":2}').hexdigest()
    assert hash_value({"b": 2, "a": 1}) == expected
    assert hash_value({"a": 1, "b": 2}) == expected


def test_hash_value_is_stable():
    """Test that repeated hashing gives the same digest."""
    value = {"event_id": "x", "nested": [1, 2, {"k": None}]}
    assert hash_value(value) == hash_value(value)


def test_digest_bytes_rejects_text():
    """Test that non-bytes input is invalid at the digest stage."""
    with pytest.raises(KernelError) as exc_info:
        digest_bytes("abc")

    assert exc_info.value.code == "INVALID_INPUT"
    assert exc_info.value.stage == "DIGEST"


def test_digest_text_rejects_bytes():
    """Test that digest_text refuses bytes."""
    with pytest.raises(KernelError) as exc_info:
        digest_text(b"abc")

    assert exc_info.value.stage == "DIGEST"
