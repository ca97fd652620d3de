"""Pytest fixtures for Veritas tests."""

import json
import sys

import pytest

from veritas.documents import write_expected_hash, write_ledger_document
from veritas.ledger import build_ledger


@pytest.fixture(autouse=True)
def clean_veritas_env(monkeypatch):
    """Keep VERITAS_* variables from the outer environment out of tests."""
    monkeypatch.delenv("VERITAS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("VERITAS_DOCUMENT_INDENT", raising=False)


@pytest.fixture
def sample_events():
    """A small event sequence with nested data, unicode and a missing event_id.

    Returns:
        List of plain JSON-compatible events
    """
    return [
        {"event_id": "evt-001", "type": "observation", "value": 42, "tags": ["a", "b"]},
        {"event_id": "evt-002", "type": "observation", "value": 1.5, "meta": {"z": None, "a": True}},
        {"type": "note", "text": "café ✓"},
    ]


@pytest.fixture
def sample_ledger(sample_events):
    """Ledger sealed from sample_events."""
    return build_ledger(sample_events)


@pytest.fixture
def ledger_document(sample_ledger):
    """Independent plain-data document of sample_ledger, safe to tamper with."""
    return sample_ledger.to_document()


@pytest.fixture
def atoms_file(tmp_path, sample_events):
    """Atoms file holding sample_events as a JSON array."""
    path = tmp_path / "atoms.json"
    path.write_text(json.dumps(sample_events, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def ledger_file(tmp_path, sample_ledger):
    """Ledger document for sample_ledger written to disk."""
    return write_ledger_document(sample_ledger, tmp_path / "out" / "ledger.json")


@pytest.fixture
def hash_file(tmp_path, sample_ledger):
    """Expected-digest file holding sample_ledger's ledger hash."""
    return write_expected_hash(sample_ledger.ledger_hash, tmp_path / "out" / "ledger.sha256")


@pytest.fixture
def write_document():
    """Return a helper that writes an arbitrary (possibly tampered) document."""

    def _write(path, document):
        path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def int_digit_limit():
    """Lower the interpreter's int/str conversion limit for the test.

    Returns:
        The active limit in digits
    """
    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(640)
    yield 640
    sys.set_int_max_str_digits(previous)
