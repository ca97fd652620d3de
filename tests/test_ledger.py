"""Tests for ledger construction."""

import pytest
from pydantic import ValidationError

from veritas.digest import hash_value
from veritas.documents import ledger_to_json
from veritas.errors import KernelError
from veritas.frozen import thaw
from veritas.ledger import (
    build_ledger,
    compute_entry_hash,
    compute_event_hash,
    compute_ledger_hash,
    extract_event_id,
)
from veritas.replay import replay_sequence


def test_empty_ledger():
    """Test that an empty event sequence builds a valid empty ledger."""
    ledger = build_ledger([])

    assert ledger.entry_count == 0
    assert ledger.entries == ()
    assert ledger.final_entry_hash is None
    assert ledger.ledger_hash == hash_value(
        {
            "kernel_version": "1.0.0",
            "spec_version": "1.0.0",
            "entry_count": 0,
            "final_entry_hash": None,
        }
    )


def test_header_matches_kernel_identity(sample_ledger):
    assert sample_ledger.header.kernel_version == "1.0.0"
    assert sample_ledger.header.spec_version == "1.0.0"
    assert sample_ledger.header.hash_algorithm == "sha256"


def test_entries_are_chained(sample_events, sample_ledger):
    """Test that each entry links to the previous entry's hash."""
    entries = sample_ledger.entries

    assert sample_ledger.entry_count == len(sample_events) == len(entries)
    assert entries[0].previous_hash is None
    for previous, entry in zip(entries, entries[1:]):
        assert entry.previous_hash == previous.entry_hash
    assert sample_ledger.final_entry_hash == entries[-1].entry_hash


def test_entry_hashes_recompute(sample_events, sample_ledger):
    """Test that every stored hash matches its definition."""
    for index, (event, entry) in enumerate(zip(sample_events, sample_ledger.entries)):
        assert entry.index == index
        assert thaw(entry.event) == event
        assert entry.event_hash == compute_event_hash(event)
        assert entry.entry_hash == compute_entry_hash(
            index, entry.event_id, entry.event_hash, entry.previous_hash, event
        )

    assert sample_ledger.ledger_hash == compute_ledger_hash(
        sample_ledger.entry_count, sample_ledger.final_entry_hash
    )


def test_event_ids_extracted(sample_ledger):
    """Test that event_id is copied from the event and defaults to None."""
    assert [entry.event_id for entry in sample_ledger.entries] == ["evt-001", "evt-002", None]


def test_extract_event_id_non_mapping():
    assert extract_event_id(5) is None
    assert extract_event_id(["event_id"]) is None
    assert extract_event_id({"event_id": 7}) == 7


def test_build_is_deterministic(sample_events):
    """Test that building twice yields byte-identical documents."""
    assert ledger_to_json(build_ledger(sample_events)) == ledger_to_json(build_ledger(sample_events))


def test_key_order_does_not_change_hashes():
    """Test that events equal up to key order seal to the same ledger hash."""
    first = build_ledger([{"a": 1, "b": 2}])
    second = build_ledger([{"b": 2, "a": 1}])
    assert first.ledger_hash == second.ledger_hash


def test_event_order_changes_hashes():
    """Test that the chain is sensitive to event order."""
    forward = build_ledger([{"n": 1}, {"n": 2}])
    backward = build_ledger([{"n": 2}, {"n": 1}])
    assert forward.ledger_hash != backward.ledger_hash


def test_duplicate_event_ids_pass_through():
    """Test that duplicate event_ids are neither rejected nor deduplicated."""
    ledger = build_ledger([{"event_id": "same"}, {"event_id": "same"}])
    assert ledger.entry_count == 2
    assert [entry.event_id for entry in ledger.entries] == ["same", "same"]


def test_scalar_events_allowed():
    """Test that non-mapping events are sealed verbatim."""
    ledger = build_ledger(["text", 3, None, [1, 2]])
    assert ledger.events() == ["text", 3, None, [1, 2]]
    assert all(entry.event_id is None for entry in ledger.entries)


def test_input_mutation_does_not_affect_ledger(sample_events):
    """Test that the ledger holds its own copy of every event."""
    ledger = build_ledger(sample_events)
    before = ledger_to_json(ledger)

    sample_events[0]["value"] = 0
    sample_events[0]["tags"].append("c")
    sample_events.append({"late": True})

    assert ledger_to_json(ledger) == before


def test_document_mutation_does_not_affect_ledger(sample_ledger):
    """Test that to_document() and events() return independent copies."""
    before = ledger_to_json(sample_ledger)

    document = sample_ledger.to_document()
    document["entries"][0]["event"]["value"] = -1
    events = sample_ledger.events()
    events[0]["tags"].clear()

    assert ledger_to_json(sample_ledger) == before


def test_ledger_is_frozen(sample_ledger):
    with pytest.raises(ValidationError):
        sample_ledger.ledger_hash = "0" * 64
    with pytest.raises(ValidationError):
        sample_ledger.entries[0].event = {}


@pytest.mark.parametrize("events", ["abc", {"a": 1}, None, 5])
def test_non_sequence_input_rejected(events):
    """Test that build_ledger only accepts ordered sequences."""
    with pytest.raises(KernelError) as exc_info:
        build_ledger(events)

    assert exc_info.value.code == "INVALID_INPUT"
    assert exc_info.value.stage == "LEDGER"


def test_cyclic_event_rejected():
    """Test that a cyclic event aborts the build."""
    event = {"id": 1}
    event["self"] = event

    with pytest.raises(KernelError) as exc_info:
        build_ledger([{"ok": True}, event])

    assert exc_info.value.code == "INVARIANT_VIOLATION"


def test_unserializable_event_rejected():
    with pytest.raises(KernelError) as exc_info:
        build_ledger([{"value": float("nan")}])

    assert exc_info.value.code == "INVALID_INPUT"


def test_sealed_events_cannot_be_edited_in_place(sample_ledger):
    """Test that stored events are read-only all the way down."""
    entry = sample_ledger.entries[0]

    with pytest.raises(TypeError):
        entry.event["value"] = 0
    with pytest.raises(AttributeError):
        entry.event["tags"].append("c")
    with pytest.raises(TypeError):
        sample_ledger.entries[1].event["meta"]["a"] = False

    assert replay_sequence(sample_ledger).ok


def test_edit_attempt_leaves_ledger_replayable():
    """Test that a failed edit of a sealed event does not break replay."""
    ledger = build_ledger([{"a": 1}])

    with pytest.raises(TypeError):
        ledger.entries[0].event["a"] = 2

    result = replay_sequence(ledger)
    assert result.ok
    assert result.events == [{"a": 1}]
