"""Hash-chained ledger construction.

Each event becomes one entry whose hash covers the event, its position
and the previous entry's hash. The ledger hash then seals the kernel
identity, the entry count and the final chain value.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence

from .digest import hash_value
from .errors import KernelError, Stage
from .identity import get_kernel_identity
from .models.ledger import Ledger, LedgerEntry, LedgerHeader

logger = logging.getLogger(__name__)

# previous_hash of the first entry, and final_entry_hash of an empty ledger.
GENESIS_HASH: Optional[str] = None


def extract_event_id(event: Any) -> Any:
    """Return the event's ``event_id`` field, or None when it has none."""
    if isinstance(event, Mapping):
        return event.get("event_id")
    return None


def compute_event_hash(event: Any) -> str:
    return hash_value(event)


def compute_entry_hash(
    index: int,
    event_id: Any,
    event_hash: str,
    previous_hash: Optional[str],
    event: Any,
) -> str:
    return hash_value(
        {
            "index": index,
            "event_id": event_id,
            "event_hash": event_hash,
            "previous_hash": previous_hash,
            "event": event,
        }
    )


def compute_ledger_hash(entry_count: int, final_entry_hash: Optional[str]) -> str:
    identity = get_kernel_identity()
    return hash_value(
        {
            "kernel_version": identity.kernel_version,
            "spec_version": identity.spec_version,
            "entry_count": entry_count,
            "final_entry_hash": final_entry_hash,
        }
    )


def build_ledger(events: Sequence[Any]) -> Ledger:
    """Build a sealed ledger from an ordered event sequence.

    Events are chained strictly in the order given; nothing is sorted,
    deduplicated or filtered. ``event_id`` values are passed through
    without any uniqueness check.

    Args:
        events: list or tuple of canonicalizable events (may be empty)

    Returns:
        The sealed Ledger

    Raises:
        KernelError: INVALID_INPUT if ``events`` is not a list/tuple or an
            event is not canonicalizable; INVARIANT_VIOLATION if an event
            contains a cycle.
    """
    if not isinstance(events, (list, tuple)):
        raise KernelError.invalid_input(
            "Ledger input must be an ordered sequence of events",
            stage=Stage.LEDGER,
            details={"type": type(events).__name__},
        )

    identity = get_kernel_identity()
    entries: list[LedgerEntry] = []
    previous_hash = GENESIS_HASH

    for index, event in enumerate(events):
        # Hash first: rejects cycles and foreign types before anything is copied.
        event_hash = compute_event_hash(event)
        event_id = extract_event_id(event)
        entry_hash = compute_entry_hash(index, event_id, event_hash, previous_hash, event)

        entries.append(
            LedgerEntry(
                index=index,
                event_id=event_id,
                event_hash=event_hash,
                previous_hash=previous_hash,
                event=event,
                entry_hash=entry_hash,
            )
        )
        previous_hash = entry_hash

    ledger_hash = compute_ledger_hash(len(entries), previous_hash)
    logger.debug(f"Built ledger with {len(entries)} entries: {ledger_hash}")

    return Ledger(
        header=LedgerHeader(**identity.header_fields()),
        entry_count=len(entries),
        entries=tuple(entries),
        ledger_hash=ledger_hash,
    )


__all__ = [
    "GENESIS_HASH",
    "build_ledger",
    "compute_entry_hash",
    "compute_event_hash",
    "compute_ledger_hash",
    "extract_event_id",
]
