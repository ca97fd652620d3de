"""Ledger replay and verification.

Replay re-derives every hash in a sealed ledger and either returns the
original event sequence or reports the first broken invariant. It only
reads: a broken ledger is never repaired, skipped over or partially
returned.
"""

import copy
import logging
from collections.abc import Mapping
from typing import Any, Optional

from .errors import ErrorCode, KernelError, Stage
from .identity import get_kernel_identity
from .ledger import GENESIS_HASH, compute_entry_hash, compute_event_hash, compute_ledger_hash
from .models.ledger import Ledger
from .models.replay import ReplayResult, ReplayState

logger = logging.getLogger(__name__)

_MISSING = object()


def _is_exact_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _found(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class _Replayer:
    """Single-use walker that records which check it is in."""

    def __init__(self) -> None:
        self.state = ReplayState.START
        self.index: Optional[int] = None

    def fail(self, code: ErrorCode, message: str, details: Optional[dict] = None) -> KernelError:
        return KernelError(code, Stage.REPLAY, message, details)

    def run(self, ledger: Any, expected_hash: Optional[str]) -> tuple[list[Any], str]:
        self.state = ReplayState.CHECK_HEADER
        document = _as_document(ledger, ErrorCode.INVALID_INPUT)
        self._check_header(document.get("header"))

        entries = document.get("entries", _MISSING)
        if not isinstance(entries, (list, tuple)):
            raise self.fail(ErrorCode.ENTRIES_NOT_ARRAY, "Ledger entries must be an ordered sequence")

        events: list[Any] = []
        previous_hash = GENESIS_HASH
        for position, entry in enumerate(entries):
            self.index = position
            previous_hash = self._check_entry(position, entry, previous_hash)
            events.append(copy.deepcopy(entry["event"]))
        self.index = None

        self.state = ReplayState.CHECK_LEDGER_HASH
        ledger_hash = self._check_ledger_hash(document, len(entries), previous_hash)
        if expected_hash is not None and expected_hash != ledger_hash:
            raise KernelError(
                ErrorCode.VERIFICATION_FAILED,
                Stage.VERIFY,
                "Ledger hash does not match expected hash",
                {"expected": expected_hash, "found": ledger_hash},
            )

        self.state = ReplayState.DONE
        return events, ledger_hash

    def _check_header(self, header: Any) -> None:
        if not isinstance(header, Mapping):
            raise self.fail(ErrorCode.HEADER_MISSING, "Ledger header is missing or malformed")
        for field, expected in get_kernel_identity().header_fields().items():
            actual = header.get(field, _MISSING)
            if not isinstance(actual, str) or actual != expected:
                raise self.fail(
                    ErrorCode.HEADER_VERSION_MISMATCH,
                    "Ledger header does not match the running kernel identity",
                    {"field": field, "expected": expected, "found": _found(actual)},
                )

    def _check_entry(self, position: int, entry: Any, previous_hash: Optional[str]) -> str:
        self.state = ReplayState.CHECK_INDEX
        if not isinstance(entry, Mapping) or "event" not in entry:
            raise self.fail(ErrorCode.ENTRY_INVALID, "Ledger entry is malformed", {"index": position})

        index = entry.get("index", _MISSING)
        if not _is_exact_int(index) or index != position:
            raise self.fail(
                ErrorCode.INDEX_MISMATCH,
                "Entry index does not match its position",
                {"index": position, "found": index if _is_exact_int(index) else None},
            )

        self.state = ReplayState.CHECK_CHAIN
        stored_previous = entry.get("previous_hash", _MISSING)
        if stored_previous is _MISSING or stored_previous != previous_hash:
            raise self.fail(
                ErrorCode.CHAIN_BROKEN,
                "Entry does not link to the previous entry",
                {"index": position, "expected": previous_hash, "found": _found(stored_previous)},
            )

        self.state = ReplayState.CHECK_EVENT_HASH
        event = entry["event"]
        stored_event_hash = entry.get("event_hash")
        computed_event_hash = compute_event_hash(event)
        if computed_event_hash != stored_event_hash:
            raise self.fail(
                ErrorCode.EVENT_HASH_MISMATCH,
                "Event hash does not match the recorded event",
                {"index": position, "expected": computed_event_hash, "found": _found(stored_event_hash)},
            )

        self.state = ReplayState.CHECK_ENTRY_HASH
        stored_entry_hash = entry.get("entry_hash")
        computed_entry_hash = compute_entry_hash(
            index, entry.get("event_id"), stored_event_hash, stored_previous, event
        )
        if computed_entry_hash != stored_entry_hash:
            raise self.fail(
                ErrorCode.ENTRY_HASH_MISMATCH,
                "Entry hash does not match the recorded entry",
                {"index": position, "expected": computed_entry_hash, "found": _found(stored_entry_hash)},
            )

        self.state = ReplayState.ADVANCE
        return stored_entry_hash

    def _check_ledger_hash(self, document: Mapping, count: int, final_entry_hash: Optional[str]) -> str:
        ledger_hash = document.get("ledger_hash")
        if not isinstance(ledger_hash, str) or not ledger_hash:
            raise self.fail(ErrorCode.LEDGER_HASH_MISSING, "Ledger does not contain a ledger_hash")

        entry_count = document.get("entry_count", _MISSING)
        if not _is_exact_int(entry_count) or entry_count != count:
            raise self.fail(
                ErrorCode.ENTRY_COUNT_MISMATCH,
                "entry_count does not match the number of entries",
                {"expected": count, "found": entry_count if _is_exact_int(entry_count) else None},
            )

        computed = compute_ledger_hash(count, final_entry_hash)
        if computed != ledger_hash:
            raise self.fail(
                ErrorCode.LEDGER_HASH_MISMATCH,
                "ledger_hash does not match the sealed chain",
                {"expected": computed, "found": ledger_hash},
            )
        return ledger_hash


def _as_document(ledger: Any, code: ErrorCode) -> Mapping:
    if isinstance(ledger, Ledger):
        return ledger.to_document()
    if isinstance(ledger, Mapping):
        return ledger
    raise KernelError(
        code,
        Stage.REPLAY,
        "Ledger must be a ledger document",
        {"type": type(ledger).__name__},
    )


def replay_sequence(ledger: Any, expected_hash: Optional[str] = None) -> ReplayResult:
    """Replay a ledger, re-deriving every hash.

    Args:
        ledger: a Ledger model or a ledger document mapping
        expected_hash: optional independently stored digest; when given
            it must equal the ledger's ``ledger_hash``

    Returns:
        ReplayResult with the reconstructed events and verified ledger
        hash, or with the first failure's payload.
    """
    replayer = _Replayer()
    try:
        events, ledger_hash = replayer.run(ledger, expected_hash)
    except KernelError as exc:
        logger.info(f"Replay failed in {replayer.state.value}: {exc}")
        return ReplayResult.failure(exc.payload, replayer.state, replayer.index)

    logger.debug(f"Replay verified {len(events)} entries: {ledger_hash}")
    return ReplayResult.success(events, ledger_hash)


def verify_ledger(ledger: Any, expected_hash: str) -> ReplayResult:
    """Compare a ledger's digest with an expected one, then replay it.

    The digest comparison runs before the chain replay; both must pass.
    """
    state = ReplayState.START
    try:
        if not isinstance(expected_hash, str) or not expected_hash:
            raise KernelError.invalid_input(
                "Expected hash must be a non-empty string",
                stage=Stage.VERIFY,
            )
        document = _as_document(ledger, ErrorCode.LEDGER_INVALID)

        state = ReplayState.CHECK_LEDGER_HASH
        ledger_hash = document.get("ledger_hash")
        if not isinstance(ledger_hash, str) or not ledger_hash:
            raise KernelError(
                ErrorCode.LEDGER_HASH_MISSING,
                Stage.VERIFY,
                "Ledger does not contain a ledger_hash",
            )
        if ledger_hash != expected_hash:
            raise KernelError(
                ErrorCode.VERIFICATION_FAILED,
                Stage.VERIFY,
                "Ledger hash does not match expected hash",
                {"expected": expected_hash, "found": ledger_hash},
            )
    except KernelError as exc:
        logger.info(f"Verification failed: {exc}")
        return ReplayResult.failure(exc.payload, state)

    return replay_sequence(document, expected_hash=expected_hash)


__all__ = ["replay_sequence", "verify_ledger"]
