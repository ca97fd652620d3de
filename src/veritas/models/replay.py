"""Pydantic models for replay outcomes."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..errors import KernelError, KernelErrorPayload


class ReplayState(str, Enum):
    """States of the replay state machine.

    DONE and FAILED are terminal; there is no retry state.
    """

    START = "START"
    CHECK_HEADER = "CHECK_HEADER"
    CHECK_INDEX = "CHECK_INDEX"
    CHECK_CHAIN = "CHECK_CHAIN"
    CHECK_EVENT_HASH = "CHECK_EVENT_HASH"
    CHECK_ENTRY_HASH = "CHECK_ENTRY_HASH"
    ADVANCE = "ADVANCE"
    CHECK_LEDGER_HASH = "CHECK_LEDGER_HASH"
    DONE = "DONE"
    FAILED = "FAILED"


class ReplayResult(BaseModel):
    """Outcome of replaying a ledger.

    Exactly one of ``events`` (on success) or ``error`` (on failure) is
    set. Callers branch on ``ok`` / ``error.code`` instead of catching.
    """

    ok: bool
    state: ReplayState
    events: Optional[list[Any]] = Field(default=None, description="Reconstructed events on success")
    ledger_hash: Optional[str] = Field(default=None, description="Verified terminal digest on success")
    error: Optional[KernelErrorPayload] = Field(default=None, description="First failure, if any")
    failed_index: Optional[int] = Field(default=None, description="Entry index the failure was found at")
    failed_state: Optional[ReplayState] = Field(default=None, description="Check that failed")

    model_config = {"frozen": True}

    @classmethod
    def success(cls, events: list[Any], ledger_hash: str) -> "ReplayResult":
        return cls(ok=True, state=ReplayState.DONE, events=events, ledger_hash=ledger_hash)

    @classmethod
    def failure(
        cls,
        error: KernelErrorPayload,
        failed_state: ReplayState,
        failed_index: Optional[int] = None,
    ) -> "ReplayResult":
        return cls(
            ok=False,
            state=ReplayState.FAILED,
            error=error,
            failed_index=failed_index,
            failed_state=failed_state,
        )

    def unwrap(self) -> list[Any]:
        """Return the events, or raise the failure as a KernelError."""
        if not self.ok:
            raise KernelError.from_payload(self.error)
        return self.events
