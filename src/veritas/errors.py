"""Canonical error payloads for the Veritas kernel.

Every failure the kernel detects is described by one immutable
``KernelErrorPayload``. Payloads carry no timestamps, stack frames or
environment-derived fields, so two runs that fail the same way produce
identical payloads.
"""

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .frozen import freeze, thaw

KERNEL_ERROR_TYPE = "VERITAS_KERNEL_ERROR"
KERNEL_ERROR_VERSION = "1.0"


class ErrorCode(str, Enum):
    """Stable error codes surfaced by the kernel."""

    INVALID_INPUT = "INVALID_INPUT"
    IO_FAILURE = "IO_FAILURE"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    LEDGER_INVALID = "LEDGER_INVALID"
    HEADER_MISSING = "HEADER_MISSING"
    HEADER_VERSION_MISMATCH = "HEADER_VERSION_MISMATCH"
    ENTRIES_NOT_ARRAY = "ENTRIES_NOT_ARRAY"
    ENTRY_INVALID = "ENTRY_INVALID"
    INDEX_MISMATCH = "INDEX_MISMATCH"
    CHAIN_BROKEN = "CHAIN_BROKEN"
    EVENT_HASH_MISMATCH = "EVENT_HASH_MISMATCH"
    ENTRY_HASH_MISMATCH = "ENTRY_HASH_MISMATCH"
    ENTRY_COUNT_MISMATCH = "ENTRY_COUNT_MISMATCH"
    LEDGER_HASH_MISSING = "LEDGER_HASH_MISSING"
    LEDGER_HASH_MISMATCH = "LEDGER_HASH_MISMATCH"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    ATOMS_MISMATCH = "ATOMS_MISMATCH"


class Stage(str, Enum):
    """Pipeline stage an error was raised from."""

    INGEST = "INGEST"
    CANONICAL = "CANONICAL"
    DIGEST = "DIGEST"
    LEDGER = "LEDGER"
    REPLAY = "REPLAY"
    VERIFY = "VERIFY"
    CLI = "CLI"


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class KernelErrorPayload(BaseModel):
    """Deterministic, immutable description of a kernel failure.

    ``code``, ``stage`` and ``message`` are required and must be
    non-empty; a payload missing any of them is itself a broken
    invariant, so construction fails rather than defaulting.
    """

    type: Literal["VERITAS_KERNEL_ERROR"] = Field(default=KERNEL_ERROR_TYPE)
    version: Literal["1.0"] = Field(default=KERNEL_ERROR_VERSION)
    code: str = Field(min_length=1, description="Stable error code (see ErrorCode)")
    stage: str = Field(min_length=1, description="Stage that detected the failure")
    message: str = Field(min_length=1, description="Static human-readable message")
    details: Optional[Mapping[str, Any]] = Field(default=None, description="Deterministic context, read-only")

    model_config = {"frozen": True}

    @field_validator("code", "stage", mode="before")
    @classmethod
    def _unwrap_enum(cls, value: Any) -> Any:
        return _plain(value)

    @field_validator("details", mode="before")
    @classmethod
    def _copy_details(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return thaw(value)
        return value

    @field_validator("details")
    @classmethod
    def _freeze_details(cls, value: Optional[dict[str, Any]]) -> Optional[Mapping[str, Any]]:
        if value is None:
            return None
        return freeze(value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "version": self.version,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "details": thaw(self.details),
        }


class KernelError(Exception):
    """Exception shell around a ``KernelErrorPayload``.

    The payload is the contract; the exception only moves it across
    call boundaries.
    """

    def __init__(
        self,
        code: ErrorCode | str,
        stage: Stage | str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.payload = KernelErrorPayload(code=code, stage=stage, message=message, details=details)
        super().__init__(f"[{self.payload.code}] {self.payload.message}")

    @property
    def code(self) -> str:
        return self.payload.code

    @property
    def stage(self) -> str:
        return self.payload.stage

    def format(self) -> str:
        """Render the payload as indented JSON for diagnostic output."""
        return json.dumps(self.payload.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_payload(cls, payload: KernelErrorPayload) -> "KernelError":
        return cls(payload.code, payload.stage, payload.message, payload.details)

    # Category constructors keep ad-hoc codes out of the kernel.

    @classmethod
    def io_failure(
        cls,
        message: str,
        details: Optional[dict[str, Any]] = None,
        stage: Stage | str = Stage.INGEST,
    ) -> "KernelError":
        return cls(ErrorCode.IO_FAILURE, stage, message, details)

    @classmethod
    def invalid_input(
        cls,
        message: str,
        stage: Stage | str = Stage.INGEST,
        details: Optional[dict[str, Any]] = None,
    ) -> "KernelError":
        return cls(ErrorCode.INVALID_INPUT, stage, message, details)

    @classmethod
    def invariant_violation(
        cls,
        message: str,
        stage: Stage | str,
        details: Optional[dict[str, Any]] = None,
    ) -> "KernelError":
        return cls(ErrorCode.INVARIANT_VIOLATION, stage, message, details)


__all__ = [
    "ErrorCode",
    "KERNEL_ERROR_TYPE",
    "KERNEL_ERROR_VERSION",
    "KernelError",
    "KernelErrorPayload",
    "Stage",
]
