"""Pydantic models for sealed ledgers."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ..frozen import freeze, thaw


class LedgerHeader(BaseModel):
    """Identity tag of the kernel that sealed a ledger (not content)."""

    kernel_version: str = Field(description="Kernel release that built the ledger")
    spec_version: str = Field(description="Ledger format version")
    hash_algorithm: str = Field(description="Digest algorithm used for every hash")

    model_config = {"frozen": True}


class LedgerEntry(BaseModel):
    """One position in the hash chain.

    ``previous_hash`` is None only for index 0. ``event`` and ``event_id``
    are held as read-only copies (mappings and tuples).
    """

    index: int = Field(ge=0, description="0-based position in the ledger")
    event_id: Optional[Any] = Field(default=None, description="event_id copied from the event, if any")
    event_hash: str = Field(description="Digest of the canonical event")
    previous_hash: Optional[str] = Field(default=None, description="entry_hash of the previous entry")
    event: Any = Field(description="The event, held verbatim")
    entry_hash: str = Field(description="Digest of the canonical entry tuple")

    model_config = {"frozen": True}

    @field_validator("event", "event_id", mode="before")
    @classmethod
    def _freeze_value(cls, value: Any) -> Any:
        return freeze(value)


class Ledger(BaseModel):
    """Sealed, append-only ledger.

    Built once by ``veritas.ledger.build_ledger`` and never mutated.
    A changed ledger is a new ledger.
    """

    header: LedgerHeader
    entry_count: int = Field(ge=0, description="Number of entries")
    entries: tuple[LedgerEntry, ...] = Field(default_factory=tuple)
    ledger_hash: str = Field(description="Digest over identity, count and final entry hash")

    model_config = {"frozen": True}

    @property
    def final_entry_hash(self) -> Optional[str]:
        return self.entries[-1].entry_hash if self.entries else None

    def events(self) -> list[Any]:
        """Independent copies of the sealed events, in order."""
        return [thaw(entry.event) for entry in self.entries]

    def to_document(self) -> dict[str, Any]:
        """Plain-data document form of the ledger.

        The returned structure shares nothing with this model, so callers
        may edit it freely.
        """
        return {
            "header": {
                "kernel_version": self.header.kernel_version,
                "spec_version": self.header.spec_version,
                "hash_algorithm": self.header.hash_algorithm,
            },
            "entry_count": self.entry_count,
            "entries": [
                {
                    "index": entry.index,
                    "event_id": thaw(entry.event_id),
                    "event_hash": entry.event_hash,
                    "previous_hash": entry.previous_hash,
                    "event": thaw(entry.event),
                    "entry_hash": entry.entry_hash,
                }
                for entry in self.entries
            ],
            "ledger_hash": self.ledger_hash,
        }
