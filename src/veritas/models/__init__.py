"""Pydantic models for Veritas."""

from .ledger import Ledger, LedgerEntry, LedgerHeader
from .replay import ReplayResult, ReplayState

__all__ = [
    # Ledger
    "Ledger",
    "LedgerEntry",
    "LedgerHeader",
    # Replay
    "ReplayResult",
    "ReplayState",
]
