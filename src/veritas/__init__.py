"""Veritas - deterministic hash-chained event ledger.

Seal an ordered event sequence into a ledger, then replay it to get the
exact same sequence back or a deterministic error payload naming the
first broken invariant.
"""

from .canonical import canonical_bytes, canonical_json
from .digest import digest_bytes, digest_text, hash_value
from .errors import ErrorCode, KernelError, KernelErrorPayload, Stage
from .identity import KernelIdentity, get_kernel_identity
from .ledger import build_ledger
from .models import Ledger, LedgerEntry, LedgerHeader, ReplayResult, ReplayState
from .replay import replay_sequence, verify_ledger

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "KernelError",
    "KernelErrorPayload",
    "KernelIdentity",
    "Ledger",
    "LedgerEntry",
    "LedgerHeader",
    "ReplayResult",
    "ReplayState",
    "Stage",
    "build_ledger",
    "canonical_bytes",
    "canonical_json",
    "digest_bytes",
    "digest_text",
    "get_kernel_identity",
    "hash_value",
    "replay_sequence",
    "verify_ledger",
]
