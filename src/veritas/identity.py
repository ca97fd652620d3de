"""Kernel identity: the versioned constants every ledger is sealed against.

These values participate in ledger headers and in the ledger hash. They
are embedded in code and never read from the environment or from
configuration files. Changing any of them invalidates every ledger
sealed by an earlier kernel.
"""

from functools import lru_cache

from pydantic import BaseModel, Field


class KernelIdentity(BaseModel):
    """Version/algorithm identity of the running kernel."""

    kernel_version: str = Field(default="1.0.0", description="Kernel release identity")
    spec_version: str = Field(default="1.0.0", description="Ledger format identity")
    hash_algorithm: str = Field(default="sha256", description="hashlib algorithm name")
    canonical_encoding: str = Field(default="utf-8", description="Encoding of canonical bytes")

    model_config = {"frozen": True}

    def header_fields(self) -> dict[str, str]:
        """Fields written into (and checked against) a ledger header."""
        return {
            "kernel_version": self.kernel_version,
            "spec_version": self.spec_version,
            "hash_algorithm": self.hash_algorithm,
        }


@lru_cache(maxsize=1)
def get_kernel_identity() -> KernelIdentity:
    """Return the process-wide kernel identity (built once)."""
    return KernelIdentity()
