"""Reading and writing ledger artifacts on disk.

Three artifacts cross the filesystem boundary: the ledger document, the
atoms file the ledger was built from, and the expected-digest file that
holds a ledger hash out of band.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .errors import KernelError, Stage
from .models.ledger import Ledger

logger = logging.getLogger(__name__)

DEFAULT_INDENT = 2


def load_json_document(path: Path, stage: Stage = Stage.INGEST) -> Any:
    """Read and parse one JSON file.

    Raises:
        KernelError: IO_FAILURE when the file cannot be read,
            INVALID_INPUT when it is not UTF-8 or not valid JSON.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise KernelError.invalid_input(
            "Input file is not valid UTF-8",
            stage=stage,
            details={"path": str(path), "position": exc.start},
        ) from exc
    except OSError as exc:
        raise KernelError.io_failure(
            "Unable to read input file",
            details={"path": str(path), "reason": exc.__class__.__name__},
            stage=stage,
        ) from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise KernelError.invalid_input(
            "Input file is not valid JSON",
            stage=stage,
            details={"path": str(path), "line": exc.lineno, "column": exc.colno},
        ) from exc
    except ValueError as exc:
        # Integer literals past the interpreter's digit limit
        raise KernelError.invalid_input(
            "Input file contains a value that cannot be parsed",
            stage=stage,
            details={"path": str(path)},
        ) from exc


def load_ledger_document(path: Path) -> Any:
    """Load a ledger document; its shape is checked by replay, not here."""
    document = load_json_document(path, Stage.REPLAY)
    logger.debug(f"Loaded ledger document from {path}")
    return document


def load_atoms(path: Path) -> list[Any]:
    """Load an atoms file, which must hold a JSON array of events."""
    atoms = load_json_document(path, Stage.INGEST)
    if not isinstance(atoms, list):
        raise KernelError.invalid_input(
            "Atoms file must contain a JSON array",
            stage=Stage.INGEST,
            details={"path": str(path), "type": type(atoms).__name__},
        )
    logger.debug(f"Loaded {len(atoms)} atoms from {path}")
    return atoms


def read_expected_hash(path: Path) -> str:
    path = Path(path)
    try:
        value = path.read_text(encoding="utf-8").strip()
    except UnicodeDecodeError as exc:
        raise KernelError.invalid_input(
            "Expected hash file is not valid UTF-8",
            stage=Stage.VERIFY,
            details={"path": str(path), "position": exc.start},
        ) from exc
    except OSError as exc:
        raise KernelError.io_failure(
            "Unable to read expected hash file",
            details={"path": str(path), "reason": exc.__class__.__name__},
            stage=Stage.VERIFY,
        ) from exc

    if not value:
        raise KernelError.invalid_input(
            "Expected hash file is empty",
            stage=Stage.VERIFY,
            details={"path": str(path)},
        )
    return value


def ledger_to_json(ledger: Ledger, indent: int = DEFAULT_INDENT) -> str:
    """Deterministic text form of a ledger document.

    Keys keep model order; the same ledger always renders to the same text.
    """
    return json.dumps(ledger.to_document(), indent=indent, ensure_ascii=False) + "\n"


def _write_text(path: Path, text: str, stage: Stage) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise KernelError.io_failure(
            "Unable to write output file",
            details={"path": str(path), "reason": exc.__class__.__name__},
            stage=stage,
        ) from exc
    return path


def write_ledger_document(ledger: Ledger, path: Path, indent: int = DEFAULT_INDENT) -> Path:
    written = _write_text(path, ledger_to_json(ledger, indent=indent), Stage.LEDGER)
    logger.info(f"Wrote ledger with {ledger.entry_count} entries to {written}")
    return written


def write_expected_hash(ledger_hash: str, path: Path) -> Path:
    if not isinstance(ledger_hash, str) or not ledger_hash.strip():
        raise KernelError.invalid_input("Ledger hash must be a non-empty string", stage=Stage.VERIFY)
    written = _write_text(path, ledger_hash.strip() + "\n", Stage.VERIFY)
    logger.info(f"Wrote expected hash to {written}")
    return written


__all__ = [
    "DEFAULT_INDENT",
    "ledger_to_json",
    "load_atoms",
    "load_json_document",
    "load_ledger_document",
    "read_expected_hash",
    "write_expected_hash",
    "write_ledger_document",
]
