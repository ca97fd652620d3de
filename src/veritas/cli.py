"""Typer-based CLI for Veritas."""

import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .canonical import canonical_json
from .config import VeritasConfig
from .documents import (
    load_atoms,
    load_ledger_document,
    read_expected_hash,
    write_expected_hash,
    write_ledger_document,
)
from .errors import ErrorCode, KernelError, Stage
from .identity import get_kernel_identity
from .ledger import build_ledger
from .models.replay import ReplayResult
from .replay import replay_sequence, verify_ledger

app = typer.Typer(
    name="veritas",
    help="Veritas - deterministic hash-chained event ledger",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _configure_logging(config: VeritasConfig) -> None:
    logging.basicConfig(
        level=config.logging_level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _print_plain(target: Console, text: str) -> None:
    """Print machine-readable text without markup, highlighting or wrapping."""
    target.print(text, markup=False, highlight=False, soft_wrap=True)


def _fail(error: KernelError) -> None:
    _print_plain(err_console, error.format())
    raise typer.Exit(code=1)


def _require_ok(result: ReplayResult) -> list[Any]:
    if not result.ok:
        _fail(KernelError.from_payload(result.error))
    return result.events


def _check_atoms(events: list[Any], atoms: list[Any]) -> None:
    """The replayed events must equal the atoms file canonically."""
    if canonical_json(events) != canonical_json(atoms):
        raise KernelError(
            ErrorCode.ATOMS_MISMATCH,
            Stage.REPLAY,
            "Replayed events do not match the atoms file",
            {"replayed_count": len(events), "atoms_count": len(atoms)},
        )


def _get_config(ctx: typer.Context) -> VeritasConfig:
    if isinstance(ctx.obj, VeritasConfig):
        return ctx.obj
    return VeritasConfig()


@app.callback()
def configure(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: .veritas/config.toml, VERITAS_LOG_LEVEL env or WARNING)",
    ),
):
    """Build, replay and verify hash-chained event ledgers."""
    try:
        config = VeritasConfig.from_env(cli_log_level=log_level)
    except ValueError as e:
        err_console.print(f"[red]Error: invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    _configure_logging(config)
    logger.debug(f"Resolved configuration: {config}")
    ctx.obj = config


@app.command()
def build(
    ctx: typer.Context,
    atoms: Path = typer.Option(..., "--atoms", help="JSON array of events to seal"),
    out: Path = typer.Option(..., "--out", help="Where to write the ledger document"),
    hash_out: Optional[Path] = typer.Option(
        None,
        "--hash-out",
        help="Also write the ledger hash to this file, for later verification",
    ),
):
    """Build a ledger from an atoms file and print its ledger hash."""
    config = _get_config(ctx)
    try:
        events = load_atoms(atoms)
        ledger = build_ledger(events)
        write_ledger_document(ledger, out, indent=config.document_indent)
        if hash_out is not None:
            write_expected_hash(ledger.ledger_hash, hash_out)
    except KernelError as e:
        _fail(e)

    _print_plain(console, ledger.ledger_hash)


@app.command()
def replay(
    ledger: Path = typer.Option(..., "--ledger", help="Ledger document to replay"),
    atoms: Path = typer.Option(..., "--atoms", help="Atoms file the ledger was built from"),
):
    """Replay a ledger and check it reproduces the atoms file.

    Every hash in the chain is recomputed; the first broken invariant is
    printed as an error payload and the command exits with status 1.
    """
    try:
        document = load_ledger_document(ledger)
        expected_events = load_atoms(atoms)
        events = _require_ok(replay_sequence(document))
        _check_atoms(events, expected_events)
    except KernelError as e:
        _fail(e)

    console.print("REPLAY VERIFIED", markup=False)


@app.command()
def verify(
    ledger: Path = typer.Option(..., "--ledger", help="Ledger document to verify"),
    atoms: Path = typer.Option(..., "--atoms", help="Atoms file the ledger was built from"),
    expected_hash: Path = typer.Option(
        ...,
        "--expected-hash",
        help="File holding the independently stored ledger hash",
    ),
):
    """Verify a ledger against an expected ledger hash, then replay it."""
    try:
        document = load_ledger_document(ledger)
        expected = read_expected_hash(expected_hash)
        expected_events = load_atoms(atoms)
        events = _require_ok(verify_ledger(document, expected))
        _check_atoms(events, expected_events)
    except KernelError as e:
        _fail(e)

    console.print("VERIFICATION PASSED", markup=False)


@app.command()
def inspect(
    ledger: Path = typer.Option(..., "--ledger", help="Ledger document to inspect"),
):
    """Show the entries of a verified ledger."""
    try:
        document = load_ledger_document(ledger)
        result = replay_sequence(document)
        _require_ok(result)
    except KernelError as e:
        _fail(e)

    entries = document["entries"]
    table = Table(title=f"Ledger {result.ledger_hash[:12]}... ({len(entries)} entries)")
    table.add_column("Index", style="cyan", no_wrap=True)
    table.add_column("Event ID", style="magenta")
    table.add_column("Event Hash", style="yellow")
    table.add_column("Entry Hash", style="dim")

    for entry in entries:
        event_id = entry.get("event_id")
        table.add_row(
            str(entry["index"]),
            Text("-" if event_id is None else str(event_id)),
            entry["event_hash"][:12] + "...",
            entry["entry_hash"][:12] + "...",
        )

    console.print(table)


@app.command()
def version():
    """Show Veritas and kernel versions."""
    from . import __version__

    identity = get_kernel_identity()
    console.print(f"Veritas v{__version__}")
    console.print(f"  [dim]Kernel version:[/dim] {identity.kernel_version}")
    console.print(f"  [dim]Spec version:[/dim]   {identity.spec_version}")
    console.print(f"  [dim]Hash algorithm:[/dim] {identity.hash_algorithm}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
