"""CLI entry point for branching-undo.

Invoked as::

    undo-tree [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m branching_undo.cli.main

Commands
--------
- init      Write a default ``undo.yaml`` configuration
- sessions  List structural session records in a file store
- inspect   Show one session's structural record
- version   Show version information
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from branching_undo.config.config_loader import UndoConfig
    from branching_undo.persistence.session_store import FileSessionStore

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("undo.yaml")


def _load_config(config_path: str) -> "UndoConfig":
    from branching_undo.config.config_loader import ConfigLoader

    loader = ConfigLoader()
    cfg_path = Path(config_path)
    return loader.load(cfg_path) if cfg_path.exists() else loader.defaults()


def _file_store(config_path: str, directory: str | None) -> tuple["UndoConfig", "FileSessionStore"]:
    from branching_undo.persistence.session_store import FileSessionStore

    config = _load_config(config_path)
    store_dir = Path(directory) if directory else config.persistence.directory
    return config, FileSessionStore(store_dir)


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="branching-undo")
def cli() -> None:
    """Branching undo CLI: configuration and session record diagnostics."""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from branching_undo import __version__

    console.print(
        Panel(
            f"[bold]branching-undo[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Tree-structured undo/redo engine for interactive editors.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=str(_DEFAULT_CONFIG),
    show_default=True,
    help="Output config file path.",
)
@click.option("--max-nodes", default=100, show_default=True, type=click.IntRange(min=1), help="Pruning ceiling.")
@click.option(
    "--backend",
    type=click.Choice(["memory", "file", "none"]),
    default="file",
    show_default=True,
    help="Session store backend.",
)
def init_command(output: str, max_nodes: int, backend: str) -> None:
    """Write a default undo engine configuration file."""
    output_path = Path(output)
    config: dict[str, object] = {
        "version": "1",
        "session_id": None,
        "history": {"max_nodes": max_nodes},
        "persistence": {
            "enabled": backend != "none",
            "backend": backend,
            "directory": "./.undo_sessions",
            "key_prefix": "branching-undo",
        },
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        yaml.dump(config, fh, default_flow_style=False, sort_keys=False, allow_unicode=True)

    console.print(f"[green]Initialised[/green] undo config: [bold]{output_path}[/bold]")
    console.print(f"  Max nodes: [cyan]{max_nodes}[/cyan]")
    console.print(f"  Backend: [cyan]{backend}[/cyan]")


# ---------------------------------------------------------------------------
# sessions
# ---------------------------------------------------------------------------


@cli.command(name="sessions")
@click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    type=click.Path(),
    help="Path to undo.yaml.",
)
@click.option("--directory", "-d", default=None, type=click.Path(), help="Override the store directory.")
def sessions_command(config_path: str, directory: str | None) -> None:
    """List structural session records in the file store."""
    from branching_undo.errors import PersistenceError
    from branching_undo.persistence.record import StructuralRecord

    config, store = _file_store(config_path, directory)
    keys = store.keys()
    if not keys:
        console.print(f"[yellow]No session records found in {store.directory}.[/yellow]")
        return

    table = Table(title="Undo Session Records", box=box.SIMPLE)
    table.add_column("Session", style="cyan")
    table.add_column("Saved", style="dim", no_wrap=True)
    table.add_column("Nodes", justify="right")
    table.add_column("Checkpoints", justify="right")
    table.add_column("Current", style="magenta")

    for key in keys:
        try:
            data = store.read(key)
            if data is None:
                continue
            record = StructuralRecord.from_bytes(data)
        except PersistenceError as exc:
            err_console.print(f"[yellow]Warning:[/yellow] Skipping '{key}': {exc}")
            continue
        table.add_row(
            record.session_id,
            record.saved_at.isoformat()[:19].replace("T", " "),
            str(record.node_count),
            str(len(record.checkpoint_ids)),
            record.current_id or "-",
        )

    console.print(table)
    console.print(f"  Store: [cyan]{store.directory}[/cyan]  prefix: [cyan]{config.persistence.key_prefix}[/cyan]")


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@cli.command(name="inspect")
@click.argument("session_id")
@click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    type=click.Path(),
    help="Path to undo.yaml.",
)
@click.option("--directory", "-d", default=None, type=click.Path(), help="Override the store directory.")
def inspect_command(session_id: str, config_path: str, directory: str | None) -> None:
    """Show the structural record stored for SESSION_ID."""
    from branching_undo.errors import PersistenceError
    from branching_undo.persistence.record import StructuralRecord
    from branching_undo.persistence.session_store import record_key

    config, store = _file_store(config_path, directory)
    key = record_key(config.persistence.key_prefix, session_id)
    try:
        data = store.read(key)
        record = StructuralRecord.from_bytes(data) if data is not None else None
    except PersistenceError as exc:
        err_console.print(f"[red]Unreadable record:[/red] {exc}")
        sys.exit(1)

    if record is None:
        err_console.print(f"[red]No record for session[/red] {session_id} in {store.directory}")
        sys.exit(1)

    body = (
        f"Session: [cyan]{record.session_id}[/cyan]\n"
        f"Saved: {record.saved_at.isoformat()}\n"
        f"Root: [magenta]{record.root_id or '-'}[/magenta]\n"
        f"Current: [magenta]{record.current_id or '-'}[/magenta]\n"
        f"Nodes: {record.node_count}   Checkpoints: {len(record.checkpoint_ids)}\n"
        "[dim]Structure only; recorded actions cannot be replayed.[/dim]"
    )
    console.print(Panel(body, title="Undo Session Record", border_style="blue"))

    table = Table(title="Nodes", box=box.SIMPLE)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Node", style="cyan")
    table.add_column("Flags")
    checkpoints = set(record.checkpoint_ids)
    for index, node_id in enumerate(record.node_ids, start=1):
        flags: list[str] = []
        if node_id == record.root_id:
            flags.append("root")
        if node_id == record.current_id:
            flags.append("current")
        if node_id in checkpoints:
            flags.append("checkpoint")
        table.add_row(str(index), node_id, ", ".join(flags))
    console.print(table)


if __name__ == "__main__":
    cli()
