"""``ccflow list`` and ``ccflow list-blueprints``."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ccflow.cli.context import get_context
from ccflow.core.blueprints import BlueprintError
from ccflow.core.workspace import MULTI_REPO_MARKER, SINGLE_REPO_MARKER

console = Console()


def list_cmd(ctx: typer.Context) -> None:
    """List workflows recorded in the global registry."""
    cli = get_context(ctx)
    try:
        entries = cli.registry().entries()
    except (OSError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    if not entries:
        console.print("[dim]No workflows registered. Run 'ccflow run' to create one.[/dim]")
        return

    table = Table(title="Workflows")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Blueprint", style="green", no_wrap=True)
    table.add_column("Last used", no_wrap=True)
    table.add_column("Path", overflow="fold")

    for entry in sorted(entries, key=lambda e: e.last_used_at, reverse=True):
        path = escape(entry.path)
        if not _has_marker(Path(entry.path)):
            path = f"{path} [red](missing)[/red]"
        table.add_row(
            escape(entry.name),
            escape(entry.blueprint),
            entry.last_used_at.strftime("%Y-%m-%d %H:%M"),
            path,
        )
    console.print(table)


def _has_marker(root: Path) -> bool:
    return (root / MULTI_REPO_MARKER).is_file() or (root / SINGLE_REPO_MARKER).is_file()


def list_blueprints_cmd(ctx: typer.Context) -> None:
    """List the blueprints bundled with ccflow."""
    cli = get_context(ctx)
    try:
        blueprints = cli.blueprints().list()
    except BlueprintError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    table = Table(title="Blueprints")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Topology")
    table.add_column("Agents", justify="right")
    table.add_column("Commands", justify="right")
    table.add_column("Hooks", justify="right")

    for blueprint in blueprints:
        table.add_row(
            blueprint.id,
            escape(blueprint.display_name),
            blueprint.default_topology,
            str(len(blueprint.agents.defaults)),
            str(len(blueprint.commands.defaults)),
            str(len(blueprint.hooks.defaults)),
        )
    console.print(table)
