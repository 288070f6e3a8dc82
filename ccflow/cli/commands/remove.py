"""``ccflow remove [NAME]`` — delete a workflow and its registry entry.

Without NAME the workflow is discovered from the current directory (or
``--workspace``); with NAME it is looked up in the registry, so it can be
removed from anywhere.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ccflow.cli.context import CliContext, get_context
from ccflow.core.removal import RemovalItem, RemovalOutcome, execute_removal, plan_removal
from ccflow.core.workspace import (
    Workspace,
    WorkflowConfigError,
    WorkspaceNotFoundError,
    load_workspace,
)

console = Console()
logger = logging.getLogger(__name__)


def remove_cmd(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(
        None,
        help="Registered workflow name. Defaults to the workflow in the current directory.",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed."),
    keep_docs: bool = typer.Option(False, "--keep-docs", help="Keep the workflow state directory."),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
) -> None:
    """Remove the hub, ccflow files and registry entry of a workflow."""
    cli = get_context(ctx)
    try:
        workspace = _resolve(cli, name)
    except (WorkspaceNotFoundError, WorkflowConfigError, OSError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    items = plan_removal(workspace, keep_docs=keep_docs)
    _print_plan(workspace, items)

    if dry_run:
        console.print()
        console.print("[dim]This was a dry run. No files were modified.[/dim]")
        return

    if not force and not typer.confirm(f"Remove workflow '{workspace.config.name}'?", default=False):
        console.print("Removal cancelled.")
        return

    outcomes = execute_removal(items)
    unregistered = _unregister(cli, str(workspace.root))
    _print_outcomes(workspace, outcomes, unregistered)

    if not all(outcome.ok for outcome in outcomes):
        raise typer.Exit(code=1)


def _resolve(cli: CliContext, name: str | None) -> Workspace:
    if name is None:
        return cli.discover()
    entry = cli.registry().find_by_name(name)
    if entry is None:
        raise WorkspaceNotFoundError(
            f"workflow '{name}' not found in registry. Run 'ccflow list' to see registered workflows"
        )
    return load_workspace(Path(entry.path))


def _unregister(cli: CliContext, workspace_root: str) -> bool:
    try:
        return cli.registry().remove(workspace_root)
    except (OSError, ValueError) as exc:
        logger.warning("Could not update workflow registry: %s", exc)
        return False


def _print_plan(workspace: Workspace, items: list[RemovalItem]) -> None:
    console.print("[bold]Removal plan[/bold]")
    console.print(f"  Workflow: {escape(workspace.config.name)}")
    console.print(f"  Topology: {workspace.topology.value}")
    console.print(f"  Path:     {escape(str(workspace.root))}", soft_wrap=True)
    console.print()

    if not items:
        console.print("No items to remove.")
        return
    console.print("The following will be removed:")
    for item in items:
        console.print(f"  [red]-[/red] {escape(item.description)}", soft_wrap=True)


def _print_outcomes(workspace: Workspace, outcomes: list[RemovalOutcome], unregistered: bool) -> None:
    console.print()
    for outcome in outcomes:
        if outcome.ok:
            console.print(f"  [green]✓[/green] Removed {escape(outcome.item.description)}", soft_wrap=True)
        else:
            console.print(
                f"  [yellow]⚠[/yellow] Failed to remove {escape(outcome.item.description)}: "
                f"{escape(outcome.error or '')}",
                soft_wrap=True,
            )
    if unregistered:
        console.print("  [green]✓[/green] Removed from registry")

    console.print()
    name = escape(workspace.config.name)
    if all(outcome.ok for outcome in outcomes):
        console.print(f"Workflow '{name}' removed.")
    else:
        console.print(f"[yellow]Workflow '{name}' partially removed (some errors occurred).[/yellow]")
