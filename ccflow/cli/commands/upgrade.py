"""``ccflow upgrade`` — bring managed files up to date with their blueprint.

Pristine files are rewritten in place, user-modified and untracked files get
a ``.new`` file beside them, missing files are recreated.  ``--dry-run``
prints the same decisions without writing anything.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.markup import escape

from ccflow.cli.context import CliContext, get_context
from ccflow.cli.render import UpgradeRenderer
from ccflow.core.blueprints import BlueprintError, BlueprintNotFoundError
from ccflow.core.reconciler import UpgradeEngine, UpgradeOptions
from ccflow.core.workspace import WorkflowConfigError, WorkspaceNotFoundError

console = Console()
logger = logging.getLogger(__name__)


def upgrade_cmd(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would change without writing anything.",
    ),
) -> None:
    """Upgrade the workflow's agents, commands and hooks.

    Exits 0 whenever the pass ran, even if individual files failed; their
    failures are listed in the report.
    """
    cli = get_context(ctx)
    try:
        workspace = cli.discover()
        blueprints = cli.blueprints()
    except (WorkspaceNotFoundError, WorkflowConfigError, BlueprintError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    renderer = UpgradeRenderer(console=console)
    console.print("Checking for updates...")
    if dry_run:
        console.print("[dim](dry run)[/dim]")

    engine = UpgradeEngine(workspace, blueprints)
    try:
        report = engine.run(UpgradeOptions(dry_run=dry_run), on_result=renderer.print_result)
    except BlueprintNotFoundError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        console.print(
            "Set 'blueprint' in workflow.yaml to one of the ids shown by "
            "'ccflow list-blueprints'.",
            soft_wrap=True,
        )
        raise typer.Exit(code=1)

    renderer.print_summary(report)

    if not dry_run:
        _touch_registry(cli, str(workspace.root))


def _touch_registry(cli: CliContext, workspace_root: str) -> None:
    try:
        cli.registry().touch(workspace_root)
    except (OSError, ValueError) as exc:
        logger.warning("Could not update workflow registry: %s", exc)
