"""``ccflow status`` — report the state of every managed file.

Read-only.  Exit codes: 0 when every declared artifact is pristine and every
hook is executable, 2 when anything needs attention, 1 when the workspace or
blueprint cannot be loaded.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from ccflow.cli.context import get_context
from ccflow.cli.render import StatusRenderer
from ccflow.core.blueprints import BlueprintError
from ccflow.core.inspector import WorkspaceInspector
from ccflow.core.workspace import WorkflowConfigError, WorkspaceNotFoundError

console = Console()

NEEDS_ATTENTION_EXIT_CODE = 2


def status_cmd(ctx: typer.Context) -> None:
    """Show workflow details and whether each managed file is pristine."""
    cli = get_context(ctx)
    try:
        workspace = cli.discover()
        report = WorkspaceInspector(workspace, cli.blueprints()).inspect()
    except (WorkspaceNotFoundError, WorkflowConfigError, BlueprintError, OSError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    StatusRenderer(console=console).render(workspace, report)

    if not report.healthy:
        console.print("[dim]Run 'ccflow upgrade' to restore missing files and refresh templates.[/dim]")
        raise typer.Exit(code=NEEDS_ATTENTION_EXIT_CODE)
