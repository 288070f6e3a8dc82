"""``ccflow doctor`` — structural health checks with remediation hints.

Exit codes: 0 when no check failed (warnings allowed), 1 when any check
failed or the workspace cannot be loaded.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from ccflow.cli.context import get_context
from ccflow.core.doctor import CheckStatus, Doctor, DoctorCheck, DoctorReport
from ccflow.core.workspace import WorkflowConfigError, WorkspaceNotFoundError

console = Console()

_ICONS: dict[CheckStatus, str] = {
    CheckStatus.PASS: "[green]✓[/green]",
    CheckStatus.WARN: "[yellow]⚠[/yellow]",
    CheckStatus.FAIL: "[red]✗[/red]",
}


def doctor_cmd(ctx: typer.Context) -> None:
    """Check the marker, settings.json, hook scripts and required directories."""
    cli = get_context(ctx)
    try:
        workspace = cli.discover()
    except (WorkspaceNotFoundError, WorkflowConfigError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    report = Doctor(workspace).run()

    console.print("[bold]ccflow Doctor[/bold]")
    console.print()
    for check in report.checks:
        _print_check(check)
    _print_summary(report)

    if report.failed:
        raise typer.Exit(code=1)


def _print_check(check: DoctorCheck) -> None:
    console.print(f"{_ICONS[check.status]} {escape(check.name)}")
    console.print(f"  {escape(check.message)}", soft_wrap=True)
    if check.remediation:
        console.print(f"  [dim]→ {escape(check.remediation)}[/dim]", soft_wrap=True)
    console.print()


def _print_summary(report: DoctorReport) -> None:
    console.print("[bold]Summary:[/bold]")
    console.print(f"  Passed:   {report.passed}")
    console.print(f"  Warnings: {report.warnings}")
    console.print(f"  Failed:   {report.failed}")
    console.print()

    if report.failed:
        console.print("[red]Some checks failed. Please address the issues above.[/red]")
    elif report.warnings:
        console.print("[yellow]All checks passed with warnings.[/yellow]")
    else:
        console.print("[green]All checks passed![/green]")
