"""Rich terminal output for upgrade and status reports.

Symbols
-------
- ``+`` green  : file created
- ``↑`` cyan   : file updated in place
- ``~`` yellow : user-modified or untracked, new version written beside it
- ``⚠`` yellow : template could not be rendered
- ``✗`` red    : write failed
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ccflow.core.inspector import StatusReport
from ccflow.core.reconciler import ArtifactResult, FileState, UpgradeAction, UpgradeReport
from ccflow.core.workspace import Workspace

_STATE_STYLES: dict[FileState, str] = {
    FileState.PRISTINE: "[green]pristine[/green]",
    FileState.MODIFIED: "[yellow]modified[/yellow]",
    FileState.MISSING: "[bold red]missing[/bold red]",
    FileState.UNTRACKED: "[magenta]untracked[/magenta]",
}


def format_result(result: ArtifactResult) -> str | None:
    """One report line for *result*, or ``None`` for unchanged files."""
    path = escape(result.relative_path)

    if result.action is UpgradeAction.NEW:
        verb = "would create" if result.dry_run else "created"
        return f"  [green]+[/green] {path} ({verb})"

    if result.action is UpgradeAction.UPDATED:
        verb = "would update" if result.dry_run else "updated"
        return f"  [cyan]↑[/cyan] {path} ({verb})"

    if result.action is UpgradeAction.SKIPPED:
        reason = "untracked" if result.state is FileState.UNTRACKED else "user-modified"
        if result.dry_run:
            return f"  [yellow]~[/yellow] {path} ({reason}, would write .new)"
        return f"  [yellow]~[/yellow] {path} ({reason}, wrote {escape(result.sidecar_path or '')})"

    if result.action is UpgradeAction.ERROR:
        # No state means the template never rendered
        if result.state is None:
            return f"  [yellow]⚠[/yellow] {path}: {escape(result.detail)}"
        return f"  [red]✗[/red] {path}: {escape(result.detail)}"

    return None


class UpgradeRenderer:
    """Prints upgrade results as they arrive, then the summary block.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_result(self, result: ArtifactResult) -> None:
        line = format_result(result)
        if line is not None:
            self.console.print(line, soft_wrap=True)

    def print_summary(self, report: UpgradeReport) -> None:
        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print(f"  Updated:     {report.updated}")
        self.console.print(f"  Skipped:     {report.skipped} (user-modified)")
        self.console.print(f"  New files:   {report.new}")
        if report.errors:
            self.console.print(f"  [red]Errors:      {report.errors}[/red]")

        if report.dry_run:
            self.console.print()
            self.console.print("[dim]This was a dry run. No files were modified.[/dim]")
            return

        if report.skipped:
            self.console.print()
            self.console.print(
                "Review the .new files and merge any changes you want to keep.",
                soft_wrap=True,
            )
        if not report.manifest_saved:
            self.console.print(
                "[yellow]Warning:[/yellow] the managed-file manifest could not be saved.",
                soft_wrap=True,
            )
        if report.updated == report.skipped == report.new == report.errors == 0:
            self.console.print("[green]Everything is up to date.[/green]")


class StatusRenderer:
    """Renders a :class:`StatusReport` as an overview plus a per-file table."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(self, workspace: Workspace, report: StatusReport) -> None:
        config = workspace.config
        self.console.print(f"[bold]Workflow:[/bold]  {escape(config.name)}", soft_wrap=True)
        self.console.print(f"[bold]Blueprint:[/bold] {escape(report.blueprint)}")
        self.console.print(f"[bold]Topology:[/bold]  {workspace.topology.value}")
        self.console.print(f"[bold]Hub:[/bold]       {escape(report.hub_path)}", soft_wrap=True)
        self.console.print(
            f"[bold]Hooks:[/bold]     {'enabled' if config.hooks.enabled else 'disabled'}"
            f"  [bold]Gates:[/bold] {'enabled' if config.gates.enabled else 'disabled'}"
        )
        if not report.manifest_present:
            self.console.print("[yellow]No managed-file manifest found.[/yellow]")
        self.console.print()
        self.console.print(self._build_table(report))

        counts = ", ".join(
            f"{report.count(state)} {state.value}" for state in FileState if report.count(state)
        )
        self.console.print(counts or "[dim]No artifacts declared.[/dim]")

    @staticmethod
    def _build_table(report: StatusReport) -> Table:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("File", style="cyan", no_wrap=True)
        table.add_column("State", justify="center")
        table.add_column("Notes")

        for artifact in report.artifacts:
            notes: list[str] = []
            if not artifact.executable_ok:
                notes.append("[red]not executable[/red]")
            if artifact.has_sidecar:
                notes.append("[yellow].new pending[/yellow]")
            table.add_row(
                escape(artifact.relative_path),
                _STATE_STYLES[artifact.state],
                " ".join(notes) or "[dim]-[/dim]",
            )
        return table
