"""Main Typer application — registers all CLI commands.

Entry point: ``ccflow`` (configured via pyproject.toml ``[project.scripts]``).

Commands: run, upgrade, status, doctor, remove, list, list-blueprints, version.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ccflow import __version__
from ccflow.cli.commands.doctor import doctor_cmd
from ccflow.cli.commands.listing import list_blueprints_cmd, list_cmd
from ccflow.cli.commands.remove import remove_cmd
from ccflow.cli.commands.run import run_cmd
from ccflow.cli.commands.status import status_cmd
from ccflow.cli.commands.upgrade import upgrade_cmd
from ccflow.cli.context import CliContext
from ccflow.config import settings

app = typer.Typer(
    name="ccflow",
    help="ccflow: scaffold and upgrade Claude Code workflows across repositories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def root_callback(
    ctx: typer.Context,
    workspace: Optional[Path] = typer.Option(
        None,
        "--workspace",
        "-w",
        help="Workspace directory or workflow.yaml path. Overrides CCFLOW_WORKSPACE.",
    ),
    registry: Optional[Path] = typer.Option(
        None,
        "--registry",
        help="Path to the workflow registry. Overrides CCFLOW_REGISTRY_PATH.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    """Resolve global options into a CliContext for the subcommand."""
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = CliContext(
        workspace=workspace or settings.workspace,
        registry_path=registry or settings.registry_path,
        verbose=verbose,
    )


# Register subcommands
app.command(name="run", help="Create a workflow from a blueprint.")(run_cmd)
app.command(name="upgrade", help="Update managed files to the latest templates.")(upgrade_cmd)
app.command(name="status", help="Show the state of every managed file.")(status_cmd)
app.command(name="doctor", help="Run diagnostic checks with remediation hints.")(doctor_cmd)
app.command(name="remove", help="Remove a workflow and all ccflow artifacts.")(remove_cmd)
app.command(name="list", help="List registered workflows.")(list_cmd)
app.command(name="list-blueprints", help="List available blueprints.")(list_blueprints_cmd)


@app.command(name="version", help="Print the ccflow version.")
def version_cmd() -> None:
    Console().print(f"ccflow {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
