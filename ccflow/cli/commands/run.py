"""``ccflow run BLUEPRINT`` — scaffold a new workflow from a blueprint.

Non-interactive: every answer the setup wizard would ask for is a flag.
Repositories are given as ``--repo PATH[:KIND]`` and may be repeated; with
none, the blueprint's default repositories are used.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ccflow.cli.context import CliContext, get_context
from ccflow.core.blueprints import BlueprintError
from ccflow.core.generator import GenerateOptions, GenerationError, GenerationResult, WorkflowGenerator
from ccflow.core.registry import RegistryEntry
from ccflow.models.blueprint import Blueprint
from ccflow.models.workflow import RepoConfig, RepoKind, Topology, TrackerProvider, VCSProvider

console = Console()
logger = logging.getLogger(__name__)


def parse_repo(spec: str, workspace_root: Path) -> RepoConfig:
    """Parse ``PATH[:KIND]`` into a :class:`RepoConfig`.

    The repository name is the last path component; ``.`` names the repo
    after the workspace directory.

    Raises
    ------
    typer.BadParameter
        If ``KIND`` is not a known repository kind.
    """
    path, _, kind = spec.partition(":")
    path = path or "."
    try:
        repo_kind = RepoKind(kind.lower()) if kind else RepoKind.UNKNOWN
    except ValueError:
        known = ", ".join(k.value for k in RepoKind)
        raise typer.BadParameter(f"unknown repo kind '{kind}' (expected one of: {known})")
    name = Path(path).name if path not in (".", "./") else workspace_root.name
    return RepoConfig(name=name, path=path, kind=repo_kind)


def default_repos(blueprint: Blueprint, topology: Topology, workspace_root: Path) -> list[RepoConfig]:
    """Repositories used when no ``--repo`` is given."""
    if topology is Topology.SINGLE_REPO:
        kind = blueprint.default_repos[0].kind if blueprint.default_repos else "unknown"
        return [RepoConfig(name=workspace_root.name, path=".", kind=_kind_or_unknown(kind))]
    return [
        RepoConfig(name=repo.name, path=repo.name, kind=_kind_or_unknown(repo.kind))
        for repo in blueprint.default_repos
    ]


def _kind_or_unknown(value: str) -> RepoKind:
    try:
        return RepoKind(value)
    except ValueError:
        return RepoKind.UNKNOWN


def run_cmd(
    ctx: typer.Context,
    blueprint_id: str = typer.Argument(..., metavar="BLUEPRINT", help="Blueprint id, e.g. web-dev."),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Workflow name. Defaults to the directory name."
    ),
    path: Optional[Path] = typer.Option(
        None, "--path", "-p", help="Directory to create the workflow in. Defaults to the current directory."
    ),
    topology: Optional[Topology] = typer.Option(
        None, "--topology", "-t", help="multi-repo or single-repo. Defaults to the blueprint's choice."
    ),
    repos: Optional[List[str]] = typer.Option(
        None, "--repo", "-r", help="Repository as PATH[:KIND]. Repeatable."
    ),
    hooks: bool = typer.Option(True, "--hooks/--no-hooks", help="Register hooks in settings.json."),
    gates: bool = typer.Option(True, "--gates/--no-gates", help="Enable quality gates."),
    vcs: VCSProvider = typer.Option(VCSProvider.NONE, "--vcs", help="Version control provider."),
    tracker: TrackerProvider = typer.Option(TrackerProvider.NONE, "--tracker", help="Issue tracker."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing files."),
) -> None:
    """Create a workflow: hub directory, templates, settings and manifest."""
    cli = get_context(ctx)
    root = (path or cli.workspace or Path.cwd()).expanduser().resolve()

    try:
        blueprints = cli.blueprints()
        blueprint = blueprints.get(blueprint_id)
    except BlueprintError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    chosen_topology = topology or _default_topology(blueprint)
    repo_configs = (
        [parse_repo(spec, root) for spec in repos]
        if repos
        else default_repos(blueprint, chosen_topology, root)
    )

    options = GenerateOptions(
        workspace_path=root,
        workflow_name=name or root.name,
        blueprint=blueprint.id,
        topology=chosen_topology,
        repos=repo_configs,
        hooks_enabled=hooks,
        gates_enabled=gates,
        vcs=vcs,
        tracker=tracker,
        force=force,
    )

    try:
        result = WorkflowGenerator(blueprints).generate(options)
    except (GenerationError, BlueprintError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    _register(cli, result)
    _print_result(result)


def _default_topology(blueprint: Blueprint) -> Topology:
    try:
        return Topology(blueprint.default_topology)
    except ValueError:
        return Topology.MULTI_REPO


def _register(cli: CliContext, result: GenerationResult) -> None:
    workspace = result.workspace
    entry = RegistryEntry(
        name=workspace.config.name,
        path=str(workspace.root),
        blueprint=workspace.config.blueprint,
    )
    try:
        cli.registry().add_or_update(entry)
    except (OSError, ValueError) as exc:
        logger.warning("Could not update workflow registry: %s", exc)
        console.print("[yellow]Warning:[/yellow] workflow was not added to the registry.")


def _print_result(result: GenerationResult) -> None:
    workspace = result.workspace
    config = workspace.config
    lines = [
        "[bold green]Workflow created![/bold green]",
        "",
        f"[bold]Name:[/bold]       {escape(config.name)}",
        f"[bold]Blueprint:[/bold]  {escape(config.blueprint)}",
        f"[bold]Topology:[/bold]   {config.topology.value}",
        f"[bold]Hub:[/bold]        {escape(str(workspace.hub_path))}",
        f"[bold]Repos:[/bold]      {escape(', '.join(config.repo_names()) or '-')}",
        f"[bold]Files:[/bold]      {len(result.written)}",
    ]
    if not result.manifest_saved:
        lines += ["", "[yellow]Managed-file manifest could not be saved.[/yellow]"]
    lines += ["", "[dim]Run 'ccflow upgrade' after updating ccflow to pick up template changes.[/dim]"]

    console.print()
    console.print(
        Panel(
            "\n".join(lines),
            title="[bold]ccflow[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
