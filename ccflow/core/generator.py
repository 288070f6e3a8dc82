"""Workflow scaffolding — the engine behind ``ccflow run``.

Multi-repo layout::

    <workspace>/
      workflow-hub/
        workflow.yaml
        .claude/{agents,commands,hooks}/, settings.json, .ccflow-managed.json
      docs/workflow/{state,designs}/

Single-repo layout puts ``.claude/`` at the repository root and the marker
at ``.ccflow/workflow.yaml``.

Every artifact written here is recorded in the managed-file manifest, so the
first ``ccflow upgrade`` after generation sees pristine files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ccflow import __version__
from ccflow.core.blueprints import (
    SETTINGS_ASSET,
    BlueprintError,
    BlueprintManager,
    TemplateRenderError,
)
from ccflow.core.fileops import FileSystem
from ccflow.core.hasher import sha256_hex
from ccflow.core.manifest_store import ManifestStore
from ccflow.core.template_data import build_template_data
from ccflow.core.workspace import (
    MARKER_FILENAME,
    SINGLE_REPO_DIR,
    Workspace,
    dump_config,
)
from ccflow.models.blueprint import ARTIFACT_ORDER, ArtifactKind, Blueprint
from ccflow.models.settings import ClaudeSettings, default_registration, register_hook
from ccflow.models.workflow import (
    MCPConfig,
    PathsConfig,
    RepoConfig,
    StateConfig,
    ToggleConfig,
    Topology,
    TrackerProvider,
    VCSProvider,
    WorkflowConfig,
)

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Raised when a workflow cannot be scaffolded."""


@dataclass
class GenerateOptions:
    """Inputs for one scaffold run (what the setup wizard would collect)."""

    workspace_path: Path
    workflow_name: str
    blueprint: str
    topology: Topology = Topology.MULTI_REPO
    repos: list[RepoConfig] = field(default_factory=list)
    hooks_enabled: bool = True
    gates_enabled: bool = True
    vcs: VCSProvider = VCSProvider.NONE
    tracker: TrackerProvider = TrackerProvider.NONE
    force: bool = False


@dataclass
class GenerationResult:
    workspace: Workspace
    written: list[str] = field(default_factory=list)
    manifest_saved: bool = False


class WorkflowGenerator:
    """Creates workflow file structures from a blueprint.

    Parameters
    ----------
    blueprints:
        Template source.
    fs:
        Filesystem collaborator.
    """

    def __init__(self, blueprints: BlueprintManager, fs: FileSystem | None = None) -> None:
        self._blueprints = blueprints
        self._fs = fs or FileSystem()

    def build_config(self, options: GenerateOptions) -> WorkflowConfig:
        """The ``WorkflowConfig`` a scaffold run with *options* would write."""
        paths = PathsConfig()
        if options.topology is Topology.SINGLE_REPO:
            paths = PathsConfig(hub="", docs="docs")
        return WorkflowConfig(
            name=options.workflow_name,
            topology=options.topology,
            blueprint=options.blueprint,
            paths=paths,
            state=StateConfig(),
            repos=list(options.repos),
            hooks=ToggleConfig(enabled=options.hooks_enabled),
            gates=ToggleConfig(enabled=options.gates_enabled),
            mcp=MCPConfig(vcs=options.vcs, tracker=options.tracker),
        )

    def generate(self, options: GenerateOptions) -> GenerationResult:
        """Scaffold a workflow and seed its manifest.

        Raises
        ------
        BlueprintNotFoundError
            If ``options.blueprint`` is not installed.
        GenerationError
            If a target file exists and ``force`` is off, or a write fails.
        """
        blueprint = self._blueprints.get(options.blueprint)
        config = self.build_config(options)
        root = Path(options.workspace_path).resolve()

        if config.topology is Topology.MULTI_REPO:
            marker = root / config.paths.hub / MARKER_FILENAME
        else:
            marker = root / SINGLE_REPO_DIR / MARKER_FILENAME
        if self._fs.exists(marker) and not options.force:
            raise GenerationError(
                f"workflow.yaml already exists: {marker} (use --force to overwrite)"
            )

        workspace = Workspace(root=root, config_path=marker, topology=config.topology, config=config)
        result = GenerationResult(workspace=workspace)

        try:
            self._generate_claude_directory(workspace, blueprint, options.force, result)
            self._generate_docs_structure(workspace)
            self._fs.write_plain(marker, dump_config(config).encode("utf-8"), overwrite=True)
        except (OSError, BlueprintError, TemplateRenderError) as exc:
            raise GenerationError(str(exc)) from exc

        logger.info(
            "Generated %s workflow '%s' at %s (%d artifact(s)).",
            config.topology.value,
            config.name,
            root,
            len(result.written),
        )
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _generate_claude_directory(
        self,
        workspace: Workspace,
        blueprint: Blueprint,
        force: bool,
        result: GenerationResult,
    ) -> None:
        hub = workspace.hub_path
        config = workspace.config
        store = ManifestStore(hub)
        manifest = store.load()
        shared_data = build_template_data(config)

        for kind in ARTIFACT_ORDER:
            self._fs.ensure_dir(hub / kind.directory)
            for name in blueprint.defaults_for(kind):
                data = build_template_data(config, name) if kind is ArtifactKind.AGENT else shared_data
                content = self._blueprints.render_artifact(blueprint.id, kind, name, data)
                relative_path = kind.relative_path(name)
                writer = self._fs.write_executable if kind.executable else self._fs.write_plain
                try:
                    writer(hub / relative_path, content, overwrite=force)
                except FileExistsError as exc:
                    raise GenerationError(str(exc)) from exc
                manifest.record(
                    relative_path,
                    template_id=f"{blueprint.id}/{relative_path}",
                    digest=sha256_hex(content),
                    producer_version=__version__,
                )
                result.written.append(relative_path)

        settings = self._build_settings(blueprint, config.hooks.enabled)
        try:
            self._fs.write_plain(hub / SETTINGS_ASSET, settings.to_json().encode("utf-8"), overwrite=force)
        except FileExistsError as exc:
            raise GenerationError(str(exc)) from exc

        result.manifest_saved = store.save(manifest)

    def _build_settings(self, blueprint: Blueprint, hooks_enabled: bool) -> ClaudeSettings:
        settings = ClaudeSettings.from_json(self._blueprints.get_asset(blueprint.id, SETTINGS_ASSET))
        if not hooks_enabled:
            return settings
        for hook_name in blueprint.hooks.defaults:
            registration = blueprint.hooks_manifest.get(hook_name) or default_registration(hook_name)
            settings = register_hook(settings, registration)
        return settings

    def _generate_docs_structure(self, workspace: Workspace) -> None:
        for directory in (workspace.state_path, workspace.designs_path):
            self._fs.ensure_dir(directory)
            gitkeep = directory / ".gitkeep"
            if not self._fs.exists(gitkeep):
                self._fs.write_plain(gitkeep, b"")
