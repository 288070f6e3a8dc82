"""Workspace discovery and ``workflow.yaml`` persistence.

Resolution order for the active workspace:

1. An explicit override (``--workspace`` or ``CCFLOW_WORKSPACE``).
2. Walking up from the current directory looking for a marker.

Markers, most specific first:

- ``workflow-hub/workflow.yaml`` — multi-repo topology
- ``.ccflow/workflow.yaml`` — single-repo topology
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from ccflow.core.fileops import atomic_write_text
from ccflow.models.workflow import Topology, WorkflowConfig

logger = logging.getLogger(__name__)

MARKER_FILENAME = "workflow.yaml"
MULTI_REPO_DIR = "workflow-hub"
SINGLE_REPO_DIR = ".ccflow"
MULTI_REPO_MARKER = f"{MULTI_REPO_DIR}/{MARKER_FILENAME}"
SINGLE_REPO_MARKER = f"{SINGLE_REPO_DIR}/{MARKER_FILENAME}"
CLAUDE_DIR = ".claude"


class WorkspaceNotFoundError(RuntimeError):
    """Raised when no workflow marker can be located."""


class WorkflowConfigError(RuntimeError):
    """Raised when ``workflow.yaml`` cannot be read or parsed."""


@dataclass(frozen=True)
class Workspace:
    """A discovered workflow workspace."""

    root: Path
    config_path: Path
    topology: Topology
    config: WorkflowConfig

    @property
    def hub_path(self) -> Path:
        """The ``.claude`` directory holding the managed templates."""
        if self.topology is Topology.MULTI_REPO:
            return self.root / self.config.paths.hub / CLAUDE_DIR
        return self.root / CLAUDE_DIR

    @property
    def docs_path(self) -> Path:
        return self.root / self.config.paths.docs

    @property
    def state_path(self) -> Path:
        return self.root / self.config.state.state_dir

    @property
    def designs_path(self) -> Path:
        return self.root / self.config.state.designs_dir


def discover(override: Path | None = None, *, start: Path | None = None) -> Workspace:
    """Find the active workspace.

    Parameters
    ----------
    override:
        Workspace directory or ``workflow.yaml`` path; skips the upward walk.
    start:
        Directory to start walking from.  Defaults to the current directory.
    """
    if override is not None:
        return load_workspace(override)
    return _discover_from(Path(start) if start is not None else Path.cwd())


def _discover_from(start: Path) -> Workspace:
    current = start.resolve()
    while True:
        found = _marker_in(current)
        if found is not None:
            return _load_from_marker(current, *found)
        if current.parent == current:
            break
        current = current.parent
    raise WorkspaceNotFoundError("no workflow found. Run 'ccflow run' to create one")


def _marker_in(directory: Path) -> tuple[Path, Topology] | None:
    multi = directory / MULTI_REPO_MARKER
    if multi.is_file():
        return multi, Topology.MULTI_REPO
    single = directory / SINGLE_REPO_MARKER
    if single.is_file():
        return single, Topology.SINGLE_REPO
    return None


def load_workspace(path: Path) -> Workspace:
    """Load a workspace from its root directory or directly from its marker."""
    path = Path(path).expanduser().resolve()

    if path.name == MARKER_FILENAME and path.is_file():
        parent = path.parent
        if parent.name == MULTI_REPO_DIR:
            return _load_from_marker(parent.parent, path, Topology.MULTI_REPO)
        if parent.name == SINGLE_REPO_DIR:
            return _load_from_marker(parent.parent, path, Topology.SINGLE_REPO)

    found = _marker_in(path)
    if found is None:
        raise WorkspaceNotFoundError(f"no workflow.yaml found at {path}")
    return _load_from_marker(path, *found)


def _load_from_marker(root: Path, marker: Path, topology: Topology) -> Workspace:
    config = load_config(marker)
    logger.debug("Using %s workspace at %s.", topology.value, root)
    return Workspace(root=root, config_path=marker, topology=topology, config=config)


def load_config(path: Path) -> WorkflowConfig:
    """Read and validate a ``workflow.yaml`` file."""
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise WorkflowConfigError(f"failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise WorkflowConfigError(f"failed to parse {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise WorkflowConfigError(f"expected a mapping in {path}")
    try:
        return WorkflowConfig.model_validate(raw)
    except ValidationError as exc:
        raise WorkflowConfigError(f"invalid workflow config {path}: {exc}") from exc


def dump_config(config: WorkflowConfig) -> str:
    """YAML text for *config*, keys in declaration order."""
    payload = config.model_dump(mode="json", exclude_defaults=False)
    if not payload.get("agent_permissions"):
        payload.pop("agent_permissions", None)
    return yaml.safe_dump(payload, sort_keys=False, default_flow_style=False)


def save_config(path: Path, config: WorkflowConfig) -> None:
    atomic_write_text(Path(path), dump_config(config))
