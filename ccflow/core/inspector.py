"""Read-only health check of a workspace's managed files.

Backs ``ccflow status``.  Nothing here writes: each declared artifact is
classified against the manifest exactly as an upgrade would classify it,
and hooks are additionally checked for the executable bit.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from ccflow.core.blueprints import BlueprintManager
from ccflow.core.fileops import FileSystem
from ccflow.core.hasher import sha256_hex
from ccflow.core.manifest_store import ManifestStore
from ccflow.core.reconciler import SIDECAR_SUFFIX, FileState, classify
from ccflow.core.workspace import Workspace
from ccflow.models.blueprint import ARTIFACT_ORDER, ArtifactKind

logger = logging.getLogger(__name__)


class ArtifactStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    relative_path: str
    kind: ArtifactKind
    state: FileState
    has_sidecar: bool = False
    executable_ok: bool = True


class StatusReport(BaseModel):
    """Per-artifact states for one workspace."""

    workflow_name: str
    blueprint: str
    hub_path: str
    manifest_present: bool
    artifacts: list[ArtifactStatus]

    @property
    def healthy(self) -> bool:
        """All declared artifacts pristine and every hook executable."""
        return all(a.state is FileState.PRISTINE and a.executable_ok for a in self.artifacts)

    def count(self, state: FileState) -> int:
        return sum(1 for a in self.artifacts if a.state is state)


class WorkspaceInspector:
    """Classify every declared artifact of a workspace without writing."""

    def __init__(
        self,
        workspace: Workspace,
        blueprints: BlueprintManager,
        fs: FileSystem | None = None,
    ) -> None:
        self._workspace = workspace
        self._blueprints = blueprints
        self._fs = fs or FileSystem()

    def inspect(self) -> StatusReport:
        """Build a :class:`StatusReport`.

        Raises
        ------
        BlueprintNotFoundError
            If the workflow's blueprint is not installed.
        """
        config = self._workspace.config
        blueprint = self._blueprints.get(config.blueprint)
        hub = self._workspace.hub_path
        store = ManifestStore(hub)
        manifest = store.load()

        artifacts: list[ArtifactStatus] = []
        for kind in ARTIFACT_ORDER:
            for name in blueprint.defaults_for(kind):
                relative_path = kind.relative_path(name)
                path = hub / relative_path
                digest = sha256_hex(self._fs.read_bytes(path)) if self._fs.exists(path) else None
                state = classify(digest, manifest.get(relative_path))
                executable_ok = True
                if kind.executable and state is not FileState.MISSING:
                    executable_ok = self._fs.is_executable(path)
                artifacts.append(
                    ArtifactStatus(
                        relative_path=relative_path,
                        kind=kind,
                        state=state,
                        has_sidecar=self._fs.exists(path.with_name(path.name + SIDECAR_SUFFIX)),
                        executable_ok=executable_ok,
                    )
                )

        report = StatusReport(
            workflow_name=config.name,
            blueprint=blueprint.id,
            hub_path=str(hub),
            manifest_present=self._fs.exists(store.path),
            artifacts=artifacts,
        )
        logger.debug("Inspected %d artifact(s) under %s.", len(artifacts), hub)
        return report
