"""Managed-file reconciliation — the engine behind ``ccflow upgrade``.

Every templated artifact is classified from three facts: whether it exists
on disk, whether the manifest tracks it, and whether its on-disk digest
matches the digest the manifest recorded.  The classification plus the
digest of a fresh render decides exactly one action:

=============  ==========================  =========================
State          Fresh render                Action
=============  ==========================  =========================
missing        any                         create          (``new``)
pristine       same digest as manifest     nothing         (``unchanged``)
pristine       different digest            overwrite       (``updated``)
modified       any                         write ``.new``  (``skipped``)
untracked      any                         write ``.new``  (``skipped``)
=============  ==========================  =========================

A file is overwritten in place only when its bytes are exactly what the
manifest says ccflow last wrote.  Digests are content-based, so a user who
reverts an edit byte-for-byte makes the file pristine again.

Artifacts are processed one at a time in blueprint order (agents, commands,
hooks).  A failure on one artifact is recorded against it and the pass
continues.  The manifest is saved once, at the end, and never in a dry run.
Concurrent runs against one workspace are not guarded; the last manifest
save wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from ccflow import __version__
from ccflow.core.blueprints import BlueprintManager, TemplateRenderError
from ccflow.core.fileops import FileSystem
from ccflow.core.hasher import sha256_hex
from ccflow.core.manifest_store import ManifestStore
from ccflow.core.template_data import build_template_data
from ccflow.core.workspace import Workspace
from ccflow.models.blueprint import ARTIFACT_ORDER, ArtifactKind
from ccflow.models.manifest import ManagedFile, ManagedFilesManifest

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".new"


class FileState(str, Enum):
    """Where an on-disk artifact stands relative to the manifest."""

    MISSING = "missing"
    PRISTINE = "pristine"
    MODIFIED = "modified"
    UNTRACKED = "untracked"


class UpgradeAction(str, Enum):
    NEW = "new"
    UPDATED = "updated"
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    ERROR = "error"


def classify(on_disk_digest: str | None, entry: ManagedFile | None) -> FileState:
    """Classify a file from its current digest (``None`` if absent)."""
    if on_disk_digest is None:
        return FileState.MISSING
    if entry is None:
        return FileState.UNTRACKED
    if entry.digest == on_disk_digest:
        return FileState.PRISTINE
    return FileState.MODIFIED


@dataclass(frozen=True)
class RenderedArtifact:
    """Freshly rendered template bytes and their digest."""

    content: bytes
    digest: str

    @classmethod
    def of(cls, content: bytes) -> RenderedArtifact:
        return cls(content=content, digest=sha256_hex(content))


class ArtifactResult(BaseModel):
    """Outcome of reconciling one artifact."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    kind: ArtifactKind
    action: UpgradeAction
    state: FileState | None = None
    dry_run: bool = False
    sidecar_path: str | None = None
    detail: str = ""


class UpgradeOptions(BaseModel):
    """Options for one upgrade pass."""

    model_config = ConfigDict(frozen=True)

    dry_run: bool = False


class UpgradeReport(BaseModel):
    """Ordered per-artifact results of an upgrade pass."""

    results: list[ArtifactResult]
    dry_run: bool = False
    manifest_saved: bool = False

    def count(self, action: UpgradeAction) -> int:
        return sum(1 for r in self.results if r.action is action)

    @property
    def updated(self) -> int:
        return self.count(UpgradeAction.UPDATED)

    @property
    def skipped(self) -> int:
        return self.count(UpgradeAction.SKIPPED)

    @property
    def new(self) -> int:
        return self.count(UpgradeAction.NEW)

    @property
    def unchanged(self) -> int:
        return self.count(UpgradeAction.UNCHANGED)

    @property
    def errors(self) -> int:
        return self.count(UpgradeAction.ERROR)


class Reconciler:
    """Decides and applies the action for a single artifact.

    Parameters
    ----------
    hub_path:
        The hub's ``.claude`` directory.
    manifest:
        Manifest mutated in place as files are written.
    blueprint_id:
        Prefix for recorded template ids.
    fs:
        Filesystem collaborator.
    dry_run:
        Decide only; never write.
    """

    def __init__(
        self,
        hub_path: Path,
        manifest: ManagedFilesManifest,
        *,
        blueprint_id: str,
        fs: FileSystem | None = None,
        dry_run: bool = False,
        producer_version: str = __version__,
    ) -> None:
        self._hub = Path(hub_path)
        self._manifest = manifest
        self._blueprint_id = blueprint_id
        self._fs = fs or FileSystem()
        self._dry_run = dry_run
        self._producer_version = producer_version

    def reconcile(self, kind: ArtifactKind, name: str, artifact: RenderedArtifact) -> ArtifactResult:
        relative_path = kind.relative_path(name)
        path = self._hub / relative_path
        entry = self._manifest.get(relative_path)

        on_disk_digest: str | None = None
        if self._fs.exists(path):
            try:
                on_disk_digest = sha256_hex(self._fs.read_bytes(path))
            except OSError as exc:
                logger.warning("Cannot read %s: %s", path, exc)
                return self._result(kind, relative_path, UpgradeAction.ERROR, detail=str(exc))

        state = classify(on_disk_digest, entry)
        logger.debug("%s is %s", relative_path, state.value)

        if state is FileState.MISSING:
            return self._write_in_place(kind, relative_path, path, artifact, state, UpgradeAction.NEW)

        if state is FileState.PRISTINE:
            if artifact.digest == entry.digest:
                return self._result(kind, relative_path, UpgradeAction.UNCHANGED, state=state)
            return self._write_in_place(kind, relative_path, path, artifact, state, UpgradeAction.UPDATED)

        return self._write_sidecar(kind, relative_path, path, artifact, state)

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def _writer(self, kind: ArtifactKind) -> Callable[..., None]:
        return self._fs.write_executable if kind.executable else self._fs.write_plain

    def _write_in_place(
        self,
        kind: ArtifactKind,
        relative_path: str,
        path: Path,
        artifact: RenderedArtifact,
        state: FileState,
        action: UpgradeAction,
    ) -> ArtifactResult:
        if not self._dry_run:
            try:
                self._writer(kind)(path, artifact.content, overwrite=True)
            except OSError as exc:
                logger.warning("Failed to write %s: %s", path, exc)
                return self._result(kind, relative_path, UpgradeAction.ERROR, state=state, detail=str(exc))
            self._manifest.record(
                relative_path,
                template_id=f"{self._blueprint_id}/{relative_path}",
                digest=artifact.digest,
                producer_version=self._producer_version,
            )
        return self._result(kind, relative_path, action, state=state)

    def _write_sidecar(
        self,
        kind: ArtifactKind,
        relative_path: str,
        path: Path,
        artifact: RenderedArtifact,
        state: FileState,
    ) -> ArtifactResult:
        sidecar_relative = relative_path + SIDECAR_SUFFIX
        if not self._dry_run:
            try:
                self._writer(kind)(path.with_name(path.name + SIDECAR_SUFFIX), artifact.content, overwrite=True)
            except OSError as exc:
                logger.warning("Failed to write sidecar for %s: %s", path, exc)
                return self._result(kind, relative_path, UpgradeAction.ERROR, state=state, detail=str(exc))
        return self._result(
            kind,
            relative_path,
            UpgradeAction.SKIPPED,
            state=state,
            sidecar_path=sidecar_relative,
        )

    def _result(
        self,
        kind: ArtifactKind,
        relative_path: str,
        action: UpgradeAction,
        **fields,
    ) -> ArtifactResult:
        return ArtifactResult(
            relative_path=relative_path,
            kind=kind,
            action=action,
            dry_run=self._dry_run,
            **fields,
        )


class UpgradeEngine:
    """Runs a full reconciliation pass over a workspace.

    Parameters
    ----------
    workspace:
        The discovered workspace.
    blueprints:
        Template source.
    fs:
        Filesystem collaborator, shared with the per-file reconciler.
    """

    def __init__(
        self,
        workspace: Workspace,
        blueprints: BlueprintManager,
        *,
        fs: FileSystem | None = None,
    ) -> None:
        self._workspace = workspace
        self._blueprints = blueprints
        self._fs = fs or FileSystem()
        self._store = ManifestStore(workspace.hub_path)

    @property
    def store(self) -> ManifestStore:
        return self._store

    def run(
        self,
        options: UpgradeOptions | None = None,
        *,
        on_result: Callable[[ArtifactResult], None] | None = None,
    ) -> UpgradeReport:
        """Reconcile every declared artifact and persist the manifest.

        Raises
        ------
        BlueprintNotFoundError
            If the workflow's blueprint is not installed.  Nothing is
            touched in that case.
        """
        options = options or UpgradeOptions()
        config = self._workspace.config
        blueprint = self._blueprints.get(config.blueprint)
        manifest = self._store.load()

        reconciler = Reconciler(
            self._workspace.hub_path,
            manifest,
            blueprint_id=blueprint.id,
            fs=self._fs,
            dry_run=options.dry_run,
        )
        shared_data = build_template_data(config)
        results: list[ArtifactResult] = []

        for kind in ARTIFACT_ORDER:
            for name in blueprint.defaults_for(kind):
                data = build_template_data(config, name) if kind is ArtifactKind.AGENT else shared_data
                try:
                    content = self._blueprints.render_artifact(blueprint.id, kind, name, data)
                except TemplateRenderError as exc:
                    logger.warning("Skipping %s: %s", kind.relative_path(name), exc)
                    result = ArtifactResult(
                        relative_path=kind.relative_path(name),
                        kind=kind,
                        action=UpgradeAction.ERROR,
                        dry_run=options.dry_run,
                        detail=str(exc),
                    )
                else:
                    result = reconciler.reconcile(kind, name, RenderedArtifact.of(content))
                results.append(result)
                if on_result is not None:
                    on_result(result)

        saved = False
        if not options.dry_run:
            saved = self._store.save(manifest)

        report = UpgradeReport(results=results, dry_run=options.dry_run, manifest_saved=saved)
        logger.info(
            "Upgrade finished: %d updated, %d skipped, %d new, %d error(s).",
            report.updated,
            report.skipped,
            report.new,
            report.errors,
        )
        return report
