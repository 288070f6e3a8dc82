"""Persistence for the managed-file manifest.

Storage: ``{hub}/.ccflow-managed.json``.  Loading never fails: a missing or
corrupt file yields an empty manifest, which makes every existing file look
untracked and routes it to a sidecar instead of overwriting it.  Saving is
atomic and best-effort.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from ccflow.core.fileops import atomic_write_text
from ccflow.models.manifest import ManagedFilesManifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = ".ccflow-managed.json"


class ManifestStore:
    """Loads and saves the manifest for one hub directory.

    Parameters
    ----------
    hub_path:
        The hub's ``.claude`` directory.
    """

    def __init__(self, hub_path: Path) -> None:
        self._path = Path(hub_path) / MANIFEST_FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ManagedFilesManifest:
        """Return the persisted manifest, or an empty one if unavailable."""
        if not self._path.exists():
            logger.debug("No manifest at %s — starting empty.", self._path)
            return ManagedFilesManifest()
        try:
            raw = self._path.read_text(encoding="utf-8")
            manifest = ManagedFilesManifest.model_validate_json(raw)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning(
                "Ignoring unreadable manifest %s (%s); treating all files as untracked.",
                self._path,
                exc,
            )
            return ManagedFilesManifest()
        logger.debug("Loaded %d managed file(s) from %s.", len(manifest.files), self._path)
        return manifest

    def save(self, manifest: ManagedFilesManifest) -> bool:
        """Atomically write *manifest*.

        Returns ``False`` instead of raising when the write fails; the files
        it describes have already been written at that point.
        """
        try:
            atomic_write_text(self._path, manifest.to_json())
        except OSError:
            logger.exception("Failed to save manifest to %s.", self._path)
            return False
        logger.debug("Saved %d managed file(s) to %s.", len(manifest.files), self._path)
        return True
