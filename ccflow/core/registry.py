"""Global workflow registry — known workflows and where they live.

The registry is a JSON file, ``~/.ccflow/registry.json`` by default.  It is a
convenience index only: every command still locates its workspace through
marker discovery, so a missing or stale registry never blocks anything.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ccflow.core.fileops import atomic_write_text

logger = logging.getLogger(__name__)

REGISTRY_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistryEntry(BaseModel):
    """One registered workflow, keyed by its workspace path."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    blueprint: str
    created_at: datetime = Field(default_factory=_utcnow)
    last_used_at: datetime = Field(default_factory=_utcnow)


class _RegistryDocument(BaseModel):
    version: int = REGISTRY_VERSION
    workflows: list[RegistryEntry] = Field(default_factory=list)


class WorkflowRegistry:
    """Load, query and update the workflow registry.

    Parameters
    ----------
    registry_path:
        Path to the registry JSON file.  Created on first ``persist()``.

    Examples
    --------
    >>> from pathlib import Path
    >>> registry = WorkflowRegistry(Path("/tmp/ccflow-registry.json"))
    >>> registry.add_or_update(
    ...     RegistryEntry(name="acme", path="/src/acme", blueprint="web-dev")
    ... )
    >>> registry.find_by_name("acme").blueprint
    'web-dev'
    """

    def __init__(self, registry_path: Path) -> None:
        self._registry_path = Path(registry_path)
        self._entries: list[RegistryEntry] = []
        self.load()

    @property
    def path(self) -> Path:
        return self._registry_path

    # -- Lookup -------------------------------------------------------------

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries)

    def find_by_name(self, name: str) -> RegistryEntry | None:
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def find_by_path(self, path: str) -> RegistryEntry | None:
        for entry in self._entries:
            if entry.path == path:
                return entry
        return None

    # -- Mutation -----------------------------------------------------------

    def add_or_update(self, entry: RegistryEntry) -> None:
        """Insert *entry*, replacing any entry with the same path, and persist."""
        for index, existing in enumerate(self._entries):
            if existing.path == entry.path:
                self._entries[index] = entry.model_copy(update={"created_at": existing.created_at})
                break
        else:
            self._entries.append(entry)
        self.persist()
        logger.info("Registered workflow '%s' at %s.", entry.name, entry.path)

    def remove(self, path: str) -> bool:
        """Drop the entry for *path*.  Returns ``False`` if there was none."""
        for index, existing in enumerate(self._entries):
            if existing.path == path:
                del self._entries[index]
                self.persist()
                return True
        return False

    def touch(self, path: str) -> bool:
        """Bump ``last_used_at`` for *path*, if registered."""
        for index, existing in enumerate(self._entries):
            if existing.path == path:
                self._entries[index] = existing.model_copy(update={"last_used_at": _utcnow()})
                self.persist()
                return True
        return False

    # -- Persistence --------------------------------------------------------

    def persist(self) -> None:
        document = _RegistryDocument(workflows=self._entries)
        atomic_write_text(self._registry_path, document.model_dump_json(indent=2) + "\n")
        logger.debug("Persisted workflow registry to %s.", self._registry_path)

    def load(self) -> None:
        """Load entries from disk; a missing file means an empty registry.

        Raises
        ------
        ValueError
            If the file exists but is not a valid registry document.
        """
        if not self._registry_path.exists():
            logger.debug("No registry file at %s — starting fresh.", self._registry_path)
            self._entries = []
            return
        try:
            document = _RegistryDocument.model_validate_json(
                self._registry_path.read_text(encoding="utf-8")
            )
        except ValidationError as exc:
            raise ValueError(f"invalid registry file {self._registry_path}: {exc}") from exc
        self._entries = list(document.workflows)
        logger.debug("Loaded %d workflow(s) from registry.", len(self._entries))
