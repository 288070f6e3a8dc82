"""Removal of a workflow's on-disk artifacts, behind ``ccflow remove``.

Planning and execution are separate so the CLI can show the plan, honour
``--dry-run`` and ask for confirmation before anything is deleted.

What a workflow owns:

- multi-repo: the whole hub directory (``workflow-hub/`` by default), which
  holds the marker and the shared ``.claude`` tree
- single-repo: ``.claude/`` and ``.ccflow/`` inside the repository
- both: the workflow state directory (``docs/workflow`` by default) unless
  the caller keeps the docs

Repository source directories are never touched.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from ccflow.core.workspace import CLAUDE_DIR, SINGLE_REPO_DIR, Workspace
from ccflow.models.workflow import Topology

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemovalItem:
    path: Path
    description: str


@dataclass(frozen=True)
class RemovalOutcome:
    item: RemovalItem
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def plan_removal(workspace: Workspace, *, keep_docs: bool = False) -> list[RemovalItem]:
    """List the directories ``remove`` would delete, in deletion order.

    Only directories that currently exist are included.
    """
    root = workspace.root
    config = workspace.config
    candidates: list[tuple[str, str]] = []

    if workspace.topology is Topology.MULTI_REPO:
        candidates.append((config.paths.hub, f"{config.paths.hub}/"))
    else:
        candidates.append((CLAUDE_DIR, f"{CLAUDE_DIR}/"))
        candidates.append((SINGLE_REPO_DIR, f"{SINGLE_REPO_DIR}/"))

    if not keep_docs:
        candidates.append((config.state.root, f"{config.state.root}/"))

    return [
        RemovalItem(path=root / relative, description=description)
        for relative, description in candidates
        if relative and (root / relative).is_dir() and (root / relative).resolve() != root.resolve()
    ]


def execute_removal(items: list[RemovalItem]) -> list[RemovalOutcome]:
    """Delete each planned item, continuing past individual failures."""
    outcomes: list[RemovalOutcome] = []
    for item in items:
        try:
            shutil.rmtree(item.path)
        except OSError as exc:
            logger.warning("Failed to remove %s: %s", item.path, exc)
            outcomes.append(RemovalOutcome(item=item, error=str(exc)))
        else:
            logger.info("Removed %s.", item.path)
            outcomes.append(RemovalOutcome(item=item))
    return outcomes
