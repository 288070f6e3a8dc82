"""Per-invocation CLI state, carried on ``typer.Context.obj``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import typer

from ccflow.config import settings
from ccflow.core.blueprints import BlueprintManager
from ccflow.core.registry import WorkflowRegistry
from ccflow.core.workspace import Workspace, discover


@dataclass
class CliContext:
    """Resolved global options shared by every command."""

    workspace: Path | None = None
    registry_path: Path = field(default_factory=lambda: settings.registry_path)
    verbose: bool = False

    def discover(self) -> Workspace:
        return discover(self.workspace)

    def blueprints(self) -> BlueprintManager:
        return BlueprintManager()

    def registry(self) -> WorkflowRegistry:
        return WorkflowRegistry(self.registry_path)


def get_context(ctx: typer.Context) -> CliContext:
    if isinstance(ctx.obj, CliContext):
        return ctx.obj
    return CliContext(workspace=settings.workspace)
