"""ccflow data models — Pydantic v2."""

from ccflow.models.blueprint import (
    ARTIFACT_ORDER,
    ArtifactKind,
    Blueprint,
    HookRegistration,
    RepoInfo,
    TemplateData,
)
from ccflow.models.manifest import ManagedFile, ManagedFilesManifest
from ccflow.models.settings import ClaudeSettings, register_hook
from ccflow.models.workflow import (
    AgentPermission,
    RepoConfig,
    RepoKind,
    Topology,
    WorkflowConfig,
)

__all__ = [
    # blueprint
    "ARTIFACT_ORDER",
    "ArtifactKind",
    "Blueprint",
    "HookRegistration",
    "RepoInfo",
    "TemplateData",
    # manifest
    "ManagedFile",
    "ManagedFilesManifest",
    # settings
    "ClaudeSettings",
    "register_hook",
    # workflow
    "AgentPermission",
    "RepoConfig",
    "RepoKind",
    "Topology",
    "WorkflowConfig",
]
