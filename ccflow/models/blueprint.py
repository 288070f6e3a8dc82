"""Blueprint and template-rendering models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArtifactKind(str, Enum):
    """The three kinds of templated artifact a blueprint ships.

    The kind decides the hub subdirectory, the file suffix and the write
    mode: hooks are shell scripts written executable, agents and commands
    are plain markdown.
    """

    AGENT = "agent"
    COMMAND = "command"
    HOOK = "hook"

    @property
    def directory(self) -> str:
        return f"{self.value}s"

    @property
    def suffix(self) -> str:
        return ".sh" if self is ArtifactKind.HOOK else ".md"

    @property
    def executable(self) -> bool:
        return self is ArtifactKind.HOOK

    def relative_path(self, name: str) -> str:
        """Hub-relative POSIX path, e.g. ``agents/devops-agent.md``."""
        return f"{self.directory}/{name}{self.suffix}"


# Reconciliation and generation both walk kinds in this order.
ARTIFACT_ORDER: tuple[ArtifactKind, ...] = (
    ArtifactKind.AGENT,
    ArtifactKind.COMMAND,
    ArtifactKind.HOOK,
)


class DefaultRepo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: str = "unknown"


class ArtifactDefaults(BaseModel):
    model_config = ConfigDict(frozen=True)

    defaults: list[str] = Field(default_factory=list)


class HookEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: str
    commands: list[str] = Field(default_factory=list)


class HookRegistration(BaseModel):
    """How a hook script is registered in ``settings.json``."""

    model_config = ConfigDict(frozen=True)

    script: str
    events: list[HookEvent] = Field(default_factory=list)


class MCPSuggestions(BaseModel):
    model_config = ConfigDict(frozen=True)

    vcs: list[str] = Field(default_factory=list)
    tracker: list[str] = Field(default_factory=list)
    deploy: list[str] = Field(default_factory=list)


class Blueprint(BaseModel):
    """A named bundle of default agent, command and hook templates."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    display_name: str
    description: str = ""
    default_topology: str = "multi-repo"
    default_repos: list[DefaultRepo] = Field(default_factory=list)
    agents: ArtifactDefaults = Field(default_factory=ArtifactDefaults)
    commands: ArtifactDefaults = Field(default_factory=ArtifactDefaults)
    hooks: ArtifactDefaults = Field(default_factory=ArtifactDefaults)
    hooks_manifest: dict[str, HookRegistration] = Field(default_factory=dict)
    mcp_suggestions: MCPSuggestions = Field(default_factory=MCPSuggestions)

    def defaults_for(self, kind: ArtifactKind) -> list[str]:
        """Declared artifact names of *kind*, in blueprint order."""
        return {
            ArtifactKind.AGENT: self.agents.defaults,
            ArtifactKind.COMMAND: self.commands.defaults,
            ArtifactKind.HOOK: self.hooks.defaults,
        }[kind]


class RepoInfo(BaseModel):
    """A repository as seen by one agent template."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    kind: str
    can_write: bool = True


class TemplateData(BaseModel):
    """Context handed to every template render.

    ``all_repos``, ``write_repos`` and ``read_repos`` are permission-aware:
    for an agent with a configured grant they hold only the repositories
    the grant names.  See :mod:`ccflow.core.template_data`.
    """

    model_config = ConfigDict(frozen=True)

    org_name: str = ""
    workflow_name: str = ""
    docs_root: str = ""
    docs_state_dir: str = ""
    docs_design_dir: str = ""
    tracker_provider: str = "none"
    vcs_provider: str = "none"
    hooks_enabled: bool = True
    gates_enabled: bool = True
    repos: list[DefaultRepo] = Field(default_factory=list)
    all_repos: list[RepoInfo] = Field(default_factory=list)
    write_repos: list[RepoInfo] = Field(default_factory=list)
    read_repos: list[RepoInfo] = Field(default_factory=list)

    def as_context(self) -> dict[str, Any]:
        return self.model_dump()
