"""Workflow configuration models — the contents of ``workflow.yaml``."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

WORKFLOW_CONFIG_VERSION = 1


class Topology(str, Enum):
    """Where the shared ``.claude`` tree lives.

    * ``multi-repo`` — in a ``workflow-hub`` directory beside the repos.
    * ``single-repo`` — directly inside the one repository.
    """

    MULTI_REPO = "multi-repo"
    SINGLE_REPO = "single-repo"


class RepoKind(str, Enum):
    NODE = "node"
    JAVA = "java"
    GO = "go"
    PYTHON = "python"
    SWIFT = "swift"
    TERRAFORM = "terraform"
    DOCS = "docs"
    UNKNOWN = "unknown"


class VCSProvider(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    NONE = "none"


class TrackerProvider(str, Enum):
    LINEAR = "linear"
    JIRA = "jira"
    NONE = "none"


class DeployProvider(str, Enum):
    ARGOCD = "argocd"
    NONE = "none"


class RepoConfig(BaseModel):
    """A repository participating in the workflow."""

    name: str
    path: str
    kind: RepoKind = RepoKind.UNKNOWN


class PathsConfig(BaseModel):
    hub: str = "workflow-hub"
    docs: str = "docs"


class StateConfig(BaseModel):
    root: str = "docs/workflow"
    state_dir: str = "docs/workflow/state"
    designs_dir: str = "docs/workflow/designs"


class ToggleConfig(BaseModel):
    enabled: bool = True


class MCPConfig(BaseModel):
    """MCP integration preferences (guidance for templates only)."""

    vcs: VCSProvider = VCSProvider.NONE
    tracker: TrackerProvider = TrackerProvider.NONE
    deploy: DeployProvider = DeployProvider.NONE


class AgentPermission(BaseModel):
    """Repositories an agent may modify (``write``) or only inspect (``read``)."""

    write: list[str] = Field(default_factory=list)
    read: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.write and not self.read


class WorkflowConfig(BaseModel):
    """Parsed ``workflow.yaml``.

    Unknown keys are ignored so markers written by newer versions still load.
    """

    model_config = ConfigDict(extra="ignore")

    version: int = WORKFLOW_CONFIG_VERSION
    name: str
    topology: Topology = Topology.MULTI_REPO
    blueprint: str = "web-dev"
    paths: PathsConfig = Field(default_factory=PathsConfig)
    state: StateConfig = Field(default_factory=StateConfig)
    repos: list[RepoConfig] = Field(default_factory=list)
    hooks: ToggleConfig = Field(default_factory=ToggleConfig)
    gates: ToggleConfig = Field(default_factory=ToggleConfig)
    mcp: MCPConfig = Field(default_factory=MCPConfig)
    agent_permissions: dict[str, AgentPermission] = Field(default_factory=dict)

    @field_validator("repos", "agent_permissions", mode="before")
    @classmethod
    def _blank_as_empty(cls, value, info):
        # A key left blank in YAML loads as None
        if value is None:
            return [] if info.field_name == "repos" else {}
        return value

    def repo_names(self) -> list[str]:
        return [repo.name for repo in self.repos]

    def permission_for(self, agent_name: str) -> AgentPermission | None:
        return self.agent_permissions.get(agent_name)
