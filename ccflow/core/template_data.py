"""Template context construction with permission-aware repository lists.

An agent with no grant in ``agent_permissions`` (or a grant naming no
repositories at all) sees every repository as writable; workflows created
before permissions existed keep rendering exactly as they did.  With a
grant, a repository the grant does not name is left out of every list.
"""

from __future__ import annotations

from ccflow.models.blueprint import DefaultRepo, RepoInfo, TemplateData
from ccflow.models.workflow import AgentPermission, RepoConfig, WorkflowConfig


def partition_repos(
    repos: list[RepoConfig],
    permission: AgentPermission | None,
) -> tuple[list[RepoInfo], list[RepoInfo], list[RepoInfo]]:
    """Split *repos* into ``(all_repos, write_repos, read_repos)``.

    Declared repository order is preserved in every list.  A repository
    named in both ``write`` and ``read`` counts as writable only.
    """
    all_repos: list[RepoInfo] = []
    write_repos: list[RepoInfo] = []
    read_repos: list[RepoInfo] = []
    full_access = permission is None or permission.is_empty

    for repo in repos:
        if full_access or repo.name in permission.write:
            info = RepoInfo(name=repo.name, path=repo.path, kind=repo.kind.value, can_write=True)
            write_repos.append(info)
        elif repo.name in permission.read:
            info = RepoInfo(name=repo.name, path=repo.path, kind=repo.kind.value, can_write=False)
            read_repos.append(info)
        else:
            continue
        all_repos.append(info)

    return all_repos, write_repos, read_repos


def build_template_data(config: WorkflowConfig, agent_name: str | None = None) -> TemplateData:
    """Rendering context for *config*.

    When *agent_name* is given the repository lists reflect that agent's
    grant; otherwise every repository is writable.
    """
    permission = config.permission_for(agent_name) if agent_name else None
    all_repos, write_repos, read_repos = partition_repos(config.repos, permission)

    return TemplateData(
        workflow_name=config.name,
        docs_root=config.state.root,
        docs_state_dir=config.state.state_dir,
        docs_design_dir=config.state.designs_dir,
        tracker_provider=config.mcp.tracker.value,
        vcs_provider=config.mcp.vcs.value,
        hooks_enabled=config.hooks.enabled,
        gates_enabled=config.gates.enabled,
        repos=[DefaultRepo(name=r.name, kind=r.kind.value) for r in config.repos],
        all_repos=all_repos,
        write_repos=write_repos,
        read_repos=read_repos,
    )
