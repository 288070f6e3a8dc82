"""Shared test fixtures for ccflow."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from ccflow.core.blueprints import BlueprintManager
from ccflow.core.workspace import Workspace, load_workspace, save_config
from ccflow.models.blueprint import ArtifactKind
from ccflow.models.workflow import RepoConfig, RepoKind, WorkflowConfig

TEST_BLUEPRINT_ID = "test-bp"

AGENT_TEMPLATE = """# {name} for {{{{ workflow_name }}}}
{{% for repo in write_repos %}}write: {{{{ repo.name }}}}
{{% endfor %}}{{% for repo in read_repos %}}read: {{{{ repo.name }}}}
{{% endfor %}}"""
COMMAND_TEMPLATE = "Command {name} for {{{{ workflow_name }}}}\n"
HOOK_TEMPLATE = "#!/bin/sh\necho {name}\n"


def write_template(root: Path, kind: ArtifactKind, name: str, text: str, blueprint_id: str = TEST_BLUEPRINT_ID) -> Path:
    """Write one artifact template into a blueprint directory."""
    path = root / blueprint_id / "assets" / kind.relative_path(name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_blueprint(
    root: Path,
    blueprint_id: str = TEST_BLUEPRINT_ID,
    *,
    agents: tuple[str, ...] = ("alpha-agent", "beta-agent"),
    commands: tuple[str, ...] = ("plan",),
    hooks: tuple[str, ...] = ("check",),
) -> Path:
    """Create a small blueprint on disk and return the blueprints root."""
    bp_dir = root / blueprint_id
    (bp_dir / "assets").mkdir(parents=True, exist_ok=True)
    definition = {
        "id": blueprint_id,
        "display_name": "Test Blueprint",
        "description": "Blueprint used by the test suite.",
        "agents": {"defaults": list(agents)},
        "commands": {"defaults": list(commands)},
        "hooks": {"defaults": list(hooks)},
        "hooks_manifest": {
            name: {"script": f"hooks/{name}.sh", "events": [{"event": "Stop"}]} for name in hooks
        },
    }
    (bp_dir / "blueprint.yaml").write_text(yaml.safe_dump(definition), encoding="utf-8")
    (bp_dir / "assets" / "settings.json").write_text('{"hooks": {}}\n', encoding="utf-8")
    for name in agents:
        write_template(root, ArtifactKind.AGENT, name, AGENT_TEMPLATE.format(name=name), blueprint_id)
    for name in commands:
        write_template(root, ArtifactKind.COMMAND, name, COMMAND_TEMPLATE.format(name=name), blueprint_id)
    for name in hooks:
        write_template(root, ArtifactKind.HOOK, name, HOOK_TEMPLATE.format(name=name), blueprint_id)
    return root


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def blueprint_root(tmp_dir: Path) -> Path:
    """Provide a blueprints directory holding the ``test-bp`` blueprint."""
    return write_blueprint(tmp_dir / "blueprints")


@pytest.fixture
def blueprint_manager(blueprint_root: Path) -> BlueprintManager:
    """Provide a BlueprintManager over the test blueprint."""
    return BlueprintManager(blueprint_root)


@pytest.fixture
def packaged_blueprints() -> BlueprintManager:
    """Provide a BlueprintManager over the blueprints shipped with ccflow."""
    return BlueprintManager()


# ---------------------------------------------------------------------------
# Workflow config and workspace factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_config() -> Callable[..., WorkflowConfig]:
    """Factory fixture: build a WorkflowConfig with two repositories."""

    def _factory(**overrides: Any) -> WorkflowConfig:
        defaults: dict[str, Any] = {
            "name": "acme",
            "blueprint": TEST_BLUEPRINT_ID,
            "repos": [
                RepoConfig(name="frontend", path="frontend", kind=RepoKind.NODE),
                RepoConfig(name="backend", path="backend", kind=RepoKind.PYTHON),
            ],
        }
        defaults.update(overrides)
        return WorkflowConfig(**defaults)

    return _factory


@pytest.fixture
def make_workspace(tmp_dir: Path, make_config: Callable[..., WorkflowConfig]) -> Callable[..., Workspace]:
    """Factory fixture: write a multi-repo ``workflow.yaml`` and load it.

    No templates are generated; the hub starts empty.
    """

    def _factory(name: str = "ws", **config_overrides: Any) -> Workspace:
        root = tmp_dir / name
        config = make_config(**config_overrides)
        save_config(root / "workflow-hub" / "workflow.yaml", config)
        return load_workspace(root)

    return _factory


@pytest.fixture
def workspace(make_workspace: Callable[..., Workspace]) -> Workspace:
    """Provide an empty multi-repo workspace using the test blueprint."""
    return make_workspace()


@pytest.fixture
def set_template(blueprint_root: Path) -> Callable[[ArtifactKind, str, str], BlueprintManager]:
    """Factory fixture: rewrite one test template and return a fresh manager.

    A new manager is returned so no cached template survives the change.
    """

    def _set(kind: ArtifactKind, name: str, text: str) -> BlueprintManager:
        write_template(blueprint_root, kind, name, text)
        return BlueprintManager(blueprint_root)

    return _set
