"""Unit tests for workflow scaffolding."""

from __future__ import annotations

import json
import stat

import pytest

from ccflow.core.generator import GenerateOptions, GenerationError, WorkflowGenerator
from ccflow.core.hasher import hash_file
from ccflow.core.manifest_store import ManifestStore
from ccflow.core.reconciler import UpgradeAction, UpgradeEngine
from ccflow.core.workspace import load_workspace
from ccflow.models.workflow import RepoConfig, RepoKind, Topology


def _options(root, **overrides) -> GenerateOptions:
    values = {
        "workspace_path": root,
        "workflow_name": "acme",
        "blueprint": "test-bp",
        "repos": [RepoConfig(name="frontend", path="frontend", kind=RepoKind.NODE)],
    }
    values.update(overrides)
    return GenerateOptions(**values)


class TestWorkflowGenerator:
    def test_multi_repo_layout(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"

        result = WorkflowGenerator(blueprint_manager).generate(_options(root))

        hub = root / "workflow-hub" / ".claude"
        assert result.workspace.hub_path == hub.resolve()
        assert (root / "workflow-hub" / "workflow.yaml").is_file()
        assert (hub / "agents" / "alpha-agent.md").is_file()
        assert (hub / "commands" / "plan.md").is_file()
        assert stat.S_IMODE((hub / "hooks" / "check.sh").stat().st_mode) == 0o755
        assert (root / "docs" / "workflow" / "state" / ".gitkeep").exists()
        assert (root / "docs" / "workflow" / "designs" / ".gitkeep").exists()
        assert sorted(result.written) == [
            "agents/alpha-agent.md",
            "agents/beta-agent.md",
            "commands/plan.md",
            "hooks/check.sh",
        ]

    def test_single_repo_layout(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "app"

        WorkflowGenerator(blueprint_manager).generate(_options(root, topology=Topology.SINGLE_REPO))

        assert (root / ".ccflow" / "workflow.yaml").is_file()
        assert (root / ".claude" / "agents" / "alpha-agent.md").is_file()
        assert not (root / "workflow-hub").exists()
        assert load_workspace(root).topology is Topology.SINGLE_REPO

    def test_manifest_is_seeded(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"
        result = WorkflowGenerator(blueprint_manager).generate(_options(root))
        hub = result.workspace.hub_path

        manifest = ManifestStore(hub).load()

        assert result.manifest_saved is True
        assert set(manifest.files) == set(result.written)
        for relative_path, entry in manifest.files.items():
            assert entry.digest == hash_file(hub / relative_path)

    def test_first_upgrade_after_generation_changes_nothing(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"
        WorkflowGenerator(blueprint_manager).generate(_options(root))

        report = UpgradeEngine(load_workspace(root), blueprint_manager).run()

        assert all(r.action is UpgradeAction.UNCHANGED for r in report.results)

    def test_settings_registers_hooks(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"
        result = WorkflowGenerator(blueprint_manager).generate(_options(root))

        settings = json.loads((result.workspace.hub_path / "settings.json").read_text())

        assert settings["hooks"]["Stop"][0]["hooks"][0]["command"] == "./hooks/check.sh"

    def test_hooks_disabled_leaves_settings_bare(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"
        result = WorkflowGenerator(blueprint_manager).generate(_options(root, hooks_enabled=False))

        settings = json.loads((result.workspace.hub_path / "settings.json").read_text())

        assert settings["hooks"] == {}
        assert result.workspace.config.hooks.enabled is False

    def test_refuses_existing_workflow(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"
        generator = WorkflowGenerator(blueprint_manager)
        generator.generate(_options(root))

        with pytest.raises(GenerationError, match="already exists"):
            generator.generate(_options(root))

    def test_force_regenerates(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"
        generator = WorkflowGenerator(blueprint_manager)
        generator.generate(_options(root))
        agent = root / "workflow-hub" / ".claude" / "agents" / "alpha-agent.md"
        agent.write_text("scribbles\n")

        generator.generate(_options(root, workflow_name="renamed", force=True))

        assert "renamed" in agent.read_text()
        assert load_workspace(root).config.name == "renamed"

    def test_existing_artifact_without_marker_is_an_error(self, tmp_dir, blueprint_manager):
        root = tmp_dir / "acme"
        stray = root / "workflow-hub" / ".claude" / "commands" / "plan.md"
        stray.parent.mkdir(parents=True)
        stray.write_text("mine\n")

        with pytest.raises(GenerationError, match="--force"):
            WorkflowGenerator(blueprint_manager).generate(_options(root))

        assert stray.read_text() == "mine\n"

    def test_build_config_for_single_repo_clears_hub(self, tmp_dir, blueprint_manager):
        config = WorkflowGenerator(blueprint_manager).build_config(
            _options(tmp_dir, topology=Topology.SINGLE_REPO)
        )
        assert config.paths.hub == ""
        assert config.blueprint == "test-bp"

    def test_packaged_blueprint_end_to_end(self, tmp_dir, packaged_blueprints):
        root = tmp_dir / "shop"
        result = WorkflowGenerator(packaged_blueprints).generate(_options(root, blueprint="web-dev"))

        hub = result.workspace.hub_path
        assert (hub / "agents" / "devops-agent.md").is_file()
        settings = json.loads((hub / "settings.json").read_text())
        assert settings["permissions"]["allow"] == ["Read", "Grep", "Glob"]
        post = settings["hooks"]["PostToolUse"][0]
        assert post["matcher"] == {"tools": ["Edit", "Write"]}
        assert post["hooks"][0]["command"] == "./hooks/lint-changed.sh"
