"""Unit tests for workspace discovery and ``workflow.yaml`` persistence."""

from __future__ import annotations

import pytest

from ccflow.core.workspace import (
    WorkflowConfigError,
    WorkspaceNotFoundError,
    discover,
    dump_config,
    load_config,
    load_workspace,
    save_config,
)
from ccflow.models.workflow import AgentPermission, Topology


class TestDiscovery:
    def test_walks_up_to_multi_repo_marker(self, workspace):
        nested = workspace.root / "frontend" / "src" / "components"
        nested.mkdir(parents=True)

        found = discover(start=nested)

        assert found.root == workspace.root
        assert found.topology is Topology.MULTI_REPO
        assert found.hub_path == workspace.root / "workflow-hub" / ".claude"

    def test_single_repo_marker(self, tmp_dir, make_config):
        root = tmp_dir / "app"
        save_config(root / ".ccflow" / "workflow.yaml", make_config(topology=Topology.SINGLE_REPO))

        found = discover(start=root)

        assert found.topology is Topology.SINGLE_REPO
        assert found.hub_path == root.resolve() / ".claude"

    def test_multi_repo_marker_wins_in_same_directory(self, workspace, make_config):
        save_config(workspace.root / ".ccflow" / "workflow.yaml", make_config(name="other"))

        found = discover(start=workspace.root)

        assert found.topology is Topology.MULTI_REPO
        assert found.config.name == "acme"

    def test_nothing_found(self, tmp_dir):
        with pytest.raises(WorkspaceNotFoundError, match="ccflow run"):
            discover(start=tmp_dir)

    def test_override_skips_walk(self, workspace, tmp_dir):
        found = discover(workspace.root, start=tmp_dir)
        assert found.root == workspace.root

    def test_override_accepts_marker_path(self, workspace):
        found = load_workspace(workspace.config_path)
        assert found.root == workspace.root
        assert found.topology is Topology.MULTI_REPO

    def test_override_without_marker(self, tmp_dir):
        with pytest.raises(WorkspaceNotFoundError, match="no workflow.yaml"):
            load_workspace(tmp_dir)

    def test_docs_paths(self, workspace):
        assert workspace.state_path == workspace.root / "docs" / "workflow" / "state"
        assert workspace.designs_path == workspace.root / "docs" / "workflow" / "designs"


class TestConfigFiles:
    def test_round_trip_preserves_permissions(self, tmp_dir, make_config):
        config = make_config(agent_permissions={"a": AgentPermission(write=["frontend"])})
        path = tmp_dir / "workflow.yaml"

        save_config(path, config)

        assert load_config(path) == config

    def test_dump_omits_empty_permissions(self, make_config):
        text = dump_config(make_config())
        assert "agent_permissions" not in text
        assert text.startswith("version: 1\nname: acme\n")

    def test_unknown_keys_are_ignored(self, tmp_dir):
        path = tmp_dir / "workflow.yaml"
        path.write_text("name: acme\nfuture_setting: true\n")
        assert load_config(path).name == "acme"

    def test_blank_repos_and_permissions_load_empty(self, tmp_dir):
        path = tmp_dir / "workflow.yaml"
        path.write_text("name: acme\nrepos:\nagent_permissions:\n")

        config = load_config(path)

        assert config.repos == []
        assert config.agent_permissions == {}

    def test_invalid_yaml(self, tmp_dir):
        path = tmp_dir / "workflow.yaml"
        path.write_text("name: [broken\n")
        with pytest.raises(WorkflowConfigError, match="failed to parse"):
            load_config(path)

    def test_not_a_mapping(self, tmp_dir):
        path = tmp_dir / "workflow.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(WorkflowConfigError, match="expected a mapping"):
            load_config(path)

    def test_missing_name(self, tmp_dir):
        path = tmp_dir / "workflow.yaml"
        path.write_text("blueprint: web-dev\n")
        with pytest.raises(WorkflowConfigError, match="invalid workflow config"):
            load_config(path)
