"""Tests for the structural checks behind ``ccflow doctor``."""

from __future__ import annotations

import pytest

from ccflow.core.doctor import CheckStatus, Doctor
from ccflow.core.generator import GenerateOptions, WorkflowGenerator


def _by_name(report) -> dict[str, CheckStatus]:
    return {c.name: c.status for c in report.checks}


@pytest.fixture
def generated(tmp_dir, blueprint_manager):
    result = WorkflowGenerator(blueprint_manager).generate(
        GenerateOptions(workspace_path=tmp_dir / "acme", workflow_name="acme", blueprint="test-bp")
    )
    return result.workspace


class TestDoctor:
    def test_generated_workflow_passes(self, generated):
        report = Doctor(generated).run()

        assert _by_name(report) == {
            "Workflow marker": CheckStatus.PASS,
            "Settings JSON": CheckStatus.PASS,
            "Hook: check.sh": CheckStatus.PASS,
            "Required directories": CheckStatus.PASS,
        }
        assert report.failed == report.warnings == 0

    def test_invalid_settings_json_fails(self, generated):
        (generated.hub_path / "settings.json").write_text("{not json")

        report = Doctor(generated).run()

        settings = next(c for c in report.checks if c.name == "Settings JSON")
        assert settings.status is CheckStatus.FAIL
        assert settings.remediation
        assert not any(c.name.startswith("Hook:") for c in report.checks)

    def test_missing_settings_is_a_warning(self, generated):
        (generated.hub_path / "settings.json").unlink()

        report = Doctor(generated).run()

        assert _by_name(report)["Settings JSON"] is CheckStatus.WARN
        assert report.failed == 0

    def test_missing_hook_script_fails(self, generated):
        (generated.hub_path / "hooks" / "check.sh").unlink()

        report = Doctor(generated).run()

        assert _by_name(report)["Hook: check.sh"] is CheckStatus.FAIL

    def test_non_executable_hook_is_a_warning(self, generated):
        script = generated.hub_path / "hooks" / "check.sh"
        script.chmod(0o644)

        report = Doctor(generated).run()

        hook = next(c for c in report.checks if c.name == "Hook: check.sh")
        assert hook.status is CheckStatus.WARN
        assert str(script) in hook.remediation

    def test_hook_events_are_listed(self, generated):
        report = Doctor(generated).run()

        hook = next(c for c in report.checks if c.name == "Hook: check.sh")
        assert "Stop" in hook.message

    def test_missing_state_directory_fails(self, generated):
        (generated.designs_path / ".gitkeep").unlink()
        generated.designs_path.rmdir()

        report = Doctor(generated).run()

        directories = next(c for c in report.checks if c.name == "Required directories")
        assert directories.status is CheckStatus.FAIL
        assert str(generated.designs_path) in directories.message
