"""Diagnostic checks behind ``ccflow doctor``.

Unlike ``status``, which compares managed files with the manifest, the
doctor looks at the structure a workflow needs to function: the marker,
a parseable ``settings.json``, hook scripts that exist and can run, and
the hub and state directories.  Every check yields a pass, warning or
failure together with a remediation hint.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from ccflow.core.blueprints import SETTINGS_ASSET
from ccflow.core.fileops import FileSystem
from ccflow.core.workspace import Workspace
from ccflow.models.blueprint import ArtifactKind
from ccflow.models.settings import ClaudeSettings

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class DoctorCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    status: CheckStatus
    message: str
    remediation: str = ""


class DoctorReport(BaseModel):
    """Ordered check results with per-status counts."""

    checks: list[DoctorCheck]

    def count(self, status: CheckStatus) -> int:
        return sum(1 for c in self.checks if c.status is status)

    @property
    def passed(self) -> int:
        return self.count(CheckStatus.PASS)

    @property
    def warnings(self) -> int:
        return self.count(CheckStatus.WARN)

    @property
    def failed(self) -> int:
        return self.count(CheckStatus.FAIL)


class Doctor:
    """Run structural health checks against one workspace.

    Parameters
    ----------
    workspace:
        The discovered workspace.
    fs:
        Filesystem collaborator used for existence and permission checks.
    """

    def __init__(self, workspace: Workspace, fs: FileSystem | None = None) -> None:
        self._workspace = workspace
        self._fs = fs or FileSystem()

    def run(self) -> DoctorReport:
        checks = [self._check_marker()]
        settings_check, settings = self._check_settings()
        checks.append(settings_check)
        if settings is not None:
            checks.extend(self._check_hook_scripts(settings))
        checks.append(self._check_directories())

        report = DoctorReport(checks=checks)
        logger.debug(
            "Doctor ran %d check(s): %d failed, %d warning(s).",
            len(checks),
            report.failed,
            report.warnings,
        )
        return report

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _check_marker(self) -> DoctorCheck:
        marker = self._workspace.config_path
        if self._fs.exists(marker):
            return DoctorCheck(
                name="Workflow marker",
                status=CheckStatus.PASS,
                message=f"workflow.yaml exists at {marker}",
            )
        return DoctorCheck(
            name="Workflow marker",
            status=CheckStatus.FAIL,
            message="workflow.yaml not found",
            remediation="Run 'ccflow run' to create a workflow",
        )

    def _check_settings(self) -> tuple[DoctorCheck, ClaudeSettings | None]:
        name = "Settings JSON"
        path = self._workspace.hub_path / SETTINGS_ASSET
        if not self._fs.exists(path):
            return (
                DoctorCheck(
                    name=name,
                    status=CheckStatus.WARN,
                    message="settings.json not found",
                    remediation="Run 'ccflow run --force' to regenerate settings.json",
                ),
                None,
            )
        try:
            raw = self._fs.read_bytes(path)
        except OSError as exc:
            return DoctorCheck(name=name, status=CheckStatus.FAIL, message=f"cannot read settings.json: {exc}"), None
        try:
            settings = ClaudeSettings.from_json(raw)
        except ValidationError as exc:
            return (
                DoctorCheck(
                    name=name,
                    status=CheckStatus.FAIL,
                    message=f"invalid settings.json: {exc.errors()[0]['msg']}",
                    remediation="Fix the JSON syntax or hook layout in settings.json",
                ),
                None,
            )
        return DoctorCheck(name=name, status=CheckStatus.PASS, message="settings.json is valid JSON"), settings

    def _registered_scripts(self, settings: ClaudeSettings) -> dict[Path, list[str]]:
        """Hook script paths mentioned in *settings*, with their events."""
        scripts: dict[Path, list[str]] = {}
        for event, groups in settings.hooks.items():
            for group in groups:
                for command in group.hooks:
                    script = Path(command.command.removeprefix("./"))
                    if not script.is_absolute():
                        script = self._workspace.hub_path / script
                    events = scripts.setdefault(script, [])
                    if event not in events:
                        events.append(event)
        return scripts

    def _check_hook_scripts(self, settings: ClaudeSettings) -> list[DoctorCheck]:
        checks: list[DoctorCheck] = []
        for script, events in self._registered_scripts(settings).items():
            name = f"Hook: {script.name}"
            if not self._fs.exists(script):
                checks.append(
                    DoctorCheck(
                        name=name,
                        status=CheckStatus.FAIL,
                        message=f"script not found: {script}",
                        remediation="Run 'ccflow upgrade' to restore managed hook scripts",
                    )
                )
            elif not self._fs.is_executable(script):
                checks.append(
                    DoctorCheck(
                        name=name,
                        status=CheckStatus.WARN,
                        message=f"script not executable: {script}",
                        remediation=f"Run 'chmod +x {script}'",
                    )
                )
            else:
                checks.append(
                    DoctorCheck(
                        name=name,
                        status=CheckStatus.PASS,
                        message=f"script exists and is executable (events: {', '.join(events)})",
                    )
                )
        return checks

    def _check_directories(self) -> DoctorCheck:
        hub = self._workspace.hub_path
        required = [hub]
        required += [hub / kind.directory for kind in ArtifactKind]
        required += [self._workspace.state_path, self._workspace.designs_path]

        missing = [str(path) for path in required if not Path(path).is_dir()]
        if not missing:
            return DoctorCheck(
                name="Required directories",
                status=CheckStatus.PASS,
                message="all required directories exist",
            )
        return DoctorCheck(
            name="Required directories",
            status=CheckStatus.FAIL,
            message=f"missing directories: {', '.join(missing)}",
            remediation="Run 'ccflow upgrade' to restore the hub, and create state directories by hand",
        )
