"""Runtime configuration — env-driven.

Settings are read from ``CCFLOW_*`` environment variables or a ``.env``
file in the current directory.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_registry_path() -> Path:
    return Path.home() / ".ccflow" / "registry.json"


class CcflowSettings(BaseSettings):
    """Process-wide settings with environment variable overrides.

    Examples
    --------
    Point every command at a specific workspace::

        export CCFLOW_WORKSPACE=~/src/acme
        export CCFLOW_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CCFLOW_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Workspace override; when unset, discovery walks up from the cwd
    workspace: Path | None = None

    # Global workflow registry
    registry_path: Path = Field(default_factory=_default_registry_path)

    log_level: str = "WARNING"


# Module-level singleton — import as `from ccflow.config import settings`
settings = CcflowSettings()
