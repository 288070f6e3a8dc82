"""Blueprint catalog and template rendering.

Blueprints ship inside the package under ``ccflow/blueprints/<id>/``::

    blueprint.yaml
    assets/settings.json
    assets/agents/<name>.md
    assets/commands/<name>.md
    assets/hooks/<name>.sh

Every asset is rendered as a Jinja2 template against a ``TemplateData``
context.  Undefined variables are errors, so a template that references a
field the context lacks fails loudly instead of rendering blanks.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path

import jinja2
import yaml
from pydantic import ValidationError

from ccflow.models.blueprint import ArtifactKind, Blueprint, TemplateData

logger = logging.getLogger(__name__)

BLUEPRINT_FILENAME = "blueprint.yaml"
ASSETS_DIR = "assets"
SETTINGS_ASSET = "settings.json"


class BlueprintError(RuntimeError):
    """Raised when a blueprint definition cannot be loaded."""


class BlueprintNotFoundError(BlueprintError):
    """Raised when a workflow names a blueprint that is not installed."""

    def __init__(self, blueprint_id: str, available: list[str]) -> None:
        self.blueprint_id = blueprint_id
        self.available = available
        super().__init__(
            f"blueprint not found: {blueprint_id} "
            f"(available: {', '.join(available) or 'none'})"
        )


class TemplateRenderError(RuntimeError):
    """Raised when an artifact template is missing or fails to render."""


def _packaged_root() -> Path:
    return Path(str(resources.files("ccflow") / "blueprints"))


class BlueprintManager:
    """Read-only access to the installed blueprints.

    Parameters
    ----------
    root:
        Directory holding one subdirectory per blueprint.  Defaults to the
        blueprints bundled with the package.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = Path(root) if root is not None else _packaged_root()
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self._root)),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self._blueprints: dict[str, Blueprint] = {}
        self._load_all()

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def _load_all(self) -> None:
        if not self._root.is_dir():
            raise BlueprintError(f"blueprint directory not found: {self._root}")
        for entry in sorted(self._root.iterdir()):
            manifest = entry / BLUEPRINT_FILENAME
            if not manifest.is_file():
                continue
            blueprint = self._load_blueprint(manifest)
            self._blueprints[blueprint.id] = blueprint
        logger.debug("Loaded %d blueprint(s) from %s.", len(self._blueprints), self._root)

    @staticmethod
    def _load_blueprint(manifest: Path) -> Blueprint:
        try:
            raw = yaml.safe_load(manifest.read_text(encoding="utf-8")) or {}
            return Blueprint.model_validate(raw)
        except (OSError, yaml.YAMLError, ValidationError) as exc:
            raise BlueprintError(f"failed to load {manifest}: {exc}") from exc

    def list(self) -> list[Blueprint]:
        """All blueprints, sorted by id."""
        return [self._blueprints[key] for key in sorted(self._blueprints)]

    def get(self, blueprint_id: str) -> Blueprint:
        """Return the blueprint called *blueprint_id*.

        Raises
        ------
        BlueprintNotFoundError
            If no such blueprint is installed.
        """
        blueprint = self._blueprints.get(blueprint_id)
        if blueprint is None:
            raise BlueprintNotFoundError(blueprint_id, sorted(self._blueprints))
        return blueprint

    def list_default_artifacts(self, blueprint_id: str, kind: ArtifactKind) -> list[str]:
        """Names of the artifacts of *kind* the blueprint declares, in order."""
        return list(self.get(blueprint_id).defaults_for(kind))

    def has_artifact(self, blueprint_id: str, kind: ArtifactKind, name: str) -> bool:
        return (self._root / self._artifact_template(blueprint_id, kind, name)).is_file()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @staticmethod
    def _artifact_template(blueprint_id: str, kind: ArtifactKind, name: str) -> str:
        # Jinja template names always use forward slashes
        return f"{blueprint_id}/{ASSETS_DIR}/{kind.relative_path(name)}"

    def render_artifact(
        self,
        blueprint_id: str,
        kind: ArtifactKind,
        name: str,
        data: TemplateData,
    ) -> bytes:
        """Render one agent, command or hook template.

        Raises
        ------
        TemplateRenderError
            If the template is missing or rendering fails.
        """
        template_name = self._artifact_template(blueprint_id, kind, name)
        try:
            template = self._env.get_template(template_name)
            rendered = template.render(**data.as_context())
        except jinja2.TemplateNotFound as exc:
            raise TemplateRenderError(f"template not found: {template_name}") from exc
        except UnicodeDecodeError as exc:
            raise TemplateRenderError(f"template is not valid UTF-8: {template_name}") from exc
        except jinja2.TemplateError as exc:
            raise TemplateRenderError(f"failed to render {template_name}: {exc}") from exc
        except Exception as exc:
            # Errors raised by expressions inside the template itself
            raise TemplateRenderError(f"failed to render {template_name}: {exc!r}") from exc
        return rendered.encode("utf-8")

    def get_asset(self, blueprint_id: str, asset_path: str) -> bytes:
        """Raw bytes of a non-templated asset such as ``settings.json``."""
        path = self._root / blueprint_id / ASSETS_DIR / asset_path
        try:
            return path.read_bytes()
        except OSError as exc:
            raise BlueprintError(f"asset not found: {blueprint_id}/{asset_path}") from exc
