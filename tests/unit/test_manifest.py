"""Unit tests for the managed-file manifest model and its store."""

from __future__ import annotations

import json

from ccflow.core.manifest_store import MANIFEST_FILENAME, ManifestStore
from ccflow.models.manifest import ManagedFilesManifest


class TestManifestModel:
    def test_empty_manifest(self):
        manifest = ManagedFilesManifest()
        assert manifest.schema_version == 1
        assert manifest.files == {}
        assert manifest.get("agents/a.md") is None

    def test_record_replaces_existing_entry(self):
        manifest = ManagedFilesManifest()
        manifest.record("agents/a.md", template_id="bp/agents/a.md", digest="1", producer_version="0.1")
        manifest.record("agents/a.md", template_id="bp/agents/a.md", digest="2", producer_version="0.2")

        assert len(manifest.files) == 1
        assert manifest.get("agents/a.md").digest == "2"
        assert manifest.get("agents/a.md").producer_version == "0.2"

    def test_json_uses_compatible_keys(self):
        manifest = ManagedFilesManifest()
        manifest.record("hooks/h.sh", template_id="bp/hooks/h.sh", digest="abc", producer_version="1.0")

        payload = json.loads(manifest.to_json())

        assert payload == {
            "version": 1,
            "files": {"hooks/h.sh": {"template_id": "bp/hooks/h.sh", "hash": "abc", "version": "1.0"}},
        }

    def test_loads_json_written_by_earlier_releases(self):
        raw = json.dumps(
            {
                "version": 1,
                "files": {"agents/a.md": {"template_id": "web-dev/agents/a.md", "hash": "ff", "version": "0.9"}},
            }
        )
        manifest = ManagedFilesManifest.model_validate_json(raw)
        assert manifest.get("agents/a.md").digest == "ff"
        assert manifest.get("agents/a.md").producer_version == "0.9"


class TestManifestStore:
    def test_missing_file_loads_empty(self, tmp_dir):
        assert ManifestStore(tmp_dir).load().files == {}

    def test_corrupt_file_loads_empty(self, tmp_dir):
        (tmp_dir / MANIFEST_FILENAME).write_text("{not json")
        assert ManifestStore(tmp_dir).load().files == {}

    def test_wrong_shape_loads_empty(self, tmp_dir):
        (tmp_dir / MANIFEST_FILENAME).write_text('{"files": ["a", "b"]}')
        assert ManifestStore(tmp_dir).load().files == {}

    def test_save_then_load(self, tmp_dir):
        store = ManifestStore(tmp_dir / ".claude")
        manifest = ManagedFilesManifest()
        manifest.record("commands/c.md", template_id="bp/commands/c.md", digest="d", producer_version="1")

        assert store.save(manifest) is True
        assert store.path == tmp_dir / ".claude" / MANIFEST_FILENAME
        assert store.load() == manifest

    def test_save_failure_returns_false(self, tmp_dir):
        blocker = tmp_dir / "not-a-dir"
        blocker.write_text("file in the way")

        assert ManifestStore(blocker).save(ManagedFilesManifest()) is False
