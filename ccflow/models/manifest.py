"""Managed-file manifest models.

The manifest records, for every file the tool generated, which blueprint
template produced it and the digest of the bytes the tool last wrote.  The
JSON keys (``version``, ``template_id``, ``hash``) match the format written
by earlier ccflow releases.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_SCHEMA_VERSION = 1


class ManagedFile(BaseModel):
    """One tracked artifact, keyed in the manifest by its relative path."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    template_id: str  # "<blueprint_id>/<relative_path>"
    digest: str = Field(alias="hash")
    producer_version: str = Field(default="", alias="version")


class ManagedFilesManifest(BaseModel):
    """Every file ccflow manages inside one hub directory.

    Unknown keys are ignored on load so manifests written by newer versions
    that only add fields remain readable.
    """

    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(default=MANIFEST_SCHEMA_VERSION, alias="version")
    files: dict[str, ManagedFile] = Field(default_factory=dict)

    def get(self, relative_path: str) -> ManagedFile | None:
        return self.files.get(relative_path)

    def record(
        self,
        relative_path: str,
        *,
        template_id: str,
        digest: str,
        producer_version: str,
    ) -> ManagedFile:
        """Insert or replace the entry for *relative_path*."""
        entry = ManagedFile(
            template_id=template_id,
            digest=digest,
            producer_version=producer_version,
        )
        self.files[relative_path] = entry
        return entry

    def to_json(self) -> str:
        """Deterministic JSON: sorted keys, two-space indent, trailing newline."""
        payload = self.model_dump(mode="json", by_alias=True)
        return json.dumps(payload, indent=2, sort_keys=True) + "\n"
