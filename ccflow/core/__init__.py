"""Core engine: hashing, filesystem, blueprints, manifest and reconciliation."""
