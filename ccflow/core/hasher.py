"""Content hashing for drift detection.

Digests are compared for equality only; they carry no security guarantee.
"""

from __future__ import annotations

import hashlib
from pathlib import Path


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Path) -> str:
    """SHA-256 hex digest of a file's current content.

    Raises ``OSError`` if the file cannot be read.
    """
    return sha256_hex(Path(path).read_bytes())
