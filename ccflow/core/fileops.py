"""Filesystem primitives used by the generator and the upgrade engine.

Both writers create parent directories on demand and refuse to replace an
existing file unless ``overwrite=True``.  Hook scripts are written with
executable permission bits; everything else is written as a plain file.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

PLAIN_MODE = 0o644
EXECUTABLE_MODE = 0o755


class FileSystem:
    """Thin wrapper over the local filesystem.

    The upgrade engine takes an instance rather than calling ``os`` directly
    so tests can substitute a filesystem that fails on demand.
    """

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def ensure_dir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def write_plain(self, path: Path, data: bytes, *, overwrite: bool = False) -> None:
        """Write *data* to *path* with mode 0644."""
        self._write(Path(path), data, PLAIN_MODE, overwrite)

    def write_executable(self, path: Path, data: bytes, *, overwrite: bool = False) -> None:
        """Write *data* to *path* with mode 0755."""
        self._write(Path(path), data, EXECUTABLE_MODE, overwrite)

    def is_executable(self, path: Path) -> bool:
        try:
            return bool(Path(path).stat().st_mode & 0o111)
        except OSError:
            return False

    def _write(self, path: Path, data: bytes, mode: int, overwrite: bool) -> None:
        if path.exists() and not overwrite:
            raise FileExistsError(
                f"file already exists: {path} (use --force to overwrite)"
            )
        self.ensure_dir(path.parent)
        if overwrite:
            # Replaced in one rename so a failed write leaves the old bytes
            _replace_atomically(path, data, mode)
            return
        path.write_bytes(data)
        path.chmod(mode)


def _replace_atomically(path: Path, data: bytes, mode: int) -> None:
    fd, temp_name = tempfile.mkstemp(prefix=".tmp-", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        # mkstemp creates the file 0600
        os.chmod(temp_name, mode)
        os.replace(temp_name, path)
    finally:
        if os.path.exists(temp_name):
            os.unlink(temp_name)


def atomic_write_text(path: Path, content: str) -> None:
    """Write *content* so readers never observe a partially written file.

    The payload goes to a temporary file in the target directory which is
    then renamed over *path*.  The result is always mode 0644.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    _replace_atomically(path, content.encode("utf-8"), PLAIN_MODE)
