"""
Local filesystem storage used by the orchestrator.

Any object exposing the same five methods can stand in for LocalStorage
(object stores, in-memory fakes in tests).
"""

import os
from pathlib import Path

from ..exceptions import StorageError


class LocalStorage:
    """Byte-buffer read/write for (directory, filename) locations."""

    def __init__(self, file_mode: int = 0o644, dir_mode: int = 0o755):
        self._file_mode = file_mode
        self._dir_mode = dir_mode

    @staticmethod
    def full_path(path: str, filename: str) -> Path:
        return Path(path) / filename

    def read_bytes(self, path: str, filename: str) -> bytes:
        """Read all bytes at a location."""
        location = self.full_path(path, filename)
        try:
            return location.read_bytes()
        except OSError as exc:
            raise StorageError(f"failed to read file {location}: {exc}") from exc

    def write_bytes(self, path: str, filename: str, data: bytes) -> None:
        """Write all bytes at a location, replacing any existing file."""
        location = self.full_path(path, filename)
        try:
            location.write_bytes(data)
            os.chmod(location, self._file_mode)
        except OSError as exc:
            raise StorageError(f"failed to write file {location}: {exc}") from exc

    def ensure_directory(self, path: str) -> None:
        """Create the directory (and parents) if missing."""
        try:
            Path(path).mkdir(mode=self._dir_mode, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"failed to create directory {path}: {exc}") from exc

    def exists(self, path: str, filename: str) -> bool:
        return self.full_path(path, filename).exists()

    def delete(self, path: str, filename: str) -> None:
        location = self.full_path(path, filename)
        try:
            location.unlink()
        except OSError as exc:
            raise StorageError(f"failed to delete file {location}: {exc}") from exc
