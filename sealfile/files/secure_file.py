"""
SecureFile: one logical file handled by a FileManager.

Save:  data -> encrypt -> reduce -> storage.write_bytes
Load:  storage.read_bytes -> restore -> decrypt -> data
"""

import logging
import posixpath
from pathlib import PurePath
from typing import TYPE_CHECKING, Optional

from ..config import PathType
from ..exceptions import FileOperationError, SealFileError
from .file_crypto import KeyDerivingEncryptor

if TYPE_CHECKING:
    from ..compression.file_reducer import CompressionResult
    from .file_manager import FileManager


logger = logging.getLogger(__name__)


class SecureFile:
    """A file entity identified by directory path and filename."""

    def __init__(self, data: Optional[bytes], path: str, filename: str,
                 manager: "FileManager"):
        self.data = data
        self.path = str(path)
        self.filename = filename
        self.extension = PurePath(filename).suffix
        self.last_result: Optional["CompressionResult"] = None
        self._manager = manager

    def __repr__(self) -> str:
        size = None if self.data is None else len(self.data)
        return f"SecureFile(path={self.path!r}, filename={self.filename!r}, size={size})"

    # ========================================================================
    # Save / Load / Delete
    # ========================================================================

    def save_encrypted(self) -> "CompressionResult":
        """
        Encrypt, compress and write the file.

        Returns:
            Compression metrics for the stored container

        Raises:
            FileOperationError: No data, or wrapping the encryption,
                compression or storage failure
        """
        if self.data is None:
            raise FileOperationError("save", self.filename,
                                     ValueError("no data to save"))

        manager = self._manager
        try:
            encrypted = manager.encryptor.encrypt(self.data)
            container, result = manager.reducer.reduce(encrypted)
            manager.storage.ensure_directory(self.path)
            manager.storage.write_bytes(self.path, self.filename, container)
        except SealFileError as exc:
            raise FileOperationError("save", self.filename, exc) from exc

        self.last_result = result
        manager.event_logger.log_file_save(
            self.path, self.filename, len(self.data),
            result.compressed_size, result.method.name,
        )
        logger.info("saved %s (%d -> %d bytes, %s)", self.filename,
                    len(self.data), result.compressed_size, result.method.name)
        return result

    def load_decrypted(self, encryptor: Optional[KeyDerivingEncryptor] = None) -> bytes:
        """
        Read, decompress and decrypt the file into self.data.

        Args:
            encryptor: Decrypt with this encryptor instead of the manager's
                (e.g. one holding a pepper that has since been rotated)

        Returns:
            The plaintext

        Raises:
            FileOperationError: Wrapping the storage, container or
                authentication failure
        """
        manager = self._manager
        encryptor = encryptor or manager.encryptor
        try:
            container = manager.storage.read_bytes(self.path, self.filename)
            encrypted = manager.reducer.restore(container)
            data = encryptor.decrypt(encrypted)
        except SealFileError as exc:
            manager.event_logger.log_file_load(self.path, self.filename, success=False)
            raise FileOperationError("load", self.filename, exc) from exc

        self.data = data
        manager.event_logger.log_file_load(self.path, self.filename)
        logger.info("loaded %s (%d bytes)", self.filename, len(data))
        return data

    def delete(self) -> None:
        """Remove the stored file."""
        manager = self._manager
        try:
            manager.storage.delete(self.path, self.filename)
        except SealFileError as exc:
            raise FileOperationError("delete", self.filename, exc) from exc
        manager.event_logger.log_file_delete(self.path, self.filename)
        logger.info("deleted %s", self.filename)

    # ========================================================================
    # Path resolution
    # ========================================================================

    def get_full_path(self) -> str:
        return str(PurePath(self.path) / self.filename)

    def get_directory_path(self) -> str:
        return self.path

    def get_url(self) -> str:
        """HTTP URL of the file relative to the configured public dir."""
        config = self._manager.config
        public_dir = posixpath.normpath(config.public_dir)
        relative = posixpath.normpath(self.path)
        if relative == public_dir:
            relative = ""
        elif relative.startswith(public_dir + "/"):
            relative = relative[len(public_dir):]
        relative = relative.strip("/")
        if relative:
            relative = "/" + relative
        return f"{config.base_url.rstrip('/')}{relative}/{self.filename}"

    def get_path(self) -> str:
        """URL or filesystem path, depending on config.path_type."""
        if self._manager.config.path_type is PathType.HTTP:
            return self.get_url()
        return self.get_full_path()
