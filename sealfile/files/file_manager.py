"""
File Codec Orchestrator

Owns the secret material, the compression engine and the storage
collaborator, and exposes single-file and batch operations on top of
SecureFile.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Union

from ..batch.batch_processor import BatchProcessor
from ..compression.file_reducer import FileReducer
from ..config import SealConfig
from ..exceptions import ConfigurationError, FileOperationError, SealFileError
from ..integration.event_logger import EventLogger
from .file_crypto import KeyDerivingEncryptor
from .secure_file import SecureFile
from .storage import LocalStorage


logger = logging.getLogger(__name__)


@dataclass
class FileOperation:
    """Input and outcome of one batch save/load/re-encrypt."""
    data: Optional[bytes]
    path: str
    filename: str
    error: Optional[BaseException] = None


@dataclass
class CopyOptions:
    decrypt_before_copy: bool = False
    overwrite_existing: bool = False
    create_directories: bool = True


@dataclass
class CopyOperation:
    source_path: str
    source_filename: str
    dest_path: str
    dest_filename: str
    options: CopyOptions = field(default_factory=CopyOptions)


@dataclass
class CopyResult:
    source_path: str
    source_filename: str
    dest_path: str
    dest_filename: str
    success: bool
    error: Optional[BaseException] = None


class FileManager:
    """
    Save/load encrypted, compressed files.

    Example:
        >>> config = SealConfig(encryption_key="k" * 32, pepper="pepper")
        >>> fm = FileManager(config)
        >>> _ = fm.save_data_as_secure_file(b"hello", "/tmp/vault", "a.bin")
        >>> fm.load_secure_file_from_disk("/tmp/vault", "a.bin").data
        b'hello'
    """

    def __init__(self, config: SealConfig,
                 storage: Optional[LocalStorage] = None,
                 reducer: Optional[FileReducer] = None,
                 event_logger: Optional[EventLogger] = None):
        """
        Args:
            config: Secrets and codec settings (required)
            storage: Storage collaborator (default: LocalStorage)
            reducer: Compression engine (default: built from config)
            event_logger: Audit trail (default: new in-memory EventLogger)

        Raises:
            ConfigurationError: If config is missing
        """
        if config is None:
            raise ConfigurationError("config with encryption key and pepper is required")
        self._config = config
        self._encryptor = self._build_encryptor(config)
        self._reducer = reducer or FileReducer(config.compression_method,
                                               config.compression_level)
        self._storage = storage or LocalStorage()
        self._events = event_logger or EventLogger()

    @staticmethod
    def _build_encryptor(config: SealConfig) -> KeyDerivingEncryptor:
        return KeyDerivingEncryptor(config.encryption_key, config.pepper,
                                    iterations=config.iterations)

    @property
    def config(self) -> SealConfig:
        return self._config

    @property
    def encryptor(self) -> KeyDerivingEncryptor:
        return self._encryptor

    @property
    def reducer(self) -> FileReducer:
        return self._reducer

    @property
    def storage(self) -> LocalStorage:
        return self._storage

    @property
    def event_logger(self) -> EventLogger:
        return self._events

    # ========================================================================
    # Single files
    # ========================================================================

    def new_secure_file(self, data: Optional[bytes], path: str,
                        filename: str) -> SecureFile:
        return SecureFile(data, path, filename, self)

    def save_data_as_secure_file(self, data: bytes, path: str,
                                 filename: str) -> SecureFile:
        """Encrypt, compress and store raw data."""
        secure_file = self.new_secure_file(data, path, filename)
        secure_file.save_encrypted()
        return secure_file

    def load_secure_file_from_disk(self, path: str, filename: str) -> SecureFile:
        """Load and decrypt a stored file."""
        secure_file = self.new_secure_file(None, path, filename)
        secure_file.load_decrypted()
        return secure_file

    def delete_file(self, path: str, filename: str) -> None:
        self.new_secure_file(None, path, filename).delete()

    # ========================================================================
    # Secrets
    # ========================================================================

    def update_config(self, config: SealConfig) -> None:
        """
        Replace the configuration.

        A new encryptor is built only when the key, pepper or iteration
        count changed; a new reducer only when method or level changed.
        """
        if config is None:
            raise ConfigurationError("config with encryption key and pepper is required")
        old = self._config
        key_changed = config.encryption_key != old.encryption_key
        pepper_changed = config.pepper != old.pepper
        if (not self._encryptor.uses_secret(config.encryption_key, config.pepper) or
                config.iterations != self._encryptor.iterations):
            self._encryptor = self._build_encryptor(config)
            self._events.log_secret_update(key_changed, pepper_changed)
            logger.info("encryptor replaced (key changed: %s, pepper changed: %s)",
                        key_changed, pepper_changed)
        if (config.compression_method != old.compression_method or
                config.compression_level != old.compression_level):
            # Pre-filter is not recorded in the header; keep it for stored files
            current = self._reducer
            self._reducer = FileReducer(config.compression_method,
                                        config.compression_level,
                                        chunk_size=current.chunk_size,
                                        enable_pre_filter=current.enable_pre_filter,
                                        enable_post_opt=current.enable_post_opt)
        self._config = config

    def update_secret(self, encryption_key: Union[str, bytes, None] = None,
                      pepper: Union[str, bytes, None] = None) -> None:
        """Swap key and/or pepper; no-op if neither changed."""
        self.update_config(self._config.with_secret(encryption_key, pepper))

    def verify_pepper(self, pepper: Union[str, bytes]) -> bool:
        return self._encryptor.verify_pepper(pepper)

    def rotate_pepper(self, new_pepper: Union[str, bytes]) -> None:
        """
        Switch to a new pepper for future saves.

        Files written under the old pepper must be migrated with
        re_encrypt_file(..., previous_pepper=old).
        """
        self._encryptor.rotate_pepper(new_pepper)
        self._config = replace(self._config, pepper=new_pepper)
        self._events.log_pepper_rotation()
        logger.info("pepper rotated")

    def re_encrypt_file(self, path: str, filename: str,
                        previous_pepper: Union[str, bytes, None] = None) -> SecureFile:
        """
        Load a file and save it again under the current secret.

        Args:
            path: Directory of the file
            filename: File name
            previous_pepper: Pepper the file was written with, if it has
                been rotated since

        Raises:
            FileOperationError: If loading or saving fails
        """
        previous = None
        if previous_pepper is not None:
            previous = KeyDerivingEncryptor(self._config.encryption_key, previous_pepper,
                                            iterations=self._config.iterations)
        secure_file = self.new_secure_file(None, path, filename)
        try:
            secure_file.load_decrypted(encryptor=previous)
            secure_file.save_encrypted()
        except FileOperationError as exc:
            raise FileOperationError("re-encrypt", filename, exc.cause) from exc
        self._events.log_file_reencrypt(path, filename)
        return secure_file

    # ========================================================================
    # Copy
    # ========================================================================

    def copy_file_to_new_location(self, source_path: str, source_filename: str,
                                  dest_path: str, dest_filename: str,
                                  options: Optional[CopyOptions] = None) -> None:
        """
        Copy a stored file, either as-is or decrypted to plaintext.

        Raises:
            FileOperationError: Destination exists (without overwrite) or
                any read/decrypt/write failure
        """
        options = options or CopyOptions()
        storage = self._storage
        try:
            if options.create_directories:
                storage.ensure_directory(dest_path)
            if not options.overwrite_existing and storage.exists(dest_path, dest_filename):
                raise FileOperationError(
                    "copy", source_filename,
                    FileExistsError(f"destination file already exists: "
                                    f"{storage.full_path(dest_path, dest_filename)}"),
                )
            if options.decrypt_before_copy:
                source = self.load_secure_file_from_disk(source_path, source_filename)
                storage.write_bytes(dest_path, dest_filename, source.data)
            else:
                data = storage.read_bytes(source_path, source_filename)
                storage.write_bytes(dest_path, dest_filename, data)
        except FileOperationError:
            raise
        except SealFileError as exc:
            raise FileOperationError("copy", source_filename, exc) from exc

        self._events.log_file_copy(source_path, source_filename, dest_path,
                                   dest_filename, options.decrypt_before_copy)

    # ========================================================================
    # Batches
    # ========================================================================

    def _batch(self, max_concurrency: Optional[int]) -> BatchProcessor:
        return BatchProcessor(max_concurrency or self._config.max_concurrency)

    def create_multiple_encrypted_files(self, operations: Sequence[FileOperation],
                                        max_concurrency: Optional[int] = None
                                        ) -> List[FileOperation]:
        """Save every operation's data; returns copies with error filled in."""
        results = self._batch(max_concurrency).run(
            operations,
            lambda op: self.save_data_as_secure_file(op.data, op.path, op.filename),
            "save",
        )
        out = [replace(r.item, error=r.error) for r in results]
        self._events.log_batch("save", len(out), sum(1 for o in out if o.error))
        return out

    def decrypt_multiple_files(self, operations: Sequence[FileOperation],
                               max_concurrency: Optional[int] = None
                               ) -> List[FileOperation]:
        """Load every operation's file; returns copies with data or error."""
        results = self._batch(max_concurrency).run(
            operations,
            lambda op: self.load_secure_file_from_disk(op.path, op.filename).data,
            "load",
        )
        out = [replace(r.item, data=r.value if r.ok else r.item.data, error=r.error)
               for r in results]
        self._events.log_batch("load", len(out), sum(1 for o in out if o.error))
        return out

    def re_encrypt_multiple_files(self, operations: Sequence[FileOperation],
                                  max_concurrency: Optional[int] = None,
                                  previous_pepper: Union[str, bytes, None] = None
                                  ) -> List[FileOperation]:
        """Re-encrypt every operation's file under the current secret."""
        results = self._batch(max_concurrency).run(
            operations,
            lambda op: self.re_encrypt_file(op.path, op.filename, previous_pepper),
            "re-encrypt",
        )
        out = [replace(r.item, error=r.error) for r in results]
        self._events.log_batch("re-encrypt", len(out), sum(1 for o in out if o.error))
        return out

    def delete_multiple_files(self, operations: Sequence[FileOperation],
                              max_concurrency: Optional[int] = None
                              ) -> List[FileOperation]:
        results = self._batch(max_concurrency).run(
            operations,
            lambda op: self.delete_file(op.path, op.filename),
            "delete",
        )
        out = [replace(r.item, error=r.error) for r in results]
        self._events.log_batch("delete", len(out), sum(1 for o in out if o.error))
        return out

    def batch_copy_files(self, copy_operations: Sequence[CopyOperation],
                         max_concurrency: Optional[int] = None) -> List[CopyResult]:
        """Copy many files; one CopyResult per operation, in input order."""
        results = self._batch(max_concurrency).run(
            copy_operations,
            lambda op: self.copy_file_to_new_location(
                op.source_path, op.source_filename,
                op.dest_path, op.dest_filename, op.options,
            ),
            "copy",
        )
        out = [
            CopyResult(
                source_path=r.item.source_path,
                source_filename=r.item.source_filename,
                dest_path=r.item.dest_path,
                dest_filename=r.item.dest_filename,
                success=r.ok,
                error=r.error,
            )
            for r in results
        ]
        self._events.log_batch("copy", len(out), sum(1 for o in out if not o.success))
        return out
