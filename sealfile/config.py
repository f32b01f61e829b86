"""
Configuration for the file codec.

Secrets have no defaults: a config without an encryption key and a pepper
cannot be constructed.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from .compression.codecs import CompressionLevel
from .exceptions import ConfigurationError
from .files.file_crypto import PBKDF2_ITERATIONS
from .formats.containers import CompressionMethod


DEFAULT_CONCURRENCY = 5


class PathType(Enum):
    """How SecureFile.get_path() reports a location."""
    DIRECTORY = "directory"
    HTTP = "http"


@dataclass(frozen=True)
class SealConfig:
    """Settings shared by every file handled by one FileManager."""
    encryption_key: Union[str, bytes] = field(repr=False)
    pepper: Union[str, bytes] = field(repr=False)
    compression_method: CompressionMethod = CompressionMethod.ADAPTIVE
    compression_level: CompressionLevel = CompressionLevel.BALANCED
    iterations: int = PBKDF2_ITERATIONS
    max_concurrency: int = DEFAULT_CONCURRENCY
    base_url: str = "http://localhost:8080"
    public_dir: str = "./public"
    path_type: PathType = PathType.DIRECTORY

    def __post_init__(self):
        if not self.encryption_key:
            raise ConfigurationError("encryption key is required")
        if not self.pepper:
            raise ConfigurationError("pepper is required for enhanced security")
        if not isinstance(self.iterations, int) or self.iterations < 1:
            raise ConfigurationError("iterations must be a positive integer")
        try:
            object.__setattr__(self, "compression_method",
                               CompressionMethod(self.compression_method))
            object.__setattr__(self, "compression_level",
                               CompressionLevel(self.compression_level))
            object.__setattr__(self, "path_type", PathType(self.path_type))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if self.max_concurrency <= 0:
            object.__setattr__(self, "max_concurrency", DEFAULT_CONCURRENCY)

    def with_secret(self, encryption_key: Optional[Union[str, bytes]] = None,
                    pepper: Optional[Union[str, bytes]] = None) -> "SealConfig":
        """Copy of this config with the key and/or pepper replaced."""
        return replace(
            self,
            encryption_key=self.encryption_key if encryption_key is None else encryption_key,
            pepper=self.pepper if pepper is None else pepper,
        )
