"""
SealFile - authenticated, compressed file containers.

Save: raw bytes -> AES-256-GCM (per-file PBKDF2 key) -> adaptive compression
Load: the reverse, validated at every step.
"""

import logging
from importlib import import_module

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())


_EXPORTS = {
    'FileManager': 'sealfile.files.file_manager',
    'SecureFile': 'sealfile.files.secure_file',
    'FileOperation': 'sealfile.files.file_manager',
    'CopyOptions': 'sealfile.files.file_manager',
    'CopyOperation': 'sealfile.files.file_manager',
    'KeyDerivingEncryptor': 'sealfile.files.file_crypto',
    'FileReducer': 'sealfile.compression.file_reducer',
    'CompressionLevel': 'sealfile.compression.codecs',
    'CompressionMethod': 'sealfile.formats.containers',
    'BatchProcessor': 'sealfile.batch.batch_processor',
    'SealConfig': 'sealfile.config',
    'PathType': 'sealfile.config',
}


def __getattr__(name):
    """Resolve top-level names lazily."""
    if name in _EXPORTS:
        return getattr(import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = list(_EXPORTS) + ['__version__']
