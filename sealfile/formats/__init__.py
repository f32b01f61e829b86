# Container Formats Module
"""
Binary container layouts:
- Encrypted container (salt | nonce | ciphertext+tag)
- Compressed container header (16 bytes, little-endian)
"""

from importlib import import_module


# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Resolve public names from the containers module on first use."""
    if name in __all__:
        return getattr(import_module(".containers", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    'CompressionMethod',
    'CONCRETE_METHODS',
    'EncryptedContainer',
    'CompressedHeader',
    'encode_encrypted',
    'decode_encrypted',
    'encode_compressed_header',
    'decode_compressed_header',
    'SALT_SIZE',
    'NONCE_SIZE',
    'TAG_SIZE',
    'HEADER_SIZE',
    'FORMAT_VERSION',
]
