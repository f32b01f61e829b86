"""
Container Framing

Binary layouts shared by the encryptor and the compression engine.

Encrypted container:
    [salt (16) | nonce (12) | ciphertext | GCM tag (16)]

Compressed container:
    [header (16) | payload]

Header (little-endian):
    - Magic (2): 0xFF 0xFE
    - Method (1): concrete compression method id
    - Version (1): 0x01
    - Original size (8): payload size after pre-filtering, before compression
    - Reserved (4): zero
"""

import struct
from dataclasses import dataclass
from enum import IntEnum

from ..exceptions import (
    BadMagicError,
    TruncatedContainerError,
    UnknownMethodError,
    UnsupportedVersionError,
)


# Constants
SALT_SIZE = 16              # 128-bit salt
NONCE_SIZE = 12             # 96-bit nonce for GCM
TAG_SIZE = 16               # 128-bit GCM tag
MIN_ENCRYPTED_SIZE = SALT_SIZE + NONCE_SIZE + TAG_SIZE

HEADER_MAGIC = b"\xff\xfe"
FORMAT_VERSION = 0x01
HEADER_SIZE = 16

_HEADER_STRUCT = struct.Struct("<2sBBQ4s")


class CompressionMethod(IntEnum):
    """Compression methods. Values are the on-wire method ids."""
    GZIP = 0
    ZLIB = 1
    DEFLATE = 2
    LZW = 3
    ZSTD = 4
    LZ4 = 5
    XZ = 6
    HYBRID = 7
    # Selection policy only; never written to a header
    ADAPTIVE = 8


CONCRETE_METHODS = tuple(m for m in CompressionMethod if m is not CompressionMethod.ADAPTIVE)


@dataclass(frozen=True)
class EncryptedContainer:
    """Decoded view of an encrypted container."""
    salt: bytes
    nonce: bytes
    ciphertext: bytes   # includes the trailing GCM tag


@dataclass(frozen=True)
class CompressedHeader:
    """Decoded compressed-container header."""
    method: CompressionMethod
    original_size: int
    payload_offset: int = HEADER_SIZE


# ============================================================================
# Encrypted container
# ============================================================================

def encode_encrypted(salt: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Frame an encrypted payload.

    Args:
        salt: Key-derivation salt (16 bytes)
        nonce: AEAD nonce (12 bytes)
        ciphertext: Ciphertext with the GCM tag appended

    Returns:
        salt || nonce || ciphertext
    """
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
    return salt + nonce + ciphertext


def decode_encrypted(data: bytes) -> EncryptedContainer:
    """
    Split an encrypted container into its parts.

    Raises:
        TruncatedContainerError: If shorter than salt + nonce + tag
    """
    if len(data) < MIN_ENCRYPTED_SIZE:
        raise TruncatedContainerError(len(data), MIN_ENCRYPTED_SIZE,
                                      "encrypted container")
    data = bytes(data)
    return EncryptedContainer(
        salt=data[:SALT_SIZE],
        nonce=data[SALT_SIZE:SALT_SIZE + NONCE_SIZE],
        ciphertext=data[SALT_SIZE + NONCE_SIZE:],
    )


# ============================================================================
# Compressed container header
# ============================================================================

def encode_compressed_header(method: CompressionMethod, original_size: int) -> bytes:
    """
    Build the 16-byte compressed-container header.

    Args:
        method: Concrete method actually used (never ADAPTIVE)
        original_size: Size of the data handed to the codec

    Returns:
        16 header bytes
    """
    method = CompressionMethod(method)
    if method is CompressionMethod.ADAPTIVE:
        raise ValueError("ADAPTIVE is a selection policy and cannot be recorded")
    if original_size < 0:
        raise ValueError("original size cannot be negative")
    return _HEADER_STRUCT.pack(
        HEADER_MAGIC, int(method), FORMAT_VERSION, original_size, b"\x00" * 4
    )


def decode_compressed_header(data: bytes) -> CompressedHeader:
    """
    Parse and validate a compressed-container header.

    Raises:
        TruncatedContainerError: Fewer than 16 bytes
        BadMagicError: Magic bytes differ
        UnsupportedVersionError: Version is not FORMAT_VERSION
        UnknownMethodError: Method id is not a concrete method
    """
    if len(data) < HEADER_SIZE:
        raise TruncatedContainerError(len(data), HEADER_SIZE, "compressed header")

    magic, method_id, version, original_size, _reserved = _HEADER_STRUCT.unpack_from(data)

    if magic != HEADER_MAGIC:
        raise BadMagicError(bytes(magic))
    if version != FORMAT_VERSION:
        raise UnsupportedVersionError(version)
    if method_id not in {m.value for m in CONCRETE_METHODS}:
        raise UnknownMethodError(method_id)

    return CompressedHeader(
        method=CompressionMethod(method_id),
        original_size=original_size,
        payload_offset=HEADER_SIZE,
    )
