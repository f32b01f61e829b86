"""
Unit tests for container framing.

Tests:
- Encrypted container split/join
- Compressed header layout
- Distinct header error kinds
"""

import pytest

from sealfile.exceptions import (
    BadMagicError,
    MalformedContainerError,
    TruncatedContainerError,
    UnknownMethodError,
    UnsupportedVersionError,
)
from sealfile.formats.containers import (
    CONCRETE_METHODS,
    HEADER_SIZE,
    MIN_ENCRYPTED_SIZE,
    NONCE_SIZE,
    SALT_SIZE,
    CompressionMethod,
    decode_compressed_header,
    decode_encrypted,
    encode_compressed_header,
    encode_encrypted,
)


class TestEncryptedContainer:
    """Tests for the salt | nonce | ciphertext layout."""

    def test_encode_concatenates(self):
        """Encoded container is salt, nonce, then ciphertext."""
        salt = b"s" * SALT_SIZE
        nonce = b"n" * NONCE_SIZE
        blob = encode_encrypted(salt, nonce, b"ciphertext-and-tag")
        assert blob == salt + nonce + b"ciphertext-and-tag"

    def test_decode_splits(self):
        """Decoding recovers every part."""
        salt = bytes(range(16))
        nonce = bytes(range(100, 112))
        body = b"\xaa" * 40
        parts = decode_encrypted(salt + nonce + body)
        assert parts.salt == salt
        assert parts.nonce == nonce
        assert parts.ciphertext == body

    def test_minimum_size_accepted(self):
        """Exactly salt + nonce + tag is a valid (empty plaintext) container."""
        parts = decode_encrypted(b"\x00" * MIN_ENCRYPTED_SIZE)
        assert len(parts.ciphertext) == 16

    def test_truncated_rejected(self):
        """One byte short of the minimum is rejected."""
        with pytest.raises(TruncatedContainerError) as exc_info:
            decode_encrypted(b"\x00" * (MIN_ENCRYPTED_SIZE - 1))
        assert exc_info.value.actual == MIN_ENCRYPTED_SIZE - 1
        assert exc_info.value.required == MIN_ENCRYPTED_SIZE

    def test_wrong_salt_length(self):
        """Salt of the wrong length is a programming error."""
        with pytest.raises(ValueError):
            encode_encrypted(b"short", b"n" * NONCE_SIZE, b"")

    def test_wrong_nonce_length(self):
        with pytest.raises(ValueError):
            encode_encrypted(b"s" * SALT_SIZE, b"n" * 8, b"")


class TestCompressedHeader:
    """Tests for the 16-byte compressed header."""

    def test_layout(self):
        """Header is magic, method, version, LE size, zero padding."""
        header = encode_compressed_header(CompressionMethod.ZSTD, 1234)
        assert len(header) == HEADER_SIZE
        assert header == (b"\xff\xfe\x04\x01" + (1234).to_bytes(8, "little")
                          + b"\x00" * 4)

    def test_round_trip_all_methods(self):
        """Every concrete method survives encode/decode."""
        for method in CONCRETE_METHODS:
            header = decode_compressed_header(encode_compressed_header(method, 99))
            assert header.method is method
            assert header.original_size == 99
            assert header.payload_offset == HEADER_SIZE

    def test_large_size(self):
        """Sizes beyond 32 bits are representable."""
        size = 5 * 2 ** 32 + 7
        header = decode_compressed_header(
            encode_compressed_header(CompressionMethod.XZ, size))
        assert header.original_size == size

    def test_adaptive_not_encodable(self):
        """ADAPTIVE is never recorded in a header."""
        with pytest.raises(ValueError):
            encode_compressed_header(CompressionMethod.ADAPTIVE, 10)

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            encode_compressed_header(CompressionMethod.GZIP, -1)

    def test_reserved_bytes_ignored(self):
        """Non-zero reserved bytes do not fail decoding."""
        header = bytearray(encode_compressed_header(CompressionMethod.LZ4, 10))
        header[12:16] = b"\x01\x02\x03\x04"
        assert decode_compressed_header(bytes(header)).method is CompressionMethod.LZ4

    def test_payload_follows_header(self):
        """Trailing payload bytes are not part of the header."""
        blob = encode_compressed_header(CompressionMethod.GZIP, 3) + b"payload"
        header = decode_compressed_header(blob)
        assert blob[header.payload_offset:] == b"payload"


class TestHeaderErrors:
    """Tests for distinct header failure kinds."""

    def _header(self, **overrides):
        header = bytearray(encode_compressed_header(CompressionMethod.GZIP, 10))
        for offset, value in overrides.values():
            header[offset] = value
        return bytes(header)

    def test_truncated(self):
        """Fewer than 16 bytes is truncated."""
        with pytest.raises(TruncatedContainerError):
            decode_compressed_header(b"\xff\xfe\x00\x01")

    def test_bad_magic(self):
        """Wrong magic bytes are reported as such."""
        with pytest.raises(BadMagicError) as exc_info:
            decode_compressed_header(self._header(magic=(0, 0x00)))
        assert exc_info.value.found == b"\x00\xfe"

    def test_unsupported_version(self):
        """Version other than 1 carries the version read."""
        with pytest.raises(UnsupportedVersionError) as exc_info:
            decode_compressed_header(self._header(version=(3, 2)))
        assert exc_info.value.version == 2

    def test_adaptive_id_unknown(self):
        """Method id 8 (ADAPTIVE) is not a stored method."""
        with pytest.raises(UnknownMethodError) as exc_info:
            decode_compressed_header(self._header(method=(2, 8)))
        assert exc_info.value.method_id == 8

    def test_out_of_range_id_unknown(self):
        with pytest.raises(UnknownMethodError):
            decode_compressed_header(self._header(method=(2, 9)))

    def test_errors_share_base(self):
        """All header failures are malformed-container errors and ValueErrors."""
        for bad in (b"", self._header(magic=(1, 0)), self._header(version=(3, 9)),
                    self._header(method=(2, 200))):
            with pytest.raises(MalformedContainerError):
                decode_compressed_header(bad)
            with pytest.raises(ValueError):
                decode_compressed_header(bad)
