"""
Per-method codec back-ends.

Each concrete method (except HYBRID, which the reducer composes from
LZ4, ZSTD and XZ) maps to one Codec with compress/decompress. Library
errors are wrapped in CodecError naming the stage and method.
"""

import gzip
import lzma
import zlib
from enum import IntEnum
from typing import Callable, Dict, Optional

import lz4.block
import zstandard as zstd

from . import lzw
from ..exceptions import CodecError, UnknownMethodError
from ..formats.containers import CompressionMethod


class CompressionLevel(IntEnum):
    """Compression intensity."""
    FASTEST = 0
    FAST = 1
    BALANCED = 2
    BEST = 3
    MAXIMUM = 4     # slow, maximum reduction


# Native level per library
_DEFLATE_LEVELS = {
    CompressionLevel.FASTEST: 1,
    CompressionLevel.FAST: 6,
    CompressionLevel.BALANCED: 6,
    CompressionLevel.BEST: 9,
    CompressionLevel.MAXIMUM: 9,
}
_ZSTD_LEVELS = {
    CompressionLevel.FASTEST: 1,
    CompressionLevel.FAST: 3,
    CompressionLevel.BALANCED: 9,
    CompressionLevel.BEST: 15,
    CompressionLevel.MAXIMUM: 19,
}
_XZ_PRESETS = {
    CompressionLevel.FASTEST: 0,
    CompressionLevel.FAST: 3,
    CompressionLevel.BALANCED: 6,
    CompressionLevel.BEST: 9,
    CompressionLevel.MAXIMUM: 9 | lzma.PRESET_EXTREME,
}

XZ_STREAM_MAGIC = b"\xfd7zXZ\x00"


class Codec:
    """compress/decompress pair for one concrete method."""

    def __init__(self, method: CompressionMethod,
                 compress: Callable[[bytes, CompressionLevel], bytes],
                 decompress: Callable[[bytes, int], bytes]):
        self.method = method
        self._compress = compress
        self._decompress = decompress

    def compress(self, data: bytes,
                 level: CompressionLevel = CompressionLevel.BALANCED,
                 stage: str = "compression") -> bytes:
        try:
            return self._compress(data, CompressionLevel(level))
        except CodecError:
            raise
        except Exception as exc:
            raise CodecError(stage, self.method, str(exc)) from exc

    def decompress(self, data: bytes, original_size: int,
                   stage: str = "decompression") -> bytes:
        """
        Args:
            data: Codec payload
            original_size: Expected output size; a hard buffer size for LZ4,
                ignored by self-delimiting formats
        """
        try:
            return self._decompress(data, original_size)
        except CodecError:
            raise
        except Exception as exc:
            raise CodecError(stage, self.method, str(exc)) from exc

    def __repr__(self) -> str:
        return f"Codec({self.method.name})"


# ============================================================================
# Library adapters
# ============================================================================

def _gzip_compress(data: bytes, level: CompressionLevel) -> bytes:
    return gzip.compress(data, compresslevel=_DEFLATE_LEVELS[level], mtime=0)


def _gzip_decompress(data: bytes, original_size: int) -> bytes:
    return gzip.decompress(data)


def _zlib_compress(data: bytes, level: CompressionLevel) -> bytes:
    return zlib.compress(data, _DEFLATE_LEVELS[level])


def _zlib_decompress(data: bytes, original_size: int) -> bytes:
    return zlib.decompress(data)


def _deflate_compress(data: bytes, level: CompressionLevel) -> bytes:
    compressor = zlib.compressobj(_DEFLATE_LEVELS[level], zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def _deflate_decompress(data: bytes, original_size: int) -> bytes:
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    result = decompressor.decompress(data) + decompressor.flush()
    if not decompressor.eof:
        raise ValueError("truncated deflate stream")
    return result


def _lzw_compress(data: bytes, level: CompressionLevel) -> bytes:
    return lzw.compress(data)


def _lzw_decompress(data: bytes, original_size: int) -> bytes:
    return lzw.decompress(data)


def _zstd_compress(data: bytes, level: CompressionLevel) -> bytes:
    # Frame carries the content size, so decompress() needs no hint
    cctx = zstd.ZstdCompressor(level=_ZSTD_LEVELS[level])
    return cctx.compress(data)


def _zstd_decompress(data: bytes, original_size: int) -> bytes:
    dctx = zstd.ZstdDecompressor()
    return dctx.decompress(data)


def _lz4_compress(data: bytes, level: CompressionLevel) -> bytes:
    # Raw block without a size prefix; the container header holds the size
    if level >= CompressionLevel.BEST:
        return lz4.block.compress(data, mode="high_compression",
                                  compression=9 if level == CompressionLevel.BEST else 12,
                                  store_size=False)
    return lz4.block.compress(data, mode="default", store_size=False)


def _lz4_decompress(data: bytes, original_size: int) -> bytes:
    if original_size <= 0:
        raise ValueError(f"invalid size hint: {original_size}")
    return lz4.block.decompress(data, uncompressed_size=original_size)


def _xz_compress(data: bytes, level: CompressionLevel) -> bytes:
    return lzma.compress(data, format=lzma.FORMAT_XZ, preset=_XZ_PRESETS[level])


def _xz_decompress(data: bytes, original_size: int) -> bytes:
    return lzma.decompress(data, format=lzma.FORMAT_XZ)


_REGISTRY: Dict[CompressionMethod, Codec] = {
    codec.method: codec for codec in (
        Codec(CompressionMethod.GZIP, _gzip_compress, _gzip_decompress),
        Codec(CompressionMethod.ZLIB, _zlib_compress, _zlib_decompress),
        Codec(CompressionMethod.DEFLATE, _deflate_compress, _deflate_decompress),
        Codec(CompressionMethod.LZW, _lzw_compress, _lzw_decompress),
        Codec(CompressionMethod.ZSTD, _zstd_compress, _zstd_decompress),
        Codec(CompressionMethod.LZ4, _lz4_compress, _lz4_decompress),
        Codec(CompressionMethod.XZ, _xz_compress, _xz_decompress),
    )
}


def get_codec(method: CompressionMethod) -> Codec:
    """
    Look up the single-stage codec for a method.

    Raises:
        UnknownMethodError: For HYBRID, ADAPTIVE or unknown ids
    """
    codec: Optional[Codec] = _REGISTRY.get(method)
    if codec is None:
        raise UnknownMethodError(int(method))
    return codec


def is_xz_stream(data: bytes) -> bool:
    """True if data starts with the XZ stream magic."""
    return data[:len(XZ_STREAM_MAGIC)] == XZ_STREAM_MAGIC
