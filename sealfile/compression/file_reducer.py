"""
Adaptive Compression Engine

Reduce pipeline:
    1. Delta pre-filter (optional, always invertible)
    2. Method selection when ADAPTIVE is requested
    3. Single codec, or the HYBRID pipeline LZ4 -> ZSTD -> (XZ if smaller)
    4. Post-optimisation hook (identity)
    5. 16-byte header recording the concrete method and filtered size

Restore runs the same steps backwards and checks the restored length
against the header.

The engine's settings are read, never written, by reduce/restore, so one
FileReducer can serve concurrent callers.
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from . import analysis
from .codecs import CompressionLevel, get_codec, is_xz_stream
from ..exceptions import ConfigurationError, EmptyInputError, SizeMismatchError
from ..formats.containers import (
    CompressionMethod,
    decode_compressed_header,
    encode_compressed_header,
)


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
ADVANCED_CHUNK_SIZE = 128 * 1024
MIN_CHUNK_SIZE = 1024
HYBRID_THIRD_STAGE_THRESHOLD = 1024


@dataclass
class CompressionResult:
    """Metrics for one reduce() call. Observability only."""
    original_size: int
    compressed_size: int
    compression_rate: float     # percent saved, negative when the output grew
    method: CompressionMethod
    processing_time: float      # seconds
    chunks_processed: int

    @property
    def ratio(self) -> float:
        """compressed_size / original_size."""
        if not self.original_size:
            return 0.0
        return self.compressed_size / self.original_size


# ============================================================================
# Delta pre-filter
# ============================================================================

def delta_encode(data: bytes) -> bytes:
    """out[0] = in[0]; out[i] = in[i] - in[i-1] (mod 256)."""
    if len(data) < 2:
        return bytes(data)
    out = bytearray(len(data))
    out[0] = data[0]
    prev = data[0]
    for i in range(1, len(data)):
        cur = data[i]
        out[i] = (cur - prev) & 0xFF
        prev = cur
    return bytes(out)


def delta_decode(data: bytes) -> bytes:
    """Inverse of delta_encode: out[i] = in[i] + out[i-1] (mod 256)."""
    if len(data) < 2:
        return bytes(data)
    out = bytearray(len(data))
    acc = 0
    for i, value in enumerate(data):
        acc = (acc + value) & 0xFF
        out[i] = acc
    return bytes(out)


# ============================================================================
# Hybrid pipeline
# ============================================================================

def compress_hybrid(data: bytes, level: CompressionLevel) -> bytes:
    """
    Fast method first, then the high-ratio method, then the maximum-ratio
    method when the intermediate result is over 1 KiB and it helps.
    """
    stage1 = get_codec(analysis.FAST_METHOD).compress(data, level, "hybrid stage 1")
    stage2 = get_codec(analysis.HIGH_RATIO_METHOD).compress(stage1, level, "hybrid stage 2")
    if len(stage2) > HYBRID_THIRD_STAGE_THRESHOLD:
        stage3 = get_codec(analysis.MAX_RATIO_METHOD).compress(stage2, level, "hybrid stage 3")
        if len(stage3) < len(stage2):
            logger.debug("hybrid: kept stage 3 (%d < %d)", len(stage3), len(stage2))
            return stage3
    return stage2


def decompress_hybrid(data: bytes, original_size: int) -> bytes:
    """Reverse compress_hybrid. The XZ stage is present iff its magic is."""
    if is_xz_stream(data):
        data = get_codec(analysis.MAX_RATIO_METHOD).decompress(
            data, 0, "hybrid stage 3 reverse")
    stage1 = get_codec(analysis.HIGH_RATIO_METHOD).decompress(
        data, 0, "hybrid stage 2 reverse")
    return get_codec(analysis.FAST_METHOD).decompress(
        stage1, original_size, "hybrid stage 1 reverse")


# ============================================================================
# File Reducer
# ============================================================================

class FileReducer:
    """
    Multi-algorithm compressor with content-based method selection.

    Example:
        >>> reducer = FileReducer()
        >>> blob, result = reducer.reduce(b"abc" * 1000)
        >>> reducer.restore(blob) == b"abc" * 1000
        True
    """

    def __init__(self,
                 method: CompressionMethod = CompressionMethod.ADAPTIVE,
                 level: CompressionLevel = CompressionLevel.BALANCED,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 enable_pre_filter: bool = True,
                 enable_post_opt: bool = True):
        """
        Args:
            method: Default method for reduce()
            level: Default compression level
            chunk_size: Reporting unit for CompressionResult.chunks_processed
            enable_pre_filter: Apply the delta pre-filter
            enable_post_opt: Run the post-optimisation hook
        """
        try:
            self.method = CompressionMethod(method)
            self.level = CompressionLevel(level)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        self.chunk_size = DEFAULT_CHUNK_SIZE
        self.set_chunk_size(chunk_size)
        self.enable_pre_filter = enable_pre_filter
        self.enable_post_opt = enable_post_opt

    @classmethod
    def advanced(cls) -> "FileReducer":
        """Reducer tuned for maximum reduction."""
        return cls(CompressionMethod.HYBRID, CompressionLevel.MAXIMUM,
                   chunk_size=ADVANCED_CHUNK_SIZE)

    def set_chunk_size(self, size: int) -> None:
        """Set the chunk size (minimum 1 KiB)."""
        self.chunk_size = max(int(size), MIN_CHUNK_SIZE)

    def enable_optimizations(self, pre_filter: bool, post_opt: bool) -> None:
        self.enable_pre_filter = pre_filter
        self.enable_post_opt = post_opt

    # ------------------------------------------------------------------
    # Reduce / restore
    # ------------------------------------------------------------------

    def reduce(self, data: bytes,
               method: Optional[CompressionMethod] = None,
               level: Optional[CompressionLevel] = None
               ) -> Tuple[bytes, CompressionResult]:
        """
        Compress data into a self-describing container.

        Args:
            data: Input bytes (must not be empty)
            method: Overrides the reducer's default method
            level: Overrides the reducer's default level

        Returns:
            (container bytes, CompressionResult)

        Raises:
            EmptyInputError: If data is empty
            CodecError: If a compression library fails
        """
        if not data:
            raise EmptyInputError("input data is empty")

        data = bytes(data)
        requested = CompressionMethod(self.method if method is None else method)
        level = CompressionLevel(self.level if level is None else level)
        start = time.perf_counter()

        processed = delta_encode(data) if self.enable_pre_filter else data

        chosen = requested
        if requested is CompressionMethod.ADAPTIVE:
            chosen = analysis.select_method(processed, raw=data)
            logger.debug("adaptive selection: %s for %d bytes", chosen.name, len(data))

        if chosen is CompressionMethod.HYBRID:
            payload = compress_hybrid(processed, level)
        else:
            payload = get_codec(chosen).compress(processed, level)

        if self.enable_post_opt:
            payload = self._post_optimize(payload, chosen)

        container = encode_compressed_header(chosen, len(processed)) + payload

        elapsed = time.perf_counter() - start
        result = CompressionResult(
            original_size=len(data),
            compressed_size=len(container),
            compression_rate=(1.0 - len(container) / len(data)) * 100.0,
            method=chosen,
            processing_time=elapsed,
            chunks_processed=(len(data) + self.chunk_size - 1) // self.chunk_size,
        )
        logger.debug("reduced %d -> %d bytes with %s in %.4fs",
                     result.original_size, result.compressed_size,
                     chosen.name, elapsed)
        return container, result

    def restore(self, container: bytes) -> bytes:
        """
        Reverse reduce().

        Raises:
            MalformedContainerError: Bad header (truncated, magic, version, method)
            CodecError: If a decompression library fails
            SizeMismatchError: Restored length differs from the header
        """
        header = decode_compressed_header(container)
        payload = bytes(container[header.payload_offset:])

        if self.enable_post_opt:
            payload = self._reverse_post_optimize(payload, header.method)

        if header.method is CompressionMethod.HYBRID:
            restored = decompress_hybrid(payload, header.original_size)
        else:
            restored = get_codec(header.method).decompress(payload, header.original_size)

        if len(restored) != header.original_size:
            raise SizeMismatchError(header.original_size, len(restored))

        if self.enable_pre_filter:
            restored = delta_decode(restored)
        return restored

    # Reserved for future transforms; must stay invertible
    def _post_optimize(self, data: bytes, method: CompressionMethod) -> bytes:
        return data

    def _reverse_post_optimize(self, data: bytes, method: CompressionMethod) -> bytes:
        return data

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def estimate_compression_ratio(self, data: bytes) -> float:
        """Entropy-based estimate of the percentage saved."""
        return analysis.estimate_compression_ratio(data)

    @staticmethod
    def get_compression_info() -> Dict[CompressionMethod, str]:
        """Human-readable description of every method."""
        return dict(COMPRESSION_INFO)


COMPRESSION_INFO = {
    CompressionMethod.GZIP: "GZIP - Standard compression, good compatibility",
    CompressionMethod.ZLIB: "ZLIB - Similar to GZIP, slightly smaller framing",
    CompressionMethod.DEFLATE: "DEFLATE - Raw deflate stream, no framing",
    CompressionMethod.LZW: "LZW - Good for text data with repeated patterns",
    CompressionMethod.ZSTD: "ZSTD - Zstandard, excellent ratio and speed",
    CompressionMethod.LZ4: "LZ4 - Ultra-fast compression, lower ratio",
    CompressionMethod.XZ: "XZ - LZMA2, highest ratio, slower processing",
    CompressionMethod.HYBRID: "HYBRID - LZ4 then ZSTD then optional XZ",
    CompressionMethod.ADAPTIVE: "ADAPTIVE - Automatically selects a method",
}
