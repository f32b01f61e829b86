# Compression Module
"""
Adaptive multi-algorithm compression:
- GZIP, ZLIB, DEFLATE, LZW, ZSTD, LZ4, XZ codecs
- HYBRID multi-stage pipeline (LZ4 -> ZSTD -> optional XZ)
- ADAPTIVE content-based method selection
- Reversible delta pre-filter
- Self-describing 16-byte container header
"""

from importlib import import_module


_EXPORTS = {
    'FileReducer': 'file_reducer',
    'CompressionResult': 'file_reducer',
    'delta_encode': 'file_reducer',
    'delta_decode': 'file_reducer',
    'CompressionLevel': 'codecs',
    'get_codec': 'codecs',
    'select_method': 'analysis',
    'calculate_entropy': 'analysis',
    'is_already_compressed': 'analysis',
    'estimate_compression_ratio': 'analysis',
}


# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Resolve public names from their submodule on first use."""
    if name in _EXPORTS:
        return getattr(import_module(f".{_EXPORTS[name]}", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = list(_EXPORTS)
