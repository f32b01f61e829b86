# Batch Processing Module
"""
Bounded-concurrency fan-out of single-file operations with
per-item, input-ordered results.
"""

from importlib import import_module


# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Resolve public names from the batch_processor module on first use."""
    if name in __all__:
        return getattr(import_module(".batch_processor", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    'BatchProcessor',
    'BatchResult',
]
