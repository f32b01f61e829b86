# Integration Module
"""
Audit logging for file codec operations.

All events are recorded with privacy-preserving file ids.
"""

from importlib import import_module


# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Resolve public names from the event_logger module on first use."""
    if name in __all__:
        return getattr(import_module(".event_logger", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    'EventType',
    'SecurityEvent',
    'EventLogger',
    'get_file_id',
    'create_event_logger',
]
