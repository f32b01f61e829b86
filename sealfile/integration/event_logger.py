"""
Event Logger Module

Audit trail for file codec operations.

Features:
- Save / load / delete / copy / re-encrypt events
- Secret rotation events
- Privacy-preserving file ids (SHA-256 of location, never the name itself)
- JSON-lines export and import
- Every event mirrored to the "sealfile.audit" stdlib logger

Thread-safe: batch tasks record events concurrently.
"""

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


audit_logger = logging.getLogger("sealfile.audit")
logger = logging.getLogger(__name__)

EVENT_VERSION = "1.0"


# ============================================================================
# Privacy Functions
# ============================================================================

def get_file_id(path: str, filename: str) -> str:
    """
    Privacy-preserving identifier for a stored file.

    Args:
        path: Directory of the file
        filename: File name

    Returns:
        First 16 hex characters of SHA-256(path/filename)
    """
    location = f"{path.rstrip('/')}/{filename}"
    return hashlib.sha256(location.encode("utf-8")).hexdigest()[:16]


# ============================================================================
# Event Types
# ============================================================================

class EventType(Enum):
    """Types of events that can be logged."""

    # File events
    FILE_SAVE = "file_save"
    FILE_LOAD = "file_load"
    FILE_DELETE = "file_delete"
    FILE_COPY = "file_copy"
    FILE_REENCRYPT = "file_reencrypt"
    FILE_INTEGRITY_FAILED = "file_integrity_failed"

    # Secret events
    PEPPER_ROTATED = "pepper_rotated"
    SECRET_UPDATED = "secret_updated"

    # Batch events
    BATCH_COMPLETE = "batch_complete"


# ============================================================================
# Event Structure
# ============================================================================

@dataclass
class SecurityEvent:
    """A single audit record. Never holds secrets or plaintext."""
    event_type: EventType
    file_id: str
    timestamp: float
    details: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> str:
        """Serialize to one compact JSON line."""
        return json.dumps({
            'version': EVENT_VERSION,
            'type': self.event_type.value,
            'file': self.file_id,
            'time': self.timestamp,
            'details': self.details,
        }, separators=(',', ':'))

    @classmethod
    def from_record(cls, record: str) -> 'SecurityEvent':
        data = json.loads(record)
        return cls(
            event_type=EventType(data['type']),
            file_id=data['file'],
            timestamp=data['time'],
            details=data.get('details', {}),
        )

    def __str__(self) -> str:
        dt = datetime.fromtimestamp(self.timestamp)
        return (
            f"[{dt.strftime('%Y-%m-%d %H:%M:%S')}] "
            f"{self.event_type.value} | file:{self.file_id[:8]}"
        )


# ============================================================================
# Event Logger
# ============================================================================

class EventLogger:
    """In-memory audit trail with callbacks and JSON-lines export."""

    def __init__(self, max_events: Optional[int] = None):
        """
        Args:
            max_events: Keep only the newest N events (None keeps all)
        """
        self._events: List[SecurityEvent] = []
        self._max_events = max_events
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[SecurityEvent], None]] = []

    def _add_event(self, event: SecurityEvent) -> SecurityEvent:
        with self._lock:
            self._events.append(event)
            if self._max_events is not None and len(self._events) > self._max_events:
                del self._events[:len(self._events) - self._max_events]
            callbacks = list(self._callbacks)

        audit_logger.info("%s %s", event.event_type.value, event.to_record())

        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                # A broken subscriber must not fail the file operation
                logger.exception("audit callback %r failed", callback)
        return event

    def add_callback(self, callback: Callable[[SecurityEvent], None]) -> None:
        """Add a callback to be notified of new events."""
        with self._lock:
            self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[SecurityEvent], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def log(self, event_type: EventType, path: str = "", filename: str = "",
            **details: Any) -> SecurityEvent:
        """
        Record an event.

        Args:
            event_type: Kind of event
            path: Directory of the file involved (hashed)
            filename: Name of the file involved (hashed)
            **details: Extra JSON-serialisable fields

        Returns:
            The logged event
        """
        file_id = get_file_id(path, filename) if filename else "system"
        event = SecurityEvent(
            event_type=event_type,
            file_id=file_id,
            timestamp=time.time(),
            details=details,
        )
        return self._add_event(event)

    # ========================================================================
    # File Events
    # ========================================================================

    def log_file_save(self, path: str, filename: str, size: int,
                      stored_size: int, method: str) -> SecurityEvent:
        """Log a successful encrypt-and-compress save."""
        return self.log(EventType.FILE_SAVE, path, filename,
                        size=size, stored=stored_size, method=method,
                        algo="AES-256-GCM")

    def log_file_load(self, path: str, filename: str,
                      success: bool = True) -> SecurityEvent:
        """Log a load; failures are recorded as integrity failures."""
        event_type = EventType.FILE_LOAD if success else EventType.FILE_INTEGRITY_FAILED
        return self.log(event_type, path, filename, success=success)

    def log_file_delete(self, path: str, filename: str) -> SecurityEvent:
        return self.log(EventType.FILE_DELETE, path, filename)

    def log_file_copy(self, path: str, filename: str, dest_path: str,
                      dest_filename: str, decrypted: bool) -> SecurityEvent:
        return self.log(EventType.FILE_COPY, path, filename,
                        dest=get_file_id(dest_path, dest_filename),
                        decrypted=decrypted)

    def log_file_reencrypt(self, path: str, filename: str) -> SecurityEvent:
        return self.log(EventType.FILE_REENCRYPT, path, filename)

    # ========================================================================
    # Secret and Batch Events
    # ========================================================================

    def log_pepper_rotation(self) -> SecurityEvent:
        return self.log(EventType.PEPPER_ROTATED)

    def log_secret_update(self, key_changed: bool,
                          pepper_changed: bool) -> SecurityEvent:
        return self.log(EventType.SECRET_UPDATED,
                        key_changed=key_changed, pepper_changed=pepper_changed)

    def log_batch(self, operation: str, total: int, failed: int) -> SecurityEvent:
        return self.log(EventType.BATCH_COMPLETE,
                        operation=operation, total=total, failed=failed)

    # ========================================================================
    # Retrieval
    # ========================================================================

    def get_all_events(self) -> List[SecurityEvent]:
        with self._lock:
            return list(self._events)

    def get_file_events(self, path: str, filename: str) -> List[SecurityEvent]:
        """Get all events for one stored file."""
        file_id = get_file_id(path, filename)
        return [e for e in self.get_all_events() if e.file_id == file_id]

    def get_events_by_type(self, event_type: EventType) -> List[SecurityEvent]:
        """Get all events of a specific type."""
        return [e for e in self.get_all_events() if e.event_type == event_type]

    def get_recent_events(self, count: int = 10) -> List[SecurityEvent]:
        """Get the most recent events."""
        events = self.get_all_events()
        return events[-count:] if len(events) > count else events

    def print_audit_log(self, last_n: Optional[int] = None) -> None:
        """Print the audit log in a readable format."""
        events = self.get_all_events()
        if last_n:
            events = events[-last_n:]

        print("\n" + "=" * 70)
        print("FILE CODEC AUDIT LOG")
        print("=" * 70)

        for event in events:
            print(event)
            for k, v in event.details.items():
                print(f"    {k}: {v}")

        print("=" * 70)
        print(f"Total events: {len(self.get_all_events())}")
        print("=" * 70)

    def export_log(self) -> str:
        """Export the audit log as JSON lines."""
        return "\n".join(e.to_record() for e in self.get_all_events())

    @classmethod
    def import_log(cls, records: str) -> 'EventLogger':
        """Rebuild a logger from export_log() output."""
        event_logger = cls()
        with event_logger._lock:
            event_logger._events = [
                SecurityEvent.from_record(line)
                for line in records.splitlines() if line.strip()
            ]
        return event_logger


def create_event_logger(max_events: Optional[int] = None) -> EventLogger:
    """Create a new event logger."""
    return EventLogger(max_events=max_events)
