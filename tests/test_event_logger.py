"""
Unit tests for the audit event logger.

Tests:
- Event creation and privacy-preserving ids
- Queries
- JSON-lines export and import
- Callbacks
"""

import logging

from sealfile.integration.event_logger import (
    EventLogger,
    EventType,
    SecurityEvent,
    create_event_logger,
    get_file_id,
)


class TestFileId:
    """Tests for privacy-preserving file ids."""

    def test_stable(self):
        assert get_file_id("/data", "a.txt") == get_file_id("/data", "a.txt")

    def test_length_and_privacy(self):
        file_id = get_file_id("/data/secret", "payroll.xlsx")
        assert len(file_id) == 16
        assert "payroll" not in file_id

    def test_trailing_slash_ignored(self):
        assert get_file_id("/data/", "a.txt") == get_file_id("/data", "a.txt")

    def test_distinct_locations(self):
        assert get_file_id("/a", "x") != get_file_id("/b", "x")


class TestEventLogger:
    """Tests for EventLogger."""

    def test_log_file_save(self):
        events = create_event_logger()
        event = events.log_file_save("/data", "a.txt", 100, 60, "ZSTD")
        assert event.event_type is EventType.FILE_SAVE
        assert event.file_id == get_file_id("/data", "a.txt")
        assert event.details['method'] == "ZSTD"
        assert event.details['stored'] == 60

    def test_failed_load_is_integrity_event(self):
        events = EventLogger()
        events.log_file_load("/data", "a.txt", success=False)
        assert len(events.get_events_by_type(EventType.FILE_INTEGRITY_FAILED)) == 1
        assert events.get_events_by_type(EventType.FILE_LOAD) == []

    def test_system_events(self):
        events = EventLogger()
        assert events.log_pepper_rotation().file_id == "system"
        event = events.log_batch("save", total=5, failed=1)
        assert event.details == {'operation': "save", 'total': 5, 'failed': 1}

    def test_file_events_query(self):
        events = EventLogger()
        events.log_file_save("/d", "a", 1, 1, "LZ4")
        events.log_file_load("/d", "a")
        events.log_file_save("/d", "b", 1, 1, "LZ4")
        assert len(events.get_file_events("/d", "a")) == 2

    def test_recent_events(self):
        events = EventLogger()
        for i in range(20):
            events.log_batch("save", i, 0)
        recent = events.get_recent_events(5)
        assert [e.details['total'] for e in recent] == [15, 16, 17, 18, 19]

    def test_max_events(self):
        events = EventLogger(max_events=3)
        for i in range(10):
            events.log_batch("load", i, 0)
        assert [e.details['total'] for e in events.get_all_events()] == [7, 8, 9]

    def test_export_import(self):
        events = EventLogger()
        events.log_file_copy("/src", "a", "/dst", "b", decrypted=True)
        events.log_secret_update(key_changed=False, pepper_changed=True)

        restored = EventLogger.import_log(events.export_log())
        original = events.get_all_events()
        copied = restored.get_all_events()
        assert len(copied) == 2
        for a, b in zip(original, copied):
            assert a.event_type == b.event_type
            assert a.file_id == b.file_id
            assert a.details == b.details

    def test_record_round_trip(self):
        event = SecurityEvent(EventType.FILE_DELETE, "abcd", 1700000000.0, {'x': 1})
        assert SecurityEvent.from_record(event.to_record()) == event

    def test_callbacks(self):
        events = EventLogger()
        seen = []
        events.add_callback(seen.append)
        events.log_file_delete("/d", "a")
        events.remove_callback(seen.append)
        events.log_file_delete("/d", "b")
        assert len(seen) == 1

    def test_broken_callback_does_not_propagate(self):
        events = EventLogger()

        def broken(_event):
            raise RuntimeError("subscriber bug")

        events.add_callback(broken)
        events.log_file_reencrypt("/d", "a")
        assert len(events.get_all_events()) == 1

    def test_mirrored_to_audit_logger(self, caplog):
        events = EventLogger()
        with caplog.at_level(logging.INFO, logger="sealfile.audit"):
            events.log_file_delete("/d", "a")
        assert any(r.name == "sealfile.audit" and "file_delete" in r.getMessage()
                   for r in caplog.records)

    def test_print_audit_log(self, capsys):
        events = EventLogger()
        events.log_file_save("/d", "a", 10, 5, "XZ")
        events.print_audit_log()
        out = capsys.readouterr().out
        assert "file_save" in out
        assert "Total events: 1" in out
