"""
Unit tests for the concurrent batch runner.

Tests:
- Results aligned with input order
- Per-item error isolation
- Concurrency bound
- SecureFile helpers
"""

import random
import threading
import time

import pytest

from sealfile.batch.batch_processor import BatchProcessor, BatchResult
from sealfile.config import DEFAULT_CONCURRENCY, SealConfig
from sealfile.files.file_manager import FileManager


class TestBatchProcessor:
    """Tests for BatchProcessor.run."""

    def test_order_preserved(self):
        """Results follow input order whatever the completion order."""
        rng = random.Random(1)
        delays = [rng.uniform(0, 0.02) for _ in range(20)]

        def op(i):
            time.sleep(delays[i])
            return i * i

        results = BatchProcessor(4).run(range(20), op)
        assert [r.item for r in results] == list(range(20))
        assert [r.value for r in results] == [i * i for i in range(20)]

    def test_failure_isolated(self):
        """One failing item does not affect the others."""
        def op(i):
            if i == 3:
                raise RuntimeError("boom")
            return i

        results = BatchProcessor().run(range(6), op)
        assert [r.ok for r in results] == [True, True, True, False, True, True]
        assert isinstance(results[3].error, RuntimeError)
        assert results[3].value is None
        assert [r.value for r in results if r.ok] == [0, 1, 2, 4, 5]

    def test_all_fail(self):
        results = BatchProcessor(2).run(["a", "b"], lambda s: int(s))
        assert all(isinstance(r.error, ValueError) for r in results)

    def test_empty(self):
        assert BatchProcessor().run([], lambda x: x) == []

    @pytest.mark.parametrize("value", [0, -3, None])
    def test_concurrency_coerced(self, value):
        """Non-positive concurrency falls back to the default."""
        assert BatchProcessor(value).concurrency == DEFAULT_CONCURRENCY == 5

    def test_concurrency_bound(self):
        """No more than K operations run at once."""
        lock = threading.Lock()
        active = 0
        peak = 0

        def op(_):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

        BatchProcessor(3).run(range(15), op)
        assert 1 <= peak <= 3

    def test_result_ok(self):
        assert BatchResult(item=1, value=2).ok
        assert not BatchResult(item=1, error=ValueError()).ok


class TestSecureFileHelpers:
    """Tests for save_all / load_all / delete_all / re_encrypt_all."""

    @pytest.fixture
    def manager(self):
        return FileManager(SealConfig(encryption_key="batch-key", pepper="batch-pepper",
                                      iterations=1000))

    def test_save_load_delete(self, manager, tmp_path):
        files = [manager.new_secure_file(f"file {i}".encode() * 20, str(tmp_path), f"f{i}.bin")
                 for i in range(6)]
        processor = BatchProcessor(2)

        saved = processor.save_all(files)
        assert all(r.ok for r in saved)

        readers = [manager.new_secure_file(None, f.path, f.filename) for f in files]
        loaded = processor.load_all(readers)
        assert [r.value for r in loaded] == [f.data for f in files]
        assert [r.data for r in readers] == [f.data for f in files]

        deleted = processor.delete_all(readers)
        assert all(r.ok for r in deleted)
        assert list(tmp_path.iterdir()) == []

    def test_load_missing_isolated(self, manager, tmp_path):
        good = manager.save_data_as_secure_file(b"present", str(tmp_path), "good.bin")
        missing = manager.new_secure_file(None, str(tmp_path), "missing.bin")
        results = BatchProcessor().load_all([missing, good])
        assert not results[0].ok
        assert results[1].value == b"present"

    def test_re_encrypt_all(self, manager, tmp_path):
        files = [manager.save_data_as_secure_file(b"data %d" % i, str(tmp_path), f"r{i}.bin")
                 for i in range(3)]
        manager.rotate_pepper("batch-pepper-2")

        results = BatchProcessor().re_encrypt_all(manager, files,
                                                  previous_pepper="batch-pepper")
        assert all(r.ok for r in results)
        for i, f in enumerate(files):
            assert manager.load_secure_file_from_disk(f.path, f.filename).data == b"data %d" % i
