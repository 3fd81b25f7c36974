"""Tests for debounced source change delivery."""

import os
import shutil
import tempfile
import threading
import time
import unittest

from spritelight.watch import SourceChangeWatcher


class TestSourceChangeWatcher(unittest.TestCase):
    """Test cases for SourceChangeWatcher."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "walk.png")
        with open(self.path, "wb") as f:
            f.write(b"data")
        self.delivered = []
        self.threads = []

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _callback(self, path):
        self.delivered.append(path)
        self.threads.append(threading.current_thread())

    def _wait_until_settled(self, watcher, count=1, timeout=2.0):
        deadline = time.time() + timeout
        while watcher.ready() < count and time.time() < deadline:
            time.sleep(0.01)
        return watcher.ready() >= count

    def test_notifications_coalesce(self):
        watcher = SourceChangeWatcher(self._callback, debounce_ms=50)
        for _ in range(5):
            watcher.notify(self.path)
        self.assertEqual(watcher.pending(), 1)
        self.assertTrue(self._wait_until_settled(watcher))
        time.sleep(0.1)
        self.assertEqual(watcher.pending(), 0)
        self.assertEqual(watcher.process_pending(), 1)
        self.assertEqual(self.delivered, [self.path])

    def test_delivery_only_on_drain(self):
        watcher = SourceChangeWatcher(self._callback, debounce_ms=10)
        watcher.notify(self.path)
        self.assertTrue(self._wait_until_settled(watcher))
        time.sleep(0.05)
        self.assertEqual(self.delivered, [])

        watcher.process_pending()
        self.assertEqual(self.delivered, [self.path])
        self.assertEqual(self.threads, [threading.current_thread()])
        self.assertEqual(watcher.ready(), 0)

    def test_flush_delivers_immediately(self):
        watcher = SourceChangeWatcher(self._callback, debounce_ms=10000)
        watcher.notify(self.path)
        self.assertEqual(watcher.flush(), 1)
        self.assertEqual(self.delivered, [self.path])
        self.assertEqual(watcher.pending(), 0)

    def test_cancel_drops_pending(self):
        watcher = SourceChangeWatcher(self._callback, debounce_ms=10000)
        watcher.notify(self.path)
        watcher.cancel()
        watcher.flush()
        self.assertEqual(self.delivered, [])

    def test_cancel_drops_settled(self):
        watcher = SourceChangeWatcher(self._callback, debounce_ms=10)
        watcher.notify(self.path)
        self.assertTrue(self._wait_until_settled(watcher))
        watcher.cancel()
        self.assertEqual(watcher.process_pending(), 0)
        self.assertEqual(self.delivered, [])

    def test_missing_and_empty_files_ignored(self):
        empty = os.path.join(self.temp_dir, "empty.png")
        open(empty, "wb").close()
        watcher = SourceChangeWatcher(self._callback, debounce_ms=10000)
        watcher.notify(empty)
        watcher.notify(os.path.join(self.temp_dir, "missing.png"))
        self.assertEqual(watcher.flush(), 0)
        self.assertEqual(self.delivered, [])

    def test_paths_debounced_independently(self):
        other = os.path.join(self.temp_dir, "run.png")
        with open(other, "wb") as f:
            f.write(b"data")
        watcher = SourceChangeWatcher(self._callback, debounce_ms=10000)
        watcher.notify(self.path)
        watcher.notify(other)
        watcher.notify(self.path)
        self.assertEqual(watcher.pending(), 2)
        watcher.flush()
        self.assertEqual(sorted(self.delivered), sorted([self.path, other]))


if __name__ == "__main__":
    unittest.main()
