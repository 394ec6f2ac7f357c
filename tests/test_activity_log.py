# Copyright (c) Syntropy Systems
"""Tests for the activity log."""

import logging
import re
import threading
from datetime import datetime

import pytest

from diskspeed.activity_log import ActivityLog
from diskspeed.models.benchmark import LogEntry

LINE_PATTERN = re.compile(r"^\[\d{2}:\d{2}:\d{2}\] ")


class TestActivityLog:
    """Tests for ActivityLog."""

    def test_lines_are_timestamped(self) -> None:
        """Lines render as [HH:MM:SS] message."""
        log = ActivityLog()
        _ = log.add("Starting iteration 1")

        (line,) = log.lines()
        assert LINE_PATTERN.match(line)
        assert line.endswith("] Starting iteration 1")

    def test_entry_format(self) -> None:
        """LogEntry.format uses the local wall-clock time."""
        entry = LogEntry(timestamp=datetime(2024, 5, 1, 9, 5, 7), message="hello")

        assert entry.format() == "[09:05:07] hello"

    def test_order_and_clear(self) -> None:
        """Entries keep emission order until cleared."""
        log = ActivityLog()
        for i in range(3):
            _ = log.add(f"message {i}")

        assert [entry.message for entry in log.entries()] == [
            "message 0",
            "message 1",
            "message 2",
        ]

        log.clear()
        assert len(log) == 0
        assert log.lines() == []

    def test_entries_returns_copy(self) -> None:
        """Mutating the returned list does not touch the log."""
        log = ActivityLog()
        _ = log.add("one")

        entries = log.entries()
        entries.clear()

        assert len(log) == 1

    def test_mirrors_to_python_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        """Every message is also emitted on the module logger."""
        log = ActivityLog()
        with caplog.at_level(logging.INFO, logger="diskspeed.activity_log"):
            _ = log.add("Test file location: /tmp/x")

        assert "Test file location: /tmp/x" in caplog.text

    def test_concurrent_appends_are_not_lost(self) -> None:
        """Appends from several threads all arrive intact."""
        log = ActivityLog()
        num_threads = 8
        per_thread = 250

        def writer(thread_id: int) -> None:
            for i in range(per_thread):
                _ = log.add(f"thread {thread_id} entry {i}")

        threads = [threading.Thread(target=writer, args=(t,)) for t in range(num_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        lines = log.lines()
        assert len(lines) == num_threads * per_thread
        assert all(LINE_PATTERN.match(line) for line in lines)
        for thread_id in range(num_threads):
            mine = [line for line in lines if f"thread {thread_id} entry" in line]
            assert [line.rsplit(" ", 1)[1] for line in mine] == [
                str(i) for i in range(per_thread)
            ]
