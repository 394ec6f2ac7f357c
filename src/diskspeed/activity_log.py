# Copyright (c) Syntropy Systems
"""Timestamped activity log shared between the benchmark thread and observers."""
from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock

from diskspeed.models.benchmark import LogEntry

logger = logging.getLogger(__name__)


class ActivityLog:
    """Append-only, thread-safe sequence of log entries.

    Entries are fully built before they are appended, so a reader never sees
    a timestamp without its message. Every message is mirrored to the
    ``diskspeed.activity_log`` logger at INFO.
    """

    _entries: list[LogEntry]
    _lock: Lock

    def __init__(self) -> None:
        self._entries = []
        self._lock = Lock()

    def add(self, message: str) -> LogEntry:
        """Append a message stamped with the current local time."""
        entry = LogEntry(timestamp=datetime.now(), message=message)  # noqa: DTZ005
        with self._lock:
            self._entries.append(entry)
        logger.info(message)
        return entry

    def clear(self) -> None:
        """Drop all entries. Only called between runs."""
        with self._lock:
            self._entries.clear()

    def entries(self) -> list[LogEntry]:
        """Return a copy of the entries in emission order."""
        with self._lock:
            return list(self._entries)

    def lines(self) -> list[str]:
        """Return the entries formatted as ``[HH:MM:SS] message``."""
        return [entry.format() for entry in self.entries()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
