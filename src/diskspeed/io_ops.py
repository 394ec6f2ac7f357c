# Copyright (c) Syntropy Systems
"""Timed I/O primitives run against the scratch file."""
from __future__ import annotations

import logging
import random
import time
from typing import TYPE_CHECKING, Callable, Protocol

from diskspeed.exceptions import IoPhaseError
from diskspeed.models.benchmark import BYTES_PER_MB, Category

if TYPE_CHECKING:
    from pathlib import Path

    from diskspeed.activity_log import ActivityLog

logger = logging.getLogger(__name__)

# Block size of the random tests, matching common filesystem granularity.
BLOCK_SIZE = 4096

# Failures inside a timed phase that become a zero sample.
PHASE_ERRORS = (OSError, MemoryError, OverflowError, ValueError)


def throughput(num_bytes: int, elapsed: float) -> float:
    """Convert bytes moved in ``elapsed`` seconds to MB/s."""
    if elapsed <= 0:
        return 0.0
    return num_bytes / elapsed / BYTES_PER_MB


class Primitives(Protocol):
    """Interface of the timed operations the engine runs each iteration."""

    def sequential_write(self, size_bytes: int, path: Path) -> float:
        ...

    def sequential_read(self, path: Path) -> float:
        ...

    def random_write(self, size_bytes: int, path: Path) -> float:
        ...

    def random_read(self, path: Path) -> float:
        ...


class IoPrimitives:
    """The four timed operations of an iteration.

    Each call measures one phase and returns its throughput in MB/s. Failures
    are logged and reported as 0 so a broken phase never aborts a run.
    """

    _log: ActivityLog | None
    _rng: random.Random
    _clock: Callable[[], float]

    def __init__(
        self,
        log: ActivityLog | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the primitives.

        Args:
            log: Activity log that receives failure messages
            rng: Source of random offsets (a fresh Random by default)
            clock: Monotonic high-resolution clock in seconds

        """
        self._log = log
        self._rng = rng or random.Random()  # noqa: S311
        self._clock = clock

    def sequential_write(self, size_bytes: int, path: Path) -> float:
        """Write ``size_bytes`` zero bytes to ``path`` in one call."""
        try:
            payload = bytes(size_bytes)
            start = self._clock()
            _ = path.write_bytes(payload)
            elapsed = self._clock() - start
        except PHASE_ERRORS as exc:
            return self._failed(Category.SEQUENTIAL_WRITE, exc)
        return throughput(size_bytes, elapsed)

    def sequential_read(self, path: Path) -> float:
        """Read the whole of ``path`` into memory."""
        try:
            start = self._clock()
            _ = path.read_bytes()
            elapsed = self._clock() - start
            file_size = path.stat().st_size
        except PHASE_ERRORS as exc:
            return self._failed(Category.SEQUENTIAL_READ, exc)
        return throughput(file_size, elapsed)

    def random_write(self, size_bytes: int, path: Path) -> float:
        """Write 4KB blocks at random offsets within ``size_bytes``.

        Throughput is reported against ``size_bytes`` even though random
        offsets overlap.
        """
        chunks = size_bytes // BLOCK_SIZE
        block = bytes(BLOCK_SIZE)
        try:
            start = self._clock()
            with path.open("r+b") as f:
                for _ in range(chunks):
                    _ = f.seek(self._rng.randrange(size_bytes))
                    _ = f.write(block)
            elapsed = self._clock() - start
        except PHASE_ERRORS as exc:
            return self._failed(Category.RANDOM_WRITE, exc)
        return throughput(size_bytes, elapsed)

    def random_read(self, path: Path) -> float:
        """Read 4KB blocks at random offsets within the file's actual size."""
        try:
            start = self._clock()
            with path.open("rb") as f:
                file_size = path.stat().st_size
                for _ in range(file_size // BLOCK_SIZE):
                    _ = f.seek(self._rng.randrange(file_size))
                    _ = f.read(BLOCK_SIZE)
            elapsed = self._clock() - start
            file_size = path.stat().st_size
        except PHASE_ERRORS as exc:
            return self._failed(Category.RANDOM_READ, exc)
        return throughput(file_size, elapsed)

    def _failed(self, category: Category, exc: Exception) -> float:
        error = IoPhaseError(category.value, exc)
        logger.warning("%s", error)
        if self._log is not None:
            _ = self._log.add(str(error))
        return 0.0
