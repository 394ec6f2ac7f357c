# Copyright (c) Syntropy Systems
"""Tests for the timed I/O primitives."""

from __future__ import annotations

import random
from collections.abc import Iterator
from pathlib import Path

import pytest

from diskspeed.activity_log import ActivityLog
from diskspeed.io_ops import BLOCK_SIZE, IoPrimitives, throughput

MIB = 1024 * 1024


def fake_clock(*ticks: float):
    """Clock that returns the given readings in order."""
    readings: Iterator[float] = iter(ticks)
    return lambda: next(readings)


class RecordingRandom(random.Random):
    """Random source that remembers every offset it hands out."""

    def __init__(self, seed: int = 1234) -> None:
        super().__init__(seed)
        self.offsets: list[int] = []
        self.bounds: list[int] = []

    def randrange(self, *args, **kwargs) -> int:  # type: ignore[override]
        value = super().randrange(*args, **kwargs)
        self.bounds.append(args[0])
        self.offsets.append(value)
        return value


class TestThroughput:
    """Tests for the MB/s conversion."""

    def test_bytes_per_second_to_mb(self) -> None:
        """1 MiB in half a second is 2 MB/s."""
        assert throughput(MIB, 0.5) == 2.0

    def test_zero_elapsed_is_zero(self) -> None:
        """A non-positive elapsed time yields 0 rather than dividing by zero."""
        assert throughput(MIB, 0.0) == 0.0


class TestSequential:
    """Tests for the sequential primitives."""

    def test_sequential_write(self, scratch_path: Path) -> None:
        """Writes size_bytes zeroes and times only the write."""
        primitives = IoPrimitives(clock=fake_clock(10.0, 10.5))

        speed = primitives.sequential_write(MIB, scratch_path)

        assert speed == 2.0
        assert scratch_path.stat().st_size == MIB
        assert scratch_path.read_bytes() == bytes(MIB)

    def test_sequential_write_replaces_contents(self, scratch_path: Path) -> None:
        """An existing larger file is replaced, not appended to."""
        _ = scratch_path.write_bytes(b"x" * (2 * MIB))
        primitives = IoPrimitives(clock=fake_clock(0.0, 1.0))

        _ = primitives.sequential_write(MIB, scratch_path)

        assert scratch_path.stat().st_size == MIB

    def test_sequential_read_uses_actual_size(self, scratch_path: Path) -> None:
        """Read throughput is computed from the on-disk size."""
        _ = scratch_path.write_bytes(bytes(MIB // 2))
        primitives = IoPrimitives(clock=fake_clock(0.0, 0.25))

        speed = primitives.sequential_read(scratch_path)

        assert speed == 2.0

    def test_sequential_read_missing_file(self, scratch_path: Path) -> None:
        """A missing file logs the failure and yields 0."""
        log = ActivityLog()
        primitives = IoPrimitives(log=log)

        speed = primitives.sequential_read(scratch_path)

        assert speed == 0.0
        assert any("Error in sequential read" in line for line in log.lines())

    def test_sequential_write_failure(self, temp_dir: Path) -> None:
        """Writing to a directory path fails and yields 0."""
        log = ActivityLog()
        primitives = IoPrimitives(log=log)

        speed = primitives.sequential_write(MIB, temp_dir)

        assert speed == 0.0
        assert any("Error in sequential write" in line for line in log.lines())

    def test_sequential_write_unallocatable_size(self, scratch_path: Path) -> None:
        """A size too large to allocate is a failed phase, not a crash."""
        log = ActivityLog()
        primitives = IoPrimitives(log=log)

        assert primitives.sequential_write(2**64, scratch_path) == 0.0
        assert any("Error in sequential write" in line for line in log.lines())
        assert not scratch_path.exists()


class TestRandom:
    """Tests for the random-offset primitives."""

    def test_random_write_offsets(self, scratch_path: Path) -> None:
        """One uniformly drawn offset per 4KB block, within [0, size)."""
        size = 64 * BLOCK_SIZE
        _ = scratch_path.write_bytes(bytes(size))
        rng = RecordingRandom()
        primitives = IoPrimitives(rng=rng, clock=fake_clock(0.0, 0.5))

        speed = primitives.random_write(size, scratch_path)

        assert len(rng.offsets) == size // BLOCK_SIZE
        assert all(0 <= offset < size for offset in rng.offsets)
        assert set(rng.bounds) == {size}
        assert len(set(rng.offsets)) > 1
        # Throughput is against the configured size, not bytes touched.
        assert speed == pytest.approx(size / 0.5 / MIB)

    def test_random_write_does_not_truncate(self, scratch_path: Path) -> None:
        """The file is modified in place; random blocks may extend it."""
        size = 16 * BLOCK_SIZE
        _ = scratch_path.write_bytes(b"\xff" * size)
        primitives = IoPrimitives(rng=RecordingRandom(), clock=fake_clock(0.0, 1.0))

        _ = primitives.random_write(size, scratch_path)

        assert size <= scratch_path.stat().st_size < size + BLOCK_SIZE

    def test_random_write_missing_file(self, scratch_path: Path) -> None:
        """Random write needs an existing file; otherwise it yields 0."""
        log = ActivityLog()
        primitives = IoPrimitives(log=log)

        speed = primitives.random_write(4 * BLOCK_SIZE, scratch_path)

        assert speed == 0.0
        assert not scratch_path.exists()
        assert any("Error in random write" in line for line in log.lines())

    def test_random_read_uses_actual_size(self, scratch_path: Path) -> None:
        """Block count and throughput come from the file's real size."""
        actual = 10 * BLOCK_SIZE + 100
        _ = scratch_path.write_bytes(bytes(actual))
        rng = RecordingRandom()
        primitives = IoPrimitives(rng=rng, clock=fake_clock(0.0, 0.25))

        speed = primitives.random_read(scratch_path)

        assert len(rng.offsets) == actual // BLOCK_SIZE
        assert all(0 <= offset < actual for offset in rng.offsets)
        assert speed == pytest.approx(actual / 0.25 / MIB)

    def test_random_read_missing_file(self, scratch_path: Path) -> None:
        """A missing file logs the failure and yields 0."""
        log = ActivityLog()
        primitives = IoPrimitives(log=log)

        assert primitives.random_read(scratch_path) == 0.0
        assert any("Error in random read" in line for line in log.lines())

    def test_empty_file_reads_nothing(self, scratch_path: Path) -> None:
        """An empty file performs no reads and reports 0 MB/s."""
        scratch_path.touch()
        rng = RecordingRandom()
        primitives = IoPrimitives(rng=rng, clock=fake_clock(0.0, 0.1))

        assert primitives.random_read(scratch_path) == 0.0
        assert rng.offsets == []


def test_real_clock_round(scratch_path: Path) -> None:
    """With the real clock all four phases produce positive speeds."""
    primitives = IoPrimitives()
    size = 32 * BLOCK_SIZE

    results = [
        primitives.sequential_write(size, scratch_path),
        primitives.sequential_read(scratch_path),
        primitives.random_write(size, scratch_path),
        primitives.random_read(scratch_path),
    ]

    assert all(speed >= 0.0 for speed in results)
    assert results[0] > 0.0
