# Copyright (c) Syntropy Systems
"""Pydantic models for benchmark configuration, results and log entries."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from pydantic import Field, ValidationError
from typing_extensions import Self

from diskspeed.exceptions import ConfigurationError

from .base import FrozenModel

BYTES_PER_MB = 1024 * 1024


class Category(str, Enum):
    """The four test categories, in the order each iteration runs them."""

    SEQUENTIAL_WRITE = "Sequential Write"
    SEQUENTIAL_READ = "Sequential Read"
    RANDOM_WRITE = "Random Write"
    RANDOM_READ = "Random Read"


class EngineState(str, Enum):
    """Lifecycle state of a benchmark engine."""

    IDLE = "idle"
    RUNNING = "running"
    CANCELLING = "cancelling"
    FINISHING = "finishing"


def _describe_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


class RunConfig(FrozenModel):
    """Validated parameters of a single run."""

    file_size_mb: float = Field(gt=0, allow_inf_nan=False)
    iterations: int = Field(gt=0, strict=True)

    @classmethod
    def create(cls, file_size_mb: float, iterations: int) -> Self:
        """Validate and build a run configuration.

        Raises:
            ConfigurationError: if either value is non-positive or non-finite

        """
        try:
            return cls(file_size_mb=file_size_mb, iterations=iterations)
        except ValidationError as exc:
            raise ConfigurationError(_describe_validation_error(exc)) from exc

    @property
    def size_bytes(self) -> int:
        """Payload size in bytes handed to the write primitives."""
        return int(self.file_size_mb * BYTES_PER_MB)


class LogEntry(FrozenModel):
    """One line of the activity log."""

    timestamp: datetime
    message: str

    def format(self) -> str:
        """Render as ``[HH:MM:SS] message``."""
        return f"[{self.timestamp.strftime('%H:%M:%S')}] {self.message}"


class TestResultSnapshot(FrozenModel):
    """Point-in-time copy of one category's samples and statistics."""

    __test__ = False  # not a pytest test class

    name: str
    samples: tuple[float, ...] = ()
    sorted_index: tuple[tuple[int, float], ...] = ()
    min_speed: float = 0.0
    avg_speed: float = 0.0
    max_speed: float = 0.0

    @property
    def count(self) -> int:
        return len(self.samples)

    @property
    def last(self) -> float | None:
        """Most recent sample, or None before the first one."""
        return self.samples[-1] if self.samples else None

    def percentile(self, fraction: float) -> float:
        """Nearest-rank percentile over the sorted samples, 0 when empty."""
        if not self.sorted_index:
            return 0.0
        rank = math.ceil(fraction * len(self.sorted_index)) - 1
        rank = min(max(rank, 0), len(self.sorted_index) - 1)
        return self.sorted_index[rank][1]


class EngineSnapshot(FrozenModel):
    """Consistent view of an engine for an observer thread."""

    state: EngineState
    file_size_mb: float
    iterations: int
    current_iteration: int
    results: tuple[TestResultSnapshot, ...]
    logs: tuple[str, ...]

    @property
    def running(self) -> bool:
        return self.state is EngineState.RUNNING

    @property
    def progress(self) -> float:
        """Fraction of iterations completed, clamped to [0, 1]."""
        return progress_fraction(self.current_iteration, self.iterations)


def progress_fraction(current_iteration: int, iterations: int) -> float:
    """Compute ``current_iteration / iterations`` clamped to [0, 1]."""
    if iterations <= 0:
        return 0.0
    return min(max(current_iteration / iterations, 0.0), 1.0)
