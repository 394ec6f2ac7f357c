# Copyright (c) Syntropy Systems
"""Per-category sample history with incrementally maintained statistics."""
from __future__ import annotations

import bisect
from threading import Lock

from diskspeed.models.benchmark import Category, TestResultSnapshot


def _by_value(pair: tuple[int, float]) -> tuple[float, int]:
    index, value = pair
    return value, index


class TestResult:
    """Samples of one test category.

    Not synchronized on its own; ResultAggregator owns the lock.
    """

    __test__ = False  # not a pytest test class

    name: str
    samples: list[float]
    sorted_index: list[tuple[int, float]]
    _total: float
    _min: float
    _max: float

    def __init__(self, name: str) -> None:
        self.name = name
        self.samples = []
        self.sorted_index = []
        self._total = 0.0
        self._min = 0.0
        self._max = 0.0

    def append(self, speed: float) -> None:
        """Record a sample, updating min/max/sum in O(1)."""
        index = len(self.samples)
        self.samples.append(speed)
        # Ties keep insertion order: the new index is the largest so far.
        bisect.insort(self.sorted_index, (index, speed), key=_by_value)

        self._total += speed
        if index == 0:
            self._min = self._max = speed
        else:
            self._min = min(self._min, speed)
            self._max = max(self._max, speed)

    def clear(self) -> None:
        self.samples.clear()
        self.sorted_index.clear()
        self._total = 0.0
        self._min = 0.0
        self._max = 0.0

    @property
    def min_speed(self) -> float:
        return self._min

    @property
    def max_speed(self) -> float:
        return self._max

    @property
    def avg_speed(self) -> float:
        """Arithmetic mean, 0 when there are no samples."""
        if not self.samples:
            return 0.0
        mean = self._total / len(self.samples)
        # Summation rounding can push the mean a hair outside [min, max].
        return min(max(mean, self._min), self._max)

    def snapshot(self) -> TestResultSnapshot:
        return TestResultSnapshot(
            name=self.name,
            samples=tuple(self.samples),
            sorted_index=tuple(self.sorted_index),
            min_speed=self.min_speed,
            avg_speed=self.avg_speed,
            max_speed=self.max_speed,
        )


class ResultAggregator:
    """Routes samples to the TestResult of their category.

    Every mutation and every read happens under one lock, so observers only
    ever see a category with its samples and sorted index in step.
    """

    _results: dict[Category, TestResult]
    _lock: Lock

    def __init__(self) -> None:
        self._results = {category: TestResult(category.value) for category in Category}
        self._lock = Lock()

    def add(self, category: Category, speed: float) -> TestResultSnapshot:
        """Append a sample and return the category as it stands afterwards."""
        with self._lock:
            result = self._results[category]
            result.append(speed)
            return result.snapshot()

    def reset(self) -> None:
        """Empty every category."""
        with self._lock:
            for result in self._results.values():
                result.clear()

    def get(self, category: Category) -> TestResultSnapshot:
        with self._lock:
            return self._results[category].snapshot()

    def snapshot(self) -> list[TestResultSnapshot]:
        """Return all four categories in run order."""
        with self._lock:
            return [self._results[category].snapshot() for category in Category]
