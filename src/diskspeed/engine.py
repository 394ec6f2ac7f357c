# Copyright (c) Syntropy Systems
"""Benchmark engine: runs the iteration loop on a background thread."""
from __future__ import annotations

import logging
from threading import Event, Lock, Thread
from typing import TYPE_CHECKING, Callable

from diskspeed.activity_log import ActivityLog
from diskspeed.config import DiskSpeedConfig, get_scratch_path
from diskspeed.exceptions import ConfigurationError, IoPhaseError, ScratchFileError
from diskspeed.io_ops import IoPrimitives, Primitives
from diskspeed.models.benchmark import (
    Category,
    EngineSnapshot,
    EngineState,
    RunConfig,
    progress_fraction,
)
from diskspeed.results import ResultAggregator

if TYPE_CHECKING:
    from pathlib import Path

    from diskspeed.models.benchmark import TestResultSnapshot

logger = logging.getLogger(__name__)


def create_scratch_file(path: Path) -> bool:
    """Create an empty scratch file if it does not exist yet.

    Returns True if the file was created, False if it was already there.

    Raises:
        ScratchFileError: if the file cannot be created

    """
    if path.exists():
        return False
    try:
        path.touch()
    except OSError as exc:
        raise ScratchFileError(path, "creating", exc) from exc
    return True


def remove_scratch_file(path: Path) -> None:
    """Delete the scratch file.

    Raises:
        ScratchFileError: if the file cannot be removed

    """
    try:
        path.unlink()
    except OSError as exc:
        raise ScratchFileError(path, "removing", exc) from exc


class BenchmarkEngine:
    """Drives benchmark runs and publishes their results and log.

    One run at a time executes on a dedicated daemon thread. All four I/O
    phases run sequentially on that thread. Observers read state through the
    properties or ``snapshot()``; every shared structure is lock-guarded and
    handed out as a copy.

    Cancellation is cooperative: ``stop()`` only sets an event that the loop
    checks before each iteration, so an iteration that has started always
    finishes its four phases.
    """

    _primitives: Primitives
    _scratch_path: Path
    _log: ActivityLog
    _aggregator: ResultAggregator
    _lock: Lock
    _state: EngineState
    _file_size_mb: float
    _iterations: int
    _current_iteration: int
    _stop_event: Event
    _thread: Thread | None

    def __init__(
        self,
        config: DiskSpeedConfig | None = None,
        primitives: Primitives | None = None,
        scratch_path: Path | None = None,
    ) -> None:
        """Initialize an idle engine.

        Args:
            config: Defaults for file size, iterations and scratch location
            primitives: I/O primitives to run (wired to this engine's log
                by default)
            scratch_path: Overrides the scratch file location from config

        """
        config = config or DiskSpeedConfig()
        self._log = ActivityLog()
        self._aggregator = ResultAggregator()
        self._primitives = primitives or IoPrimitives(log=self._log)
        self._scratch_path = scratch_path or get_scratch_path(config)

        self._lock = Lock()
        self._state = EngineState.IDLE
        self._file_size_mb = config.file_size_mb
        self._iterations = config.iterations
        self._current_iteration = 0
        self._stop_event = Event()
        self._thread = None

    def start(self, file_size_mb: float, iterations: int) -> None:
        """Begin a run in the background.

        Problems are reported through the activity log: an invalid
        configuration or a run already in progress leaves the engine as it
        was.
        """
        with self._lock:
            if self._state is not EngineState.IDLE:
                _ = self._log.add("Tests already running")
                return

            try:
                run_config = RunConfig.create(file_size_mb, iterations)
            except ConfigurationError as exc:
                _ = self._log.add(f"Invalid configuration: {exc}")
                return

            self._aggregator.reset()
            self._log.clear()
            self._file_size_mb = run_config.file_size_mb
            self._iterations = run_config.iterations
            self._current_iteration = 0
            self._state = EngineState.RUNNING
            self._stop_event = Event()

            _ = self._log.add(
                f"Starting tests with file size: {run_config.file_size_mb:.2f} MB "
                f"and {run_config.iterations} iterations"
            )

            self._thread = Thread(
                target=self._run,
                args=(run_config, self._stop_event),
                name="diskspeed-benchmark",
                daemon=True,
            )
            self._thread.start()

    def stop(self) -> None:
        """Request that the current run end after the iteration in progress."""
        with self._lock:
            if self._state is not EngineState.RUNNING:
                return
            self._state = EngineState.CANCELLING
            self._stop_event.set()
            _ = self._log.add("Tests stopped by user")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current run has finished.

        Returns True if the engine is idle afterwards.
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)
        return self.state is EngineState.IDLE

    def _run(self, run_config: RunConfig, stop_event: Event) -> None:
        """Body of the benchmark thread."""
        path = self._scratch_path
        try:
            _ = self._log.add(f"Test file location: {path}")
            try:
                if create_scratch_file(path):
                    _ = self._log.add(f"Created test file at: {path}")
            except ScratchFileError as exc:
                logger.warning("%s", exc)
                _ = self._log.add(str(exc))
                return

            try:
                completed = self._iterate(run_config, stop_event, path)
                self._finish()
                if completed:
                    _ = self._log.add("All tests completed")
            except Exception as exc:
                self._finish()
                logger.exception("Benchmark run failed", exc_info=exc)
                _ = self._log.add(f"Unexpected error: {exc}")

            try:
                remove_scratch_file(path)
            except ScratchFileError as exc:
                logger.warning("%s", exc)
                _ = self._log.add(str(exc))
            else:
                _ = self._log.add(f"Removed test file from: {path}")
        finally:
            with self._lock:
                self._state = EngineState.IDLE

    def _finish(self) -> None:
        """Leave the running state; the engine stays busy until cleanup ends."""
        with self._lock:
            if self._state is EngineState.RUNNING:
                self._state = EngineState.FINISHING

    def _iterate(self, run_config: RunConfig, stop_event: Event, path: Path) -> bool:
        """Run the iteration loop. Returns False if it was cancelled."""
        size_bytes = run_config.size_bytes
        phases: list[tuple[Category, Callable[[], float]]] = [
            (
                Category.SEQUENTIAL_WRITE,
                lambda: self._primitives.sequential_write(size_bytes, path),
            ),
            (Category.SEQUENTIAL_READ, lambda: self._primitives.sequential_read(path)),
            (
                Category.RANDOM_WRITE,
                lambda: self._primitives.random_write(size_bytes, path),
            ),
            (Category.RANDOM_READ, lambda: self._primitives.random_read(path)),
        ]

        for iteration in range(1, run_config.iterations + 1):
            if stop_event.is_set():
                return False

            _ = self._log.add(f"Starting iteration {iteration}")
            for category, operation in phases:
                self._run_phase(category, operation)

            with self._lock:
                self._current_iteration = iteration
            _ = self._log.add(f"Completed iteration {iteration}")

        return not stop_event.is_set()

    def _run_phase(self, category: Category, operation: Callable[[], float]) -> None:
        try:
            speed = operation()
        except IoPhaseError as exc:
            logger.warning("%s", exc)
            _ = self._log.add(str(exc))
            speed = 0.0

        result = self._aggregator.add(category, speed)
        _ = self._log.add(
            f"{category.value} - Speed: {speed:.2f} MB/s, "
            f"Min: {result.min_speed:.2f} MB/s, "
            f"Avg: {result.avg_speed:.2f} MB/s, "
            f"Max: {result.max_speed:.2f} MB/s"
        )

    @property
    def state(self) -> EngineState:
        with self._lock:
            return self._state

    @property
    def running(self) -> bool:
        """True while a run is in progress and has not been asked to stop."""
        return self.state is EngineState.RUNNING

    @property
    def current_iteration(self) -> int:
        with self._lock:
            return self._current_iteration

    @property
    def iterations(self) -> int:
        with self._lock:
            return self._iterations

    @property
    def file_size_mb(self) -> float:
        with self._lock:
            return self._file_size_mb

    @property
    def scratch_path(self) -> Path:
        return self._scratch_path

    @property
    def progress(self) -> float:
        """Fraction of iterations completed, clamped to [0, 1]."""
        with self._lock:
            return progress_fraction(self._current_iteration, self._iterations)

    @property
    def results(self) -> list[TestResultSnapshot]:
        return self._aggregator.snapshot()

    @property
    def logs(self) -> list[str]:
        return self._log.lines()

    def snapshot(self) -> EngineSnapshot:
        """Capture state, results and log together for display."""
        with self._lock:
            return EngineSnapshot(
                state=self._state,
                file_size_mb=self._file_size_mb,
                iterations=self._iterations,
                current_iteration=self._current_iteration,
                results=tuple(self._aggregator.snapshot()),
                logs=tuple(self._log.lines()),
            )
