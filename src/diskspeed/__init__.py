"""
diskspeed - Local storage throughput benchmark.

Sequential and random read/write speed, sampled every iteration.
"""

from diskspeed.engine import BenchmarkEngine
from diskspeed.exceptions import (
    ConfigurationError,
    DiskSpeedError,
    IoPhaseError,
    ScratchFileError,
)
from diskspeed.models.benchmark import Category, EngineState, RunConfig

__version__ = "0.1.0"
__all__ = [
    "BenchmarkEngine",
    "Category",
    "ConfigurationError",
    "DiskSpeedError",
    "EngineState",
    "IoPhaseError",
    "RunConfig",
    "ScratchFileError",
    "__version__",
]
