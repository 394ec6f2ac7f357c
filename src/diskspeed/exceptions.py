# Copyright (c) Syntropy Systems
"""Error types raised by diskspeed."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class DiskSpeedError(Exception):
    """Base class for all diskspeed errors."""


class ConfigurationError(DiskSpeedError, ValueError):
    """Run configuration was rejected before any state changed."""


class ScratchFileError(DiskSpeedError):
    """The scratch file could not be created or removed."""

    path: Path
    action: str
    cause: OSError

    def __init__(self, path: Path, action: str, cause: OSError) -> None:
        self.path = path
        self.action = action
        self.cause = cause
        super().__init__(f"Error {action} test file: {cause}")


class IoPhaseError(DiskSpeedError):
    """A timed I/O primitive failed.

    The engine converts this into a zero-valued sample.
    """

    phase: str
    cause: BaseException

    def __init__(self, phase: str, cause: BaseException) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(f"Error in {phase.lower()}: {cause}")
