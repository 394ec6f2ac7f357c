# Copyright (c) Syntropy Systems
"""Configuration management for diskspeed."""
from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import cast

import yaml

CONFIG_DIR_NAME = ".diskspeed"
CONFIG_FILE_NAME = "config.yaml"
SCRATCH_FILE_NAME = "diskspeedtest.tmp"


@dataclass
class DiskSpeedConfig:
    """Configuration for diskspeed."""

    # Payload size of the scratch file in megabytes
    file_size_mb: float = 10.0

    # Number of four-phase cycles per run
    iterations: int = 100

    # Directory holding the scratch file (None means the platform temp dir)
    scratch_dir: Path | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to a YAML-friendly dictionary."""
        data: dict[str, object] = {
            "file_size_mb": self.file_size_mb,
            "iterations": self.iterations,
        }
        if self.scratch_dir is not None:
            data["scratch_dir"] = str(self.scratch_dir)
        return data


def find_config_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .diskspeed directory by walking up from start_path.

    Returns None if no .diskspeed directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        config_dir = current / CONFIG_DIR_NAME
        if config_dir.is_dir():
            return config_dir
        current = current.parent

    # Check root
    config_dir = current / CONFIG_DIR_NAME
    if config_dir.is_dir():
        return config_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global diskspeed config directory (~/.diskspeed)."""
    return Path.home() / CONFIG_DIR_NAME


def find_config_file(config_dir: Path | None = None) -> Path | None:
    """Locate the config file that load_config would read.

    Looks in:
    1. Provided config_dir
    2. Nearest .diskspeed directory walking up
    3. ~/.diskspeed/config.yaml
    """
    if config_dir is not None:
        config_path = config_dir / CONFIG_FILE_NAME
        return config_path if config_path.exists() else None

    found_dir = find_config_dir()
    if found_dir is not None:
        config_path = found_dir / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

    global_config = get_global_config_dir() / CONFIG_FILE_NAME
    if global_config.exists():
        return global_config

    return None


def load_config(config_dir: Path | None = None) -> DiskSpeedConfig:
    """Load configuration from .diskspeed/config.yaml or defaults.

    Values of the wrong type are ignored and the default is kept.
    """
    config = DiskSpeedConfig()

    config_path = find_config_file(config_dir)
    if config_path is None:
        return config

    with config_path.open() as f:
        data = cast("dict[str, object]", yaml.safe_load(f) or {})

    file_size_mb = data.get("file_size_mb")
    if isinstance(file_size_mb, (int, float)) and not isinstance(file_size_mb, bool):
        config.file_size_mb = float(file_size_mb)
    iterations = data.get("iterations")
    if isinstance(iterations, int) and not isinstance(iterations, bool):
        config.iterations = iterations
    scratch_dir = data.get("scratch_dir")
    if isinstance(scratch_dir, str) and scratch_dir:
        config.scratch_dir = Path(scratch_dir).expanduser()

    return config


def get_scratch_dir(config: DiskSpeedConfig | None = None) -> Path:
    """Get the directory the scratch file lives in."""
    if config is not None and config.scratch_dir is not None:
        return config.scratch_dir
    return Path(tempfile.gettempdir())


def get_scratch_path(config: DiskSpeedConfig | None = None) -> Path:
    """Get the fixed path of the scratch file all primitives target."""
    return get_scratch_dir(config) / SCRATCH_FILE_NAME
