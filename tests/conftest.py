# Copyright (c) Syntropy Systems
"""Pytest fixtures for diskspeed tests."""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml

# Store original cwd at module load time
_original_cwd = Path.cwd()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scratch_path(temp_dir: Path) -> Path:
    """Scratch file location inside the temporary directory."""
    return temp_dir / "diskspeedtest.tmp"


@pytest.fixture
def diskspeed_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a project whose config keeps the scratch file in temp_dir."""
    config_dir = temp_dir / ".diskspeed"
    config_dir.mkdir()
    scratch_dir = temp_dir / "scratch"
    scratch_dir.mkdir()

    config = {
        "file_size_mb": 0.05,
        "iterations": 2,
        "scratch_dir": str(scratch_dir),
    }
    with (config_dir / "config.yaml").open("w") as f:
        yaml.dump(config, f, default_flow_style=False)

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)
