# Copyright (c) Syntropy Systems
"""diskspeed init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from diskspeed.config import CONFIG_DIR_NAME, CONFIG_FILE_NAME, DiskSpeedConfig

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Create a .diskspeed directory with a default configuration."""
    target = path.resolve()
    config_dir = target / CONFIG_DIR_NAME

    if config_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {config_dir}")
        return

    config_dir.mkdir(parents=True)

    config_path = config_dir / CONFIG_FILE_NAME
    with config_path.open("w") as f:
        yaml.dump(DiskSpeedConfig().to_dict(), f, default_flow_style=False)

    console.print(f"[green]Initialized diskspeed:[/green] {config_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
