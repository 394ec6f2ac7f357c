# Copyright (c) Syntropy Systems
"""diskspeed doctor command."""

import os
import shutil

from rich.console import Console

from diskspeed.config import find_config_file, get_scratch_dir, get_scratch_path, load_config
from diskspeed.io_ops import BLOCK_SIZE
from diskspeed.models.benchmark import BYTES_PER_MB

console = Console()


def doctor() -> None:
    """Check that a benchmark can run and diagnose issues.

    Verifies:
    - configuration file and values
    - scratch directory exists and is writable
    - free space for the scratch file
    - no stale scratch file from an interrupted run
    """
    issues: list[str] = []
    warnings: list[str] = []

    # Configuration
    config_path = find_config_file()
    if config_path is None:
        console.print("[dim]•[/dim] No config file found, using defaults")
    else:
        console.print(f"[green]✓[/green] Config: {config_path}")

    config = load_config()
    console.print(
        f"[dim]•[/dim] File size {config.file_size_mb:.2f} MB, "
        f"{config.iterations} iterations"
    )
    if config.file_size_mb <= 0 or config.iterations <= 0:
        console.print("[red]✗[/red] file_size_mb and iterations must be positive")
        issues.append("Invalid configuration")

    # Scratch directory
    scratch_dir = get_scratch_dir(config)
    if not scratch_dir.is_dir():
        console.print(f"[red]✗[/red] Scratch directory not found: {scratch_dir}")
        issues.append("Scratch directory missing")
    elif not os.access(scratch_dir, os.W_OK):
        console.print(f"[red]✗[/red] Scratch directory not writable: {scratch_dir}")
        issues.append("Scratch directory not writable")
    else:
        console.print(f"[green]✓[/green] Scratch directory: {scratch_dir}")

        # Random writes can extend the file by up to one block
        needed = int(config.file_size_mb * BYTES_PER_MB) + BLOCK_SIZE
        try:
            free = shutil.disk_usage(scratch_dir).free
        except OSError as e:
            console.print(f"[yellow]⚠[/yellow] Could not read free space: {e}")
            warnings.append(f"Free space check failed: {e}")
        else:
            free_mb = free / BYTES_PER_MB
            if free < needed:
                console.print(
                    f"[red]✗[/red] Free space {free_mb:.0f} MB, "
                    f"need {needed / BYTES_PER_MB:.2f} MB"
                )
                issues.append("Not enough free space")
            else:
                console.print(f"[green]✓[/green] Free space: {free_mb:.0f} MB")

    scratch_path = get_scratch_path(config)
    if scratch_path.exists():
        console.print(f"[yellow]⚠[/yellow] Stale scratch file: {scratch_path}")
        warnings.append("Scratch file left over from an interrupted run")

    # Summary
    console.print()
    if issues:
        console.print(f"[red]Found {len(issues)} issue(s)[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
    elif warnings:
        console.print(f"[yellow]Found {len(warnings)} warning(s)[/yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")
    else:
        console.print("[green]All checks passed[/green]")
