# Copyright (c) Syntropy Systems
"""Main CLI entry point for diskspeed."""

import typer

from diskspeed.cli.doctor import doctor
from diskspeed.cli.init_cmd import init
from diskspeed.cli.run_cmd import run

app = typer.Typer(
    name="diskspeed",
    help=(
        "Local storage benchmark. Sequential and random read/write "
        "throughput, iteration by iteration."
    ),
    no_args_is_help=True,
    add_completion=False,
)

# Register commands
_ = app.command()(init)
_ = app.command()(run)
_ = app.command()(doctor)


if __name__ == "__main__":
    app()
