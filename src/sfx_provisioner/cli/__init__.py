"""``sfx-provisioner`` command line."""

from __future__ import annotations

import logging
import os

import typer

from sfx_provisioner import __version__

app = typer.Typer(
    name="sfx-provisioner",
    help="Manage SignalFx text charts from a YAML file.",
    no_args_is_help=True,
    add_completion=False,
)

LOG_ENV = "SFX_LOG"


def _log_level(verbose: int) -> int | None:
    """``SFX_LOG`` wins over ``-v``; None means stay quiet."""
    name = os.environ.get(LOG_ENV, "").strip().upper()
    if name:
        level = logging.getLevelName(name)
        if isinstance(level, int):
            return level
        typer.echo(f"Ignoring {LOG_ENV}={name!r}: not a log level", err=True)
        return logging.INFO
    return {0: None, 1: logging.INFO}.get(verbose, logging.DEBUG)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"sfx-provisioner {__version__}")
        raise typer.Exit


@app.callback()
def main(
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="-v for progress logs, -vv for HTTP detail."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_show_version,
        is_eager=True,
        help="Print the version and exit.",
    ),
) -> None:
    """Plan and apply SignalFx text charts."""
    _ = version
    level = _log_level(verbose)
    if level is None:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s"))
    logger = logging.getLogger("sfx_provisioner")
    logger.handlers[:] = [handler]
    logger.setLevel(level)


from sfx_provisioner.cli import commands as _commands  # noqa: E402, F401
