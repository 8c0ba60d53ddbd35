"""
Command-line interface for swchanges.

This module provides the command-line entry point that prints the software
change report for a time window.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from swchanges_py import __version__
from swchanges_py.config import SwchangesConfig
from swchanges_py.platform import is_macos
from swchanges_py.report import build_sources, write_json_report, write_text_report
from swchanges_py.window import InvalidWindow, resolve_window

# Diagnostics go to stderr so the report on stdout stays clean
console = Console(stderr=True)
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=console, rich_tracebacks=True)],
)
logger = logging.getLogger("swchanges")

app = typer.Typer(
    help="Report software additions and changes on macOS between START and END.",
    add_completion=False,
)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def report(
    start: Optional[int] = typer.Option(
        None,
        "--start-date",
        "--start-datetime",
        min=0,
        metavar="EPOCH_SECONDS",
        help="Start of window (UTC epoch seconds). Defaults to END minus 3 days.",
    ),
    end: Optional[int] = typer.Option(
        None,
        "--end-datetime",
        "--end-date",
        min=0,
        metavar="EPOCH_SECONDS",
        help="End of window (UTC epoch seconds). Defaults to now.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output the report as a JSON document."
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to config file. Uses ~/.config/swchanges/config.yaml if not set.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0,
        help="Seconds before an external tool is abandoned (0 disables).",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output."
    ),
    version: bool = typer.Option(
        False, "--version", help="Show the application version and exit."
    ),
) -> None:
    """
    Generate a report of software additions/changes between START and END.

    If no window is given, START = now - 3 days and END = now.
    """
    if version:
        typer.echo(f"swchanges version: {__version__}")
        raise typer.Exit()

    if verbose:
        logger.setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    if not is_macos():
        logger.warning("Not running on macOS; most sources will report nothing.")

    config = SwchangesConfig.load(config_path)
    if timeout is not None:
        config.command_timeout = timeout or None

    try:
        window = resolve_window(start, end, lookback=config.lookback)
    except InvalidWindow as e:
        raise typer.BadParameter(str(e)) from e

    logger.debug(
        f"Reporting changes between {window.start_human} and {window.end_human}"
    )

    sources = build_sources(config)
    if json_output:
        write_json_report(window, sources, typer.echo)
    else:
        write_text_report(window, sources, typer.echo)


if __name__ == "__main__":
    app()
