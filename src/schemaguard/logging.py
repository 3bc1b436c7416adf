"""Console output and logging for the schemaguard CLI.

Reports (terminal, JSON, Markdown, annotations) go to stdout through
``click.echo`` so they can be piped. Everything here writes human-facing
status to the rich consoles: log records, errors, and styled criticality
labels.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

if TYPE_CHECKING:
    from schemaguard.errors import SchemaLoadError

console = Console()
err_console = Console(stderr=True)

# Loggers that get the rich handler in verbose mode, besides our own
_VERBOSE_LOGGERS = ("httpx",)

CRITICALITY_STYLES = {
    "BREAKING": "red",
    "DANGEROUS": "yellow",
    "NON_BREAKING": "green",
}


def setup_logging(
    verbosity: Literal["quiet", "normal", "verbose"] = "normal",
) -> logging.Logger:
    """Route schemaguard log records to stderr at the given verbosity.

    Interceptor fallbacks log at WARNING, so they stay visible unless
    ``quiet``. Verbose mode also shows each interceptor HTTP request.
    """
    level_map = {
        "quiet": logging.ERROR,
        "normal": logging.INFO,
        "verbose": logging.DEBUG,
    }
    handler = RichHandler(
        console=err_console,
        show_time=verbosity == "verbose",
        show_path=verbosity == "verbose",
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("schemaguard")
    logger.handlers.clear()
    logger.setLevel(level_map[verbosity])
    logger.addHandler(handler)

    for name in _VERBOSE_LOGGERS:
        extra = logging.getLogger(name)
        extra.handlers.clear()
        if verbosity == "verbose":
            extra.setLevel(logging.INFO)
            extra.addHandler(handler)
            extra.propagate = False
        else:
            extra.setLevel(logging.WARNING)
            extra.propagate = True

    return logger


def styled_level(level: str) -> str:
    """Rich markup for a criticality level; unknown levels are left plain."""
    style = CRITICALITY_STYLES.get(level)
    return f"[{style}]{level}[/{style}]" if style else escape(level)


def print_schema_error(error: SchemaLoadError) -> None:
    """Print an SDL error as ``file:line: message``."""
    location = f"{error.file_path}:{error.line}" if error.line else error.file_path
    print_error(f"{location}: {error.message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message to stdout."""
    console.print(f"[green]{escape(message)}[/green]")


def print_info(message: str) -> None:
    console.print(escape(message))
