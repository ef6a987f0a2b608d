"""Shared CLI helpers: console, exit codes, message and logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130

console = Console()
err_console = Console(stderr=True)


def _info(message: str) -> None:
    console.print(f"[cyan]{message}[/cyan]")


def _success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def _warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def _error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")


def _setup_logging(verbose: bool = False) -> None:
    """Route log records through rich on stderr.

    Args:
        verbose: Log at DEBUG instead of WARNING.

    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
