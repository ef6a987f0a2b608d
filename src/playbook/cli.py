"""Command line interface for playbook.

Example:
    $ playbook create dev
    $ playbook find --add-to dev
    $ playbook run dev
    $ playbook line-limit 200
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from playbook.cli_utils import (
    EXIT_CANCELLED,
    EXIT_ERROR,
    _error,
    _info,
    _setup_logging,
    _success,
    _warning,
    console,
)
from playbook.core.config import load_config
from playbook.core.exceptions import ConfigError, PlaybookError, RunFailedError
from playbook.core.models import Play
from playbook.core.playbook import Playbook
from playbook.orchestrator.state import RunOutcome

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="playbook",
    help="Run a named set of projects as concurrent processes",
    no_args_is_help=True,
)


def _book(ctx: typer.Context) -> Playbook:
    return ctx.obj["playbook"]


def _require_play(book: Playbook, name: str) -> Play:
    play = book.get(name)
    if play is None:
        _error(f'Play "{name}" does not exist')
        raise typer.Exit(code=EXIT_ERROR)
    return play


@app.callback()
def main(
    ctx: typer.Context,
    cwd: Path = typer.Option(
        Path("."),
        "--cwd",
        "-C",
        help="Working root holding playbook.yaml (default: current directory)",
    ),
    config: Path = typer.Option(
        None,
        "--config",
        help="Path to config file (default: ~/.config/playbook/config.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run a named set of projects as concurrent processes."""
    _setup_logging(verbose)

    root = cwd.resolve()
    if not root.is_dir():
        _error(f"Not a directory: {root}")
        raise typer.Exit(code=EXIT_ERROR)

    try:
        loaded = load_config(config)
    except ConfigError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None

    ctx.obj = {"playbook": Playbook(cwd=root, config=loaded)}


@app.command(name="list")
def list_command(ctx: typer.Context) -> None:
    """List stored plays."""
    plays = _book(ctx).get_all()
    if not plays:
        _info("No plays defined. Create one with `playbook create NAME`.")
        return

    table = Table(title="Plays")
    table.add_column("Name", style="bold")
    table.add_column("Projects", justify="right")
    table.add_column("Enabled", justify="right")
    for play in plays:
        table.add_row(escape(play.name), str(len(play.projects)), str(len(play.enabled_projects)))
    console.print(table)


@app.command(name="show")
def show_command(ctx: typer.Context, name: str = typer.Argument(..., help="Play name")) -> None:
    """Show the projects of a play."""
    play = _require_play(_book(ctx), name)

    table = Table(title=f"Play: {escape(play.name)}")
    table.add_column("#", justify="right")
    table.add_column("Cwd")
    table.add_column("Command")
    table.add_column("Delay (ms)", justify="right")
    table.add_column("Enabled")
    default_command = _book(ctx).orchestrator.default_command
    for index, project in enumerate(play.projects, start=1):
        command = " ".join([project.command or default_command, *project.args])
        table.add_row(
            str(index),
            escape(project.cwd),
            escape(command),
            str(project.delay),
            "[green]yes[/green]" if project.enabled else "[dim]no[/dim]",
        )
    console.print(table)


@app.command(name="create")
def create_command(ctx: typer.Context, name: str = typer.Argument(..., help="Play name")) -> None:
    """Create an empty play."""
    try:
        _book(ctx).create(name)
    except (PlaybookError, ValueError) as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None
    _success(f'Created play "{name}"')


@app.command(name="delete")
def delete_command(ctx: typer.Context, name: str = typer.Argument(..., help="Play name")) -> None:
    """Delete a play."""
    book = _book(ctx)
    if book.get(name) is None:
        _warning(f'Play "{name}" does not exist')
    book.delete(name)
    _success(f'Deleted play "{name}"')


@app.command(name="find")
def find_command(
    ctx: typer.Context,
    directory: Path = typer.Argument(None, help="Directory to scan (default: --cwd)"),
    add_to: str = typer.Option(None, "--add-to", help="Append discovered projects to this play"),
) -> None:
    """Discover runnable projects in a directory tree."""
    book = _book(ctx)
    root = (directory or book.cwd).resolve()
    if not root.is_dir():
        _error(f"Not a directory: {root}")
        raise typer.Exit(code=EXIT_ERROR)

    result = book.discover(root)
    for err in result.errors:
        _warning(str(err))

    if not result.projects:
        _info(f"No projects found under {root}")
        return

    table = Table(title=f"Projects under {escape(str(root))}")
    table.add_column("Name")
    table.add_column("Cwd")
    table.add_column("Command")
    for project in result.projects:
        command = " ".join([project.command or book.orchestrator.default_command, *project.args])
        table.add_row(escape(project.label), escape(project.cwd), escape(command))
    console.print(table)

    if add_to:
        play = book.get(add_to) or book.create(add_to)
        play.projects.extend(book.rebase(result.projects, root))
        book.save(play)
        _success(f'Added {len(result.projects)} projects to "{add_to}"')


@app.command(name="run")
def run_command(ctx: typer.Context, name: str = typer.Argument(..., help="Play name")) -> None:
    """Run every enabled project of a play. Ctrl+C cancels."""
    book = _book(ctx)
    play = _require_play(book, name)

    def sink(line: str) -> None:
        console.print(line, markup=False, highlight=False)

    async def _run() -> RunOutcome:
        try:
            result = await book.run(play, sink)
        except asyncio.CancelledError:
            _warning("Cancelling, waiting for processes to exit...")
            await book.cancel()
            return RunOutcome.CANCELLED
        return result.outcome

    try:
        outcome = asyncio.run(_run())
    except RunFailedError as e:
        for failure in e.failures:
            _error(str(failure))
        raise typer.Exit(code=EXIT_ERROR) from None
    except PlaybookError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None

    if outcome == RunOutcome.CANCELLED:
        raise typer.Exit(code=EXIT_CANCELLED)
    _success(f'Play "{name}" completed')


@app.command(name="line-limit")
def line_limit_command(
    ctx: typer.Context,
    value: str = typer.Argument(None, help="New limit; omit to show the current one"),
) -> None:
    """Show or set the number of output lines kept per run."""
    book = _book(ctx)
    if value is not None:
        book.line_limit = value
    console.print(str(book.line_limit))


if __name__ == "__main__":
    app()
