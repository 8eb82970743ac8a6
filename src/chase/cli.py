"""CLI interface for chase."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from . import __version__
from . import output
from .chaser import Chaser
from .data import Control, Line, Pos


app = typer.Typer(
    name="chase",
    help="Chase a file through thick and thin",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        output.console.print(f"chase v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=output.err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """chase - follow a file like tail -F, with line numbers and resume support."""
    pass


@app.command()
def follow(
    file: Annotated[
        Path,
        typer.Argument(help="The file you want to chase"),
    ],
    line: Annotated[
        Optional[int],
        typer.Option("--line", "-L", min=0, help="Line to start chasing from (default 0)"),
    ] = None,
    count: Annotated[
        Optional[int],
        typer.Option("--count", "-n", min=1, help="Exit after printing this many lines"),
    ] = None,
    show_position: Annotated[
        bool,
        typer.Option("--show-position", "-p", help="Prefix lines with line:byte-offset"),
    ] = False,
    poll_interval: Annotated[
        Optional[float],
        typer.Option(
            "--poll-interval",
            min=0.0,
            envvar="CHASE_POLL_INTERVAL",
            help="Seconds between polls and between open retries",
        ),
    ] = None,
    startup_attempts: Annotated[
        Optional[int],
        typer.Option("--startup-attempts", min=1, help="Give up opening the file after N tries"),
    ] = None,
    rotation_attempts: Annotated[
        Optional[int],
        typer.Option(
            "--rotation-attempts",
            min=1,
            envvar="CHASE_ROTATION_ATTEMPTS",
            help="Give up re-opening a rotated file after N tries",
        ),
    ] = None,
    state_file: Annotated[
        Optional[Path],
        typer.Option("--state-file", "-s", help="Resume from, and save progress to, this file"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log rotations and retries to stderr"),
    ] = False,
) -> None:
    """Print lines of FILE as they are written, following rotations."""
    _configure_logging(verbose)

    try:
        if state_file is not None and state_file.exists():
            chaser = Chaser.load(state_file)
            if chaser.path.resolve() != file.resolve():
                output.print_warning(
                    f"State file {state_file} was saved for {chaser.path}, starting {file} from line 0"
                )
                chaser.line = Line(0)
            chaser.path = file
        else:
            chaser = Chaser(path=file)
        if line is not None:
            chaser.line = Line(line)
        if poll_interval is not None:
            chaser.initial_no_file_wait = poll_interval
            chaser.rotation_check_wait = poll_interval
            chaser.not_rotated_wait = poll_interval
        if startup_attempts is not None:
            chaser.initial_no_file_attempts = startup_attempts
        if rotation_attempts is not None:
            chaser.rotation_check_attempts = rotation_attempts
    except Exception as e:
        output.print_error(str(e))
        raise typer.Exit(1)

    printed = 0
    next_line = chaser.line

    def on_line(text: str, line_no: Line, pos: Pos) -> Control:
        nonlocal printed, next_line
        if show_position:
            output.print_line(text, line_no, pos)
        else:
            output.print_line(text)
        printed += 1
        next_line = Line(line_no + 1)
        if count is not None and printed >= count:
            return Control.STOP
        return Control.CONTINUE

    output.print_startup(str(chaser.path), chaser.line)
    failed = False
    try:
        chaser.run(on_line)
    except KeyboardInterrupt:
        output.print_stopped()
    except Exception as e:
        output.print_error(str(e))
        failed = True

    if state_file is not None:
        chaser.line = next_line
        try:
            chaser.save(state_file)
        except OSError as e:
            output.print_error(f"Could not save state: {e}")
            failed = True
    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
