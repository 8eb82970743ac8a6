"""Terminal output using rich."""

from rich.console import Console
from rich.text import Text

from .data import Line, Pos

# Followed lines go to stdout, everything else to stderr so pipes stay clean
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_line(text: str, line: Line | None = None, pos: Pos | None = None) -> None:
    """Print a followed line, optionally prefixed with its line index and byte position."""
    out = Text()
    if line is not None:
        out.append(f"{line}:{pos} ", style="dim")
    out.append(text)
    console.print(out, soft_wrap=True)


def print_startup(path: str, line: Line) -> None:
    err_console.print(
        Text.assemble(("Chasing ", "dim"), (path, "green"), (f" from line {line}", "dim"))
    )


def print_stopped() -> None:
    err_console.print("[dim]Stopped chasing.[/dim]")


def print_warning(message: str) -> None:
    err_console.print(Text.assemble(("Warning:", "bold yellow"), " ", message))


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(Text.assemble(("Error:", "bold red"), " ", message))
