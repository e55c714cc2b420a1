"""User-facing output channels.

Progress and informational messages go to stdout; warnings and errors go to
stderr in their own colours so they stand apart from progress output.
"""

from rich.console import Console

console = Console()
err_console = Console(stderr=True)


def plain(message: str = "") -> None:
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def info(message: str) -> None:
    console.print(message, style="cyan", markup=False, highlight=False)


def success(message: str) -> None:
    console.print(f"✔ {message}", style="bold green", markup=False, highlight=False)


def warning(message: str) -> None:
    err_console.print(f"⚠ {message}", style="yellow", markup=False, highlight=False)


def error(message: str) -> None:
    err_console.print(f"✖ {message}", style="bold red", markup=False, highlight=False)
