"""Rich Console factory and theme for galaxyctl output.

Consoles render into a StringIO buffer so renderers keep a
``-> str`` contract. Off a terminal (tests, pipes) Rich drops color.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GALAXY_THEME = Theme(
    {
        "galaxy.ok": "bold green",
        "galaxy.error": "bold red",
        "galaxy.warning": "bold yellow",
        "galaxy.op": "bold cyan",
        "galaxy.key": "dim",
        "galaxy.user": "bold blue",
        "galaxy.layer": "bold",
        "galaxy.link": "underline magenta",
        "galaxy.status.completed": "green",
        "galaxy.status.pending": "yellow",
        "galaxy.status.failed": "red",
        "galaxy.status.dead_letter": "bold red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=GALAXY_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for an event WAL status."""
    return f"galaxy.status.{status}"
