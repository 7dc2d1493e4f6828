"""Rich theme and text capture for deploy results.

Results are drawn on a Console writing to a StringIO buffer and returned as
a string, so ``format_result`` stays a pure function. Soft wrapping keeps
long git messages on one line for grep.
"""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO

from rich.console import Console
from rich.theme import Theme

PAGES_THEME = Theme(
    {
        "pages.ok": "bold green",
        "pages.error": "bold red",
        "pages.warning": "bold yellow",
        "pages.op": "bold cyan",
        "pages.key": "dim",
        "pages.branch": "bold blue",
        "pages.sha": "magenta",
        "pages.step": "bold",
    }
)


def render_text(draw: Callable[[Console], None], *, no_color: bool = False) -> str:
    """Run *draw* against a buffered Console and return what it printed."""
    buffer = StringIO()
    console = Console(
        file=buffer,
        theme=PAGES_THEME,
        no_color=no_color,
        highlight=False,
        soft_wrap=True,
        width=100,
    )
    draw(console)
    return buffer.getvalue().rstrip("\n")
