"""
Console output with rich. Color is dropped with `--no-color` and whenever
stdout is not a terminal, so piped output stays plain.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

PREFIX_STYLE = "green"
HEADER_STYLE = "blue"
CONTENT_STYLE = "green"
NOTICE_STYLE = "yellow"
IGNORED_STYLE = "magenta"
TITLE_STYLE = "bright_cyan"
TREE_STYLE = "green"


def make_console(color: bool = True) -> Console:
    """
    A console that prints text verbatim: no markup, emoji or highlighting, and
    no wrapping at the terminal width.
    """
    return Console(
        no_color=not color,
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )


def styled(*parts: tuple[str, str]) -> Text:
    """Join `(text, style)` pairs into one `Text`. `str()` of the result is the plain text."""
    return Text.assemble(*parts)
