"""ANSI colouring of log text."""

from __future__ import annotations

from enum import IntEnum


class Color(IntEnum):
    """Terminal foreground colours; DEFAULT leaves text untouched."""

    DEFAULT = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7


def make_color_text(color: Color | int, text: str) -> str:
    """Wrap ``text`` in the escape codes for ``color``."""
    color = Color(color)
    if color is Color.DEFAULT:
        return text
    return f"\x1b[3{int(color)}m{text}\x1b[0m"