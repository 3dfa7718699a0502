"""Fluide terminal theme.

Brand palette and status symbols shared by the create workflow and the
build log sink.
"""

import sys
from dataclasses import dataclass

from rich.style import Style
from rich.theme import Theme


@dataclass
class FluideTheme:
    """Fluide colour palette."""

    PRIMARY = "#9ACD32"      # Yellow-green - brand accent
    SECONDARY = "#00BFFF"    # Deep sky blue

    SUCCESS = "#00C853"
    WARNING = "#FFB000"
    ERROR = "#FF3D3D"
    INFO = "#8A8A8A"

    TEXT = "#FFFFFF"
    TEXT_DIM = "#666666"


THEME = Theme({
    "brand": Style(color=FluideTheme.PRIMARY, bold=True),
    "accent": Style(color=FluideTheme.SECONDARY),

    "msg.info": Style(color=FluideTheme.INFO),
    "msg.success": Style(color=FluideTheme.SUCCESS),
    "msg.warn": Style(color=FluideTheme.WARNING),
    "msg.error": Style(color=FluideTheme.ERROR, bold=True),

    "text.dim": Style(color=FluideTheme.TEXT_DIM),
})


class Symbols:
    """Terminal symbols for status display."""

    SUCCESS = "✓"
    FAILED = "✗"
    INFO = "ℹ"
    WARNING = "⚠"
    ROCKET = "🚀"
    PACKAGE = "📦"


def emoji_with_fallback(char: str, fallback: str, fancy: bool = False) -> str:
    """Use `char` except on Windows consoles, unless fancy output is forced."""
    if fancy or sys.platform != "win32":
        return char
    return fallback
