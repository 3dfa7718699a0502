"""Fluide UI components."""

from fluide.ui.theme import FluideTheme, THEME, Symbols, emoji_with_fallback
from fluide.ui.reporter import Reporter, Event

__all__ = [
    "FluideTheme",
    "THEME",
    "Symbols",
    "emoji_with_fallback",
    "Reporter",
    "Event",
]
