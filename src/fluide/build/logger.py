"""Log sink handed to the build engine."""

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from fluide.ui.theme import THEME

logger = logging.getLogger(__name__)

PREFIX = "[fluide]"

LEVEL_STYLES = {
    "info": "brand",
    "warn": "msg.warn",
    "error": "msg.error",
}


class BuildLogger:
    """Prefixed, leveled build output.

    Each message clears the screen first when the console is interactive
    and clearing is enabled, so watch-mode rebuilds don't scroll forever.
    """

    def __init__(self, console: Optional[Console] = None, clear_screen: bool = False):
        self.console = console or Console(theme=THEME, highlight=False)
        self.clear_screen_enabled = clear_screen
        self.has_warned = False
        self.has_errored = False

    def clear_screen(self, level: str) -> None:
        if self.clear_screen_enabled and self.console.is_terminal:
            logger.debug("Clearing screen before %s message", level)
            self.console.clear()

    def log(self, level: str, msg: str) -> None:
        style = LEVEL_STYLES.get(level, LEVEL_STYLES["info"])
        self.console.print(f"[{style}]{escape(PREFIX)}[/] {escape(msg)}")

    def info(self, msg: str) -> None:
        self.clear_screen("info")
        self.log("info", msg)

    def warn(self, msg: str) -> None:
        self.has_warned = True
        self.clear_screen("warn")
        self.log("warn", msg)

    def error(self, msg: str) -> None:
        self.has_errored = True
        self.clear_screen("error")
        self.log("error", msg)
