"""User-facing workflow messages.

Every message is printed through rich and also recorded, so a run's
reported decisions can be inspected after the fact.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from fluide.ui.theme import THEME, Symbols

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    level: str
    message: str


class Reporter:
    """Leveled console output for the create workflow."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(theme=THEME, highlight=False)
        self.events: List[Event] = []

    def _emit(self, level: str, message: str, markup: str) -> None:
        self.events.append(Event(level, message))
        logger.debug("[%s] %s", level, message)
        self.console.print(markup)

    def info(self, message: str) -> None:
        self._emit("info", message, f"[msg.info]{Symbols.INFO} {escape(message)}[/]")

    def success(self, message: str) -> None:
        self._emit("success", message, f"[msg.success]{Symbols.SUCCESS}[/] {escape(message)}")

    def warn(self, message: str) -> None:
        self._emit("warn", message, f"[msg.warn]{Symbols.WARNING} {escape(message)}[/]")

    def fail(self, message: str) -> None:
        self._emit("fail", message, f"[msg.error]{Symbols.FAILED}[/] {escape(message)}")

    def error(self, message: str) -> None:
        self._emit("error", message, f"[msg.error]Error:[/] {escape(message)}")

    def print(self, *args, **kwargs) -> None:
        """Decorative output; not recorded."""
        self.console.print(*args, **kwargs)

    @contextmanager
    def status(self, message: str) -> Iterator["StatusLine"]:
        """Show a spinner while a long step runs."""
        with self.console.status(escape(message), spinner="dots") as status:
            yield StatusLine(status, message)

    def decisions(self) -> List[Tuple[str, str]]:
        return [(e.level, e.message) for e in self.events]


class StatusLine:
    """Handle for updating a running spinner."""

    def __init__(self, status, message: str):
        self._status = status
        self.message = message

    def update(self, detail: str) -> None:
        self._status.update(f"{escape(self.message)}\n[text.dim]{escape(detail)}[/]")
