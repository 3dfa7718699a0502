"""Logging setup shared by the command line entry points."""

import logging

from rich.console import Console
from rich.logging import RichHandler

_configured = False


def configure_logging(verbose: bool = False) -> None:
    """Route `logging` through rich; DEBUG when verbose, WARNING otherwise.

    Safe to call more than once: a later non-verbose call never lowers the
    verbosity chosen by an earlier one (group option vs command option).
    """
    global _configured
    root = logging.getLogger("fluide")
    if not _configured:
        handler = RichHandler(
            console=Console(stderr=True), show_time=False, show_path=False, markup=False
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.WARNING)
        _configured = True

    if verbose and root.level != logging.DEBUG:
        root.setLevel(logging.DEBUG)
        logging.getLogger("httpx").setLevel(logging.DEBUG)
        root.debug("Verbose logging turned on")
