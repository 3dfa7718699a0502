"""Exceptions raised by the project creation workflow."""

from typing import Optional


class FluideError(Exception):
    """Base exception for fluide operations."""
    pass


class ProcessError(FluideError):
    """An external command could not be run or exited with a failure."""

    def __init__(self, manager: str, cause: object, returncode: Optional[int] = None):
        super().__init__(f"{manager} failed: {cause}")
        self.manager = manager
        self.cause = cause
        self.returncode = returncode


class ConfigParseError(FluideError):
    """A configuration document could not be parsed."""

    def __init__(self, message: str, offset: int = -1):
        if offset >= 0:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset


class CleanupError(FluideError):
    """Removing a stale template file failed."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Could not remove {path}: {cause}")
        self.path = path
        self.cause = cause
