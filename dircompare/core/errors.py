"""
Error types raised by the comparison engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class CompareError(Exception):
    """Base class for comparison errors."""

    def __init__(self, path: Path | str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{message}: {path}")
        self.path = Path(path)
        self.message = message
        self.cause = cause

    @property
    def detail(self) -> str:
        """Message with the underlying cause, if any."""
        if self.cause is not None:
            return f"{self.message} ({self.cause})"
        return self.message


class RootAccessError(CompareError):
    """The root of a tree does not exist or cannot be read."""


class EntryAccessError(CompareError):
    """An entry below the root could not be read while building a tree."""


class ContentReadError(CompareError):
    """A file's content could not be read."""


class BinaryContentError(ContentReadError):
    """A file's content does not look like text."""
