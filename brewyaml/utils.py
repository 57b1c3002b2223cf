"""Utility functions for brewyaml."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

# Initialize rich console
console = Console()

_VERBOSE = False

_LEVEL_STYLES = {
    "info": ("🔍", "blue"),
    "success": ("✅", "green"),
    "warning": ("⚠️", "yellow"),
    "error": ("❌", "bold red"),
    "debug": ("🐛", "dim"),
}


class BrewYamlError(Exception):
    """Base class for errors raised by brewyaml."""

    def __init__(self, message: str) -> None:
        """Initialize the error with a human readable message."""
        self.message = message
        super().__init__(message)


def setup_logging(verbose: bool = False) -> None:  # noqa: FBT001, FBT002
    """Configure logging level based on verbosity."""
    global _VERBOSE  # noqa: PLW0603
    _VERBOSE = verbose


def log(message: str, level: str = "default") -> None:
    """Print a message with an emoji and colour for the given level.

    ``debug`` messages are only shown after ``setup_logging(verbose=True)``.
    The message is escaped, so brew output containing brackets prints as-is.
    """
    if level == "debug" and not _VERBOSE:
        return
    text = escape(message)
    if level not in _LEVEL_STYLES:
        console.print(text, highlight=False)
        return
    emoji, style = _LEVEL_STYLES[level]
    console.print(f"{emoji} [{style}]{text}[/{style}]", highlight=False)
