"""Error types raised by klore."""

from __future__ import annotations

from typing import Optional


class KloreError(Exception):
    """Base class for klore errors."""


class PathError(KloreError):
    """Raise when a source or destination path cannot be used"""


class ValidationError(KloreError):
    """Raise when a variable value fails validation"""

    def __init__(self, message: str, variable: Optional[str] = None) -> None:
        super().__init__(message)
        self.variable = variable


class TreeIOError(KloreError):
    """Raise when reading or writing a file during materialization fails"""


class CommandError(KloreError):
    """Raise when a post-install command exits with a non-zero code"""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f"Command '{command}' failed with exit code {returncode}")
        self.command = command
        self.returncode = returncode


class PromptCancelled(KloreError):
    """Raise when the user aborts an interactive prompt"""
