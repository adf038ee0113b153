"""Utility modules for klore."""

from .console import console
from .subprocess_utils import run_shell

__all__ = ["console", "run_shell"]
