"""Prompt/IO seam used while resolving variables and installing.

The installer only talks to a `Prompter`; `ClickPrompter` is the terminal
implementation. Any prompt may raise `PromptCancelled`.
"""

from __future__ import annotations

from typing import List, Optional

import click

from ..errors import PromptCancelled
from ..utils import console


class Prompter:
    """Request/response primitives the installer depends on."""

    def text(self, message: str, default: str = "") -> str:
        raise NotImplementedError

    def select(self, message: str, choices: List[str], default: Optional[str] = None) -> str:
        raise NotImplementedError

    def confirm(self, message: str, default: bool = True) -> bool:
        raise NotImplementedError

    def section(self, title: str) -> None:
        """Announce a group of upcoming prompts."""

    def info(self, message: str) -> None:
        """Show a line that needs no answer."""

    def error(self, message: str) -> None:
        """Report a rejected answer before asking again."""


class ClickPrompter(Prompter):
    def text(self, message: str, default: str = "") -> str:
        try:
            value = click.prompt(
                message,
                default=default,
                show_default=bool(default),
                type=str,
            )
        except click.Abort as e:
            raise PromptCancelled(message) from e
        return str(value)

    def select(self, message: str, choices: List[str], default: Optional[str] = None) -> str:
        try:
            value = click.prompt(
                message,
                type=click.Choice(choices, case_sensitive=False),
                default=default,
                show_choices=True,
            )
        except click.Abort as e:
            raise PromptCancelled(message) from e
        return str(value)

    def confirm(self, message: str, default: bool = True) -> bool:
        try:
            return click.confirm(message, default=default)
        except click.Abort as e:
            raise PromptCancelled(message) from e

    def section(self, title: str) -> None:
        console.print(f"\n{title}", style="bold cyan")

    def info(self, message: str) -> None:
        console.print(message, style="dim")

    def error(self, message: str) -> None:
        console.print(f"❌ {message}", style="red")
