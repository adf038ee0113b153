"""Run a template's post-install commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from ..definition.model import InstallStep
from ..errors import CommandError
from ..utils import console, run_shell

logger = logging.getLogger(__name__)


def run_post_install(steps: Sequence[InstallStep], cwd: Path) -> List[str]:
    """Run steps one after another inside `cwd`.

    Stops at the first command that fails and raises CommandError for it.
    Returns the commands that completed.
    """
    completed: List[str] = []
    for step in steps:
        console.print(f"⚙️  {step.label}", style="bold blue")
        logger.debug("Running %r in %s", step.command, cwd)
        try:
            code = run_shell(step.command, cwd=cwd)
        except OSError as e:
            console.print(f"❌ Failed to start: {step.command}", style="bold red")
            raise CommandError(step.command, -1) from e
        if code:
            console.print(f"❌ Failed: {step.command}", style="bold red")
            raise CommandError(step.command, code)
        console.print(f"✓ Completed: {step.command}", style="green")
        completed.append(step.command)
    return completed
