"""Subprocess utilities for running setup commands."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Optional


def run_shell(command: str, cwd: Optional[Path] = None) -> int:
    """Run a shell command, stream its output to stdout and return the exit code."""
    process = subprocess.Popen(
        command,
        shell=True,
        cwd=str(cwd) if cwd else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
        # Setup tools print whatever bytes they like.
        errors="replace",
    )
    assert process.stdout is not None
    try:
        for line in process.stdout:
            sys.stdout.write(line)
    finally:
        process.stdout.close()
        code = process.wait()
    return code
