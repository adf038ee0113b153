"""Walk a project directory and collect the files a template is built from."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import PathError
from .detector import TechStack, detect_tech_stack

logger = logging.getLogger(__name__)

_ignored_names = {
    "node_modules",
    ".git",
    ".svn",
    ".hg",
    "dist",
    "build",
    "out",
    ".next",
    ".nuxt",
    "__pycache__",
    ".pytest_cache",
    "vendor",
    ".idea",
    ".vscode",
    ".DS_Store",
    "Thumbs.db",
    ".klore",
    ".env.example",
}
_ignored_suffixes = (".log",)

_binary_ext = {
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".ico", ".svg",
    ".mp3", ".mp4", ".wav", ".avi", ".mov",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    ".zip", ".rar", ".7z", ".tar", ".gz",
    ".exe", ".dll", ".so", ".dylib",
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
}  # fmt: skip

DEFAULT_MAX_FILE_SIZE = 1024 * 1024


@dataclass
class ScannedFile:
    path: Path
    relative_path: str
    extension: str
    size: int
    is_binary: bool
    content: Optional[str] = None


@dataclass
class ScanResult:
    root_path: Path
    files: List[ScannedFile]
    tech_stack: TechStack
    total_files: int = 0
    total_size: int = 0


def should_ignore(name: str) -> bool:
    return name in _ignored_names or name.endswith(_ignored_suffixes)


def is_binary_path(path: Path) -> bool:
    return path.suffix.lower() in _binary_ext


def _read_content(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Skipping content of %s: %s", path, e)
        return None


def scan_project(project_path: Path, max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> ScanResult:
    """Scan a project directory; raises PathError when it is not a directory."""
    root = project_path.resolve()
    if not root.exists():
        raise PathError(f"Path does not exist: {root}")
    if not root.is_dir():
        raise PathError(f"Path is not a directory: {root}")

    files: List[ScannedFile] = []
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune ignored directories in-place
        dirnames[:] = sorted(d for d in dirnames if not should_ignore(d))
        for fname in sorted(filenames):
            if should_ignore(fname):
                continue
            path = Path(dirpath) / fname
            try:
                size = path.stat().st_size
            except OSError:
                continue
            binary = is_binary_path(path)
            scanned = ScannedFile(
                path=path,
                relative_path=path.relative_to(root).as_posix(),
                extension=path.suffix,
                size=size,
                is_binary=binary,
            )
            if not binary and size <= max_file_size:
                scanned.content = _read_content(path)
            files.append(scanned)

    tech_stack = detect_tech_stack(root, files)
    logger.debug("Scanned %d files under %s", len(files), root)
    return ScanResult(
        root_path=root,
        files=files,
        tech_stack=tech_stack,
        total_files=len(files),
        total_size=sum(f.size for f in files),
    )


def format_bytes(size: int) -> str:
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"
