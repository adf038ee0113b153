"""Copy a template tree into a new project, substituting literal text.

Replacement originals are plain substrings, never patterns: `a.b` matches the
three characters `a.b` and nothing else. Files outside the text allow-list are
copied byte for byte.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from ..definition.model import DEFINITION_FILE, Replacement
from ..errors import PathError, TreeIOError

logger = logging.getLogger(__name__)

# Exact entry names, not globs.
EXCLUDED_NAMES = frozenset({DEFINITION_FILE, "node_modules", "vendor", ".git"})

TEXT_EXTENSIONS = frozenset(
    {
        ".php",
        ".js",
        ".ts",
        ".jsx",
        ".tsx",
        ".vue",
        ".svelte",
        ".html",
        ".htm",
        ".css",
        ".scss",
        ".less",
        ".json",
        ".xml",
        ".yaml",
        ".yml",
        ".toml",
        ".md",
        ".txt",
        ".twig",
        ".ejs",
        ".pug",
    }
)
TEXT_FILENAMES = frozenset({".env.example", ".gitignore"})


@dataclass(frozen=True)
class MaterializeResult:
    files_created: int
    replacements_applied: int


def is_text_file(path: Path) -> bool:
    name = path.name
    return (
        path.suffix.lower() in TEXT_EXTENSIONS
        or name.endswith(".blade.php")
        or name in TEXT_FILENAMES
    )


def apply_replacements(
    content: str, replacements: Iterable[Replacement], values: Mapping[str, str]
) -> str:
    """Apply each replacement in order as a global literal substitution."""
    result = content
    for replacement in replacements:
        if not replacement.original:
            continue
        value = values.get(replacement.variable)
        if value is None:
            continue
        result = result.replace(replacement.original, value)
    return result


def _copy_text(
    src: Path, dest: Path, replacements: Sequence[Replacement], values: Mapping[str, str]
) -> bool:
    """Copy one text file with substitutions; True when its content changed."""
    # newline="" keeps CRLF files byte-identical where nothing is replaced.
    with open(src, "r", encoding="utf-8", newline="") as f:
        content = f.read()
    replaced = apply_replacements(content, replacements, values)
    with open(dest, "w", encoding="utf-8", newline="") as f:
        f.write(replaced)
    return replaced != content


def materialize(
    source: Path,
    destination: Path,
    replacements: Sequence[Replacement],
    values: Mapping[str, str],
    overwrite: bool = False,
) -> MaterializeResult:
    """Mirror `source` into `destination`, applying replacements to text files.

    Raises PathError before touching the filesystem when the source is not a
    directory, the destination is the source itself, or the destination exists
    and `overwrite` is not set. A destination nested inside the source is left
    out of the walk.
    Any read or write failure during the walk raises TreeIOError; files already
    written stay on disk.
    """
    if not source.is_dir():
        raise PathError(f"Template directory does not exist: {source}")
    if destination.exists() and not overwrite:
        raise PathError(
            f"Output directory already exists: {destination}. Use --force to overwrite."
        )
    target_root = destination.resolve()
    if target_root == source.resolve():
        raise PathError(f"Output directory is the template directory: {destination}")

    files_created = 0
    files_changed = 0

    def process_dir(src: Path, dest: Path) -> None:
        nonlocal files_created, files_changed
        dest.mkdir(parents=True, exist_ok=True)
        for entry in sorted(src.iterdir(), key=lambda p: p.name):
            if entry.name in EXCLUDED_NAMES:
                continue
            # An output directory nested inside the template is not part of it.
            if entry.is_dir() and entry.resolve() == target_root:
                continue
            target = dest / entry.name
            if entry.is_dir():
                process_dir(entry, target)
                continue
            if is_text_file(entry):
                if _copy_text(entry, target, replacements, values):
                    files_changed += 1
                    logger.debug("Replaced content in %s", target)
            else:
                shutil.copyfile(entry, target)
            files_created += 1

    try:
        process_dir(source, destination)
    except (OSError, UnicodeError) as e:
        raise TreeIOError(f"Failed to copy template files: {e}") from e

    logger.debug(
        "Materialized %s -> %s: %d files, %d changed",
        source,
        destination,
        files_created,
        files_changed,
    )
    return MaterializeResult(files_created=files_created, replacements_applied=files_changed)
