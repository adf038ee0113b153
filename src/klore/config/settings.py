"""User settings for klore.

Settings discovery:
- `$KLORE_CONFIG` when set.
- Otherwise the first `.klore.yml` found in the working directory or one of
  its parents.
- Otherwise `~/.config/klore/config.yml`.
- Otherwise built-in defaults.
Expose a memoized getter so callers can treat it like a constant.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, TypedDict

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV = "KLORE_CONFIG"
CONFIG_FILENAME = ".klore.yml"
POST_INSTALL_MODES = ("ask", "always", "never")


class KloreSettings(TypedDict):
    """Settings read from the YAML config file."""

    author: str  # AUTHOR written by `klore create`
    max_file_size: int  # bytes of content the scanner reads per file
    post_install: str  # ask | always | never


DEFAULT_SETTINGS = KloreSettings(
    author="",
    max_file_size=1024 * 1024,
    post_install="ask",
)


def _parse_settings(data: Dict[str, Any]) -> KloreSettings:
    settings = KloreSettings(**DEFAULT_SETTINGS)
    author = data.get("author")
    if isinstance(author, str):
        settings["author"] = author
    max_file_size = data.get("max_file_size")
    if isinstance(max_file_size, int) and not isinstance(max_file_size, bool) and max_file_size > 0:
        settings["max_file_size"] = max_file_size
    post_install = data.get("post_install")
    if isinstance(post_install, str) and post_install.lower() in POST_INSTALL_MODES:
        settings["post_install"] = post_install.lower()
    return settings


def load_settings(path: Path) -> KloreSettings:
    """Load settings from a YAML file path."""
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping at the top level", path)
        return KloreSettings(**DEFAULT_SETTINGS)
    return _parse_settings(data)


def save_settings(path: Path, settings: KloreSettings) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(dict(settings), f, sort_keys=False)


def discover_settings_path(start: Optional[Path] = None) -> Optional[Path]:
    """Return the settings file that applies to `start` (default: cwd), if any."""
    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    here = (start or Path.cwd()).resolve()
    for parent in (here, *here.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    user_path = Path.home() / ".config" / "klore" / "config.yml"
    if user_path.is_file():
        return user_path
    return None


@lru_cache(maxsize=1)
def get_settings() -> KloreSettings:
    """Return settings, discovered or default (memoized)."""
    path = discover_settings_path()
    if path is None or not path.is_file():
        return KloreSettings(**DEFAULT_SETTINGS)
    try:
        return load_settings(path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return KloreSettings(**DEFAULT_SETTINGS)
