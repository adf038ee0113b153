"""Best-effort detection of a project's framework and package managers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set, Tuple

if TYPE_CHECKING:
    from .scanner import ScannedFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Indicator:
    files: Tuple[str, ...] = ()
    npm: Tuple[str, ...] = ()
    composer: Tuple[str, ...] = ()


# More specific frameworks first; the first hit wins.
_FRAMEWORKS: Tuple[Tuple[str, _Indicator], ...] = (
    ("next.js", _Indicator(files=("next.config.js", "next.config.mjs", "next.config.ts"), npm=("next",))),
    ("nuxt", _Indicator(files=("nuxt.config.js", "nuxt.config.ts"), npm=("nuxt",))),
    ("sveltekit", _Indicator(npm=("@sveltejs/kit",))),
    ("astro", _Indicator(files=("astro.config.mjs", "astro.config.ts"), npm=("astro",))),
    ("remix", _Indicator(npm=("@remix-run/react",))),
    ("gatsby", _Indicator(files=("gatsby-config.js", "gatsby-config.ts"), npm=("gatsby",))),
    ("angular", _Indicator(files=("angular.json",), npm=("@angular/core",))),
    ("laravel", _Indicator(files=("artisan",), composer=("laravel/framework",))),
    ("symfony", _Indicator(files=("symfony.lock",), composer=("symfony/framework-bundle",))),
    ("django", _Indicator(files=("manage.py",))),
    ("svelte", _Indicator(files=("svelte.config.js",), npm=("svelte",))),
    ("vue", _Indicator(files=("vue.config.js",), npm=("vue",))),
    ("react", _Indicator(npm=("react", "react-dom"))),
    ("electron", _Indicator(npm=("electron",))),
    ("express", _Indicator(npm=("express",))),
    ("fastify", _Indicator(npm=("fastify",))),
)

_LOCKFILES: Tuple[Tuple[str, str], ...] = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("package-lock.json", "npm"),
    ("composer.json", "composer"),
    ("requirements.txt", "pip"),
    ("pyproject.toml", "pip"),
)

_BUNDLERS: Tuple[Tuple[str, str], ...] = (
    ("vite", "vite"),
    ("webpack", "webpack"),
    ("esbuild", "esbuild"),
    ("parcel", "parcel"),
    ("rollup", "rollup"),
)

_LANGUAGES: Dict[str, str] = {
    ".php": "PHP",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".py": "Python",
    ".rb": "Ruby",
    ".go": "Go",
    ".vue": "Vue",
    ".svelte": "Svelte",
}

NODE_MANAGERS = ("npm", "pnpm", "yarn", "bun")


@dataclass
class TechStack:
    framework: Optional[str] = None
    languages: List[str] = field(default_factory=list)
    package_managers: List[str] = field(default_factory=list)
    bundler: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)
    dev_dependencies: List[str] = field(default_factory=list)


def _read_json(path: Path) -> Dict[str, object]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.debug("Could not read %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _keys(data: Dict[str, object], section: str) -> List[str]:
    value = data.get(section)
    return sorted(value) if isinstance(value, dict) else []


def detect_tech_stack(root: Path, files: Sequence["ScannedFile"]) -> TechStack:
    """Guess framework, languages, package managers and bundler for a project."""
    package_json = _read_json(root / "package.json")
    composer_json = _read_json(root / "composer.json")
    npm_deps = _keys(package_json, "dependencies")
    npm_dev_deps = _keys(package_json, "devDependencies")
    composer_deps = _keys(composer_json, "require") + _keys(composer_json, "require-dev")
    all_npm: Set[str] = set(npm_deps) | set(npm_dev_deps)
    top_level = {p.name for p in root.iterdir()} if root.is_dir() else set()

    stack = TechStack(dependencies=npm_deps + _keys(composer_json, "require"))
    stack.dev_dependencies = npm_dev_deps + _keys(composer_json, "require-dev")

    for name, indicator in _FRAMEWORKS:
        if (
            any(f in top_level for f in indicator.files)
            or any(d in all_npm for d in indicator.npm)
            or any(d in composer_deps for d in indicator.composer)
        ):
            stack.framework = name
            break

    for lockfile, manager in _LOCKFILES:
        if lockfile in top_level and manager not in stack.package_managers:
            stack.package_managers.append(manager)
    if package_json and not any(m in stack.package_managers for m in NODE_MANAGERS):
        stack.package_managers.append("npm")

    for dep, bundler in _BUNDLERS:
        if dep in all_npm:
            stack.bundler = bundler
            break

    for scanned in files:
        language = _LANGUAGES.get(scanned.extension.lower())
        if language and language not in stack.languages:
            stack.languages.append(language)
    return stack


def install_commands(stack: TechStack) -> List[str]:
    """Setup commands a fresh copy of the project needs."""
    commands: List[str] = []
    for manager in stack.package_managers:
        if manager in NODE_MANAGERS or manager == "composer":
            commands.append(f"{manager} install")
    return commands
