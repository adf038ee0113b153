"""Template model shared by the parser, generator and installer.

A Template is built once (from a scan or from a `.klore` file), handed to
variable resolution and the replacement engine, then discarded. All entities are
frozen so nothing can change them mid-install.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

DEFINITION_FILE = ".klore"
MATCH_ALL = "**/*"

# Names must survive `VAR`, `GROUP [..]` and `{{ name }}` in a definition file.
VARIABLE_NAME_RE = re.compile(r"\w+")


class VariableType(str, Enum):
    STRING = "STRING"
    COLOR = "COLOR"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    URL = "URL"
    NUMBER = "NUMBER"

    @classmethod
    def parse(cls, token: Optional[str]) -> Optional["VariableType"]:
        """Return the type named by token (any case), or None."""
        if not token:
            return None
        try:
            return cls(token.upper())
        except ValueError:
            return None


class GroupKey(Enum):
    """Known variable groups, in the order they are prompted and rendered."""

    BRANDING = ("branding", "Brand Identity", "🏷️")
    COLORS = ("colors", "Theme Colors", "🎨")
    CONTACT = ("contact", "Contact Information", "📍")
    CONTENT = ("content", "Page Content", "📝")
    SOCIAL = ("social", "Social Media", "📱")
    INSTITUTION = ("institution", "Organization Info", "🏫")
    LEGAL = ("legal", "Legal & Copyright", "⚖️")
    MAPS = ("maps", "Location & Maps", "🗺️")
    CONFIG = ("config", "Configuration", "⚙️")
    OTHER = ("other", "Other Settings", "📦")

    def __init__(self, slug: str, label: str, emoji: str) -> None:
        self.slug = slug
        self.label = label
        self.emoji = emoji

    @property
    def title(self) -> str:
        return f"{self.emoji} {self.label}"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "GroupKey":
        """Map a free-form group name to a known group, OTHER when unknown."""
        wanted = (name or "").strip().lower()
        for key in cls:
            if key.slug == wanted:
                return key
        return cls.OTHER


@dataclass(frozen=True)
class Variable:
    name: str
    type: VariableType = VariableType.STRING
    default: str = ""
    required: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class Group:
    name: str
    variables: Tuple[str, ...] = ()

    @property
    def key(self) -> GroupKey:
        return GroupKey.from_name(self.name)


@dataclass(frozen=True)
class Replacement:
    original: str
    variable: str
    file_patterns: Tuple[str, ...] = (MATCH_ALL,)

    @property
    def is_effective(self) -> bool:
        return bool(self.original) and bool(self.variable)


@dataclass(frozen=True)
class Conditional:
    # Not produced by the parser nor applied by the engine yet.
    variable: str
    replacements: Tuple[Replacement, ...] = ()


_PROGRESS_MESSAGES: Tuple[Tuple[str, str], ...] = (
    ("composer install", "Installing PHP dependencies..."),
    ("npm run build", "Building assets..."),
    ("npm install", "Installing Node dependencies..."),
    ("pnpm install", "Installing Node dependencies..."),
    ("yarn install", "Installing Node dependencies..."),
    ("bun install", "Installing Node dependencies..."),
    ("pip install", "Installing Python dependencies..."),
    ("artisan migrate", "Setting up database..."),
    ("artisan key:generate", "Generating app key..."),
)


def progress_message(command: str) -> str:
    """Human readable message shown while a setup command runs."""
    for needle, message in _PROGRESS_MESSAGES:
        if needle in command:
            return message
    return f"Running {command}..."


@dataclass(frozen=True)
class InstallStep:
    command: str
    message: Optional[str] = None

    @property
    def label(self) -> str:
        return self.message or progress_message(self.command)


@dataclass(frozen=True)
class Template:
    name: str = ""
    version: str = "1.0.0"
    author: str = ""
    description: str = ""
    framework: Optional[str] = None
    requires: Tuple[str, ...] = ()
    variables: Tuple[Variable, ...] = ()
    groups: Tuple[Group, ...] = ()
    replacements: Tuple[Replacement, ...] = ()
    conditionals: Tuple[Conditional, ...] = ()
    on_install: Tuple[InstallStep, ...] = ()
    ai_hints: Tuple[str, ...] = field(default_factory=tuple)

    def unique_variables(self) -> List[Variable]:
        """Variables deduplicated by name; the first occurrence wins."""
        seen: set[str] = set()
        unique: List[Variable] = []
        for variable in self.variables:
            if not variable.name or variable.name in seen:
                continue
            seen.add(variable.name)
            unique.append(variable)
        return unique

    def group_of(self, variable_name: str) -> Optional[Group]:
        for group in self.groups:
            if variable_name in group.variables:
                return group
        return None

    def group_key_of(self, variable_name: str) -> GroupKey:
        group = self.group_of(variable_name)
        return group.key if group else GroupKey.OTHER

    def variables_by_group(self) -> Dict[GroupKey, List[Variable]]:
        """Unique variables bucketed by group, buckets in canonical order."""
        buckets: Dict[GroupKey, List[Variable]] = {}
        for variable in self.unique_variables():
            buckets.setdefault(self.group_key_of(variable.name), []).append(variable)
        return {key: buckets[key] for key in GroupKey if key in buckets}

    @property
    def install_commands(self) -> Tuple[str, ...]:
        return tuple(step.command for step in self.on_install)


def find_problems(template: Template) -> List[str]:
    """List the ways a template breaks the model invariants.

    The parser is tolerant, so a hand-edited definition can parse cleanly and
    still reference variables that do not exist. Nothing here raises.
    """
    problems: List[str] = []
    names: set[str] = set()
    for index, variable in enumerate(template.variables, start=1):
        if not variable.name:
            problems.append(f"Variable #{index} has an empty name")
            continue
        if not VARIABLE_NAME_RE.fullmatch(variable.name):
            problems.append(
                f"Variable '{variable.name}' is not a valid name; "
                "use letters, digits and underscores only"
            )
        if variable.name in names:
            problems.append(
                f"Variable '{variable.name}' is declared more than once; "
                "the first declaration is used"
            )
        names.add(variable.name)

    for group in template.groups:
        for member in group.variables:
            if member not in names:
                problems.append(
                    f"Group '{group.name}' lists undeclared variable '{member}'"
                )

    for index, replacement in enumerate(template.replacements, start=1):
        if not replacement.original:
            problems.append(f"Replacement #{index} has an empty original and is ignored")
        elif not replacement.variable:
            problems.append(f"Replacement #{index} does not name a variable")
        elif replacement.variable not in names:
            problems.append(
                f"Replacement #{index} references unknown variable "
                f"'{replacement.variable}'"
            )
    return problems
