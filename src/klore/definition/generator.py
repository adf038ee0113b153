"""Render a Template as canonical `.klore` text.

The output always parses back (see `parser.parse_definition`) to the same
variables, groups and replacements. Comments carry the human-facing parts:
section banners and the question asked for each variable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from .literals import quote
from .model import (
    DEFINITION_FILE,
    MATCH_ALL,
    Group,
    GroupKey,
    Replacement,
    Template,
    Variable,
    find_problems,
)
from .questions import question_for

logger = logging.getLogger(__name__)

BANNER = "# " + "═" * 39
RULE = "# " + "─" * 40
DEFAULT_PREVIEW_LIMIT = 100


def _banner(title: str) -> List[str]:
    return [BANNER, f"# {title}", BANNER]


def _preview(value: str, limit: int = DEFAULT_PREVIEW_LIMIT) -> str:
    """Single-line, possibly truncated rendering of a default for comments."""
    flat = value.replace("\r", " ").replace("\n", " ")
    if len(flat) > limit:
        flat = flat[:limit] + "..."
    return flat


def _group_name(group: Group) -> str:
    if not group.name or any(char.isspace() for char in group.name):
        return quote(group.name)
    return group.name


def render_variable(variable: Variable, group: GroupKey) -> List[str]:
    question = question_for(variable.name, group)
    if variable.default:
        question += f" [default: {_preview(variable.default)}]"
    line = f"VAR {variable.name} {variable.type.value} {quote(variable.default)}"
    if variable.required:
        line += " REQUIRED"
    return [f"# {question}", line]


def render_replacement(replacement: Replacement) -> str:
    # Originals are never shortened; they have to match the source files.
    patterns = " ".join(quote(p) for p in replacement.file_patterns or (MATCH_ALL,))
    return (
        f"REPLACE {quote(replacement.original)} "
        f'WITH "{{{{ {replacement.variable} }}}}" IN {patterns}'
    )


def _header(template: Template) -> List[str]:
    lines = [
        f"# {_preview(template.name) or 'Untitled'} Template",
        "# Generated by klore",
        "",
        f"NAME {quote(template.name)}",
    ]
    if template.version:
        lines.append(f"VERSION {quote(template.version)}")
    if template.author:
        lines.append(f"AUTHOR {quote(template.author)}")
    if template.description:
        lines.append(f"DESCRIPTION {quote(template.description)}")
    if template.framework:
        lines.append(f"FRAMEWORK {quote(template.framework)}")
    if template.requires:
        lines.append("REQUIRES [" + ", ".join(template.requires) + "]")
    lines.append("")

    if template.ai_hints:
        lines.extend(_banner("PROJECT ANALYSIS"))
        lines.extend(f"AI_HINT {quote(hint)}" for hint in template.ai_hints)
        lines.append("")
    return lines


def _variables_section(template: Template) -> List[str]:
    lines = _banner("TEMPLATE VARIABLES")
    lines.append("")

    groups_by_key: Dict[GroupKey, List[Group]] = {}
    for group in template.groups:
        groups_by_key.setdefault(group.key, []).append(group)
    variables_by_key = template.variables_by_group()

    for key in GroupKey:
        variables = variables_by_key.get(key, [])
        groups = groups_by_key.get(key, [])
        if not variables and not groups:
            continue
        lines.append(f"# {key.emoji} {key.label.upper()}")
        lines.append(RULE)
        for group in groups:
            lines.append(f"GROUP {_group_name(group)} [{', '.join(group.variables)}]")
        for variable in variables:
            lines.extend(render_variable(variable, key))
        lines.append("")
    return lines


def _install_section(template: Template) -> List[str]:
    lines = _banner("REPLACEMENTS")
    lines.extend(["", "ON INSTALL", ""])

    by_key: Dict[GroupKey, List[Replacement]] = {}
    for replacement in template.replacements:
        if not replacement.is_effective:
            continue
        key = template.group_key_of(replacement.variable)
        by_key.setdefault(key, []).append(replacement)

    for key in GroupKey:
        replacements = by_key.get(key)
        if not replacements:
            continue
        lines.append(f"    # {key.title}")
        lines.extend(f"    {render_replacement(r)}" for r in replacements)
        lines.append("")

    if template.on_install:
        lines.append("    # Run setup commands")
        for step in template.on_install:
            lines.append(f"    RUN {quote(step.command)} MESSAGE {quote(step.label)}")
        lines.append("")

    lines.append("END")
    return lines


def generate_definition(template: Template) -> str:
    """Render the template as `.klore` text."""
    lines = _header(template)
    lines.extend(_variables_section(template))
    lines.extend(_install_section(template))
    lines.append("")
    lines.extend(_banner("Template ready! 🚀"))
    return "\n".join(lines) + "\n"


def write_definition(template: Template, target: Path) -> Path:
    """Write the definition to `target`, or to `target/.klore` for a directory."""
    path = target / DEFINITION_FILE if target.is_dir() else target
    for problem in find_problems(template):
        logger.warning("%s: %s", path, problem)
    with open(path, "w", encoding="utf-8") as f:
        f.write(generate_definition(template))
    logger.debug("Wrote definition for %r to %s", template.name, path)
    return path
