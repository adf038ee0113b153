"""Collect a value for every template variable."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from ..definition.model import GroupKey, Template, Variable, VariableType
from ..definition.questions import question_for
from ..errors import PromptCancelled, ValidationError
from .prompts import Prompter

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_COLOR_RE = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
_PHONE_RE = re.compile(r"^[\d\s\-+()]+$")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def _is_url(value: str) -> bool:
    if value == "#":
        return True
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    if not parsed.scheme or not _SCHEME_RE.match(parsed.scheme):
        return False
    if parsed.scheme in ("http", "https", "ftp", "ws", "wss"):
        return bool(parsed.netloc)
    return bool(parsed.netloc or parsed.path)


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


_TYPE_CHECKS = {
    VariableType.EMAIL: (
        lambda v: bool(_EMAIL_RE.match(v)),
        "Please enter a valid email address",
    ),
    VariableType.COLOR: (
        lambda v: bool(_COLOR_RE.match(v)),
        "Please enter a valid hex color (e.g., #FF7800)",
    ),
    VariableType.PHONE: (
        lambda v: bool(_PHONE_RE.match(v)),
        "Please enter a valid phone number",
    ),
    VariableType.URL: (_is_url, "Please enter a valid URL"),
    VariableType.NUMBER: (_is_number, "Please enter a number"),
}


def validate_value(variable: Variable, value: str) -> None:
    """Raise ValidationError when value is not acceptable for variable."""
    if not value.strip():
        if variable.required:
            raise ValidationError("This field is required", variable.name)
        return
    check = _TYPE_CHECKS.get(variable.type)
    if check is None:
        return
    is_valid, message = check
    if not is_valid(value):
        raise ValidationError(message, variable.name)


def prompt_order(template: Template) -> List[Tuple[GroupKey, List[Variable]]]:
    """Unique variables in prompt order: known groups first, ungrouped last."""
    grouped: Dict[GroupKey, List[Variable]] = {}
    ungrouped: List[Variable] = []
    for variable in template.unique_variables():
        group = template.group_of(variable.name)
        if group is None:
            ungrouped.append(variable)
        else:
            grouped.setdefault(group.key, []).append(variable)

    order = [(key, grouped[key]) for key in GroupKey if key in grouped]
    if ungrouped:
        if order and order[-1][0] is GroupKey.OTHER:
            order[-1][1].extend(ungrouped)
        else:
            order.append((GroupKey.OTHER, ungrouped))
    return order


def _ask(prompter: Prompter, variable: Variable, group: GroupKey) -> str:
    question = question_for(variable.name, group)
    while True:
        raw = prompter.text(question, default=variable.default)
        value = raw or variable.default
        try:
            validate_value(variable, value)
        except ValidationError as e:
            prompter.error(str(e))
            continue
        return value


def resolve_variables(
    template: Template,
    prompter: Prompter,
    supplied: Optional[Mapping[str, str]] = None,
) -> Optional[Dict[str, str]]:
    """Resolve every variable of the template to a value.

    Pre-supplied values win and are trusted as-is; everything else is asked for
    through the prompter, re-asking until the answer validates. Returns None as
    soon as the user cancels a prompt.
    """
    supplied = supplied or {}
    values: Dict[str, str] = {}
    try:
        for key, variables in prompt_order(template):
            prompter.section(key.title)
            for variable in variables:
                given = supplied.get(variable.name)
                if given:
                    values[variable.name] = given
                    prompter.info(f"{variable.name}: {given}")
                    continue
                values[variable.name] = _ask(prompter, variable, key)
    except PromptCancelled:
        logger.debug("Variable resolution cancelled")
        return None
    return values


def default_values(
    template: Template, supplied: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """Values for non-interactive installs: supplied values, else each default.

    Raises ValidationError naming every required variable left empty.
    """
    supplied = supplied or {}
    values = {v.name: supplied.get(v.name) or v.default for v in template.unique_variables()}
    missing = [
        v.name
        for v in template.unique_variables()
        if v.required and not values[v.name].strip()
    ]
    if missing:
        raise ValidationError(
            "Required variables have no default value: " + ", ".join(missing),
            missing[0],
        )
    return values
