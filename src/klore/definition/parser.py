"""Parser for `.klore` template definitions.

The parser is total: every input yields a Template. Lines it does not
understand are skipped and malformed fields fall back to their defaults, so
definition files written by newer or older versions still load.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .literals import (
    first_quoted,
    is_quoted,
    parse_array,
    scan_quoted,
    tokenize,
    unescape_literal,
    unquote,
)
from .model import (
    DEFINITION_FILE,
    MATCH_ALL,
    Group,
    InstallStep,
    Replacement,
    Template,
    Variable,
    VariableType,
)

logger = logging.getLogger(__name__)

_REPLACE_RE = re.compile(r"^REPLACE\s*", re.IGNORECASE)
_WITH_RE = re.compile(r"WITH\s+[\"']?\{\{\s*(\w+)\s*\}\}[\"']?", re.IGNORECASE)
_IN_RE = re.compile(r"\bIN\s+(.+)$", re.IGNORECASE)
_ASK_NAME_RE = re.compile(r"^ASK\s+(\w+)", re.IGNORECASE)
_DEFAULT_RE = re.compile(r"\bDEFAULT\s+(\"(?:[^\"\\]|\\.)*\")", re.IGNORECASE)
_RUN_MESSAGE_RE = re.compile(r"\bMESSAGE\s+(\"(?:[^\"\\]|\\.)*\")", re.IGNORECASE)

_NOOP = Replacement(original="", variable="")

_TYPE_HINTS: Tuple[Tuple[str, VariableType], ...] = (
    ("color", VariableType.COLOR),
    ("email", VariableType.EMAIL),
    ("phone", VariableType.PHONE),
    ("url", VariableType.URL),
)


@dataclass
class _Draft:
    """Mutable collector; frozen into a Template once every line is read."""

    name: str = ""
    version: str = "1.0.0"
    author: str = ""
    description: str = ""
    framework: Optional[str] = None
    requires: List[str] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    replacements: List[Replacement] = field(default_factory=list)
    on_install: List[InstallStep] = field(default_factory=list)
    ai_hints: List[str] = field(default_factory=list)

    def freeze(self) -> Template:
        return Template(
            name=self.name,
            version=self.version,
            author=self.author,
            description=self.description,
            framework=self.framework,
            requires=tuple(self.requires),
            variables=tuple(self.variables),
            groups=tuple(self.groups),
            replacements=tuple(self.replacements),
            on_install=tuple(self.on_install),
            ai_hints=tuple(self.ai_hints),
        )


def _significant_lines(content: str) -> List[str]:
    lines = (line.strip() for line in content.split("\n"))
    return [line for line in lines if line and not line.startswith("#")]


def parse_definition(content: str) -> Template:
    """Parse the text of a `.klore` file into a Template."""
    lines = _significant_lines(content)
    draft = _Draft()
    pos = 0
    while pos < len(lines):
        pos = _parse_line(lines, pos, draft)
    template = draft.freeze()
    logger.debug(
        "Parsed definition %r: %d variables, %d replacements, %d install steps",
        template.name,
        len(template.variables),
        len(template.replacements),
        len(template.on_install),
    )
    return template


def read_definition(template_dir: Path) -> Optional[Template]:
    """Read and parse `<template_dir>/.klore`, or None when it is missing."""
    path = template_dir / DEFINITION_FILE
    if not path.is_file():
        return None
    with open(path, "r", encoding="utf-8") as f:
        return parse_definition(f.read())


def _parse_line(lines: List[str], pos: int, draft: _Draft) -> int:
    """Apply the line at `pos` to the draft and return the next position."""
    line = lines[pos]
    tokens = tokenize(line)
    if not tokens:
        return pos + 1
    command = tokens[0].upper()

    if command == "NAME":
        draft.name = first_quoted(line)
    elif command == "VERSION":
        draft.version = first_quoted(line)
    elif command == "AUTHOR":
        draft.author = first_quoted(line)
    elif command == "DESCRIPTION":
        draft.description = first_quoted(line)
    elif command == "FRAMEWORK":
        draft.framework = first_quoted(line)
    elif command == "REQUIRES":
        draft.requires = parse_array(line)
    elif command == "VAR":
        draft.variables.append(parse_var(tokens))
    elif command == "ASK":
        draft.variables.append(parse_ask(line))
    elif command == "GROUP":
        draft.groups.append(parse_group(tokens))
    elif command == "REPLACE":
        draft.replacements.append(parse_replace(line))
    elif command == "AI_HINT":
        draft.ai_hints.append(first_quoted(line))
    elif command in ("ON", "ON_INSTALL"):
        return _parse_install_block(lines, pos + 1, draft)
    else:
        logger.debug("Ignoring unknown command %r", tokens[0])
    return pos + 1


def _parse_install_block(lines: List[str], pos: int, draft: _Draft) -> int:
    """Consume an ON INSTALL block starting after its header; return the line after END."""
    while pos < len(lines):
        line = lines[pos]
        if line.upper() == "END":
            return pos + 1
        command = line.split(None, 1)[0].upper()
        if command == "RUN":
            step = parse_run(line)
            if step is not None:
                draft.on_install.append(step)
        elif command == "REPLACE":
            draft.replacements.append(parse_replace(line))
        pos += 1
    return pos


def _unquoted_words(tokens: List[str]) -> List[str]:
    return [t.upper() for t in tokens if not is_quoted(t)]


def parse_var(tokens: List[str]) -> Variable:
    """`VAR name TYPE "default" [REQUIRED]`."""
    name = unquote(tokens[1]) if len(tokens) > 1 else ""
    rest = tokens[2:]
    var_type = VariableType.parse(rest[0]) if rest and not is_quoted(rest[0]) else None
    if var_type is not None:
        rest = rest[1:]
    elif rest and not is_quoted(rest[0]) and rest[0].upper() != "REQUIRED":
        # unrecognized type word
        rest = rest[1:]
    default = unquote(rest[0]) if rest and is_quoted(rest[0]) else ""
    required = "REQUIRED" in _unquoted_words(tokens[2:])
    return Variable(
        name=name,
        type=var_type or VariableType.STRING,
        default=default,
        required=required,
    )


def infer_type(name: str) -> VariableType:
    lowered = name.lower()
    for needle, var_type in _TYPE_HINTS:
        if needle in lowered:
            return var_type
    return VariableType.STRING


def parse_ask(line: str) -> Variable:
    """`ASK name "question" [DEFAULT "value"] [REQUIRED]`; the question is dropped."""
    name_match = _ASK_NAME_RE.match(line)
    name = name_match.group(1) if name_match else ""
    default_match = _DEFAULT_RE.search(line)
    default = unquote(default_match.group(1)) if default_match else ""
    required = "REQUIRED" in _unquoted_words(tokenize(line)[1:])
    return Variable(name=name, type=infer_type(name), default=default, required=required)


def parse_group(tokens: List[str]) -> Group:
    """`GROUP name [var1, var2]`."""
    name = unquote(tokens[1]) if len(tokens) > 1 and not tokens[1].startswith("[") else ""
    members: List[str] = []
    for token in tokens[1:]:
        if token.startswith("["):
            members = parse_array(token)
            break
    return Group(name=name, variables=tuple(members))


def parse_replace(line: str) -> Replacement:
    """`REPLACE "original" WITH {{ variable }} IN "pattern" ...`.

    Any deviation from that shape produces a no-op Replacement instead of an
    error.
    """
    keyword = _REPLACE_RE.match(line)
    if keyword is None:
        return _NOOP
    scanned = scan_quoted(line, keyword.end())
    if scanned is None:
        logger.debug("Unterminated REPLACE original: %s", line)
        return _NOOP
    raw_original, end = scanned
    remaining = line[end:]

    variable_match = _WITH_RE.search(remaining)
    if variable_match is None:
        logger.debug("REPLACE without WITH clause: %s", line)
        return _NOOP

    patterns: List[str] = []
    in_match = _IN_RE.search(remaining, variable_match.end())
    if in_match:
        patterns = [
            unquote(token)
            for token in tokenize(in_match.group(1))
            if token.startswith('"') and is_quoted(token) and len(token) > 2
        ]
    return Replacement(
        original=unescape_literal(raw_original),
        variable=variable_match.group(1),
        file_patterns=tuple(patterns) or (MATCH_ALL,),
    )


def parse_run(line: str) -> Optional[InstallStep]:
    """`RUN "command" [MESSAGE "text"]`."""
    command = first_quoted(line)
    if not command:
        return None
    message_match = _RUN_MESSAGE_RE.search(line)
    message = unquote(message_match.group(1)) if message_match else None
    return InstallStep(command=command, message=message or None)
