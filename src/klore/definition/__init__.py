"""The `.klore` template definition language."""

from .generator import generate_definition, write_definition
from .literals import escape_literal, unescape_literal
from .model import (
    DEFINITION_FILE,
    MATCH_ALL,
    Conditional,
    Group,
    GroupKey,
    InstallStep,
    Replacement,
    Template,
    Variable,
    VariableType,
    find_problems,
)
from .parser import parse_definition, read_definition
from .questions import question_for

__all__ = [
    "DEFINITION_FILE",
    "MATCH_ALL",
    "Conditional",
    "Group",
    "GroupKey",
    "InstallStep",
    "Replacement",
    "Template",
    "Variable",
    "VariableType",
    "escape_literal",
    "find_problems",
    "generate_definition",
    "parse_definition",
    "question_for",
    "read_definition",
    "unescape_literal",
    "write_definition",
]
