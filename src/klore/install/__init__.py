"""Installing templates into new projects."""

from .engine import MaterializeResult, apply_replacements, is_text_file, materialize
from .installer import InstallOptions, InstallResult, install_template
from .prompts import ClickPrompter, Prompter
from .resolver import default_values, resolve_variables, validate_value
from .runner import run_post_install

__all__ = [
    "ClickPrompter",
    "InstallOptions",
    "InstallResult",
    "MaterializeResult",
    "Prompter",
    "apply_replacements",
    "default_values",
    "install_template",
    "is_text_file",
    "materialize",
    "resolve_variables",
    "run_post_install",
    "validate_value",
]
