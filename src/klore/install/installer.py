"""Install a template: resolve values, materialize the tree, run setup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..definition.model import find_problems
from ..definition.parser import read_definition
from ..errors import CommandError, PathError, PromptCancelled, TreeIOError, ValidationError
from .engine import materialize
from .prompts import Prompter
from .resolver import default_values, resolve_variables
from .runner import run_post_install

logger = logging.getLogger(__name__)


@dataclass
class InstallOptions:
    template_path: Path
    output_path: Path
    force: bool = False
    values: Optional[Mapping[str, str]] = None
    use_defaults: bool = False
    # None asks the prompter (or skips in defaults mode), True/False decide.
    run_post_install: Optional[bool] = None


@dataclass
class InstallResult:
    success: bool
    output_path: Path
    files_created: int = 0
    replacements_applied: int = 0
    errors: List[str] = field(default_factory=list)


def _failed(options: InstallOptions, message: str) -> InstallResult:
    logger.debug("Install failed: %s", message)
    return InstallResult(success=False, output_path=options.output_path, errors=[message])


def _should_run_post_install(options: InstallOptions, prompter: Prompter, count: int) -> bool:
    if options.run_post_install is not None:
        return options.run_post_install
    if options.use_defaults:
        # Defaults mode never prompts.
        return False
    try:
        return prompter.confirm(f"Run post-install commands? ({count} commands)", default=True)
    except PromptCancelled:
        return False


def install_template(options: InstallOptions, prompter: Prompter) -> InstallResult:
    """Create a new project at `options.output_path` from a template directory."""
    template_path = options.template_path
    if not template_path.is_dir():
        return _failed(options, f"Template directory does not exist: {template_path}")

    try:
        template = read_definition(template_path)
    except (OSError, UnicodeDecodeError) as e:
        return _failed(options, f"Could not read template definition: {e}")
    if template is None:
        return _failed(options, "No .klore file found in template directory")
    for problem in find_problems(template):
        logger.warning("%s: %s", template_path, problem)

    if options.output_path.exists() and not options.force:
        return _failed(options, "Output directory already exists. Use --force to overwrite.")

    values: Optional[Dict[str, str]]
    if options.use_defaults:
        try:
            values = default_values(template, options.values)
        except ValidationError as e:
            return _failed(options, str(e))
    else:
        values = resolve_variables(template, prompter, options.values)
    if values is None:
        return _failed(options, "Installation cancelled by user")

    try:
        materialized = materialize(
            template_path,
            options.output_path,
            template.replacements,
            values,
            overwrite=options.force,
        )
    except (PathError, TreeIOError) as e:
        return _failed(options, str(e))

    result = InstallResult(
        success=True,
        output_path=options.output_path,
        files_created=materialized.files_created,
        replacements_applied=materialized.replacements_applied,
    )

    steps = template.on_install
    if steps and _should_run_post_install(options, prompter, len(steps)):
        try:
            run_post_install(steps, options.output_path)
        except CommandError as e:
            # The files are in place; a failed setup command is only a warning.
            result.errors.append(f"Post-install error: {e}")
    return result
