"""CLI interface for klore - turn projects into reusable templates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from packaging.version import InvalidVersion, Version
from rich.logging import RichHandler

from .config import discover_settings_path, get_settings, save_settings
from .config.settings import POST_INSTALL_MODES
from .definition import (
    Template,
    find_problems,
    read_definition,
    write_definition,
)
from .errors import PathError
from .install import ClickPrompter, InstallOptions, install_template
from .scan import (
    build_template,
    candidates_from_content,
    extract_all_content,
    format_bytes,
    scan_project,
)
from .utils import console


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _kv(key: str, value: object) -> None:
    console.print(f"[cyan]{key:<15}[/cyan] {value}")


def _section(title: str) -> None:
    console.print(f"\n── {title} ──────────────────────", style="magenta")


def _parse_assignments(pairs: Tuple[str, ...]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--set")
        key, value = pair.split("=", 1)
        if not key:
            raise click.BadParameter(f"empty KEY in {pair!r}", param_hint="--set")
        values[key] = value
    return values


def _load_template(template_path: Path) -> Template:
    """Read the template definition or exit with a red message."""
    try:
        template = read_definition(template_path) if template_path.is_dir() else None
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"❌ Could not read template definition: {e}", style="bold red")
        raise SystemExit(1)
    if template is None:
        console.print("❌ No .klore file found in template directory", style="bold red")
        raise SystemExit(1)
    return template


def _validate_version(ctx: click.Context, param: click.Parameter, value: str) -> str:
    try:
        Version(value)
    except InvalidVersion:
        raise click.BadParameter(f"{value!r} is not a valid version")
    return value


@click.group()
@click.option("--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Turn a project into a reusable, parameterized template."""
    _configure_logging(verbose)


@cli.command("scan")
@click.argument("project_path", default=".", type=click.Path(path_type=Path))
@click.option("-v", "--verbose", "detail", is_flag=True, default=False, help="Also count detected content.")
def scan_cmd(project_path: Path, detail: bool) -> None:
    """
    Scan a project directory and report its files and tech stack.
    """
    try:
        with console.status("Scanning project structure..."):
            result = scan_project(project_path, get_settings()["max_file_size"])
    except PathError as e:
        console.print(f"❌ {e}", style="bold red")
        raise SystemExit(1)

    _section("📊 Statistics")
    _kv("Files", result.total_files)
    _kv("Size", format_bytes(result.total_size))

    stack = result.tech_stack
    if stack.framework or stack.languages:
        _section("🛠️ Tech Stack")
        if stack.framework:
            _kv("Framework", stack.framework)
        if stack.languages:
            _kv("Languages", ", ".join(stack.languages))
        if stack.package_managers:
            _kv("Pkg Manager", ", ".join(stack.package_managers))
        if stack.bundler:
            _kv("Bundler", stack.bundler)

    if detail:
        content = extract_all_content(result.files)
        if content:
            _section("🔍 Detected Content")
            counts: Dict[str, int] = {}
            for item in content:
                counts[item.type] = counts.get(item.type, 0) + 1
            for kind, count in counts.items():
                _kv(kind, f"{count} detected")

    console.print("\n✅ Scan complete!", style="green")


@cli.command("create")
@click.argument("project_path", default=".", type=click.Path(path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Definition file to write.")
@click.option("-n", "--name", "name", default=None, help="Template name.")
@click.option(
    "--version",
    "template_version",
    default="1.0.0",
    callback=_validate_version,
    help="Template version.",
)
@click.option("--author", default=None, help="Template author.")
def create_cmd(
    project_path: Path,
    output: Optional[Path],
    name: Optional[str],
    template_version: str,
    author: Optional[str],
) -> None:
    """
    Create a template definition from a project.

    Scans the project, detects replaceable content (emails, URLs, colors, names,
    ...) and writes a `.klore` file describing the variables and replacements.
    """
    try:
        with console.status("Scanning project structure..."):
            result = scan_project(project_path, get_settings()["max_file_size"])
    except PathError as e:
        console.print(f"❌ {e}", style="bold red")
        raise SystemExit(1)
    console.print(f"Scanned {len(result.files)} files")

    content = extract_all_content(result.files)
    candidates = candidates_from_content(content)
    console.print(f"Extracted {len(content)} unique patterns")

    template = build_template(
        name or f"{result.root_path.name} Template",
        result,
        candidates,
        version=template_version,
        author=author if author is not None else get_settings()["author"],
    )

    target = output.resolve() if output else result.root_path
    try:
        target = write_definition(template, target)
    except OSError as e:
        console.print(f"❌ Failed to write definition: {e}", style="bold red")
        raise SystemExit(1)

    _section("📋 Template Summary")
    _kv("Variables", len(template.variables))
    _kv("Replacements", len(template.replacements))
    _kv("Groups", len(template.groups))
    console.print(f"\n✅ Template created: {target}", style="green")


@cli.command("install")
@click.argument("template_path", type=click.Path(path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Directory for the new project.")
@click.option("--force", is_flag=True, default=False, help="Write into an existing output directory.")
@click.option("--defaults", is_flag=True, default=False, help="Use default values without prompting.")
@click.option("--set", "assignments", multiple=True, metavar="KEY=VALUE", help="Pre-supply a variable value.")
@click.option(
    "--post-install/--no-post-install",
    "post_install",
    default=None,
    help="Run (or skip) post-install commands without asking.",
)
def install_cmd(
    template_path: Path,
    output: Optional[Path],
    force: bool,
    defaults: bool,
    assignments: Tuple[str, ...],
    post_install: Optional[bool],
) -> None:
    """
    Install a template to create a new project.

    TEMPLATE_PATH is a directory containing a `.klore` file. Every variable is
    prompted for unless supplied with --set or --defaults is given.
    """
    values = _parse_assignments(assignments)
    template_path = template_path.resolve()
    template = _load_template(template_path)

    _section("📦 Template Info")
    _kv("Name", template.name)
    _kv("Version", template.version)
    if template.framework:
        _kv("Framework", template.framework)
    _kv("Variables", len(template.unique_variables()))
    _kv("Replacements", len(template.replacements))

    if output is None:
        output = Path(
            click.prompt("Where do you want to create the new project?", type=str)
        )

    if post_install is None:
        mode = get_settings()["post_install"]
        post_install = {"always": True, "never": False}.get(mode)

    if defaults:
        console.print("Using default values for all variables...", style="dim")
    else:
        _section("📝 Configuration")

    result = install_template(
        InstallOptions(
            template_path=template_path,
            output_path=output.resolve(),
            force=force,
            values=values,
            use_defaults=defaults,
            run_post_install=post_install,
        ),
        ClickPrompter(),
    )

    if not result.success:
        console.print(f"❌ Installation failed: {', '.join(result.errors)}", style="bold red")
        raise SystemExit(1)

    _section("✨ Installation Complete")
    _kv("Location", result.output_path)
    _kv("Files", result.files_created)
    _kv("Replacements", result.replacements_applied)
    for warning in result.errors:
        console.print(f"⚠️ {warning}", style="yellow")


@cli.command("check")
@click.argument("template_path", type=click.Path(path_type=Path))
def check_cmd(template_path: Path) -> None:
    """Validate a template's `.klore` file and list any problems."""
    template = _load_template(template_path)

    problems = find_problems(template)
    if not problems:
        console.print(
            f"✓ {template.name or template_path.name}: "
            f"{len(template.unique_variables())} variables, "
            f"{len(template.replacements)} replacements",
            style="green",
        )
        return
    for problem in problems:
        console.print(f"  - {problem}", style="red")
    console.print(f"❌ {len(problems)} problem(s) found", style="bold red")
    raise SystemExit(1)


@cli.command("config")
@click.option("--author", default=None, help="Default AUTHOR for new templates.")
@click.option("--max-file-size", type=click.IntRange(min=1), default=None, help="Bytes read per scanned file.")
@click.option("--post-install", type=click.Choice(POST_INSTALL_MODES), default=None)
def config_cmd(author: Optional[str], max_file_size: Optional[int], post_install: Optional[str]) -> None:
    """
    Show settings, or update them when options are given.

    Updates are written to the discovered settings file, falling back to
    ~/.config/klore/config.yml.
    """
    settings = dict(get_settings())
    path = discover_settings_path() or Path.home() / ".config" / "klore" / "config.yml"
    updates = {
        "author": author,
        "max_file_size": max_file_size,
        "post_install": post_install,
    }
    changed = {k: v for k, v in updates.items() if v is not None}
    if changed:
        settings.update(changed)
        save_settings(path, settings)  # type: ignore[arg-type]
        get_settings.cache_clear()
        console.print(f"Updated {path}", style="green")

    _kv("Settings file", path)
    for key, value in settings.items():
        _kv(key, value)


if __name__ == "__main__":
    cli()
