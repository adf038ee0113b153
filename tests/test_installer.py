from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import pytest

import klore.install.runner as runner_mod
from klore.definition import (
    Group,
    InstallStep,
    Replacement,
    Template,
    Variable,
    VariableType,
    write_definition,
)
from klore.errors import CommandError, PromptCancelled
from klore.install import InstallOptions, Prompter, install_template, run_post_install


class StubPrompter(Prompter):
    def __init__(self, answers: Optional[List[str]] = None, confirm_answer: bool = True) -> None:
        self.answers = list(answers or [])
        self.confirm_answer = confirm_answer
        self.confirmed: List[str] = []

    def text(self, message: str, default: str = "") -> str:
        if not self.answers:
            raise PromptCancelled(message)
        return self.answers.pop(0)

    def confirm(self, message: str, default: bool = True) -> bool:
        self.confirmed.append(message)
        return self.confirm_answer


def make_template_dir(root: Path, steps=()) -> Path:
    template_dir = root / "template"
    template_dir.mkdir()
    (template_dir / "index.html").write_text(
        "<title>Acme</title>\n<a href=\"mailto:hi@acme.io\">Mail</a>\n", encoding="utf-8"
    )
    write_definition(
        Template(
            name="Acme",
            variables=(
                Variable("appName", VariableType.STRING, "Acme", required=True),
                Variable("contactEmail", VariableType.EMAIL, "", required=True),
            ),
            groups=(Group("branding", ("appName",)), Group("contact", ("contactEmail",))),
            replacements=(
                Replacement("Acme", "appName"),
                Replacement("hi@acme.io", "contactEmail"),
            ),
            on_install=tuple(steps),
        ),
        template_dir,
    )
    return template_dir


@pytest.fixture
def recorded_commands(monkeypatch) -> List[str]:
    commands: List[str] = []

    def fake_run_shell(command: str, cwd=None) -> int:
        commands.append(command)
        return 1 if "fail" in command else 0

    monkeypatch.setattr(runner_mod, "run_shell", fake_run_shell)
    return commands


def test_interactive_install(tmp_path: Path) -> None:
    template_dir = make_template_dir(tmp_path)
    output = tmp_path / "globex"

    result = install_template(
        InstallOptions(template_path=template_dir, output_path=output),
        StubPrompter(["Globex", "hello@globex.io"]),
    )

    assert result.success
    assert result.errors == []
    assert result.files_created == 1
    assert result.replacements_applied == 1
    assert (output / "index.html").read_text(encoding="utf-8") == (
        "<title>Globex</title>\n<a href=\"mailto:hello@globex.io\">Mail</a>\n"
    )
    assert not (output / ".klore").exists()


def test_defaults_install_with_supplied_values(tmp_path: Path) -> None:
    template_dir = make_template_dir(tmp_path)
    result = install_template(
        InstallOptions(
            template_path=template_dir,
            output_path=tmp_path / "out",
            use_defaults=True,
            values={"contactEmail": "hello@globex.io"},
        ),
        StubPrompter(),
    )
    assert result.success
    content = (tmp_path / "out" / "index.html").read_text(encoding="utf-8")
    assert "<title>Acme</title>" in content
    assert "hello@globex.io" in content


def test_defaults_install_rejects_missing_required(tmp_path: Path) -> None:
    template_dir = make_template_dir(tmp_path)
    result = install_template(
        InstallOptions(template_path=template_dir, output_path=tmp_path / "out", use_defaults=True),
        StubPrompter(),
    )
    assert not result.success
    assert result.errors == ["Required variables have no default value: contactEmail"]
    assert not (tmp_path / "out").exists()


def test_missing_template_directory(tmp_path: Path) -> None:
    result = install_template(
        InstallOptions(template_path=tmp_path / "missing", output_path=tmp_path / "out"),
        StubPrompter(),
    )
    assert not result.success
    assert result.errors[0].startswith("Template directory does not exist")


def test_missing_definition(tmp_path: Path) -> None:
    (tmp_path / "template").mkdir()
    result = install_template(
        InstallOptions(template_path=tmp_path / "template", output_path=tmp_path / "out"),
        StubPrompter(),
    )
    assert result.errors == ["No .klore file found in template directory"]


def test_existing_output_without_force(tmp_path: Path) -> None:
    template_dir = make_template_dir(tmp_path)
    (tmp_path / "out").mkdir()
    result = install_template(
        InstallOptions(template_path=template_dir, output_path=tmp_path / "out"),
        StubPrompter(["Globex", "a@b.co"]),
    )
    assert result.errors == ["Output directory already exists. Use --force to overwrite."]

    forced = install_template(
        InstallOptions(template_path=template_dir, output_path=tmp_path / "out", force=True),
        StubPrompter(["Globex", "a@b.co"]),
    )
    assert forced.success


def test_cancelled_install(tmp_path: Path) -> None:
    template_dir = make_template_dir(tmp_path)
    result = install_template(
        InstallOptions(template_path=template_dir, output_path=tmp_path / "out"),
        StubPrompter(["Globex"]),
    )
    assert result.errors == ["Installation cancelled by user"]
    assert not (tmp_path / "out").exists()


def test_failed_post_install_is_a_warning(tmp_path: Path, recorded_commands: List[str]) -> None:
    steps = [InstallStep("npm install"), InstallStep("npm run fail"), InstallStep("npm run build")]
    template_dir = make_template_dir(tmp_path, steps)

    result = install_template(
        InstallOptions(
            template_path=template_dir,
            output_path=tmp_path / "out",
            values={"contactEmail": "a@b.co"},
            use_defaults=True,
            run_post_install=True,
        ),
        StubPrompter(),
    )

    assert result.success
    assert result.errors == ["Post-install error: Command 'npm run fail' failed with exit code 1"]
    assert recorded_commands == ["npm install", "npm run fail"]
    assert (tmp_path / "out" / "index.html").is_file()


def test_post_install_asks_when_unset(tmp_path: Path, recorded_commands: List[str]) -> None:
    template_dir = make_template_dir(tmp_path, [InstallStep("composer install")])
    prompter = StubPrompter(["Globex", "a@b.co"], confirm_answer=False)

    result = install_template(
        InstallOptions(template_path=template_dir, output_path=tmp_path / "out"),
        prompter,
    )

    assert result.success
    assert prompter.confirmed == ["Run post-install commands? (1 commands)"]
    assert recorded_commands == []


def test_run_post_install(tmp_path: Path, recorded_commands: List[str]) -> None:
    completed = run_post_install([InstallStep("npm install"), InstallStep("npm run build")], tmp_path)
    assert completed == ["npm install", "npm run build"]

    with pytest.raises(CommandError) as excinfo:
        run_post_install([InstallStep("make fail"), InstallStep("never")], tmp_path)
    assert excinfo.value.returncode == 1
    assert excinfo.value.command == "make fail"
    assert "never" not in recorded_commands


def test_run_post_install_start_failure(tmp_path: Path, monkeypatch) -> None:
    def broken(command: str, cwd=None) -> int:
        raise FileNotFoundError(command)

    monkeypatch.setattr(runner_mod, "run_shell", broken)
    with pytest.raises(CommandError) as excinfo:
        run_post_install([InstallStep("missing-tool")], tmp_path)
    assert excinfo.value.returncode == -1


def test_defaults_mode_does_not_ask_about_post_install(
    tmp_path: Path, recorded_commands: List[str]
) -> None:
    template_dir = make_template_dir(tmp_path, [InstallStep("composer install")])
    prompter = StubPrompter(confirm_answer=True)

    result = install_template(
        InstallOptions(
            template_path=template_dir,
            output_path=tmp_path / "out",
            values={"contactEmail": "a@b.co"},
            use_defaults=True,
        ),
        prompter,
    )

    assert result.success
    assert prompter.confirmed == []
    assert recorded_commands == []


def test_unreadable_definition_fails_cleanly(tmp_path: Path) -> None:
    template_dir = tmp_path / "template"
    template_dir.mkdir()
    (template_dir / ".klore").write_bytes(b'NAME "\xff"\n')

    result = install_template(
        InstallOptions(template_path=template_dir, output_path=tmp_path / "out"),
        StubPrompter(),
    )

    assert not result.success
    assert result.errors[0].startswith("Could not read template definition")
    assert not (tmp_path / "out").exists()


def test_output_inside_template_directory(tmp_path: Path) -> None:
    template_dir = make_template_dir(tmp_path)

    result = install_template(
        InstallOptions(
            template_path=template_dir,
            output_path=template_dir / "new",
            values={"contactEmail": "a@b.co"},
            use_defaults=True,
        ),
        StubPrompter(),
    )

    assert result.success
    assert result.files_created == 1
    assert not (template_dir / "new" / "new").exists()


posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell commands")


@posix_only
def test_real_commands_run_in_destination(tmp_path: Path, capsys) -> None:
    workdir = tmp_path / "project"
    workdir.mkdir()
    steps = [
        InstallStep("echo streamed-output"),
        InstallStep("pwd > where.txt"),
        InstallStep("exit 3"),
        InstallStep("touch never.txt"),
    ]

    with pytest.raises(CommandError) as excinfo:
        run_post_install(steps, workdir)

    assert excinfo.value.returncode == 3
    assert excinfo.value.command == "exit 3"
    where = Path((workdir / "where.txt").read_text(encoding="utf-8").strip())
    assert where.resolve() == workdir.resolve()
    assert not (workdir / "never.txt").exists()
    assert "streamed-output" in capsys.readouterr().out


@posix_only
def test_undecodable_command_output_is_not_fatal(tmp_path: Path) -> None:
    template_dir = make_template_dir(tmp_path, [InstallStep("printf '\\377\\376\\n'")])

    result = install_template(
        InstallOptions(
            template_path=template_dir,
            output_path=tmp_path / "out",
            values={"contactEmail": "a@b.co"},
            use_defaults=True,
            run_post_install=True,
        ),
        StubPrompter(),
    )

    assert result.success is True
    assert result.errors == []
