from __future__ import annotations

from pathlib import Path

import pytest

import klore.config.settings as settings_mod
from klore.config import (
    DEFAULT_SETTINGS,
    discover_settings_path,
    get_settings,
    load_settings,
    save_settings,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path: Path):
    # Keep the real home directory and any KLORE_CONFIG out of discovery.
    monkeypatch.delenv(settings_mod.CONFIG_ENV, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults_without_config_file() -> None:
    assert discover_settings_path() is None
    assert get_settings() == DEFAULT_SETTINGS


def test_discovers_config_in_parent_directory(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / ".klore.yml").write_text(
        "author: Jane Doe\npost_install: ALWAYS\nmax_file_size: -5\n", encoding="utf-8"
    )
    nested = tmp_path / "projects" / "shop"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    assert discover_settings_path() == tmp_path / ".klore.yml"
    settings = get_settings()
    assert settings["author"] == "Jane Doe"
    assert settings["post_install"] == "always"
    assert settings["max_file_size"] == DEFAULT_SETTINGS["max_file_size"]


def test_env_var_wins(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / ".klore.yml").write_text("author: Local\n", encoding="utf-8")
    custom = tmp_path / "custom.yml"
    custom.write_text("author: From Env\nmax_file_size: 2048\n", encoding="utf-8")
    monkeypatch.setenv(settings_mod.CONFIG_ENV, str(custom))

    settings = get_settings()
    assert settings["author"] == "From Env"
    assert settings["max_file_size"] == 2048


def test_user_config_is_the_fallback(tmp_path: Path) -> None:
    user_config = tmp_path / "home" / ".config" / "klore" / "config.yml"
    user_config.parent.mkdir(parents=True)
    user_config.write_text("post_install: never\n", encoding="utf-8")

    assert discover_settings_path() == user_config
    assert get_settings()["post_install"] == "never"


def test_broken_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".klore.yml").write_text("author: [unclosed\n", encoding="utf-8")
    assert get_settings() == DEFAULT_SETTINGS


def test_non_mapping_yaml_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "list.yml"
    path.write_text("- one\n- two\n", encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS


def test_save_and_load_settings(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.yml"
    settings = dict(DEFAULT_SETTINGS, author="Jane", post_install="always")
    save_settings(path, settings)  # type: ignore[arg-type]

    assert load_settings(path) == settings
