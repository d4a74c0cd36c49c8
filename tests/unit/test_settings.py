from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from rasterpages.exceptions import SettingsError
from rasterpages.settings import Settings, ensure_env_file_exists, get_settings

if TYPE_CHECKING:
    from pathlib import Path


def test_settings_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    settings = Settings()

    assert settings.engine_binary == "gm"
    assert settings.command_timeout == 300
    assert settings.memory_limit == "256MiB"
    assert settings.map_limit == "512MiB"
    assert settings.engine_threads == 2
    assert settings.default_density == "150"


def test_settings_load_from_env_file(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "APP_ENV=test\n"
        "LOG_LEVEL=DEBUG\n"
        "LOG_JSON=false\n"
        "ENGINE_BINARY=/usr/local/bin/gm\n"
        "COMMAND_TIMEOUT=12\n"
        "ENGINE_MEMORY_LIMIT=128MiB\n"
        "ENGINE_THREADS=4\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    settings = Settings()

    assert settings.app_env == "test"
    assert settings.log_level == "DEBUG"
    assert settings.log_json is False
    assert settings.engine_binary == "/usr/local/bin/gm"
    assert settings.command_timeout == 12
    assert settings.memory_limit == "128MiB"
    assert settings.engine_threads == 4


def test_settings_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("COMMAND_TIMEOUT", "45.5")
    monkeypatch.setenv("ENGINE_MAP_LIMIT", "1GiB")

    settings = Settings()

    assert settings.command_timeout == 45.5
    assert settings.map_limit == "1GiB"


@pytest.mark.parametrize("limit", ["lots", "MiB", "256 potatoes"])
def test_settings_rejects_malformed_engine_limits(limit: str) -> None:
    with pytest.raises(ValidationError, match="Engine limit"):
        Settings(memory_limit=limit)


def test_settings_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValidationError):
        Settings(command_timeout=0)


def test_get_settings_uses_environment(monkeypatch) -> None:
    get_settings.cache_clear()
    monkeypatch.setenv("APP_ENV", "ci")

    settings = get_settings()
    assert settings.app_env == "ci"

    get_settings.cache_clear()


def test_get_settings_wraps_validation_errors(monkeypatch) -> None:
    get_settings.cache_clear()
    monkeypatch.setenv("ENGINE_THREADS", "zero")

    with pytest.raises(SettingsError, match="Failed to load settings"):
        get_settings()

    get_settings.cache_clear()


def test_ensure_env_file_exists_copies_template(tmp_path: Path) -> None:
    template = tmp_path / ".env.template"
    template.write_text("ENGINE_BINARY=gm\n", encoding="utf-8")
    env_path = tmp_path / ".env"

    ensure_env_file_exists(env_path=env_path, template_path=template)

    assert env_path.read_text(encoding="utf-8") == "ENGINE_BINARY=gm\n"


def test_ensure_env_file_exists_keeps_existing_file(tmp_path: Path) -> None:
    template = tmp_path / ".env.template"
    template.write_text("ENGINE_BINARY=gm\n", encoding="utf-8")
    env_path = tmp_path / ".env"
    env_path.write_text("ENGINE_BINARY=custom\n", encoding="utf-8")

    ensure_env_file_exists(env_path=env_path, template_path=template)

    assert env_path.read_text(encoding="utf-8") == "ENGINE_BINARY=custom\n"
