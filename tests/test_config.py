from __future__ import annotations

from pathlib import Path

import pytest

from peopleapi.config import (
    DEFAULT_PORT,
    DatabaseSettings,
    ServerSettings,
    default_database_path,
    load_settings,
    resolve_config_path,
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PEOPLE_DB_PATH", raising=False)
    monkeypatch.delenv("PEOPLE_CONFIG_PATH", raising=False)


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.yaml")

    assert settings.database.path == default_database_path()
    assert settings.database.timeout == 5.0
    assert settings.server == ServerSettings(host="0.0.0.0", port=DEFAULT_PORT)


def test_relative_database_path_resolves_against_config_dir(tmp_path: Path) -> None:
    config_path = tmp_path / "people.yaml"
    config_path.write_text(
        "database:\n  path: data/people.sqlite3\n  timeout: 1.5\nserver:\n  host: 127.0.0.1\n  port: 8080\n",
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.database == DatabaseSettings(
        path=(tmp_path / "data" / "people.sqlite3").resolve(),
        timeout=1.5,
    )
    assert settings.server == ServerSettings(host="127.0.0.1", port=8080)


def test_environment_overrides_database_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "people.yaml"
    config_path.write_text("database:\n  path: from-file.sqlite3\n", encoding="utf-8")
    override = tmp_path / "override.sqlite3"
    monkeypatch.setenv("PEOPLE_DB_PATH", str(override))

    settings = load_settings(config_path)

    assert settings.database.path == override.resolve()


@pytest.mark.parametrize(
    "content",
    [
        "- not\n- a mapping\n",
        "server:\n  port: 70000\n",
        "server:\n  port: http\n",
        "database:\n  timeout: -1\n",
        "database: []\n",
    ],
)
def test_invalid_configuration_raises(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "people.yaml"
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings(config_path)


def test_resolve_config_path_prefers_env_value(tmp_path: Path) -> None:
    assert resolve_config_path(str(tmp_path / "custom.yaml")) == (tmp_path / "custom.yaml").resolve()
    assert resolve_config_path(None).name == "people.yaml"
