"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from tooldir.cli import cli
from tooldir.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".tooldir" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "importing:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "importing.batch_size", "--value", "42"], env=env)

    assert result.exit_code == 0
    assert "42" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.importing.batch_size == 42


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "importing.batch_size", "--value", "0"], env=env)

    assert result.exit_code != 0
    manager = ConfigManager(config_path=_config_path(tmp_path))
    assert manager.load(include_env=False).importing.batch_size == 500


def test_config_set_reports_unchanged_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "catalog.override_key", "--value", "tools_override"], env=env
    )

    assert result.exit_code == 0
    assert "No changes applied" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("featured_limit: 24", "featured_limit: 8")

    monkeypatch.setattr("tooldir.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.display.featured_limit == 8
