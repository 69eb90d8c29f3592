"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

from tooldir.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Browse, filter, and curate" in result.output
    for command in ("list", "import", "export", "manage", "config"):
        assert command in result.output
