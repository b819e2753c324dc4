"""Tests for the gitlab-slack CLI."""

from __future__ import annotations

import json
from unittest.mock import patch

from click.testing import CliRunner

from gitlab_slack.cli import cli


def test_convert_prints_slack_markup() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["convert", "**bold** and *italic*"])
    assert result.exit_code == 0
    assert result.output.strip() == "*bold* and _italic_"


def test_convert_with_base_url() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["convert", "--base-url", "http://base", "![img](rel/path)"])
    assert result.exit_code == 0
    assert result.output.strip() == "<http://baserel/path|img>"


def test_check_config_prints_project_map(write_config) -> None:
    path = write_config({"projects": [{"id": 260, "name": "group/app", "channel": "releases"}]})
    runner = CliRunner()
    result = runner.invoke(cli, ["check-config", path])
    assert result.exit_code == 0
    output = json.loads(result.output)
    assert output["260"]["channel"] == "#releases"


def test_check_config_reports_errors(write_config) -> None:
    path = write_config({"projects": []})
    runner = CliRunner()
    result = runner.invoke(cli, ["check-config", path])
    assert result.exit_code == 1
    assert "No projects" in result.output


def test_serve_uses_config_port(write_config, monkeypatch) -> None:
    path = write_config({"port": 5050, "projects": [{"id": 1}]})
    monkeypatch.setenv("GITLAB_SLACK_CONFIG", path)
    runner = CliRunner()
    with patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve"])
    assert result.exit_code == 0
    args, kwargs = mock_run.call_args
    assert args[0] == "gitlab_slack.server.app:create_app_from_env"
    assert kwargs["factory"] is True
    assert kwargs["port"] == 5050


def test_serve_fails_on_bad_config(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("GITLAB_SLACK_CONFIG", str(tmp_path / "missing.json"))
    runner = CliRunner()
    with patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve"])
    assert result.exit_code == 1
    mock_run.assert_not_called()
