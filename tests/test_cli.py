"""
test_cli.py — Smoke tests for the Typer commands in autoshutdown/cli/commands.py.

Only exit codes and short, unwrapped lines are asserted; table layout depends
on terminal width.
"""
from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from autoshutdown import __version__
from autoshutdown.cli.commands import app

runner = CliRunner()


def _config(tmp_path: Path, **data) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"v{__version__}" in result.output


class TestPlan:
    def test_enabled_plan(self, tmp_path: Path) -> None:
        path = _config(tmp_path, enabled=True, time="04:00:00;20:00:00")
        result = runner.invoke(app, ["plan", "--config", str(path), "--now", "2024-01-01T21:00:00"])
        assert result.exit_code == 0, result.output

    def test_disabled_plan(self, tmp_path: Path) -> None:
        path = _config(tmp_path, enabled=False)
        result = runner.invoke(app, ["plan", "--config", str(path)])
        assert result.exit_code == 1
        assert "disabled" in result.output

    def test_invalid_now(self, tmp_path: Path) -> None:
        path = _config(tmp_path, enabled=True)
        result = runner.invoke(app, ["plan", "--config", str(path), "--now", "yesterday"])
        assert result.exit_code == 1
        assert "invalid --now" in result.output


class TestOnboard:
    def test_writes_default_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        result = runner.invoke(app, ["onboard", "--config", str(path)])
        assert result.exit_code == 0, result.output
        data = json.loads(path.read_text())
        assert data["enabled"] is False
        assert data["everyDays"] == 1


class TestStatus:
    def test_status(self, tmp_path: Path) -> None:
        path = _config(tmp_path, enabled=True, time="05:00:00")
        result = runner.invoke(app, ["status", "--config", str(path)])
        assert result.exit_code == 0, result.output
        assert "Time: 05:00:00" in result.output
