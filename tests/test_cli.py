"""Tests for the typer command line."""

import json

from typer.testing import CliRunner

from depscope.cli import app

runner = CliRunner()


def test_analyze_json(cyclic_project):
    result = runner.invoke(app, ["analyze", str(cyclic_project), "--json", "--no-cache", "-w", "1"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["analyzedFiles"] == 3
    assert data["cycles"][0]["severity"] == "critical"


def test_analyze_rich_summary(cyclic_project):
    result = runner.invoke(app, ["analyze", str(cyclic_project), "--no-cache", "-w", "1"])
    assert result.exit_code == 0, result.output
    assert "project" in result.stdout
    assert "critical" in result.stdout


def test_analyze_missing_path(tmp_path):
    result = runner.invoke(app, ["analyze", str(tmp_path / "missing")])
    assert result.exit_code == 1


def test_invalid_depth(cyclic_project):
    result = runner.invoke(app, ["analyze", str(cyclic_project), "--depth", "extreme"])
    assert result.exit_code != 0


def test_cache_clear(cyclic_project):
    runner.invoke(app, ["analyze", str(cyclic_project), "--json", "-w", "1"])
    result = runner.invoke(app, ["cache-clear", str(cyclic_project)])
    assert result.exit_code == 0
    assert "Caches cleared" in result.stdout
    assert not (cyclic_project / ".depscope-cache" / "file-list-cache.json").exists()


def test_analyze_missing_path_json(tmp_path):
    result = runner.invoke(app, ["analyze", str(tmp_path / "missing"), "--json"])
    assert result.exit_code == 1
    error = json.loads(result.stdout)["error"]
    assert error["type"] == "InvalidPathError"
    assert error["details"]["reason"] == "does not exist"
