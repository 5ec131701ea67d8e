"""Tests for the eunoia CLI."""

import json
from pathlib import Path

from typer.testing import CliRunner

from eunoia.cli.commands import app

runner = CliRunner()


def _config(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "store": {"workspace": str(tmp_path / "ws")},
        "remote": {"root": str(tmp_path / "cloud")},
    }), encoding="utf-8")
    return path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "eunoia v" in result.stdout


def test_init_config(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    result = runner.invoke(app, ["init-config", "--config", str(path)])

    assert result.exit_code == 0
    assert json.loads(path.read_text(encoding="utf-8"))["sync"]["maxRetries"] == 3
    assert "already exists" in runner.invoke(app, ["init-config", "--config", str(path)]).stdout


def test_stats_on_empty_pool(tmp_path: Path) -> None:
    result = runner.invoke(app, ["stats", "--config", str(_config(tmp_path))])

    assert result.exit_code == 0
    assert "mindfulness" in result.stdout


def test_init_pool_without_api_key_exits(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("EUNOIA_PROVIDERS__OPENAI__API_KEY", raising=False)

    result = runner.invoke(app, ["init-pool", "--config", str(_config(tmp_path))])

    assert result.exit_code == 2


def test_sync_with_empty_journal(tmp_path: Path) -> None:
    config_path = _config(tmp_path)

    result = runner.invoke(app, ["sync", "u1", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "0 uploaded" in result.stdout
