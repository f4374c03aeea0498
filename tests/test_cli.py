"""Tests for the slowpoke CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from slowpoke.cli import cli

if TYPE_CHECKING:
    from pathlib import Path

_LOG = "\n".join(
    [
        '{"protocolVersion":"0.1.1","type":"start","time":0}',
        '{"test":{"id":1,"name":"loading test/a_test.dart","groupIDs":[]},"type":"testStart","time":1}',
        '{"testID":1,"result":"success","type":"testDone","time":50}',
        '{"test":{"id":2,"name":"adds","groupIDs":[7]},"type":"testStart","time":60}',
        '{"testID":2,"result":"success","type":"testDone","time":90}',
        "[E] some stderr noise",
        '{"test":{"id":3,"name":"parses","groupIDs":[7]},"type":"testStart","time":90}',
        '{"testID":3,"result":"success","type":"testDone","time":1290}',
        '{"success":true,"type":"done","time":1300}',
    ]
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SLOWPOKE_THRESHOLD_MS", raising=False)
    monkeypatch.delenv("SLOWPOKE_NO_COLOR", raising=False)


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    path = tmp_path / "test.log"
    path.write_text(_LOG, encoding="utf-8")
    return path


def _invoke(*args: str) -> tuple[int, str]:
    runner = CliRunner()
    result = runner.invoke(cli, list(args))
    return result.exit_code, result.output


def test_version() -> None:
    exit_code, output = _invoke("--version")
    assert exit_code == 0
    assert "0.1.0" in output


def test_help_lists_options() -> None:
    exit_code, output = _invoke("--help")
    assert exit_code == 0
    for option in ("--threshold", "--no-color", "--no-stats", "--no-groups", "--json"):
        assert option in output


def test_report(log_file: Path, tmp_path: Path) -> None:
    exit_code, output = _invoke(str(log_file), "--config-root", str(tmp_path))
    assert exit_code == 0
    assert "Test Suite Statistics" in output
    assert "Test Duration Analysis" in output
    assert "parses" in output
    assert "1.20s" in output
    assert "loading" not in output
    assert "1 tests exceeded the 500ms threshold" in output


def test_threshold_flag(log_file: Path, tmp_path: Path) -> None:
    exit_code, output = _invoke(str(log_file), "--threshold", "10", "--config-root", str(tmp_path))
    assert exit_code == 0
    assert "2 tests exceeded the 10ms threshold" in output


def test_no_stats_and_no_groups(log_file: Path, tmp_path: Path) -> None:
    exit_code, output = _invoke(
        str(log_file), "--no-stats", "--no-groups", "--no-color", "--config-root", str(tmp_path)
    )
    assert exit_code == 0
    assert "Test Suite Statistics" not in output
    assert "Group Breakdown" not in output
    assert "Test Duration Analysis" in output


def test_json_output(log_file: Path, tmp_path: Path) -> None:
    exit_code, output = _invoke(str(log_file), "--json", "--config-root", str(tmp_path))
    assert exit_code == 0
    data = json.loads(output)
    assert [t["name"] for t in data["tests"]] == ["parses", "adds"]
    assert data["statistics"]["total_duration"] == 1230


def test_json_output_file(log_file: Path, tmp_path: Path) -> None:
    target = tmp_path / "out" / "report.json"
    exit_code, _ = _invoke(str(log_file), "-o", str(target), "--config-root", str(tmp_path))
    assert exit_code == 0
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["tests"][0] == {
        "name": "parses",
        "duration_ms": 1200,
        "slow": True,
        "groups": ["7"],
    }


def test_config_file_threshold(log_file: Path, tmp_path: Path) -> None:
    (tmp_path / ".slowpoke.yml").write_text(
        "report:\n  slow_threshold_ms: 5000\n", encoding="utf-8"
    )
    exit_code, output = _invoke(str(log_file), "--json", "--config-root", str(tmp_path))
    assert exit_code == 0
    assert json.loads(output)["threshold_ms"] == 5000


def test_flag_overrides_config_file(log_file: Path, tmp_path: Path) -> None:
    (tmp_path / ".slowpoke.yml").write_text(
        "report:\n  slow_threshold_ms: 5000\n", encoding="utf-8"
    )
    exit_code, output = _invoke(
        str(log_file), "--json", "--threshold", "20", "--config-root", str(tmp_path)
    )
    assert exit_code == 0
    assert json.loads(output)["threshold_ms"] == 20


def test_invalid_config_aborts(log_file: Path, tmp_path: Path) -> None:
    exit_code, output = _invoke(str(log_file), "--threshold=-5", "--config-root", str(tmp_path))
    assert exit_code == 1
    assert "slow_threshold_ms" in output


def test_no_data(tmp_path: Path) -> None:
    empty = tmp_path / "empty.log"
    empty.write_text("[header]\nnot json\n", encoding="utf-8")
    exit_code, output = _invoke(str(empty), "--config-root", str(tmp_path))
    assert exit_code == 1
    assert "No test data found in the file." in output


def test_missing_file(tmp_path: Path) -> None:
    exit_code, output = _invoke(str(tmp_path / "missing.log"))
    assert exit_code == 2
    assert "does not exist" in output
