from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from dayboxing import cli
from dayboxing.cli import main, parse_args
from dayboxing.config import Settings

PATTERNS = """
days:
  - id: mon
    startHour: 0
    blocks:
      - {type: sleep, duration: 8}
      - {type: life, duration: 1}
      - {type: work, duration: 8}
      - {type: life, duration: 3}
      - {type: relax, duration: 4}
  - id: tue
    startHour: 0
    blocks:
      - {type: sleep, duration: 7}
      - {type: work, duration: 12}
      - {type: relax, duration: 5}
"""


def _telemetry(directory: Path) -> list:
    return [json.loads(line) for line in (directory / "telemetry.jsonl").read_text().splitlines()]


@pytest.fixture()
def patterns_file(tmp_path: Path) -> Path:
    path = tmp_path / "patterns.yaml"
    path.write_text(PATTERNS)
    return path


def test_default_command_is_analyze() -> None:
    assert parse_args([]).command == "analyze"
    assert parse_args(["--format", "json"]).command == "analyze"


def test_analyze_writes_tables_and_advice(patterns_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = main(["analyze", "--patterns", str(patterns_file), "--output-dir", str(out)])
    assert result == out
    assert list(out.glob("segments_*.csv"))
    assert list(out.glob("advice_*.csv"))
    advisory = json.loads((out / "advisory.json").read_text())
    assert set(advisory) == {"mon", "tue"}
    assert advisory["tue"]["overall"]["title"] == "Day overview"
    entry = _telemetry(out)[-1]
    assert entry["event"] == "analyze"
    assert entry["status"] == "success"
    assert entry["days_processed"] == 2
    assert entry["metadata"]["segment_types"]["mon"]["A"] == "full"
    assert entry["metadata"]["warnings"] > 0


def test_analyze_missing_file_exits_and_records_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["analyze", "--patterns", str(tmp_path / "missing.yaml"), "--output-dir", str(tmp_path)])
    entry = _telemetry(tmp_path)[-1]
    assert entry["event"] == "analyze"
    assert entry["status"] == "error"
    assert "Patterns file not found" in entry["error"]


def test_invalid_hour_types_setting_records_error(patterns_file: Path, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(cli, "SETTINGS", Settings(raw={"hour_types": {"work": {"energy": 1}}}))
    with pytest.raises(SystemExit):
        main(["export-report", "--patterns", str(patterns_file), "--output-dir", str(tmp_path)])
    entry = _telemetry(tmp_path)[-1]
    assert entry["event"] == "export_report"
    assert entry["status"] == "error"
    assert "hour_types" in entry["error"]


def test_export_report_writes_pdf(patterns_file: Path, tmp_path: Path) -> None:
    pdf_path = main(["export-report", "--patterns", str(patterns_file), "--output-dir", str(tmp_path / "pdf")])
    assert pdf_path.suffix == ".pdf"
    assert pdf_path.exists()


def test_presets_print_yaml(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["presets", "--name", "work"]) is None
    payload = yaml.safe_load(capsys.readouterr().out)
    assert payload["days"][0]["id"] == "work"
    assert payload["days"][0]["startHour"] == 0
