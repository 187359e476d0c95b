from __future__ import annotations

import json
from pathlib import Path

from dayboxing.advisory import advise_days
from dayboxing.pattern import build_day, common_pattern
from dayboxing.reporting import advice_frame, export_dataframe, generate_day_report, segments_frame
from dayboxing.rules import create_default_engine


def _days():
    return [build_day("work", common_pattern("work")), build_day("learning", common_pattern("learning_day"))]


def test_segments_frame_has_one_row_per_segment() -> None:
    frame = segments_frame(_days())
    assert len(frame) == 8
    assert list(frame["segment"][:4]) == ["A", "B", "C", "F"]
    assert frame.loc[0, "description"] == "sleep Full Part"
    assert frame.loc[0, "time_range"] == "00:00-07:00"


def test_export_dataframe_creates_files(tmp_path: Path) -> None:
    frame = segments_frame(_days())
    written = export_dataframe(frame, output_dir=tmp_path, basename="segments", formats=["csv", "json"])
    assert {path.suffix for path in written} == {".csv", ".json"}
    files = list(tmp_path.glob("segments_*.csv"))
    assert files, "CSV export should create a file"
    assert files[0].stat().st_size > 0
    records = json.loads(next(tmp_path.glob("segments_*.json")).read_text())
    assert records[0]["day_id"] == "work"


def test_advice_frame_and_pdf(tmp_path: Path) -> None:
    days = _days()
    reports = advise_days(days, engine=create_default_engine())
    frame = advice_frame(reports)
    assert set(frame["scope"]) <= {"overall", "A", "B", "C", "F"}
    assert set(frame["kind"]) <= {"warning", "suggestion", "tip"}
    assert not frame.empty

    pdf_path = generate_day_report(days, reports, tmp_path, name="report")
    assert pdf_path == tmp_path / "report.pdf"
    assert pdf_path.read_bytes().startswith(b"%PDF")


def test_pdf_without_days(tmp_path: Path) -> None:
    pdf_path = generate_day_report([], {}, tmp_path)
    assert pdf_path.exists()
