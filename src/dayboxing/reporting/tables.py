from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Mapping

import pandas as pd

from ..schema import AdvisoryReport, Day
from ..segments import describe_segment, segment_stats, segment_symbol, time_range

SEGMENT_COLUMNS = [
    "day_id",
    "segment",
    "start_hour",
    "end_hour",
    "time_range",
    "duration",
    "part_type",
    "symbol",
    "main_type",
    "main_type_hours",
    "secondary_type",
    "secondary_type_hours",
    "main_type_percent",
    "description",
]
ADVICE_COLUMNS = ["day_id", "scope", "status", "title", "kind", "content"]


def segments_frame(days: Iterable[Day]) -> pd.DataFrame:
    """One row per QH segment, in day then A/B/C/F order."""
    records: List[dict] = []
    for day in days:
        for seg in day.qh_segments or []:
            stats = segment_stats(seg)
            records.append(
                {
                    "day_id": day.id,
                    "segment": seg.segment.value,
                    "start_hour": seg.start_hour,
                    "end_hour": seg.end_hour,
                    "time_range": time_range(seg.start_hour, seg.end_hour),
                    "duration": stats.duration,
                    "part_type": seg.type.value,
                    "symbol": segment_symbol(seg),
                    "main_type": seg.main_type,
                    "main_type_hours": seg.main_type_hours,
                    "secondary_type": seg.secondary_type,
                    "secondary_type_hours": seg.secondary_type_hours,
                    "main_type_percent": round(stats.main_type_percent, 1),
                    "description": describe_segment(seg),
                }
            )
    return pd.DataFrame.from_records(records, columns=SEGMENT_COLUMNS)


def advice_frame(reports: Mapping[str, Mapping[str, AdvisoryReport]]) -> pd.DataFrame:
    """Flatten ``{day_id: {scope: report}}`` into one row per advice item."""
    records: List[dict] = []
    for day_id, scoped in reports.items():
        for scope, report in scoped.items():
            for result in report.results:
                for item in result.advices:
                    records.append(
                        {
                            "day_id": day_id,
                            "scope": scope,
                            "status": result.status.value,
                            "title": result.title,
                            "kind": item.kind.value,
                            "content": item.content,
                        }
                    )
    return pd.DataFrame.from_records(records, columns=ADVICE_COLUMNS)


def export_dataframe(df: pd.DataFrame, *, output_dir: Path, basename: str, formats: Iterable[str]) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    formats = set(formats)
    written: List[Path] = []
    if "csv" in formats:
        csv_path = output_dir / f"{basename}_{timestamp}.csv"
        df.to_csv(csv_path, index=False)
        logging.info("Exported CSV to %s", csv_path)
        written.append(csv_path)
    if "json" in formats:
        json_path = output_dir / f"{basename}_{timestamp}.json"
        df.to_json(json_path, orient="records", indent=2)
        logging.info("Exported JSON to %s", json_path)
        written.append(json_path)
    return written
