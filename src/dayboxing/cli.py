#!/usr/bin/env python3
"""Command-line interface for the DayBoxing QH analysis toolkit."""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from .advisory import advise_days
from .config import load_settings
from .daybook import DayBook
from .pattern import PRESET_PATTERNS, common_pattern, load_day_patterns
from .reporting import advice_frame, export_dataframe, generate_day_report, segments_frame
from .rules import create_default_engine
from .schema import AdvisoryReport, DayPattern
from .telemetry import log_run

SETTINGS = load_settings()

COMMAND_ALIASES = {"analyze", "export-report", "presets"}
DEFAULT_PATTERNS = "data/patterns.yaml"


def _add_patterns_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--patterns",
        default=DEFAULT_PATTERNS,
        help="YAML file with a top-level 'days' list of day patterns",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DayBoxing QH analysis CLI")
    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Segment each day and export tables plus advisory JSON",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_patterns_argument(analyze_parser)
    analyze_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for exported tables (defaults to exports.output_dir setting)",
    )
    analyze_parser.add_argument(
        "--format",
        choices=["csv", "json"],
        default="csv",
        help="Format for the segment and advice tables",
    )
    analyze_parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    analyze_parser.set_defaults(command="analyze")

    report_parser = subparsers.add_parser(
        "export-report",
        help="Render the advisory report as a PDF",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_patterns_argument(report_parser)
    report_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the PDF (defaults to reports.output_dir setting)",
    )
    report_parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    report_parser.set_defaults(command="export-report")

    presets_parser = subparsers.add_parser(
        "presets",
        help="Print the built-in day patterns as YAML",
    )
    presets_parser.add_argument(
        "--name",
        choices=sorted(PRESET_PATTERNS),
        default=None,
        help="Only print one preset",
    )
    presets_parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    presets_parser.set_defaults(command="presets")
    return parser


def parse_args(args: Optional[list[str]] = None) -> argparse.Namespace:
    if args is None:
        args = sys.argv[1:]
    parser = build_parser()
    if args and args[0] in {"-h", "--help"}:
        return parser.parse_args(args=args)
    if not args:
        args = ["analyze"]
    elif args[0] not in COMMAND_ALIASES:
        args = ["analyze", *args]
    return parser.parse_args(args=args)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else SETTINGS.log_level
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def load_daybook(path: Path) -> DayBook:
    if not path.exists():
        raise SystemExit(f"Patterns file not found: {path}")
    logging.info("Loading day patterns: %s", path)
    try:
        patterns = load_day_patterns(path)
        book = DayBook.from_patterns(patterns)
    except ValueError as exc:
        raise SystemExit(f"Invalid patterns file {path}: {exc}") from exc
    if not len(book):
        logging.warning("No days found in %s", path)
    return book


def run_advisory(book: DayBook) -> Dict[str, Dict[str, AdvisoryReport]]:
    engine = create_default_engine(SETTINGS.disabled_rules)
    logging.debug("Rule engine holds %d rules", len(engine))
    try:
        hour_types = SETTINGS.hour_types()
    except ValueError as exc:
        raise SystemExit(f"Invalid hour_types setting: {exc}") from exc
    return advise_days(
        book.days,
        engine=engine,
        hour_types=hour_types,
        lookback=SETTINGS.history_lookback,
    )


def load_and_advise(
    event: str, args: argparse.Namespace, start: float, output_dir: Path
) -> Tuple[DayBook, Dict[str, Dict[str, AdvisoryReport]]]:
    """Load the patterns and run every rule, recording a failed run before exiting."""
    try:
        book = load_daybook(Path(args.patterns))
        return book, run_advisory(book)
    except SystemExit as exc:
        log_run(
            event,
            start_time=start,
            status="error",
            error=str(exc),
            metadata={"patterns": str(args.patterns)},
            output_dir=output_dir,
        )
        raise


def _count_warnings(reports: Dict[str, Dict[str, AdvisoryReport]]) -> int:
    return sum(
        1
        for scoped in reports.values()
        for report in scoped.values()
        for item in report.advices
        if item.kind.value == "warning"
    )


def _segment_types(book: DayBook) -> Dict[str, Dict[str, str]]:
    return {day.id: {seg.segment.value: seg.type.value for seg in day.qh_segments or []} for day in book}


def _run_metadata(args: argparse.Namespace, book: DayBook, reports: Dict[str, Dict[str, AdvisoryReport]]) -> Dict[str, object]:
    return {
        "patterns": str(args.patterns),
        "warnings": _count_warnings(reports),
        "segment_types": _segment_types(book),
    }


def run_analysis(args: argparse.Namespace) -> Path:
    configure_logging(args.verbose)
    start = time.time()
    output_dir = Path(args.output_dir) if args.output_dir else SETTINGS.exports_output_dir
    book, reports = load_and_advise("analyze", args, start, output_dir)

    written: List[Path] = []
    written += export_dataframe(segments_frame(book), output_dir=output_dir, basename="segments", formats=[args.format])
    written += export_dataframe(advice_frame(reports), output_dir=output_dir, basename="advice", formats=[args.format])

    advisory_path = output_dir / "advisory.json"
    payload = {
        day_id: {scope: report.model_dump(mode="json") for scope, report in scoped.items()}
        for day_id, scoped in reports.items()
    }
    advisory_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    written.append(advisory_path)

    metadata = _run_metadata(args, book, reports)
    logging.info("Analyzed %d days with %d warnings", len(book), metadata["warnings"])
    log_run(
        "analyze",
        start_time=start,
        days_processed=len(book),
        metadata={**metadata, "outputs": [str(path) for path in written]},
        output_dir=output_dir,
    )
    return output_dir


def run_export_report(args: argparse.Namespace) -> Path:
    configure_logging(args.verbose)
    start = time.time()
    pdf_dir = Path(args.output_dir) if args.output_dir else SETTINGS.reports_output_dir
    book, reports = load_and_advise("export_report", args, start, pdf_dir)
    pdf_path = generate_day_report(book.days, reports, pdf_dir)
    logging.info("Report written to %s", pdf_path)
    log_run(
        "export_report",
        start_time=start,
        days_processed=len(book),
        metadata={**_run_metadata(args, book, reports), "path": str(pdf_path)},
        output_dir=pdf_dir,
    )
    return pdf_path


def run_presets(args: argparse.Namespace) -> None:
    configure_logging(args.verbose)
    selected: List[Tuple[str, DayPattern]] = (
        [(args.name, common_pattern(args.name))] if args.name else list(PRESET_PATTERNS.items())
    )
    payload = {
        "days": [
            {"id": name, **pattern.model_dump(mode="json", by_alias=True, exclude_none=True)}
            for name, pattern in selected
        ]
    }
    print(yaml.safe_dump(payload, sort_keys=False), end="")


def main(args: Optional[list[str]] = None) -> Optional[Path]:
    namespace = parse_args(args=args)
    if namespace.command == "export-report":
        return run_export_report(namespace)
    if namespace.command == "presets":
        run_presets(namespace)
        return None
    return run_analysis(namespace)


if __name__ == "__main__":
    main()
