"""On-demand advisory views over a day and its QH segments."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .rules.engine import AnalysisContext, RuleEngine
from .schema import (
    AdviceItem,
    AdvisoryReport,
    AnalysisResult,
    AnalysisStatus,
    Day,
    HourTypeRegistry,
    RuleKind,
    SegmentAnalysis,
    warning,
)
from .segments import analyze_qh_segments, segment_stats

DEFAULT_LOOKBACK = 3


def _aggregate_status(results: Sequence[AnalysisResult], *, empty: AnalysisStatus) -> AnalysisStatus:
    if not results:
        return empty
    statuses = {result.status for result in results}
    if AnalysisStatus.FATAL in statuses:
        return AnalysisStatus.FATAL
    if AnalysisStatus.WARNING in statuses:
        return AnalysisStatus.WARNING
    return AnalysisStatus.SUCCESS


def _flatten(results: Sequence[AnalysisResult]) -> List[AdviceItem]:
    return [item for result in results for item in result.advices]


def _locate_day(
    segment: SegmentAnalysis, all_segments: Sequence[SegmentAnalysis], days: Sequence[Day]
) -> Optional[int]:
    for index, day in enumerate(days):
        if any(seg is segment for seg in day.qh_segments or []):
            return index
    matches = [
        index
        for index, day in enumerate(days)
        if day.qh_segments and list(day.qh_segments) == list(all_segments) and segment in day.qh_segments
    ]
    if len(matches) > 1:
        logging.warning(
            "Segment %s matches %d days by value; pass the day's own segments to disambiguate",
            segment.segment.value,
            len(matches),
        )
        return None
    return matches[0] if matches else None


def analyze_segment(
    segment: SegmentAnalysis,
    all_segments: Sequence[SegmentAnalysis],
    days: Optional[Sequence[Day]] = None,
    *,
    engine: RuleEngine,
    hour_types: Optional[HourTypeRegistry] = None,
    lookback: int = DEFAULT_LOOKBACK,
) -> AdvisoryReport:
    """Run the segment rules for ``segment``.

    ``days`` is the chronologically ordered list the segment's day belongs to;
    the days before it feed the cross-day checks and the day after it feeds
    the next-day impact check.
    """
    stats = segment_stats(segment)
    days = list(days or [])
    index = _locate_day(segment, all_segments, days)
    if index is None:
        return AdvisoryReport(
            status=AnalysisStatus.WARNING,
            title="Incomplete data",
            advices=[warning("The day this segment belongs to is missing; the analysis is incomplete.")],
            stats=stats,
        )

    day = days[index]
    context = AnalysisContext(
        day=day,
        segment=segment,
        all_segments=tuple(all_segments),
        historical_days=tuple(days[max(0, index - lookback) : index]) if lookback > 0 else (),
        next_day=days[index + 1] if index + 1 < len(days) else None,
        stats=stats,
        hour_types=hour_types or HourTypeRegistry(),
    )
    results = engine.evaluate_by_kind(context, RuleKind.SEGMENT)
    return AdvisoryReport(
        status=_aggregate_status(results, empty=AnalysisStatus.SUCCESS),
        title=results[0].title if results else f"Segment {segment.segment.value} analysis",
        advices=_flatten(results),
        results=results,
        stats=stats,
    )


def analyze_day_overall(
    day: Day,
    historical_days: Optional[Sequence[Day]] = None,
    *,
    engine: RuleEngine,
    hour_types: Optional[HourTypeRegistry] = None,
) -> AdvisoryReport:
    """Run the overall and feature rules for a whole day.

    Segments are derived on a copy when ``day`` has not been analyzed yet, so
    the caller's day is never modified.
    """
    segments = day.qh_segments
    if segments is None:
        scratch = day.model_copy(deep=True)
        segments = analyze_qh_segments(scratch)
    context = AnalysisContext(
        day=day,
        all_segments=tuple(segments),
        historical_days=tuple(historical_days or ()),
        hour_types=hour_types or HourTypeRegistry(),
    )
    results = [
        *engine.evaluate_by_kind(context, RuleKind.OVERALL),
        *engine.evaluate_by_kind(context, RuleKind.FEATURE),
    ]
    return AdvisoryReport(
        status=_aggregate_status(results, empty=AnalysisStatus.INFO),
        title="Day overview",
        advices=_flatten(results),
        results=results,
    )


def advise_days(
    days: Sequence[Day],
    *,
    engine: RuleEngine,
    hour_types: Optional[HourTypeRegistry] = None,
    lookback: int = DEFAULT_LOOKBACK,
) -> Dict[str, Dict[str, AdvisoryReport]]:
    """Overall and per-segment reports for each day, keyed by day id then scope.

    ``days`` must be in chronological order and already analyzed.
    """
    days = list(days)
    reports: Dict[str, Dict[str, AdvisoryReport]] = {}
    for index, day in enumerate(days):
        history = days[max(0, index - lookback) : index] if lookback > 0 else []
        scoped = {"overall": analyze_day_overall(day, history, engine=engine, hour_types=hour_types)}
        segments = day.qh_segments or []
        for seg in segments:
            scoped[seg.segment.value] = analyze_segment(
                seg, segments, days, engine=engine, hour_types=hour_types, lookback=lookback
            )
        reports[day.id] = scoped
    return reports
