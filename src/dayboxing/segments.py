"""Quarter-day (QH) segmentation and composition classification.

A day is cut into three fixed 7-hour windows anchored at its first hour:

- A: ``[start, start + 7)``, expected to be a sleep Full Part
- B: ``[start + 7, start + 14)``, expected to be a Mix Part
- C: ``[start + 14, start + 21)``, anything but Chaos

followed by the floating F segment starting at ``start + 21`` whose length is
capped at 7 hours on long days and 3 hours otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .schema import (
    UNDEFINED_TYPE,
    Day,
    DayType,
    HourRecord,
    PartType,
    SegmentAnalysis,
    SegmentName,
    SegmentStats,
)

SEGMENT_HOURS = 7
F_OFFSET = 21
F_MAX_LONG_DAY = 7
F_MAX_DEFAULT = 3
LONG_DAY_MAX_HOURS = 28
SHORT_DAY_MIN_HOURS = 21

FULL_RATIO = 0.8
BALANCE_RATIO = 0.35
MIX_RATIO = 0.6
MIX_SECONDARY_HOURS = 2
CHAOS_RATIO = 0.2


@dataclass(frozen=True)
class Composition:
    type: PartType
    main_type: str
    main_hours: int
    secondary_type: Optional[str] = None
    secondary_hours: Optional[int] = None
    distribution: Dict[str, float] = field(default_factory=dict)


def classify_day_type(hours: Sequence[HourRecord]) -> DayType:
    """Classify a day by its span: long (25-28h), short (21-23h), otherwise normal."""
    if not hours:
        return DayType.NORMAL
    total = hours[-1].hour - hours[0].hour + 1
    if 24 < total <= LONG_DAY_MAX_HOURS:
        return DayType.LONG
    if SHORT_DAY_MIN_HOURS <= total < 24:
        return DayType.SHORT
    return DayType.NORMAL


def count_types(hours: Sequence[HourRecord]) -> Dict[str, int]:
    """Count hours per type, keyed in order of first occurrence."""
    counts: Dict[str, int] = {}
    for record in hours:
        counts[record.type] = counts.get(record.type, 0) + 1
    return counts


def classify_composition(counts: Mapping[str, int]) -> Composition:
    """Assign a PartType to a segment from its per-type hour counts.

    The checks run top to bottom: full, balance, mix, chaos, then a mix
    fallback. Types with equal counts keep the order of ``counts``, which
    :func:`count_types` builds in first-occurrence order.
    """
    total = sum(counts.values())
    if not total:
        return Composition(type=PartType.FULL, main_type=UNDEFINED_TYPE, main_hours=0)

    order = {type_id: index for index, type_id in enumerate(counts)}
    ranked = sorted(
        ((type_id, count) for type_id, count in counts.items() if count > 0),
        key=lambda item: (-item[1], order[item[0]]),
    )
    distribution = {type_id: count / total for type_id, count in ranked}

    main_type, main_count = ranked[0]
    main_ratio = main_count / total
    if len(ranked) == 1 or main_ratio > FULL_RATIO:
        return Composition(
            type=PartType.FULL,
            main_type=main_type,
            main_hours=main_count,
            distribution=distribution,
        )

    second_type, second_count = ranked[1]
    second_ratio = second_count / total

    if main_ratio >= BALANCE_RATIO and second_ratio >= BALANCE_RATIO:
        part = PartType.BALANCE
    elif main_ratio >= MIX_RATIO and second_count >= MIX_SECONDARY_HOURS:
        part = PartType.MIX
    elif len(ranked) >= 3 and all(count / total >= CHAOS_RATIO for _, count in ranked[:3]):
        part = PartType.CHAOS
    else:
        part = PartType.MIX
        # fallback mix only names a secondary type holding at least two hours
        if second_count < MIX_SECONDARY_HOURS:
            return Composition(
                type=part, main_type=main_type, main_hours=main_count, distribution=distribution
            )

    return Composition(
        type=part,
        main_type=main_type,
        main_hours=main_count,
        secondary_type=second_type,
        secondary_hours=second_count,
        distribution=distribution,
    )


def _segment_from(
    name: SegmentName, start_hour: int, end_hour: int, composition: Composition
) -> SegmentAnalysis:
    return SegmentAnalysis(
        segment=name,
        start_hour=start_hour,
        end_hour=end_hour,
        type=composition.type,
        main_type=composition.main_type,
        main_type_hours=composition.main_hours,
        secondary_type=composition.secondary_type,
        secondary_type_hours=composition.secondary_hours,
        distribution=dict(composition.distribution),
    )


def hours_between(hours: Sequence[HourRecord], start: int, end: int) -> List[HourRecord]:
    return [record for record in hours if start <= record.hour < end]


def partition_segments(hours: Sequence[HourRecord]) -> List[SegmentAnalysis]:
    """Classify the fixed A, B and C windows. Empty input yields no segments."""
    if not hours:
        return []
    start = hours[0].hour
    segments: List[SegmentAnalysis] = []
    for offset, name in enumerate((SegmentName.A, SegmentName.B, SegmentName.C)):
        seg_start = start + offset * SEGMENT_HOURS
        seg_end = seg_start + SEGMENT_HOURS
        composition = classify_composition(count_types(hours_between(hours, seg_start, seg_end)))
        segments.append(_segment_from(name, seg_start, seg_end, composition))
    return segments


def f_segment_max_length(day_type: DayType) -> int:
    return F_MAX_LONG_DAY if day_type == DayType.LONG else F_MAX_DEFAULT


def calculate_f_segment(
    hours: Sequence[HourRecord], start_hour: int, day_type: DayType
) -> SegmentAnalysis:
    f_start = start_hour + F_OFFSET
    max_length = f_segment_max_length(day_type)
    selected = hours_between(hours, f_start, f_start + max_length)
    if not selected:
        return _segment_from(
            SegmentName.F,
            f_start,
            f_start,
            Composition(type=PartType.FULL, main_type=UNDEFINED_TYPE, main_hours=0),
        )
    end_hour = min(selected[-1].hour + 1, f_start + max_length)
    return _segment_from(SegmentName.F, f_start, end_hour, classify_composition(count_types(selected)))


def analyze_qh_segments(day: Day) -> List[SegmentAnalysis]:
    """Recompute A/B/C/F for ``day`` and store them on ``day.qh_segments``."""
    if not day.hours:
        day.qh_segments = []
        return []
    start = day.hours[0].hour
    segments = partition_segments(day.hours)
    segments.append(calculate_f_segment(day.hours, start, classify_day_type(day.hours)))
    day.qh_segments = segments
    return list(segments)


def segment_stats(seg: SegmentAnalysis) -> SegmentStats:
    duration = seg.duration
    if duration <= 0:
        return SegmentStats(duration=max(duration, 0), main_type_percent=0.0, secondary_type_percent=0.0)
    return SegmentStats(
        duration=duration,
        main_type_percent=seg.main_type_hours / duration * 100,
        secondary_type_percent=(seg.secondary_type_hours or 0) / duration * 100,
    )


def describe_segment(seg: SegmentAnalysis) -> str:
    if seg.main_type == UNDEFINED_TYPE:
        return "Unknown"
    if not seg.secondary_type:
        return f"{seg.main_type} Full Part" if seg.type == PartType.FULL else f"{seg.main_type} Mix Part"
    if seg.type == PartType.BALANCE:
        return f"{seg.main_type}-{seg.secondary_type} Balance Part"
    if seg.type == PartType.CHAOS:
        return "Chaos Part"
    return f"{seg.main_type}-{seg.secondary_type} Mix Part"


def segment_symbol(seg: SegmentAnalysis) -> str:
    return {
        PartType.FULL: "Fu",
        PartType.MIX: "Mi",
        PartType.BALANCE: "Ba",
        PartType.CHAOS: "Ch",
    }[seg.type]


def format_hour(hour: int) -> str:
    """Render an abstract hour on the 24h clock, e.g. ``-2`` -> ``22``."""
    return f"{hour % 24:02d}"


def time_range(start: int, end: int) -> str:
    return f"{format_hour(start)}:00-{format_hour(end)}:00"


def segment_for_hour(day: Day, hour: int) -> Optional[SegmentAnalysis]:
    for seg in day.qh_segments or []:
        if seg.contains(hour):
            return seg
    return None
