"""Per-segment rules.

A (first 7h) should be a sleep Full Part, naps elsewhere at most 2h.
B (next 7h) should be a Mix Part, ideally opened with a life activity.
C (next 7h) may be anything but Chaos and should not switch too often.
F (floating tail) is capped in length and should not eat into the next day.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..schema import (
    UNDEFINED_TYPE,
    AdviceItem,
    AnalysisResult,
    Day,
    HourRecord,
    HourType,
    PartType,
    RuleKind,
    SegmentAnalysis,
    SegmentName,
    suggestion,
    tip,
    warning,
)
from ..segments import (
    F_MAX_LONG_DAY,
    analyze_qh_segments,
    classify_day_type,
    f_segment_max_length,
    hours_between,
    time_range,
)
from .common import runs_of
from .engine import AnalysisContext, AnalysisRule

SLEEP = HourType.SLEEP.value
WORK = HourType.WORK.value
LIFE = HourType.LIFE.value
RELAX = HourType.RELAX.value
IMPROVE = HourType.IMPROVE.value

MAX_NAP_HOURS = 2
START_WINDOW = 2
PRESSURE_LOOKBACK = 3
MAX_C_SWITCHES = 3
F_WORKLOAD_HOURS = 3
F_NEXT_DAY_IMPACT_HOURS = 4


@dataclass(frozen=True)
class SleepQuality:
    total: int
    blocks: List[List[HourRecord]]

    @property
    def fragmented(self) -> bool:
        return len(self.blocks) > 1

    @property
    def longest(self) -> int:
        return max((len(block) for block in self.blocks), default=0)


@dataclass(frozen=True)
class StartActivity:
    type: str
    duration: int
    consistent: bool


def sleep_quality(hours: Sequence[HourRecord], start: int, end: int) -> SleepQuality:
    window = hours_between(hours, start, end)
    return SleepQuality(total=sum(1 for record in window if record.type == SLEEP), blocks=runs_of(window, SLEEP))


def start_activity(hours: Sequence[HourRecord], start: int) -> StartActivity:
    window = hours_between(hours, start, start + START_WINDOW)
    types = list(dict.fromkeys(record.type for record in window))
    return StartActivity(
        type=types[0] if types else UNDEFINED_TYPE,
        duration=len(window),
        consistent=len(types) == 1,
    )


def segment_of(day: Day, name: SegmentName) -> Optional[SegmentAnalysis]:
    """Return ``day``'s segment, deriving it on a copy when not yet analyzed."""
    if day.qh_segments is None:
        scratch = day.model_copy(deep=True)
        analyze_qh_segments(scratch)
        return scratch.segment(name)
    return day.segment(name)


def _is_segment(name: SegmentName) -> Callable[[AnalysisContext], bool]:
    def condition(ctx: AnalysisContext) -> bool:
        return ctx.segment is not None and ctx.segment.segment == name

    return condition


def analyze_a_segment(ctx: AnalysisContext) -> AnalysisResult:
    segment = ctx.segment
    hours = ctx.day.hours
    advices: List[AdviceItem] = []
    quality = sleep_quality(hours, segment.start_hour, segment.end_hour)
    span = time_range(segment.start_hour, segment.end_hour)

    if segment.type != PartType.FULL or segment.main_type != SLEEP:
        advices.append(
            warning(
                f"Segment A ({span}) is not a full sleep block; it holds {quality.total}h of sleep. "
                "Adjust the schedule so A is spent entirely asleep."
            )
        )

    if quality.fragmented:
        advices.append(
            warning(
                f"Sleep in segment A is interrupted {len(quality.blocks)} times; the longest stretch is "
                f"{quality.longest}h. Keep the sleep environment stable."
            )
        )

    others = [
        seg
        for seg in ctx.all_segments
        if seg.segment != SegmentName.A and SLEEP in (seg.main_type, seg.secondary_type)
    ]
    if others:
        naps = [seg for seg in others if sleep_quality(hours, seg.start_hour, seg.end_hour).total <= MAX_NAP_HOURS]
        if len(naps) == len(others):
            advices.append(tip("Sleep outside segment A stays within 2h, which works as a restorative nap."))
        else:
            advices.append(
                warning("Some sleep outside segment A lasts more than 2h. Concentrate the main sleep in A.")
            )

    return AnalysisResult.from_advices("Segment A sleep", advices)


def _starts_under_pressure(day: Day) -> bool:
    b_segment = segment_of(day, SegmentName.B)
    if b_segment is None:
        return False
    return start_activity(day.hours, b_segment.start_hour).type in (WORK, RELAX)


def analyze_b_segment_start(ctx: AnalysisContext) -> AnalysisResult:
    segment = ctx.segment
    start = start_activity(ctx.day.hours, segment.start_hour)
    opening = time_range(segment.start_hour, segment.start_hour + start.duration)
    advices: List[AdviceItem] = []

    if start.type == SLEEP:
        advices.append(
            warning(
                f"Still asleep when segment B starts ({opening}); the schedule is running late. "
                f"Go to bed {start.duration}h earlier so A holds the whole night."
            )
        )
    elif start.type == LIFE:
        if start.consistent:
            advices.append(tip("Segment B opens with life activities, an ideal ramp into the working day."))
    elif start.type == RELAX:
        advices.append(
            suggestion(f"Segment B opens with leisure ({opening}). Start with life or work to use the morning.")
        )
    elif start.type == WORK:
        recent = list(ctx.historical_days)[-PRESSURE_LOOKBACK:]
        sustained = len(recent) >= PRESSURE_LOOKBACK and all(_starts_under_pressure(day) for day in recent)
        if sustained:
            advices.append(
                warning(
                    "Segment B has started straight with work for several days in a row: "
                    "sustained high pressure. Slow down before it wears you out."
                )
            )
        else:
            advices.append(
                warning(f"Segment B starts straight with work ({opening}). Leave a life buffer to settle in first.")
            )
    elif start.type == IMPROVE:
        advices.append(tip("Starting the day with self-improvement shows strong learning habits."))
    elif start.type == UNDEFINED_TYPE:
        advices.append(warning("Segment B has no recorded hours; check that the day is complete."))
    else:
        label = ctx.hour_types.label(start.type)
        advices.append(warning(f"Segment B starts with an unexpected activity ({label}); check the record."))

    return AnalysisResult.from_advices("Segment B start", advices)


def analyze_b_segment_type(ctx: AnalysisContext) -> AnalysisResult:
    segment = ctx.segment
    advices: List[AdviceItem] = []

    if segment.type == PartType.CHAOS:
        advices.append(
            warning(
                f"Segment B ({time_range(segment.start_hour, segment.end_hour)}) is chaotic. "
                "Pick one main activity and switch less."
            )
        )
    if segment.type == PartType.BALANCE:
        advices.append(
            suggestion(
                f"Segment B is balanced between {segment.main_type} and {segment.secondary_type}, "
                "which can dilute focus. Let one activity lead."
            )
        )
    if segment.type != PartType.MIX:
        advices.append(
            warning(
                f"Segment B is a {segment.type.value} part rather than a mix part. "
                "Keep one dominant activity supported by others."
            )
        )

    return AnalysisResult.from_advices("Segment B type", advices)


def analyze_c_segment(ctx: AnalysisContext) -> AnalysisResult:
    segment = ctx.segment
    advices: List[AdviceItem] = []

    if segment.type == PartType.CHAOS:
        advices.append(
            warning(
                f"Segment C ({time_range(segment.start_hour, segment.end_hour)}) is chaotic. "
                "Keep a steadier arrangement and avoid switching task types."
            )
        )

    window = hours_between(ctx.day.hours, segment.start_hour, segment.end_hour)
    switches = sum(1 for previous, current in zip(window, window[1:]) if previous.type != current.type)
    if switches > MAX_C_SWITCHES:
        advices.append(
            suggestion(f"Segment C switches activity {switches} times. Merge similar activities to stay continuous.")
        )

    advices.append(tip("Energy starts to drop in segment C; favour routine work or relaxation."))
    return AnalysisResult.from_advices("Segment C activity", advices)


def analyze_f_segment(ctx: AnalysisContext) -> AnalysisResult:
    segment = ctx.segment
    advices: List[AdviceItem] = []
    duration = segment.duration
    span = time_range(segment.start_hour, segment.end_hour)

    if duration > F_MAX_LONG_DAY:
        advices.append(
            warning(f"Segment F runs {duration}h, beyond the {F_MAX_LONG_DAY}h float. End the day sooner.")
        )

    cap = f_segment_max_length(classify_day_type(ctx.day.hours))
    overflow = [record for record in ctx.day.hours if record.hour >= segment.start_hour + cap]
    if overflow:
        advices.append(
            warning(
                f"{len(overflow)}h recorded after segment F's {cap}h cap. "
                "Close the day within the float window."
            )
        )

    if segment.type == PartType.MIX and segment.main_type == WORK and duration > F_WORKLOAD_HOURS:
        advices.append(
            warning(
                f"Segment F ({span}) is mostly work and stretches {duration}h, a sign of heavy workload. "
                "Rework the plan to avoid regular overtime."
            )
        )

    if duration > F_NEXT_DAY_IMPACT_HOURS and ctx.next_day is not None:
        next_a = segment_of(ctx.next_day, SegmentName.A)
        if next_a is not None and next_a.type != PartType.FULL:
            advices.append(
                warning("The extended segment F hurt the next day's segment A sleep. Finish the day earlier.")
            )

    if duration > 0:
        used_for = segment.main_type + (f" and {segment.secondary_type}" if segment.secondary_type else "")
        advices.append(
            tip(
                "Segment F is floating time for unplanned tasks, extra study or light rest. "
                f"It is currently used for {used_for}."
            )
        )

    return AnalysisResult.from_advices("Segment F", advices)


SEGMENT_RULES: List[AnalysisRule] = [
    AnalysisRule(
        id="a_segment",
        kind=RuleKind.SEGMENT,
        priority=95,
        condition=_is_segment(SegmentName.A),
        analyze=analyze_a_segment,
        description="A should be a full, unbroken sleep segment.",
    ),
    AnalysisRule(
        id="b_segment_type",
        kind=RuleKind.SEGMENT,
        priority=90,
        condition=_is_segment(SegmentName.B),
        analyze=analyze_b_segment_type,
        description="B should be a mix segment.",
    ),
    AnalysisRule(
        id="b_segment_start",
        kind=RuleKind.SEGMENT,
        priority=92,
        condition=_is_segment(SegmentName.B),
        analyze=analyze_b_segment_start,
        description="How B opens, including multi-day pressure.",
    ),
    AnalysisRule(
        id="c_segment",
        kind=RuleKind.SEGMENT,
        priority=85,
        condition=_is_segment(SegmentName.C),
        analyze=analyze_c_segment,
        description="C should avoid chaos and frequent switching.",
    ),
    AnalysisRule(
        id="f_segment",
        kind=RuleKind.SEGMENT,
        priority=80,
        condition=_is_segment(SegmentName.F),
        analyze=analyze_f_segment,
        description="F length caps, workload and next-day impact.",
    ),
]
