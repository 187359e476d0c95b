"""Whole-day rules: length, sleep, work/improve balance, life balance, pressure."""

from __future__ import annotations

import math
from typing import List, Sequence

from ..schema import (
    AdviceItem,
    AdviceKind,
    AnalysisResult,
    DayType,
    HourRecord,
    HourType,
    RuleKind,
    suggestion,
    tip,
    warning,
)
from ..segments import LONG_DAY_MAX_HOURS, SHORT_DAY_MIN_HOURS, classify_day_type, format_hour
from .common import count_of, join_ranges, run_range, runs, runs_of
from .engine import AnalysisContext, AnalysisRule, always

SLEEP = HourType.SLEEP.value
WORK = HourType.WORK.value
LIFE = HourType.LIFE.value
RELAX = HourType.RELAX.value
IMPROVE = HourType.IMPROVE.value

NEAR_LONG_DAY_LIMIT = 26
MIN_SLEEP_HOURS = 6
MAX_SLEEP_HOURS = 9
MIN_WORK_HOURS = 4
MAX_WORK_HOURS = 10
MAX_FOCUS_HOURS = 14
MIN_IMPROVE_SHARE = 0.2
MIN_LIFE_SHARE = 0.2
IDEAL_LIFE_SHARE = 0.25
LATE_NIGHT_HOUR = 22
MAX_CONTINUOUS_WORK = 4
MAX_WORK_DENSITY = 0.6
PRESSURE_LOOKBACK = 3


def analyze_day_length(ctx: AnalysisContext) -> AnalysisResult:
    hours = ctx.day.hours
    total = ctx.day.total_hours
    day_type = classify_day_type(hours)
    advices: List[AdviceItem] = []

    if total > LONG_DAY_MAX_HOURS:
        advices.append(
            warning(
                f"The day already spans {total}h, more than {LONG_DAY_MAX_HOURS}h. "
                "Wrap up the day's schedule to avoid exhaustion."
            )
        )
    elif day_type == DayType.LONG:
        if total > NEAR_LONG_DAY_LIMIT:
            advices.append(warning(f"Long day of {total}h is close to the {LONG_DAY_MAX_HOURS}h limit; end it soon."))
        else:
            advices.append(suggestion(f"Long-day mode ({total}h). Keep it under {LONG_DAY_MAX_HOURS}h."))
    elif day_type == DayType.SHORT:
        advices.append(suggestion(f"Short-day mode ({total}h). Keep it at least {SHORT_DAY_MIN_HOURS}h."))
    elif 0 < total < SHORT_DAY_MIN_HOURS:
        advices.append(
            warning(f"The day spans only {total}h, under {SHORT_DAY_MIN_HOURS}h; important activities may be missed.")
        )

    advices.append(tip("A regular daily rhythm improves both quality of life and work efficiency."))
    result = AnalysisResult.from_advices("Day length", advices)
    title = "Day length out of range" if result.has_warning else "Day length normal"
    return result.model_copy(update={"title": title})


def analyze_sleep_distribution(ctx: AnalysisContext) -> AnalysisResult:
    hours = ctx.day.hours
    total_sleep = count_of(hours, SLEEP)
    advices: List[AdviceItem] = []

    if total_sleep < MIN_SLEEP_HOURS:
        advices.append(
            warning(
                f"Only {total_sleep}h of sleep. Keep {MIN_SLEEP_HOURS}-{MAX_SLEEP_HOURS}h to recover properly."
            )
        )
    elif total_sleep > MAX_SLEEP_HOURS:
        advices.append(warning(f"{total_sleep}h of sleep is a lot; stay within {MAX_SLEEP_HOURS}h."))

    blocks = runs_of(hours, SLEEP)
    if len(blocks) > 1 and any(len(block) <= 2 for block in blocks):
        advices.append(
            suggestion(
                f"Sleep is fragmented into {len(blocks)} blocks ({join_ranges(blocks)}). "
                "Aim for one continuous rest period."
            )
        )

    advices.append(tip("Good sleep quality relies on a regular schedule and a suitable environment."))
    return AnalysisResult.from_advices("Sleep distribution", advices)


def analyze_work_improve_balance(ctx: AnalysisContext) -> AnalysisResult:
    hours = ctx.day.hours
    total_work = count_of(hours, WORK)
    total_improve = count_of(hours, IMPROVE)
    focus = total_work + total_improve
    advices: List[AdviceItem] = []

    if total_work < MIN_WORK_HOURS:
        advices.append(
            warning(
                f"Work time is {total_work}h, below the minimum of {MIN_WORK_HOURS}h. "
                f"Add {MIN_WORK_HOURS - total_work}h to keep a baseline output."
            )
        )
    elif total_work > MAX_WORK_HOURS:
        advices.append(
            warning(
                f"Work time is {total_work}h, above the maximum of {MAX_WORK_HOURS}h. "
                f"Move {total_work - MAX_WORK_HOURS}h to self-improvement or rest."
            )
        )

    if total_improve == 0:
        advices.append(
            suggestion(
                f"No self-improvement time today. Reserve at least 2h, for instance from the {total_work}h of work."
            )
        )
    else:
        improve_blocks = runs_of(hours, IMPROVE)
        if len(improve_blocks) > 3:
            advices.append(
                suggestion(
                    f"Self-improvement ({total_improve}h) is scattered over {len(improve_blocks)} blocks. "
                    "Merge them into 2-3 longer study sessions."
                )
            )
        long_improve = [block for block in improve_blocks if len(block) > 4]
        if long_improve:
            advices.append(
                warning(
                    f"Study runs longer than 4h at {join_ranges(long_improve)}. "
                    "Take a 15-20 minute break every 2 hours."
                )
            )

    work_blocks = runs_of(hours, WORK)
    if len(work_blocks) > 4:
        short_blocks = [block for block in work_blocks if len(block) <= 2]
        if short_blocks:
            advices.append(
                suggestion(
                    f"Work is fragmented: {len(short_blocks)} short blocks at {join_ranges(short_blocks)}. "
                    "Merge them into longer focus blocks."
                )
            )
    long_work = [block for block in work_blocks if len(block) > 4]
    if long_work:
        advices.append(
            warning(
                f"Work runs longer than 4h at {join_ranges(long_work)}. "
                "Break for 15 minutes every 90-120 minutes."
            )
        )

    if total_work > 8 and total_improve == 0:
        advices.append(
            suggestion(
                f"Long work day ({total_work}h) without self-improvement. "
                "Shift 2-3h to personal growth to ease the pressure."
            )
        )

    if focus:
        improve_ratio = total_improve / focus
        if improve_ratio < MIN_IMPROVE_SHARE and total_work > 6:
            target = math.ceil(focus * MIN_IMPROVE_SHARE)
            advices.append(
                suggestion(
                    f"Self-improvement share is {round(improve_ratio * 100)}%. "
                    f"Raise it from {total_improve}h to {target}h."
                )
            )

    if focus > MAX_FOCUS_HOURS:
        advices.append(
            warning(
                f"Work and study add up to {focus}h, above the daily {MAX_FOCUS_HOURS}h. "
                f"Cut {focus - MAX_FOCUS_HOURS}h and rest more."
            )
        )

    if total_work and total_improve / total_work < MIN_IMPROVE_SHARE:
        advices.append(tip(f"Aim for at least 1:4 self-improvement to work; today it is {total_improve}:{total_work}."))

    return AnalysisResult.from_advices("Work and self-improvement", advices)


def analyze_life_work_balance(ctx: AnalysisContext) -> AnalysisResult:
    hours = ctx.day.hours
    total = len(hours)
    work_hours = count_of(hours, WORK)
    life_hours = count_of(hours, LIFE)
    relax_hours = count_of(hours, RELAX)
    advices: List[AdviceItem] = []

    if total:
        leisure = life_hours + relax_hours
        ratio = leisure / total
        target = math.ceil(total * MIN_LIFE_SHARE)
        if ratio < MIN_LIFE_SHARE:
            advices.append(
                warning(
                    f"Life and leisure take only {round(ratio * 100)}% ({leisure}h), under 20% ({target}h). "
                    f"Add {target - leisure}h of life or relax activities."
                )
            )

    if work_hours > 0 and life_hours == 0:
        advices.append(
            warning(
                f"{work_hours}h of work with no life time at all. "
                "Insert at least 30 minutes of life activity every 4 hours of work."
            )
        )

    if work_hours > 8 and relax_hours == 0:
        advices.append(
            suggestion(f"{work_hours}h of work and no relaxation. Plan 1-2h of leisure after work.")
        )

    ideal = round(total * IDEAL_LIFE_SHARE)
    if life_hours > 0 and abs(life_hours - ideal) <= 2:
        advices.append(tip(f"Life time ({life_hours}h) is close to the ideal {ideal}h. Keep this balance."))
    else:
        advices.append(tip(f"Ideal life time is 25% of the day (about {ideal}h)."))

    return AnalysisResult.from_advices("Work-life balance", advices)


def _late_night_work(hours: Sequence[HourRecord]) -> List[List[HourRecord]]:
    return runs(hours, lambda record: record.type == WORK and record.hour >= LATE_NIGHT_HOUR)


def analyze_pressure_indicators(ctx: AnalysisContext) -> AnalysisResult:
    hours = ctx.day.hours
    advices: List[AdviceItem] = []

    late_runs = _late_night_work(hours)
    for block in late_runs:
        advices.append(
            warning(
                f"Late-night work at {run_range(block)}. Move it into the 09:00-18:00 window "
                "and keep late hours for rest or self-improvement."
            )
        )

    recent = list(ctx.historical_days)[-PRESSURE_LOOKBACK:]
    if late_runs and len(recent) >= PRESSURE_LOOKBACK and all(_late_night_work(day.hours) for day in recent):
        advices.append(
            warning(
                f"Late-night work on {len(recent) + 1} consecutive days signals sustained pressure. "
                "Re-plan the workload before it builds up."
            )
        )

    for block in runs_of(hours, WORK):
        if len(block) > MAX_CONTINUOUS_WORK:
            start = block[0].hour
            advices.append(
                warning(
                    f"{len(block)}h of continuous work at {run_range(block)}. "
                    f"Take 15-20 minute breaks around {format_hour(start + 2)}:00 and {format_hour(start + 4)}:00."
                )
            )

    work_hours = count_of(hours, WORK)
    if hours:
        density = work_hours / len(hours)
        if density > MAX_WORK_DENSITY:
            advices.append(
                warning(
                    f"Work fills {round(density * 100)}% of the day ({work_hours}/{len(hours)}h). "
                    "Free up time for life and rest."
                )
            )

    # indexes of work hours that directly follow another work hour
    gaps = [
        index
        for index in range(1, len(hours))
        if hours[index].type == WORK and hours[index - 1].type == WORK
    ]
    if len(gaps) > 3:
        points = ", ".join(
            f"{format_hour(hours[index].hour)}:00" for position, index in enumerate(gaps) if position % 3 == 1
        )
        advices.append(suggestion(f"Few breaks between work hours. Add 15-20 minute pauses around {points}."))

    if any(item.kind == AdviceKind.WARNING for item in advices):
        advices.append(
            tip("Sustained high intensity hurts long-term performance. Keep a regular schedule and review stress levels.")
        )
    else:
        advices.append(tip("Work pressure is under control. Keep planning ahead and keep a regular schedule."))

    return AnalysisResult.from_advices("Pressure indicators", advices)


OVERALL_RULES: List[AnalysisRule] = [
    AnalysisRule(
        id="day_length",
        kind=RuleKind.OVERALL,
        priority=100,
        condition=always,
        analyze=analyze_day_length,
        description="Day span against the 21-28h long/short day bounds.",
    ),
    AnalysisRule(
        id="sleep_distribution",
        kind=RuleKind.OVERALL,
        priority=95,
        condition=always,
        analyze=analyze_sleep_distribution,
        description="Total sleep and sleep fragmentation.",
    ),
    AnalysisRule(
        id="work_improve_balance",
        kind=RuleKind.OVERALL,
        priority=90,
        condition=always,
        analyze=analyze_work_improve_balance,
        description="Work and self-improvement volume, blocks and ratio.",
    ),
    AnalysisRule(
        id="life_work_balance",
        kind=RuleKind.OVERALL,
        priority=85,
        condition=always,
        analyze=analyze_life_work_balance,
        description="Life and leisure share of the day.",
    ),
    AnalysisRule(
        id="pressure_indicators",
        kind=RuleKind.OVERALL,
        priority=80,
        condition=always,
        analyze=analyze_pressure_indicators,
        description="Late-night work, long work runs, work density, cross-day pressure.",
    ),
]
