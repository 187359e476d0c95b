"""Cross-segment rules working on the raw hour sequence."""

from __future__ import annotations

from typing import List

from ..schema import AdviceItem, AnalysisResult, HourType, RuleKind, suggestion, tip, warning
from ..segments import format_hour, time_range
from .common import HIGH_INTENSITY, run_range, type_runs
from .engine import AnalysisContext, AnalysisRule, always

MAX_FOCUS_RUN = 4
GOLDEN_HOURS = (9, 11)
POST_LUNCH = (14, 16)
MAX_TRANSITIONS = 8


def analyze_continuous_blocks(ctx: AnalysisContext) -> AnalysisResult:
    advices: List[AdviceItem] = []
    for block in type_runs(ctx.day.hours):
        if block[0].type in HIGH_INTENSITY and len(block) > MAX_FOCUS_RUN:
            advices.append(
                warning(
                    f"{len(block)}h of uninterrupted {block[0].type} at {run_range(block)}. "
                    "Take a 15 minute break every 2 hours to recover and stay efficient."
                )
            )
    return AnalysisResult.from_advices("Continuous blocks", advices)


def analyze_golden_hours(ctx: AnalysisContext) -> AnalysisResult:
    """Check use of the 09-11 focus window and the 14-16 post-lunch dip."""
    advices: List[AdviceItem] = []
    hours = ctx.day.hours

    golden = [record for record in hours if GOLDEN_HOURS[0] <= record.hour < GOLDEN_HOURS[1]]
    golden_types = list(dict.fromkeys(record.type for record in golden))
    if golden and not HIGH_INTENSITY.intersection(golden_types):
        labels = ", ".join(ctx.hour_types.label(type_id) for type_id in golden_types)
        advices.append(
            warning(
                f"The {time_range(*GOLDEN_HOURS)} golden hours are spent on {labels}. "
                "Keep this peak-focus window for work or self-improvement."
            )
        )

    post_lunch = [record for record in hours if POST_LUNCH[0] <= record.hour < POST_LUNCH[1]]
    if post_lunch and all(record.type in HIGH_INTENSITY for record in post_lunch):
        advices.append(
            suggestion(
                f"High-intensity activity during the {time_range(*POST_LUNCH)} post-lunch dip. "
                "Switch to lighter tasks or take a 15-30 minute break."
            )
        )

    advices.append(
        tip("Use 09-11 for creative work, 14-16 for routine tasks, and avoid intense work after 20:00.")
    )
    return AnalysisResult.from_advices("Time efficiency", advices)


def analyze_activity_transitions(ctx: AnalysisContext) -> AnalysisResult:
    advices: List[AdviceItem] = []
    hours = ctx.day.hours

    transitions = 0
    last_transition_hour = None
    short_blocks = 0
    for index in range(1, len(hours)):
        if hours[index].type == hours[index - 1].type:
            continue
        transitions += 1
        if last_transition_hour == hours[index - 1].hour:
            short_blocks += 1
            if short_blocks >= 2:
                chain = " -> ".join(record.type for record in hours[index - 2 : index + 1])
                advices.append(
                    warning(
                        f"Rapid switching at {time_range(hours[index - 2].hour, hours[index].hour + 1)} "
                        f"({chain}). Group similar activities to cut switching costs."
                    )
                )
        else:
            short_blocks = 0
        last_transition_hour = hours[index].hour

    for previous, current in zip(hours, hours[1:]):
        if previous.type == HourType.SLEEP.value and current.type == HourType.WORK.value:
            advices.append(
                suggestion(
                    f"Straight from sleep into work at {format_hour(current.hour)}:00. "
                    "Spend 15-30 minutes on life activities first."
                )
            )

    if transitions > MAX_TRANSITIONS:
        advices.append(
            tip(f"{transitions} activity switches today. Merge similar activities and fix work slots to reduce them.")
        )

    return AnalysisResult.from_advices("Activity transitions", advices)


FEATURE_RULES: List[AnalysisRule] = [
    AnalysisRule(
        id="continuous_blocks",
        kind=RuleKind.FEATURE,
        priority=90,
        condition=always,
        analyze=analyze_continuous_blocks,
        description="Work or improve runs longer than 4 hours.",
    ),
    AnalysisRule(
        id="golden_hours",
        kind=RuleKind.FEATURE,
        priority=85,
        condition=always,
        analyze=analyze_golden_hours,
        description="Golden hour and post-lunch window utilization.",
    ),
    AnalysisRule(
        id="activity_transitions",
        kind=RuleKind.FEATURE,
        priority=75,
        condition=always,
        analyze=analyze_activity_transitions,
        description="Switching frequency and sleep-to-work transitions.",
    ),
]
