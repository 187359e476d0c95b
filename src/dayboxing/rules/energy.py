"""Energy management rules.

Each activity carries an energy level taken from the context's hour-type
registry (sleep 0, relax 1, life 2, work and improve 3 by default). Moving
between activities two levels apart deserves a short buffer; three levels
apart (sleep straight into work) is flagged as a warning. Custom types
without an energy level are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ..schema import (
    AdviceItem,
    AnalysisResult,
    HourRecord,
    HourTypeRegistry,
    RuleKind,
    suggestion,
    tip,
    warning,
)
from ..segments import format_hour
from .common import HIGH_INTENSITY, run_range, runs
from .engine import AnalysisContext, AnalysisRule, always

TIP_JUMP = 2
HIGH_ENERGY = 3
MAX_HIGH_ENERGY_SHARE = 0.5
MAX_HIGH_ENERGY_RUN = 2


@dataclass(frozen=True)
class EnergyTransition:
    hour: int
    from_type: str
    to_type: str
    jump: int


def energy_transitions(hours: Sequence[HourRecord], registry: HourTypeRegistry) -> List[EnergyTransition]:
    """Transitions whose energy level changes by more than one step."""
    transitions: List[EnergyTransition] = []
    for current, following in zip(hours, hours[1:]):
        start = registry.energy(current.type)
        end = registry.energy(following.type)
        if start is None or end is None:
            continue
        jump = abs(end - start)
        if jump > 1:
            transitions.append(
                EnergyTransition(hour=following.hour, from_type=current.type, to_type=following.type, jump=jump)
            )
    return transitions


def analyze_energy_transitions(ctx: AnalysisContext) -> AnalysisResult:
    hours = ctx.day.hours
    registry = ctx.hour_types
    advices: List[AdviceItem] = []

    for transition in energy_transitions(hours, registry):
        at = f"{format_hour(transition.hour)}:00"
        if transition.jump > TIP_JUMP:
            advices.append(
                warning(
                    f"At {at}, {transition.from_type} switches straight to {transition.to_type}, "
                    f"an energy jump of {transition.jump} levels. Use a life activity as a transition."
                )
            )
        else:
            advices.append(
                tip(
                    f"At {at}, {transition.from_type} switches to {transition.to_type}. "
                    "Leave 5-10 minutes to adapt to the new activity."
                )
            )

    for block in runs(hours, lambda record: record.type in HIGH_INTENSITY):
        if len(block) > MAX_HIGH_ENERGY_RUN:
            advices.append(
                suggestion(
                    f"{len(block)}h of high-intensity activity at {run_range(block)}. "
                    "Rest 15 minutes every 90-120 minutes to follow natural energy cycles."
                )
            )

    if hours:
        high_energy = sum(1 for record in hours if registry.energy(record.type) == HIGH_ENERGY)
        share = high_energy / len(hours)
        if share > MAX_HIGH_ENERGY_SHARE:
            advices.append(
                warning(
                    f"High-energy activities take {round(share * 100)}% of the day ({high_energy}h). "
                    "Add medium and low intensity activities to stay sustainable."
                )
            )

    advices.append(
        tip("Plan in the early morning, focus before noon, buffer after lunch, review in the evening.")
    )
    return AnalysisResult.from_advices("Energy transitions", advices)


ENERGY_RULES: List[AnalysisRule] = [
    AnalysisRule(
        id="energy_transitions",
        kind=RuleKind.FEATURE,
        priority=85,
        condition=always,
        analyze=analyze_energy_transitions,
        description="Energy level jumps between consecutive activities.",
    ),
]
