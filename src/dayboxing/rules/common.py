"""Helpers shared by the rule packs."""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence

from ..schema import HourRecord, HourType
from ..segments import time_range

HIGH_INTENSITY = frozenset({HourType.WORK.value, HourType.IMPROVE.value})


def runs(hours: Sequence[HourRecord], predicate: Callable[[HourRecord], bool]) -> List[List[HourRecord]]:
    """Group consecutive hours matching ``predicate`` into runs."""
    blocks: List[List[HourRecord]] = []
    previous = None
    for record in hours:
        if not predicate(record):
            previous = None
            continue
        if previous is not None and record.hour == previous.hour + 1:
            blocks[-1].append(record)
        else:
            blocks.append([record])
        previous = record
    return blocks


def runs_of(hours: Sequence[HourRecord], *types: str) -> List[List[HourRecord]]:
    wanted = set(types)
    return runs(hours, lambda record: record.type in wanted)


def count_of(hours: Iterable[HourRecord], *types: str) -> int:
    wanted = set(types)
    return sum(1 for record in hours if record.type in wanted)


def run_range(block: Sequence[HourRecord]) -> str:
    return time_range(block[0].hour, block[-1].hour + 1)


def join_ranges(blocks: Iterable[Sequence[HourRecord]]) -> str:
    return ", ".join(run_range(block) for block in blocks)


def type_runs(hours: Sequence[HourRecord]) -> List[List[HourRecord]]:
    """Split hours into maximal runs of one type."""
    blocks: List[List[HourRecord]] = []
    for record in hours:
        if blocks and blocks[-1][-1].type == record.type and blocks[-1][-1].hour + 1 == record.hour:
            blocks[-1].append(record)
        else:
            blocks.append([record])
    return blocks
