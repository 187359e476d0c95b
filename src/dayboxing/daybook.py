"""In-memory collection of days with hour retyping and segment recompute."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .pattern import build_day
from .schema import Day, DayPattern, HourRecord, HourType
from .segments import analyze_qh_segments

DEFAULT_TYPE_ORDER: Tuple[str, ...] = (
    HourType.SLEEP.value,
    HourType.WORK.value,
    HourType.LIFE.value,
    HourType.RELAX.value,
)


@dataclass(frozen=True)
class HourChangeEvent:
    day_id: str
    hour: int
    old_type: str
    new_type: str


def retype_hour(day: Day, hour: int, new_type: str) -> Day:
    """Return a copy of ``day`` with ``hour`` retyped and all segments recomputed.

    Raises ``KeyError`` when the day has no record for ``hour``.
    """
    hours = list(day.hours)
    for index, record in enumerate(hours):
        if record.hour == hour:
            hours[index] = HourRecord(hour=record.hour, type=new_type, comment=record.comment)
            break
    else:
        raise KeyError(f"Day '{day.id}' has no hour {hour}.")
    updated = Day(id=day.id, hours=hours)
    analyze_qh_segments(updated)
    return updated


def next_type(current: str, order: Sequence[str] = DEFAULT_TYPE_ORDER) -> str:
    """Cycle to the type after ``current`` in ``order``; unknown types restart the cycle."""
    if not order:
        raise ValueError("Type order must not be empty.")
    try:
        position = list(order).index(current)
    except ValueError:
        return order[0]
    return order[(position + 1) % len(order)]


class DayBook:
    """Ordered days keyed by id.

    Days are replaced, never patched: each retype produces a new Day whose
    segments are recomputed from scratch.
    """

    def __init__(
        self,
        days: Iterable[Day] = (),
        on_change: Optional[Callable[[HourChangeEvent], None]] = None,
    ) -> None:
        self._days: Dict[str, Day] = {}
        self.on_change = on_change
        for day in days:
            self.add(day)

    @classmethod
    def from_patterns(
        cls,
        patterns: Iterable[Tuple[str, DayPattern]],
        on_change: Optional[Callable[[HourChangeEvent], None]] = None,
    ) -> "DayBook":
        return cls((build_day(day_id, pattern) for day_id, pattern in patterns), on_change=on_change)

    def add(self, day: Day) -> None:
        if day.id in self._days:
            raise ValueError(f"Duplicate day id '{day.id}'.")
        if day.qh_segments is None:
            analyze_qh_segments(day)
        self._days[day.id] = day

    def __len__(self) -> int:
        return len(self._days)

    def __iter__(self) -> Iterator[Day]:
        return iter(self._days.values())

    def __getitem__(self, day_id: str) -> Day:
        return self._days[day_id]

    @property
    def days(self) -> List[Day]:
        return list(self._days.values())

    def history_for(self, day_id: str, lookback: int = 3) -> List[Day]:
        """Up to ``lookback`` days preceding ``day_id``, oldest first."""
        ids = list(self._days)
        index = ids.index(day_id)
        return [self._days[key] for key in ids[max(0, index - lookback) : index]] if lookback > 0 else []

    def update_hour(self, day_id: str, hour: int, new_type: str) -> Optional[HourChangeEvent]:
        """Retype one hour. Unknown days or hours are ignored and return ``None``."""
        day = self._days.get(day_id)
        if day is None:
            logging.debug("Ignoring retype for unknown day %s", day_id)
            return None
        record = day.hour_at(hour)
        if record is None:
            logging.debug("Ignoring retype for missing hour %s on day %s", hour, day_id)
            return None
        updated = retype_hour(day, hour, new_type)
        self._days[day_id] = updated
        event = HourChangeEvent(day_id=day_id, hour=hour, old_type=record.type, new_type=updated.hour_at(hour).type)
        if self.on_change is not None:
            self.on_change(event)
        return event

    def cycle_hour(self, day_id: str, hour: int, order: Sequence[str] = DEFAULT_TYPE_ORDER) -> Optional[HourChangeEvent]:
        day = self._days.get(day_id)
        record = day.hour_at(hour) if day is not None else None
        if record is None:
            return None
        return self.update_hour(day_id, hour, next_type(record.type, order))
