from __future__ import annotations

from typing import List

import pytest

from dayboxing.daybook import DayBook, HourChangeEvent, next_type, retype_hour
from dayboxing.pattern import PatternEdit, PatternEditKind, build_day, common_pattern, edit_pattern, load_day_patterns
from dayboxing.schema import DayPattern, PartType, SegmentName, TimeBlock

PATTERN = DayPattern(
    start_hour=0,
    blocks=[TimeBlock(type="sleep", duration=7), TimeBlock(type="work", duration=9), TimeBlock(type="life", duration=8)],
)


def test_retype_recomputes_segments() -> None:
    day = build_day("d", PATTERN)
    assert day.segment(SegmentName.A).type == PartType.FULL
    updated = retype_hour(day, 0, "work")
    assert updated.hour_at(0).type == "work"
    assert updated.segment(SegmentName.A).main_type_hours == 6
    assert day.hour_at(0).type == "sleep"


def test_retype_missing_hour_raises() -> None:
    with pytest.raises(KeyError):
        retype_hour(build_day("d", PATTERN), 99, "work")


def test_next_type_cycles() -> None:
    assert next_type("sleep") == "work"
    assert next_type("relax") == "sleep"
    assert next_type("improve") == "sleep"


def test_daybook_updates_and_notifies() -> None:
    events: List[HourChangeEvent] = []
    book = DayBook.from_patterns([("mon", PATTERN), ("tue", PATTERN)], on_change=events.append)
    event = book.update_hour("tue", 3, "life")
    assert event == HourChangeEvent(day_id="tue", hour=3, old_type="sleep", new_type="life")
    assert events == [event]
    assert book["tue"].hour_at(3).type == "life"
    assert book["mon"].hour_at(3).type == "sleep"

    assert book.update_hour("wed", 3, "life") is None
    assert book.update_hour("tue", 99, "life") is None
    assert len(events) == 1

    cycled = book.cycle_hour("mon", 10)
    assert (cycled.old_type, cycled.new_type) == ("work", "life")


def test_daybook_history_and_duplicates() -> None:
    book = DayBook.from_patterns([(f"d{index}", PATTERN) for index in range(5)])
    assert [day.id for day in book.history_for("d4", lookback=3)] == ["d1", "d2", "d3"]
    assert book.history_for("d0") == []
    with pytest.raises(ValueError):
        book.add(build_day("d1", PATTERN))


def test_edit_pattern_operations() -> None:
    moved = edit_pattern(PATTERN, PatternEdit(kind=PatternEditKind.MOVE_START, start_hour=-1))
    assert moved.start_hour == -1
    added = edit_pattern(PATTERN, PatternEdit(kind=PatternEditKind.ADD_BLOCK, block_index=99, block="relax"))
    assert added.blocks[-1] == "relax"
    removed = edit_pattern(PATTERN, PatternEdit(kind=PatternEditKind.REMOVE_BLOCK, block_index=0))
    assert len(removed.blocks) == 2
    updated = edit_pattern(
        PATTERN, PatternEdit(kind=PatternEditKind.UPDATE_BLOCK, block_index=1, block=TimeBlock(type="improve", duration=2))
    )
    assert updated.blocks[1].type == "improve"
    assert edit_pattern(PATTERN, PatternEdit(kind=PatternEditKind.REMOVE_BLOCK, block_index=7)) is PATTERN
    assert edit_pattern(PATTERN, PatternEdit(kind=PatternEditKind.ADD_BLOCK)) is PATTERN


def test_non_positive_durations_are_rejected() -> None:
    with pytest.raises(ValueError):
        TimeBlock(type="work", duration=0)


def test_presets() -> None:
    assert common_pattern("work").start_hour == 0
    with pytest.raises(KeyError):
        common_pattern("nope")


def test_load_day_patterns(tmp_path) -> None:
    path = tmp_path / "patterns.yaml"
    path.write_text(
        """
days:
  - id: first
    startHour: -1
    blocks:
      - {type: sleep, duration: 8}
      - work
  - start_hour: 0
    blocks: [life]
"""
    )
    loaded = load_day_patterns(path)
    assert [day_id for day_id, _ in loaded] == ["first", "day-2"]
    assert loaded[0][1].start_hour == -1
    assert loaded[0][1].blocks[1] == "work"


def test_load_day_patterns_rejects_bad_blocks(tmp_path) -> None:
    path = tmp_path / "patterns.yaml"
    path.write_text("days:\n  - id: bad\n    start_hour: 0\n    blocks:\n      - {type: work, duration: -2}\n")
    with pytest.raises(ValueError, match="bad"):
        load_day_patterns(path)
