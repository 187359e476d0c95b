from __future__ import annotations

from typing import List, Union

from hypothesis import given, settings, strategies as st

from dayboxing.pattern import expand, pattern_total_hours
from dayboxing.schema import DayPattern, TimeBlock

HOUR_TYPES = ["sleep", "work", "life", "relax", "improve", "exercise"]


@st.composite
def day_patterns(draw: st.DrawFn) -> DayPattern:
    blocks: List[Union[TimeBlock, str]] = []
    for _ in range(draw(st.integers(min_value=0, max_value=12))):
        hour_type = draw(st.sampled_from(HOUR_TYPES))
        if draw(st.booleans()):
            blocks.append(hour_type)
        else:
            blocks.append(TimeBlock(type=hour_type, duration=draw(st.integers(min_value=1, max_value=9))))
    return DayPattern(start_hour=draw(st.integers(min_value=-6, max_value=6)), blocks=blocks)


@settings(max_examples=50)
@given(day_patterns())
def test_expansion_is_contiguous_from_start_hour(pattern: DayPattern) -> None:
    hours = expand(pattern)
    assert len(hours) == pattern_total_hours(pattern)
    assert [record.hour for record in hours] == list(range(pattern.start_hour, pattern.start_hour + len(hours)))


@settings(max_examples=50)
@given(day_patterns())
def test_expansion_preserves_block_types_in_order(pattern: DayPattern) -> None:
    expected: List[str] = []
    for block in pattern.blocks:
        if isinstance(block, str):
            expected.append(block)
        else:
            expected.extend([block.type] * block.duration)
    assert [record.type for record in expand(pattern)] == expected
