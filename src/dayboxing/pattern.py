"""Day pattern expansion, editing and presets."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .schema import Day, DayPattern, HourRecord, TimeBlock
from .segments import analyze_qh_segments


class PatternEditKind(str, Enum):
    MOVE_START = "move_start"
    ADD_BLOCK = "add_block"
    REMOVE_BLOCK = "remove_block"
    UPDATE_BLOCK = "update_block"


class PatternEdit(BaseModel):
    kind: PatternEditKind
    start_hour: Optional[int] = None
    block_index: Optional[int] = None
    block: Optional[Union[TimeBlock, str]] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


def expand(pattern: DayPattern) -> List[HourRecord]:
    """Expand a pattern into contiguous hour records starting at ``start_hour``."""
    hours: List[HourRecord] = []
    cursor = pattern.start_hour
    for block in pattern.blocks:
        if isinstance(block, str):
            hours.append(HourRecord(hour=cursor, type=block))
            cursor += 1
            continue
        for _ in range(block.duration):
            hours.append(HourRecord(hour=cursor, type=block.type, comment=block.comment))
            cursor += 1
    return hours


def pattern_total_hours(pattern: DayPattern) -> int:
    return sum(1 if isinstance(block, str) else block.duration for block in pattern.blocks)


def build_day(day_id: str, pattern: DayPattern) -> Day:
    """Expand ``pattern`` into a Day with freshly computed QH segments."""
    day = Day(id=day_id, hours=expand(pattern))
    analyze_qh_segments(day)
    return day


def edit_pattern(pattern: DayPattern, edit: PatternEdit) -> DayPattern:
    """Return a new pattern with ``edit`` applied.

    Edits missing their payload leave the pattern untouched.
    """
    blocks = list(pattern.blocks)
    if edit.kind == PatternEditKind.MOVE_START:
        if edit.start_hour is None:
            return pattern
        return DayPattern(start_hour=edit.start_hour, blocks=blocks)
    if edit.kind == PatternEditKind.ADD_BLOCK:
        if edit.block is None or edit.block_index is None:
            return pattern
        blocks.insert(edit.block_index, edit.block)
    elif edit.kind == PatternEditKind.REMOVE_BLOCK:
        if edit.block_index is None or not 0 <= edit.block_index < len(blocks):
            return pattern
        del blocks[edit.block_index]
    elif edit.kind == PatternEditKind.UPDATE_BLOCK:
        if edit.block is None or edit.block_index is None or not 0 <= edit.block_index < len(blocks):
            return pattern
        blocks[edit.block_index] = edit.block
    return DayPattern(start_hour=pattern.start_hour, blocks=blocks)


def _blocks(*items: Union[Tuple[str, int], Tuple[str, int, str], str]) -> List[Union[TimeBlock, str]]:
    blocks: List[Union[TimeBlock, str]] = []
    for item in items:
        if isinstance(item, str):
            blocks.append(item)
        elif len(item) == 3:
            blocks.append(TimeBlock(type=item[0], duration=item[1], comment=item[2]))
        else:
            blocks.append(TimeBlock(type=item[0], duration=item[1]))
    return blocks


PRESET_PATTERNS: Dict[str, DayPattern] = {
    "work": DayPattern(
        start_hour=0,
        blocks=_blocks(
            ("sleep", 9), ("life", 1), ("work", 2), ("life", 2), ("work", 4),
            ("life", 1), ("work", 2), ("life", 1), ("relax", 2),
        ),
    ),
    "improve": DayPattern(
        start_hour=0,
        blocks=_blocks(
            ("sleep", 7), ("life", 1), ("improve", 2), ("work", 2), ("life", 2),
            ("improve", 2), ("work", 2), ("life", 3), ("relax", 3),
        ),
    ),
    "balanced": DayPattern(
        start_hour=1,
        blocks=_blocks(
            ("sleep", 7), ("life", 1), "improve", ("work", 2), ("life", 2), ("work", 4),
            ("life", 2), ("work", 2), "life", "improve", "relax",
        ),
    ),
    "improve_first": DayPattern(
        start_hour=-2,
        blocks=_blocks(
            ("sleep", 7), ("improve", 2, "Early reading, best focus"), ("work", 4), ("life", 1),
            ("work", 4), ("improve", 2, "Evening review"), ("life", 2), ("relax", 2),
        ),
    ),
    "work_hard": DayPattern(
        start_hour=0,
        blocks=_blocks(
            ("sleep", 6), ("work", 5), ("life", 1), ("work", 4), ("improve", 1),
            ("work", 4), ("life", 1), ("relax", 2),
        ),
    ),
    "learning_day": DayPattern(
        start_hour=-1,
        blocks=_blocks(
            ("sleep", 7), ("improve", 3, "Morning study"), ("work", 4), ("life", 2),
            ("improve", 2, "Afternoon study"), ("work", 2), ("improve", 2, "Evening gaps"),
            ("life", 1), ("relax", 1),
        ),
    ),
}


def common_pattern(name: str) -> DayPattern:
    try:
        return PRESET_PATTERNS[name]
    except KeyError:
        raise KeyError(f"Unknown preset pattern '{name}'. Choose from {sorted(PRESET_PATTERNS)}") from None


def load_day_patterns(path: Union[str, Path]) -> List[Tuple[str, DayPattern]]:
    """Load ``(day_id, pattern)`` pairs from a YAML file with a top-level ``days`` list."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        payload: Any = yaml.safe_load(handle) or {}

    entries = payload.get("days", []) if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise ValueError(f"{path} must contain a list of days.")

    loaded: List[Tuple[str, DayPattern]] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"Day entry #{index} in {path} must be a mapping.")
        entry = dict(entry)
        day_id = str(entry.pop("id", f"day-{index + 1}"))
        try:
            pattern = DayPattern.model_validate(entry)
        except ValidationError as exc:
            raise ValueError(f"Day '{day_id}' failed pattern validation: {exc}") from exc
        loaded.append((day_id, pattern))
    logging.debug("Loaded %d day patterns from %s", len(loaded), path)
    return loaded
