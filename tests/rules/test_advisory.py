from __future__ import annotations

from typing import Tuple

import pytest

from dayboxing.advisory import advise_days, analyze_day_overall, analyze_segment
from dayboxing.pattern import build_day, expand
from dayboxing.rules import RuleEngine, create_default_engine
from dayboxing.schema import AdviceKind, AnalysisStatus, Day, DayPattern, SegmentName, TimeBlock


def _pattern(*blocks: Tuple[str, int]) -> DayPattern:
    return DayPattern(start_hour=0, blocks=[TimeBlock(type=kind, duration=hours) for kind, hours in blocks])


LONG_WORK_NIGHT = _pattern(("sleep", 7), ("life", 1), ("work", 5), ("life", 2), ("work", 4), ("relax", 2), ("work", 7))
BROKEN_NIGHT = _pattern(("sleep", 3), ("life", 2), ("sleep", 2), ("work", 10), ("life", 3), ("relax", 4))


@pytest.fixture()
def engine() -> RuleEngine:
    return create_default_engine()


def test_f_extension_flags_next_day_sleep(engine: RuleEngine) -> None:
    today = build_day("today", LONG_WORK_NIGHT)
    tomorrow = build_day("tomorrow", BROKEN_NIGHT)
    f_seg = today.segment(SegmentName.F)
    assert f_seg.duration == 7

    report = analyze_segment(f_seg, today.qh_segments, [today, tomorrow], engine=engine)
    assert report.status == AnalysisStatus.WARNING
    assert any("next day's segment A" in item.content for item in report.advices)
    assert report.stats.duration == 7

    alone = analyze_segment(f_seg, today.qh_segments, [today], engine=engine)
    assert not any("next day's segment A" in item.content for item in alone.advices)


def test_segment_without_owning_day_is_incomplete(engine: RuleEngine) -> None:
    day = build_day("d", BROKEN_NIGHT)
    report = analyze_segment(day.qh_segments[0], day.qh_segments, [], engine=engine)
    assert report.status == AnalysisStatus.WARNING
    assert report.title == "Incomplete data"
    assert report.advices[0].kind == AdviceKind.WARNING


def test_segment_is_located_by_value(engine: RuleEngine) -> None:
    day = build_day("d", BROKEN_NIGHT)
    copies = [seg.model_copy() for seg in day.qh_segments]
    report = analyze_segment(copies[0], copies, [day], engine=engine)
    assert report.title != "Incomplete data"


def test_day_overall_runs_overall_then_feature_rules(engine: RuleEngine) -> None:
    day = build_day("d", LONG_WORK_NIGHT)
    report = analyze_day_overall(day, engine=engine)
    assert report.title == "Day overview"
    titles = [result.title for result in report.results]
    assert titles[0].startswith("Day length")
    assert titles.index("Pressure indicators") < titles.index("Continuous blocks")
    assert report.status == AnalysisStatus.WARNING
    assert len(report.advices) == sum(len(result.advices) for result in report.results)


def test_day_overall_with_no_rules_is_info() -> None:
    day = build_day("d", BROKEN_NIGHT)
    report = analyze_day_overall(day, engine=RuleEngine())
    assert report.status == AnalysisStatus.INFO
    assert report.advices == []


def test_day_overall_leaves_unanalyzed_day_untouched(engine: RuleEngine) -> None:
    day = Day(id="raw", hours=expand(BROKEN_NIGHT))
    report = analyze_day_overall(day, engine=engine)
    assert report.results
    assert day.qh_segments is None


def test_advise_days_covers_every_scope(engine: RuleEngine) -> None:
    days = [build_day("one", LONG_WORK_NIGHT), build_day("two", BROKEN_NIGHT)]
    reports = advise_days(days, engine=engine)
    assert list(reports) == ["one", "two"]
    assert list(reports["one"]) == ["overall", "A", "B", "C", "F"]


B_WORK_START = _pattern(("sleep", 7), ("work", 4), ("life", 1), ("work", 4), ("life", 4), ("relax", 4))


def test_identical_days_resolve_by_identity_only(engine: RuleEngine) -> None:
    days = [build_day(f"d{index}", B_WORK_START) for index in range(4)]
    last = days[3]

    report = analyze_segment(last.qh_segments[1], last.qh_segments, days, engine=engine)
    assert any("sustained high pressure" in item.content for item in report.advices)

    copies = [seg.model_copy() for seg in last.qh_segments]
    ambiguous = analyze_segment(copies[1], copies, days, engine=engine)
    assert ambiguous.title == "Incomplete data"
    assert ambiguous.status == AnalysisStatus.WARNING
