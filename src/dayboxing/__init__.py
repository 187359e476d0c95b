"""QH segment analysis and rule-based advice for hour-by-hour day plans."""

from .advisory import advise_days, analyze_day_overall, analyze_segment
from .daybook import DayBook
from .pattern import build_day, common_pattern, edit_pattern, expand, load_day_patterns
from .rules import RuleEngine, create_default_engine
from .schema import Day, DayPattern, HourRecord, HourType, HourTypeRegistry, SegmentAnalysis, TimeBlock
from .segments import analyze_qh_segments

__all__ = [
    "advise_days",
    "analyze_day_overall",
    "analyze_qh_segments",
    "analyze_segment",
    "build_day",
    "common_pattern",
    "create_default_engine",
    "Day",
    "DayBook",
    "DayPattern",
    "edit_pattern",
    "expand",
    "HourRecord",
    "HourType",
    "HourTypeRegistry",
    "load_day_patterns",
    "RuleEngine",
    "SegmentAnalysis",
    "TimeBlock",
]
