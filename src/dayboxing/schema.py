"""Unified schema definitions for day patterns, hours and QH analysis results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

UNDEFINED_TYPE = "undefined"


class HourType(str, Enum):
    """Canonical activity tags. Any other non-empty string is a custom type."""

    SLEEP = "sleep"
    WORK = "work"
    LIFE = "life"
    RELAX = "relax"
    IMPROVE = "improve"


class PartType(str, Enum):
    FULL = "full"
    MIX = "mix"
    BALANCE = "balance"
    CHAOS = "chaos"


class SegmentName(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    F = "F"


class DayType(str, Enum):
    LONG = "long"
    SHORT = "short"
    NORMAL = "normal"


class RuleKind(str, Enum):
    OVERALL = "overall"
    FEATURE = "feature"
    SEGMENT = "segment"


class AnalysisStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"
    FATAL = "fatal"


class AdviceKind(str, Enum):
    WARNING = "warning"
    SUGGESTION = "suggestion"
    TIP = "tip"


def _type_id(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _hour_type(value: Any) -> Any:
    value = _type_id(value)
    if isinstance(value, str) and value.strip() == UNDEFINED_TYPE:
        raise ValueError(f"'{UNDEFINED_TYPE}' is reserved for empty segments and cannot be an hour type.")
    return value


@dataclass(frozen=True)
class HourTypeInfo:
    label: str
    energy: Optional[int] = None


CANONICAL_TYPES: Dict[str, HourTypeInfo] = {
    HourType.SLEEP.value: HourTypeInfo(label="Sleep", energy=0),
    HourType.RELAX.value: HourTypeInfo(label="Relax", energy=1),
    HourType.LIFE.value: HourTypeInfo(label="Life", energy=2),
    HourType.WORK.value: HourTypeInfo(label="Work", energy=3),
    HourType.IMPROVE.value: HourTypeInfo(label="Improve", energy=3),
}


@dataclass
class HourTypeRegistry:
    """Canonical hour types plus explicitly registered custom types.

    Rules read energy levels and labels from the registry carried in their
    analysis context, so a host can extend the vocabulary without touching
    the rule packs.
    """

    custom: Dict[str, HourTypeInfo] = field(default_factory=dict)

    def register(self, type_id: str, *, label: Optional[str] = None, energy: Optional[int] = None) -> HourTypeInfo:
        type_id = str(_type_id(type_id)).strip()
        if not type_id:
            raise ValueError("Hour type id must be a non-empty string.")
        if type_id == UNDEFINED_TYPE:
            raise ValueError(f"Hour type '{type_id}' is reserved.")
        if self.is_canonical(type_id):
            raise ValueError(f"Hour type '{type_id}' is canonical and cannot be re-registered.")
        if energy is not None and (isinstance(energy, bool) or not isinstance(energy, int)):
            raise ValueError(f"Energy for hour type '{type_id}' must be an integer.")
        info = HourTypeInfo(label=label or type_id, energy=energy)
        self.custom[type_id] = info
        return info

    def get(self, type_id: str) -> Optional[HourTypeInfo]:
        type_id = _type_id(type_id)
        return CANONICAL_TYPES.get(type_id) or self.custom.get(type_id)

    def is_canonical(self, type_id: str) -> bool:
        return _type_id(type_id) in CANONICAL_TYPES

    def energy(self, type_id: str) -> Optional[int]:
        info = self.get(type_id)
        return info.energy if info else None

    def label(self, type_id: str) -> str:
        info = self.get(type_id)
        return info.label if info else str(_type_id(type_id))

    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]]) -> "HourTypeRegistry":
        """Build a registry from a settings mapping ``{type_id: {label, energy}}``."""
        registry = cls()
        for type_id, meta in (payload or {}).items():
            meta = meta or {}
            registry.register(type_id, label=meta.get("label"), energy=meta.get("energy"))
        return registry


class HourRecord(BaseModel):
    """A single labeled hour. ``hour`` may be negative or beyond 24."""

    hour: int
    type: str = Field(..., min_length=1, description="Canonical or custom hour type id.")
    comment: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> Any:
        return _hour_type(value)


class TimeBlock(BaseModel):
    type: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Block length in whole hours.")
    comment: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> Any:
        return _hour_type(value)


class DayPattern(BaseModel):
    """Compact day definition: a start hour followed by typed blocks.

    A bare type token in ``blocks`` stands for a one-hour block.
    """

    start_hour: int
    blocks: List[Union[TimeBlock, str]] = Field(default_factory=list)

    model_config = ConfigDict(
        extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    @field_validator("blocks", mode="before")
    @classmethod
    def coerce_tokens(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [_hour_type(item) for item in value]
        return value

    @field_validator("blocks")
    @classmethod
    def validate_tokens(cls, value: List[Union[TimeBlock, str]]) -> List[Union[TimeBlock, str]]:
        for block in value:
            if isinstance(block, str) and not block.strip():
                raise ValueError("Bare block tokens must be non-empty hour types.")
        return value


class SegmentAnalysis(BaseModel):
    segment: SegmentName
    start_hour: int
    end_hour: int
    type: PartType
    main_type: str
    secondary_type: Optional[str] = None
    main_type_hours: int = 0
    secondary_type_hours: Optional[int] = None
    distribution: Dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(
        extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    @model_validator(mode="after")
    def validate_bounds(self) -> "SegmentAnalysis":
        if self.start_hour > self.end_hour:
            raise ValueError("end_hour must not precede start_hour.")
        return self

    @property
    def duration(self) -> int:
        return self.end_hour - self.start_hour

    def contains(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


class Day(BaseModel):
    """A day of labeled hours and its derived QH segments.

    ``qh_segments`` is derived data: it is replaced wholesale by
    :func:`dayboxing.segments.analyze_qh_segments` whenever ``hours`` change.
    """

    id: str
    hours: List[HourRecord] = Field(default_factory=list)
    qh_segments: Optional[List[SegmentAnalysis]] = None

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    @field_validator("hours")
    @classmethod
    def validate_order(cls, value: List[HourRecord]) -> List[HourRecord]:
        for previous, current in zip(value, value[1:]):
            if current.hour <= previous.hour:
                raise ValueError(
                    f"Hours must be unique and strictly ascending (got {previous.hour} then {current.hour})."
                )
        return value

    @property
    def start_hour(self) -> Optional[int]:
        return self.hours[0].hour if self.hours else None

    @property
    def total_hours(self) -> int:
        if not self.hours:
            return 0
        return self.hours[-1].hour - self.hours[0].hour + 1

    def hour_at(self, hour: int) -> Optional[HourRecord]:
        for record in self.hours:
            if record.hour == hour:
                return record
        return None

    def segment(self, name: Union[SegmentName, str]) -> Optional[SegmentAnalysis]:
        for seg in self.qh_segments or []:
            if seg.segment == SegmentName(name):
                return seg
        return None


class SegmentStats(BaseModel):
    duration: int
    main_type_percent: float
    secondary_type_percent: float

    model_config = ConfigDict(extra="forbid", frozen=True)


class AdviceItem(BaseModel):
    kind: AdviceKind
    content: str

    model_config = ConfigDict(extra="forbid", frozen=True)


def warning(content: str) -> AdviceItem:
    return AdviceItem(kind=AdviceKind.WARNING, content=content)


def suggestion(content: str) -> AdviceItem:
    return AdviceItem(kind=AdviceKind.SUGGESTION, content=content)


def tip(content: str) -> AdviceItem:
    return AdviceItem(kind=AdviceKind.TIP, content=content)


class AnalysisResult(BaseModel):
    status: AnalysisStatus
    title: str
    advices: List[AdviceItem] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def has_warning(self) -> bool:
        return any(item.kind == AdviceKind.WARNING for item in self.advices)

    @classmethod
    def from_advices(cls, title: str, advices: List[AdviceItem]) -> "AnalysisResult":
        """Status is ``warning`` when any advice is a warning, else ``success``."""
        status = (
            AnalysisStatus.WARNING
            if any(item.kind == AdviceKind.WARNING for item in advices)
            else AnalysisStatus.SUCCESS
        )
        return cls(status=status, title=title, advices=list(advices))


class AdvisoryReport(BaseModel):
    """Aggregated advice returned by the segment and day advisory views."""

    status: AnalysisStatus
    title: str
    advices: List[AdviceItem] = Field(default_factory=list)
    results: List[AnalysisResult] = Field(default_factory=list)
    stats: Optional[SegmentStats] = None

    model_config = ConfigDict(extra="forbid", frozen=True)
