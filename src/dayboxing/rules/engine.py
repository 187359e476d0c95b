"""Prioritized rule engine evaluating condition/analyze rules against a context."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from ..schema import (
    AnalysisResult,
    Day,
    HourTypeRegistry,
    RuleKind,
    SegmentAnalysis,
    SegmentStats,
)


class RuleRegistrationError(ValueError):
    """Raised when a rule definition is rejected at registration time."""


@dataclass(frozen=True)
class AnalysisContext:
    """Everything a rule may read. Rules never reach outside of it.

    ``historical_days`` are ordered oldest to newest and never include ``day``.
    """

    day: Day
    all_segments: Sequence[SegmentAnalysis] = ()
    segment: Optional[SegmentAnalysis] = None
    historical_days: Sequence[Day] = ()
    stats: Optional[SegmentStats] = None
    next_day: Optional[Day] = None
    hour_types: HourTypeRegistry = field(default_factory=HourTypeRegistry)


Condition = Callable[[AnalysisContext], bool]
Analyzer = Callable[[AnalysisContext], AnalysisResult]


@dataclass(frozen=True)
class AnalysisRule:
    id: str
    kind: RuleKind
    priority: int
    condition: Condition
    analyze: Analyzer
    description: str = ""


def always(_: AnalysisContext) -> bool:
    return True


class RuleEngine:
    """Ordered rule set: priority descending, registration order on ties.

    Evaluation never raises. A rule whose condition or analyzer fails is
    logged and skipped. Registration is not synchronized; hosts that mutate
    a shared engine at runtime must guard it themselves.
    """

    def __init__(self, rules: Optional[Iterable[AnalysisRule]] = None) -> None:
        self._rules: List[AnalysisRule] = []
        if rules is not None:
            self.register_all(rules)

    @property
    def rules(self) -> Tuple[AnalysisRule, ...]:
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return any(rule.id == rule_id for rule in self._rules)

    def _validate(self, rule: AnalysisRule, pending: Sequence[AnalysisRule] = ()) -> None:
        if not isinstance(rule, AnalysisRule):
            raise RuleRegistrationError(f"Expected an AnalysisRule, got {type(rule).__name__}.")
        if not isinstance(rule.id, str) or not rule.id.strip():
            raise RuleRegistrationError("Rule id must be a non-empty string.")
        if rule.id in self or any(other.id == rule.id for other in pending):
            raise RuleRegistrationError(f"Duplicate rule id '{rule.id}'.")
        if isinstance(rule.priority, bool) or not isinstance(rule.priority, int):
            raise RuleRegistrationError(f"Rule '{rule.id}' priority must be an integer.")
        try:
            RuleKind(rule.kind)
        except ValueError as exc:
            raise RuleRegistrationError(f"Rule '{rule.id}' has unknown kind {rule.kind!r}.") from exc
        if not callable(rule.condition) or not callable(rule.analyze):
            raise RuleRegistrationError(f"Rule '{rule.id}' condition and analyze must be callable.")

    def _sort(self) -> None:
        # list.sort is stable, so equal priorities keep registration order
        self._rules.sort(key=lambda rule: -rule.priority)

    def register(self, rule: AnalysisRule) -> None:
        self._validate(rule)
        self._rules.append(rule)
        self._sort()

    def register_all(self, rules: Iterable[AnalysisRule]) -> None:
        """Register a batch atomically: one invalid rule rejects the whole batch."""
        batch = list(rules)
        for index, rule in enumerate(batch):
            self._validate(rule, pending=batch[:index])
        self._rules.extend(batch)
        self._sort()

    def unregister(self, rule_id: str) -> bool:
        before = len(self._rules)
        self._rules = [rule for rule in self._rules if rule.id != rule_id]
        return len(self._rules) != before

    def _run(self, rule: AnalysisRule, context: AnalysisContext) -> Optional[AnalysisResult]:
        try:
            if not rule.condition(context):
                return None
            result = rule.analyze(context)
        except Exception:
            logging.warning("Rule '%s' failed and was skipped", rule.id, exc_info=True)
            return None
        if not isinstance(result, AnalysisResult):
            logging.warning(
                "Rule '%s' returned %s instead of an AnalysisResult; skipped",
                rule.id,
                type(result).__name__,
            )
            return None
        return result

    def evaluate(self, context: AnalysisContext) -> List[AnalysisResult]:
        results: List[AnalysisResult] = []
        for rule in self._rules:
            result = self._run(rule, context)
            if result is not None:
                results.append(result)
        return results

    def evaluate_by_kind(
        self, context: AnalysisContext, kind: Union[RuleKind, str]
    ) -> List[AnalysisResult]:
        kind = RuleKind(kind)
        results: List[AnalysisResult] = []
        for rule in self._rules:
            if rule.kind != kind:
                continue
            result = self._run(rule, context)
            if result is not None:
                results.append(result)
        return results
