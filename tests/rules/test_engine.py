from __future__ import annotations

import logging

import pytest

from dayboxing.rules import (
    AnalysisContext,
    AnalysisRule,
    RuleEngine,
    RuleRegistrationError,
    always,
    create_default_engine,
    default_rules,
)
from dayboxing.schema import AnalysisResult, AnalysisStatus, Day, RuleKind


def _result(title: str) -> AnalysisResult:
    return AnalysisResult(status=AnalysisStatus.SUCCESS, title=title)


def _rule(rule_id: str, priority: int, /, kind: RuleKind = RuleKind.OVERALL, **overrides) -> AnalysisRule:
    fields = {
        "id": rule_id,
        "kind": kind,
        "priority": priority,
        "condition": always,
        "analyze": lambda ctx, title=rule_id: _result(title),
    }
    fields.update(overrides)
    return AnalysisRule(**fields)


@pytest.fixture()
def context() -> AnalysisContext:
    return AnalysisContext(day=Day(id="ctx"))


def test_rules_evaluate_by_descending_priority(context: AnalysisContext) -> None:
    engine = RuleEngine()
    for rule_id, priority in (("low", 10), ("high", 50), ("mid", 30)):
        engine.register(_rule(rule_id, priority))
    assert [result.title for result in engine.evaluate(context)] == ["high", "mid", "low"]


def test_equal_priorities_keep_registration_order(context: AnalysisContext) -> None:
    engine = RuleEngine([_rule("R1", 50), _rule("R2", 50)])
    engine.register(_rule("R0", 60))
    engine.register(_rule("R3", 50))
    assert [result.title for result in engine.evaluate(context)] == ["R0", "R1", "R2", "R3"]


def test_false_condition_skips_rule(context: AnalysisContext) -> None:
    engine = RuleEngine([_rule("on", 1), _rule("off", 2, condition=lambda ctx: False)])
    assert [result.title for result in engine.evaluate(context)] == ["on"]


def test_failing_rule_is_logged_and_skipped(context: AnalysisContext, caplog: pytest.LogCaptureFixture) -> None:
    def explode(ctx: AnalysisContext) -> AnalysisResult:
        raise RuntimeError("boom")

    engine = RuleEngine(
        [
            _rule("ok", 1),
            _rule("broken", 5, analyze=explode),
            _rule("bad-return", 3, analyze=lambda ctx: "nope"),
            _rule("bad-condition", 4, condition=explode),
        ]
    )
    with caplog.at_level(logging.WARNING):
        results = engine.evaluate(context)
    assert [result.title for result in results] == ["ok"]
    assert "broken" in caplog.text
    assert "bad-return" in caplog.text


def test_evaluate_by_kind_filters(context: AnalysisContext) -> None:
    engine = RuleEngine([_rule("overall", 1), _rule("segment", 2, kind=RuleKind.SEGMENT)])
    assert [result.title for result in engine.evaluate_by_kind(context, "segment")] == ["segment"]
    assert [result.title for result in engine.evaluate_by_kind(context, RuleKind.FEATURE)] == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"id": ""},
        {"priority": "high"},
        {"priority": True},
        {"kind": "bogus"},
        {"analyze": None},
        {"condition": 3},
    ],
)
def test_invalid_rules_are_rejected(overrides: dict) -> None:
    with pytest.raises(RuleRegistrationError):
        RuleEngine().register(_rule("r", 1, **overrides))


def test_duplicate_ids_are_rejected_and_batches_are_atomic() -> None:
    engine = RuleEngine([_rule("a", 1)])
    with pytest.raises(RuleRegistrationError):
        engine.register(_rule("a", 2))
    with pytest.raises(RuleRegistrationError):
        engine.register_all([_rule("b", 1), _rule("b", 2)])
    assert [rule.id for rule in engine.rules] == ["a"]


def test_unregister(context: AnalysisContext) -> None:
    engine = RuleEngine([_rule("a", 1), _rule("b", 2)])
    assert engine.unregister("a") is True
    assert engine.unregister("a") is False
    assert "a" not in engine
    assert len(engine) == 1


def test_default_engine_orders_builtin_rules() -> None:
    engine = create_default_engine()
    ids = [rule.id for rule in engine.rules]
    assert len(ids) == len(default_rules()) == 14
    assert ids[0] == "day_length"
    assert ids[-1] == "activity_transitions"
    priorities = [rule.priority for rule in engine.rules]
    assert priorities == sorted(priorities, reverse=True)


def test_default_engine_skips_disabled_rules(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        engine = create_default_engine(["golden_hours", "no_such_rule"])
    assert "golden_hours" not in engine
    assert "day_length" in engine
    assert "no_such_rule" in caplog.text


def test_separate_engines_do_not_share_state() -> None:
    first = create_default_engine()
    second = create_default_engine()
    first.unregister("day_length")
    assert "day_length" in second
