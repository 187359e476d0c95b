"""Rule engine and the built-in QH rule packs."""

from __future__ import annotations

import logging
from typing import Iterable, List

from .energy import ENERGY_RULES
from .engine import AnalysisContext, AnalysisRule, RuleEngine, RuleRegistrationError, always
from .feature import FEATURE_RULES
from .overall import OVERALL_RULES
from .segment import SEGMENT_RULES


def default_rules() -> List[AnalysisRule]:
    return [*OVERALL_RULES, *ENERGY_RULES, *FEATURE_RULES, *SEGMENT_RULES]


def create_default_engine(disabled: Iterable[str] = ()) -> RuleEngine:
    """Build an engine holding every built-in rule except the ``disabled`` ids."""
    disabled = set(disabled)
    known = {rule.id for rule in default_rules()}
    for rule_id in sorted(disabled - known):
        logging.warning("Ignoring unknown rule id in disabled list: %s", rule_id)
    return RuleEngine(rule for rule in default_rules() if rule.id not in disabled)


__all__ = [
    "AnalysisContext",
    "AnalysisRule",
    "RuleEngine",
    "RuleRegistrationError",
    "always",
    "create_default_engine",
    "default_rules",
    "ENERGY_RULES",
    "FEATURE_RULES",
    "OVERALL_RULES",
    "SEGMENT_RULES",
]
