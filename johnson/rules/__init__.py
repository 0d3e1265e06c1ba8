"""
Game rules as pure functions.

Grammar, condition/gate evaluation, effect accumulation and prevention.
Separates logic from data models for easier testing.
"""

from .grammar import (
    ParseError,
    Operator,
    Comparison,
    Condition,
    EffectSpec,
    GateCondition,
    parse_condition,
    parse_effect,
    parse_gate,
)
from .context import RuleContext
from .conditions import count_matches
from .gates import is_unlocked, is_gate_text_unlocked
from .effects import AppliedEffect, apply_effect
from .prevention import (
    PREVENTION_RATIO,
    compute_prevention,
    unprevented_damage,
    unprevented_risk,
)

__all__ = [
    "ParseError",
    "Operator",
    "Comparison",
    "Condition",
    "EffectSpec",
    "GateCondition",
    "parse_condition",
    "parse_effect",
    "parse_gate",
    "RuleContext",
    "count_matches",
    "is_unlocked",
    "is_gate_text_unlocked",
    "AppliedEffect",
    "apply_effect",
    "PREVENTION_RATIO",
    "compute_prevention",
    "unprevented_damage",
    "unprevented_risk",
]
