"""
Condition evaluation as pure functions.

count_matches(condition, context) -> int >= 0

Effects are scaled by the number of matching instances, so every
condition answers "how many", never "whether". The one exception is
RunnerStat, which is a threshold check and returns a bool (an int 0/1
to the accumulator).

One evaluator per condition class, registered with @evaluates.
"""

from __future__ import annotations

import logging
from typing import Callable

from .context import RuleContext
from .grammar import (
    ColorForEachCondition,
    Condition,
    NoCondition,
    NodeColorComboCondition,
    NodeColorCondition,
    PrevDamCondition,
    PrevRiskCondition,
    RiskDamPairCondition,
    RunnerStatCondition,
    RunnerTypeCondition,
)

logger = logging.getLogger(__name__)

Evaluator = Callable[[Condition, RuleContext], int]

_EVALUATORS: dict[type[Condition], Evaluator] = {}


def evaluates(condition_type: type[Condition]) -> Callable[[Evaluator], Evaluator]:
    """Register the evaluator for one condition class."""
    def decorator(fn: Evaluator) -> Evaluator:
        _EVALUATORS[condition_type] = fn
        return fn
    return decorator


def count_matches(condition: Condition, context: RuleContext) -> int:
    """
    Count how many times a condition is satisfied.

    Args:
        condition: Parsed condition from an effect
        context: Snapshot of selection, runners and prevention

    Returns:
        Non-negative match count. Unknown condition kinds count 0.
    """
    evaluator = _EVALUATORS.get(type(condition))
    if evaluator is None:
        logger.warning("No evaluator for condition %r", condition)
        return 0
    return evaluator(condition, context)


@evaluates(NoCondition)
def _none(condition: NoCondition, context: RuleContext) -> int:
    return 1


@evaluates(RunnerTypeCondition)
def _runner_type(condition: RunnerTypeCondition, context: RuleContext) -> int:
    return sum(1 for runner in context.runners if runner.type == condition.runner_type)


@evaluates(NodeColorCondition)
def _node_color(condition: NodeColorCondition, context: RuleContext) -> int:
    return context.count_color(condition.color)


@evaluates(NodeColorComboCondition)
def _node_color_combo(condition: NodeColorComboCondition, context: RuleContext) -> int:
    # Complete sets, limited by the scarcest color
    if not condition.colors:
        return 0
    return min(context.count_color(color) for color in condition.colors)


@evaluates(RunnerStatCondition)
def _runner_stat(condition: RunnerStatCondition, context: RuleContext) -> bool:
    total = context.stat_total(condition.stats)
    return condition.comparison.holds(total, condition.threshold)


@evaluates(PrevDamCondition)
def _prev_dam(condition: PrevDamCondition, context: RuleContext) -> int:
    if context.prevention is None:
        return 0
    return max(0, context.prevention.damage_prevented)


@evaluates(PrevRiskCondition)
def _prev_risk(condition: PrevRiskCondition, context: RuleContext) -> int:
    if context.prevention is None:
        return 0
    return max(0, context.prevention.risk_prevented)


@evaluates(RiskDamPairCondition)
def _risk_dam_pair(condition: RiskDamPairCondition, context: RuleContext) -> int:
    if context.prevention is None:
        return 0
    pairs = min(context.prevention.damage_prevented, context.prevention.risk_prevented)
    return max(0, pairs)


@evaluates(ColorForEachCondition)
def _color_for_each(condition: ColorForEachCondition, context: RuleContext) -> int:
    return sum(1 for count in context.color_counts.values() if count > 0)
