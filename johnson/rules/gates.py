"""
Gate evaluation as pure functions.

is_unlocked(gate, context) -> bool

Gates answer "is the threshold met", a different question from the
counting conditions in rules.conditions, so they have their own
evaluators and never share them.
"""

from __future__ import annotations

import logging
from typing import Callable

from .context import RuleContext
from .grammar import (
    GateCondition,
    NodeGate,
    ParseError,
    RunnerStatGate,
    RunnerTypeGate,
    parse_gate,
)

logger = logging.getLogger(__name__)

GateEvaluator = Callable[[GateCondition, RuleContext], bool]

_GATE_EVALUATORS: dict[type[GateCondition], GateEvaluator] = {}


def evaluates_gate(gate_type: type[GateCondition]) -> Callable[[GateEvaluator], GateEvaluator]:
    """Register the evaluator for one gate class."""
    def decorator(fn: GateEvaluator) -> GateEvaluator:
        _GATE_EVALUATORS[gate_type] = fn
        return fn
    return decorator


def is_unlocked(gate: GateCondition, context: RuleContext) -> bool:
    """Whether a parsed gate condition holds for the current configuration."""
    evaluator = _GATE_EVALUATORS.get(type(gate))
    if evaluator is None:
        logger.warning("No evaluator for gate %r", gate)
        return False
    return evaluator(gate, context)


def is_gate_text_unlocked(text: str | None, context: RuleContext) -> bool:
    """
    Evaluate a gate from its authored string.

    Missing or malformed gate strings keep the gate locked.
    """
    if not text or not text.strip():
        return False
    try:
        gate = parse_gate(text)
    except ParseError as e:
        logger.warning("Locked gate with bad condition: %s", e)
        return False
    return is_unlocked(gate, context)


@evaluates_gate(RunnerTypeGate)
def _runner_type_gate(gate: RunnerTypeGate, context: RuleContext) -> bool:
    matching = sum(1 for runner in context.runners if runner.type in gate.types)
    return matching >= gate.min_count


@evaluates_gate(RunnerStatGate)
def _runner_stat_gate(gate: RunnerStatGate, context: RuleContext) -> bool:
    return context.stat_total(gate.stats) >= gate.min_sum


@evaluates_gate(NodeGate)
def _node_gate(gate: NodeGate, context: RuleContext) -> bool:
    selected = sum(1 for node_id in gate.node_ids if node_id in context.selected_ids)
    if gate.threshold == 0:
        return selected == len(gate.node_ids)
    return selected >= gate.threshold
