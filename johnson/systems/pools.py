"""
Pool recompute for Johnson contracts.

recompute_pools(contract, selected, runners) -> PoolBreakdown

The pool is a pure function of the current selection and runner
configuration: every call starts from zero and never patches a previous
result.

Pipeline:
    1. Collect effects from selected non-Gate nodes in (layer, slot, id) order
    2. Pass 1: effects whose condition does not read prevention
    3. Provisional prevention from pass-1 Grit/Veil
    4. Pass 2: PrevDam / PrevRisk / RiskDamPair effects, reading (3)
    5. Final prevention from the finished pool

Within a pass, '%' effects run after the pass's other effects so a
percentage boosts the pass total. After each pass every stat but Money is
floored at 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..rules.conditions import count_matches
from ..rules.context import RuleContext
from ..rules.effects import AppliedEffect, apply_effect
from ..rules.grammar import EffectSpec, Operator, ParseError, parse_effect
from ..rules.prevention import compute_prevention, unprevented_damage, unprevented_risk
from ..state.config import MultiplicativePolicy
from ..state.schema import (
    Contract,
    Node,
    PoolState,
    PreventionResult,
    Runner,
    StatName,
)

logger = logging.getLogger(__name__)


@dataclass
class PoolBreakdown:
    """Result of one recompute: the pool plus everything derived from it."""
    pool: PoolState = field(default_factory=PoolState)
    prevention: PreventionResult = field(default_factory=PreventionResult)
    provisional_prevention: PreventionResult = field(default_factory=PreventionResult)
    unprevented_damage: int = 0
    unprevented_risk: int = 0
    applied: list[AppliedEffect] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "pool": self.pool.as_dict(),
            "damage_prevented": self.prevention.damage_prevented,
            "risk_prevented": self.prevention.risk_prevented,
            "unprevented_damage": self.unprevented_damage,
            "unprevented_risk": self.unprevented_risk,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class _QueuedEffect:
    node_id: str
    effect: EffectSpec


def ordered_selection(contract: Contract | None, selected: Iterable[str]) -> list[Node]:
    """Selected nodes that exist, in stable processing order."""
    if contract is None:
        return []
    nodes = contract.node_map()
    unique = {node_id for node_id in selected if node_id in nodes}
    return sorted((nodes[node_id] for node_id in unique), key=lambda n: n.sort_key)


def _collect_effects(nodes: list[Node], warnings: list[str]) -> list[_QueuedEffect]:
    queued = []
    for node in nodes:
        if node.is_gate:
            continue
        for raw in node.effects:
            if not raw or not raw.strip():
                continue
            try:
                queued.append(_QueuedEffect(node.id, parse_effect(raw.strip())))
            except ParseError as e:
                warnings.append(f"Node {node.id}: ignored effect ({e})")
    return queued


def _run_pass(
    pool: PoolState,
    queued: list[_QueuedEffect],
    context: RuleContext,
    policy: MultiplicativePolicy,
    applied: list[AppliedEffect],
    warnings: list[str],
) -> None:
    flat = [q for q in queued if q.effect.operator != Operator.PERCENT]
    percent = [q for q in queued if q.effect.operator == Operator.PERCENT]

    for item in flat + percent:
        count = count_matches(item.effect.condition, context)
        result = apply_effect(pool, item.effect, count, policy)
        applied.append(result)
        if result.skipped and result.skipped != "no match":
            warnings.append(f"Node {item.node_id}: {item.effect} skipped ({result.skipped})")

    for stat in StatName:
        if stat != StatName.MONEY and pool.get(stat) < 0:
            pool.set(stat, 0.0)


def recompute_pools(
    contract: Contract | None,
    selected: Iterable[str],
    runners: Iterable[Runner],
    policy: MultiplicativePolicy = MultiplicativePolicy.EXPONENT,
) -> PoolBreakdown:
    """
    Recompute the full pool from the current selection and runners.

    Args:
        contract: Loaded contract (None yields an empty pool)
        selected: Selected node ids, any order; unknown ids are ignored
        runners: Configured (hired) runners
        policy: Scaling for '*' and '/' effects

    Returns:
        PoolBreakdown; bad content shows up in .warnings, never as an exception
    """
    selected = list(selected)
    runners = list(runners)
    breakdown = PoolBreakdown()
    warnings: list[str] = []

    nodes = ordered_selection(contract, selected)
    queued = _collect_effects(nodes, warnings)

    first = [q for q in queued if not q.effect.condition.uses_prevention]
    second = [q for q in queued if q.effect.condition.uses_prevention]

    context = RuleContext.build(contract, selected, runners)
    pool = breakdown.pool

    _run_pass(pool, first, context, policy, breakdown.applied, warnings)

    provisional = compute_prevention(pool)
    _run_pass(pool, second, context.with_prevention(provisional), policy, breakdown.applied, warnings)

    prevention = compute_prevention(pool)
    breakdown.provisional_prevention = provisional
    breakdown.prevention = prevention
    breakdown.unprevented_damage = unprevented_damage(pool, prevention)
    breakdown.unprevented_risk = unprevented_risk(pool, prevention)

    # Report each problem once per recompute
    breakdown.warnings = list(dict.fromkeys(warnings))
    for message in breakdown.warnings:
        logger.warning(message)

    return breakdown
