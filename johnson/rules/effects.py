"""
Effect accumulation as pure functions.

apply_effect(pool, effect, count) mutates one pool stat and reports what
it contributed. Every operator is expressed as a delta scaled by the match
count, so a count of 0 never touches the pool (no `value * 0` collapse).

    +  value + amount * count
    -  value - amount * count
    %  value + value * (amount / 100) * count
    *  value * factor          factor = amount ** count (or amount * count)
    /  value / factor          skipped when amount == 0
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..state.config import MultiplicativePolicy
from ..state.schema import PoolState
from .grammar import EffectSpec, Operator


@dataclass(frozen=True)
class AppliedEffect:
    """What one effect did to the pool."""
    effect: EffectSpec
    count: int
    before: float
    after: float
    skipped: str | None = None  # Reason when the effect contributed nothing

    @property
    def delta(self) -> float:
        return self.after - self.before

    @property
    def applied(self) -> bool:
        return self.skipped is None and self.count > 0


def contributed_delta(
    effect: EffectSpec,
    count: int,
    current: float,
    policy: MultiplicativePolicy = MultiplicativePolicy.EXPONENT,
) -> float:
    """
    Delta an effect adds to `current` for a given match count.

    Raises:
        ZeroDivisionError: '/' with a zero amount (or a factor that underflows to 0)
        OverflowError: '*' or '/' factor too large to represent
    """
    amount = effect.amount
    op = effect.operator

    if op == Operator.ADD:
        return amount * count
    if op == Operator.SUBTRACT:
        return -amount * count
    if op == Operator.PERCENT:
        return current * (amount / 100) * count

    if op == Operator.DIVIDE and amount == 0:
        raise ZeroDivisionError("division by zero amount")
    factor = policy.factor(amount, count)
    if op == Operator.MULTIPLY:
        return current * factor - current
    if factor == 0:
        raise ZeroDivisionError("divisor underflowed to zero")
    return current / factor - current


def apply_effect(
    pool: PoolState,
    effect: EffectSpec,
    count: int,
    policy: MultiplicativePolicy = MultiplicativePolicy.EXPONENT,
) -> AppliedEffect:
    """
    Apply one effect, scaled by count, to its target stat.

    No-match, division by zero and non-finite results leave the pool
    untouched; the returned AppliedEffect says why.
    """
    stat = effect.target_stat
    before = pool.get(stat)

    if count <= 0:
        return AppliedEffect(effect, 0, before, before, skipped="no match")

    try:
        delta = contributed_delta(effect, count, before, policy)
    except ZeroDivisionError:
        return AppliedEffect(effect, count, before, before, skipped="division by zero")
    except OverflowError:
        return AppliedEffect(effect, count, before, before, skipped="non-finite result")

    after = before + delta
    if not math.isfinite(after):
        return AppliedEffect(effect, count, before, before, skipped="non-finite result")

    pool.set(stat, after)
    return AppliedEffect(effect, count, before, after)
