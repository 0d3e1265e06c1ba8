"""
Prevention: Grit cancels Damage, Veil cancels Risk, 2 points for 1.
"""

from __future__ import annotations

import math

from ..state.schema import PoolState, PreventionResult

PREVENTION_RATIO = 2


def compute_prevention(pool: PoolState) -> PreventionResult:
    """Damage and Risk that the pool's Grit and Veil would cancel."""
    return PreventionResult(
        damage_prevented=max(0, math.floor(pool.grit / PREVENTION_RATIO)),
        risk_prevented=max(0, math.floor(pool.veil / PREVENTION_RATIO)),
    )


def unprevented_damage(pool: PoolState, prevention: PreventionResult) -> int:
    """Whole points of Damage left to roll for."""
    return max(0, math.floor(pool.damage - prevention.damage_prevented))


def unprevented_risk(pool: PoolState, prevention: PreventionResult) -> int:
    """Whole points of Risk that reach the player."""
    return max(0, math.floor(pool.risk - prevention.risk_prevented))
