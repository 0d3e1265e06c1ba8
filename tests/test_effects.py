"""Tests for effect accumulation and prevention."""

import pytest

from johnson.rules.effects import apply_effect, contributed_delta
from johnson.rules.grammar import parse_effect
from johnson.rules.prevention import compute_prevention, unprevented_damage, unprevented_risk
from johnson.state.config import MultiplicativePolicy
from johnson.state.schema import PoolState, PreventionResult, StatName


class TestApplyEffect:
    """Operator semantics scaled by match count."""

    def test_add_scales_by_count(self):
        pool = PoolState()
        apply_effect(pool, parse_effect("RunnerType:Hacker;+;5;Money"), 2)
        assert pool.money == 10

    def test_subtract(self):
        pool = PoolState(risk=10)
        apply_effect(pool, parse_effect("None;-;3;Risk"), 2)
        assert pool.risk == 4

    def test_percent_additive_per_count(self):
        pool = PoolState(money=100)
        apply_effect(pool, parse_effect("None;%;10;Money"), 3)
        assert pool.money == pytest.approx(130)

    def test_multiply_exponent(self):
        pool = PoolState(grit=3)
        apply_effect(pool, parse_effect("None;*;2;Grit"), 3)
        assert pool.grit == 24

    def test_multiply_linear_policy(self):
        pool = PoolState(grit=3)
        apply_effect(pool, parse_effect("None;*;2;Grit"), 3, MultiplicativePolicy.LINEAR)
        assert pool.grit == 18

    def test_divide_exponent(self):
        pool = PoolState(damage=16)
        apply_effect(pool, parse_effect("None;/;2;Damage"), 2)
        assert pool.damage == 4

    def test_only_target_stat_changes(self):
        pool = PoolState(damage=1, risk=2, money=3, grit=4, veil=5)
        apply_effect(pool, parse_effect("None;+;10;Veil"), 1)
        assert pool.as_dict() == {"Damage": 1, "Risk": 2, "Money": 3, "Grit": 4, "Veil": 15}

    def test_returns_before_and_after(self):
        pool = PoolState(money=5)
        result = apply_effect(pool, parse_effect("None;+;5;Money"), 1)
        assert result.before == 5
        assert result.after == 10
        assert result.delta == 5
        assert result.applied


class TestZeroCount:
    """A count of 0 never touches the pool, whatever the operator."""

    @pytest.mark.parametrize("op", ["+", "-", "*", "/", "%"])
    def test_zero_count_is_skip(self, op):
        pool = PoolState(money=40)
        result = apply_effect(pool, parse_effect(f"None;{op};3;Money"), 0)
        assert pool.money == 40
        assert result.skipped == "no match"
        assert not result.applied

    def test_false_runner_stat_result_skips_multiply(self):
        pool = PoolState(money=40)
        apply_effect(pool, parse_effect("None;*;0;Money"), False)
        assert pool.money == 40


class TestBadArithmetic:
    """Division by zero and overflow leave the pool alone."""

    def test_divide_by_zero(self):
        pool = PoolState(damage=10)
        result = apply_effect(pool, parse_effect("None;/;0;Damage"), 1)
        assert pool.damage == 10
        assert result.skipped == "division by zero"

    def test_contributed_delta_raises_on_zero_divisor(self):
        with pytest.raises(ZeroDivisionError):
            contributed_delta(parse_effect("None;/;0;Damage"), 1, 10)

    def test_overflow_is_skipped(self):
        pool = PoolState(money=10)
        result = apply_effect(pool, parse_effect("None;*;1e300;Money"), 5)
        assert pool.money == 10
        assert result.skipped == "non-finite result"


class TestPrevention:
    """Grit and Veil cancel Damage and Risk at 2:1."""

    def test_two_to_one_floor(self):
        prevention = compute_prevention(PoolState(grit=8, veil=11))
        assert prevention == PreventionResult(damage_prevented=4, risk_prevented=5)

    def test_fractional_grit_floors(self):
        assert compute_prevention(PoolState(grit=3.9)).damage_prevented == 1

    def test_negative_grit_prevents_nothing(self):
        assert compute_prevention(PoolState(grit=-4)).damage_prevented == 0

    def test_unprevented_never_negative(self):
        pool = PoolState(damage=2, risk=1, grit=10, veil=10)
        prevention = compute_prevention(pool)
        assert unprevented_damage(pool, prevention) == 0
        assert unprevented_risk(pool, prevention) == 0

    def test_unprevented_remainder(self):
        pool = PoolState(damage=9, risk=7, grit=4, veil=2)
        prevention = compute_prevention(pool)
        assert unprevented_damage(pool, prevention) == 7
        assert unprevented_risk(pool, prevention) == 6

    def test_stat_lookup_by_enum(self):
        pool = PoolState(veil=3)
        assert pool.get(StatName.VEIL) == 3
