"""
Tests for condition counting.

Conditions answer "how many matches", except RunnerStat which is a
threshold check and answers with a bool.
"""

import pytest

from johnson.rules.conditions import count_matches
from johnson.rules.context import RuleContext
from johnson.rules.grammar import parse_condition
from johnson.state.schema import NodeColor, NodeType, PreventionResult, RunnerType

from conftest import make_contract, make_node, make_runner


def context_for(colors, runners=(), gate_colors=(), prevention=None):
    """Context with one selected node per listed color."""
    nodes = [make_node(f"c{i}", color=color) for i, color in enumerate(colors)]
    nodes += [
        make_node(f"g{i}", color=color, node_type=NodeType.GATE)
        for i, color in enumerate(gate_colors)
    ]
    contract = make_contract(*nodes)
    ctx = RuleContext.build(contract, [n.id for n in nodes], runners)
    return ctx.with_prevention(prevention) if prevention else ctx


class TestBasicCounts:
    """None, RunnerType and NodeColor."""

    def test_none_is_one(self):
        assert count_matches(parse_condition("None"), RuleContext()) == 1

    def test_runner_type_counts_runners(self, crew):
        ctx = RuleContext.build(None, [], crew)
        assert count_matches(parse_condition("RunnerType:Hacker"), ctx) == 2
        assert count_matches(parse_condition("RunnerType:Muscle"), ctx) == 1
        assert count_matches(parse_condition("RunnerType:Face"), ctx) == 0

    def test_node_color_counts_selected(self):
        ctx = context_for([NodeColor.RED, NodeColor.RED, NodeColor.BLUE])
        assert count_matches(parse_condition("NodeColor:Red"), ctx) == 2

    def test_node_color_skips_gates(self):
        ctx = context_for([NodeColor.RED], gate_colors=[NodeColor.RED, NodeColor.RED])
        assert count_matches(parse_condition("NodeColor:Red"), ctx) == 1

    def test_unselected_nodes_do_not_count(self):
        contract = make_contract(
            make_node("a", color=NodeColor.RED),
            make_node("b", color=NodeColor.RED),
        )
        ctx = RuleContext.build(contract, ["a"], [])
        assert count_matches(parse_condition("NodeColor:Red"), ctx) == 1

    def test_dangling_selection_ids_count_zero(self):
        contract = make_contract(make_node("a", color=NodeColor.RED))
        ctx = RuleContext.build(contract, ["ghost"], [])
        assert count_matches(parse_condition("NodeColor:Red"), ctx) == 0


class TestNodeColorCombo:
    """Complete sets, limited by the scarcest color."""

    def test_scarcest_color_limits_sets(self):
        colors = [NodeColor.RED] * 4 + [NodeColor.BLUE] * 3 + [NodeColor.GREEN] * 5
        ctx = context_for(colors)
        condition = parse_condition("NodeColorCombo:Red,Blue,Green")
        assert count_matches(condition, ctx) == 3

    def test_missing_color_gives_zero(self):
        colors = [NodeColor.RED] * 5 + [NodeColor.GREEN] * 3
        ctx = context_for(colors)
        condition = parse_condition("NodeColorCombo:Red,Blue,Green")
        assert count_matches(condition, ctx) == 0

    def test_gate_colors_do_not_complete_sets(self):
        ctx = context_for([NodeColor.RED], gate_colors=[NodeColor.BLUE])
        assert count_matches(parse_condition("NodeColorCombo:Red,Blue"), ctx) == 0


class TestRunnerStat:
    """RunnerStat sums across runners and compares once."""

    def test_returns_bool(self, crew):
        ctx = RuleContext.build(None, [], crew)
        result = count_matches(parse_condition("RunnerStat:hacker>=5"), ctx)
        assert result is True

    def test_threshold_not_met(self, crew):
        ctx = RuleContext.build(None, [], crew)
        assert count_matches(parse_condition("RunnerStat:hacker>5"), ctx) is False

    def test_not_scaled_by_how_far_over(self, crew):
        ctx = RuleContext.build(None, [], crew)
        assert count_matches(parse_condition("RunnerStat:hacker>=1"), ctx) == 1

    def test_multi_stat_sum(self, crew):
        ctx = RuleContext.build(None, [], crew)
        # face 1 + muscle 4
        assert count_matches(parse_condition("RunnerStat:face+muscle==5"), ctx) is True

    def test_no_runners(self):
        assert count_matches(parse_condition("RunnerStat:face<1"), RuleContext()) is True
        assert count_matches(parse_condition("RunnerStat:face>=1"), RuleContext()) is False


class TestPreventionConditions:
    """PrevDam, PrevRisk and RiskDamPair read the prevention result."""

    def test_without_prevention_all_zero(self):
        ctx = RuleContext()
        for text in ("PrevDam", "PrevRisk", "RiskDamPair"):
            assert count_matches(parse_condition(text), ctx) == 0

    def test_prev_dam_and_risk(self):
        ctx = RuleContext().with_prevention(PreventionResult(damage_prevented=4, risk_prevented=5))
        assert count_matches(parse_condition("PrevDam"), ctx) == 4
        assert count_matches(parse_condition("PrevRisk"), ctx) == 5

    def test_risk_dam_pair_is_min(self):
        ctx = RuleContext().with_prevention(PreventionResult(damage_prevented=4, risk_prevented=5))
        assert count_matches(parse_condition("RiskDamPair"), ctx) == 4


class TestColorForEach:
    """Distinct colors among selected non-Gate nodes."""

    def test_counts_distinct_colors(self):
        ctx = context_for(
            [NodeColor.RED, NodeColor.RED, NodeColor.RED, NodeColor.BLUE],
            gate_colors=[NodeColor.RED],
        )
        assert count_matches(parse_condition("ColorForEach"), ctx) == 2

    def test_gate_only_color_not_counted(self):
        ctx = context_for([NodeColor.RED], gate_colors=[NodeColor.PURPLE])
        assert count_matches(parse_condition("ColorForEach"), ctx) == 1

    def test_nothing_selected(self):
        assert count_matches(parse_condition("ColorForEach"), RuleContext()) == 0


class TestDeterminism:
    """Evaluation only depends on its inputs."""

    @pytest.mark.parametrize("text", ["RunnerType:Hacker", "NodeColor:Red", "ColorForEach"])
    def test_repeatable(self, text, crew):
        ctx = context_for([NodeColor.RED, NodeColor.BLUE], runners=crew)
        condition = parse_condition(text)
        assert count_matches(condition, ctx) == count_matches(condition, ctx)

    def test_runner_order_irrelevant(self, crew):
        forward = RuleContext.build(None, [], crew)
        backward = RuleContext.build(None, [], list(reversed(crew)))
        condition = parse_condition("RunnerType:Hacker")
        assert count_matches(condition, forward) == count_matches(condition, backward)

    def test_unregistered_kind_counts_zero(self):
        class Mystery:
            pass
        assert count_matches(Mystery(), RuleContext()) == 0


def test_runner_type_lookup_case_insensitive():
    ctx = RuleContext.build(None, [], [make_runner(RunnerType.NINJA)])
    assert count_matches(parse_condition("RunnerType:ninja"), ctx) == 1
