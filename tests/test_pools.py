"""
Tests for the two-pass pool recompute.

recompute_pools is a pure function of (contract, selection, runners):
every call starts from an empty pool.
"""

import itertools

import pytest

from johnson.state.config import MultiplicativePolicy
from johnson.state.schema import NodeColor, NodeType, RunnerType
from johnson.systems.pools import ordered_selection, recompute_pools

from conftest import make_contract, make_node, make_runner


class TestRecompute:
    """Basic accumulation across selected nodes."""

    def test_empty_selection(self):
        contract = make_contract(make_node("a", effects=["None;+;5;Money"]))
        breakdown = recompute_pools(contract, [], [])
        assert breakdown.pool.money == 0

    def test_no_contract(self):
        breakdown = recompute_pools(None, ["a"], [])
        assert breakdown.pool.as_dict() == {s: 0 for s in ("Damage", "Risk", "Money", "Grit", "Veil")}

    def test_runner_type_scaled_effect(self, crew):
        contract = make_contract(make_node("a", effects=["RunnerType:Hacker;+;5;Money"]))
        breakdown = recompute_pools(contract, ["a"], crew)
        assert breakdown.pool.money == 10

    def test_two_effects_per_node(self):
        contract = make_contract(make_node("a", effects=["None;+;3;Damage", "None;+;4;Grit"]))
        pool = recompute_pools(contract, ["a"], []).pool
        assert pool.damage == 3
        assert pool.grit == 4

    def test_recompute_starts_from_zero(self):
        contract = make_contract(make_node("a", effects=["None;+;5;Money"]))
        first = recompute_pools(contract, ["a"], [])
        second = recompute_pools(contract, ["a"], [])
        assert first.pool.money == second.pool.money == 5

    def test_gate_nodes_contribute_nothing(self):
        contract = make_contract(
            make_node("g", node_type=NodeType.GATE, effects=["None;+;5;Money"],
                      gate_condition="RunnerType:hacker;0"),
        )
        assert recompute_pools(contract, ["g"], []).pool.money == 0

    def test_duplicate_and_dangling_ids(self):
        contract = make_contract(make_node("a", effects=["None;+;5;Money"]))
        assert recompute_pools(contract, ["a", "a", "ghost"], []).pool.money == 5

    def test_non_money_stats_floor_at_zero(self):
        contract = make_contract(make_node("a", effects=["None;-;5;Risk", "None;-;5;Money"]))
        pool = recompute_pools(contract, ["a"], []).pool
        assert pool.risk == 0
        assert pool.money == -5


class TestBadContent:
    """One bad effect never breaks the preview."""

    def test_malformed_effect_is_inert(self):
        contract = make_contract(
            make_node("a", effects=["None;+;5;Gold", "None;+;5;Money"]),
        )
        breakdown = recompute_pools(contract, ["a"], [])
        assert breakdown.pool.money == 5
        assert len(breakdown.warnings) == 1
        assert "Gold" in breakdown.warnings[0]

    def test_divide_by_zero_reported_once(self, caplog):
        contract = make_contract(make_node("a", effects=["None;/;0;Damage"]))
        breakdown = recompute_pools(contract, ["a"], [])
        assert len(breakdown.warnings) == 1
        assert "division by zero" in breakdown.warnings[0]
        assert caplog.text.count("division by zero") == 1


class TestPrevention:
    """Two passes: prevention effects read pass-1 Grit/Veil."""

    def test_risk_dam_pair(self):
        contract = make_contract(
            make_node("a", effects=["None;+;8;Grit", "None;+;10;Veil"]),
            make_node("b", layer=1, effects=["RiskDamPair;+;1;Money"]),
        )
        breakdown = recompute_pools(contract, ["a", "b"], [])
        assert breakdown.prevention.damage_prevented == 4
        assert breakdown.prevention.risk_prevented == 5
        assert breakdown.pool.money == 4

    def test_prev_dam_reads_provisional_prevention(self):
        # Pass 2 adds Grit, but PrevDam still sees the pass-1 value
        contract = make_contract(
            make_node("a", effects=["None;+;6;Grit"]),
            make_node("b", layer=1, effects=["PrevDam;+;2;Grit"]),
        )
        breakdown = recompute_pools(contract, ["a", "b"], [])
        assert breakdown.provisional_prevention.damage_prevented == 3
        assert breakdown.pool.grit == 12
        assert breakdown.prevention.damage_prevented == 6

    def test_prevention_effect_runs_after_later_nodes(self):
        # "b" comes first in node order but still sees "c"'s Veil
        contract = make_contract(
            make_node("b", layer=0, effects=["PrevRisk;+;10;Money"]),
            make_node("c", layer=1, effects=["None;+;4;Veil"]),
        )
        assert recompute_pools(contract, ["b", "c"], []).pool.money == 20

    def test_unprevented(self):
        contract = make_contract(
            make_node("a", effects=["None;+;7;Damage", "None;+;4;Grit"]),
            make_node("b", effects=["None;+;3;Risk", "None;+;9;Veil"]),
        )
        breakdown = recompute_pools(contract, ["a", "b"], [])
        assert breakdown.unprevented_damage == 5
        assert breakdown.unprevented_risk == 0


class TestOrdering:
    """Order independence for +/-/% and stability for * and /."""

    def test_order_independent_for_additive(self):
        nodes = [
            make_node("a", color=NodeColor.RED, effects=["None;+;5;Money"]),
            make_node("b", color=NodeColor.BLUE, effects=["None;-;2;Risk", "None;+;6;Risk"]),
            make_node("c", color=NodeColor.GREEN, effects=["NodeColor:Red;+;3;Grit"]),
            make_node("d", color=NodeColor.RED, effects=["None;%;50;Money"]),
        ]
        results = set()
        for perm in itertools.permutations(nodes):
            contract = make_contract(*perm)
            for selection in itertools.permutations(["a", "b", "c", "d"]):
                pool = recompute_pools(contract, selection, []).pool
                results.add(tuple(sorted(pool.as_dict().items())))
        assert len(results) == 1

    def test_percent_applies_to_pass_total(self):
        # % runs after the other effects of its pass even when its node is first
        contract = make_contract(
            make_node("a", layer=0, effects=["None;%;50;Money"]),
            make_node("b", layer=1, effects=["None;+;10;Money"]),
        )
        assert recompute_pools(contract, ["a", "b"], []).pool.money == 15

    def test_multiplicative_uses_layer_slot_id(self):
        nodes = [
            make_node("x", layer=1, slot=0, effects=["None;*;2;Money"]),
            make_node("y", layer=0, slot=5, effects=["None;+;3;Money"]),
        ]
        forward = recompute_pools(make_contract(*nodes), ["x", "y"], [])
        backward = recompute_pools(make_contract(*reversed(nodes)), ["y", "x"], [])
        assert forward.pool.money == backward.pool.money == 6

    def test_ordered_selection_sort_key(self):
        contract = make_contract(
            make_node("b", layer=1, slot=0),
            make_node("a", layer=1, slot=0),
            make_node("c", layer=0, slot=9),
        )
        assert [n.id for n in ordered_selection(contract, ["a", "b", "c"])] == ["c", "a", "b"]

    def test_linear_policy(self):
        contract = make_contract(
            make_node("a", effects=["None;+;3;Grit"]),
            make_node("b", layer=1, effects=["RunnerType:Hacker;*;2;Grit"]),
        )
        runners = [make_runner(RunnerType.HACKER) for _ in range(3)]
        exponent = recompute_pools(contract, ["a", "b"], runners)
        linear = recompute_pools(contract, ["a", "b"], runners, MultiplicativePolicy.LINEAR)
        assert exponent.pool.grit == 24
        assert linear.pool.grit == 18


@pytest.mark.parametrize("count", [0, 1, 5])
def test_sample_throughput(count):
    """Large contracts recompute without error."""
    nodes = [
        make_node(f"n{i}", color=list(NodeColor)[i % 6], layer=i // 10, slot=i % 10,
                  effects=["NodeColorCombo:Red,Blue;+;1;Money", "ColorForEach;+;1;Grit"])
        for i in range(300)
    ]
    contract = make_contract(*nodes)
    selected = [n.id for n in nodes][: count * 50]
    breakdown = recompute_pools(contract, selected, [])
    assert breakdown.pool.money >= 0
