"""
Read-only snapshot the condition and gate evaluators work from.

Built once per recompute pass from (contract, selection, runners) and,
for the second pass, the provisional prevention result. Dangling
selection ids are dropped here so evaluators never see them.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Iterable

from ..state.schema import (
    Contract,
    NodeColor,
    PreventionResult,
    Runner,
    RunnerStatName,
)


@dataclass(frozen=True)
class RuleContext:
    """Everything a condition may look at, and nothing else."""

    selected_ids: frozenset[str] = frozenset()
    runners: tuple[Runner, ...] = ()
    color_counts: dict[NodeColor, int] = field(default_factory=dict)
    prevention: PreventionResult | None = None

    @classmethod
    def build(
        cls,
        contract: Contract | None,
        selected: Iterable[str],
        runners: Iterable[Runner],
    ) -> "RuleContext":
        nodes = contract.node_map() if contract else {}
        selected_ids = frozenset(node_id for node_id in selected if node_id in nodes)

        # Gate colors are display-only
        counts = Counter(
            nodes[node_id].color
            for node_id in selected_ids
            if not nodes[node_id].is_gate
        )

        return cls(
            selected_ids=selected_ids,
            runners=tuple(runners),
            color_counts=dict(counts),
        )

    def with_prevention(self, prevention: PreventionResult) -> "RuleContext":
        """Copy of this context that prevention-based conditions can read."""
        return replace(self, prevention=prevention)

    def count_color(self, color: NodeColor) -> int:
        return self.color_counts.get(color, 0)

    def stat_total(self, stats: Iterable[RunnerStatName]) -> int:
        """Sum of the given stats across every configured runner."""
        stats = list(stats)
        return sum(runner.stats.get(stat) for runner in self.runners for stat in stats)
