"""
Node availability for the contract tree.

A node is available (selectable) when it is not already selected and:
    - it is a Gate whose condition holds, sitting on layer 0 or after a
      selected predecessor, or
    - it sits on layer 0, or
    - it is a Synergy node, or
    - it is a Normal node with no predecessors or a selected predecessor.

Predecessors are the nodes whose `connections` name this node.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..rules.context import RuleContext
from ..rules.gates import is_gate_text_unlocked
from ..state.schema import Contract, Node, NodeType, Runner

logger = logging.getLogger(__name__)


def _predecessor_map(contract: Contract) -> dict[str, list[str]]:
    preds: dict[str, list[str]] = {node.id: [] for node in contract.nodes}
    for node in contract.nodes:
        for target in node.connections:
            if target in preds:
                preds[target].append(node.id)
    return preds


def _is_available(
    node: Node,
    predecessors: list[str],
    selected: frozenset[str],
    context: RuleContext,
) -> bool:
    if node.id in selected:
        return False

    has_selected_pred = any(pred in selected for pred in predecessors)

    if node.is_gate:
        if not node.is_start and not has_selected_pred:
            return False
        return is_gate_text_unlocked(node.gate_condition or "", context)

    if node.is_start or node.type == NodeType.SYNERGY:
        return True

    return not predecessors or has_selected_pred


def compute_availability(
    contract: Contract | None,
    selected: Iterable[str],
    runners: Iterable[Runner],
) -> dict[str, bool]:
    """
    Availability of every node in the contract.

    Returns:
        {node_id: available}; selected nodes map to False
    """
    if contract is None:
        return {}

    context = RuleContext.build(contract, selected, runners)
    preds = _predecessor_map(contract)

    return {
        node.id: _is_available(node, preds[node.id], context.selected_ids, context)
        for node in contract.nodes
    }


def is_available(
    contract: Contract,
    node_id: str,
    selected: Iterable[str],
    runners: Iterable[Runner],
) -> bool:
    """Whether one node can be selected right now (False for unknown ids)."""
    return compute_availability(contract, selected, runners).get(node_id, False)
