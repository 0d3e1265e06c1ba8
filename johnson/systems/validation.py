"""
Authoring checks for contract content.

Gameplay never raises on bad content (a broken effect is inert and a
broken gate stays locked). This module is the other side: it surfaces
every problem to the contract author in one list.
"""

from __future__ import annotations

from ..rules.grammar import ParseError, parse_effect, parse_gate
from ..state.schema import Contract


def validate_contract(contract: Contract) -> list[str]:
    """
    Check every node of a contract.

    Returns:
        Human-readable problems, in node order (empty when clean)
    """
    errors: list[str] = []
    ids = {node.id for node in contract.nodes}

    for node in contract.nodes:
        prefix = f"Node {node.id}"

        for raw in node.effects:
            if not raw or not raw.strip():
                continue
            try:
                parse_effect(raw.strip())
            except ParseError as e:
                errors.append(f"{prefix}: {e}")

        if node.is_gate:
            if not node.gate_condition:
                errors.append(f"{prefix}: Gate node has no gate condition")
            else:
                try:
                    parse_gate(node.gate_condition.strip())
                except ParseError as e:
                    errors.append(f"{prefix}: {e}")
            if node.effects:
                errors.append(f"{prefix}: Gate node effects are ignored")
        elif node.gate_condition:
            errors.append(f"{prefix}: gate condition on a {node.type.value} node is ignored")

        for target in node.connections:
            if target not in ids:
                errors.append(f"{prefix}: connection to unknown node '{target}'")
            elif target == node.id:
                errors.append(f"{prefix}: connects to itself")

    return errors
