"""
Pytest fixtures for Johnson tests.

Provides runner/node/contract builders and a fresh event bus per test.
"""

import pytest
from pathlib import Path

# Add repo root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from johnson.state.config import BalancingConfig
from johnson.state.event_bus import reset_event_bus
from johnson.state.schema import (
    Contract,
    HiringState,
    Node,
    NodeColor,
    NodeType,
    PlayerState,
    Runner,
    RunnerStats,
    RunnerType,
)
from johnson.systems.damage_table import DamageTable
from johnson.tools.dice import Dice


_node_counter = {"n": 0}


def make_runner(
    runner_type: RunnerType = RunnerType.HACKER,
    name: str | None = None,
    hired: bool = False,
    **stats,
) -> Runner:
    """Runner with the given stats (face/muscle/hacker/ninja keywords)."""
    return Runner(
        name=name or f"{runner_type.value} Runner",
        type=runner_type,
        stats=RunnerStats(**stats),
        hiring_state=HiringState.HIRED if hired else HiringState.UNHIRED,
    )


def make_node(
    node_id: str | None = None,
    color: NodeColor = NodeColor.RED,
    effects: list[str] | None = None,
    node_type: NodeType = NodeType.NORMAL,
    layer: int = 0,
    slot: int = 0,
    gate_condition: str | None = None,
    connections: list[str] | None = None,
) -> Node:
    if node_id is None:
        _node_counter["n"] += 1
        node_id = f"node{_node_counter['n']}"
    return Node(
        id=node_id,
        type=node_type,
        color=color,
        layer=layer,
        slot=slot,
        effects=effects or [],
        gate_condition=gate_condition,
        connections=connections or [],
    )


def make_contract(*nodes: Node, contract_id: str = "test") -> Contract:
    return Contract(id=contract_id, name="Test Contract", nodes=list(nodes))


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Every test gets its own event bus."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def config():
    return BalancingConfig()


@pytest.fixture
def player():
    return PlayerState(money=600)


@pytest.fixture
def dice():
    """Seeded dice so random paths are reproducible."""
    return Dice(1234)


@pytest.fixture
def crew():
    """Two Hackers and a Muscle."""
    return [
        make_runner(RunnerType.HACKER, name="Vex", hacker=3),
        make_runner(RunnerType.HACKER, name="Ping", hacker=2, ninja=1),
        make_runner(RunnerType.MUSCLE, name="Bruno", muscle=4, face=1),
    ]


@pytest.fixture
def injury_table():
    """Every roll is an Injury."""
    return DamageTable.from_rows([{"range": "1-10", "effect": "Injury"}])


@pytest.fixture
def quiet_table():
    """Every roll does nothing."""
    return DamageTable.from_rows([{"range": "1-10", "effect": "No Effect"}])
