"""
Pydantic models for Johnson game state.

Runners, contract nodes, stat pools and the player ledger.
Designed to serialize to JSON/YAML; rules live in johnson.rules as pure
functions that read these models.
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class RunnerType(str, Enum):
    HACKER = "Hacker"
    FACE = "Face"
    NINJA = "Ninja"
    MUSCLE = "Muscle"

    @property
    def main_stat(self) -> "RunnerStatName":
        """The stat a runner of this type specialises in."""
        return RunnerStatName(self.value.lower())

    @classmethod
    def lookup(cls, text: str) -> "RunnerType | None":
        """Case-insensitive lookup by display name."""
        lowered = text.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return None


class RunnerStatName(str, Enum):
    FACE = "face"
    MUSCLE = "muscle"
    HACKER = "hacker"
    NINJA = "ninja"


class NodeColor(str, Enum):
    RED = "Red"
    YELLOW = "Yellow"
    GREEN = "Green"
    BLUE = "Blue"
    PURPLE = "Purple"
    GREY = "Grey"

    @classmethod
    def lookup(cls, text: str) -> "NodeColor | None":
        """Case-insensitive lookup by display name."""
        lowered = text.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return None


class NodeType(str, Enum):
    NORMAL = "Normal"
    SYNERGY = "Synergy"      # Always selectable, contributes effects
    GATE = "Gate"            # Threshold-locked, display-only color, no effects


class StatName(str, Enum):
    """The five pool stats an effect can target."""
    DAMAGE = "Damage"
    RISK = "Risk"
    MONEY = "Money"
    GRIT = "Grit"
    VEIL = "Veil"

    @property
    def field(self) -> str:
        return self.value.lower()

    @classmethod
    def lookup(cls, text: str) -> "StatName | None":
        """Case-insensitive lookup, e.g. 'damage' -> DAMAGE."""
        lowered = text.strip().lower()
        for member in cls:
            if member.field == lowered:
                return member
        return None


class LifecycleState(str, Enum):
    READY = "Ready"
    INJURED = "Injured"
    DEAD = "Dead"            # Terminal


class HiringState(str, Enum):
    HIRED = "Hired"
    UNHIRED = "Unhired"


# -----------------------------------------------------------------------------
# Runners
# -----------------------------------------------------------------------------

class RunnerStats(BaseModel):
    """Per-runner skill ratings."""
    face: int = Field(default=0, ge=0)
    muscle: int = Field(default=0, ge=0)
    hacker: int = Field(default=0, ge=0)
    ninja: int = Field(default=0, ge=0)

    def get(self, stat: RunnerStatName | str) -> int:
        return getattr(self, RunnerStatName(stat).value)

    @property
    def total(self) -> int:
        return self.face + self.muscle + self.hacker + self.ninja


class Runner(BaseModel):
    """
    A hireable contractor.

    lifecycle_state and hiring_state are only mutated through
    johnson.systems.roster (hire/unhire, injure/kill/recover).
    """
    id: str = Field(default_factory=lambda: str(uuid4())[:8])
    name: str
    type: RunnerType
    level: int = Field(default=1, ge=1)
    stats: RunnerStats = Field(default_factory=RunnerStats)
    lifecycle_state: LifecycleState = LifecycleState.READY
    hiring_state: HiringState = HiringState.UNHIRED
    times_hired: int = 0
    contracts_completed: int = 0

    @property
    def is_dead(self) -> bool:
        return self.lifecycle_state == LifecycleState.DEAD

    @property
    def is_hired(self) -> bool:
        return self.hiring_state == HiringState.HIRED

    def label(self) -> str:
        return f"{self.name} ({self.type.value} L{self.level})"


# -----------------------------------------------------------------------------
# Contracts
# -----------------------------------------------------------------------------

class Node(BaseModel):
    """
    A single perk-tree node.

    Effects and gate conditions stay in their authored string form;
    johnson.rules.grammar parses them (cached) at recompute time so a bad
    string only disables itself.
    """
    id: str
    type: NodeType = NodeType.NORMAL
    color: NodeColor
    layer: int = 0
    slot: int = 0
    description: str = ""
    effects: list[str] = Field(default_factory=list, max_length=2)
    gate_condition: str | None = None
    connections: list[str] = Field(default_factory=list)

    @property
    def is_gate(self) -> bool:
        return self.type == NodeType.GATE

    @property
    def is_start(self) -> bool:
        """Layer 0 nodes open the tree."""
        return self.layer == 0

    @property
    def sort_key(self) -> tuple[int, int, str]:
        """Stable processing order: layer, then slot, then id."""
        return (self.layer, self.slot, self.id)


class Contract(BaseModel):
    """A loaded contract tree. Immutable once loaded."""
    id: str = Field(default_factory=lambda: str(uuid4())[:8])
    name: str = "Untitled Contract"
    nodes: list[Node] = Field(default_factory=list)

    @field_validator("nodes")
    @classmethod
    def _unique_ids(cls, nodes: list[Node]) -> list[Node]:
        seen: set[str] = set()
        for node in nodes:
            if node.id in seen:
                raise ValueError(f"Duplicate node id: {node.id}")
            seen.add(node.id)
        return nodes

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_map(self) -> dict[str, Node]:
        return {node.id: node for node in self.nodes}

    def predecessors(self, node_id: str) -> list[Node]:
        """Nodes whose connections point at node_id."""
        return [n for n in self.nodes if node_id in n.connections]


# -----------------------------------------------------------------------------
# Pools
# -----------------------------------------------------------------------------

class PoolState(BaseModel):
    """
    The five running totals.

    Rebuilt from zero on every recompute pass, never patched.
    """
    damage: float = 0.0
    risk: float = 0.0
    money: float = 0.0
    grit: float = 0.0
    veil: float = 0.0

    def get(self, stat: StatName) -> float:
        return getattr(self, stat.field)

    def set(self, stat: StatName, value: float) -> None:
        setattr(self, stat.field, value)

    def as_dict(self) -> dict[str, float]:
        return {stat.value: self.get(stat) for stat in StatName}


class PreventionResult(BaseModel):
    """Damage/Risk cancelled by Grit/Veil at the fixed 2:1 ratio."""
    damage_prevented: int = 0
    risk_prevented: int = 0


# -----------------------------------------------------------------------------
# Player
# -----------------------------------------------------------------------------

class PlayerState(BaseModel):
    """Cumulative player ledger across contracts."""
    money: int = 0
    risk: int = 0
    level: int = 1
    contracts_completed: int = 0
