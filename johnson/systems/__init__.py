"""
Game systems built on the pure rules.

Pool recompute, node availability, roster/lifecycle, the damage table,
the contract resolver and the session facade that drives them.
"""

from .pools import PoolBreakdown, recompute_pools
from .availability import compute_availability, is_available
from .roster import (
    LIFECYCLE_TRANSITIONS,
    HireResult,
    LifecycleError,
    Roster,
    generate_batch,
    generate_runner,
    injure,
    kill,
    recover,
    transition,
)
from .damage_table import (
    DamageOutcome,
    DamageTable,
    OutcomeKind,
    default_damage_table,
    roll_damage,
)
from .resolution import (
    ContractResolver,
    InvalidPhaseError,
    ResolutionError,
    ResolutionPhase,
)
from .session import ContractSession
from .validation import validate_contract

__all__ = [
    "PoolBreakdown",
    "recompute_pools",
    "compute_availability",
    "is_available",
    "LIFECYCLE_TRANSITIONS",
    "HireResult",
    "LifecycleError",
    "Roster",
    "generate_batch",
    "generate_runner",
    "injure",
    "kill",
    "recover",
    "transition",
    "DamageOutcome",
    "DamageTable",
    "OutcomeKind",
    "default_damage_table",
    "roll_damage",
    "ContractResolver",
    "InvalidPhaseError",
    "ResolutionError",
    "ResolutionPhase",
    "ContractSession",
    "validate_contract",
]
