"""State management for Johnson contracts."""

from .schema import (
    RunnerType,
    RunnerStatName,
    NodeColor,
    NodeType,
    StatName,
    LifecycleState,
    HiringState,
    RunnerStats,
    Runner,
    Node,
    Contract,
    PoolState,
    PreventionResult,
    PlayerState,
)
from .config import (
    BalancingConfig,
    ConfigError,
    MultiplicativePolicy,
    load_config,
    save_config,
    validate_config,
)
from .event_bus import (
    EventBus,
    EventType,
    GameEvent,
    get_event_bus,
    reset_event_bus,
)
from .loader import Scenario, load_contract, load_scenario, save_contract

__all__ = [
    # Schema
    "RunnerType",
    "RunnerStatName",
    "NodeColor",
    "NodeType",
    "StatName",
    "LifecycleState",
    "HiringState",
    "RunnerStats",
    "Runner",
    "Node",
    "Contract",
    "PoolState",
    "PreventionResult",
    "PlayerState",
    # Config
    "BalancingConfig",
    "ConfigError",
    "MultiplicativePolicy",
    "load_config",
    "save_config",
    "validate_config",
    # Events
    "EventBus",
    "EventType",
    "GameEvent",
    "get_event_bus",
    "reset_event_bus",
    # Files
    "Scenario",
    "load_contract",
    "load_scenario",
    "save_contract",
]
