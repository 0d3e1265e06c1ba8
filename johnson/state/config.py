"""
Balancing configuration persistence.

Stores tuning values (hiring cost, base reward, roll pacing, ...) in a
JSON file. Missing keys fall back to defaults.
"""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Invalid balancing configuration or content file."""
    pass


class MultiplicativePolicy(str, Enum):
    """How '*' and '/' effects scale with the condition's match count."""
    EXPONENT = "exponent"  # amount ** count
    LINEAR = "linear"      # amount * count

    def factor(self, amount: float, count: int) -> float:
        if self == MultiplicativePolicy.LINEAR:
            return amount * count
        return amount ** count


class BalancingConfig(BaseModel):
    """Tuning values for hiring, rewards and resolution."""
    hiring_cost: int = 150
    contract_base_reward: int = 1000
    player_level_per_contract: int = 1
    max_hired_runners: int = 3
    damage_roll_delay: int = 200  # ms between roll events, presentation only
    player_starting_money: int = 600
    runner_main_stat_allocation: int = 2
    runner_random_stat_allocation: int = 2
    generated_runner_batch_size: int = 5
    runner_stat_cap: int = 10
    multiplicative_policy: MultiplicativePolicy = MultiplicativePolicy.EXPONENT


DEFAULT_CONFIG_NAME = "balancing.json"


def get_config_path(config_dir: Path | str = ".") -> Path:
    """Get path to balancing file."""
    return Path(config_dir) / DEFAULT_CONFIG_NAME


def validate_config(config: BalancingConfig) -> list[str]:
    """Return human-readable problems with a config (empty when valid)."""
    errors = []

    if not 1 <= config.generated_runner_batch_size <= 20:
        errors.append("generated_runner_batch_size must be between 1 and 20")
    if config.hiring_cost < 0:
        errors.append("hiring_cost cannot be negative")
    if config.contract_base_reward < 0:
        errors.append("contract_base_reward cannot be negative")
    if config.damage_roll_delay < 0:
        errors.append("damage_roll_delay cannot be negative")
    if config.max_hired_runners < 1:
        errors.append("max_hired_runners must be at least 1")
    if config.runner_stat_cap < 1:
        errors.append("runner_stat_cap must be at least 1")

    return errors


def load_config(path: Path | str | None = None) -> BalancingConfig:
    """
    Load config from file, or return defaults if not found.

    Raises:
        ConfigError: If the file parses but holds out-of-range values
    """
    path = Path(path) if path is not None else get_config_path()

    if not path.exists():
        return BalancingConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        config = BalancingConfig.model_validate(saved)
    except (json.JSONDecodeError, IOError, ValidationError) as e:
        logger.warning("Unreadable balancing file %s, using defaults: %s", path, e)
        return BalancingConfig()

    errors = validate_config(config)
    if errors:
        raise ConfigError("; ".join(errors))
    return config


def save_config(config: BalancingConfig, path: Path | str | None = None) -> bool:
    """Save config to file. Returns True on success."""
    path = Path(path) if path is not None else get_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        return True
    except IOError:
        return False
