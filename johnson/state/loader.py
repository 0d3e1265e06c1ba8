"""
Contract and scenario files.

Contracts and scenarios are authored as YAML (JSON is valid YAML, so both
work). A scenario bundles everything needed to preview or resolve one
contract from the command line:

    contract: heist.yaml          # path relative to the scenario, or inline mapping
    seed: 42
    player: {money: 600}
    runners:
      - {name: Vex, type: Hacker, stats: {hacker: 3}, hiring_state: Hired}
    selected: [n1, n2]
    damage_table:                 # optional, defaults to the bundled table
      - {range: "1-10", effect: Injury}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .config import ConfigError
from .schema import Contract, PlayerState, Runner

logger = logging.getLogger(__name__)


class Scenario(BaseModel):
    """A contract plus the runners and selection to play it with."""
    contract: Contract
    runners: list[Runner] = Field(default_factory=list)
    selected: list[str] = Field(default_factory=list)
    player: PlayerState | None = None
    damage_table: list[dict[str, Any]] | None = None
    seed: int | None = None


def _read_document(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def _expect_mapping(data: Any, path: Path) -> dict:
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def load_contract(path: Path | str) -> Contract:
    """
    Load a contract file.

    Raises:
        ConfigError: Unreadable file or data that doesn't fit the model
    """
    path = Path(path)
    data = _expect_mapping(_read_document(path), path)
    try:
        contract = Contract.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid contract in {path}: {e}") from e

    logger.debug("Loaded contract %s from %s", contract.id, path)
    return contract


def load_scenario(path: Path | str) -> Scenario:
    """
    Load a scenario file, resolving a contract given by path.

    Raises:
        ConfigError: Unreadable file or data that doesn't fit the model
    """
    path = Path(path)
    data = dict(_expect_mapping(_read_document(path), path))

    contract = data.get("contract")
    if contract is None:
        raise ConfigError(f"{path} does not name a contract")
    if isinstance(contract, str):
        data["contract"] = load_contract(path.parent / contract)

    try:
        return Scenario.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid scenario in {path}: {e}") from e


def save_contract(contract: Contract, path: Path | str) -> Path:
    """Write a contract as YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            contract.model_dump(mode="json"),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    return path
