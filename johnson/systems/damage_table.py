"""
Damage outcome table.

Rows map a roll range to an outcome:

    - range: "1-20"
      effect: Injury
    - range: "26-45"
      effect: Reduce 15

Effects: Injury, Death, Reduce <X>, Extra <X>, No Effect.
Rolls are drawn from 1..max_roll, where max_roll is read from the rows
every time so edits to the table change the roll bounds.
"""

from __future__ import annotations

import logging
from enum import Enum
from importlib import resources
from typing import Iterable

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..state.config import ConfigError
from ..tools.dice import Dice

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    INJURY = "Injury"
    DEATH = "Death"
    REDUCE = "Reduce"      # reward * (1 - X/100)
    EXTRA = "Extra"        # reward * (1 + X/100)
    NO_EFFECT = "No Effect"

    @property
    def takes_value(self) -> bool:
        return self in (OutcomeKind.REDUCE, OutcomeKind.EXTRA)


def _parse_effect_text(effect_text: str) -> tuple[OutcomeKind, float]:
    for kind in OutcomeKind:
        if effect_text.lower() == kind.value.lower():
            if kind.takes_value:
                raise ConfigError(f"{kind.value} needs a percentage: {effect_text!r}")
            return kind, 0.0

    word, _, number = effect_text.partition(" ")
    kind = next((k for k in OutcomeKind if k.takes_value and k.value.lower() == word.lower()), None)
    if kind is None:
        raise ConfigError(f"Unknown damage effect: {effect_text!r}")
    try:
        return kind, float(number)
    except ValueError:
        raise ConfigError(f"Bad percentage in {effect_text!r}") from None


class DamageOutcome(BaseModel):
    """One table row."""
    min_roll: int = Field(ge=1)
    max_roll: int = Field(ge=1)
    kind: OutcomeKind
    value: float = 0.0

    @model_validator(mode="after")
    def _ordered_range(self) -> "DamageOutcome":
        if self.max_roll < self.min_roll:
            raise ValueError(f"Range {self.min_roll}-{self.max_roll} is backwards")
        return self

    @classmethod
    def parse(cls, range_text: str | int, effect_text: str) -> "DamageOutcome":
        """
        Build a row from its authored strings.

        Raises:
            ConfigError: Unreadable range or effect
        """
        low, _, high = str(range_text).strip().partition("-")
        try:
            min_roll = int(low)
            max_roll = int(high) if high.strip() else min_roll
        except ValueError:
            raise ConfigError(f"Bad roll range: {range_text!r}") from None

        kind, value = _parse_effect_text(str(effect_text).strip())
        try:
            return cls(min_roll=min_roll, max_roll=max_roll, kind=kind, value=value)
        except ValidationError as e:
            raise ConfigError(f"Bad damage table row {range_text!r}: {e}") from e

    def covers(self, roll: int) -> bool:
        return self.min_roll <= roll <= self.max_roll

    def describe(self) -> str:
        if self.kind.takes_value:
            return f"{self.kind.value} {self.value:g}"
        return self.kind.value


class DamageTable(BaseModel):
    """Ordered outcome rows; the first row covering a roll wins."""
    rows: list[DamageOutcome] = Field(default_factory=list)

    @property
    def max_roll(self) -> int:
        """Highest roll any row covers (0 for an empty table)."""
        return max((row.max_roll for row in self.rows), default=0)

    def lookup(self, roll: int) -> DamageOutcome | None:
        for row in self.rows:
            if row.covers(roll):
                return row
        return None

    @classmethod
    def from_rows(cls, rows: Iterable[dict]) -> "DamageTable":
        """Parse authored rows ({"range": ..., "effect": ...})."""
        parsed = []
        for i, row in enumerate(rows, 1):
            if not isinstance(row, dict) or "range" not in row or "effect" not in row:
                raise ConfigError(f"Damage table row {i} needs 'range' and 'effect'")
            parsed.append(DamageOutcome.parse(row["range"], row["effect"]))
        return cls(rows=parsed)


def default_damage_table() -> DamageTable:
    """The table shipped in johnson/data/damage_table.yaml."""
    text = resources.files("johnson.data").joinpath("damage_table.yaml").read_text(encoding="utf-8")
    return DamageTable.from_rows(yaml.safe_load(text))


def roll_damage(dice: Dice, table: DamageTable) -> tuple[int, DamageOutcome | None]:
    """
    Roll once against the table.

    Returns:
        (rolled number, matching row or None when no row covers it)

    Raises:
        ValueError: If the table is empty
    """
    if table.max_roll < 1:
        raise ValueError("Damage table has no rows")
    roll = dice.roll(table.max_roll).value
    outcome = table.lookup(roll)
    if outcome is None:
        logger.warning("No damage table entry for roll %d", roll)
    return roll, outcome
