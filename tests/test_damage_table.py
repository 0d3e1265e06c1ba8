"""Tests for damage table parsing and rolling."""

import pytest

from johnson.state.config import ConfigError
from johnson.systems.damage_table import (
    DamageOutcome,
    DamageTable,
    OutcomeKind,
    default_damage_table,
    roll_damage,
)
from johnson.tools.dice import Dice


class TestParseRow:
    """Authored row strings."""

    def test_range(self):
        row = DamageOutcome.parse("1-10", "Injury")
        assert (row.min_roll, row.max_roll, row.kind) == (1, 10, OutcomeKind.INJURY)

    def test_single_value(self):
        row = DamageOutcome.parse("7", "Death")
        assert row.min_roll == row.max_roll == 7

    def test_integer_range(self):
        assert DamageOutcome.parse(3, "Death").max_roll == 3

    def test_reduce_and_extra_values(self):
        assert DamageOutcome.parse("1-5", "Reduce 15").value == 15
        extra = DamageOutcome.parse("6", "Extra 5")
        assert extra.kind == OutcomeKind.EXTRA
        assert extra.value == 5

    def test_no_effect(self):
        assert DamageOutcome.parse("1", "No Effect").kind == OutcomeKind.NO_EFFECT

    def test_case_insensitive_effect(self):
        assert DamageOutcome.parse("1", "injury").kind == OutcomeKind.INJURY

    @pytest.mark.parametrize("range_text,effect", [
        ("a-b", "Injury"),
        ("1-5", "Explode"),
        ("1-5", "Reduce"),
        ("1-5", "Reduce lots"),
        ("9-3", "Injury"),
        ("0", "Injury"),
    ])
    def test_bad_rows(self, range_text, effect):
        with pytest.raises(ConfigError):
            DamageOutcome.parse(range_text, effect)

    def test_describe(self):
        assert DamageOutcome.parse("1", "Reduce 15").describe() == "Reduce 15"
        assert DamageOutcome.parse("1", "Injury").describe() == "Injury"


class TestTable:
    """Lookup and the dynamic roll bound."""

    def test_max_roll_tracks_rows(self):
        table = DamageTable.from_rows([{"range": "1-10", "effect": "Injury"}])
        assert table.max_roll == 10
        table.rows.append(DamageOutcome.parse("11-12", "Death"))
        assert table.max_roll == 12

    def test_single_value_rows_size(self):
        table = DamageTable.from_rows(
            [{"range": str(i), "effect": "No Effect"} for i in range(1, 7)]
        )
        assert table.max_roll == len(table.rows) == 6

    def test_empty_table(self):
        assert DamageTable().max_roll == 0

    def test_first_match_wins(self):
        table = DamageTable.from_rows([
            {"range": "1-5", "effect": "Injury"},
            {"range": "3-8", "effect": "Death"},
        ])
        assert table.lookup(4).kind == OutcomeKind.INJURY
        assert table.lookup(7).kind == OutcomeKind.DEATH
        assert table.lookup(9) is None

    def test_row_missing_keys(self):
        with pytest.raises(ConfigError, match="row 1"):
            DamageTable.from_rows([{"range": "1-5"}])

    def test_default_table_covers_one_to_hundred(self):
        table = default_damage_table()
        assert table.max_roll == 100
        assert all(table.lookup(roll) is not None for roll in range(1, 101))


class TestRollDamage:
    """Rolling against a table."""

    def test_roll_in_bounds(self):
        table = DamageTable.from_rows([{"range": "1-4", "effect": "Injury"}])
        dice = Dice(3)
        for _ in range(50):
            roll, outcome = roll_damage(dice, table)
            assert 1 <= roll <= 4
            assert outcome.kind == OutcomeKind.INJURY

    def test_gap_is_no_match(self):
        table = DamageTable.from_rows([{"range": "5", "effect": "Injury"}])
        rolls = [roll_damage(Dice(seed), table) for seed in range(30)]
        assert any(outcome is None for _, outcome in rolls)

    def test_empty_table_raises(self):
        with pytest.raises(ValueError, match="no rows"):
            roll_damage(Dice(1), DamageTable())

    def test_seeded(self):
        table = default_damage_table()
        assert roll_damage(Dice(9), table) == roll_damage(Dice(9), table)
