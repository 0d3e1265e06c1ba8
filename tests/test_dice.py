"""Tests for seedable dice."""

import pytest

from johnson.tools.dice import Dice


class TestDice:

    def test_roll_range(self):
        dice = Dice(0)
        values = {dice.roll(6).value for _ in range(200)}
        assert values == {1, 2, 3, 4, 5, 6}

    def test_same_seed_same_sequence(self):
        a, b = Dice(42), Dice(42)
        assert [a.roll(100).value for _ in range(20)] == [b.roll(100).value for _ in range(20)]

    def test_reseed_restarts(self):
        dice = Dice(8)
        first = [dice.roll(20).value for _ in range(5)]
        dice.reseed(8)
        assert [dice.roll(20).value for _ in range(5)] == first

    def test_pick(self):
        assert Dice(1).pick(["only"]) == "only"

    def test_pick_empty(self):
        with pytest.raises(ValueError, match="empty"):
            Dice(1).pick([])

    def test_zero_sides(self):
        with pytest.raises(ValueError, match="0 sides"):
            Dice(1).roll(0)

    def test_is_max(self):
        dice = Dice(3)
        results = [dice.roll(2) for _ in range(50)]
        assert any(r.is_max for r in results)
        assert all(r.is_max == (r.value == 2) for r in results)
