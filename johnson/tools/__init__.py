"""Shared tools: seedable dice."""

from .dice import Dice, RollResult

__all__ = ["Dice", "RollResult"]
