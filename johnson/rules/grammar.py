"""
Effect and gate condition grammar.

Effect strings:
    <Condition>;<Operator>;<Amount>;<Stat>

    None;+;5;Money
    RunnerType:Hacker;+;50;Money
    NodeColorCombo:Red,Blue;*;2;Grit
    RunnerStat:face+muscle>=6;-;1;Risk
    PrevDam;%;10;Money

Gate strings:
    RunnerType:<Type1>,<Type2>,...;<MinCount>
    RunnerStat:<Stat1>,<Stat2>,...;<MinSum>
    Node:<Id1>,<Id2>,...;<Threshold>      (0 = all listed nodes)

Parsing is pure; parse_effect/parse_gate are cached per distinct string.
Every parsed type serializes back to a string that parses to an equal value.

New condition kinds are added by declaring a class with a `keyword` and
decorating it with @register_condition (or @register_gate). The evaluator
side registers separately in rules.conditions / rules.gates.
"""

from __future__ import annotations

import math
import operator as _op
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Callable, ClassVar

from ..state.schema import NodeColor, RunnerStatName, RunnerType, StatName


class ParseError(ValueError):
    """Malformed effect or gate string."""

    def __init__(self, message: str, token: str, source: str = ""):
        self.token = token
        self.source = source
        detail = f"{message}: '{token}'"
        if source:
            detail += f" in '{source}'"
        super().__init__(detail)


# -----------------------------------------------------------------------------
# Operators
# -----------------------------------------------------------------------------

class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    PERCENT = "%"

    @property
    def is_multiplicative(self) -> bool:
        return self in (Operator.MULTIPLY, Operator.DIVIDE)


class Comparison(str, Enum):
    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    EQ = "=="

    def holds(self, left: float, right: float) -> bool:
        return _COMPARATORS[self](left, right)


_COMPARATORS: dict[Comparison, Callable[[float, float], bool]] = {
    Comparison.GE: _op.ge,
    Comparison.LE: _op.le,
    Comparison.GT: _op.gt,
    Comparison.LT: _op.lt,
    Comparison.EQ: _op.eq,
}

# Longest symbols first so ">=" is never read as ">"
_COMPARISON_TOKENS: list[tuple[str, Comparison]] = [
    (">=", Comparison.GE),
    ("<=", Comparison.LE),
    ("==", Comparison.EQ),
    (">", Comparison.GT),
    ("<", Comparison.LT),
    ("=", Comparison.EQ),
]


def format_number(value: float) -> str:
    """Render an amount the way authors write it: 5 not 5.0."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _split_list(argument: str) -> list[str]:
    return [part.strip() for part in argument.split(",") if part.strip()]


def _parse_runner_stats(names: list[str], source: str) -> tuple[RunnerStatName, ...]:
    stats = []
    for name in names:
        try:
            stats.append(RunnerStatName(name))
        except ValueError:
            raise ParseError("Unknown runner stat", name, source) from None
    return tuple(stats)


# -----------------------------------------------------------------------------
# Effect conditions
# -----------------------------------------------------------------------------

class Condition:
    """Base for effect conditions. Subclasses are frozen dataclasses."""

    keyword: ClassVar[str]
    takes_argument: ClassVar[bool] = False
    uses_prevention: ClassVar[bool] = False

    def argument(self) -> str | None:
        return None

    def serialize(self) -> str:
        arg = self.argument()
        return self.keyword if arg is None else f"{self.keyword}:{arg}"


CONDITION_TYPES: dict[str, type[Condition]] = {}


def register_condition(cls: type[Condition]) -> type[Condition]:
    """Make a condition class reachable from the parser by its keyword."""
    CONDITION_TYPES[cls.keyword] = cls
    return cls


@register_condition
@dataclass(frozen=True)
class NoCondition(Condition):
    keyword: ClassVar[str] = "None"


@register_condition
@dataclass(frozen=True)
class RunnerTypeCondition(Condition):
    runner_type: RunnerType
    keyword: ClassVar[str] = "RunnerType"
    takes_argument: ClassVar[bool] = True

    @classmethod
    def from_argument(cls, argument: str, source: str) -> "RunnerTypeCondition":
        runner_type = RunnerType.lookup(argument)
        if runner_type is None:
            raise ParseError("Unknown runner type", argument, source)
        return cls(runner_type)

    def argument(self) -> str:
        return self.runner_type.value


@register_condition
@dataclass(frozen=True)
class NodeColorCondition(Condition):
    color: NodeColor
    keyword: ClassVar[str] = "NodeColor"
    takes_argument: ClassVar[bool] = True

    @classmethod
    def from_argument(cls, argument: str, source: str) -> "NodeColorCondition":
        color = NodeColor.lookup(argument)
        if color is None:
            raise ParseError("Unknown node color", argument, source)
        return cls(color)

    def argument(self) -> str:
        return self.color.value


@register_condition
@dataclass(frozen=True)
class NodeColorComboCondition(Condition):
    colors: tuple[NodeColor, ...]
    keyword: ClassVar[str] = "NodeColorCombo"
    takes_argument: ClassVar[bool] = True

    @classmethod
    def from_argument(cls, argument: str, source: str) -> "NodeColorComboCondition":
        names = _split_list(argument)
        if len(names) < 2:
            raise ParseError("NodeColorCombo needs at least 2 colors", argument, source)
        colors = []
        for name in names:
            color = NodeColor.lookup(name)
            if color is None:
                raise ParseError("Unknown node color", name, source)
            colors.append(color)
        return cls(tuple(colors))

    def argument(self) -> str:
        return ",".join(c.value for c in self.colors)


@register_condition
@dataclass(frozen=True)
class RunnerStatCondition(Condition):
    """Summed runner stat(s) compared against a threshold: face+muscle>=6."""
    stats: tuple[RunnerStatName, ...]
    comparison: Comparison
    threshold: int
    keyword: ClassVar[str] = "RunnerStat"
    takes_argument: ClassVar[bool] = True

    @classmethod
    def from_argument(cls, argument: str, source: str) -> "RunnerStatCondition":
        for token, comparison in _COMPARISON_TOKENS:
            if token in argument:
                left, _, right = argument.partition(token)
                break
        else:
            raise ParseError("RunnerStat has no comparison operator", argument, source)

        stats = _parse_runner_stats([part.strip() for part in left.split("+")], source)
        try:
            threshold = int(right.strip())
        except ValueError:
            raise ParseError("RunnerStat threshold is not an integer", right.strip(), source) from None
        return cls(stats, comparison, threshold)

    def argument(self) -> str:
        names = "+".join(s.value for s in self.stats)
        return f"{names}{self.comparison.value}{self.threshold}"


@register_condition
@dataclass(frozen=True)
class PrevDamCondition(Condition):
    keyword: ClassVar[str] = "PrevDam"
    uses_prevention: ClassVar[bool] = True


@register_condition
@dataclass(frozen=True)
class PrevRiskCondition(Condition):
    keyword: ClassVar[str] = "PrevRisk"
    uses_prevention: ClassVar[bool] = True


@register_condition
@dataclass(frozen=True)
class RiskDamPairCondition(Condition):
    keyword: ClassVar[str] = "RiskDamPair"
    uses_prevention: ClassVar[bool] = True


@register_condition
@dataclass(frozen=True)
class ColorForEachCondition(Condition):
    keyword: ClassVar[str] = "ColorForEach"


def parse_condition(text: str, source: str = "") -> Condition:
    """Parse the condition part of an effect string."""
    text = text.strip()
    source = source or text
    if not text:
        raise ParseError("Condition cannot be empty", text, source)

    keyword, sep, argument = text.partition(":")
    cls = CONDITION_TYPES.get(keyword.strip())
    if cls is None:
        raise ParseError("Unknown condition", keyword.strip(), source)

    argument = argument.strip()
    if cls.takes_argument:
        if not argument:
            raise ParseError(f"{cls.keyword} condition needs a value", text, source)
        return cls.from_argument(argument, source)

    if sep:
        raise ParseError(f"{cls.keyword} condition takes no value", text, source)
    return cls()


# -----------------------------------------------------------------------------
# Effects
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EffectSpec:
    """One parsed node effect."""
    condition: Condition
    operator: Operator
    amount: float
    target_stat: StatName

    def serialize(self) -> str:
        return ";".join([
            self.condition.serialize(),
            self.operator.value,
            format_number(self.amount),
            self.target_stat.value,
        ])

    def __str__(self) -> str:
        return self.serialize()


@lru_cache(maxsize=1024)
def parse_effect(text: str) -> EffectSpec:
    """
    Parse `Condition;Operator;Amount;Stat`.

    Raises:
        ParseError: naming the offending token
    """
    parts = [part.strip() for part in text.split(";")]
    if len(parts) != 4:
        raise ParseError(f"Effect needs 4 ';'-separated parts, got {len(parts)}", text, text)

    condition_text, operator_text, amount_text, stat_text = parts

    condition = parse_condition(condition_text, text)

    try:
        operator = Operator(operator_text)
    except ValueError:
        raise ParseError("Unknown operator", operator_text, text) from None

    try:
        amount = float(amount_text)
    except ValueError:
        raise ParseError("Amount is not a number", amount_text, text) from None
    if not math.isfinite(amount):
        raise ParseError("Amount must be finite", amount_text, text)

    stat = StatName.lookup(stat_text)
    if stat is None:
        raise ParseError("Unknown stat", stat_text, text)

    return EffectSpec(condition, operator, amount, stat)


# -----------------------------------------------------------------------------
# Gate conditions
# -----------------------------------------------------------------------------

class GateCondition:
    """Base for gate conditions. Subclasses are frozen dataclasses."""

    keyword: ClassVar[str]

    @classmethod
    def from_parts(cls, argument: str, threshold: int, source: str) -> "GateCondition":
        raise NotImplementedError

    def argument(self) -> str:
        raise NotImplementedError

    @property
    def threshold_value(self) -> int:
        raise NotImplementedError

    def serialize(self) -> str:
        return f"{self.keyword}:{self.argument()};{self.threshold_value}"

    def __str__(self) -> str:
        return self.serialize()


GATE_TYPES: dict[str, type[GateCondition]] = {}


def register_gate(cls: type[GateCondition]) -> type[GateCondition]:
    """Make a gate class reachable from the parser by its keyword."""
    GATE_TYPES[cls.keyword] = cls
    return cls


@register_gate
@dataclass(frozen=True)
class RunnerTypeGate(GateCondition):
    """At least min_count configured runners of any listed type."""
    types: tuple[RunnerType, ...]
    min_count: int
    keyword: ClassVar[str] = "RunnerType"

    @classmethod
    def from_parts(cls, argument: str, threshold: int, source: str) -> "RunnerTypeGate":
        types = []
        for name in _split_list(argument):
            runner_type = RunnerType.lookup(name)
            if runner_type is None:
                raise ParseError("Unknown runner type", name, source)
            types.append(runner_type)
        if not types:
            raise ParseError("RunnerType gate lists no types", argument, source)
        return cls(tuple(types), threshold)

    def argument(self) -> str:
        return ",".join(t.value.lower() for t in self.types)

    @property
    def threshold_value(self) -> int:
        return self.min_count


@register_gate
@dataclass(frozen=True)
class RunnerStatGate(GateCondition):
    """Listed stats summed across all runners reach min_sum."""
    stats: tuple[RunnerStatName, ...]
    min_sum: int
    keyword: ClassVar[str] = "RunnerStat"

    @classmethod
    def from_parts(cls, argument: str, threshold: int, source: str) -> "RunnerStatGate":
        names = _split_list(argument.lower())
        if not names:
            raise ParseError("RunnerStat gate lists no stats", argument, source)
        return cls(_parse_runner_stats(names, source), threshold)

    def argument(self) -> str:
        return ",".join(s.value for s in self.stats)

    @property
    def threshold_value(self) -> int:
        return self.min_sum


@register_gate
@dataclass(frozen=True)
class NodeGate(GateCondition):
    """At least `threshold` listed nodes selected; 0 means all of them."""
    node_ids: tuple[str, ...]
    threshold: int
    keyword: ClassVar[str] = "Node"

    @classmethod
    def from_parts(cls, argument: str, threshold: int, source: str) -> "NodeGate":
        node_ids = _split_list(argument)
        if not node_ids:
            raise ParseError("Node gate lists no node ids", argument, source)
        return cls(tuple(node_ids), threshold)

    def argument(self) -> str:
        return ",".join(self.node_ids)

    @property
    def threshold_value(self) -> int:
        return self.threshold


@lru_cache(maxsize=256)
def parse_gate(text: str) -> GateCondition:
    """
    Parse `Kind:<a>,<b>,...;<Threshold>`.

    Raises:
        ParseError: naming the offending token
    """
    parts = [part.strip() for part in text.split(";")]
    if len(parts) != 2:
        raise ParseError(f"Gate needs 2 ';'-separated parts, got {len(parts)}", text, text)

    condition_text, threshold_text = parts
    keyword, sep, argument = condition_text.partition(":")
    cls = GATE_TYPES.get(keyword.strip())
    if cls is None or not sep:
        raise ParseError("Unknown gate condition", keyword.strip(), text)

    try:
        threshold = int(threshold_text)
    except ValueError:
        raise ParseError("Gate threshold is not an integer", threshold_text, text) from None
    if threshold < 0:
        raise ParseError("Gate threshold cannot be negative", threshold_text, text)

    return cls.from_parts(argument.strip(), threshold, text)
