"""
Runner roster and lifecycle.

Two small state machines per runner:
    lifecycle:  READY <-> INJURED -> DEAD   (DEAD is terminal)
    hiring:     UNHIRED <-> HIRED           (DEAD runners are never hired)

Lifecycle changes go through transition() so the terminal-Dead rule has
exactly one enforcement point. Hiring goes through Roster.hire/unhire,
which also moves money on the player ledger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from ..state.config import BalancingConfig
from ..state.event_bus import EventType, get_event_bus
from ..state.schema import (
    HiringState,
    LifecycleState,
    PlayerState,
    Runner,
    RunnerStatName,
    RunnerStats,
    RunnerType,
)
from ..tools.dice import Dice

logger = logging.getLogger(__name__)


# Allowed lifecycle moves; DEAD maps to nothing
LIFECYCLE_TRANSITIONS: dict[LifecycleState, set[LifecycleState]] = {
    LifecycleState.READY: {LifecycleState.INJURED},
    LifecycleState.INJURED: {LifecycleState.READY, LifecycleState.DEAD},
    LifecycleState.DEAD: set(),
}


class LifecycleError(Exception):
    """Illegal lifecycle transition."""
    def __init__(self, runner_id: str, current: LifecycleState, target: LifecycleState):
        self.runner_id = runner_id
        self.current = current
        self.target = target
        super().__init__(
            f"Runner {runner_id} cannot go from {current.value} to {target.value}"
        )


def can_transition(runner: Runner, target: LifecycleState) -> bool:
    return target in LIFECYCLE_TRANSITIONS[runner.lifecycle_state]


def transition(runner: Runner, target: LifecycleState) -> LifecycleState:
    """
    Move a runner to a new lifecycle state.

    Returns:
        The previous state

    Raises:
        LifecycleError: If the move is not allowed (anything out of DEAD)
    """
    before = runner.lifecycle_state
    if not can_transition(runner, target):
        raise LifecycleError(runner.id, before, target)

    runner.lifecycle_state = target
    logger.debug("Runner %s: %s -> %s", runner.id, before.value, target.value)
    get_event_bus().emit(
        EventType.RUNNER_STATE_CHANGED,
        runner_id=runner.id,
        name=runner.name,
        before=before.value,
        after=target.value,
    )
    return before


def injure(runner: Runner) -> LifecycleState:
    return transition(runner, LifecycleState.INJURED)


def kill(runner: Runner) -> LifecycleState:
    return transition(runner, LifecycleState.DEAD)


def recover(runner: Runner) -> LifecycleState:
    """Injured runners heal back to Ready."""
    return transition(runner, LifecycleState.READY)


# -----------------------------------------------------------------------------
# Hiring
# -----------------------------------------------------------------------------

@dataclass
class HireResult:
    """Outcome of a hire or unhire request."""
    success: bool
    message: str
    slot: int | None = None  # 0-based slot for a successful hire


class Roster:
    """
    All known runners plus the contract's hire slots.

    The roster does not own the player; hire/unhire take the PlayerState
    whose money they move.
    """

    def __init__(self, config: BalancingConfig | None = None, runners: Iterable[Runner] = ()):
        self.config = config or BalancingConfig()
        self._runners: dict[str, Runner] = {}
        self._slots: list[str] = []
        for runner in runners:
            self.add(runner)

    def add(self, runner: Runner) -> Runner:
        """Add a runner; one already marked Hired takes a free slot."""
        self._runners[runner.id] = runner
        if runner.id in self._slots:
            if not runner.is_hired or runner.is_dead:
                self._slots.remove(runner.id)
                runner.hiring_state = HiringState.UNHIRED
            return runner
        if runner.is_hired:
            if runner.is_dead or len(self._slots) >= self.config.max_hired_runners:
                logger.warning("Runner %s cannot hold a slot, marking unhired", runner.id)
                runner.hiring_state = HiringState.UNHIRED
            else:
                self._slots.append(runner.id)
        return runner

    def get(self, runner_id: str) -> Runner | None:
        return self._runners.get(runner_id)

    @property
    def runners(self) -> list[Runner]:
        return list(self._runners.values())

    def hired_runners(self) -> list[Runner]:
        """Hired runners in slot order."""
        return [self._runners[runner_id] for runner_id in self._slots]

    @property
    def free_slots(self) -> int:
        return self.config.max_hired_runners - len(self._slots)

    def can_hire(self, runner_id: str, player: PlayerState) -> HireResult:
        """Check hire preconditions without changing anything."""
        runner = self.get(runner_id)
        if runner is None:
            return HireResult(False, f"Unknown runner: {runner_id}")
        if runner.is_dead:
            return HireResult(False, "Runner is dead")
        if runner.is_hired:
            return HireResult(False, "Runner is already hired")
        if self.free_slots <= 0:
            return HireResult(False, "All slots full")
        if player.money < self.config.hiring_cost:
            return HireResult(False, "Not enough money")
        return HireResult(True, "OK", slot=len(self._slots))

    def hire(self, runner_id: str, player: PlayerState) -> HireResult:
        """Hire a runner into the next free slot, paying the hiring cost."""
        check = self.can_hire(runner_id, player)
        if not check.success:
            logger.info("Hire of %s refused: %s", runner_id, check.message)
            return check

        runner = self._runners[runner_id]
        player.money -= self.config.hiring_cost
        runner.hiring_state = HiringState.HIRED
        runner.times_hired += 1
        self._slots.append(runner.id)

        get_event_bus().emit(
            EventType.RUNNER_HIRED,
            runner_id=runner.id,
            name=runner.name,
            slot=check.slot,
            cost=self.config.hiring_cost,
        )
        return HireResult(True, f"Hired {runner.label()}", slot=check.slot)

    def unhire(self, runner_id: str, player: PlayerState) -> HireResult:
        """Release a hired runner and refund the hiring cost."""
        runner = self.get(runner_id)
        if runner is None:
            return HireResult(False, f"Unknown runner: {runner_id}")
        if not runner.is_hired:
            return HireResult(False, "Runner is not hired")

        self._slots.remove(runner.id)
        runner.hiring_state = HiringState.UNHIRED
        player.money += self.config.hiring_cost

        get_event_bus().emit(
            EventType.RUNNER_UNHIRED,
            runner_id=runner.id,
            name=runner.name,
            refund=self.config.hiring_cost,
        )
        return HireResult(True, f"Released {runner.label()}")

    def release_all(self) -> list[Runner]:
        """End of contract: every hired runner goes back to Unhired, no refund."""
        released = self.hired_runners()
        for runner in released:
            runner.hiring_state = HiringState.UNHIRED
            get_event_bus().emit(
                EventType.RUNNER_UNHIRED,
                runner_id=runner.id,
                name=runner.name,
                refund=0,
            )
        self._slots.clear()
        return released


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------

def generate_runner(
    dice: Dice,
    name: str,
    config: BalancingConfig | None = None,
    level: int = 1,
) -> Runner:
    """
    Roll up a fresh runner.

    The type is random; the type's main stat gets the main allocation and
    the random allocation is scattered one point at a time, never past
    the stat cap.
    """
    config = config or BalancingConfig()
    runner_type = dice.pick(list(RunnerType))

    points = {stat: 0 for stat in RunnerStatName}
    main = runner_type.main_stat
    points[main] = min(config.runner_main_stat_allocation, config.runner_stat_cap)

    stat_names = list(RunnerStatName)
    for _ in range(config.runner_random_stat_allocation):
        open_stats = [s for s in stat_names if points[s] < config.runner_stat_cap]
        if not open_stats:
            break
        points[dice.pick(open_stats)] += 1

    return Runner(
        name=name,
        type=runner_type,
        level=level,
        stats=RunnerStats(**{stat.value: value for stat, value in points.items()}),
    )


def generate_batch(
    dice: Dice,
    names: list[str],
    config: BalancingConfig | None = None,
) -> list[Runner]:
    """Generate up to `generated_runner_batch_size` runners, one per name."""
    config = config or BalancingConfig()
    return [
        generate_runner(dice, name, config)
        for name in names[:config.generated_runner_batch_size]
    ]
