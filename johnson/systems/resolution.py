"""
Contract resolver for Johnson's end-of-run simulation.

Owns the phase state machine and sequences the resolution pipeline:
    IDLE → EVALUATING_PREVENTION → ROLLING_DAMAGE → APPLYING_REWARDS
         → LEVELING_UP → COMPLETE

The resolver is a step generator: steps() yields one ResolutionEvent per
damage roll and finishes the remaining phases after the last one. Pacing
between events is the caller's business (see interface.playback); nothing
here sleeps, so the same seed gives the same events at any delay.

Usage:
    resolver = ContractResolver(breakdown, roster.hired_runners(), player, seed=42)

    for event in resolver.steps():
        show(event)

    summary = resolver.summary
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Iterator

from ..state.config import BalancingConfig
from ..state.event_bus import EventType, get_event_bus
from ..state.schema import LifecycleState, PlayerState, Runner
from ..state.schemas.event import ResolutionEvent
from ..state.schemas.resolution_result import ResolutionSummary, RunnerOutcome
from ..tools.dice import Dice
from .damage_table import DamageOutcome, DamageTable, OutcomeKind, default_damage_table, roll_damage
from .pools import PoolBreakdown
from .roster import injure, kill

logger = logging.getLogger(__name__)


class ResolutionPhase(str, Enum):
    """Phase state machine for one contract resolution."""
    IDLE = "idle"
    EVALUATING_PREVENTION = "evaluating_prevention"
    ROLLING_DAMAGE = "rolling_damage"
    APPLYING_REWARDS = "applying_rewards"
    LEVELING_UP = "leveling_up"
    COMPLETE = "complete"


# Strictly linear; there is no cancel path once rolling starts
VALID_TRANSITIONS: dict[ResolutionPhase, set[ResolutionPhase]] = {
    ResolutionPhase.IDLE: {ResolutionPhase.EVALUATING_PREVENTION},
    ResolutionPhase.EVALUATING_PREVENTION: {ResolutionPhase.ROLLING_DAMAGE},
    ResolutionPhase.ROLLING_DAMAGE: {ResolutionPhase.APPLYING_REWARDS},
    ResolutionPhase.APPLYING_REWARDS: {ResolutionPhase.LEVELING_UP},
    ResolutionPhase.LEVELING_UP: {ResolutionPhase.COMPLETE},
    ResolutionPhase.COMPLETE: set(),
}


class ResolutionError(Exception):
    """Error during contract resolution."""
    pass


class InvalidPhaseError(ResolutionError):
    """Attempted operation not valid in current phase."""
    def __init__(self, current: ResolutionPhase, attempted: str):
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Cannot {attempted} during {current.value} phase."
        )


class ContractResolver:
    """
    Runs one contract's resolution to completion.

    Mutates the runners it is given (lifecycle, level) and the player
    ledger (risk, money, level). Everything random comes from `dice`.
    """

    def __init__(
        self,
        breakdown: PoolBreakdown,
        runners: list[Runner],
        player: PlayerState,
        table: DamageTable | None = None,
        config: BalancingConfig | None = None,
        dice: Dice | None = None,
        seed: int | None = None,
        contract_id: str = "",
        on_complete: Callable[[ResolutionSummary], None] | None = None,
    ):
        self._breakdown = breakdown
        self._runners = list(runners)
        self._player = player
        self._table = table if table is not None else default_damage_table()
        self._config = config or BalancingConfig()
        self._dice = dice if dice is not None else Dice(seed)
        self._contract_id = contract_id
        self._on_complete = on_complete
        self._bus = get_event_bus()

        self._phase = ResolutionPhase.IDLE
        self._reward = 0.0
        self._events: list[ResolutionEvent] = []
        self._summary: ResolutionSummary | None = None

    @property
    def phase(self) -> ResolutionPhase:
        """Current phase of the resolution state machine."""
        return self._phase

    @property
    def reward(self) -> float:
        """Running reward total."""
        return self._reward

    @property
    def events(self) -> list[ResolutionEvent]:
        return list(self._events)

    @property
    def summary(self) -> ResolutionSummary:
        if self._summary is None:
            raise InvalidPhaseError(self._phase, "read the summary")
        return self._summary

    def _transition(self, target: ResolutionPhase) -> None:
        if target not in VALID_TRANSITIONS[self._phase]:
            raise InvalidPhaseError(self._phase, f"move to {target.value}")
        logger.debug("Resolution %s: %s -> %s", self._contract_id, self._phase.value, target.value)
        self._phase = target

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def steps(self) -> Iterator[ResolutionEvent]:
        """
        Drive the whole resolution, yielding each roll as it happens.

        Raises:
            InvalidPhaseError: If this resolver has already run
        """
        if self._phase != ResolutionPhase.IDLE:
            raise InvalidPhaseError(self._phase, "start resolution")

        before = {r.id: (r.lifecycle_state, r.level) for r in self._runners}

        # 1. Prevention is final once the preview pool is frozen
        self._transition(ResolutionPhase.EVALUATING_PREVENTION)
        breakdown = self._breakdown
        damage_rolls = breakdown.unprevented_damage
        self._reward = max(0.0, self._config.contract_base_reward + breakdown.pool.money)
        starting_reward = self._reward

        self._bus.emit(
            EventType.RESOLUTION_STARTED,
            contract_id=self._contract_id,
            rolls=damage_rolls,
            risk=breakdown.unprevented_risk,
            reward=math.floor(starting_reward),
            seed=self._dice.seed,
        )

        # 2. One roll per unprevented Damage point
        self._transition(ResolutionPhase.ROLLING_DAMAGE)
        for index in range(1, damage_rolls + 1):
            event = self._roll(index)
            self._events.append(event)
            logger.debug("Roll %d: %d -> %s", index, event.rolled_number, event.outcome_description)
            self._bus.emit(
                EventType.RESOLUTION_ROLL,
                contract_id=self._contract_id,
                event=event.model_dump(),
            )
            yield event

        # 3-4. Risk and reward reach the player
        self._transition(ResolutionPhase.APPLYING_REWARDS)
        final_reward = math.floor(self._reward)
        self._player.risk += breakdown.unprevented_risk
        self._player.money += final_reward

        # 5-6. Survivors level up, so does the player
        self._transition(ResolutionPhase.LEVELING_UP)
        for runner in self._runners:
            if not runner.is_dead:
                runner.level += 1
                runner.contracts_completed += 1
        self._player.level += self._config.player_level_per_contract
        self._player.contracts_completed += 1

        self._transition(ResolutionPhase.COMPLETE)
        self._summary = ResolutionSummary(
            contract_id=self._contract_id,
            seed=self._dice.seed,
            events=list(self._events),
            prevention=breakdown.prevention,
            unprevented_damage=damage_rolls,
            starting_reward=math.floor(starting_reward),
            final_reward=final_reward,
            risk_applied=breakdown.unprevented_risk,
            player_level_gained=self._config.player_level_per_contract,
            runners=[
                RunnerOutcome(
                    runner_id=r.id,
                    name=r.name,
                    lifecycle_before=before[r.id][0],
                    lifecycle_after=r.lifecycle_state,
                    level_before=before[r.id][1],
                    level_after=r.level,
                )
                for r in self._runners
            ],
        )

        logger.info(
            "Contract %s resolved: %d rolls, reward %d, risk %d, %d casualties",
            self._contract_id or "-",
            damage_rolls,
            final_reward,
            breakdown.unprevented_risk,
            len(self._summary.casualties),
        )
        self._bus.emit(
            EventType.RESOLUTION_COMPLETED,
            contract_id=self._contract_id,
            final_reward=final_reward,
            risk_applied=breakdown.unprevented_risk,
            events=len(self._events),
        )
        if self._on_complete is not None:
            self._on_complete(self._summary)

    def resolve(self) -> ResolutionSummary:
        """Run every step without pacing and return the summary."""
        for _ in self.steps():
            pass
        return self.summary

    # -------------------------------------------------------------------------
    # Roll outcomes
    # -------------------------------------------------------------------------

    def _roll(self, index: int) -> ResolutionEvent:
        if self._table.max_roll < 1:
            logger.warning("Empty damage table, roll %d has no effect", index)
            return self._event(index, 0, OutcomeKind.NO_EFFECT, 0.0, "No effect (empty damage table)")

        rolled, outcome = roll_damage(self._dice, self._table)
        if outcome is None:
            return self._event(index, rolled, OutcomeKind.NO_EFFECT, 0.0, "No effect")
        return self._apply(index, rolled, outcome)

    def _apply(self, index: int, rolled: int, outcome: DamageOutcome) -> ResolutionEvent:
        kind = outcome.kind

        if kind == OutcomeKind.INJURY:
            return self._apply_injury(index, rolled)
        if kind == OutcomeKind.DEATH:
            return self._apply_death(index, rolled)
        if kind == OutcomeKind.REDUCE:
            self._reward = max(0.0, self._reward * (1 - outcome.value / 100))
            return self._event(
                index, rolled, kind, outcome.value,
                f"Rewards reduced by {outcome.value:g}%, new total ${math.floor(self._reward)}",
            )
        if kind == OutcomeKind.EXTRA:
            self._reward = self._reward * (1 + outcome.value / 100)
            return self._event(
                index, rolled, kind, outcome.value,
                f"Rewards increased by {outcome.value:g}%, new total ${math.floor(self._reward)}",
            )
        return self._event(index, rolled, kind, 0.0, "No effect")

    def _with_state(self, state: LifecycleState) -> list[Runner]:
        return [r for r in self._runners if r.lifecycle_state == state]

    def _apply_injury(self, index: int, rolled: int) -> ResolutionEvent:
        ready = self._with_state(LifecycleState.READY)
        if ready:
            target = self._dice.pick(ready)
            injure(target)
            return self._event(index, rolled, OutcomeKind.INJURY, 0.0, f"{target.name} got injured", target)

        injured = self._with_state(LifecycleState.INJURED)
        if injured:
            target = self._dice.pick(injured)
            kill(target)
            return self._event(
                index, rolled, OutcomeKind.INJURY, 0.0,
                f"{target.name} died (all runners were already injured)", target,
            )

        return self._event(index, rolled, OutcomeKind.INJURY, 0.0, "No effect (no runner could be hurt)")

    def _apply_death(self, index: int, rolled: int) -> ResolutionEvent:
        injured = self._with_state(LifecycleState.INJURED)
        if injured:
            target = self._dice.pick(injured)
            kill(target)
            return self._event(index, rolled, OutcomeKind.DEATH, 0.0, f"{target.name} died", target)

        # No one injured: the first hit only wounds
        alive = [r for r in self._runners if not r.is_dead]
        if alive:
            target = self._dice.pick(alive)
            injure(target)
            return self._event(
                index, rolled, OutcomeKind.DEATH, 0.0,
                f"{target.name} got injured (no runners were injured)", target,
            )

        return self._event(index, rolled, OutcomeKind.DEATH, 0.0, "No effect (no runner could be hurt)")

    def _event(
        self,
        index: int,
        rolled: int,
        kind: OutcomeKind,
        value: float,
        description: str,
        target: Runner | None = None,
    ) -> ResolutionEvent:
        return ResolutionEvent(
            index=index,
            rolled_number=rolled,
            effect=kind.value,
            effect_value=value,
            outcome_description=description,
            affected_runner_id=target.id if target else None,
            affected_runner_name=target.name if target else None,
            reward_after=math.floor(self._reward),
        )
