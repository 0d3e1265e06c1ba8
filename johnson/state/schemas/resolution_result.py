"""
ResolutionSummary schema: the output of a resolved contract.

Everything the presentation layer needs after the last roll:
the ordered event log, the reward and risk that reached the player,
and before/after snapshots for every runner on the job.
"""

from pydantic import BaseModel, Field

from ..schema import LifecycleState, PreventionResult
from .event import ResolutionEvent


class RunnerOutcome(BaseModel):
    """Lifecycle and level of one runner before and after resolution."""
    runner_id: str
    name: str
    lifecycle_before: LifecycleState
    lifecycle_after: LifecycleState
    level_before: int
    level_after: int

    @property
    def leveled_up(self) -> bool:
        return self.level_after > self.level_before


class ResolutionSummary(BaseModel):
    """
    Complete result of a resolved contract.

    seed is carried for replay: the same seed and the same pre-resolution
    state reproduce the same events.
    """
    contract_id: str = ""
    seed: int | None = None

    # What happened
    events: list[ResolutionEvent] = Field(default_factory=list)
    prevention: PreventionResult = Field(default_factory=PreventionResult)
    unprevented_damage: int = 0

    # What reached the player
    starting_reward: int = 0
    final_reward: int = 0
    risk_applied: int = 0
    player_level_gained: int = 0

    runners: list[RunnerOutcome] = Field(default_factory=list)

    @property
    def casualties(self) -> list[RunnerOutcome]:
        """Runners who died during this contract."""
        return [
            r for r in self.runners
            if r.lifecycle_after == LifecycleState.DEAD
            and r.lifecycle_before != LifecycleState.DEAD
        ]

    @property
    def event_summary(self) -> list[str]:
        """Human-readable one-liners for quick display."""
        return [f"Roll {e.index}: {e.rolled_number} - {e.outcome_description}" for e in self.events]
