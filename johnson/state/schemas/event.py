"""
ResolutionEvent schema: one narrated step of contract resolution.

A resolution with N unprevented Damage produces exactly N events, one per
roll, in roll order. Events are immutable once created; the presentation
layer may replay them with whatever pacing it likes.
"""

from pydantic import BaseModel, ConfigDict


class ResolutionEvent(BaseModel):
    """
    A single damage roll and what it did.

    Payload varies by effect:
    Injury/Death: affected_runner_id names the runner that changed state
    (None when no runner was eligible).
    Reduce/Extra: reward_after carries the new running reward total.
    """
    model_config = ConfigDict(frozen=True)

    index: int  # 1-based roll number
    rolled_number: int
    effect: str  # "Injury", "Death", "Reduce", "Extra", "No Effect"
    effect_value: float = 0.0
    outcome_description: str
    affected_runner_id: str | None = None
    affected_runner_name: str | None = None
    reward_after: int = 0

    @property
    def changed_runner(self) -> bool:
        """Whether this roll moved a runner's lifecycle state."""
        return self.affected_runner_id is not None
