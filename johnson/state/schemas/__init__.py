"""Resolution schemas produced by the contract resolver."""

from .event import ResolutionEvent
from .resolution_result import ResolutionSummary, RunnerOutcome

__all__ = [
    "ResolutionEvent",
    "ResolutionSummary",
    "RunnerOutcome",
]
