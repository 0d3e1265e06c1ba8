"""
Paced playback of a contract resolution.

The resolver produces events as fast as it can; playback puts the
presentation delay between them. The delay never reaches the resolver,
so a zero delay gives exactly the same events as the configured one.
"""

import time
from typing import Callable

from ..state.schemas import ResolutionEvent, ResolutionSummary
from ..systems.resolution import ContractResolver


def play_resolution(
    resolver: ContractResolver,
    delay_ms: int = 0,
    on_event: Callable[[ResolutionEvent], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ResolutionSummary:
    """
    Step a resolver to completion, pausing between roll events.

    Args:
        resolver: A resolver that has not run yet
        delay_ms: Pause after each event, milliseconds (0 for none)
        on_event: Called with every event as it is produced
        sleep: Injected for tests

    Returns:
        The resolver's summary
    """
    for event in resolver.steps():
        if on_event is not None:
            on_event(event)
        if delay_ms > 0:
            sleep(delay_ms / 1000)
    return resolver.summary
