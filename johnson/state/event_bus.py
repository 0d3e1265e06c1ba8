"""
Event bus for Johnson state changes.

Provides decoupled communication between the rule engine and whatever
presentation layer is attached (CLI renderer, a browser bridge, tests).

Usage:
    from .event_bus import get_event_bus, EventType

    bus = get_event_bus()
    bus.on(EventType.RESOLUTION_ROLL, my_handler)

    # Emit (in systems when state changes)
    bus.emit(EventType.RUNNER_STATE_CHANGED, runner_id="a1b2", before="Ready", after="Injured")

    # Handler receives event
    def my_handler(event: GameEvent):
        print(f"Roll {event.data['index']} landed!")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Game events that can be published."""

    # Contract events
    CONTRACT_LOADED = "contract.loaded"
    NODE_SELECTED = "node.selected"
    NODE_DESELECTED = "node.deselected"
    POOLS_RECOMPUTED = "pools.recomputed"

    # Runner events
    RUNNER_HIRED = "runner.hired"
    RUNNER_UNHIRED = "runner.unhired"
    RUNNER_STATE_CHANGED = "runner.state_changed"

    # Resolution events
    RESOLUTION_STARTED = "resolution.started"
    RESOLUTION_ROLL = "resolution.roll"
    RESOLUTION_COMPLETED = "resolution.completed"


@dataclass
class GameEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        contract_id: ID of the contract this event belongs to
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    contract_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(), in subscription order.
    """

    def __init__(self):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[GameEvent] = []
        self._history_limit = 100  # Keep last N events for debugging

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The type of event to listen for
            handler: Callback function that receives GameEvent
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        if handler not in self._listeners[event_type]:
            self._listeners[event_type].append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe a handler from an event type."""
        if event_type in self._listeners and handler in self._listeners[event_type]:
            self._listeners[event_type].remove(handler)

    def emit(
        self,
        event_type: EventType,
        contract_id: str = "",
        **data,
    ) -> GameEvent:
        """
        Emit an event to all subscribers.

        Args:
            event_type: The type of event
            contract_id: Contract context (optional)
            **data: Event-specific data

        Returns:
            The emitted GameEvent (for chaining/testing)
        """
        event = GameEvent(
            type=event_type,
            data=data,
            contract_id=contract_id,
        )

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                # One bad listener shouldn't break the others
                logger.exception("Error in handler for %s", event_type.value)

        return event

    def clear(self) -> None:
        """Clear all listeners. Useful for testing."""
        self._listeners.clear()

    def get_history(self, event_type: EventType | None = None) -> list[GameEvent]:
        """
        Get recent event history.

        Args:
            event_type: Filter by type, or None for all events
        """
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        """Get number of listeners for an event type."""
        return len(self._listeners.get(event_type, []))


# Global singleton instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """
    Get the global event bus instance.

    Returns the same instance across all calls (singleton pattern).
    """
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus. Useful for testing."""
    global _event_bus
    _event_bus = None
