"""Game events for the event system."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of game events."""

    # Game flow events
    GAME_STARTED = auto()
    GAME_ENDED = auto()
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()

    # Card events
    CARD_DRAWN = auto()
    DECK_RESHUFFLED = auto()
    CARDS_DISCARDED = auto()

    # Player action events
    PLAYER_HIT = auto()
    PLAYER_FORCED_HIT = auto()
    PLAYER_STAYED = auto()

    # Action card events
    ACTION_TARGETED = auto()
    PLAYER_FROZEN = auto()
    FLIP_THREE_STARTED = auto()
    FLIP_THREE_ENDED = auto()
    SECOND_CHANCE_RECEIVED = auto()
    SECOND_CHANCE_PASSED = auto()
    SECOND_CHANCE_USED = auto()
    SECOND_CHANCE_DISCARDED = auto()

    # Outcome events
    PLAYER_BUSTED = auto()
    FLIP_7 = auto()
    ROUND_SCORED = auto()

    # Error events
    INVALID_ACTION = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable game event.

    Events are the primary communication mechanism between the core engine
    and the presentation layer.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Fan-out of engine events to renderers, loggers and tests.

    Handlers registered for a specific ``EventType`` run before the
    catch-all handlers registered with ``event_type=None``. Handlers run
    synchronously, in subscription order, while the engine is mid-action.
    """

    def __init__(self, keep_history: bool = True) -> None:
        """
        Args:
            keep_history: Record emitted events; batch simulation turns this off
        """
        self._handlers: defaultdict[EventType | None, list[EventHandler]] = defaultdict(list)
        self._event_history: list[GameEvent] = []
        self._keep_history = keep_history

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Register ``handler`` for one event type, or for every event when None."""
        self._handlers[event_type].append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def _listeners_for(self, event_type: EventType) -> list[EventHandler]:
        return [*self._handlers.get(event_type, ()), *self._handlers.get(None, ())]

    def emit(self, event: GameEvent) -> None:
        """Record the event if history is on, then hand it to each listener."""
        if self._keep_history:
            self._event_history.append(event)
        for handler in self._listeners_for(event.event_type):
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event from keyword data, emit it and return it."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return a copy of the recorded events."""
        return list(self._event_history)

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        """Return recorded events of one type, oldest first."""
        return [e for e in self._event_history if e.event_type == event_type]

    def clear_history(self) -> None:
        self._event_history.clear()
