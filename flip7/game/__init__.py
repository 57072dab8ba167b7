"""Game engine and state management."""

from flip7.game.events import GameEvent, EventType, EventEmitter
from flip7.game.state import GameState, RoundPhase
from flip7.game.engine import Flip7Game, RoundResult, new_game

__all__ = [
    "GameEvent",
    "EventType",
    "EventEmitter",
    "GameState",
    "RoundPhase",
    "Flip7Game",
    "RoundResult",
    "new_game",
]
