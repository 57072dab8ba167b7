"""Round phases and the read-only game state snapshot."""

from dataclasses import dataclass, field
from enum import Enum, auto
from random import Random

from flip7.cards import DeckSnapshot
from flip7.player import FLIP_7_BONUS, FLIP_7_SIZE, PlayerView


class RoundPhase(Enum):
    """
    Game state machine states.

    Flow: WAITING_TO_DEAL → DEALING → PLAYER_TURNS → SCORING → ROUND_COMPLETE
    → (WAITING_TO_DEAL | GAME_OVER)
    """

    # Between rounds, hands from the previous round still visible
    WAITING_TO_DEAL = auto()

    # One card to each seat, starting left of the dealer
    DEALING = auto()

    # Active players hit or stay in turn order
    PLAYER_TURNS = auto()

    # Round scores banked into totals
    SCORING = auto()

    # Round finished, dealer advanced
    ROUND_COMPLETE = auto()

    # Someone reached the target score
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


# Valid state transitions
VALID_TRANSITIONS: dict[RoundPhase, list[RoundPhase]] = {
    RoundPhase.WAITING_TO_DEAL: [RoundPhase.DEALING],
    RoundPhase.DEALING: [RoundPhase.PLAYER_TURNS],
    RoundPhase.PLAYER_TURNS: [RoundPhase.SCORING],
    RoundPhase.SCORING: [RoundPhase.ROUND_COMPLETE],
    RoundPhase.ROUND_COMPLETE: [RoundPhase.WAITING_TO_DEAL, RoundPhase.GAME_OVER],
    RoundPhase.GAME_OVER: [],  # Terminal state
}


def is_valid_transition(from_state: RoundPhase, to_state: RoundPhase) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])


@dataclass(frozen=True)
class GameState:
    """
    Immutable per-decision view of the game.

    Built by the engine for every strategy call. Holds player views, a deck
    snapshot and the rules that shape scoring, never the live players or deck.

    The one shared mutable member is ``rng``: it is the game's own random
    source, so randomized policies advance the same stream that shuffles
    the deck.
    """

    round_number: int
    players: tuple[PlayerView, ...]
    deck: DeckSnapshot
    current_player: PlayerView | None = None
    leader: PlayerView | None = None
    target_score: int = 200
    flip7_size: int = FLIP_7_SIZE
    flip7_bonus: int = FLIP_7_BONUS
    dealer_seat: int = 0

    # Live game random source, not a copy
    rng: Random = field(default_factory=Random, compare=False, repr=False)

    @property
    def active_players(self) -> tuple[PlayerView, ...]:
        """Return the players still able to act this round."""
        return tuple(p for p in self.players if p.is_active)

    def others(self) -> tuple[PlayerView, ...]:
        """Return every player except the current one."""
        if self.current_player is None:
            return self.players
        return tuple(p for p in self.players if p.seat != self.current_player.seat)
