"""Abstract decision strategy shared by human and computer players."""

from abc import ABC, abstractmethod

from flip7.cards import ActionKind
from flip7.errors import NoEligibleRecipient
from flip7.game.state import GameState
from flip7.player import PlayerView


class DecisionStrategy(ABC):
    """
    Abstract base class for player decisions.

    The engine only ever talks to players through this interface, so it
    does not know whether a person or a policy is behind a seat. Every
    method receives a snapshot whose ``current_player`` is the acting player,
    and must not mutate it.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a display name for the strategy."""
        ...

    @abstractmethod
    def decide_hit_or_stay(self, state: GameState) -> bool:
        """
        Decide whether to draw another card.

        Returns:
            True to hit, False to stay
        """
        ...

    @abstractmethod
    def choose_adversarial_target(self, state: GameState, action: ActionKind) -> PlayerView:
        """
        Pick the target of a Freeze or Flip Three.

        Must return an active player; returns the caller itself when no
        other player is active. Never fails.
        """
        ...

    @abstractmethod
    def choose_positive_target(self, state: GameState, action: ActionKind) -> PlayerView:
        """
        Pick who receives a surplus Second Chance.

        Raises:
            NoEligibleRecipient: If no other active player lacks a Second Chance
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


def adversarial_candidates(state: GameState) -> tuple[PlayerView, ...]:
    """
    Return the players a Freeze or Flip Three may target.

    Other active players if there are any, otherwise the acting player alone.
    """
    me = state.current_player
    if me is None:
        return state.active_players
    others = tuple(p for p in state.active_players if p.seat != me.seat)
    return others or (me,)


def positive_candidates(state: GameState) -> tuple[PlayerView, ...]:
    """
    Return the players a surplus Second Chance may go to.

    Raises:
        NoEligibleRecipient: If every other active player already holds one
    """
    me = state.current_player
    candidates = tuple(
        p
        for p in state.active_players
        if not p.has_second_chance and (me is None or p.seat != me.seat)
    )
    if not candidates:
        raise NoEligibleRecipient("No other active player can take a Second Chance")
    return candidates
