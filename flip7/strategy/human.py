"""Human-backed decision strategy."""

from typing import Protocol, Sequence

from flip7.cards import ActionKind
from flip7.game.state import GameState
from flip7.player import PlayerView
from flip7.strategy.base import (
    DecisionStrategy,
    adversarial_candidates,
    positive_candidates,
)


class InputChannel(Protocol):
    """
    Where a human's choices come from.

    The engine does not care whether this is a terminal, a socket or a
    test fixture. Implementations may block while waiting for input.
    """

    def ask_hit_or_stay(self, state: GameState) -> bool:
        """Return True to hit, False to stay."""
        ...

    def ask_target(
        self,
        state: GameState,
        action: ActionKind,
        candidates: Sequence[PlayerView],
    ) -> PlayerView:
        """Return one of the candidates."""
        ...


class HumanStrategy(DecisionStrategy):
    """
    Relays every decision to an input channel.

    Only eligible players are ever offered, and a single candidate is
    chosen without asking.
    """

    def __init__(self, channel: InputChannel, label: str = "human") -> None:
        self.channel = channel
        self._label = label

    @property
    def name(self) -> str:
        return self._label

    def decide_hit_or_stay(self, state: GameState) -> bool:
        return bool(self.channel.ask_hit_or_stay(state))

    def choose_adversarial_target(self, state: GameState, action: ActionKind) -> PlayerView:
        return self._ask(state, action, adversarial_candidates(state))

    def choose_positive_target(self, state: GameState, action: ActionKind) -> PlayerView:
        return self._ask(state, action, positive_candidates(state))

    def _ask(
        self,
        state: GameState,
        action: ActionKind,
        candidates: Sequence[PlayerView],
    ) -> PlayerView:
        if len(candidates) == 1:
            return candidates[0]
        choice = self.channel.ask_target(state, action, candidates)
        if choice.seat not in {c.seat for c in candidates}:
            raise ValueError(f"{choice.name} is not an eligible target for {action}")
        return choice
