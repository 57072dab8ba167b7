"""Target selection policies for action cards."""

from abc import ABC, abstractmethod
from typing import Sequence

from flip7.cards import ActionKind
from flip7.game.state import GameState
from flip7.player import PlayerView


class TargetPolicy(ABC):
    """Pick one player out of an already-filtered candidate list."""

    @abstractmethod
    def choose(
        self,
        state: GameState,
        candidates: Sequence[PlayerView],
        action: ActionKind,
    ) -> PlayerView:
        """
        Choose a target.

        Args:
            state: Snapshot for the decision
            candidates: Non-empty list of eligible players
            action: The action card being resolved

        Returns:
            One of the candidates
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class TargetLeader(TargetPolicy):
    """Pick the candidate with the highest total plus round score."""

    def choose(self, state, candidates, action):
        return max(candidates, key=lambda p: p.effective_score)


class TargetLastPlace(TargetPolicy):
    """Pick the candidate with the lowest total plus round score."""

    def choose(self, state, candidates, action):
        return min(candidates, key=lambda p: p.effective_score)


class TargetRandom(TargetPolicy):
    """Pick uniformly with the game's random source."""

    def choose(self, state, candidates, action):
        return state.rng.choice(list(candidates))
