"""Algorithmic decision strategy built from library policies."""

from flip7.cards import ActionKind
from flip7.game.state import GameState
from flip7.player import PlayerView
from flip7.strategy.base import (
    DecisionStrategy,
    adversarial_candidates,
    positive_candidates,
)
from flip7.strategy.policies import HitPolicy
from flip7.strategy.targeting import TargetLastPlace, TargetLeader, TargetPolicy


class ComputerStrategy(DecisionStrategy):
    """
    A computer player: one hit policy plus two target policies.

    Adversarial cards (Freeze, Flip Three) go to the leader and surplus
    Second Chances to the player in last place unless configured otherwise.
    Holding a Second Chance always means hitting, whatever the hit policy
    says, since the next duplicate cannot bust.
    """

    def __init__(
        self,
        hit_policy: HitPolicy,
        adversarial: TargetPolicy | None = None,
        positive: TargetPolicy | None = None,
        label: str | None = None,
    ) -> None:
        """
        Initialize the strategy.

        Args:
            hit_policy: Hit-or-stay rule
            adversarial: Target rule for Freeze and Flip Three
            positive: Target rule for handing off a Second Chance
            label: Display name; defaults to the hit policy's name
        """
        self.hit_policy = hit_policy
        self.adversarial = adversarial or TargetLeader()
        self.positive = positive or TargetLastPlace()
        self._label = label

    @property
    def name(self) -> str:
        return self._label or self.hit_policy.name

    def decide_hit_or_stay(self, state: GameState) -> bool:
        me = state.current_player
        if me is not None and me.has_second_chance:
            return True
        return self.hit_policy.should_hit(state)

    def choose_adversarial_target(self, state: GameState, action: ActionKind) -> PlayerView:
        candidates = adversarial_candidates(state)
        if len(candidates) == 1:
            return candidates[0]
        return self.adversarial.choose(state, candidates, action)

    def choose_positive_target(self, state: GameState, action: ActionKind) -> PlayerView:
        candidates = positive_candidates(state)
        if len(candidates) == 1:
            return candidates[0]
        return self.positive.choose(state, candidates, action)

    def __repr__(self) -> str:
        return (
            f"ComputerStrategy({self.hit_policy!r}, adversarial={self.adversarial!r}, "
            f"positive={self.positive!r})"
        )
