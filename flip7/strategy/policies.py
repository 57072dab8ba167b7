"""Hit-or-stay policies for computer players."""

from abc import ABC, abstractmethod

from flip7.game.state import GameState
from flip7.player import PlayerView
from flip7.statistics.probability import HitAnalysis, analyze_hit, bust_probability


class HitPolicy(ABC):
    """
    A pure hit-or-stay rule.

    Policies read the snapshot and the acting player's view only. They keep
    no state between calls, so one instance can serve many games.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short label, shown next to the player name."""
        ...

    @abstractmethod
    def should_hit(self, state: GameState) -> bool:
        """Return True to draw another card."""
        ...

    @staticmethod
    def acting_player(state: GameState) -> PlayerView:
        """Return the acting player's view."""
        if state.current_player is None:
            raise ValueError("Game state has no current player")
        return state.current_player

    def analyze(self, state: GameState) -> HitAnalysis:
        """Return the one-card lookahead for the acting player under the game's rules."""
        return analyze_hit(
            self.acting_player(state),
            state.deck,
            flip7_size=state.flip7_size,
            flip7_bonus=state.flip7_bonus,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class PlayToScore(HitPolicy):
    """Hit until the round score reaches a fixed target."""

    def __init__(self, target: int = 30) -> None:
        if target < 1:
            raise ValueError("target must be at least 1")
        self.target = target

    @property
    def name(self) -> str:
        return f"score {self.target}"

    def should_hit(self, state: GameState) -> bool:
        return self.acting_player(state).round_score < self.target

    def __repr__(self) -> str:
        return f"PlayToScore(target={self.target})"


class BustProbabilityThreshold(HitPolicy):
    """Hit while the chance of drawing a duplicate stays below a threshold."""

    def __init__(self, threshold: float = 0.33) -> None:
        if not 0.0 < threshold <= 1.0:
            raise ValueError("threshold must be in (0, 1]")
        self.threshold = threshold

    @property
    def name(self) -> str:
        return f"p({self.threshold:.2f})"

    def should_hit(self, state: GameState) -> bool:
        me = self.acting_player(state)
        return bust_probability(me, state.deck) < self.threshold

    def __repr__(self) -> str:
        return f"BustProbabilityThreshold(threshold={self.threshold})"


class AlwaysHit(HitPolicy):
    """Chase the Flip 7 every time."""

    @property
    def name(self) -> str:
        return "hit"

    def should_hit(self, state: GameState) -> bool:
        return True


class RandomHit(HitPolicy):
    """Coin flip, using the game's own random source."""

    def __init__(self, hit_chance: float = 0.5) -> None:
        if not 0.0 <= hit_chance <= 1.0:
            raise ValueError("hit_chance must be in [0, 1]")
        self.hit_chance = hit_chance

    @property
    def name(self) -> str:
        return "rand"

    def should_hit(self, state: GameState) -> bool:
        return state.rng.random() < self.hit_chance


class AdaptiveBustProbability(HitPolicy):
    """
    Bust-probability threshold that moves with the standings.

    Trailing players accept more risk and leaders less, in proportion to
    the gap measured against the target score. A player who would win by
    staying now always stays.
    """

    def __init__(
        self,
        base_threshold: float = 0.3,
        aggression: float = 0.5,
        min_threshold: float = 0.05,
        max_threshold: float = 0.9,
    ) -> None:
        if not 0.0 < base_threshold <= 1.0:
            raise ValueError("base_threshold must be in (0, 1]")
        if not 0.0 <= min_threshold <= max_threshold <= 1.0:
            raise ValueError("thresholds must satisfy 0 <= min <= max <= 1")
        self.base_threshold = base_threshold
        self.aggression = aggression
        self.min_threshold = min_threshold
        self.max_threshold = max_threshold

    @property
    def name(self) -> str:
        return f"adapt{self.base_threshold:g}"

    def threshold_for(self, state: GameState) -> float:
        """Return the bust-probability threshold for this decision."""
        me = self.acting_player(state)
        others = state.others()
        best_other = max((p.effective_score for p in others), default=0)
        lead = me.effective_score - best_other
        shift = self.aggression * lead / state.target_score
        return min(self.max_threshold, max(self.min_threshold, self.base_threshold - shift))

    def should_hit(self, state: GameState) -> bool:
        me = self.acting_player(state)
        best_other = max((p.effective_score for p in state.others()), default=0)
        if me.effective_score >= state.target_score and me.effective_score > best_other:
            return False
        return bust_probability(me, state.deck) < self.threshold_for(state)

    def __repr__(self) -> str:
        return f"AdaptiveBustProbability(base_threshold={self.base_threshold})"


class ExpectedValuePolicy(HitPolicy):
    """Hit when one more card is expected to raise the round score."""

    def __init__(self, margin: float = 0.0) -> None:
        self.margin = margin

    @property
    def name(self) -> str:
        return "exp"

    def should_hit(self, state: GameState) -> bool:
        analysis = self.analyze(state)
        return analysis.expected_score > analysis.current_score + self.margin


class HybridPolicy(HitPolicy):
    """Expected value, but never at a bust chance above a hard cap."""

    def __init__(self, max_bust_probability: float = 0.4) -> None:
        if not 0.0 < max_bust_probability <= 1.0:
            raise ValueError("max_bust_probability must be in (0, 1]")
        self.max_bust_probability = max_bust_probability

    @property
    def name(self) -> str:
        return "hybrid"

    def should_hit(self, state: GameState) -> bool:
        analysis = self.analyze(state)
        return analysis.favors_hit and analysis.bust_probability < self.max_bust_probability


class GapBasedPolicy(HitPolicy):
    """
    Play to a round target derived from the gap to the leader.

    The target starts at ``base_target``, grows by a quarter of the deficit
    to the best opponent, and never exceeds what is still needed to win.
    """

    def __init__(self, base_target: int = 25, floor: int = 15) -> None:
        if floor < 1 or base_target < floor:
            raise ValueError("targets must satisfy 1 <= floor <= base_target")
        self.base_target = base_target
        self.floor = floor

    @property
    def name(self) -> str:
        return "gap"

    def round_target(self, state: GameState) -> int:
        """Return the round score this player is playing to."""
        me = self.acting_player(state)
        best_other = max((p.effective_score for p in state.others()), default=0)
        deficit = max(0, best_other - me.effective_score)
        needed = max(1, state.target_score - me.total_score)
        target = max(self.floor, self.base_target + deficit // 4)
        return min(target, needed)

    def should_hit(self, state: GameState) -> bool:
        return self.acting_player(state).round_score < self.round_target(state)


class EndgamePolicy(HitPolicy):
    """
    Wrap another policy with end-of-game awareness.

    Stays when banking now wins outright; hits when an opponent has already
    banked past the target and staying cannot overtake them.
    """

    def __init__(self, inner: HitPolicy) -> None:
        self.inner = inner

    @property
    def name(self) -> str:
        return "opt"

    def should_hit(self, state: GameState) -> bool:
        me = self.acting_player(state)
        others = state.others()
        best_other = max((p.effective_score for p in others), default=0)

        if me.effective_score >= state.target_score and me.effective_score > best_other:
            return False

        banked_winner = max(
            (p.effective_score for p in others if not p.is_active),
            default=0,
        )
        if banked_winner >= state.target_score and me.effective_score <= banked_winner:
            return True

        return self.inner.should_hit(state)

    def __repr__(self) -> str:
        return f"EndgamePolicy(inner={self.inner!r})"
