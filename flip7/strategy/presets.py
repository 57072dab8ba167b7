"""Named computer-player configurations."""

from dataclasses import dataclass
from typing import Callable

from flip7.strategy.computer import ComputerStrategy
from flip7.strategy.policies import (
    AdaptiveBustProbability,
    AlwaysHit,
    BustProbabilityThreshold,
    EndgamePolicy,
    ExpectedValuePolicy,
    GapBasedPolicy,
    HitPolicy,
    HybridPolicy,
    PlayToScore,
    RandomHit,
)
from flip7.strategy.targeting import TargetRandom


@dataclass(frozen=True)
class StrategyPreset:
    """A menu entry for building a computer strategy."""

    key: str
    description: str
    build_policy: Callable[[float | None], HitPolicy]
    default_param: float | None = None
    random_targets: bool = False

    def build(self, param: float | None = None) -> ComputerStrategy:
        """Build a strategy, falling back to the default parameter."""
        value = self.default_param if param is None else param
        policy = self.build_policy(value)
        if self.random_targets:
            return ComputerStrategy(policy, adversarial=TargetRandom(), positive=TargetRandom())
        return ComputerStrategy(policy)


PRESETS: dict[str, StrategyPreset] = {
    preset.key: preset
    for preset in (
        StrategyPreset(
            "score",
            "Plays each round to a fixed score",
            lambda p: PlayToScore(int(p)),  # type: ignore[arg-type]
            default_param=30,
        ),
        StrategyPreset(
            "bust",
            "Stays once the bust probability reaches a threshold (counts cards)",
            lambda p: BustProbabilityThreshold(p),  # type: ignore[arg-type]
            default_param=0.33,
        ),
        StrategyPreset("hit", "Always hits, chasing Flip 7", lambda p: AlwaysHit()),
        StrategyPreset(
            "random",
            "Random decisions and random targets",
            lambda p: RandomHit(),
            random_targets=True,
        ),
        StrategyPreset(
            "adaptive",
            "Bust threshold that shifts with the standings",
            lambda p: AdaptiveBustProbability(p),  # type: ignore[arg-type]
            default_param=0.3,
        ),
        StrategyPreset("ev", "Expected value of one more card", lambda p: ExpectedValuePolicy()),
        StrategyPreset(
            "hybrid",
            "Expected value capped by a bust probability",
            lambda p: HybridPolicy(p),  # type: ignore[arg-type]
            default_param=0.4,
        ),
        StrategyPreset(
            "gap",
            "Round target driven by the gap to the leader",
            lambda p: GapBasedPolicy(int(p)),  # type: ignore[arg-type]
            default_param=25,
        ),
        StrategyPreset(
            "optimal",
            "Expected value with end-of-game awareness",
            lambda p: EndgamePolicy(ExpectedValuePolicy()),
        ),
    )
}


def build_strategy(key: str, param: float | None = None) -> ComputerStrategy:
    """
    Build a computer strategy by preset key.

    Args:
        key: One of ``PRESETS``
        param: Optional preset parameter (score target, threshold...)

    Raises:
        ValueError: If the key is unknown
    """
    try:
        preset = PRESETS[key.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown strategy {key!r}; choose from {', '.join(PRESETS)}"
        ) from None
    return preset.build(param)


def parse_strategy(text: str) -> ComputerStrategy:
    """Build a strategy from ``key`` or ``key:param``, e.g. ``bust:0.25``."""
    key, _, raw = text.partition(":")
    if not raw:
        return build_strategy(key)
    try:
        param = float(raw)
    except ValueError:
        raise ValueError(f"Invalid strategy parameter in {text!r}") from None
    return build_strategy(key, param)
