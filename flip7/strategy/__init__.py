"""Decision strategies: human input and computer policies."""

from flip7.strategy.base import DecisionStrategy
from flip7.strategy.human import HumanStrategy, InputChannel
from flip7.strategy.policies import (
    HitPolicy,
    PlayToScore,
    BustProbabilityThreshold,
    AlwaysHit,
    RandomHit,
    AdaptiveBustProbability,
    ExpectedValuePolicy,
    HybridPolicy,
    GapBasedPolicy,
    EndgamePolicy,
)
from flip7.strategy.targeting import TargetPolicy, TargetLeader, TargetLastPlace, TargetRandom
from flip7.strategy.computer import ComputerStrategy
from flip7.strategy.presets import PRESETS, build_strategy, parse_strategy

__all__ = [
    "DecisionStrategy",
    "HumanStrategy",
    "InputChannel",
    "HitPolicy",
    "PlayToScore",
    "BustProbabilityThreshold",
    "AlwaysHit",
    "RandomHit",
    "AdaptiveBustProbability",
    "ExpectedValuePolicy",
    "HybridPolicy",
    "GapBasedPolicy",
    "EndgamePolicy",
    "TargetPolicy",
    "TargetLeader",
    "TargetLastPlace",
    "TargetRandom",
    "ComputerStrategy",
    "PRESETS",
    "build_strategy",
    "parse_strategy",
]
