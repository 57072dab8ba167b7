"""Draw probabilities and game simulation for Flip 7.

``flip7.statistics.simulation`` drives full games and is imported on its own.
"""

from flip7.statistics.probability import (
    HitAnalysis,
    analyze_hit,
    bust_probability,
    flip7_probability,
    score_after,
)

__all__ = [
    "HitAnalysis",
    "analyze_hit",
    "bust_probability",
    "flip7_probability",
    "score_after",
]
