"""Flip 7 rule constants and variations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleSet:
    """
    Flip 7 table rules configuration.

    Everything the round engine needs to know that is not fixed by the
    card composition itself.
    """

    # Game ends once any cumulative total reaches this
    target_score: int = 200

    # Flip 7: this many distinct number cards ends the round with a bonus
    flip7_size: int = 7
    flip7_bonus: int = 15

    # Cards a Flip Three target must draw
    flip_three_draws: int = 3

    # Seats at the table
    min_players: int = 2
    max_players: int = 18

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.target_score < 1:
            raise ValueError("target_score must be at least 1")
        if not 1 <= self.flip7_size <= 13:
            raise ValueError("flip7_size must be between 1 and 13")
        if self.flip7_bonus < 0:
            raise ValueError("flip7_bonus cannot be negative")
        if self.flip_three_draws < 1:
            raise ValueError("flip_three_draws must be at least 1")
        if self.min_players < 1 or self.max_players < self.min_players:
            raise ValueError("player limits must satisfy 1 <= min_players <= max_players")

    @classmethod
    def standard(cls) -> "RuleSet":
        """Published rules: first to 200."""
        return cls()

    @classmethod
    def quick(cls) -> "RuleSet":
        """Shorter game to 100 points."""
        return cls(target_score=100)
