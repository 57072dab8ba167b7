"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field

from flip7.rules import RuleSet


def _optional_int(name: str) -> int | None:
    """Read an integer environment variable, None when unset or blank."""
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class GameConfig:
    """Default game configuration."""

    target_score: int = field(
        default_factory=lambda: int(os.getenv("FLIP7_TARGET_SCORE", "200"))
    )

    def to_rules(self) -> RuleSet:
        """Build the rule set for a game."""
        return RuleSet(target_score=self.target_score)


@dataclass(frozen=True)
class SimulationConfig:
    """Batch simulation defaults."""

    games: int = field(default_factory=lambda: int(os.getenv("FLIP7_SIM_GAMES", "1000")))
    seed: int | None = field(default_factory=lambda: _optional_int("FLIP7_SEED"))
    progress_seconds: float = field(
        default_factory=lambda: float(os.getenv("FLIP7_PROGRESS_SECONDS", "5"))
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())

    game: GameConfig = field(default_factory=GameConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    @property
    def effective_log_level(self) -> str:
        """DEBUG overrides the configured log level."""
        return "DEBUG" if self.debug else self.log_level


# Global configuration instance
config = AppConfig()
