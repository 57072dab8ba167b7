"""Batch simulation of computer-only games."""

import logging
import time
from dataclasses import dataclass, field
from random import Random
from typing import Sequence

from flip7.game.engine import Flip7Game, PlayerEntry
from flip7.rules import RuleSet

logger = logging.getLogger(__name__)


@dataclass
class SimulationReport:
    """Aggregated results of many games between the same players."""

    games: int = 0
    players: list[str] = field(default_factory=list)
    wins: dict[str, int] = field(default_factory=dict)
    total_rounds: int = 0
    flip7_counts: dict[str, int] = field(default_factory=dict)
    bust_counts: dict[str, int] = field(default_factory=dict)
    elapsed: float = 0.0

    def win_rate(self, name: str) -> float:
        """Return a player's share of games won, 0.0-1.0."""
        if self.games == 0:
            return 0.0
        return self.wins.get(name, 0) / self.games

    def ranking(self) -> list[tuple[str, int]]:
        """Return (name, wins) pairs, most wins first, seat order on ties."""
        order = {name: i for i, name in enumerate(self.players)}
        return sorted(
            ((name, self.wins.get(name, 0)) for name in self.players),
            key=lambda item: (-item[1], order[item[0]]),
        )

    @property
    def average_rounds(self) -> float:
        """Return the mean number of rounds per game."""
        if self.games == 0:
            return 0.0
        return self.total_rounds / self.games


def simulate(
    players: Sequence[PlayerEntry],
    num_games: int,
    rules: RuleSet | None = None,
    seed: int | None = None,
    progress_seconds: float = 5.0,
) -> SimulationReport:
    """
    Play many games and tally the winners.

    Each game gets a fresh engine and deck; strategies are shared across
    games and must not keep per-game state.

    Args:
        players: (name, strategy) pairs in seating order
        num_games: Number of games to play
        rules: Game rules (uses defaults if not provided)
        seed: Master seed; per-game seeds are derived from it
        progress_seconds: Minimum interval between progress log lines

    Returns:
        Win counts, average game length and per-player counters
    """
    if num_games < 1:
        raise ValueError("num_games must be at least 1")

    names = [name for name, _ in players]
    report = SimulationReport(
        players=names,
        wins={name: 0 for name in names},
        flip7_counts={name: 0 for name in names},
        bust_counts={name: 0 for name in names},
    )
    master = Random(seed)

    start = time.monotonic()
    last_progress = start
    for game_number in range(1, num_games + 1):
        now = time.monotonic()
        if game_number == 1 or now - last_progress >= progress_seconds:
            logger.info(
                "Game %d/%d... (%.1fs elapsed)", game_number, num_games, now - start
            )
            last_progress = now

        game = Flip7Game(
            players,
            rules=rules,
            rng=Random(master.getrandbits(64)),
            keep_history=False,
        )
        winner = game.play_game()

        report.games += 1
        report.wins[winner.name] += 1
        report.total_rounds += len(game.results)
        for player in game.players:
            report.flip7_counts[player.name] += player.flip7_count
            report.bust_counts[player.name] += player.bust_count

    report.elapsed = time.monotonic() - start
    logger.info("Simulated %d games in %.1fs", report.games, report.elapsed)
    return report
