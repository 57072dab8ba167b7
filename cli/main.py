"""
Flip 7 command line.

Usage:
    flip7 play --human Alice --computer bust:0.3 --computer ev
    flip7 simulate --computer score:25 --computer hybrid --computer gap --games 1000
"""

import argparse
import logging
import sys
from random import Random
from typing import Sequence

from config import config
from flip7.errors import Flip7Error, IntegrityError
from flip7.game.engine import Flip7Game, PlayerEntry
from flip7.rules import RuleSet
from flip7.statistics.simulation import simulate
from flip7.strategy.base import DecisionStrategy
from flip7.strategy.human import HumanStrategy
from flip7.strategy.presets import PRESETS, parse_strategy

from cli.console import ConsoleInput, ConsoleRenderer, NamePool
from cli.report import format_report

logger = logging.getLogger(__name__)


def strategy_arg(text: str) -> DecisionStrategy:
    """argparse type for ``PRESET[:PARAM]``."""
    try:
        return parse_strategy(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flip7", description="Flip 7 card game")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--seed", type=int, default=config.simulation.seed, help="Random seed")
    parser.add_argument(
        "--target",
        type=int,
        default=config.game.target_score,
        help="Score needed to win",
    )
    presets = ", ".join(f"{p.key}" for p in PRESETS.values())
    subparsers = parser.add_subparsers(dest="command", required=True)

    play = subparsers.add_parser("play", help="Play an interactive game")
    play.add_argument("--human", action="append", default=[], metavar="NAME", help="Human player")
    play.add_argument(
        "--computer",
        action="append",
        default=[],
        type=strategy_arg,
        metavar="PRESET[:PARAM]",
        help=f"Computer player ({presets})",
    )

    sim = subparsers.add_parser("simulate", help="Run computer-only games")
    sim.add_argument(
        "--computer",
        action="append",
        default=[],
        type=strategy_arg,
        metavar="PRESET[:PARAM]",
        help=f"Computer player ({presets})",
    )
    sim.add_argument("--games", type=int, default=config.simulation.games, help="Number of games")
    return parser


def seat_players(
    humans: Sequence[str],
    computers: Sequence[DecisionStrategy],
    pool: NamePool,
    channel: ConsoleInput | None = None,
) -> list[PlayerEntry]:
    """Pair humans and computers with names, humans first."""
    entries: list[PlayerEntry] = []
    for name in humans:
        pool.reserve(name)
    for name in humans:
        if channel is None:
            raise ValueError("Human players need an input channel")
        entries.append((name, HumanStrategy(channel)))
    for strategy in computers:
        entries.append((pool.take(), strategy))
    return entries


def run_play(args: argparse.Namespace) -> int:
    rng = Random(args.seed)
    channel = ConsoleInput()
    players = seat_players(args.human, args.computer, NamePool(Random(args.seed)), channel)

    game = Flip7Game(players, rules=RuleSet(target_score=args.target), rng=rng)
    game.subscribe(ConsoleRenderer())
    game.play_game()
    return 0


def run_simulate(args: argparse.Namespace) -> int:
    players = seat_players([], args.computer, NamePool(Random(args.seed)))
    print(f"Running {args.games} games for statistical analysis...")
    report = simulate(
        players,
        args.games,
        rules=RuleSet(target_score=args.target),
        seed=args.seed,
        progress_seconds=config.simulation.progress_seconds,
    )
    print(format_report(report, {name: s.name for name, s in players}))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.effective_log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.command == "play":
            return run_play(args)
        return run_simulate(args)
    except IntegrityError:
        logger.exception("Game state is corrupt")
        return 1
    except (Flip7Error, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (EOFError, KeyboardInterrupt):
        print("\nGoodbye.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
