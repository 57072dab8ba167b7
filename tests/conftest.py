"""Pytest fixtures for Flip 7 engine tests."""

from collections import deque
from random import Random
from typing import Iterable

import pytest

from flip7.cards import ActionKind, Card, Deck, ModifierKind
from flip7.game.engine import Flip7Game
from flip7.game.state import GameState
from flip7.player import Player, PlayerView
from flip7.rules import RuleSet
from flip7.strategy.base import (
    DecisionStrategy,
    adversarial_candidates,
    positive_candidates,
)


class ScriptedStrategy(DecisionStrategy):
    """
    Test double that plays from a script.

    Hit decisions are consumed in order and default to stay once exhausted.
    Targets are given by player name and default to the first candidate.
    Every decision state is recorded.
    """

    def __init__(
        self,
        hits: Iterable[bool] = (),
        targets: Iterable[str] = (),
        positive_targets: Iterable[str] = (),
        label: str = "scripted",
    ) -> None:
        self.hits = deque(hits)
        self.targets = deque(targets)
        self.positive_targets = deque(positive_targets)
        self._label = label
        self.states: list[GameState] = []

    @property
    def name(self) -> str:
        return self._label

    def decide_hit_or_stay(self, state: GameState) -> bool:
        self.states.append(state)
        return self.hits.popleft() if self.hits else False

    def choose_adversarial_target(self, state: GameState, action: ActionKind) -> PlayerView:
        self.states.append(state)
        if self.targets:
            return _by_name(state, self.targets.popleft())
        return adversarial_candidates(state)[0]

    def choose_positive_target(self, state: GameState, action: ActionKind) -> PlayerView:
        self.states.append(state)
        if self.positive_targets:
            return _by_name(state, self.positive_targets.popleft())
        return positive_candidates(state)[0]


def _by_name(state: GameState, name: str) -> PlayerView:
    for view in state.players:
        if view.name == name:
            return view
    raise KeyError(name)


def cards(*specs: str) -> list[Card]:
    """Build cards from short strings: '7', 'freeze', 'flip3', '2nd', '+4', 'x2'."""
    return [Card.from_string(s) for s in specs]


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled standard deck."""
    return Deck(rng=rng)


@pytest.fixture
def rules():
    """Default ruleset."""
    return RuleSet()


@pytest.fixture
def scripted():
    """Factory for scripted strategies."""
    return ScriptedStrategy


@pytest.fixture
def stacked_game(rng):
    """
    Factory for a game whose first draws are fixed.

    Usage: ``stacked_game(["7", "9"], alice=ScriptedStrategy(), bob=...)``.
    Seats follow keyword order; the dealer is seat 0, so seat 1 draws first.
    """

    def build(top: Iterable[str], rules: RuleSet | None = None, **strategies):
        deck = Deck.stacked(cards(*top), rng=rng)
        return Flip7Game(list(strategies.items()), rules=rules, rng=rng, deck=deck)

    return build


@pytest.fixture
def player(scripted):
    """An active player with an empty hand."""
    return Player(name="Alice", strategy=scripted())


@pytest.fixture
def flip7_player(scripted):
    """A player holding 0-6: seven distinct numbers."""
    p = Player(name="Lucky", strategy=scripted())
    for value in range(7):
        p.add_card(Card.number(value))
    return p


@pytest.fixture
def doubled_player(scripted):
    """A player holding [3][4] with x2 and +4."""
    p = Player(name="Double", strategy=scripted())
    p.add_card(Card.number(3))
    p.add_card(Card.number(4))
    p.add_card(Card.modifier_card(ModifierKind.TIMES_2))
    p.add_card(Card.modifier_card(ModifierKind.PLUS_4))
    return p


@pytest.fixture
def make_cards():
    """Card builder from short strings."""
    return cards
