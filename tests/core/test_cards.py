"""Tests for Card, Deck and DeckSnapshot classes."""

from collections import Counter
from random import Random

import pytest

from flip7.cards import (
    STANDARD_DECK_SIZE,
    ActionKind,
    Card,
    CardKind,
    Deck,
    DeckSnapshot,
    ModifierKind,
    standard_cards,
)
from flip7.errors import DeckExhausted


class TestCard:
    """Tests for the Card class."""

    def test_number_card(self):
        """Test creating a number card."""
        card = Card.number(7)
        assert card.kind == CardKind.NUMBER
        assert card.value == 7
        assert card.points == 7
        assert card.is_number
        assert card.can_cause_bust

    def test_card_immutability(self):
        """Test that cards are immutable."""
        card = Card.number(3)
        with pytest.raises(AttributeError):
            card.value = 4

    @pytest.mark.parametrize("value", [-1, 13, 100])
    def test_number_out_of_range(self, value):
        """Test that number cards are limited to 0-12."""
        with pytest.raises(ValueError):
            Card.number(value)

    def test_inconsistent_tags_rejected(self):
        """Test that a card cannot mix kinds."""
        with pytest.raises(ValueError):
            Card(CardKind.ACTION)
        with pytest.raises(ValueError):
            Card(CardKind.NUMBER, value=3, modifier=ModifierKind.PLUS_2)
        with pytest.raises(ValueError):
            Card(CardKind.MODIFIER, modifier=ModifierKind.PLUS_2, action=ActionKind.FREEZE)

    def test_modifier_points(self):
        """Test that +N modifiers add N and x2 adds nothing directly."""
        assert Card.modifier_card(ModifierKind.PLUS_10).points == 10
        assert Card.modifier_card(ModifierKind.TIMES_2).points == 0
        assert ModifierKind.TIMES_2.is_multiplier
        assert not ModifierKind.PLUS_4.is_multiplier

    def test_action_cards_never_bust(self):
        """Test that only number cards can cause a bust."""
        freeze = Card.action_card(ActionKind.FREEZE)
        assert freeze.is_action
        assert freeze.points == 0
        assert not freeze.can_cause_bust
        assert not Card.modifier_card(ModifierKind.PLUS_2).can_cause_bust

    def test_card_str(self):
        """Test string representation."""
        assert str(Card.number(12)) == "[12]"
        assert str(Card.action_card(ActionKind.FLIP_THREE)) == "[FLIP 3]"
        assert str(Card.action_card(ActionKind.SECOND_CHANCE)) == "[2ND CHANCE]"
        assert str(Card.modifier_card(ModifierKind.TIMES_2)) == "[x2]"
        assert str(Card.modifier_card(ModifierKind.PLUS_6)) == "[+6]"

    def test_card_from_string(self):
        """Test creating cards from strings."""
        assert Card.from_string("0") == Card.number(0)
        assert Card.from_string("[11]") == Card.number(11)
        assert Card.from_string("Freeze") == Card.action_card(ActionKind.FREEZE)
        assert Card.from_string("flip3") == Card.action_card(ActionKind.FLIP_THREE)
        assert Card.from_string("2nd") == Card.action_card(ActionKind.SECOND_CHANCE)
        assert Card.from_string("+8") == Card.modifier_card(ModifierKind.PLUS_8)
        assert Card.from_string("x2") == Card.modifier_card(ModifierKind.TIMES_2)

    @pytest.mark.parametrize("text", ["", "joker", "+3", "13"])
    def test_card_from_string_invalid(self, text):
        """Test that unknown card strings are rejected."""
        with pytest.raises(ValueError):
            Card.from_string(text)

    def test_card_hash(self):
        """Test that cards can be used in sets/dicts."""
        cards = {Card.number(5), Card.number(5), Card.number(6)}
        assert len(cards) == 2


class TestStandardCards:
    """Tests for the 94-card composition."""

    def test_total(self):
        """Test the deck has 94 cards."""
        assert len(standard_cards()) == STANDARD_DECK_SIZE == 94

    def test_number_copies(self):
        """Test value N appears N times, with a single 0."""
        counts = Counter(c.value for c in standard_cards() if c.is_number)
        assert counts[0] == 1
        for value in range(1, 13):
            assert counts[value] == value

    def test_special_cards(self):
        """Test one of each modifier and three of each action."""
        counts = Counter(standard_cards())
        for modifier in ModifierKind:
            assert counts[Card.modifier_card(modifier)] == 1
        for action in ActionKind:
            assert counts[Card.action_card(action)] == 3


class TestDeck:
    """Tests for the Deck class."""

    def test_deck_creation(self, deck):
        """Test creating a deck."""
        assert deck.cards_remaining == 94
        assert deck.discard_count == 0
        assert deck.original_total == 94

    def test_shuffle_reproducible(self):
        """Test that the same seed gives the same order."""
        deck1 = Deck(rng=Random(42))
        deck2 = Deck(rng=Random(42))
        assert [deck1.draw() for _ in range(20)] == [deck2.draw() for _ in range(20)]

    def test_draw_and_discard(self, deck):
        """Test drawing and discarding keeps the total."""
        card = deck.draw()
        assert deck.cards_remaining == 93
        assert deck.total_cards == 93
        deck.discard(card)
        assert deck.total_cards == 94
        assert deck.discards == (card,)

    def test_reshuffle_when_empty(self, rng):
        """Test the discards come back once the draw pile runs out."""
        deck = Deck(rng=rng, cards=[Card.number(1), Card.number(2)], shuffle=False)
        first = deck.draw()
        second = deck.draw()
        deck.discard_all([first, second])
        assert deck.cards_remaining == 0
        assert deck.can_draw

        deck.draw()
        assert deck.reshuffle_count == 1
        assert deck.discard_count == 0
        assert deck.cards_remaining == 1

    def test_exhausted(self, rng):
        """Test drawing from an empty deck and discard pile fails."""
        deck = Deck(rng=rng, cards=[Card.number(4)], shuffle=False)
        deck.draw()
        assert not deck.can_draw
        with pytest.raises(DeckExhausted):
            deck.draw()

    def test_stacked_draw_order(self, rng):
        """Test a stacked deck yields the requested cards first."""
        top = [Card.number(7), Card.action_card(ActionKind.FREEZE), Card.number(9)]
        deck = Deck.stacked(top, rng=rng)
        assert deck.cards_remaining == 94
        assert [deck.draw() for _ in range(3)] == top

    def test_stacked_rejects_extra_copies(self, rng):
        """Test a stacked deck keeps the standard composition."""
        with pytest.raises(ValueError):
            Deck.stacked([Card.number(0), Card.number(0)], rng=rng)

    def test_snapshot_falls_back_to_discards(self, rng):
        """Test the snapshot shows the discards when the draw pile is empty."""
        deck = Deck(rng=rng, cards=[Card.number(3)], shuffle=False)
        deck.discard(deck.draw())
        snapshot = deck.snapshot()
        assert snapshot.total == 1
        assert snapshot.count(Card.number(3)) == 1


class TestDeckSnapshot:
    """Tests for the read-only deck view."""

    def test_counts(self):
        """Test counting cards and probabilities."""
        snapshot = DeckSnapshot.from_cards(standard_cards())
        assert snapshot.total == 94
        assert len(snapshot) == 94
        assert snapshot.count(Card.number(12)) == 12
        assert snapshot.count_numbers([12, 11]) == 23
        assert snapshot.probability_of([Card.number(1)]) == pytest.approx(1 / 94)

    def test_read_only(self):
        """Test the counts mapping cannot be mutated."""
        snapshot = DeckSnapshot.from_cards([Card.number(1)])
        with pytest.raises(TypeError):
            snapshot.counts[Card.number(2)] = 1  # type: ignore[index]

    def test_empty(self):
        """Test an empty snapshot reports zero probability."""
        snapshot = DeckSnapshot()
        assert snapshot.total == 0
        assert snapshot.probability_of([Card.number(1)]) == 0.0
