"""Card, Deck and DeckSnapshot classes - immutable card representations."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from random import Random
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from flip7.errors import DeckExhausted


class CardKind(Enum):
    """The three families of Flip 7 cards."""

    NUMBER = auto()
    ACTION = auto()
    MODIFIER = auto()


class ActionKind(Enum):
    """Action cards, resolved as soon as they are drawn."""

    FREEZE = auto()
    FLIP_THREE = auto()
    SECOND_CHANCE = auto()

    def __str__(self) -> str:
        return {
            ActionKind.FREEZE: "FREEZE",
            ActionKind.FLIP_THREE: "FLIP 3",
            ActionKind.SECOND_CHANCE: "2ND CHANCE",
        }[self]


class ModifierKind(Enum):
    """Score modifier cards."""

    PLUS_2 = 2
    PLUS_4 = 4
    PLUS_6 = 6
    PLUS_8 = 8
    PLUS_10 = 10
    TIMES_2 = 0

    def __str__(self) -> str:
        if self == ModifierKind.TIMES_2:
            return "x2"
        return f"+{self.value}"

    @property
    def bonus(self) -> int:
        """Return the flat points added by this modifier (0 for x2)."""
        return self.value

    @property
    def is_multiplier(self) -> bool:
        """Check if this modifier doubles the number-card subtotal."""
        return self == ModifierKind.TIMES_2


MIN_NUMBER = 0
MAX_NUMBER = 12


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable Flip 7 card.

    A tagged variant: ``kind`` selects which of ``value``, ``action`` or
    ``modifier`` is meaningful. Use the ``number``, ``action_card`` and
    ``modifier_card`` constructors rather than building one by hand.
    """

    kind: CardKind
    value: int = 0
    action: ActionKind | None = None
    modifier: ModifierKind | None = None

    def __post_init__(self) -> None:
        """Reject inconsistent tags."""
        if self.kind == CardKind.NUMBER:
            if not MIN_NUMBER <= self.value <= MAX_NUMBER:
                raise ValueError(f"Number card value must be 0-12, got {self.value}")
            if self.action is not None or self.modifier is not None:
                raise ValueError("Number card cannot carry an action or modifier")
        elif self.kind == CardKind.ACTION:
            if self.action is None or self.modifier is not None or self.value:
                raise ValueError("Action card needs exactly an action kind")
        elif self.kind == CardKind.MODIFIER:
            if self.modifier is None or self.action is not None or self.value:
                raise ValueError("Modifier card needs exactly a modifier kind")

    @classmethod
    def number(cls, value: int) -> "Card":
        """Create a number card (0-12)."""
        return cls(CardKind.NUMBER, value=value)

    @classmethod
    def action_card(cls, action: ActionKind) -> "Card":
        """Create an action card."""
        return cls(CardKind.ACTION, action=action)

    @classmethod
    def modifier_card(cls, modifier: ModifierKind) -> "Card":
        """Create a modifier card."""
        return cls(CardKind.MODIFIER, modifier=modifier)

    def __str__(self) -> str:
        if self.kind == CardKind.NUMBER:
            return f"[{self.value}]"
        if self.kind == CardKind.ACTION:
            return f"[{self.action}]"
        return f"[{self.modifier}]"

    def __repr__(self) -> str:
        if self.kind == CardKind.NUMBER:
            return f"Card.number({self.value})"
        if self.kind == CardKind.ACTION:
            return f"Card.action_card({self.action.name})"  # type: ignore[union-attr]
        return f"Card.modifier_card({self.modifier.name})"  # type: ignore[union-attr]

    @property
    def points(self) -> int:
        """Return the direct point contribution (x2 and actions give 0)."""
        if self.kind == CardKind.NUMBER:
            return self.value
        if self.kind == CardKind.MODIFIER:
            return self.modifier.bonus  # type: ignore[union-attr]
        return 0

    @property
    def is_number(self) -> bool:
        """Check if this is a number card."""
        return self.kind == CardKind.NUMBER

    @property
    def is_action(self) -> bool:
        """Check if this is an action card."""
        return self.kind == CardKind.ACTION

    @property
    def is_modifier(self) -> bool:
        """Check if this is a modifier card."""
        return self.kind == CardKind.MODIFIER

    @property
    def can_cause_bust(self) -> bool:
        """Only number cards can duplicate a held card."""
        return self.is_number

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '7', 'freeze', 'flip3', '2nd', '+4', 'x2'."""
        s = s.strip().lower().strip("[]")
        if not s:
            raise ValueError("Invalid card string: empty")

        if s.isdigit():
            return cls.number(int(s))

        action_map = {
            "freeze": ActionKind.FREEZE,
            "flip3": ActionKind.FLIP_THREE,
            "flip 3": ActionKind.FLIP_THREE,
            "flipthree": ActionKind.FLIP_THREE,
            "2nd": ActionKind.SECOND_CHANCE,
            "2nd chance": ActionKind.SECOND_CHANCE,
            "secondchance": ActionKind.SECOND_CHANCE,
        }

        modifier_map = {
            "+2": ModifierKind.PLUS_2,
            "+4": ModifierKind.PLUS_4,
            "+6": ModifierKind.PLUS_6,
            "+8": ModifierKind.PLUS_8,
            "+10": ModifierKind.PLUS_10,
            "x2": ModifierKind.TIMES_2,
            "×2": ModifierKind.TIMES_2,
        }

        if s in action_map:
            return cls.action_card(action_map[s])
        if s in modifier_map:
            return cls.modifier_card(modifier_map[s])
        raise ValueError(f"Invalid card string: {s}")


def standard_cards() -> list[Card]:
    """
    Return the standard 94-card composition in a fixed order.

    Number cards: value N has N copies for N >= 1, plus a single 0 (79 cards).
    Modifiers: one each of +2, +4, +6, +8, +10 and x2 (6 cards).
    Actions: three each of Freeze, Flip Three and Second Chance (9 cards).
    """
    cards = [Card.number(0)]
    for value in range(1, MAX_NUMBER + 1):
        cards.extend(Card.number(value) for _ in range(value))
    cards.extend(Card.modifier_card(modifier) for modifier in ModifierKind)
    for _ in range(3):
        cards.extend(Card.action_card(action) for action in ActionKind)
    return cards


STANDARD_DECK_SIZE = 94


@dataclass(frozen=True)
class DeckSnapshot:
    """
    Read-only multiset of the cards the next draw can come from.

    Strategies receive this instead of the live deck.
    """

    counts: Mapping[Card, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the counts mapping."""
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "DeckSnapshot":
        """Build a snapshot by counting cards."""
        return cls(counts=Counter(cards))

    @property
    def total(self) -> int:
        """Return the number of cards in the snapshot."""
        return sum(self.counts.values())

    def count(self, card: Card) -> int:
        """Return how many copies of a card remain."""
        return self.counts.get(card, 0)

    def count_numbers(self, values: Iterable[int]) -> int:
        """Return how many number cards with any of the given values remain."""
        return sum(self.count(Card.number(v)) for v in set(values))

    def probability_of(self, cards: Iterable[Card]) -> float:
        """Return the chance the next draw is one of the given cards."""
        total = self.total
        if total <= 0:
            return 0.0
        return sum(self.count(card) for card in set(cards)) / total

    def __len__(self) -> int:
        return self.total


class Deck:
    """
    The Flip 7 draw pile plus its discard pile.

    Cards only move deck -> hand/resolution, hand -> discard, and
    discard -> deck (on reshuffle). The draw pile is reshuffled from the
    discards only when it runs out mid-draw.
    """

    def __init__(
        self,
        rng: Random | None = None,
        cards: list[Card] | None = None,
        shuffle: bool = True,
    ) -> None:
        """
        Initialize a deck.

        Args:
            rng: Random number generator for shuffling
            cards: Explicit card list (top of deck last); defaults to the standard 94
            shuffle: Whether to shuffle the initial cards
        """
        self._rng = rng or Random()
        self._cards: list[Card] = list(cards) if cards is not None else standard_cards()
        self._discards: list[Card] = []
        self._original_total = len(self._cards)
        self._reshuffle_count = 0
        if shuffle:
            self.shuffle()

    @classmethod
    def stacked(cls, top: Iterable[Card], rng: Random | None = None) -> "Deck":
        """
        Create a full standard deck whose first draws are ``top``, in order.

        The remaining cards are shuffled beneath them.
        """
        rng = rng or Random()
        top = list(top)
        rest = standard_cards()
        for card in top:
            try:
                rest.remove(card)
            except ValueError:
                raise ValueError(f"Not enough copies of {card} in a standard deck") from None
        rng.shuffle(rest)
        # Draws pop from the end of the list.
        return cls(rng=rng, cards=rest + top[::-1], shuffle=False)

    def shuffle(self) -> None:
        """Shuffle the draw pile."""
        self._rng.shuffle(self._cards)

    def draw(self) -> Card:
        """
        Draw the top card, reshuffling the discards in if the draw pile is empty.

        Raises:
            DeckExhausted: If both the draw pile and discard pile are empty
        """
        if not self._cards:
            self.reshuffle()
        if not self._cards:
            raise DeckExhausted("Cannot draw: deck and discard pile are both empty")
        return self._cards.pop()

    def discard(self, card: Card) -> None:
        """Add a card to the discard pile."""
        self._discards.append(card)

    def discard_all(self, cards: Iterable[Card]) -> None:
        """Add several cards to the discard pile."""
        self._discards.extend(cards)

    def reshuffle(self) -> None:
        """Move every discard back into the draw pile and shuffle."""
        self._cards.extend(self._discards)
        self._discards.clear()
        self._reshuffle_count += 1
        self.shuffle()

    def snapshot(self) -> DeckSnapshot:
        """Return a read-only view of what the next draw can produce."""
        if self._cards:
            return DeckSnapshot.from_cards(self._cards)
        return DeckSnapshot.from_cards(self._discards)

    @property
    def can_draw(self) -> bool:
        """Check if a card can be supplied (possibly after a reshuffle)."""
        return bool(self._cards or self._discards)

    @property
    def cards_remaining(self) -> int:
        """Return the number of undrawn cards."""
        return len(self._cards)

    @property
    def discard_count(self) -> int:
        """Return the number of cards in the discard pile."""
        return len(self._discards)

    @property
    def discards(self) -> tuple[Card, ...]:
        """Return the discard pile, oldest first."""
        return tuple(self._discards)

    @property
    def total_cards(self) -> int:
        """Return the number of cards held by the deck (draw pile + discards)."""
        return len(self._cards) + len(self._discards)

    @property
    def original_total(self) -> int:
        """Return the number of cards the deck was created with."""
        return self._original_total

    @property
    def reshuffle_count(self) -> int:
        """Return how many times the discards have been reshuffled in."""
        return self._reshuffle_count

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
