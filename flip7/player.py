"""Player round state machine for Flip 7."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from flip7.cards import ActionKind, Card, ModifierKind
from flip7.errors import SecondChanceNotHeld

if TYPE_CHECKING:
    from flip7.strategy.base import DecisionStrategy


FLIP_7_SIZE = 7
FLIP_7_BONUS = 15


class PlayerState(Enum):
    """
    Round state of a player.

    Flow: ACTIVE -> STAYED | BUSTED. Both end states last until the round reset.
    """

    ACTIVE = auto()
    STAYED = auto()
    BUSTED = auto()

    def __str__(self) -> str:
        return self.name.title()


class AddOutcome(Enum):
    """What happened when a card was handed to a player."""

    ADDED = auto()

    # Duplicate number, no protection: player is now BUSTED
    DUPLICATE_BUST = auto()

    # Duplicate number, but a Second Chance is held: card NOT added, player still ACTIVE
    DUPLICATE_AVOIDABLE = auto()

    # Card added and the hand now holds 7 distinct numbers: player is now STAYED
    FLIP_7 = auto()

    # Second Chance offered to a holder of one: card NOT added
    SECOND_CHANCE_ALREADY_HELD = auto()


@dataclass(frozen=True)
class PlayerView:
    """
    Read-only projection of a player, used inside game state snapshots.

    ``seat`` identifies the player when a strategy picks a target.
    """

    name: str
    seat: int
    state: PlayerState
    total_score: int
    round_score: int
    has_second_chance: bool
    numbers: tuple[int, ...] = ()
    modifiers: tuple[ModifierKind, ...] = ()
    strategy_name: str = ""

    @property
    def is_active(self) -> bool:
        """Check if the player can still act this round."""
        return self.state == PlayerState.ACTIVE

    @property
    def number_values(self) -> frozenset[int]:
        """Return the distinct number values held."""
        return frozenset(self.numbers)

    @property
    def number_total(self) -> int:
        """Return the sum of held number cards, before modifiers."""
        return sum(self.numbers)

    @property
    def flat_bonus(self) -> int:
        """Return the sum of held +N modifiers."""
        return sum(m.bonus for m in self.modifiers)

    @property
    def has_multiplier(self) -> bool:
        """Check if an x2 modifier is held."""
        return any(m.is_multiplier for m in self.modifiers)

    @property
    def effective_score(self) -> int:
        """Return the banked total plus the projected round score."""
        return self.total_score + self.round_score


@dataclass(eq=False)
class Player:
    """
    A seat at the table.

    Owns its hand and round state exclusively; the engine reads it through
    the public methods and drives transitions by handing it cards.
    """

    name: str
    strategy: "DecisionStrategy"
    seat: int = 0
    total_score: int = 0
    number_cards: list[Card] = field(default_factory=list)
    modifier_cards: list[Card] = field(default_factory=list)
    action_cards: list[Card] = field(default_factory=list)
    state: PlayerState = PlayerState.ACTIVE
    has_second_chance: bool = False

    # Per-game counters
    flip7_count: int = 0
    bust_count: int = 0

    flip7_size: int = field(default=FLIP_7_SIZE, repr=False)
    flip7_bonus: int = field(default=FLIP_7_BONUS, repr=False)

    def add_card(self, card: Card) -> AddOutcome:
        """
        Hand a card to the player.

        Freeze and Flip Three are never held; the engine resolves them.

        Returns:
            The outcome the engine must react to
        """
        if self.state != PlayerState.ACTIVE:
            raise ValueError(f"{self.name} is {self.state} and cannot take cards")

        if card.is_number:
            if card.value in self.number_values:
                if self.has_second_chance:
                    return AddOutcome.DUPLICATE_AVOIDABLE
                self.state = PlayerState.BUSTED
                self.bust_count += 1
                return AddOutcome.DUPLICATE_BUST

            self.number_cards.append(card)
            if len(self.number_cards) >= self.flip7_size:
                self.state = PlayerState.STAYED
                self.flip7_count += 1
                return AddOutcome.FLIP_7
            return AddOutcome.ADDED

        if card.is_modifier:
            self.modifier_cards.append(card)
            return AddOutcome.ADDED

        if card.action != ActionKind.SECOND_CHANCE:
            raise ValueError(f"{card} is resolved immediately and never held")

        if self.has_second_chance:
            return AddOutcome.SECOND_CHANCE_ALREADY_HELD
        self.action_cards.append(card)
        self.has_second_chance = True
        return AddOutcome.ADDED

    def use_second_chance(self) -> Card:
        """
        Spend the held Second Chance.

        Returns:
            The Second Chance card, for the discard pile
        """
        if not self.has_second_chance:
            raise SecondChanceNotHeld(f"{self.name} holds no Second Chance")

        for i, card in enumerate(self.action_cards):
            if card.action == ActionKind.SECOND_CHANCE:
                self.has_second_chance = False
                return self.action_cards.pop(i)

        # Flag without a card means the hand was tampered with.
        raise SecondChanceNotHeld(f"{self.name} is flagged but holds no Second Chance card")

    def stay(self) -> bool:
        """
        Bank the current round score voluntarily.

        Returns:
            True if the player was active and is now stayed
        """
        if self.state != PlayerState.ACTIVE:
            return False
        self.state = PlayerState.STAYED
        return True

    def freeze(self) -> None:
        """Force an active player to stay."""
        if self.state != PlayerState.ACTIVE:
            raise ValueError(f"Cannot freeze {self.name}: player is {self.state}")
        self.state = PlayerState.STAYED

    def round_score(self) -> int:
        """
        Calculate the score for the current round.

        Number cards are summed and doubled by x2, flat modifiers are added
        afterwards, and a full Flip 7 earns the bonus. Busted players score 0.
        Has no side effects.
        """
        if self.state == PlayerState.BUSTED:
            return 0

        total = sum(card.value for card in self.number_cards)
        if any(card.modifier == ModifierKind.TIMES_2 for card in self.modifier_cards):
            total *= 2

        total += sum(card.points for card in self.modifier_cards)

        if len(self.number_values) == self.flip7_size:
            total += self.flip7_bonus

        return total

    def bank_round_score(self) -> int:
        """Add the round score to the cumulative total and return it."""
        score = self.round_score()
        self.total_score += score
        return score

    def reset_for_new_round(self) -> list[Card]:
        """
        Clear the hand and return to ACTIVE.

        Returns:
            Every card that was held, for the discard pile
        """
        cards = self.hand
        self.number_cards.clear()
        self.modifier_cards.clear()
        self.action_cards.clear()
        self.state = PlayerState.ACTIVE
        self.has_second_chance = False
        return cards

    def reset_for_new_game(self) -> list[Card]:
        """Reset the hand, the total score and the per-game counters."""
        cards = self.reset_for_new_round()
        self.total_score = 0
        self.flip7_count = 0
        self.bust_count = 0
        return cards

    @property
    def hand(self) -> list[Card]:
        """Return every held card: numbers, then modifiers, then actions."""
        return [*self.number_cards, *self.modifier_cards, *self.action_cards]

    @property
    def number_values(self) -> frozenset[int]:
        """Return the distinct number values held."""
        return frozenset(card.value for card in self.number_cards)

    @property
    def has_number_cards(self) -> bool:
        """Check if the player holds any number card."""
        return bool(self.number_cards)

    @property
    def is_active(self) -> bool:
        """Check if the player can still act this round."""
        return self.state == PlayerState.ACTIVE

    @property
    def is_busted(self) -> bool:
        return self.state == PlayerState.BUSTED

    @property
    def has_flip7(self) -> bool:
        """Check if the hand holds a full set of distinct numbers."""
        return len(self.number_values) == self.flip7_size

    def view(self) -> PlayerView:
        """Return a read-only snapshot of this player."""
        return PlayerView(
            name=self.name,
            seat=self.seat,
            state=self.state,
            total_score=self.total_score,
            round_score=self.round_score(),
            has_second_chance=self.has_second_chance,
            numbers=tuple(card.value for card in self.number_cards),
            modifiers=tuple(card.modifier for card in self.modifier_cards),  # type: ignore[misc]
            strategy_name=getattr(self.strategy, "name", ""),
        )

    def __str__(self) -> str:
        if self.state == PlayerState.BUSTED:
            return f"{self.name}: BUST"
        cards_str = " ".join(str(card) for card in self.hand) or "no cards"
        suffix = f" (stayed: {self.round_score()})" if self.state == PlayerState.STAYED else ""
        return f"{self.name}: {cards_str}{suffix}"
