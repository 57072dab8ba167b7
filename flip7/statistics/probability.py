"""Draw probabilities for Flip 7 decisions."""

from dataclasses import dataclass

from flip7.cards import Card, DeckSnapshot
from flip7.player import FLIP_7_BONUS, FLIP_7_SIZE, PlayerView


@dataclass(frozen=True)
class HitAnalysis:
    """One-card lookahead for a player considering a hit."""

    current_score: int
    bust_probability: float
    flip7_probability: float
    expected_score: float

    @property
    def expected_gain(self) -> float:
        """Return the expected change in round score from one more card."""
        return self.expected_score - self.current_score

    @property
    def favors_hit(self) -> bool:
        """Check if one more card is expected to improve the round score."""
        return self.expected_score > self.current_score


def bust_probability(player: PlayerView, deck: DeckSnapshot) -> float:
    """
    Return the chance that the next card duplicates a held number.

    Counts the remaining cards matching any held number value and divides
    by the total remaining. A held Second Chance is not considered here.
    """
    total = deck.total
    if total <= 0:
        return 0.0
    return deck.count_numbers(player.number_values) / total


def flip7_probability(
    player: PlayerView,
    deck: DeckSnapshot,
    flip7_size: int = FLIP_7_SIZE,
) -> float:
    """Return the chance that the next card completes a Flip 7."""
    if len(player.number_values) != flip7_size - 1:
        return 0.0
    total = deck.total
    if total <= 0:
        return 0.0
    missing = [
        Card.number(value) for value in range(13) if value not in player.number_values
    ]
    return deck.probability_of(missing)


def score_after(
    player: PlayerView,
    card: Card,
    flip7_size: int = FLIP_7_SIZE,
    flip7_bonus: int = FLIP_7_BONUS,
) -> int:
    """
    Return the round score a player would have after taking a card.

    A duplicate number scores 0, or the unchanged score if a Second Chance
    absorbs it. Action cards leave the score unchanged.
    """
    numbers = set(player.number_values)
    multiplier = player.has_multiplier
    flat = player.flat_bonus

    if card.is_number:
        if card.value in numbers:
            return player.round_score if player.has_second_chance else 0
        numbers.add(card.value)
    elif card.is_modifier:
        if card.modifier.is_multiplier:  # type: ignore[union-attr]
            multiplier = True
        else:
            flat += card.points
    else:
        return player.round_score

    total = sum(numbers) * (2 if multiplier else 1) + flat
    if len(numbers) == flip7_size:
        total += flip7_bonus
    return total


def analyze_hit(
    player: PlayerView,
    deck: DeckSnapshot,
    flip7_size: int = FLIP_7_SIZE,
    flip7_bonus: int = FLIP_7_BONUS,
) -> HitAnalysis:
    """
    Weigh one more card against staying.

    Args:
        player: The acting player's view
        deck: Snapshot of the cards the next draw can come from
        flip7_size: Distinct numbers that complete a Flip 7
        flip7_bonus: Points awarded for a Flip 7

    Returns:
        Bust chance, Flip 7 chance and expected round score after one card
    """
    current = player.round_score
    total = deck.total
    if total <= 0:
        return HitAnalysis(current, 0.0, 0.0, float(current))

    expected = 0.0
    for card, count in deck.counts.items():
        expected += count * score_after(player, card, flip7_size, flip7_bonus)
    expected /= total

    return HitAnalysis(
        current_score=current,
        bust_probability=bust_probability(player, deck),
        flip7_probability=flip7_probability(player, deck, flip7_size),
        expected_score=expected,
    )
