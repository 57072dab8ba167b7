"""Exceptions raised by the Flip 7 engine."""


class Flip7Error(Exception):
    """Base class for all engine errors."""


class IntegrityError(Flip7Error):
    """
    Fatal engine inconsistency.

    Raised when continuing would produce an incorrect game outcome.
    Callers should abort the game rather than recover.
    """


class DeckExhausted(IntegrityError):
    """Both the draw pile and the discard pile are empty."""


class CardConservationViolation(IntegrityError):
    """Cards across deck, discards and hands no longer add up to the original total."""

    def __init__(self, found: int, expected: int) -> None:
        super().__init__(
            f"Card total diverged from the original deck: found {found}, expected {expected}"
        )
        self.found = found
        self.expected = expected


class NoEligibleRecipient(Flip7Error):
    """No other active player can receive a Second Chance card."""


class SecondChanceNotHeld(Flip7Error):
    """A Second Chance was spent by a player who does not hold one."""


class InvalidTargetError(Flip7Error):
    """A strategy picked a player that is not active in the round."""


class InvalidPhaseError(Flip7Error):
    """An operation was requested in a phase that does not allow it."""
