"""Core Flip 7 engine - 100% UI-agnostic."""

from flip7.cards import ActionKind, Card, CardKind, Deck, DeckSnapshot, ModifierKind
from flip7.errors import Flip7Error, IntegrityError
from flip7.player import Player, PlayerState, PlayerView
from flip7.rules import RuleSet
from flip7.game import Flip7Game, GameState, RoundResult

__all__ = [
    "ActionKind",
    "Card",
    "CardKind",
    "Deck",
    "DeckSnapshot",
    "ModifierKind",
    "Flip7Error",
    "IntegrityError",
    "Player",
    "PlayerState",
    "PlayerView",
    "RuleSet",
    "Flip7Game",
    "GameState",
    "RoundResult",
]
