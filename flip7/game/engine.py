"""Flip 7 game engine with state machine."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from random import Random
from typing import Callable, Sequence

from transitions import Machine

from flip7.cards import ActionKind, Card, Deck
from flip7.errors import (
    CardConservationViolation,
    DeckExhausted,
    IntegrityError,
    InvalidPhaseError,
    InvalidTargetError,
    NoEligibleRecipient,
)
from flip7.game.events import EventEmitter, EventType, GameEvent
from flip7.game.state import VALID_TRANSITIONS, GameState, RoundPhase
from flip7.player import AddOutcome, Player
from flip7.rules import RuleSet
from flip7.strategy.base import DecisionStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundResult:
    """Outcome of one round, keyed by player name."""

    round_number: int
    dealer: str
    scores: dict[str, int] = field(default_factory=dict)
    totals: dict[str, int] = field(default_factory=dict)
    busts: tuple[str, ...] = ()
    flip7_achiever: str | None = None
    game_over: bool = False
    winner: str | None = None


PlayerEntry = tuple[str, DecisionStrategy]

# Trigger name for each edge of the phase table
_TRIGGERS: dict[tuple[RoundPhase, RoundPhase], str] = {
    (RoundPhase.WAITING_TO_DEAL, RoundPhase.DEALING): "begin_deal",
    (RoundPhase.DEALING, RoundPhase.PLAYER_TURNS): "deal_complete",
    (RoundPhase.PLAYER_TURNS, RoundPhase.SCORING): "turns_complete",
    (RoundPhase.SCORING, RoundPhase.ROUND_COMPLETE): "scores_banked",
    (RoundPhase.ROUND_COMPLETE, RoundPhase.WAITING_TO_DEAL): "new_round",
    (RoundPhase.ROUND_COMPLETE, RoundPhase.GAME_OVER): "end_game",
}


def _machine_transitions() -> list[dict[str, str]]:
    """Build the state machine transitions from the phase table."""
    return [
        {
            "trigger": _TRIGGERS[(source, dest)],
            "source": source.name.lower(),
            "dest": dest.name.lower(),
        }
        for source, dests in VALID_TRANSITIONS.items()
        for dest in dests
    ]


class Flip7Game:
    """
    Flip 7 game engine using a state machine.

    This is the core game logic, completely UI-agnostic.
    Communication happens through events and return values only.
    Players and the deck are owned here; strategies only ever see
    ``GameState`` snapshots.
    """

    # State machine states
    STATES = [s.name.lower() for s in RoundPhase]

    # State machine transitions
    TRANSITIONS = _machine_transitions()

    def __init__(
        self,
        players: Sequence[PlayerEntry],
        rules: RuleSet | None = None,
        rng: Random | None = None,
        deck: Deck | None = None,
        keep_history: bool = True,
    ) -> None:
        """
        Initialize a new game.

        Args:
            players: (name, strategy) pairs in seating order
            rules: Game rules (uses defaults if not provided)
            rng: Random number generator for reproducible games
            deck: Pre-built deck, e.g. a stacked one for tests
            keep_history: Record emitted events
        """
        self.rules = rules or RuleSet()
        self._validate_players(players)

        self._rng = rng or Random()
        self.deck = deck or Deck(rng=self._rng)
        self.players = [
            Player(
                name=name,
                strategy=strategy,
                seat=seat,
                flip7_size=self.rules.flip7_size,
                flip7_bonus=self.rules.flip7_bonus,
            )
            for seat, (name, strategy) in enumerate(players)
        ]
        self.events = EventEmitter(keep_history=keep_history)

        self.round_number = 1
        self.dealer_index = 0
        self.results: list[RoundResult] = []
        self._in_flight: list[Card] = []
        self._flip7_achiever: Player | None = None
        self._winner: Player | None = None
        self._started = False

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting_to_deal",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    def _validate_players(self, players: Sequence[PlayerEntry]) -> None:
        """Check seat count, names and strategies."""
        if not self.rules.min_players <= len(players) <= self.rules.max_players:
            raise ValueError(
                f"Flip 7 needs {self.rules.min_players}-{self.rules.max_players} players, "
                f"got {len(players)}"
            )
        names = [name for name, _ in players]
        if any(not name.strip() for name in names):
            raise ValueError("Player names cannot be empty")
        if len(set(names)) != len(names):
            raise ValueError("Player names must be unique")
        for name, strategy in players:
            if not isinstance(strategy, DecisionStrategy):
                raise TypeError(f"Strategy for {name} must be a DecisionStrategy")

    @property
    def phase(self) -> RoundPhase:
        """Get current round phase as enum."""
        return RoundPhase[self._machine_state.upper()]  # type: ignore

    @property
    def game_over(self) -> bool:
        """Check if someone has reached the target score."""
        return self.phase == RoundPhase.GAME_OVER

    @property
    def winner(self) -> Player | None:
        """Return the winner once the game is over."""
        return self._winner

    @property
    def dealer(self) -> Player:
        """Return the current dealer."""
        return self.players[self.dealer_index]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    # ------------------------------------------------------------------
    # Round flow
    # ------------------------------------------------------------------

    def play_round(self) -> RoundResult:
        """
        Play one full round: deal, player turns, scoring.

        Returns:
            Per-player round scores and totals, busts and any Flip 7

        Raises:
            InvalidPhaseError: If the game is over or a round is in progress
            IntegrityError: If the deck runs dry or cards go missing
        """
        if self.phase != RoundPhase.WAITING_TO_DEAL:
            self.events.emit_new(
                EventType.INVALID_ACTION,
                message="Cannot start a round in current state",
                state=self.phase.name,
            )
            raise InvalidPhaseError(f"Cannot start a round while {self.phase}")

        if not self._started:
            self._started = True
            self.events.emit_new(
                EventType.GAME_STARTED,
                players=[p.name for p in self.players],
                target_score=self.rules.target_score,
            )

        self._reset_hands()
        self._flip7_achiever = None

        self.begin_deal()  # Trigger state transition
        self.events.emit_new(
            EventType.ROUND_STARTED,
            round_number=self.round_number,
            dealer=self.dealer.name,
        )
        logger.debug("Round %d, dealer %s", self.round_number, self.dealer.name)

        self._deal_initial_cards()
        self.deal_complete()

        self._play_turns()
        self.turns_complete()

        return self._score_round()

    def play_game(self) -> Player:
        """
        Play rounds until someone reaches the target score.

        Returns:
            The winner
        """
        while not self.game_over:
            self.play_round()
        if self._winner is None:
            raise IntegrityError("Game ended without a winner")
        return self._winner

    def _turn_order(self) -> list[Player]:
        """Return the players clockwise from the seat left of the dealer."""
        count = len(self.players)
        return [self.players[(self.dealer_index + 1 + i) % count] for i in range(count)]

    def _has_active_players(self) -> bool:
        return any(p.is_active for p in self.players)

    def _reset_hands(self) -> None:
        """Return every hand to the discard pile and reactivate all players."""
        for player in self.players:
            cards = player.reset_for_new_round()
            if cards:
                self.deck.discard_all(cards)
                self.events.emit_new(
                    EventType.CARDS_DISCARDED,
                    player=player.name,
                    count=len(cards),
                )
        self.verify_conservation()

    def _deal_initial_cards(self) -> None:
        """Deal one card to each seat, starting left of the dealer."""
        for player in self._turn_order():
            # An earlier action card may already have frozen or Flip-7'd this seat
            if not player.is_active:
                continue
            self._take_card(player)

    def _play_turns(self) -> None:
        """Cycle active players until nobody can act."""
        while self._has_active_players():
            for player in self._turn_order():
                if not player.is_active:
                    continue

                if not player.has_number_cards:
                    self.events.emit_new(EventType.PLAYER_FORCED_HIT, player=player.name)
                    self._take_card(player)
                elif player.strategy.decide_hit_or_stay(self.build_game_state(player)):
                    self.events.emit_new(EventType.PLAYER_HIT, player=player.name)
                    self._take_card(player)
                else:
                    player.stay()
                    self.events.emit_new(
                        EventType.PLAYER_STAYED,
                        player=player.name,
                        round_score=player.round_score(),
                    )

                if not self._has_active_players():
                    break

    def _score_round(self) -> RoundResult:
        """Bank every round score, advance the dealer and check for a winner."""
        scores: dict[str, int] = {}
        busts: list[str] = []
        for player in self.players:
            score = player.bank_round_score()
            scores[player.name] = score
            if player.is_busted:
                busts.append(player.name)
            self.events.emit_new(
                EventType.ROUND_SCORED,
                player=player.name,
                round_score=score,
                total_score=player.total_score,
                busted=player.is_busted,
            )

        self.scores_banked()
        self.verify_conservation()

        played_round = self.round_number
        dealer = self.dealer
        self.round_number += 1
        self.dealer_index = (self.dealer_index + 1) % len(self.players)

        finished = any(p.total_score >= self.rules.target_score for p in self.players)
        if finished:
            self._winner = self._determine_winner(scores, dealer.seat)

        result = RoundResult(
            round_number=played_round,
            dealer=dealer.name,
            scores=scores,
            totals={p.name: p.total_score for p in self.players},
            busts=tuple(busts),
            flip7_achiever=self._flip7_achiever.name if self._flip7_achiever else None,
            game_over=finished,
            winner=self._winner.name if self._winner else None,
        )
        self.results.append(result)
        self.events.emit_new(
            EventType.ROUND_ENDED,
            round_number=played_round,
            scores=dict(scores),
            totals=dict(result.totals),
        )

        if finished:
            self.end_game()
            self.events.emit_new(
                EventType.GAME_ENDED,
                winner=result.winner,
                total_score=self._winner.total_score if self._winner else 0,
                rounds=played_round,
            )
        else:
            self.new_round()

        return result

    def _determine_winner(self, final_scores: dict[str, int], final_dealer: int) -> Player:
        """
        Pick the winner.

        Highest total wins; ties go to the higher final-round score, then to
        the earlier seat in the final round's turn order.
        """
        count = len(self.players)

        def turn_position(player: Player) -> int:
            return (player.seat - final_dealer - 1) % count

        return max(
            self.players,
            key=lambda p: (p.total_score, final_scores[p.name], -turn_position(p)),
        )

    # ------------------------------------------------------------------
    # Drawing and card resolution
    # ------------------------------------------------------------------

    def _draw(self, player: Player) -> Card:
        """Draw a card on behalf of a player; it stays in flight until it lands."""
        reshuffling = self.deck.cards_remaining == 0
        try:
            card = self.deck.draw()
        except DeckExhausted:
            logger.error(
                "Deck exhausted with %d cards in hands", sum(len(p.hand) for p in self.players)
            )
            raise
        self._in_flight.append(card)
        if reshuffling:
            self.events.emit_new(
                EventType.DECK_RESHUFFLED,
                cards_remaining=self.deck.cards_remaining + 1,
            )

        self.events.emit_new(
            EventType.CARD_DRAWN,
            player=player.name,
            card=str(card),
            cards_remaining=self.deck.cards_remaining,
        )
        logger.debug("%s draws %s", player.name, card)
        return card

    def _take_card(self, player: Player) -> None:
        """Draw one card for a player and resolve it completely."""
        card = self._draw(player)
        self._resolve_card(player, card)
        self.verify_conservation()

    def _resolve_card(self, player: Player, card: Card) -> None:
        """Route a drawn card to action resolution or to the player's hand."""
        if card.is_action:
            self._resolve_action(player, card)
        else:
            self._add_to_hand(player, card)

    def _land(self, card: Card) -> None:
        """Mark an in-flight card as settled in a hand."""
        self._in_flight.remove(card)

    def _discard(self, card: Card) -> None:
        """Move an in-flight card to the discard pile."""
        self._in_flight.remove(card)
        self.deck.discard(card)

    def _add_to_hand(self, player: Player, card: Card) -> None:
        """Hand a number or modifier card to a player and react to the outcome."""
        outcome = player.add_card(card)

        if outcome == AddOutcome.ADDED:
            self._land(card)

        elif outcome == AddOutcome.DUPLICATE_BUST:
            self._discard(card)
            self.events.emit_new(EventType.PLAYER_BUSTED, player=player.name, card=str(card))

        elif outcome == AddOutcome.DUPLICATE_AVOIDABLE:
            self._discard(card)
            self.deck.discard(player.use_second_chance())
            self.events.emit_new(
                EventType.SECOND_CHANCE_USED,
                player=player.name,
                card=str(card),
            )

        elif outcome == AddOutcome.FLIP_7:
            self._land(card)
            self._flip7_achiever = player
            self.events.emit_new(
                EventType.FLIP_7,
                player=player.name,
                round_score=player.round_score(),
            )
            self._end_round_for_flip7(player)

    def _end_round_for_flip7(self, achiever: Player) -> None:
        """Everyone still active banks their points; the round is over."""
        for player in self.players:
            if player is not achiever and player.stay():
                self.events.emit_new(
                    EventType.PLAYER_STAYED,
                    player=player.name,
                    round_score=player.round_score(),
                    reason="flip7",
                )

    def _resolve_action(self, player: Player, card: Card) -> None:
        """
        Resolve an action card drawn by ``player``.

        Reentrant: a Flip Three draws through ``_resolve_card`` and may land
        here again before the outer card is discarded.
        """
        if card.action == ActionKind.FREEZE:
            self._resolve_freeze(player, card)
        elif card.action == ActionKind.FLIP_THREE:
            self._resolve_flip_three(player, card)
        elif card.action == ActionKind.SECOND_CHANCE:
            self._resolve_second_chance(player, card)

    def _choose_target(self, player: Player, action: ActionKind, positive: bool = False) -> Player:
        """Ask a player's strategy for a target and check it is active."""
        state = self.build_game_state(player)
        if positive:
            view = player.strategy.choose_positive_target(state, action)
        else:
            view = player.strategy.choose_adversarial_target(state, action)

        target = self.players[view.seat]
        if not target.is_active:
            self.events.emit_new(
                EventType.INVALID_ACTION,
                message=f"{target.name} is not active",
                player=player.name,
                action=str(action),
            )
            raise InvalidTargetError(
                f"{player.name} chose {target.name} for {action}, but {target.name} is {target.state}"
            )

        self.events.emit_new(
            EventType.ACTION_TARGETED,
            player=player.name,
            target=target.name,
            action=str(action),
        )
        return target

    def _resolve_freeze(self, player: Player, card: Card) -> None:
        target = self._choose_target(player, ActionKind.FREEZE)
        target.freeze()
        self.events.emit_new(
            EventType.PLAYER_FROZEN,
            player=player.name,
            target=target.name,
            round_score=target.round_score(),
        )
        self._discard(card)

    def _resolve_flip_three(self, player: Player, card: Card) -> None:
        target = self._choose_target(player, ActionKind.FLIP_THREE)
        self.events.emit_new(EventType.FLIP_THREE_STARTED, player=player.name, target=target.name)

        drawn = 0
        for _ in range(self.rules.flip_three_draws):
            if not target.is_active or not self.deck.can_draw:
                break
            next_card = self._draw(target)
            drawn += 1
            self._resolve_card(target, next_card)

        self._discard(card)
        self.events.emit_new(
            EventType.FLIP_THREE_ENDED,
            target=target.name,
            cards_drawn=drawn,
            target_state=str(target.state),
        )

    def _resolve_second_chance(self, player: Player, card: Card) -> None:
        if player.is_active and not player.has_second_chance:
            player.add_card(card)
            self._land(card)
            self.events.emit_new(EventType.SECOND_CHANCE_RECEIVED, player=player.name)
            return

        try:
            recipient = self._choose_target(player, ActionKind.SECOND_CHANCE, positive=True)
        except NoEligibleRecipient:
            self._discard(card)
            self.events.emit_new(
                EventType.SECOND_CHANCE_DISCARDED,
                player=player.name,
                reason="no eligible recipient",
            )
            return

        if recipient.add_card(card) == AddOutcome.SECOND_CHANCE_ALREADY_HELD:
            self._discard(card)
            self.events.emit_new(
                EventType.SECOND_CHANCE_DISCARDED,
                player=player.name,
                reason=f"{recipient.name} already holds one",
            )
            return

        self._land(card)
        self.events.emit_new(
            EventType.SECOND_CHANCE_PASSED,
            player=player.name,
            target=recipient.name,
        )

    # ------------------------------------------------------------------
    # Snapshots and integrity
    # ------------------------------------------------------------------

    def build_game_state(self, for_player: Player | None = None) -> GameState:
        """
        Build a read-only snapshot for a strategy decision or for display.

        Args:
            for_player: The acting player, exposed as ``current_player``
        """
        views = tuple(p.view() for p in self.players)
        leader = max(views, key=lambda v: v.effective_score) if views else None
        current = views[for_player.seat] if for_player is not None else None
        return GameState(
            round_number=self.round_number,
            players=views,
            deck=self.deck.snapshot(),
            current_player=current,
            leader=leader,
            target_score=self.rules.target_score,
            flip7_size=self.rules.flip7_size,
            flip7_bonus=self.rules.flip7_bonus,
            dealer_seat=self.dealer_index,
            rng=self._rng,
        )

    def cards_accounted(self) -> int:
        """Return the card count across deck, discards, hands and in-flight cards."""
        return (
            self.deck.total_cards
            + sum(len(p.hand) for p in self.players)
            + len(self._in_flight)
        )

    def verify_conservation(self) -> None:
        """
        Check that no card has been lost or duplicated.

        Raises:
            CardConservationViolation: If the count diverged from the original deck
        """
        found = self.cards_accounted()
        expected = self.deck.original_total
        if found == expected:
            return

        census: Counter[str] = Counter(str(c) for c in self.deck)
        census.update(str(c) for c in self.deck.discards)
        census.update(str(c) for p in self.players for c in p.hand)
        census.update(str(c) for c in self._in_flight)
        logger.error("Card census at violation: %s", dict(census))
        raise CardConservationViolation(found, expected)


def new_game(players: Sequence[PlayerEntry], **kwargs) -> Flip7Game:
    """Create a game; keyword arguments are passed to ``Flip7Game``."""
    return Flip7Game(players, **kwargs)
