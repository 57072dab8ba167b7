"""Tests for the Flip 7 round orchestrator."""

from random import Random

import pytest
from hypothesis import given, settings, strategies as st

from flip7.cards import Card, Deck
from flip7.errors import (
    CardConservationViolation,
    DeckExhausted,
    IntegrityError,
    InvalidPhaseError,
)
from flip7.game.engine import Flip7Game, new_game
from flip7.game.events import EventType
from flip7.game.state import RoundPhase
from flip7.player import PlayerState
from flip7.rules import RuleSet
from flip7.strategy.presets import build_strategy


class TestGameSetup:
    """Tests for game construction."""

    def test_initial_state(self, scripted):
        """Test a new game waits for the first deal."""
        game = new_game([("alice", scripted()), ("bob", scripted())], rng=Random(1))
        assert game.phase == RoundPhase.WAITING_TO_DEAL
        assert game.round_number == 1
        assert game.dealer_index == 0
        assert [p.seat for p in game.players] == [0, 1]
        assert game.cards_accounted() == 94
        assert not game.game_over
        assert game.winner is None

    def test_too_few_players(self, scripted):
        """Test a game needs two players."""
        with pytest.raises(ValueError):
            Flip7Game([("alice", scripted())])

    def test_duplicate_names(self, scripted):
        """Test player names must be unique."""
        with pytest.raises(ValueError):
            Flip7Game([("alice", scripted()), ("alice", scripted())])

    def test_strategy_type_checked(self, scripted):
        """Test every player needs a decision strategy."""
        with pytest.raises(TypeError):
            Flip7Game([("alice", scripted()), ("bob", object())])  # type: ignore[list-item]

    def test_rules_passed_to_players(self, scripted):
        """Test Flip 7 size and bonus come from the rules."""
        game = Flip7Game(
            [("alice", scripted()), ("bob", scripted())],
            rules=RuleSet(flip7_size=5, flip7_bonus=20),
        )
        assert all(p.flip7_size == 5 and p.flip7_bonus == 20 for p in game.players)


class TestRoundFlow:
    """Tests for deal, turns and scoring."""

    def test_two_players_stay(self, stacked_game, scripted):
        """Test a seeded 7 and 9, both stay."""
        game = stacked_game(["7", "9"], alice=scripted(), bob=scripted())

        result = game.play_round()

        # Dealer is seat 0, so bob (seat 1) draws the 7 first
        assert result.scores == {"alice": 9, "bob": 7}
        assert result.totals == {"alice": 9, "bob": 7}
        assert result.round_number == 1
        assert result.dealer == "alice"
        assert result.busts == ()
        assert result.flip7_achiever is None
        assert not result.game_over
        assert game.dealer_index == 1
        assert game.round_number == 2
        assert game.phase == RoundPhase.WAITING_TO_DEAL

    def test_hands_visible_until_next_round(self, stacked_game, scripted):
        """Test hands are cleared at the start of the next round."""
        game = stacked_game(["7", "9", "3", "4"], alice=scripted(), bob=scripted())
        game.play_round()
        assert [c.value for c in game.players[1].hand] == [7]

        game.play_round()
        # Dealer is now seat 1, so alice draws first
        assert [c.value for c in game.players[0].hand] == [3]
        assert [c.value for c in game.players[1].hand] == [4]
        assert game.cards_accounted() == 94

    def test_forced_hit_without_numbers(self, stacked_game, scripted):
        """Test a player holding no number card must hit."""
        bob = scripted()
        game = stacked_game(["+4", "9", "5"], alice=scripted(), bob=bob)

        result = game.play_round()

        assert result.scores["bob"] == 9
        assert len(game.events.of_type(EventType.PLAYER_FORCED_HIT)) == 1
        # Only asked once, after the forced hit gave a number card
        assert len(bob.states) == 1

    def test_bust(self, stacked_game, scripted):
        """Test a duplicate number busts and scores zero."""
        game = stacked_game(["5", "9", "5"], alice=scripted(), bob=scripted(hits=[True]))

        result = game.play_round()

        assert result.scores == {"alice": 9, "bob": 0}
        assert result.busts == ("bob",)
        assert game.players[1].state == PlayerState.BUSTED
        assert game.deck.discards == (Card.number(5),)
        busted = game.events.of_type(EventType.PLAYER_BUSTED)
        assert busted[0].data["player"] == "bob"

    def test_flip7_ends_round(self, stacked_game, scripted):
        """Test a Flip 7 forces every other active player to stay."""
        top = ["0", "9", "1", "10", "2", "11", "3", "12", "4", "8", "5", "7", "6"]
        game = stacked_game(
            top,
            alice=scripted(hits=[True] * 10),
            bob=scripted(hits=[True] * 10),
        )

        result = game.play_round()

        assert result.flip7_achiever == "bob"
        assert result.scores["bob"] == 36
        assert result.scores["alice"] == 9 + 10 + 11 + 12 + 8 + 7
        stayed = game.events.of_type(EventType.PLAYER_STAYED)
        assert any(e.data.get("reason") == "flip7" and e.data["player"] == "alice" for e in stayed)

    def test_strategies_see_snapshots(self, stacked_game, scripted):
        """Test decisions get a read-only state with the acting player set."""
        bob = scripted()
        game = stacked_game(["7", "9"], alice=scripted(), bob=bob)
        game.play_round()

        state = bob.states[0]
        assert state.current_player.name == "bob"
        assert state.current_player.numbers == (7,)
        assert state.deck.total == 92
        assert state.leader.name == "alice"
        assert state.rng is game.build_game_state().rng

    def test_snapshots_carry_rules(self, stacked_game, scripted):
        """Test strategies see the Flip 7 size and bonus the game is played with."""
        bob = scripted()
        rules = RuleSet(flip7_size=5, flip7_bonus=20)
        game = stacked_game(["7", "9"], rules=rules, alice=scripted(), bob=bob)
        game.play_round()

        state = bob.states[0]
        assert (state.flip7_size, state.flip7_bonus) == (5, 20)

    def test_events_in_order(self, stacked_game, scripted):
        """Test the round emits start, draws, scores and end in order."""
        game = stacked_game(["7", "9"], alice=scripted(), bob=scripted())
        game.play_round()

        types = [e.event_type for e in game.events.history]
        assert types[0] == EventType.GAME_STARTED
        assert types[1] == EventType.ROUND_STARTED
        assert types.count(EventType.CARD_DRAWN) == 2
        assert types.count(EventType.ROUND_SCORED) == 2
        assert types[-1] == EventType.ROUND_ENDED

    def test_deck_exhausted_is_fatal(self, rng, scripted):
        """Test an ordinary draw with no cards anywhere aborts the round."""
        deck = Deck(rng=rng, cards=[Card.number(8), Card.number(9)], shuffle=False)
        game = Flip7Game(
            [("alice", scripted()), ("bob", scripted(hits=[True]))],
            rng=rng,
            deck=deck,
        )
        with pytest.raises(DeckExhausted):
            game.play_round()


class TestGameEnd:
    """Tests for reaching the target score."""

    def test_game_over(self, stacked_game, scripted):
        """Test the game ends once a total reaches the target."""
        game = stacked_game(["7", "12"], rules=RuleSet(target_score=10), alice=scripted(), bob=scripted())

        result = game.play_round()

        assert result.game_over
        assert result.winner == "alice"
        assert game.game_over
        assert game.winner is game.players[0]
        assert game.events.of_type(EventType.GAME_ENDED)[0].data["winner"] == "alice"

    def test_no_round_after_game_over(self, stacked_game, scripted):
        """Test playing on after the game ended is refused."""
        game = stacked_game(["7", "12"], rules=RuleSet(target_score=10), alice=scripted(), bob=scripted())
        game.play_round()

        with pytest.raises(InvalidPhaseError):
            game.play_round()
        assert game.events.of_type(EventType.INVALID_ACTION)

    def test_tie_goes_to_final_round_score(self, stacked_game, scripted):
        """Test equal totals are split by the final round's score."""
        game = stacked_game(["4", "6"], rules=RuleSet(target_score=10), alice=scripted(), bob=scripted())
        game.players[0].total_score = 4
        game.players[1].total_score = 6

        result = game.play_round()

        assert result.totals == {"alice": 10, "bob": 10}
        assert result.winner == "alice"

    def test_full_tie_goes_to_turn_order(self, stacked_game, scripted):
        """Test a complete tie goes to the first seat left of the dealer."""
        game = stacked_game(["5", "5"], rules=RuleSet(target_score=10), alice=scripted(), bob=scripted())
        game.players[0].total_score = 5
        game.players[1].total_score = 5

        result = game.play_round()

        assert result.scores == {"alice": 5, "bob": 5}
        assert result.winner == "bob"

    def test_play_game(self, rng):
        """Test a computer game runs to completion."""
        game = Flip7Game(
            [("a", build_strategy("bust")), ("b", build_strategy("ev")), ("c", build_strategy("gap"))],
            rng=rng,
        )
        winner = game.play_game()

        assert winner.total_score >= 200
        assert winner.total_score == max(p.total_score for p in game.players)
        assert game.phase == RoundPhase.GAME_OVER
        assert len(game.results) == game.round_number - 1

    def test_missing_winner_is_fatal(self, stacked_game, scripted):
        """Test a finished game without a recorded winner raises instead of returning None."""
        game = stacked_game(["7", "12"], rules=RuleSet(target_score=10), alice=scripted(), bob=scripted())
        game.subscribe(lambda event: setattr(game, "_winner", None), EventType.GAME_ENDED)

        with pytest.raises(IntegrityError):
            game.play_game()
        assert game.game_over


class TestConservation:
    """Tests that no card is ever lost or duplicated."""

    @settings(max_examples=25, deadline=None)
    @given(seed=st.integers(min_value=0, max_value=2**32 - 1))
    def test_every_event_sees_94_cards(self, seed):
        """Test the card count holds after every event of a whole game."""
        game = Flip7Game(
            [
                ("hit", build_strategy("hit")),
                ("rand", build_strategy("random")),
                ("opt", build_strategy("optimal")),
            ],
            rules=RuleSet.quick(),
            rng=Random(seed),
            keep_history=False,
        )
        counts = []
        game.subscribe(lambda event: counts.append(game.cards_accounted()))

        game.play_game()

        assert counts
        assert set(counts) == {94}

    def test_violation_detected(self, rng, scripted):
        """Test a lost card is reported as fatal."""
        game = Flip7Game([("alice", scripted()), ("bob", scripted())], rng=rng)
        game.deck.draw()
        with pytest.raises(CardConservationViolation) as exc_info:
            game.verify_conservation()
        assert exc_info.value.found == 93
        assert exc_info.value.expected == 94
