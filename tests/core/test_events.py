"""Tests for the event emitter and round phases."""

import pytest
from transitions import MachineError

from flip7.game.engine import Flip7Game
from flip7.game.events import EventEmitter, EventType, GameEvent
from flip7.game.state import VALID_TRANSITIONS, RoundPhase, is_valid_transition


class TestEventEmitter:
    """Tests for subscribing and emitting."""

    def test_typed_and_catch_all(self):
        """Test typed handlers only see their type, catch-alls see everything."""
        emitter = EventEmitter()
        typed, everything = [], []
        emitter.subscribe(typed.append, EventType.FLIP_7)
        emitter.subscribe(everything.append)

        emitter.emit_new(EventType.CARD_DRAWN, card="[3]")
        emitter.emit_new(EventType.FLIP_7, player="HAL")

        assert [e.event_type for e in typed] == [EventType.FLIP_7]
        assert len(everything) == 2

    def test_typed_handlers_run_first(self):
        """Test typed handlers run before catch-alls, in subscription order."""
        emitter = EventEmitter()
        calls = []
        emitter.subscribe(lambda e: calls.append("all"))
        emitter.subscribe(lambda e: calls.append("typed-1"), EventType.PLAYER_BUSTED)
        emitter.subscribe(lambda e: calls.append("typed-2"), EventType.PLAYER_BUSTED)

        emitter.emit_new(EventType.PLAYER_BUSTED, player="HAL")

        assert calls == ["typed-1", "typed-2", "all"]

    def test_unsubscribe(self):
        """Test a removed handler is not called, and removing twice is harmless."""
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append)
        emitter.unsubscribe(seen.append)
        emitter.unsubscribe(seen.append)
        emitter.emit_new(EventType.ROUND_STARTED)
        assert seen == []

    def test_history(self):
        """Test history records events and can be cleared."""
        emitter = EventEmitter()
        event = emitter.emit_new(EventType.PLAYER_HIT, player="Data")
        assert emitter.history == [event]
        assert emitter.of_type(EventType.PLAYER_HIT) == [event]
        emitter.clear_history()
        assert emitter.history == []

    def test_history_disabled(self):
        """Test batch runs can skip the history."""
        emitter = EventEmitter(keep_history=False)
        emitter.emit_new(EventType.PLAYER_HIT)
        assert emitter.history == []

    def test_event_str(self):
        """Test string representation."""
        assert str(GameEvent(EventType.FLIP_7, {"player": "HAL"})) == "FLIP_7: {'player': 'HAL'}"


class TestRoundPhase:
    """Tests for the phase table and the machine built from it."""

    def test_machine_built_from_table(self):
        """Test the engine has exactly one transition per table edge."""
        edges = {
            (RoundPhase[t["source"].upper()], RoundPhase[t["dest"].upper()])
            for t in Flip7Game.TRANSITIONS
        }
        expected = {(src, dest) for src, dests in VALID_TRANSITIONS.items() for dest in dests}
        assert edges == expected
        assert len(Flip7Game.TRANSITIONS) == len(expected)

    def test_out_of_order_trigger_rejected(self, scripted):
        """Test the machine refuses a trigger the table does not allow."""
        game = Flip7Game([("alice", scripted()), ("bob", scripted())])
        with pytest.raises(MachineError):
            game.deal_complete()
        assert game.phase == RoundPhase.WAITING_TO_DEAL

    def test_game_over_is_terminal(self):
        """Test nothing follows game over."""
        assert not any(is_valid_transition(RoundPhase.GAME_OVER, p) for p in RoundPhase)

    def test_str(self):
        assert str(RoundPhase.PLAYER_TURNS) == "Player Turns"
