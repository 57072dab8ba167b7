"""Console rendering and input for interactive games."""

import sys
from random import Random
from typing import Sequence, TextIO

from flip7.cards import ActionKind
from flip7.game.events import EventType, GameEvent
from flip7.game.state import GameState
from flip7.player import PlayerView

COMPUTER_NAMES = (
    "HAL",
    "Data",
    "GLaDOS",
    "WALL-E",
    "EVE",
    "R2D2",
    "C3PO",
    "T-800",
    "Skynet",
    "Optimus",
    "Megatron",
    "Bender",
    "WOPR",
    "Cortana",
    "Marvin",
    "Siri",
    "Alexa",
    "Jeeves",
)

TARGET_PROMPTS = {
    ActionKind.FREEZE: "Who should be frozen?",
    ActionKind.FLIP_THREE: "Who should flip three cards?",
    ActionKind.SECOND_CHANCE: "Who should get the Second Chance card?",
}


class NamePool:
    """
    Hands out computer player names without repeats.

    Scoped to one CLI invocation; names already taken by humans are skipped.
    """

    def __init__(self, rng: Random | None = None, names: Sequence[str] = COMPUTER_NAMES) -> None:
        self._rng = rng or Random()
        self._available = list(names)
        self._issued = 0

    def reserve(self, name: str) -> None:
        """Remove a name from the pool, e.g. one a human already uses."""
        if name in self._available:
            self._available.remove(name)

    def take(self) -> str:
        """Return a random unused name, or a numbered fallback once empty."""
        self._issued += 1
        if not self._available:
            return f"Computer {self._issued}"
        return self._available.pop(self._rng.randrange(len(self._available)))


def describe(view: PlayerView) -> str:
    """One-line summary of a player's hand and scores."""
    numbers = " ".join(f"[{n}]" for n in view.numbers)
    modifiers = " ".join(f"[{m}]" for m in view.modifiers)
    extras = " [2ND CHANCE]" if view.has_second_chance else ""
    hand = " ".join(part for part in (numbers, modifiers) if part) or "no cards"
    return (
        f"{view.name} ({view.state}): {hand}{extras} "
        f"| round {view.round_score} | total {view.total_score}"
    )


class ConsoleInput:
    """
    Reads human decisions from a text stream.

    Invalid answers are re-asked; a closed stream raises ``EOFError``.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def _prompt(self, text: str) -> str:
        self.stdout.write(text)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError("Input closed")
        return line.strip().lower()

    def ask_hit_or_stay(self, state: GameState) -> bool:
        me = state.current_player
        if me is not None:
            self.stdout.write(f"{describe(me)}\n")
        name = me.name if me is not None else "Player"
        answer = self._prompt(f"{name}, do you want to (H)it or (S)tay? ")
        while answer not in {"h", "hit", "s", "stay"}:
            answer = self._prompt("Please enter 'H' for Hit or 'S' for Stay: ")
        return answer in {"h", "hit"}

    def ask_target(
        self,
        state: GameState,
        action: ActionKind,
        candidates: Sequence[PlayerView],
    ) -> PlayerView:
        self.stdout.write(f"   {TARGET_PROMPTS[action]}\n")
        for i, view in enumerate(candidates, start=1):
            self.stdout.write(f"   {i}) {view.name} (total {view.total_score}, round {view.round_score})\n")

        prompt = f"Enter choice (1-{len(candidates)}): "
        while True:
            answer = self._prompt(prompt)
            if answer.isdigit() and 1 <= int(answer) <= len(candidates):
                return candidates[int(answer) - 1]
            prompt = f"Please enter a number between 1 and {len(candidates)}: "


class ConsoleRenderer:
    """Prints engine events as they happen."""

    def __init__(self, out: TextIO | None = None) -> None:
        self.out = out or sys.stdout

    def _print(self, text: str) -> None:
        self.out.write(text + "\n")

    def __call__(self, event: GameEvent) -> None:
        self.handle(event)

    def handle(self, event: GameEvent) -> None:
        """Render one event; types without a message are ignored."""
        etype = event.event_type
        data = event.data

        if etype == EventType.GAME_STARTED:
            self._print(
                f"Starting Flip 7 with {', '.join(data['players'])}. "
                f"First to {data['target_score']} wins!"
            )
        elif etype == EventType.ROUND_STARTED:
            self._print(f"\n=== Round {data['round_number']} (dealer: {data['dealer']}) ===")
        elif etype == EventType.CARD_DRAWN:
            self._print(f"  {data['player']} draws {data['card']}")
        elif etype == EventType.DECK_RESHUFFLED:
            self._print("  Deck is empty; reshuffling the discards.")
        elif etype == EventType.PLAYER_STAYED:
            if data.get("reason") == "flip7":
                self._print(f"  {data['player']} stops with {data['round_score']} points.")
            else:
                self._print(f"  {data['player']} stays with {data['round_score']} points.")
        elif etype == EventType.PLAYER_BUSTED:
            self._print(f"  {data['player']} BUSTS on a duplicate {data['card']}!")
        elif etype == EventType.PLAYER_FROZEN:
            self._print(
                f"  {data['player']} freezes {data['target']} at {data['round_score']} points."
            )
        elif etype == EventType.FLIP_THREE_STARTED:
            self._print(f"  {data['player']} makes {data['target']} flip three cards!")
        elif etype == EventType.SECOND_CHANCE_RECEIVED:
            self._print(f"  {data['player']} keeps a Second Chance.")
        elif etype == EventType.SECOND_CHANCE_PASSED:
            self._print(f"  {data['player']} gives a Second Chance to {data['target']}.")
        elif etype == EventType.SECOND_CHANCE_USED:
            self._print(f"  {data['player']} uses a Second Chance to discard {data['card']}.")
        elif etype == EventType.SECOND_CHANCE_DISCARDED:
            self._print(f"  Second Chance discarded: {data['reason']}.")
        elif etype == EventType.FLIP_7:
            self._print(f"  FLIP 7! {data['player']} scores {data['round_score']} this round!")
        elif etype == EventType.ROUND_ENDED:
            self._print(f"--- Round {data['round_number']} scores ---")
            for name, score in data["scores"].items():
                self._print(f"  {name:<12} +{score:<4} total {data['totals'][name]}")
        elif etype == EventType.GAME_ENDED:
            self._print(
                f"\n{data['winner']} wins with {data['total_score']} points "
                f"after {data['rounds']} rounds!"
            )
        elif etype == EventType.INVALID_ACTION:
            self._print(f"  Invalid action: {data.get('message', 'unknown')}")
