from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, TextIO

from warlock.engine.actions import Action, PlayCardAction, SleeveCardAction, UseSeedAction
from warlock.engine.ai import ai_take_turn
from warlock.engine.match import GameSession, StepResult, advance, step
from warlock.engine.types import Participant
from warlock.services.telemetry import TelemetryService

TICK_SECONDS = 1.0 / 60.0

HELP = "Commands: play N | sleeve N | seed | quit"


@dataclass
class GameContext:
    session: GameSession
    telemetry: TelemetryService
    out: TextIO
    read_line: Callable[[str], str]
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    auto: bool = False


def parse_command(line: str) -> Action | str | None:
    """Turns a typed command into an action, "quit", or None if unreadable."""
    parts = line.strip().lower().split()
    if not parts:
        return None
    verb, args = parts[0], parts[1:]
    if verb in ("q", "quit", "exit"):
        return "quit"
    if verb in ("seed", "u") and not args:
        return UseSeedAction()
    if verb in ("play", "p", "sleeve", "s") and len(args) == 1 and args[0].isdigit():
        index = int(args[0]) - 1
        if verb in ("play", "p"):
            return PlayCardAction(player=Participant.PLAYER, hand_index=index)
        return SleeveCardAction(hand_index=index)
    return None


class App:
    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self.running = True
        self._shown_at = -1

    def _print(self, text: str) -> None:
        self.ctx.out.write(text + "\n")

    def _report(self, result: StepResult) -> None:
        self.ctx.telemetry.log_events(result.events)
        for ev in result.events:
            kind = ev.get("type")
            if kind == "CARD_PLAYED":
                self._print(f"{ev['player']} plays {ev['card']}")
            elif kind == "ROUND_RESOLVED":
                self._print(
                    f"Round {ev['round']}: {ev['player_card']} vs {ev['oppo_card']} -> {ev['outcome']}"
                    f" (bonus +{ev['player_bonus']} / +{ev['oppo_bonus']})"
                )
            elif kind == "CARD_SLEEVED":
                self._print(f"You slip {ev['card']} up your sleeve.")
            elif kind == "SEED_USED":
                self._print("The bird looks away...")
            elif kind == "CHEAT_SPOTTED":
                self._print("The bird saw you!")
            elif kind == "GAME_OVER":
                self._print(f"Game over: {ev['reason']} ({ev['player_score']} - {ev['oppo_score']})")

    def _show_table(self) -> None:
        s = self.ctx.session
        stats = s.stats()
        hand = "  ".join(f"{i + 1}:{c}" for i, c in enumerate(s.hands[Participant.PLAYER]))
        war = s.war_card(against=Participant.PLAYER)
        self._print(
            f"-- Round {s.round_number} | you {stats.player_score()} - {stats.oppo_score()} oppo"
            f" | remaining {stats.remaining_score()} | seeds {s.seeds.count}"
            f" | sleeve {' '.join(str(c) for c in s.sleeve) or '-'}"
        )
        if war is not None:
            self._print(f"Oppo played {war}")
        self._print(f"Hand: {hand}")

    def _human_turn(self) -> None:
        s = self.ctx.session
        if self._shown_at != len(s.event_log):
            self._show_table()
            self._shown_at = len(s.event_log)
        cmd = parse_command(self.ctx.read_line("> "))
        if cmd == "quit":
            self.running = False
            return
        if cmd is None or isinstance(cmd, str):
            self._print(HELP)
            return
        result = step(s, cmd)
        if not result.ok:
            self._print(result.error or "Invalid action.")
            return
        self._report(result)

    def run(self) -> int:
        s = self.ctx.session
        self.ctx.telemetry.log("game_started", {"seed": s.seed})
        while self.running and not s.is_over:
            self._report(advance(s, self.ctx.clock()))
            who = s.current_player
            if who is Participant.OPPO or (who is Participant.PLAYER and self.ctx.auto):
                result = ai_take_turn(s, who)
                if result is not None:
                    self._report(result)
            elif who is Participant.PLAYER:
                self._human_turn()
            else:
                self.ctx.sleep(TICK_SECONDS)
        return 0
