"""Game flow: whose turn it is, when cards are drawn, and how rounds resolve.

Transitions (see `TurnState`):

* STARTING -> DRAW on the first tick.
* DRAW tops up both hands on entry; the next tick hands over to whoever holds
  the initiative.
* A participant's turn ends when they play a card, entering CARD_PLAYED.
* CARD_PLAYED waits `turn_interlude` seconds. With one card on the war pile
  the other participant plays; with two the round resolves and NEW begins.
* NEW ends the game when the trailing side can no longer catch up, otherwise
  it starts the next round.

`step` applies player intents, `advance` applies the passing of time. Both
mutate the session in place and are deterministic for a given seed, decks and
sequence of calls.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from .actions import Action, PlayCardAction, SleeveCardAction, UseSeedAction
from .deck import Deck
from .initiative import InitiativePolicy, make_policy
from .ledger import CardStats, ScoreBonuses
from .piles import Pile, PileCard, PileType
from .rules import card_beats
from .types import Card, EndReason, Outcome, Participant, TurnEffects
from .watcher import BirdEye, Watcher

logger = logging.getLogger(__name__)

Event = dict[str, object]


class TurnState(Enum):
    STARTING = "starting"
    DRAW = "draw"
    NEW = "new"
    PLAYER_TURN = "player_turn"
    OPPO_TURN = "oppo_turn"
    CARD_PLAYED = "card_played"
    GAME_OVER = "game_over"

    @staticmethod
    def turn_of(who: Participant) -> "TurnState":
        return TurnState.PLAYER_TURN if who is Participant.PLAYER else TurnState.OPPO_TURN


class InvariantViolation(RuntimeError):
    """The one-card-per-turn contract was broken by a caller."""


@dataclass(frozen=True)
class GameConfig:
    hand_size: int = 3
    turn_interlude: float = 0.5
    sleeve_capacity: int = 3
    initiative: str = "every_round"
    first_initiative: Participant = Participant.PLAYER


@dataclass
class SeedCount:
    count: int = 0

    def consume(self) -> bool:
        if self.count == 0:
            return False
        self.count -= 1
        return True


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class GameSession:
    config: GameConfig
    seed: int
    rng: random.Random
    decks: dict[Participant, Deck]
    policy: InitiativePolicy
    watcher: Watcher
    hands: dict[Participant, list[Card]] = field(
        default_factory=lambda: {Participant.PLAYER: [], Participant.OPPO: []}
    )
    piles: dict[PileType, Pile] = field(
        default_factory=lambda: {which: Pile(which) for which in PileType}
    )
    sleeve: list[Card] = field(default_factory=list)
    state: TurnState = TurnState.STARTING
    initiative: Participant = Participant.PLAYER
    round_number: int = 0
    turn_effects: TurnEffects = field(default_factory=TurnEffects)
    bonuses: ScoreBonuses = field(default_factory=ScoreBonuses)
    seeds: SeedCount = field(default_factory=SeedCount)
    end_reason: EndReason | None = None
    clock: float = 0.0
    waiting_since: float | None = None
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    @property
    def current_player(self) -> Participant | None:
        if self.state is TurnState.PLAYER_TURN:
            return Participant.PLAYER
        if self.state is TurnState.OPPO_TURN:
            return Participant.OPPO
        return None

    @property
    def is_over(self) -> bool:
        return self.state is TurnState.GAME_OVER

    def war_card(self, against: Participant) -> Card | None:
        """The card the other side already put on the war pile this round."""
        for pc in self.piles[PileType.WAR].cards:
            if pc.origin is not against:
                return pc.card
        return None

    def stats(self) -> CardStats:
        return CardStats(
            piles=self.piles,
            hands=self.hands,
            decks=self.decks,
            sleeve=self.sleeve,
            bonuses=self.bonuses,
        )


def _set_state(session: GameSession, state: TurnState) -> None:
    logger.debug("round %d: %s -> %s", session.round_number, session.state.value, state.value)
    session.state = state


def _game_over(session: GameSession, reason: EndReason) -> None:
    _set_state(session, TurnState.GAME_OVER)
    session.end_reason = reason
    stats = session.stats()
    session.event_log.append(
        {
            "type": "GAME_OVER",
            "reason": reason.value,
            "player_score": stats.player_score(),
            "oppo_score": stats.oppo_score(),
            "round": session.round_number,
        }
    )
    logger.info(
        "game over after round %d: %s (%d - %d)",
        session.round_number,
        reason.value,
        stats.player_score(),
        stats.oppo_score(),
    )


def _enter_draw(session: GameSession) -> None:
    size = session.config.hand_size
    for who in Participant:
        hand = session.hands[who]
        held = len(session.sleeve) if who is Participant.PLAYER else 0
        drawn = session.decks[who].draw(size - len(hand) - held)
        hand.extend(drawn)
        if who is Participant.PLAYER and session.sleeve:
            hand.extend(session.sleeve)
            session.sleeve.clear()
        session.event_log.append(
            {"type": "CARDS_DRAWN", "player": who.value, "cards": [c.code for c in drawn]}
        )
    _set_state(session, TurnState.DRAW)


def _complete_draw(session: GameSession) -> None:
    # A short hand is fine once the deck is out; an empty one cannot play.
    if any(not hand for hand in session.hands.values()):
        _game_over(session, session.stats().final_reason())
        return
    _set_state(session, TurnState.turn_of(session.initiative))


def _enter_new(session: GameSession) -> None:
    _set_state(session, TurnState.NEW)
    reason = session.stats().check_termination()
    if reason is not None:
        _game_over(session, reason)
        return
    session.round_number += 1
    session.initiative = session.policy.next_initiative(session.initiative, session.round_number)
    if any(not hand for hand in session.hands.values()):
        _enter_draw(session)
    else:
        _set_state(session, TurnState.turn_of(session.initiative))


def _resolve_round(session: GameSession, played: list[PileCard]) -> None:
    by_origin = {pc.origin: pc for pc in played}
    if len(by_origin) != 2:
        raise InvariantViolation("Both cards on the war pile come from the same participant")
    player_pc = by_origin[Participant.PLAYER]
    oppo_pc = by_origin[Participant.OPPO]

    outcome = card_beats(player_pc.card, oppo_pc.card)
    if outcome is Outcome.WIN:
        receivers = {Participant.PLAYER: Participant.PLAYER, Participant.OPPO: Participant.PLAYER}
    elif outcome is Outcome.LOSS:
        receivers = {Participant.PLAYER: Participant.OPPO, Participant.OPPO: Participant.OPPO}
    else:
        receivers = {Participant.PLAYER: Participant.PLAYER, Participant.OPPO: Participant.OPPO}

    effects = session.turn_effects
    credited = {Participant.PLAYER: 0, Participant.OPPO: 0}
    for pc in (player_pc, oppo_pc):
        who = receivers[pc.origin]
        session.piles[PileType.of(who)].add(pc.card, pc.origin)
        bonus = effects.bonus_for(pc.card)
        if bonus:
            session.bonuses.add_to_owner(who, bonus)
            credited[who] += bonus
    session.turn_effects = TurnEffects()

    session.event_log.append(
        {
            "type": "ROUND_RESOLVED",
            "round": session.round_number,
            "player_card": player_pc.card.code,
            "oppo_card": oppo_pc.card.code,
            "outcome": outcome.value,
            "player_bonus": credited[Participant.PLAYER],
            "oppo_bonus": credited[Participant.OPPO],
        }
    )
    logger.info(
        "round %d: %s vs %s -> %s", session.round_number, player_pc.card, oppo_pc.card, outcome.value
    )


def _wait_active(session: GameSession, now: float) -> None:
    if session.waiting_since is None:
        session.waiting_since = now
        return
    if now - session.waiting_since < session.config.turn_interlude:
        return
    session.waiting_since = None

    war = session.piles[PileType.WAR]
    if len(war) == 1:
        _set_state(session, TurnState.turn_of(war.cards[0].origin.other()))
    elif len(war) == 2:
        _resolve_round(session, war.take_all())
        _enter_new(session)
    else:
        raise InvariantViolation(f"Cannot resolve a round with {len(war)} cards on the war pile")


def advance(session: GameSession, now: float) -> StepResult:
    """Evaluate one tick at time `now` (seconds, any monotonic origin).

    Ticking while waiting for a participant to play has no effect.
    """
    before = len(session.event_log)
    session.clock = max(session.clock, now)
    state = session.state
    if state is TurnState.STARTING:
        session.round_number = 1
        session.initiative = session.config.first_initiative
        _enter_draw(session)
    elif state is TurnState.DRAW:
        _complete_draw(session)
    elif state is TurnState.CARD_PLAYED:
        _wait_active(session, now)
    elif state is TurnState.NEW:
        _enter_new(session)
    return StepResult(ok=True, events=session.event_log[before:])


def settle(session: GameSession) -> None:
    """Advance until a participant has to act or the game is over."""
    waiting = (TurnState.STARTING, TurnState.DRAW, TurnState.CARD_PLAYED, TurnState.NEW)
    while session.state in waiting:
        advance(session, session.clock + session.config.turn_interlude)


def _play_card(session: GameSession, action: PlayCardAction) -> StepResult:
    if session.current_player is not action.player:
        return StepResult(ok=False, events=[], error="Not your turn.")
    hand = session.hands[action.player]
    if action.hand_index < 0 or action.hand_index >= len(hand):
        return StepResult(ok=False, events=[], error="Invalid hand index.")

    war = session.piles[PileType.WAR]
    if len(war) >= 2:
        raise InvariantViolation("No more than two cards can be on the war pile")

    card = hand.pop(action.hand_index)
    war.add(card, action.player)
    if card.modifier is not None:
        if card.modifier.grants_seed:
            session.seeds.count += 1
        card.modifier.apply_to_turn_effects(session.turn_effects)

    session.event_log.append({"type": "CARD_PLAYED", "player": action.player.value, "card": card.code})
    session.waiting_since = None
    _set_state(session, TurnState.CARD_PLAYED)
    return StepResult(ok=True, events=session.event_log[-1:])


def _sleeve_card(session: GameSession, action: SleeveCardAction) -> StepResult:
    if session.current_player is not Participant.PLAYER:
        return StepResult(ok=False, events=[], error="Not your turn.")
    hand = session.hands[Participant.PLAYER]
    if action.hand_index < 0 or action.hand_index >= len(hand):
        return StepResult(ok=False, events=[], error="Invalid hand index.")
    if len(session.sleeve) >= session.config.sleeve_capacity:
        return StepResult(ok=False, events=[], error="Sleeve is full.")
    deck = session.decks[Participant.PLAYER]
    if deck.remaining() == 0:
        return StepResult(ok=False, events=[], error="No card left to replace it.")

    before = len(session.event_log)
    if session.watcher.is_watching():
        session.event_log.append({"type": "CHEAT_SPOTTED"})
        _game_over(session, EndReason.CAUGHT_CHEATING)
        return StepResult(ok=True, events=session.event_log[before:])

    card = hand.pop(action.hand_index)
    session.sleeve.append(card)
    replacement = deck.draw(1)
    hand.extend(replacement)
    session.watcher.resume()
    session.event_log.append(
        {
            "type": "CARD_SLEEVED",
            "card": card.code,
            "replacement": [c.code for c in replacement],
        }
    )
    return StepResult(ok=True, events=session.event_log[before:])


def _use_seed(session: GameSession, action: UseSeedAction) -> StepResult:
    if not session.seeds.consume():
        return StepResult(ok=False, events=[], error="No seed to use.")
    session.watcher.distract()
    session.event_log.append({"type": "SEED_USED", "seeds_left": session.seeds.count})
    return StepResult(ok=True, events=session.event_log[-1:])


def step(session: GameSession, action: Action) -> StepResult:
    """Apply a single intent to the session."""
    if session.is_over:
        return StepResult(ok=False, events=[], error="Game already ended.")

    # Log first, so replay has a full record of attempted actions
    session.action_log.append(action)

    if isinstance(action, PlayCardAction):
        return _play_card(session, action)
    if isinstance(action, SleeveCardAction):
        return _sleeve_card(session, action)
    if isinstance(action, UseSeedAction):
        return _use_seed(session, action)
    return StepResult(ok=False, events=[], error="Unknown action.")


def _cards_of(deck: Deck | Sequence[Card]) -> list[Card]:
    if isinstance(deck, Deck):
        return deck.peek()
    return list(deck)


def new_game(
    player_deck: Deck | Sequence[Card],
    oppo_deck: Deck | Sequence[Card],
    seed: int,
    config: GameConfig | None = None,
    watcher: Watcher | None = None,
) -> GameSession:
    cfg = config or GameConfig()
    if cfg.hand_size < 1:
        raise ValueError("Hand size must be at least 1.")
    return GameSession(
        config=cfg,
        seed=seed,
        rng=random.Random(seed),
        decks={
            Participant.PLAYER: Deck(_cards_of(player_deck)),
            Participant.OPPO: Deck(_cards_of(oppo_deck)),
        },
        policy=make_policy(cfg.initiative),
        watcher=watcher or BirdEye(),
        initiative=cfg.first_initiative,
    )


def reset(session: GameSession) -> None:
    """Put every per-game value back to its starting point for a rematch."""
    for deck in session.decks.values():
        deck.restore()
    for hand in session.hands.values():
        hand.clear()
    for pile in session.piles.values():
        pile.clear()
    session.sleeve.clear()
    session.rng = random.Random(session.seed)
    session.watcher.reset()
    session.state = TurnState.STARTING
    session.initiative = session.config.first_initiative
    session.round_number = 0
    session.turn_effects = TurnEffects()
    session.bonuses = ScoreBonuses()
    session.seeds = SeedCount()
    session.end_reason = None
    session.clock = 0.0
    session.waiting_since = None
    session.action_log.clear()
    session.event_log.clear()


def replay(
    player_deck: Deck | Sequence[Card],
    oppo_deck: Deck | Sequence[Card],
    seed: int,
    actions: Iterable[Action],
    config: GameConfig | None = None,
) -> GameSession:
    session = new_game(player_deck, oppo_deck, seed=seed, config=config)
    settle(session)
    for a in actions:
        step(session, a)
        settle(session)
        if session.is_over:
            break
    return session
