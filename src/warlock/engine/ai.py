from __future__ import annotations

import random
from collections.abc import Sequence

from .actions import PlayCardAction
from .match import GameSession, StepResult, step
from .rules import card_beats, effective_value
from .types import Card, Outcome, Participant


def _cheapest(indexed: list[tuple[int, Card]], war_card: Card | None) -> int:
    best = min(indexed, key=lambda ic: (effective_value(ic[1], war_card), ic[1].value, ic[0]))
    return best[0]


def choose_card(war_card: Card | None, hand: Sequence[Card], rng: random.Random) -> int:
    """Index of the hand card to play against `war_card`.

    Nothing to react to: pick at random. Otherwise win as cheaply as possible,
    else tie, else throw away the least valuable card.
    """
    if not hand:
        raise ValueError("Cannot choose from an empty hand.")
    if war_card is None:
        return rng.randrange(len(hand))

    indexed = list(enumerate(hand))
    winners = [ic for ic in indexed if card_beats(ic[1], war_card) is Outcome.WIN]
    if winners:
        return _cheapest(winners, war_card)
    for i, card in indexed:
        if card_beats(card, war_card) is Outcome.TIE:
            return i
    return _cheapest(indexed, war_card)


def ai_take_turn(session: GameSession, player: Participant = Participant.OPPO) -> StepResult | None:
    """Play a card for `player` if it is their turn.

    Uses the session RNG (`session.rng`) so it stays deterministic for a given seed.
    """
    if session.current_player is not player:
        return None
    hand = session.hands[player]
    index = choose_card(session.war_card(against=player), hand, session.rng)
    return step(session, PlayCardAction(player=player, hand_index=index))
