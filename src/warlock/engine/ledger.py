"""Score keeping.

A participant's score is the face value of the cards in their pile plus the
bonus points earned from modifiers. The remaining score is an optimistic bound
on everything still in play, so the game can end as soon as the trailing side
cannot catch up.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .deck import Deck
from .piles import Pile, PileType
from .types import Card, EndReason, Participant


@dataclass
class ScoreBonuses:
    player: int = 0
    oppo: int = 0

    def add_to_owner(self, who: Participant, value: int) -> None:
        if who is Participant.PLAYER:
            self.player += value
        else:
            self.oppo += value

    def of(self, who: Participant) -> int:
        return self.player if who is Participant.PLAYER else self.oppo


def _max_sum(cards: Iterable[Card]) -> int:
    return sum(card.max_value() for card in cards)


@dataclass(frozen=True)
class CardStats:
    """Read-only view over everything that counts towards the score."""

    piles: Mapping[PileType, Pile]
    hands: Mapping[Participant, list[Card]]
    decks: Mapping[Participant, Deck]
    sleeve: list[Card]
    bonuses: ScoreBonuses

    def participant_score(self, who: Participant) -> int:
        return self.piles[PileType.of(who)].score() + self.bonuses.of(who)

    def player_score(self) -> int:
        return self.participant_score(Participant.PLAYER)

    def oppo_score(self) -> int:
        return self.participant_score(Participant.OPPO)

    def remaining_score(self) -> int:
        decks = sum(deck.score() for deck in self.decks.values())
        hands = sum(_max_sum(hand) for hand in self.hands.values())
        return decks + hands + _max_sum(self.sleeve)

    def check_termination(self) -> EndReason | None:
        player = self.player_score()
        oppo = self.oppo_score()
        remaining = self.remaining_score()
        if player - oppo > remaining:
            return EndReason.VICTORY
        if oppo - player > remaining:
            return EndReason.LOSS
        return None

    def final_reason(self) -> EndReason:
        """Result on current scores alone, for when play cannot go on."""
        player = self.player_score()
        oppo = self.oppo_score()
        if player > oppo:
            return EndReason.VICTORY
        if oppo > player:
            return EndReason.LOSS
        return EndReason.DRAW
