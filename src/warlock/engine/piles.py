from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .types import Card, Participant


class PileType(Enum):
    WAR = "war"
    PLAYER = "player"
    OPPO = "oppo"

    @staticmethod
    def of(who: Participant) -> "PileType":
        return PileType.PLAYER if who is Participant.PLAYER else PileType.OPPO


@dataclass(frozen=True)
class PileCard:
    card: Card
    origin: Participant
    which: PileType
    stack_pos: int


@dataclass
class Pile:
    """Cards dropped on the table. `stack_size` only ever grows within a game."""

    which: PileType
    cards: list[PileCard] = field(default_factory=list)
    stack_size: int = 0

    def add(self, card: Card, origin: Participant) -> PileCard:
        placed = PileCard(card=card, origin=origin, which=self.which, stack_pos=self.stack_size)
        self.stack_size += 1
        self.cards.append(placed)
        return placed

    def take_all(self) -> list[PileCard]:
        taken = self.cards
        self.cards = []
        return taken

    def score(self) -> int:
        return sum(pc.card.value for pc in self.cards)

    def clear(self) -> None:
        self.cards = []
        self.stack_size = 0

    def __len__(self) -> int:
        return len(self.cards)
