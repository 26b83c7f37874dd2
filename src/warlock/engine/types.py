from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_VALUE = 0
MAX_VALUE = 9

# Worth of a 0-valued card while a ZERO_BONUS is in play.
ZERO_BONUS_VALUE = 12


class Outcome(Enum):
    LOSS = "loss"
    TIE = "tie"
    WIN = "win"

    def invert(self) -> "Outcome":
        if self is Outcome.WIN:
            return Outcome.LOSS
        if self is Outcome.LOSS:
            return Outcome.WIN
        return Outcome.TIE


class Participant(Enum):
    PLAYER = "player"
    OPPO = "oppo"

    def other(self) -> "Participant":
        return Participant.OPPO if self is Participant.PLAYER else Participant.PLAYER


class EndReason(Enum):
    """Why a game ended, from the human player's point of view."""

    VICTORY = "victory"
    LOSS = "loss"
    CAUGHT_CHEATING = "caught_cheating"
    DRAW = "draw"


@dataclass
class TurnEffects:
    """Effects accumulated by the cards played this round.

    Built up as each side plays, read once when the round resolves and then
    reset. `zero_bonus` counts ZERO_BONUS cards, since two of them in the same
    round pay the 12 twice.
    """

    multiplier: int = 1
    zero_bonus: int = 0
    swap_active: bool = False

    @property
    def zero_bonus_active(self) -> bool:
        return self.zero_bonus > 0

    @staticmethod
    def from_cards(*cards: "Card") -> "TurnEffects":
        effects = TurnEffects()
        for card in cards:
            if card.modifier is not None:
                card.modifier.apply_to_turn_effects(effects)
        return effects

    def worth(self, card: "Card") -> int:
        if card.value == MIN_VALUE and self.zero_bonus_active:
            return ZERO_BONUS_VALUE
        return card.value

    def bonus_for(self, card: "Card") -> int:
        """Points `card` earns this round on top of its face value in a pile."""
        zero = ZERO_BONUS_VALUE * self.zero_bonus if card.value == MIN_VALUE else 0
        return zero + self.worth(card) * (self.multiplier - 1)


class Modifier(Enum):
    """Word of power printed on a card. Every effect is defined here."""

    SEED = ("s", "Egeq", "Gain a seed")
    DOUBLE = ("d", "Qube", "Double points")
    SWAP = ("w", "Zihbm", "Swap winners")
    ZERO_BONUS = ("z", "Geh", "Zero earns 12")
    HET = ("h", "Het", "Unimplemented")
    MEB = ("m", "Meb", "Unimplemented")

    def __init__(self, code: str, word: str, flavor_text: str) -> None:
        self.code = code
        self.word = word
        self.flavor_text = flavor_text

    @staticmethod
    def from_code(code: str) -> "Modifier | None":
        for modifier in Modifier:
            if modifier.code == code:
                return modifier
        return None

    @property
    def grants_seed(self) -> bool:
        return self is Modifier.SEED

    @property
    def contributes_bonus(self) -> bool:
        return self in (Modifier.DOUBLE, Modifier.ZERO_BONUS)

    @property
    def inverts_outcome(self) -> bool:
        return self is Modifier.SWAP

    def apply_to_turn_effects(self, effects: TurnEffects) -> None:
        if self is Modifier.DOUBLE:
            effects.multiplier += 1
        elif self is Modifier.ZERO_BONUS:
            effects.zero_bonus += 1
        elif self is Modifier.SWAP:
            effects.swap_active = not effects.swap_active

    def max_bonus(self, value: int) -> int:
        # Most this modifier can add to a single round, whoever ends up with it.
        if self is Modifier.ZERO_BONUS:
            return 2 * ZERO_BONUS_VALUE
        if self is Modifier.DOUBLE:
            own = ZERO_BONUS_VALUE if value == MIN_VALUE else value
            return own + ZERO_BONUS_VALUE
        return 0


NO_MODIFIER_CODE = "_"


@dataclass(frozen=True)
class Card:
    value: int
    modifier: Modifier | None = None

    def __post_init__(self) -> None:
        if not MIN_VALUE <= self.value <= MAX_VALUE:
            raise ValueError(f"Card value out of range: {self.value}")

    def __lt__(self, other: "Card") -> bool:
        return self.value < other.value

    def has(self, modifier: Modifier) -> bool:
        return self.modifier is modifier

    def max_value(self) -> int:
        if self.modifier is None:
            return self.value
        return self.value + self.modifier.max_bonus(self.value)

    @property
    def code(self) -> str:
        mod = self.modifier.code if self.modifier is not None else NO_MODIFIER_CODE
        return f"{self.value}{mod}"

    def __str__(self) -> str:
        return self.code
