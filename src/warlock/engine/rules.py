"""Rules of war: who wins a battle and what bonus each card earns."""

from __future__ import annotations

from .types import Card, Outcome, TurnEffects

# Values that each value beats. 0 beats 9 and 9 beats everything but 0;
# there is no general wraparound.
_BEATS: dict[int, frozenset[int]] = {
    0: frozenset({9}),
    1: frozenset({0}),
    2: frozenset({0, 1}),
    3: frozenset({0, 1, 2}),
    4: frozenset({0, 1, 2, 3}),
    5: frozenset({0, 1, 2, 3, 4}),
    6: frozenset({0, 1, 2, 3, 4, 5}),
    7: frozenset({0, 1, 2, 3, 4, 5, 6}),
    8: frozenset({0, 1, 2, 3, 4, 5, 6, 7}),
    9: frozenset({1, 2, 3, 4, 5, 6, 7, 8}),
}


def value_beats(a: int, b: int) -> Outcome:
    if a == b:
        return Outcome.TIE
    if b in _BEATS[a]:
        return Outcome.WIN
    return Outcome.LOSS


def _swaps(card: Card) -> bool:
    return card.modifier is not None and card.modifier.inverts_outcome


def card_beats(card: Card, other: Card) -> Outcome:
    """Outcome of `card` against `other`, with SWAP cancelling in pairs."""
    outcome = value_beats(card.value, other.value)
    if _swaps(card) != _swaps(other):
        return outcome.invert()
    return outcome


def bonus_points(card: Card, other: Card) -> tuple[int, int]:
    effects = TurnEffects.from_cards(card, other)
    return effects.bonus_for(card), effects.bonus_for(other)


def effective_value(card: Card, other: Card | None) -> int:
    """What `card` is worth when played against `other`, before doubling."""
    in_play = (card,) if other is None else (card, other)
    return TurnEffects.from_cards(*in_play).worth(card)
