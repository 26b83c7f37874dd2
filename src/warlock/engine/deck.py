"""Draw decks and the text deck format.

A deck file is a whitespace-separated list of two-character tokens,
`<value><modifier code>`, for example `0z 9_ 5w`. `_` means no modifier.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .types import MAX_VALUE, MIN_VALUE, NO_MODIFIER_CODE, Card, Modifier

_DIGITS = "".join(str(v) for v in range(MIN_VALUE, MAX_VALUE + 1))


class DeckParseError(ValueError):
    def __init__(self, token: str, message: str) -> None:
        super().__init__(f"{message}: {token!r}")
        self.token = token


class InvalidTokenError(DeckParseError):
    pass


class InvalidValueError(DeckParseError):
    pass


class InvalidModifierError(DeckParseError):
    pass


def parse_value(raw: str) -> int:
    if len(raw) != 1 or raw not in _DIGITS:
        raise InvalidValueError(raw, "Bad card value")
    return int(raw)


def parse_modifier(raw: str) -> Modifier | None:
    """Returns None for the explicit no-modifier code."""
    if raw == NO_MODIFIER_CODE:
        return None
    modifier = Modifier.from_code(raw)
    if modifier is None:
        raise InvalidModifierError(raw, "Unknown modifier code")
    return modifier


def parse_card(token: str) -> Card:
    if len(token) != 2:
        raise InvalidTokenError(token, "Card tokens are two characters")
    return Card(value=parse_value(token[0]), modifier=parse_modifier(token[1]))


def parse_deck(text: str) -> "Deck":
    return Deck([parse_card(token) for token in text.split()])


def format_deck(cards: Iterable[Card]) -> str:
    return " ".join(card.code for card in cards)


class Deck:
    """Cards are stored reversed so drawing pops from the tail in source order."""

    def __init__(self, cards: Sequence[Card]) -> None:
        self._source = tuple(cards)
        self._cards = list(reversed(self._source))

    def draw(self, count: int) -> list[Card]:
        count = max(0, min(count, self.remaining()))
        if count == 0:
            return []
        drawn = self._cards[-count:]
        del self._cards[-count:]
        drawn.reverse()
        return drawn

    def remaining(self) -> int:
        return len(self._cards)

    def score(self) -> int:
        return sum(card.max_value() for card in self._cards)

    def peek(self) -> list[Card]:
        """Undrawn cards, next draw first."""
        return list(reversed(self._cards))

    def restore(self) -> None:
        self._cards = list(reversed(self._source))

    def __len__(self) -> int:
        return self.remaining()

    def __repr__(self) -> str:
        return f"Deck({format_deck(self.peek())!r})"
