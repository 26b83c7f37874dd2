"""Deterministic, headless rules engine for Warlock's Gambit.

IMPORTANT: This package must never do I/O; content loading lives in services.
"""

from .actions import PlayCardAction, SleeveCardAction, UseSeedAction
from .deck import Deck, DeckParseError, parse_card, parse_deck
from .match import GameConfig, GameSession, TurnState, advance, new_game, settle, step
from .rules import bonus_points, card_beats, value_beats
from .types import Card, EndReason, Modifier, Outcome, Participant

__all__ = [
    "Card",
    "Deck",
    "DeckParseError",
    "EndReason",
    "GameConfig",
    "GameSession",
    "Modifier",
    "Outcome",
    "Participant",
    "PlayCardAction",
    "SleeveCardAction",
    "TurnState",
    "UseSeedAction",
    "advance",
    "bonus_points",
    "card_beats",
    "new_game",
    "parse_card",
    "parse_deck",
    "settle",
    "step",
    "value_beats",
]
