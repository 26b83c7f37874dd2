from __future__ import annotations

from dataclasses import dataclass

from .types import Participant


@dataclass(frozen=True)
class PlayCardAction:
    player: Participant
    hand_index: int


@dataclass(frozen=True)
class SleeveCardAction:
    """Hide a card from the human's hand up the sleeve instead of playing it."""

    hand_index: int


@dataclass(frozen=True)
class UseSeedAction:
    """Spend a seed to distract the watcher."""


Action = PlayCardAction | SleeveCardAction | UseSeedAction
