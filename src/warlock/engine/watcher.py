from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class Watcher(Protocol):
    """Decides whether sleeving a card right now gets the player caught."""

    def is_watching(self) -> bool: ...
    def distract(self) -> None: ...
    def resume(self) -> None: ...
    def reset(self) -> None: ...


@dataclass
class BirdEye:
    """The bird watches until a seed distracts it, and again after a cheat."""

    watching: bool = True

    def is_watching(self) -> bool:
        return self.watching

    def distract(self) -> None:
        self.watching = False

    def resume(self) -> None:
        self.watching = True

    def reset(self) -> None:
        self.watching = True
