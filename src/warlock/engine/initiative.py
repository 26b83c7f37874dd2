from __future__ import annotations

from typing import Protocol

from .types import Participant


class InitiativePolicy(Protocol):
    def next_initiative(self, current: Participant, round_number: int) -> Participant: ...


class EveryRound:
    """Leading side alternates every round."""

    def next_initiative(self, current: Participant, round_number: int) -> Participant:
        return current.other()


class EveryOtherRound:
    """Same side leads two rounds in a row: rounds 1-2, 3-4 and so on."""

    def next_initiative(self, current: Participant, round_number: int) -> Participant:
        if round_number % 2 == 1:
            return current.other()
        return current


POLICIES: dict[str, type[EveryRound] | type[EveryOtherRound]] = {
    "every_round": EveryRound,
    "every_other_round": EveryOtherRound,
}


def make_policy(name: str) -> InitiativePolicy:
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown initiative policy: {name}") from None
