from __future__ import annotations

from .actions import Action, PlayCardAction, SleeveCardAction, UseSeedAction
from .match import GameSession
from .piles import Pile
from .types import Participant


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, PlayCardAction):
        return {"type": "play", "player": a.player.value, "hand_index": a.hand_index}
    if isinstance(a, SleeveCardAction):
        return {"type": "sleeve", "hand_index": a.hand_index}
    if isinstance(a, UseSeedAction):
        return {"type": "use_seed"}
    # should be unreachable
    return {"type": "unknown"}


def _pile_to_dict(p: Pile) -> dict[str, object]:
    return {
        "stack_size": p.stack_size,
        "cards": [
            {"card": pc.card.code, "origin": pc.origin.value, "stack_pos": pc.stack_pos}
            for pc in p.cards
        ],
    }


def snapshot(session: GameSession) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game state."""
    stats = session.stats()
    return {
        "seed": session.seed,
        "state": session.state.value,
        "round": session.round_number,
        "initiative": session.initiative.value,
        "end_reason": session.end_reason.value if session.end_reason is not None else None,
        "decks": {who.value: [c.code for c in session.decks[who].peek()] for who in Participant},
        "hands": {who.value: [c.code for c in session.hands[who]] for who in Participant},
        "sleeve": [c.code for c in session.sleeve],
        "piles": {which.value: _pile_to_dict(p) for which, p in session.piles.items()},
        "bonuses": {"player": session.bonuses.player, "oppo": session.bonuses.oppo},
        "scores": {"player": stats.player_score(), "oppo": stats.oppo_score()},
        "remaining_score": stats.remaining_score(),
        "seeds": session.seeds.count,
        "action_log": [action_to_dict(a) for a in session.action_log],
    }
