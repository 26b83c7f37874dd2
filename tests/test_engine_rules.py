from __future__ import annotations

import pytest

from warlock.engine.actions import PlayCardAction, SleeveCardAction, UseSeedAction
from warlock.engine.deck import parse_deck
from warlock.engine.initiative import EveryOtherRound, EveryRound, make_policy
from warlock.engine.match import (
    GameConfig,
    InvariantViolation,
    TurnState,
    advance,
    new_game,
    reset,
    settle,
    step,
)
from warlock.engine.piles import PileType
from warlock.engine.types import Card, EndReason, Participant

PLAYER = Participant.PLAYER
OPPO = Participant.OPPO


def _game(player: str, oppo: str, **config: object):
    session = new_game(parse_deck(player), parse_deck(oppo), seed=1, config=GameConfig(**config))
    settle(session)
    return session


def _play(session, who: Participant, index: int = 0) -> None:
    res = step(session, PlayCardAction(player=who, hand_index=index))
    assert res.ok, res.error
    settle(session)


def _events(session, kind: str) -> list[dict[str, object]]:
    return [ev for ev in session.event_log if ev["type"] == kind]


def test_opening_draw_and_first_turn() -> None:
    session = new_game(parse_deck("9_ 1_ 2_ 8_"), parse_deck("3_ 4_ 6_ 5_"), seed=1)
    advance(session, 0.0)
    assert session.state is TurnState.DRAW
    assert session.round_number == 1
    assert session.hands[PLAYER] == [Card(9), Card(1), Card(2)]
    assert session.decks[OPPO].remaining() == 1
    advance(session, 0.0)
    assert session.state is TurnState.PLAYER_TURN


def test_waiting_for_a_card_is_idempotent() -> None:
    session = _game("9_ 1_ 2_", "3_ 4_ 6_")
    before = len(session.event_log)
    for t in range(5):
        res = advance(session, 100.0 + t)
        assert res.events == []
    assert session.state is TurnState.PLAYER_TURN
    assert len(session.event_log) == before


def test_pause_after_first_card() -> None:
    session = _game("9_ 1_ 2_", "3_ 4_ 6_")
    step(session, PlayCardAction(player=PLAYER, hand_index=0))

    advance(session, 100.0)
    assert session.state is TurnState.CARD_PLAYED
    before = len(session.event_log)
    res = advance(session, 100.3)
    assert res.events == []
    assert session.state is TurnState.CARD_PLAYED
    assert len(session.event_log) == before

    advance(session, 100.5)
    assert session.state is TurnState.OPPO_TURN


def test_round_resolves_only_after_pause() -> None:
    session = _game("9_ 1_ 2_", "3_ 4_ 6_")
    _play(session, PLAYER)
    step(session, PlayCardAction(player=OPPO, hand_index=0))

    advance(session, 200.0)
    advance(session, 200.4)
    assert session.state is TurnState.CARD_PLAYED
    assert len(session.piles[PileType.WAR]) == 2
    assert _events(session, "ROUND_RESOLVED") == []

    res = advance(session, 200.5)
    assert [ev["type"] for ev in res.events] == ["ROUND_RESOLVED"]
    assert len(session.piles[PileType.WAR]) == 0
    assert session.round_number == 2
    assert session.state is TurnState.OPPO_TURN


def test_winner_takes_both_cards() -> None:
    session = _game("9_ 1_ 2_", "3_ 4_ 6_")
    _play(session, PLAYER)
    assert session.state is TurnState.OPPO_TURN
    assert len(session.piles[PileType.WAR]) == 1

    step(session, PlayCardAction(player=OPPO, hand_index=0))
    assert len(session.piles[PileType.WAR]) == 2
    settle(session)

    assert len(session.piles[PileType.WAR]) == 0
    assert len(session.piles[PileType.PLAYER]) == 2
    assert len(session.piles[PileType.OPPO]) == 0
    assert session.stats().player_score() == 12
    assert session.round_number == 2
    assert session.state is TurnState.OPPO_TURN
    (resolved,) = _events(session, "ROUND_RESOLVED")
    assert resolved["outcome"] == "win"


def test_tie_sends_each_card_home() -> None:
    session = _game("5_ 1_ 1_", "5_ 2_ 2_")
    _play(session, PLAYER)
    _play(session, OPPO)
    assert [pc.card for pc in session.piles[PileType.PLAYER].cards] == [Card(5)]
    assert [pc.card for pc in session.piles[PileType.OPPO].cards] == [Card(5)]
    assert session.piles[PileType.PLAYER].cards[0].origin is PLAYER


def test_bonus_goes_to_the_receiver() -> None:
    session = _game("0z 1_ 1_", "9d 1_ 1_")
    _play(session, PLAYER)
    _play(session, OPPO)
    # 0 beats 9: 0z earns 24, 9d earns 9, both land with the player
    assert session.bonuses.player == 33
    assert session.bonuses.oppo == 0
    assert session.stats().player_score() == 42
    assert session.end_reason is EndReason.VICTORY


def test_swap_hands_the_round_to_the_lower_card() -> None:
    session = _game("9w 1_ 1_", "5_ 1_ 1_")
    _play(session, PLAYER)
    _play(session, OPPO)
    assert len(session.piles[PileType.OPPO]) == 2
    assert session.end_reason is EndReason.LOSS


def test_early_victory_once_lead_is_safe() -> None:
    session = _game("9_ 8_ 7_", "1_ 1_ 1_")
    _play(session, PLAYER)
    _play(session, OPPO)
    assert not session.is_over
    assert session.state is TurnState.OPPO_TURN

    _play(session, OPPO)
    _play(session, PLAYER)
    assert session.is_over
    assert session.end_reason is EndReason.VICTORY
    assert session.round_number == 2
    assert session.hands[PLAYER] == [Card(7)]
    (over,) = _events(session, "GAME_OVER")
    assert over["reason"] == "victory"
    assert over["player_score"] == 19


def test_early_loss() -> None:
    session = _game("1_ 1_ 1_", "9_ 8_ 7_")
    _play(session, PLAYER)
    _play(session, OPPO)
    _play(session, OPPO)
    _play(session, PLAYER)
    assert session.end_reason is EndReason.LOSS


def test_out_of_cards_ends_on_score() -> None:
    session = _game("5_", "5_")
    assert session.hands[PLAYER] == [Card(5)]
    _play(session, PLAYER)
    _play(session, OPPO)
    assert session.is_over
    assert session.end_reason is EndReason.DRAW


def test_hands_refill_from_decks() -> None:
    session = _game("9_ 8_ 1_ 2_", "1_ 2_ 3_ 4_", hand_size=1)
    _play(session, PLAYER)
    _play(session, OPPO)
    assert session.hands[PLAYER] == [Card(8)]
    assert session.hands[OPPO] == [Card(2)]
    assert len(_events(session, "CARDS_DRAWN")) == 4


def test_every_round_initiative() -> None:
    policy = EveryRound()
    assert policy.next_initiative(PLAYER, 2) is OPPO
    assert policy.next_initiative(OPPO, 3) is PLAYER


def test_every_other_round_initiative() -> None:
    policy = make_policy("every_other_round")
    assert isinstance(policy, EveryOtherRound)
    leaders = [PLAYER]
    for round_number in range(2, 6):
        leaders.append(policy.next_initiative(leaders[-1], round_number))
    assert leaders == [PLAYER, PLAYER, OPPO, OPPO, PLAYER]


def test_unknown_initiative_policy() -> None:
    with pytest.raises(ValueError):
        make_policy("whenever")


def test_every_other_round_in_play() -> None:
    session = _game("2_ 2_ 2_ 2_", "1_ 1_ 1_ 1_", initiative="every_other_round")
    _play(session, PLAYER)
    _play(session, OPPO)
    assert session.state is TurnState.PLAYER_TURN


def test_oppo_can_lead_first() -> None:
    session = _game("1_ 2_ 3_", "1_ 2_ 3_", first_initiative=OPPO)
    assert session.initiative is OPPO
    assert session.state is TurnState.OPPO_TURN
    _play(session, OPPO)
    _play(session, PLAYER)
    assert session.round_number == 2
    assert session.state is TurnState.PLAYER_TURN


def test_out_of_turn_play_is_rejected() -> None:
    session = _game("9_ 1_ 2_", "3_ 4_ 6_")
    res = step(session, PlayCardAction(player=OPPO, hand_index=0))
    assert not res.ok
    assert res.error == "Not your turn."
    res = step(session, PlayCardAction(player=PLAYER, hand_index=7))
    assert res.error == "Invalid hand index."


def test_third_card_on_war_pile_is_an_invariant_violation() -> None:
    session = _game("9_ 1_ 2_", "3_ 4_ 6_")
    _play(session, PLAYER)
    step(session, PlayCardAction(player=OPPO, hand_index=0))
    session.piles[PileType.WAR].add(Card(1), PLAYER)
    with pytest.raises(InvariantViolation):
        settle(session)


def test_two_cards_from_one_side_is_an_invariant_violation() -> None:
    session = _game("9_ 1_ 2_", "3_ 4_ 6_")
    session.piles[PileType.WAR].add(Card(4), OPPO)
    step(session, PlayCardAction(player=PLAYER, hand_index=0))
    session.piles[PileType.WAR].cards.pop(0)
    session.piles[PileType.WAR].add(Card(1), PLAYER)
    with pytest.raises(InvariantViolation):
        settle(session)


def test_sleeve_while_watched_is_caught() -> None:
    session = _game("1_ 2_ 3_ 4_", "1_ 2_ 3_ 4_")
    res = step(session, SleeveCardAction(hand_index=0))
    assert res.ok
    assert session.end_reason is EndReason.CAUGHT_CHEATING
    assert [ev["type"] for ev in res.events] == ["CHEAT_SPOTTED", "GAME_OVER"]
    assert step(session, PlayCardAction(player=PLAYER, hand_index=0)).error == "Game already ended."


def test_seed_lets_player_sleeve_once() -> None:
    session = _game("5s 1_ 2_ 3_ 4_ 6_", "1_ 1_ 1_ 1_ 1_ 1_")
    _play(session, PLAYER)
    assert session.seeds.count == 1
    _play(session, OPPO)
    _play(session, OPPO)
    assert session.state is TurnState.PLAYER_TURN
    remaining = session.stats().remaining_score()

    assert step(session, UseSeedAction()).ok
    assert session.seeds.count == 0
    assert not session.watcher.is_watching()

    res = step(session, SleeveCardAction(hand_index=0))
    assert res.ok, res.error
    assert session.sleeve == [Card(1)]
    assert session.hands[PLAYER] == [Card(2), Card(3)]
    assert session.decks[PLAYER].remaining() == 2
    assert session.watcher.is_watching()
    assert session.state is TurnState.PLAYER_TURN
    assert session.stats().remaining_score() == remaining

    step(session, SleeveCardAction(hand_index=0))
    assert session.end_reason is EndReason.CAUGHT_CHEATING


def test_oppo_seed_card_goes_to_player() -> None:
    session = _game("1_ 1_ 1_", "5s 2_ 2_")
    _play(session, PLAYER)
    assert session.seeds.count == 0
    _play(session, OPPO)
    assert session.seeds.count == 1
    assert not session.is_over


def test_seed_required() -> None:
    session = _game("1_ 2_ 3_", "1_ 2_ 3_")
    res = step(session, UseSeedAction())
    assert not res.ok
    assert res.error == "No seed to use."


def test_sleeve_limits() -> None:
    session = _game("1_ 2_ 3_ 4_", "1_ 2_ 3_ 4_", sleeve_capacity=0)
    assert step(session, SleeveCardAction(hand_index=0)).error == "Sleeve is full."

    session = _game("1_ 2_ 3_", "1_ 2_ 3_")
    assert step(session, SleeveCardAction(hand_index=0)).error == "No card left to replace it."
    assert not session.is_over


def test_sleeved_cards_return_on_draw() -> None:
    session = new_game(parse_deck("1_ 2_ 3_ 4_ 5_ 6_"), parse_deck("1_ 2_ 3_"), seed=1)
    session.sleeve.append(Card(9))
    settle(session)
    assert session.hands[PLAYER] == [Card(1), Card(2), Card(9)]
    assert session.sleeve == []
    assert session.decks[PLAYER].remaining() == 4


def test_reset_restores_starting_point() -> None:
    session = _game("9_ 8_ 7_", "1_ 1_ 1_")
    for who in (PLAYER, OPPO, OPPO, PLAYER):
        _play(session, who)
    assert session.is_over

    reset(session)
    assert session.state is TurnState.STARTING
    assert session.round_number == 0
    assert session.end_reason is None
    assert session.bonuses.player == 0 and session.bonuses.oppo == 0
    assert all(len(p) == 0 for p in session.piles.values())
    assert session.decks[PLAYER].remaining() == 3
    assert session.event_log == [] and session.action_log == []
    settle(session)
    assert session.state is TurnState.PLAYER_TURN
