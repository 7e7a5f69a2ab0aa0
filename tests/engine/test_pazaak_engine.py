"""
Tests for the PazaakEngine class.

Draw piles are stacked so every round plays out the same way: values are
dealt in the order given, starting with the player's and then the
opponent's opening card.
"""

import random
from dataclasses import replace

import pytest
from unittest.mock import MagicMock

from pazaak.common.card import Card, Sign
from pazaak.common.deck import DrawPile
from pazaak.common.side_deck import default_side_deck
from pazaak.engine import PazaakEngine
from pazaak.events import EventBus, EngineEventType
from pazaak.game.action import ActionType, PlayerAction
from pazaak.game.state import GameStage, RoundResult, Seat


@pytest.fixture
def start(stacked_pile):
    """Start a match on a stacked pile and return the engine."""

    def build(*values, first_seat=Seat.PLAYER, player_deck=None, callback=None):
        engine = PazaakEngine(
            on_state_change=callback,
            draw_pile=stacked_pile(*values),
            rng=random.Random(0),
        )
        engine.start_match(
            player_side_deck=player_deck or default_side_deck(),
            opponent_side_deck=default_side_deck(),
            first_seat=first_seat,
            fresh_pile=False,
        )
        return engine

    return build


def card_id(engine, seat, label):
    for card in engine.state.get_player(seat).side_deck.cards:
        if card.label == label:
            return card.id
    raise AssertionError(f"no {label} side card")


def test_initial_state():
    engine = PazaakEngine()
    assert engine.stage is GameStage.WAITING
    assert engine.draw_pile.size == 40
    assert engine.snapshot() is engine.state


def test_start_match_deals_opening_cards(start):
    callback = MagicMock()
    events = []
    EventBus.get_instance().on(EngineEventType.GAME_STARTED, events.append)

    engine = start(4, 7, callback=callback)

    state = engine.state
    assert state.stage is GameStage.PLAYER_TURN
    assert state.active_seat is Seat.PLAYER
    assert [c.value for c in state.player.played_cards] == [4]
    assert [c.value for c in state.opponent.played_cards] == [7]
    assert state.round_number == 1
    callback.assert_called_with(state)
    assert len(events) == 1


def test_start_match_with_fresh_pile():
    engine = PazaakEngine(rng=random.Random(5))
    engine.start_match(first_seat=Seat.OPPONENT)
    assert engine.stage is GameStage.OPPONENT_TURN
    assert engine.draw_pile.size == 38
    assert len(engine.state.opponent.side_deck.cards) == 4


def test_side_card_scenario_reaches_twenty(start, make_side_deck):
    engine = start(10, 5, player_deck=make_side_deck("-2", "+6", "±6", "+1"))

    assert engine.play_side_card(Seat.PLAYER, card_id(engine, Seat.PLAYER, "-2"))
    player = engine.state.player
    assert (player.score, player.standing, player.busted) == (8, False, False)

    assert engine.play_side_card(Seat.PLAYER, card_id(engine, Seat.PLAYER, "+6"))
    assert engine.state.player.score == 14

    assert engine.play_side_card(
        Seat.PLAYER, card_id(engine, Seat.PLAYER, "±6"), Sign.PLUS
    )
    player = engine.state.player
    assert player.score == 20
    assert player.standing
    assert engine.stage is GameStage.OPPONENT_TURN


def test_plus_minus_without_sign_waits_for_choice(start):
    engine = start(10, 5)
    plus_minus = card_id(engine, Seat.PLAYER, "±3")

    assert engine.play_side_card(Seat.PLAYER, plus_minus)

    assert engine.state.pending.card.id == plus_minus
    assert engine.state.player.score == 10
    assert engine.legal_actions(Seat.PLAYER) == [ActionType.CHOOSE_SIGN]
    assert not engine.end_turn(Seat.PLAYER)
    assert not engine.choose_sign(Seat.PLAYER, "sideways")

    assert engine.choose_sign(Seat.PLAYER, "minus")

    assert engine.state.pending is None
    assert engine.state.player.score == 7
    assert engine.state.player.side_deck.get_card(plus_minus).sign is Sign.MINUS


def test_actions_out_of_turn_are_rejected(start):
    engine = start(10, 5)
    before = engine.state

    assert engine.draw(Seat.OPPONENT) is None
    assert not engine.end_turn(Seat.OPPONENT)
    assert not engine.stand(Seat.OPPONENT)
    assert not engine.play_side_card(
        Seat.OPPONENT, engine.state.opponent.side_deck.cards[0].id
    )
    assert not engine.choose_sign(Seat.OPPONENT, Sign.PLUS)
    assert not engine.next_round()
    assert engine.legal_actions(Seat.OPPONENT) == []

    assert engine.state is before


def test_unknown_or_used_side_card_is_rejected(start):
    engine = start(10, 5)
    plus_three = card_id(engine, Seat.PLAYER, "+3")

    assert not engine.play_side_card(Seat.PLAYER, "missing")
    assert engine.play_side_card(Seat.PLAYER, plus_three)

    before = engine.state
    assert not engine.play_side_card(Seat.PLAYER, plus_three)
    assert engine.state is before


def test_end_turn_auto_draws_for_player(start):
    engine = start(5, 7, 3, 4, first_seat=Seat.OPPONENT)

    card = engine.draw(Seat.OPPONENT)
    assert card.value == 3
    assert engine.state.opponent.score == 10

    assert engine.end_turn(Seat.OPPONENT)

    assert engine.stage is GameStage.PLAYER_TURN
    assert engine.state.player.score == 9
    assert len(engine.state.player.played_cards) == 2


def test_stand_hands_turn_over(start):
    engine = start(10, 5)

    assert engine.stand(Seat.PLAYER)

    assert engine.state.player.standing
    assert engine.stage is GameStage.OPPONENT_TURN
    assert engine.legal_actions(Seat.PLAYER) == []


def test_free_continuation_when_other_seat_is_done(start):
    engine = start(10, 5, 2, 3)
    engine.stand(Seat.PLAYER)

    engine.draw(Seat.OPPONENT)
    assert engine.end_turn(Seat.OPPONENT)

    assert engine.stage is GameStage.OPPONENT_TURN
    assert engine.draw(Seat.OPPONENT).value == 3
    assert engine.state.opponent.score == 10


def test_auto_draw_bust_ends_round(start, make_side_deck):
    engine = start(10, 5, 2, 8, 2, 5, player_deck=make_side_deck("+1", "-3", "+2", "±1"))

    engine.end_turn(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)
    engine.end_turn(Seat.OPPONENT)
    assert engine.state.player.score == 18
    engine.end_turn(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)
    engine.end_turn(Seat.OPPONENT)

    state = engine.state
    assert state.player.score == 23
    assert state.player.busted
    assert state.stage is GameStage.ROUND_OVER
    assert state.last_result is RoundResult.OPPONENT_WIN
    assert state.opponent.rounds_won == 1
    assert engine.legal_actions(Seat.PLAYER) == []
    assert not engine.play_side_card(Seat.PLAYER, card_id(engine, Seat.PLAYER, "-3"))
    assert engine.state is state


def test_self_drawing_seat_can_recover_from_bust(start):
    engine = start(10, 5, 10, 9, 7, 1)

    engine.end_turn(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)
    engine.end_turn(Seat.OPPONENT)
    engine.end_turn(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)

    assert engine.state.opponent.score == 22
    assert engine.state.opponent.busted
    assert engine.stage is GameStage.OPPONENT_TURN
    assert engine.legal_actions(Seat.OPPONENT) == [
        ActionType.END_TURN,
        ActionType.PLAY_SIDE_CARD,
    ]

    assert engine.play_side_card(Seat.OPPONENT, card_id(engine, Seat.OPPONENT, "-2"))

    opponent = engine.state.opponent
    assert opponent.score == 20
    assert opponent.standing
    assert not opponent.busted
    # the player's auto-drawn 1 lands on 20 as well
    assert engine.stage is GameStage.ROUND_OVER
    assert engine.state.last_result is RoundResult.TIE


def test_engine_draws_for_auto_draw_seat(start):
    engine = start(10, 5, 3)

    assert engine.draw(Seat.PLAYER) is None
    assert engine.state.player.score == 10
    assert engine.draw_pile.size == 1


def test_bust_is_final_when_turn_ends(start):
    engine = start(10, 5, 10, 10, 9)

    engine.end_turn(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)
    engine.end_turn(Seat.OPPONENT)
    # the player's auto-drawn 10 lands on exactly 20
    assert engine.state.player.standing
    assert engine.stage is GameStage.OPPONENT_TURN

    engine.draw(Seat.OPPONENT)
    assert engine.state.opponent.busted
    assert engine.stage is GameStage.OPPONENT_TURN

    assert engine.end_turn(Seat.OPPONENT)

    assert engine.stage is GameStage.ROUND_OVER
    assert engine.state.last_result is RoundResult.PLAYER_WIN
    assert engine.state.player.rounds_won == 1


def test_busted_seat_cannot_stand_out_of_a_bust(start):
    engine = start(10, 5, 10, 10, 9)
    engine.end_turn(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)
    engine.end_turn(Seat.OPPONENT)
    engine.draw(Seat.OPPONENT)

    assert ActionType.STAND not in engine.legal_actions(Seat.OPPONENT)
    assert engine.stand(Seat.OPPONENT)

    assert engine.stage is GameStage.ROUND_OVER
    assert engine.state.last_result is RoundResult.PLAYER_WIN


def test_round_ends_when_both_boards_are_full(start):
    engine = start(*[1] * 18)

    for _ in range(8):
        engine.end_turn(Seat.PLAYER)
        engine.draw(Seat.OPPONENT)
        engine.end_turn(Seat.OPPONENT)

    state = engine.state
    assert len(state.player.played_cards) == 9
    assert len(state.opponent.played_cards) == 9
    assert state.stage is GameStage.ROUND_OVER
    assert state.last_result is RoundResult.TIE


def test_third_round_win_ends_match(start):
    states = []
    engine = start(10, 9, 10, 10, 10, callback=states.append)
    engine._state = replace(
        engine.state,
        player=replace(engine.state.player, rounds_won=2),
        opponent=replace(engine.state.opponent, rounds_won=1),
    )

    engine.end_turn(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)
    engine.end_turn(Seat.OPPONENT)
    engine.draw(Seat.OPPONENT)
    engine.end_turn(Seat.OPPONENT)

    state = engine.state
    assert state.stage is GameStage.MATCH_OVER
    assert state.winner is Seat.PLAYER
    assert state.player.rounds_won == 3
    assert state.opponent.rounds_won == 1
    assert [s.stage for s in states[-2:]] == [GameStage.ROUND_OVER, GameStage.MATCH_OVER]
    assert not engine.next_round()


def test_next_round_resets_boards_and_swaps_opener(start):
    engine = start(10, 5, 10, 10, 9, 4, 6)
    engine.play_side_card(Seat.PLAYER, card_id(engine, Seat.PLAYER, "+3"))
    engine.stand(Seat.PLAYER)
    engine.draw(Seat.OPPONENT)
    engine.stand(Seat.OPPONENT)
    assert engine.stage is GameStage.ROUND_OVER

    assert engine.next_round()

    state = engine.state
    assert state.round_number == 2
    assert state.first_seat is Seat.OPPONENT
    assert state.stage is GameStage.OPPONENT_TURN
    assert len(state.player.played_cards) == 1
    assert len(state.player.side_deck.available_cards()) == 4
    assert not state.player.standing


def test_empty_pile_is_refilled_with_shuffle_event():
    events = []
    EventBus.get_instance().on(EngineEventType.SHUFFLE, events.append)
    engine = PazaakEngine(draw_pile=DrawPile(cards=[Card(5), Card(5)]))
    engine.start_match(first_seat=Seat.PLAYER, fresh_pile=False)
    engine.end_turn(Seat.PLAYER)

    card = engine.draw(Seat.OPPONENT)

    assert card is not None
    assert engine.draw_pile.refills == 1
    assert engine.state.draw_pile_size == 39
    assert len(events) == 1


def test_apply_action_dispatch(start):
    engine = start(10, 5)
    assert engine.apply_action(Seat.PLAYER, PlayerAction.play(card_id(engine, Seat.PLAYER, "±3")))
    assert engine.apply_action(Seat.PLAYER, PlayerAction.choose(Sign.PLUS))
    assert engine.state.player.score == 13
    assert engine.apply_action(Seat.PLAYER, PlayerAction.stand())
    assert engine.stage is GameStage.OPPONENT_TURN
    assert not engine.apply_action(Seat.PLAYER, PlayerAction.end_turn())


def test_callback_errors_are_contained(start):
    callback = MagicMock(side_effect=RuntimeError("boom"))
    engine = start(10, 5, callback=callback)

    assert engine.stand(Seat.PLAYER)
    assert engine.stage is GameStage.OPPONENT_TURN
    assert callback.call_count >= 2
