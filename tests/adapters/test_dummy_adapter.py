"""
Tests for the scripted DummyAdapter.
"""

import pytest

from pazaak.adapters import DummyAdapter
from pazaak.common.card import Sign
from pazaak.events import EngineEventType
from pazaak.game.action import ActionType, PlayerAction

ALL_ACTIONS = [ActionType.END_TURN, ActionType.STAND, ActionType.PLAY_SIDE_CARD]


@pytest.mark.asyncio
async def test_scripted_actions_then_default():
    adapter = DummyAdapter(
        auto_actions=[PlayerAction.end_turn(), PlayerAction.play("c1")]
    )

    assert (await adapter.request_player_action({}, ALL_ACTIONS)).type is ActionType.END_TURN
    played = await adapter.request_player_action({}, ALL_ACTIONS)
    assert played.card_id == "c1"
    # Script exhausted: stand when allowed, otherwise end the turn
    assert (await adapter.request_player_action({}, ALL_ACTIONS)).type is ActionType.STAND
    fallback = await adapter.request_player_action({}, [ActionType.END_TURN])
    assert fallback.type is ActionType.END_TURN

    assert len(adapter.actions_taken) == 4


@pytest.mark.asyncio
async def test_invalid_scripted_action_is_replaced():
    adapter = DummyAdapter(auto_actions=[PlayerAction.stand()])

    action = await adapter.request_player_action(
        {}, [ActionType.END_TURN, ActionType.PLAY_SIDE_CARD]
    )

    assert action.type is ActionType.END_TURN


@pytest.mark.asyncio
async def test_strategy_function_receives_state():
    seen = []

    def strategy(state, valid_actions):
        seen.append((state["player"]["score"], valid_actions))
        return PlayerAction.end_turn() if state["player"]["score"] < 17 else None

    adapter = DummyAdapter(strategy_function=strategy)

    low = await adapter.request_player_action({"player": {"score": 12}}, ALL_ACTIONS)
    high = await adapter.request_player_action({"player": {"score": 18}}, ALL_ACTIONS)

    assert low.type is ActionType.END_TURN
    assert high.type is ActionType.STAND
    assert seen[0] == (12, ALL_ACTIONS)


@pytest.mark.asyncio
async def test_signs():
    adapter = DummyAdapter(auto_signs=[Sign.MINUS], default_sign=Sign.PLUS)

    assert await adapter.request_sign({"label": "±3"}) is Sign.MINUS
    assert await adapter.request_sign({"label": "±3"}) is Sign.PLUS


@pytest.mark.asyncio
async def test_records_events_and_states():
    adapter = DummyAdapter()

    await adapter.notify_game_event(EngineEventType.CARD_DEALT, {"card": "7"})
    await adapter.notify_game_event("PLAYER_STOOD", {"score": 18})
    await adapter.render_game_state({"stage": "PLAYER_TURN"})

    assert adapter.get_events_by_type(EngineEventType.CARD_DEALT) == [{"card": "7"}]
    assert adapter.get_events_by_type("PLAYER_STOOD") == [{"score": 18}]
    assert adapter.rendered_states == [{"stage": "PLAYER_TURN"}]

    adapter.clear()
    assert adapter.events == []
    assert adapter.rendered_states == []


@pytest.mark.asyncio
async def test_verbose_output(capsys):
    adapter = DummyAdapter(verbose=True)

    await adapter.render_game_state(
        {
            "stage": "PLAYER_TURN",
            "round_number": 2,
            "player": {"name": "Revan", "score": 14},
            "opponent": {"name": "Opponent", "score": 9},
        }
    )
    await adapter.notify_game_event("SHUFFLE", {"remaining": 39})

    out = capsys.readouterr().out
    assert "[PLAYER_TURN] round 2: Revan 14 - Opponent 9" in out
    assert "Event: SHUFFLE" in out
    assert "remaining: 39" in out
