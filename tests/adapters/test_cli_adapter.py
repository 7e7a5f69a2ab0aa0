"""
Tests for the console adapter, driven through a TestIOInterface.
"""

import random

import pytest

from pazaak.adapters import CLIAdapter
from pazaak.common.card import Sign
from pazaak.common.io_interface import TestIOInterface
from pazaak.engine import PazaakEngine
from pazaak.game.action import ActionType
from pazaak.game.state import Seat

ALL_ACTIONS = [ActionType.END_TURN, ActionType.STAND, ActionType.PLAY_SIDE_CARD]


@pytest.fixture
def view(stacked_pile):
    """Player view after 10 for the player and 5 for the opponent."""
    engine = PazaakEngine(draw_pile=stacked_pile(10, 5), rng=random.Random(0))
    engine.start_match(first_seat=Seat.PLAYER, fresh_pile=False, player_name="Revan")
    return engine.state.to_adapter_format()


def test_parse_simple_commands(view):
    assert CLIAdapter.parse_command("e", view, ALL_ACTIONS).type is ActionType.END_TURN
    assert CLIAdapter.parse_command("s", view, ALL_ACTIONS).type is ActionType.STAND
    assert CLIAdapter.parse_command("s", view, [ActionType.END_TURN]) is None
    assert CLIAdapter.parse_command("x", view, ALL_ACTIONS) is None
    assert CLIAdapter.parse_command("", view, ALL_ACTIONS) is None


def test_parse_side_card_slots(view):
    side_cards = view["player"]["side_cards"]

    action = CLIAdapter.parse_command("2", view, ALL_ACTIONS)
    assert action.type is ActionType.PLAY_SIDE_CARD
    assert action.card_id == side_cards[1]["id"]
    assert action.sign is None

    signed = CLIAdapter.parse_command("4-", view, ALL_ACTIONS)
    assert signed.card_id == side_cards[3]["id"]
    assert signed.sign is Sign.MINUS

    assert CLIAdapter.parse_command("5", view, ALL_ACTIONS) is None
    assert CLIAdapter.parse_command("0", view, ALL_ACTIONS) is None
    assert CLIAdapter.parse_command("1", view, [ActionType.END_TURN]) is None


def test_parse_rejects_used_slot(view):
    view["player"]["side_cards"][0]["used"] = True
    assert CLIAdapter.parse_command("1", view, ALL_ACTIONS) is None


@pytest.mark.asyncio
async def test_request_action_reprompts(view):
    io = TestIOInterface(["zz", "9", "S"])
    adapter = CLIAdapter(io)

    action = await adapter.request_player_action(view, ALL_ACTIONS)

    assert action.type is ActionType.STAND
    assert len(io.prompts) == 3
    assert io.sent_messages.count("Invalid choice. Please try again.") == 2
    assert io.sent_messages[0].startswith("Your move. e: end turn, s: stand")


@pytest.mark.asyncio
async def test_request_sign():
    io = TestIOInterface(["?", "-"])
    adapter = CLIAdapter(io)

    assert await adapter.request_sign({"label": "±3"}) is Sign.MINUS
    assert io.sent_messages == ["Play ±3 as + or -?", "Please enter + or -."]


@pytest.mark.asyncio
async def test_render_hides_opponent_side_cards(view):
    io = TestIOInterface()
    adapter = CLIAdapter(io)

    await adapter.render_game_state(view)

    assert io.sent_messages[0] == "\n=== Round 1 (0-0) ==="
    assert io.sent_messages[1] == "Opponent: 5 = 5"
    assert io.sent_messages[2] == "Revan: 10 = 10"
    assert io.sent_messages[3] == "Side cards: 1:+3 2:+4 3:-2 4:±3"


@pytest.mark.asyncio
async def test_render_flags_and_used_cards(view):
    view["player"]["standing"] = True
    view["player"]["side_cards"][2]["used"] = True
    view["opponent"]["busted"] = True
    io = TestIOInterface()

    await CLIAdapter(io).render_game_state(view)

    assert io.sent_messages[1].endswith("[bust]")
    assert io.sent_messages[2].endswith("[standing]")
    assert "3:--" in io.sent_messages[3]


@pytest.mark.asyncio
async def test_event_messages():
    io = TestIOInterface()
    adapter = CLIAdapter(io)

    await adapter.notify_game_event(
        "CARD_DEALT", {"player_name": "Revan", "card": "7", "score": 17}
    )
    await adapter.notify_game_event("PLAYER_BUSTED", {"player_name": "Revan", "score": 23})
    await adapter.notify_game_event(
        "ROUND_ENDED",
        {
            "result": "OPPONENT_WIN",
            "player_score": 23,
            "opponent_score": 18,
            "player_rounds_won": 0,
            "opponent_rounds_won": 1,
        },
    )
    await adapter.notify_game_event("GAME_ENDED", {"winner": "player"})
    await adapter.notify_game_event("TURN_CHANGED", {"seat": "player"})

    assert io.sent_messages == [
        "Revan draws 7 (17)",
        "Revan is over 20 with 23!",
        "The opponent wins the round: 23 to 18. Rounds 0-1",
        "You win the match!",
    ]
