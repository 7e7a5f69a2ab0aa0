"""
Command-line interface adapter for Pazaak.

This module provides an adapter for console-based play. Commands:

    e        end the turn
    s        stand
    1-4      play the side card in that slot
    1+ / 1-  play a Plus/Minus side card with a sign
    + / -    answer a sign request
"""

import asyncio
import logging
from typing import List, Dict, Any, Optional, Union
from enum import Enum

from pazaak.adapters.base import PlatformAdapter
from pazaak.common.card import Sign
from pazaak.common.io_interface import IOInterface, ConsoleIOInterface
from pazaak.game.action import ActionType, PlayerAction

logger = logging.getLogger("pazaak.adapters.cli")

_COMMAND_HELP = {
    ActionType.END_TURN: "e: end turn",
    ActionType.STAND: "s: stand",
    ActionType.PLAY_SIDE_CARD: "1-4: play side card (add + or - for a ± card)",
}


def _card_labels(cards: List[Dict[str, Any]]) -> str:
    return " ".join(card.get("label", "?") for card in cards) or "-"


def _side_card_labels(cards: List[Dict[str, Any]]) -> str:
    labels = []
    for slot, card in enumerate(cards, start=1):
        if card.get("hidden"):
            labels.append(f"{slot}:??")
        elif card.get("used"):
            labels.append(f"{slot}:--")
        else:
            labels.append(f"{slot}:{card.get('label')}")
    return " ".join(labels)


class CLIAdapter(PlatformAdapter):
    """
    Command-line interface adapter for Pazaak.

    This adapter uses the standard console for input/output, providing a
    simple text-based interface to the game.
    """

    def __init__(self, io_interface: Optional[IOInterface] = None):
        """
        Initialize the CLI adapter.

        Args:
            io_interface: Optional IOInterface to use for I/O. If None, a
                          console IOInterface is used.
        """
        self.io_interface = io_interface or ConsoleIOInterface()
        self._last_state: Dict[str, Any] = {}

    async def _read(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.io_interface.input, prompt)

    async def render_game_state(self, state: Dict[str, Any]) -> None:
        """
        Render the current game state to the console.

        Args:
            state: The player-facing view of the game state
        """
        self._last_state = state
        player = state.get("player", {})
        opponent = state.get("opponent", {})

        self.io_interface.output(
            f"\n=== Round {state.get('round_number')} "
            f"({player.get('rounds_won', 0)}-{opponent.get('rounds_won', 0)}) ==="
        )
        for seat in (opponent, player):
            flags = []
            if seat.get("standing"):
                flags.append("standing")
            if seat.get("busted"):
                flags.append("bust")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            self.io_interface.output(
                f"{seat.get('name')}: {_card_labels(seat.get('played_cards', []))} "
                f"= {seat.get('score', 0)}{suffix}"
            )
        self.io_interface.output(
            f"Side cards: {_side_card_labels(player.get('side_cards', []))}"
        )
        self.io_interface.output("=" * 30)

    async def request_player_action(
        self, state: Dict[str, Any], valid_actions: List[ActionType]
    ) -> PlayerAction:
        """
        Request an action from the player via the console.

        Args:
            state: The player-facing view of the game state
            valid_actions: Action types the player may take right now

        Returns:
            The player's chosen action
        """
        self.io_interface.output(
            "Your move. " + ", ".join(
                _COMMAND_HELP[action] for action in valid_actions if action in _COMMAND_HELP
            )
        )

        while True:
            choice = (await self._read("> ")).strip().lower()
            action = self.parse_command(choice, state, valid_actions)
            if action is not None:
                return action
            logger.debug("Unrecognised command %r", choice)
            self.io_interface.output("Invalid choice. Please try again.")

    @staticmethod
    def parse_command(
        command: str, state: Dict[str, Any], valid_actions: List[ActionType]
    ) -> Optional[PlayerAction]:
        """
        Turn a typed command into an action.

        Returns:
            The action, or None if the command is not valid right now
        """
        if command == "e" and ActionType.END_TURN in valid_actions:
            return PlayerAction.end_turn()
        if command == "s" and ActionType.STAND in valid_actions:
            return PlayerAction.stand()
        if not command or ActionType.PLAY_SIDE_CARD not in valid_actions:
            return None

        sign = None
        if command[-1] in ("+", "-"):
            sign = Sign.PLUS if command[-1] == "+" else Sign.MINUS
            command = command[:-1]
        if not command.isdigit():
            return None

        side_cards = state.get("player", {}).get("side_cards", [])
        slot = int(command) - 1
        if not 0 <= slot < len(side_cards) or side_cards[slot].get("used"):
            return None
        return PlayerAction.play(side_cards[slot]["id"], sign)

    async def request_sign(self, card: Dict[str, Any]) -> Sign:
        """
        Ask for the sign of a Plus/Minus card.
        """
        self.io_interface.output(f"Play {card.get('label')} as + or -?")
        while True:
            choice = (await self._read("> ")).strip()
            if choice in ("+", "-"):
                return Sign.PLUS if choice == "+" else Sign.MINUS
            self.io_interface.output("Please enter + or -.")

    async def notify_game_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Notify the user of a game event via the console.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        if isinstance(event_type, Enum):
            event_type = event_type.name

        message = self._format_event_message(event_type, data)
        if message:
            self.io_interface.output(message)

    def _format_event_message(
        self, event_type: str, data: Dict[str, Any]
    ) -> Optional[str]:
        """
        Format an event message based on the event type.

        Args:
            event_type: The type of event
            data: Data associated with the event

        Returns:
            Formatted message string or None if no message needed
        """
        name = data.get("player_name", "Unknown Player")

        if event_type == "CARD_DEALT":
            return f"{name} draws {data.get('card')} ({data.get('score')})"

        elif event_type == "SIDE_CARD_PLAYED":
            return f"{name} plays {data.get('card')} ({data.get('score')})"

        elif event_type == "PLAYER_STOOD":
            return f"{name} stands on {data.get('score')}"

        elif event_type == "PLAYER_BUSTED":
            return f"{name} is over 20 with {data.get('score')}!"

        elif event_type == "SHUFFLE":
            return "The draw pile is reshuffled."

        elif event_type == "ROUND_ENDED":
            result = data.get("result")
            if result == "TIE":
                outcome = "Round tied"
            elif result == "PLAYER_WIN":
                outcome = "You win the round"
            else:
                outcome = "The opponent wins the round"
            return (
                f"{outcome}: {data.get('player_score')} to "
                f"{data.get('opponent_score')}. Rounds "
                f"{data.get('player_rounds_won')}-{data.get('opponent_rounds_won')}"
            )

        elif event_type == "GAME_ENDED":
            if data.get("winner") == "player":
                return "You win the match!"
            return "The opponent wins the match."

        return None
