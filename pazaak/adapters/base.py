"""
Base adapter interface for the Pazaak engine.

This module defines the interface that platform-specific adapters must implement
to present a match to the human player and collect their actions.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Union
from enum import Enum

from pazaak.common.card import Sign
from pazaak.game.action import ActionType, PlayerAction


class PlatformAdapter(ABC):
    """
    Base interface for platform-specific adapters.

    This abstract class defines the methods that platform-specific adapters
    must implement to interact with a Pazaak match. These methods handle
    rendering the game state, requesting player actions and sign choices, and
    notifying of game events.

    Implementations of this interface bridge the gap between the platform-agnostic
    game engine and specific platforms like the console or an automated test.
    """

    @abstractmethod
    async def render_game_state(self, state: Dict[str, Any]) -> None:
        """
        Render the current game state to the platform.

        Args:
            state: The player-facing view of the game state, as produced by
                   `GameState.to_adapter_format`
        """
        pass

    @abstractmethod
    async def request_player_action(
        self, state: Dict[str, Any], valid_actions: List[ActionType]
    ) -> PlayerAction:
        """
        Request an action from the human player.

        Args:
            state: The player-facing view of the game state
            valid_actions: Action types the player may take right now

        Returns:
            The player's chosen action
        """
        pass

    @abstractmethod
    async def request_sign(self, card: Dict[str, Any]) -> Sign:
        """
        Ask which sign a Plus/Minus card should be played with.

        Args:
            card: Dictionary form of the pending card

        Returns:
            The chosen sign
        """
        pass

    @abstractmethod
    async def notify_game_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Notify the platform of a game event.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        pass

    # The following methods have default implementations but can be overridden

    async def initialize(self) -> None:
        """
        Initialize the adapter.

        This method is called when the adapter is first connected to a match.
        It can be used to set up resources, connections, etc.
        """
        pass

    async def shutdown(self) -> None:
        """
        Shutdown the adapter.

        This method is called when the match is shutting down. It can be used
        to clean up resources, close connections, etc.
        """
        pass
