"""
Dummy adapter for Pazaak, used for testing and simulation.

This module provides a non-interactive adapter that can be used for automated
testing, simulations, and benchmarks where no user interaction is needed.
"""

from typing import Callable, List, Dict, Any, Optional, Union
from enum import Enum

from pazaak.adapters.base import PlatformAdapter
from pazaak.common.card import Sign
from pazaak.game.action import ActionType, PlayerAction

StrategyFunction = Callable[[Dict[str, Any], List[ActionType]], Optional[PlayerAction]]


class DummyAdapter(PlatformAdapter):
    """
    Dummy adapter for testing and simulation.

    This adapter doesn't interact with any real platform and is designed for
    automated tests, simulations, and benchmarks. Actions come from a scripted
    list first, then from a strategy function, and finally default to
    standing.
    """

    def __init__(
        self,
        auto_actions: Optional[List[PlayerAction]] = None,
        strategy_function: Optional[StrategyFunction] = None,
        auto_signs: Optional[List[Sign]] = None,
        default_sign: Sign = Sign.PLUS,
        verbose: bool = False,
    ):
        """
        Initialize the dummy adapter.

        Args:
            auto_actions: Actions to take in sequence
            strategy_function: Function taking (state, valid_actions) and
                               returning an action, or None to fall through
            auto_signs: Signs to answer sign requests with, in sequence
            default_sign: Sign used once ``auto_signs`` runs out
            verbose: Whether to print events to stdout (useful for debugging)
        """
        self.auto_actions = list(auto_actions or [])
        self.strategy_function = strategy_function
        self.auto_signs = list(auto_signs or [])
        self.default_sign = default_sign
        self.verbose = verbose

        self.action_index = 0
        self.sign_index = 0

        # Track events for later inspection
        self.events = []

        # Track rendered states and actions for testing
        self.rendered_states = []
        self.actions_taken: List[PlayerAction] = []

    async def render_game_state(self, state: Dict[str, Any]) -> None:
        """
        Store the game state for later inspection.

        Args:
            state: The current game state
        """
        self.rendered_states.append(state)

        if self.verbose:
            player = state.get("player", {})
            opponent = state.get("opponent", {})
            print(
                f"[{state.get('stage')}] round {state.get('round_number')}: "
                f"{player.get('name')} {player.get('score')} - "
                f"{opponent.get('name')} {opponent.get('score')}"
            )

    async def request_player_action(
        self, state: Dict[str, Any], valid_actions: List[ActionType]
    ) -> PlayerAction:
        """
        Return a scripted action or select one using the strategy function.

        Args:
            state: The player-facing view of the game state
            valid_actions: Action types the player may take right now

        Returns:
            A selected action
        """
        selected_action = None

        if self.action_index < len(self.auto_actions):
            selected_action = self.auto_actions[self.action_index]
            self.action_index += 1

        if selected_action is None and self.strategy_function:
            selected_action = self.strategy_function(state, valid_actions)

        if selected_action is None or selected_action.type not in valid_actions:
            if ActionType.STAND in valid_actions:
                selected_action = PlayerAction.stand()
            else:
                selected_action = PlayerAction.end_turn()

        self.actions_taken.append(selected_action)
        if self.verbose:
            print(f"Player selects {selected_action.type.name}")

        return selected_action

    async def request_sign(self, card: Dict[str, Any]) -> Sign:
        """
        Return the next scripted sign, or the default sign.
        """
        if self.sign_index < len(self.auto_signs):
            sign = self.auto_signs[self.sign_index]
            self.sign_index += 1
            return sign
        return self.default_sign

    async def notify_game_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Store the event for later inspection.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        event_type_str = event_type.name if isinstance(event_type, Enum) else event_type

        self.events.append((event_type_str, data))

        if self.verbose:
            print(f"Event: {event_type_str}")
            for key, value in data.items():
                print(f"  {key}: {value}")

    def get_events_by_type(self, event_type: Union[str, Enum]) -> List[Dict[str, Any]]:
        """
        Get all events of a specific type.

        Args:
            event_type: The type of events to retrieve

        Returns:
            A list of event data dictionaries
        """
        event_type_str = event_type.name if isinstance(event_type, Enum) else event_type
        return [data for typ, data in self.events if typ == event_type_str]

    def clear(self) -> None:
        """Clear all stored events, states and script positions."""
        self.events.clear()
        self.rendered_states.clear()
        self.actions_taken.clear()
        self.action_index = 0
        self.sign_index = 0
