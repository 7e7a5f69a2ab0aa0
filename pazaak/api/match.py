"""
Pazaak match API module.

This module provides the high-level driver that wires the engine, the
computer opponent, a platform adapter and the persisted collaborators
together, and plays a full match.
"""

import asyncio
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pazaak.adapters import PlatformAdapter, CLIAdapter
from pazaak.ai.opponent import OpponentAI
from pazaak.common.deck import DrawPile
from pazaak.common.side_deck import SideDeck, default_side_deck
from pazaak.engine.pazaak import PazaakEngine, legal_actions
from pazaak.events import EventBus, EngineEventType, EventPriority
from pazaak.game.action import ActionType, PlayerAction
from pazaak.game.state import GameStage, GameState, RoundResult, Seat
from pazaak.storage import SideDeckStore, StatsTracker

logger = logging.getLogger("pazaak.api")


class PazaakMatch:
    """
    High-level, platform-agnostic API for a Pazaak match against the computer.

    The driver alternates between asking the adapter for the human's actions
    and letting the opponent play its turns, renders the player view after
    every step, forwards engine events to the adapter and records results in
    the stats tracker.

    Example:
        ```python
        match = PazaakMatch(adapter=CLIAdapter(), stats=StatsTracker("stats.json"))
        await match.initialize()
        final_state = await match.play_match()
        await match.shutdown()
        ```
    """

    def __init__(
        self,
        adapter: Optional[PlatformAdapter] = None,
        config: Optional[Dict[str, Any]] = None,
        side_deck_store: Optional[SideDeckStore] = None,
        stats: Optional[StatsTracker] = None,
        rng: Optional[random.Random] = None,
        draw_pile: Optional[DrawPile] = None,
    ):
        """
        Initialize a new match.

        Args:
            adapter: Platform adapter to use for rendering and input.
                    If None, a CLI adapter will be used.
            config: Configuration options merged over the defaults
            side_deck_store: Where the player's side deck is loaded from
            stats: Tracker credited with every finished round and match
            rng: Random number generator shared by the engine and opponent
            draw_pile: Draw pile for the engine, dealt from as given. A freshly
                       shuffled pile by default
        """
        self.adapter = adapter or CLIAdapter()

        default_config = {
            "think_delay": 0.8,
            "action_delay": 0.4,
            "turn_delay": 0.5,
            "player_name": "Player",
            "opponent_name": "Opponent",
            "first_seat": None,
            "max_invalid_actions": 3,
        }
        if config:
            default_config.update(config)
        self.config = default_config

        self.side_deck_store = side_deck_store
        self.stats = stats
        self.rng = rng or random.Random()
        self.event_bus = EventBus.get_instance()
        self.event_handlers: Dict[Any, List[Callable]] = {}

        self.engine = PazaakEngine(
            on_state_change=self._on_state_change,
            draw_pile=draw_pile,
            rng=self.rng,
        )
        self.opponent = OpponentAI(
            self.engine,
            think_delay=self.config["think_delay"],
            action_delay=self.config["action_delay"],
            rng=self.rng,
        )
        self.player_side_deck: SideDeck = default_side_deck()
        self._fresh_pile = draw_pile is None

        self._queued_events: List[Tuple[str, Dict[str, Any]]] = []
        self._state_dirty = False
        self._initialized = False

    async def initialize(self) -> None:
        """
        Initialize the adapter, load the collaborators and subscribe to events.
        """
        await self.adapter.initialize()

        if self.side_deck_store is not None:
            self.player_side_deck = await self.side_deck_store.load()
        if self.stats is not None:
            await self.stats.load()

        self.on(EngineEventType.ROUND_ENDED, self._on_round_ended)
        self.on(EngineEventType.GAME_ENDED, self._on_game_ended)
        self.event_handlers.setdefault("*", []).append(
            self.event_bus.on_any(self._queue_event, EventPriority.LOW)
        )

        self._initialized = True
        self.event_bus.emit(
            EngineEventType.ENGINE_INIT,
            {"game_id": self.engine.state.id, "timestamp": time.time()},
        )

    async def shutdown(self) -> None:
        """
        Unsubscribe from events, save the stats and shut down the adapter.
        """
        self.event_bus.emit(
            EngineEventType.ENGINE_SHUTDOWN,
            {"game_id": self.engine.state.id, "timestamp": time.time()},
        )
        await self._flush()

        for handlers in self.event_handlers.values():
            for unsubscribe in handlers:
                unsubscribe()
        self.event_handlers.clear()

        if self.stats is not None:
            await self.stats.save()
        await self.adapter.shutdown()
        self._initialized = False

    def on(
        self,
        event_type: Union[str, EngineEventType],
        handler: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Register an event handler that is removed again on shutdown.

        Returns:
            Function to call to unsubscribe the handler
        """
        unsubscribe_func = self.event_bus.on(event_type, handler, priority)
        self.event_handlers.setdefault(event_type, []).append(unsubscribe_func)
        return unsubscribe_func

    @property
    def state(self) -> GameState:
        return self.engine.state

    def valid_actions(self, state: Optional[GameState] = None) -> List[ActionType]:
        """
        The human player's legal actions in a state (the current one by default).
        """
        return legal_actions(
            state or self.engine.state, Seat.PLAYER, self.engine.auto_draw_seats
        )

    async def start_match(self) -> GameState:
        """
        Start a new match with the player's side deck and a generated opponent deck.

        Returns:
            The state after the first round has been dealt
        """
        if not self._initialized:
            await self.initialize()

        self.engine.start_match(
            player_side_deck=self.player_side_deck,
            first_seat=self.config["first_seat"],
            player_name=self.config["player_name"],
            opponent_name=self.config["opponent_name"],
            fresh_pile=self._fresh_pile,
        )
        await self._flush()
        return self.engine.state

    async def play_match(self) -> Dict[str, Any]:
        """
        Play until the match is over.

        Returns:
            Dictionary form of the final state
        """
        if self.engine.stage is GameStage.WAITING:
            await self.start_match()

        while self.engine.stage is not GameStage.MATCH_OVER:
            stage = self.engine.stage
            if stage is GameStage.ROUND_OVER:
                await self._pause(self.config["turn_delay"])
                self.engine.next_round()
                await self._flush()
            elif stage is GameStage.PLAYER_TURN:
                await self._play_human_turn_step()
            elif stage is GameStage.OPPONENT_TURN:
                await self._pause(self.config["turn_delay"])
                await self.play_opponent_turn()
            else:
                raise RuntimeError(f"Match stuck in stage {stage.name}")

        if self.stats is not None:
            await self.stats.save()

        return self.engine.state.to_dict()

    async def play_human_action(self, action: PlayerAction) -> bool:
        """
        Apply one human action.

        Returns:
            True if the engine accepted the action
        """
        accepted = self.engine.apply_action(Seat.PLAYER, action)
        if not accepted:
            logger.info("Rejected %s from the player", action.type.name)
        await self._flush()
        return accepted

    async def play_opponent_turn(self) -> bool:
        """
        Let the computer play its turn.

        Returns:
            False if it was not the computer's turn
        """
        played = await self.opponent.take_turn()
        await self._flush()
        return played

    async def _play_human_turn_step(self) -> None:
        state = self.engine.state
        if state.pending is not None and state.pending.seat is Seat.PLAYER:
            sign = await self.adapter.request_sign(state.pending.card.to_dict())
            await self.play_human_action(PlayerAction.choose(sign))
            return

        rejected = 0
        while self.engine.state is state:
            action = await self.adapter.request_player_action(
                state.to_adapter_format(), self.valid_actions(state)
            )
            if await self.play_human_action(action):
                return
            rejected += 1
            if rejected >= self.config["max_invalid_actions"]:
                logger.warning("Too many invalid actions, ending the player's turn")
                await self.play_human_action(PlayerAction.end_turn())
                return

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    async def _flush(self) -> None:
        """Render the player view if it changed and pass queued events to the adapter."""
        events, self._queued_events = self._queued_events, []
        for event_type, data in events:
            await self.adapter.notify_game_event(event_type, data)

        if self._state_dirty:
            self._state_dirty = False
            await self.adapter.render_game_state(self.engine.state.to_adapter_format())

    # Event handlers

    def _on_state_change(self, state: GameState) -> None:
        self._state_dirty = True

    def _queue_event(self, event: Tuple[str, Dict[str, Any]]) -> None:
        self._queued_events.append(event)

    def _on_round_ended(self, data: Dict[str, Any]) -> None:
        result = RoundResult[data["result"]]
        self.opponent.decision_logger.log_round_end(data["round_number"], result.name)
        if self.stats is not None:
            self.stats.record_round(result)

    def _on_game_ended(self, data: Dict[str, Any]) -> None:
        if self.stats is not None:
            self.stats.record_match(
                data["winner"] == Seat.PLAYER.value, data["opponent_rounds_won"]
            )
