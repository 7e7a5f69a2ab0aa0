"""
Pazaak engine implementation.

This module provides the PazaakEngine class, the round/match state machine.
The engine owns the draw pile and the current immutable `GameState`; every
change goes through one of its entry points, and the state-change callback is
invoked with the new state after each one.

Entry points never raise for a call made at the wrong time: they return False
(or None for `draw`) and leave the state untouched.
"""

import logging
import random
import time
from typing import Callable, Iterable, List, Optional, Union

from pazaak.common.card import Card, CardKind, Sign
from pazaak.common.deck import DrawPile
from pazaak.common.side_deck import (
    SideDeck,
    default_side_deck,
    generate_opponent_side_deck,
)
from pazaak.events import EventBus, EngineEventType
from pazaak.game.action import ActionType, PlayerAction
from pazaak.game.state import GameState, GameStage, PlayerState, Seat
from pazaak.game.transitions import StateTransitionEngine

logger = logging.getLogger("pazaak.engine")

StateCallback = Callable[[GameState], None]

# Seats whose turn card the engine draws. They cannot recover from a bust.
DEFAULT_AUTO_DRAW_SEATS = (Seat.PLAYER,)


def may_play_side_card(
    player: PlayerState, seat: Seat, auto_draw_seats: Iterable[Seat]
) -> bool:
    """A busted seat may only play a side card if it draws its own cards."""
    if player.can_play_side_card:
        return True
    return seat not in auto_draw_seats and player.can_recover


def legal_actions(
    state: GameState,
    seat: Seat,
    auto_draw_seats: Iterable[Seat] = DEFAULT_AUTO_DRAW_SEATS,
) -> List[ActionType]:
    """
    Actions a seat may take in the given state.

    Only the seat whose turn it is has any. While a Plus/Minus card waits for
    its sign, choosing the sign is the only action.
    """
    if not state.is_turn_of(seat):
        return []
    if state.pending is not None:
        return [ActionType.CHOOSE_SIGN] if state.pending.seat is seat else []

    player = state.get_player(seat)
    actions = [ActionType.END_TURN]
    if not player.busted:
        actions.append(ActionType.STAND)
    if may_play_side_card(player, seat, auto_draw_seats):
        actions.append(ActionType.PLAY_SIDE_CARD)
    return actions


class PazaakEngine:
    """
    State machine for a Pazaak match between a human and the computer.

    Stages run WAITING -> PLAYER_TURN / OPPONENT_TURN -> ROUND_OVER ->
    next round or MATCH_OVER.

    Seats listed in ``auto_draw_seats`` have their turn card drawn by the
    engine when the turn passes to them, and a bust on that card ends the
    round. Other seats draw through `draw` and may play a side card to
    recover from a bust before ending the turn.
    """

    def __init__(
        self,
        on_state_change: Optional[StateCallback] = None,
        draw_pile: Optional[DrawPile] = None,
        rng: Optional[random.Random] = None,
        auto_draw_seats: Iterable[Seat] = DEFAULT_AUTO_DRAW_SEATS,
    ):
        """
        Initialize the engine.

        Args:
            on_state_change: Called with the new GameState after every change
            draw_pile: Draw pile to use. A shuffled 40-card pile by default
            rng: Random number generator for the opening seat, the opponent's
                 side deck and shuffles
            auto_draw_seats: Seats whose turn card the engine draws itself
        """
        self.rng = rng or random.Random()
        self.draw_pile = draw_pile if draw_pile is not None else DrawPile(rng=self.rng)
        self.on_state_change = on_state_change
        self.auto_draw_seats = frozenset(auto_draw_seats)
        self.event_bus = EventBus.get_instance()
        self._state = GameState(draw_pile_size=self.draw_pile.size)

    @property
    def state(self) -> GameState:
        """The current state. Immutable, safe to hand to collaborators."""
        return self._state

    def snapshot(self) -> GameState:
        return self._state

    @property
    def stage(self) -> GameStage:
        return self._state.stage

    # Match and round lifecycle

    def start_match(
        self,
        player_side_deck: Optional[SideDeck] = None,
        opponent_side_deck: Optional[SideDeck] = None,
        first_seat: Optional[Seat] = None,
        player_name: str = "Player",
        opponent_name: str = "Opponent",
        fresh_pile: bool = True,
    ) -> bool:
        """
        Start a new match and deal its first round.

        Args:
            player_side_deck: Side deck for the human seat. Default deck if None
            opponent_side_deck: Side deck for the computer. Generated if None
            first_seat: Seat that opens round 1. Random if None
            player_name: Display name of the human seat
            opponent_name: Display name of the computer seat
            fresh_pile: Refill and reshuffle the draw pile first

        Returns:
            True
        """
        if fresh_pile:
            self.draw_pile.reset()
        if first_seat is None:
            first_seat = self.rng.choice([Seat.PLAYER, Seat.OPPONENT])
        if player_side_deck is None:
            player_side_deck = default_side_deck()
        if opponent_side_deck is None:
            opponent_side_deck = generate_opponent_side_deck(self.rng)

        self._state = StateTransitionEngine.create_match(
            player_side_deck,
            opponent_side_deck,
            first_seat,
            player_name=player_name,
            opponent_name=opponent_name,
        )
        logger.info(
            "Match %s started, %s opens; opponent side deck %s",
            self._state.id,
            first_seat.value,
            opponent_side_deck,
        )
        self.event_bus.emit(
            EngineEventType.GAME_STARTED,
            {"game_id": self._state.id, "timestamp": time.time()},
        )

        self._start_round()
        return True

    def next_round(self) -> bool:
        """
        Deal the next round after a round has finished.

        Returns:
            False unless the match is in ROUND_OVER
        """
        if self._state.stage is not GameStage.ROUND_OVER:
            return self._reject("next_round", None, "round is not over")

        self._state = StateTransitionEngine.advance_round(self._state)
        self._start_round()
        return True

    def _start_round(self) -> None:
        player_card = self._draw_card()
        opponent_card = self._draw_card()
        self._state = StateTransitionEngine.start_round(
            self._state, player_card, opponent_card, self.draw_pile.size
        )
        logger.debug(
            "Round %d: player opens with %s, opponent with %s",
            self._state.round_number,
            player_card,
            opponent_card,
        )
        self._notify()

    def _finish_round(self) -> None:
        self._state = StateTransitionEngine.end_round(self._state)
        logger.info(
            "Round %d over: %s (player %d%s, opponent %d%s)",
            self._state.round_number,
            self._state.last_result.name,
            self._state.player.score,
            " bust" if self._state.player.busted else "",
            self._state.opponent.score,
            " bust" if self._state.opponent.busted else "",
        )
        self._notify()

        winner = StateTransitionEngine.match_winner(self._state)
        if winner is not None:
            self._state = StateTransitionEngine.end_match(self._state, winner)
            logger.info("Match %s won by %s", self._state.id, winner.value)
            self._notify()

    # Turn entry points

    def draw(self, seat: Seat) -> Optional[Card]:
        """
        Draw a card from the pile onto the seat's board.

        Only seats the engine does not draw for call this. The round is not
        checked for an end here, so a seat that goes over 20 can still play a
        side card to recover before ending its turn.

        Returns:
            The drawn card, or None if the seat may not draw now
        """
        if not self._can_act(seat, "draw"):
            return None
        if seat in self.auto_draw_seats:
            self._reject("draw", seat, "the engine draws for this seat")
            return None
        if not self._state.get_player(seat).can_draw:
            self._reject("draw", seat, "seat is done for the round")
            return None

        card = self._deal(seat)
        self._notify()
        return card

    def end_turn(self, seat: Seat) -> bool:
        """
        End the seat's turn.

        A busted seat's bust becomes final and the round ends. If the other
        seat is already done, this seat keeps playing instead of handing off,
        unless it is done too, in which case the round ends.
        """
        if not self._can_act(seat, "end_turn"):
            return False

        player = self._state.get_player(seat)
        other = self._state.get_player(seat.other)

        if player.busted:
            self._finish_round()
        elif other.is_done:
            if player.is_done:
                self._finish_round()
            else:
                self._begin_turn(seat)
        else:
            self._begin_turn(seat.other)
        return True

    def stand(self, seat: Seat) -> bool:
        """
        Stand on the current score for the rest of the round.

        A busted seat cannot stand its way out: the round ends instead.
        """
        if not self._can_act(seat, "stand"):
            return False

        player = self._state.get_player(seat)
        if player.busted:
            self._finish_round()
            return True

        if not player.standing:
            self._state = StateTransitionEngine.stand(self._state, seat)

        if self._state.get_player(seat.other).is_done:
            self._finish_round()
        else:
            self._begin_turn(seat.other)
        return True

    def play_side_card(
        self, seat: Seat, card_id: str, sign: Optional[Union[Sign, str]] = None
    ) -> bool:
        """
        Play one of the seat's unused side cards.

        A Plus/Minus card played without a sign is parked as the pending sign
        request and nothing else changes until `choose_sign` is called.

        Args:
            seat: Seat playing the card
            card_id: ID of the side card
            sign: Sign for a Plus/Minus card, if already known

        Returns:
            False if it is not the seat's turn or the card cannot be played
        """
        if not self._can_act(seat, "play_side_card"):
            return False

        player = self._state.get_player(seat)
        if not may_play_side_card(player, seat, self.auto_draw_seats):
            return self._reject("play_side_card", seat, "no side card can be played")

        card = player.side_deck.get_card(card_id)
        if card is None or card.used:
            return self._reject("play_side_card", seat, f"unknown card {card_id!r}")

        if sign is not None:
            sign = self._coerce_sign(sign)
            if sign is None:
                return self._reject("play_side_card", seat, "invalid sign")

        if card.kind is CardKind.PLUS_MINUS and sign is None:
            self._state = StateTransitionEngine.request_sign(self._state, seat, card)
            self._notify()
            return True

        return self._apply_side_card(seat, card_id, sign)

    def choose_sign(self, seat: Seat, sign: Union[Sign, str]) -> bool:
        """
        Resolve the pending Plus/Minus card with the chosen sign.

        Returns:
            False if the seat has no pending card or the sign is invalid
        """
        state = self._state
        pending = state.pending
        if pending is None or pending.seat is not seat or not state.is_turn_of(seat):
            return self._reject("choose_sign", seat, "no pending card for this seat")

        sign = self._coerce_sign(sign)
        if sign is None:
            return self._reject("choose_sign", seat, "invalid sign")

        return self._apply_side_card(seat, pending.card.id, sign)

    def apply_action(self, seat: Seat, action: PlayerAction) -> bool:
        """
        Dispatch a PlayerAction to the matching entry point.
        """
        if action.type is ActionType.END_TURN:
            return self.end_turn(seat)
        if action.type is ActionType.STAND:
            return self.stand(seat)
        if action.type is ActionType.PLAY_SIDE_CARD:
            return self.play_side_card(seat, action.card_id, action.sign)
        if action.type is ActionType.CHOOSE_SIGN:
            return self.choose_sign(seat, action.sign)
        return self._reject(str(action.type), seat, "unknown action")

    def legal_actions(self, seat: Seat) -> List[ActionType]:
        """
        Actions the seat may take right now.
        """
        return legal_actions(self._state, seat, self.auto_draw_seats)

    # Internals

    def _apply_side_card(self, seat: Seat, card_id: str, sign: Optional[Sign]) -> bool:
        new_state, played = StateTransitionEngine.play_side_card(
            self._state, seat, card_id, sign
        )
        if played is None:
            return self._reject("play_side_card", seat, f"card {card_id!r} not usable")

        self._state = new_state
        logger.debug(
            "%s played %s, score %d", seat.value, played, new_state.get_player(seat).score
        )
        self._after_side_card(seat)
        return True

    def _after_side_card(self, seat: Seat) -> None:
        player = self._state.get_player(seat)
        if player.is_done:
            if self._state.is_round_over:
                self._finish_round()
                return
            if not player.busted:
                self._begin_turn(seat.other)
                return
        self._notify()

    def _begin_turn(self, seat: Seat) -> None:
        """
        Give the turn to a seat, drawing its turn card if the engine draws for it.

        If that card busts the seat, the bust is final and the round ends. If
        it leaves the seat standing or on a full board, the turn passes
        straight back (or the round ends when the other seat is done).
        """
        self._state = StateTransitionEngine.change_turn(self._state, seat)

        if seat in self.auto_draw_seats:
            self._deal(seat)
            player = self._state.get_player(seat)
            if player.busted:
                self._finish_round()
                return
            if player.is_done:
                if self._state.get_player(seat.other).is_done:
                    self._finish_round()
                else:
                    self._begin_turn(seat.other)
                return

        self._notify()

    def _deal(self, seat: Seat) -> Card:
        card = self._draw_card()
        self._state = StateTransitionEngine.deal_card(
            self._state, seat, card, self.draw_pile.size
        )
        return card

    def _draw_card(self) -> Card:
        refills = self.draw_pile.refills
        card = self.draw_pile.draw()
        if self.draw_pile.refills != refills:
            self.event_bus.emit(
                EngineEventType.SHUFFLE,
                {
                    "game_id": self._state.id,
                    "refills": self.draw_pile.refills,
                    "timestamp": time.time(),
                },
            )
        return card

    def _can_act(self, seat: Seat, action: str) -> bool:
        state = self._state
        if not state.is_turn_of(seat):
            return self._reject(action, seat, f"not this seat's turn ({state.stage.name})")
        if state.pending is not None:
            return self._reject(action, seat, "a sign choice is pending")
        return True

    @staticmethod
    def _coerce_sign(sign: Union[Sign, str]) -> Optional[Sign]:
        if isinstance(sign, Sign):
            return sign
        try:
            return Sign(sign)
        except ValueError:
            return None

    def _reject(self, action: str, seat: Optional[Seat], reason: str) -> bool:
        logger.debug(
            "Rejected %s for %s: %s", action, seat.value if seat else "-", reason
        )
        return False

    def _notify(self) -> None:
        if self.on_state_change is None:
            return
        try:
            self.on_state_change(self._state)
        except Exception as e:
            logger.error(f"Error in state change callback: {e}", exc_info=True)
