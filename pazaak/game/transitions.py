"""
State transition functions for Pazaak.

This module provides pure functions for transitioning between game states,
without modifying the original state objects.
"""

from typing import Any, Dict, Optional, Tuple
from dataclasses import replace

from pazaak.common.card import Card, Sign
from pazaak.common.side_deck import SideDeck
from pazaak.events import EventBus, EngineEventType
from pazaak.game.constants import ROUNDS_TO_WIN
from pazaak.game.state import (
    GameState,
    PlayerState,
    GameStage,
    PendingSign,
    RoundResult,
    Seat,
)


def _emit(event_type: EngineEventType, state: GameState, data: Dict[str, Any]) -> None:
    event_bus = EventBus.get_instance()
    payload = {"game_id": state.id, "timestamp": state.timestamp}
    payload.update(data)
    event_bus.emit(event_type, payload)


class StateTransitionEngine:
    """
    Pure functions for state transitions in Pazaak.

    This class contains static methods that implement game state transitions.
    Each method takes a state and returns a new state, without modifying the
    original.
    """

    @staticmethod
    def create_match(
        player_side_deck: SideDeck,
        opponent_side_deck: SideDeck,
        first_seat: Seat,
        player_name: str = "Player",
        opponent_name: str = "Opponent",
    ) -> GameState:
        """
        Create the state for a new match, before the first round is dealt.

        Args:
            player_side_deck: Side deck of the human seat
            opponent_side_deck: Side deck of the computer seat
            first_seat: Seat that opens round 1
            player_name: Display name of the human seat
            opponent_name: Display name of the computer seat

        Returns:
            New game state in the WAITING stage
        """
        state = GameState(
            player=PlayerState(name=player_name, side_deck=player_side_deck.reset()),
            opponent=PlayerState(
                name=opponent_name, side_deck=opponent_side_deck.reset()
            ),
            stage=GameStage.WAITING,
            round_number=1,
            first_seat=first_seat,
        )

        _emit(
            EngineEventType.GAME_CREATED,
            state,
            {
                "first_seat": first_seat.value,
                "player_side_deck": player_side_deck.to_records(),
            },
        )

        return state

    @staticmethod
    def start_round(
        state: GameState, player_card: Card, opponent_card: Card, draw_pile_size: int
    ) -> GameState:
        """
        Reset both boards and side decks and deal each seat its opening card.

        Args:
            state: Current game state
            player_card: Opening card for the human seat
            opponent_card: Opening card for the computer seat
            draw_pile_size: Cards left in the draw pile after dealing

        Returns:
            New game state with the first seat to act
        """
        player = state.player.reset_for_round().add_card(player_card)
        opponent = state.opponent.reset_for_round().add_card(opponent_card)

        new_state = replace(
            state,
            player=player,
            opponent=opponent,
            stage=GameStage.turn_of(state.first_seat),
            active_seat=state.first_seat,
            pending=None,
            last_result=None,
            draw_pile_size=draw_pile_size,
        )

        _emit(
            EngineEventType.ROUND_STARTED,
            new_state,
            {
                "round_number": new_state.round_number,
                "first_seat": new_state.first_seat.value,
                "player_card": player_card.label,
                "opponent_card": opponent_card.label,
            },
        )

        return new_state

    @staticmethod
    def deal_card(
        state: GameState, seat: Seat, card: Card, draw_pile_size: int
    ) -> GameState:
        """
        Add a card from the draw pile to a seat's board.

        Args:
            state: Current game state
            seat: Seat receiving the card
            card: Card drawn from the pile
            draw_pile_size: Cards left in the draw pile after the draw

        Returns:
            New game state with the card on the board
        """
        old_player = state.get_player(seat)
        new_player = old_player.add_card(card)
        new_state = replace(
            state.with_player(seat, new_player), draw_pile_size=draw_pile_size
        )

        _emit(
            EngineEventType.CARD_DEALT,
            new_state,
            {
                "seat": seat.value,
                "player_name": new_player.name,
                "card": card.label,
                "score": new_player.score,
            },
        )
        StateTransitionEngine._emit_flag_changes(new_state, seat, old_player, new_player)

        return new_state

    @staticmethod
    def request_sign(state: GameState, seat: Seat, card: Card) -> GameState:
        """
        Park a Plus/Minus card until its owner picks a sign.

        Only one card can wait for a sign at a time; the side deck is not
        touched until the sign is chosen.
        """
        new_state = replace(state, pending=PendingSign(seat=seat, card=card))

        _emit(
            EngineEventType.SIGN_REQUESTED,
            new_state,
            {"seat": seat.value, "card_id": card.id, "card": card.label},
        )

        return new_state

    @staticmethod
    def play_side_card(
        state: GameState, seat: Seat, card_id: str, sign: Optional[Sign] = None
    ) -> Tuple[GameState, Optional[Card]]:
        """
        Use a side card and add it to the seat's board.

        Args:
            state: Current game state
            seat: Seat playing the card
            card_id: ID of the side card
            sign: Sign for a Plus/Minus card

        Returns:
            Tuple of (new game state, played card). If the card is absent or
            already used, the original state and None are returned.
        """
        old_player = state.get_player(seat)
        side_deck, played = old_player.side_deck.use(card_id, sign)
        if played is None:
            return state, None

        new_player = replace(old_player, side_deck=side_deck).add_card(played)
        new_state = replace(state.with_player(seat, new_player), pending=None)

        _emit(
            EngineEventType.SIDE_CARD_PLAYED,
            new_state,
            {
                "seat": seat.value,
                "player_name": new_player.name,
                "card_id": played.id,
                "card": played.label,
                "effective_value": played.effective_value(),
                "score": new_player.score,
            },
        )
        StateTransitionEngine._emit_flag_changes(new_state, seat, old_player, new_player)

        return new_state, played

    @staticmethod
    def stand(state: GameState, seat: Seat) -> GameState:
        """
        Mark a seat as standing for the rest of the round.
        """
        player = state.get_player(seat)
        new_state = state.with_player(seat, replace(player, standing=True))

        _emit(
            EngineEventType.PLAYER_STOOD,
            new_state,
            {"seat": seat.value, "player_name": player.name, "score": player.score},
        )

        return new_state

    @staticmethod
    def change_turn(state: GameState, seat: Seat) -> GameState:
        """
        Give the turn to a seat.
        """
        new_state = replace(state, stage=GameStage.turn_of(seat), active_seat=seat)

        if state.active_seat is not seat:
            _emit(
                EngineEventType.TURN_CHANGED,
                new_state,
                {
                    "seat": seat.value,
                    "round_number": new_state.round_number,
                },
            )

        return new_state

    @staticmethod
    def determine_winner(player: PlayerState, opponent: PlayerState) -> RoundResult:
        """
        Decide a round between the two seats.

        The busted flag decides first: both busted is a tie and a single bust
        loses. Otherwise the higher score wins and equal scores tie.

        Args:
            player: Final state of the human seat
            opponent: Final state of the computer seat

        Returns:
            The round result
        """
        if player.busted and opponent.busted:
            return RoundResult.TIE
        if player.busted:
            return RoundResult.OPPONENT_WIN
        if opponent.busted:
            return RoundResult.PLAYER_WIN

        if player.score > opponent.score:
            return RoundResult.PLAYER_WIN
        if opponent.score > player.score:
            return RoundResult.OPPONENT_WIN
        return RoundResult.TIE

    @staticmethod
    def end_round(state: GameState) -> GameState:
        """
        Score the round, credit the winner and move to ROUND_OVER.

        Args:
            state: Current game state

        Returns:
            New game state with the round result recorded
        """
        result = StateTransitionEngine.determine_winner(state.player, state.opponent)

        new_state = replace(
            state,
            stage=GameStage.ROUND_OVER,
            active_seat=None,
            pending=None,
            last_result=result,
        )
        winner = result.winner
        if winner is not None:
            champion = new_state.get_player(winner)
            new_state = new_state.with_player(
                winner, replace(champion, rounds_won=champion.rounds_won + 1)
            )

        _emit(
            EngineEventType.ROUND_ENDED,
            new_state,
            {
                "round_number": new_state.round_number,
                "result": result.name,
                "winner": winner.value if winner else None,
                "player_score": new_state.player.score,
                "player_busted": new_state.player.busted,
                "opponent_score": new_state.opponent.score,
                "opponent_busted": new_state.opponent.busted,
                "player_rounds_won": new_state.player.rounds_won,
                "opponent_rounds_won": new_state.opponent.rounds_won,
            },
        )

        return new_state

    @staticmethod
    def match_winner(state: GameState) -> Optional[Seat]:
        """The seat with three round wins, if any."""
        if state.player.rounds_won >= ROUNDS_TO_WIN:
            return Seat.PLAYER
        if state.opponent.rounds_won >= ROUNDS_TO_WIN:
            return Seat.OPPONENT
        return None

    @staticmethod
    def end_match(state: GameState, winner: Seat) -> GameState:
        """
        Close the match in favour of a seat.
        """
        new_state = replace(state, stage=GameStage.MATCH_OVER, winner=winner)

        _emit(
            EngineEventType.GAME_ENDED,
            new_state,
            {
                "winner": winner.value,
                "rounds_played": new_state.round_number,
                "player_rounds_won": new_state.player.rounds_won,
                "opponent_rounds_won": new_state.opponent.rounds_won,
            },
        )

        return new_state

    @staticmethod
    def advance_round(state: GameState) -> GameState:
        """
        Prepare the next round: bump the round number and swap the opening seat.
        """
        return replace(
            state,
            round_number=state.round_number + 1,
            first_seat=state.first_seat.other,
        )

    @staticmethod
    def _emit_flag_changes(
        state: GameState, seat: Seat, before: PlayerState, after: PlayerState
    ) -> None:
        if after.busted and not before.busted:
            _emit(
                EngineEventType.PLAYER_BUSTED,
                state,
                {"seat": seat.value, "player_name": after.name, "score": after.score},
            )
        if after.standing and not before.standing:
            _emit(
                EngineEventType.PLAYER_STOOD,
                state,
                {
                    "seat": seat.value,
                    "player_name": after.name,
                    "score": after.score,
                    "automatic": True,
                },
            )
