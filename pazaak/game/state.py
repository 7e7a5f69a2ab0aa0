"""
Immutable state models for Pazaak.

This module provides dataclasses for representing the state of a Pazaak match
in an immutable manner. These classes are designed to be used with pure
transition functions that create new state instances rather than modifying
existing ones. A `GameState` is also the read-only snapshot handed to
collaborators after every change.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, Tuple
from enum import Enum, auto
import uuid
import time

from pazaak.common.card import Card
from pazaak.common.side_deck import SideDeck, default_side_deck
from pazaak.game.constants import BOARD_SIZE, TARGET_SCORE


class Seat(Enum):
    """The two seats at a Pazaak table."""

    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Seat":
        return Seat.OPPONENT if self is Seat.PLAYER else Seat.PLAYER


class GameStage(Enum):
    """Possible stages of a Pazaak match."""

    WAITING = auto()
    PLAYER_TURN = auto()
    OPPONENT_TURN = auto()
    ROUND_OVER = auto()
    MATCH_OVER = auto()

    @staticmethod
    def turn_of(seat: Seat) -> "GameStage":
        return GameStage.PLAYER_TURN if seat is Seat.PLAYER else GameStage.OPPONENT_TURN


class RoundResult(Enum):
    """Possible results of a Pazaak round."""

    PLAYER_WIN = auto()
    OPPONENT_WIN = auto()
    TIE = auto()

    @staticmethod
    def win_for(seat: Seat) -> "RoundResult":
        return RoundResult.PLAYER_WIN if seat is Seat.PLAYER else RoundResult.OPPONENT_WIN

    @property
    def winner(self) -> Optional[Seat]:
        if self is RoundResult.PLAYER_WIN:
            return Seat.PLAYER
        if self is RoundResult.OPPONENT_WIN:
            return Seat.OPPONENT
        return None


def score_cards(cards: Tuple[Card, ...]) -> int:
    """
    Sum the effective values of played cards, each with the sign it was played with.
    """
    return sum(card.effective_value() for card in cards)


@dataclass(frozen=True)
class PendingSign:
    """
    A Plus/Minus side card waiting for its owner to choose a sign.

    Attributes:
        seat: Seat that played the card
        card: The side card, still unused in the side deck
    """

    seat: Seat
    card: Card


@dataclass(frozen=True)
class PlayerState:
    """
    Immutable representation of a player's state in Pazaak.

    Attributes:
        name: Display name of the player
        side_deck: The player's four side cards
        played_cards: Cards on the player's board this round, in play order
        score: Sum of the effective values of the played cards
        standing: Whether the player stands for the rest of the round
        busted: Whether the score is over 20
        rounds_won: Rounds won in the current match
    """

    name: str = "Player"
    side_deck: SideDeck = field(default_factory=default_side_deck)
    played_cards: Tuple[Card, ...] = ()
    score: int = 0
    standing: bool = False
    busted: bool = False
    rounds_won: int = 0

    @property
    def board_full(self) -> bool:
        return len(self.played_cards) >= BOARD_SIZE

    @property
    def is_done(self) -> bool:
        """A done player takes no further cards this round."""
        return self.standing or self.busted or self.board_full

    @property
    def can_draw(self) -> bool:
        return not self.is_done

    @property
    def can_play_side_card(self) -> bool:
        """A standing, busted or full-board player adds no further cards."""
        return not self.is_done and self.side_deck.has_available_cards()

    @property
    def can_recover(self) -> bool:
        """
        Whether a busted player still holds a side card to try to recover with.

        Only seats that draw their own turn card get this chance, before they
        end the turn.
        """
        return (
            self.busted
            and not self.standing
            and not self.board_full
            and self.side_deck.has_available_cards()
        )

    def add_card(self, card: Card) -> "PlayerState":
        """
        Place a card on the board and re-derive score and flags.

        Args:
            card: The card to add, carrying its chosen sign if any

        Returns:
            New player state with the card added
        """
        return replace(self, played_cards=self.played_cards + (card,)).recalculate()

    def recalculate(self) -> "PlayerState":
        """
        Derive score, busted and standing from the played cards.

        Standing only ever switches on: reaching exactly 20 stands the player
        for the rest of the round.
        """
        score = score_cards(self.played_cards)
        return replace(
            self,
            score=score,
            busted=score > TARGET_SCORE,
            standing=self.standing or score == TARGET_SCORE,
        )

    def reset_for_round(self) -> "PlayerState":
        return replace(
            self,
            side_deck=self.side_deck.reset(),
            played_cards=(),
            score=0,
            standing=False,
            busted=False,
        )

    def to_dict(self, hide_side_cards: bool = False) -> Dict[str, Any]:
        """
        Convert the player state to a dictionary.

        Args:
            hide_side_cards: Mask unplayed side cards (kind and value) so the
                dictionary can be shown to the other seat
        """
        side_cards = []
        for card in self.side_deck.cards:
            if hide_side_cards and not card.used:
                side_cards.append({"id": card.id, "used": False, "hidden": True})
            else:
                side_cards.append(card.to_dict())

        return {
            "name": self.name,
            "score": self.score,
            "played_cards": [card.to_dict() for card in self.played_cards],
            "side_cards": side_cards,
            "standing": self.standing,
            "busted": self.busted,
            "rounds_won": self.rounds_won,
            "can_play_side_card": self.can_play_side_card,
        }


@dataclass(frozen=True)
class GameState:
    """
    Immutable representation of the Pazaak match state.

    Attributes:
        id: Unique identifier for this match
        player: State of the human seat
        opponent: State of the computer seat
        stage: Current stage of the match
        active_seat: Seat whose turn it is, if any
        round_number: Current round, starting at 1
        first_seat: Seat that opens the current round
        pending: Plus/Minus card awaiting a sign choice, if any
        last_result: Result of the most recently finished round
        winner: Seat that won the match, once decided
        draw_pile_size: Cards left in the draw pile
        timestamp: Time when this state was created
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    player: PlayerState = field(default_factory=lambda: PlayerState(name="Player"))
    opponent: PlayerState = field(
        default_factory=lambda: PlayerState(name="Opponent")
    )
    stage: GameStage = GameStage.WAITING
    active_seat: Optional[Seat] = None
    round_number: int = 1
    first_seat: Seat = Seat.PLAYER
    pending: Optional[PendingSign] = None
    last_result: Optional[RoundResult] = None
    winner: Optional[Seat] = None
    draw_pile_size: int = 40
    timestamp: float = field(default_factory=lambda: time.time())

    def get_player(self, seat: Seat) -> PlayerState:
        return self.player if seat is Seat.PLAYER else self.opponent

    def with_player(self, seat: Seat, player: PlayerState) -> "GameState":
        """Return a copy of the state with one seat's player replaced."""
        if seat is Seat.PLAYER:
            return replace(self, player=player)
        return replace(self, opponent=player)

    def is_turn_of(self, seat: Seat) -> bool:
        return self.stage is GameStage.turn_of(seat) and self.active_seat is seat

    @property
    def is_round_over(self) -> bool:
        """Both seats are done: standing, busted or on a full board."""
        return self.player.is_done and self.opponent.is_done

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the game state to a dictionary suitable for serialization.

        Returns:
            Dictionary representation of the game state
        """
        return {
            "id": self.id,
            "stage": self.stage.name,
            "active_seat": self.active_seat.value if self.active_seat else None,
            "round_number": self.round_number,
            "first_seat": self.first_seat.value,
            "pending": (
                {"seat": self.pending.seat.value, "card": self.pending.card.to_dict()}
                if self.pending
                else None
            ),
            "last_result": self.last_result.name if self.last_result else None,
            "winner": self.winner.value if self.winner else None,
            "draw_pile_size": self.draw_pile_size,
            "timestamp": self.timestamp,
            "player": self.player.to_dict(),
            "opponent": self.opponent.to_dict(),
        }

    def to_adapter_format(self) -> Dict[str, Any]:
        """
        Convert the game state to the player-facing view used by adapters.

        The opponent's unplayed side cards are hidden.

        Returns:
            Dictionary in adapter-friendly format
        """
        pending_card = (
            self.pending.card.to_dict()
            if self.pending and self.pending.seat is Seat.PLAYER
            else None
        )
        return {
            "stage": self.stage.name,
            "current_turn": self.active_seat.value if self.active_seat else None,
            "round_number": self.round_number,
            "pending_sign_card": pending_card,
            "last_result": self.last_result.name if self.last_result else None,
            "winner": self.winner.value if self.winner else None,
            "player": self.player.to_dict(),
            "opponent": self.opponent.to_dict(hide_side_cards=True),
        }
