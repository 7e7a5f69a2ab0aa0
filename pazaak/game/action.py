"""Defines the actions a seat can take on its turn in a game of Pazaak."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pazaak.common.card import Sign


class ActionType(Enum):
    """Enum for the possible actions a seat can take in a game of Pazaak."""

    END_TURN = "end_turn"
    STAND = "stand"
    PLAY_SIDE_CARD = "play_side_card"
    CHOOSE_SIGN = "choose_sign"


@dataclass(frozen=True)
class PlayerAction:
    """An action together with its arguments."""

    type: ActionType
    card_id: Optional[str] = None
    sign: Optional[Sign] = None

    @classmethod
    def end_turn(cls) -> "PlayerAction":
        return cls(ActionType.END_TURN)

    @classmethod
    def stand(cls) -> "PlayerAction":
        return cls(ActionType.STAND)

    @classmethod
    def play(cls, card_id: str, sign: Optional[Sign] = None) -> "PlayerAction":
        return cls(ActionType.PLAY_SIDE_CARD, card_id=card_id, sign=sign)

    @classmethod
    def choose(cls, sign: Sign) -> "PlayerAction":
        return cls(ActionType.CHOOSE_SIGN, sign=sign)
