"""
This module defines the `CardKind`, `Sign`, and `Card` classes, which are used to represent Pazaak cards.

- `CardKind`: An enum of the four kinds of Pazaak cards: main deck cards and
the Plus, Minus and Plus/Minus side cards.

- `Sign`: An enum for the sign chosen when a Plus/Minus card is played.

- `Card`: An immutable card. A card has a value, a kind, a unique id, a
`used` flag (side cards only) and, once played, the sign it was played with.

This module is part of the `pazaak` package.
"""

import uuid
from dataclasses import dataclass, replace
from enum import Enum, unique
from typing import Optional

MAIN_VALUES = range(1, 11)
SIDE_VALUES = range(1, 7)


@unique
class CardKind(Enum):
    """
    Enum for the kinds of card in Pazaak.
    """

    MAIN = "main"
    PLUS = "plus"
    MINUS = "minus"
    PLUS_MINUS = "plusminus"

    @property
    def is_side(self) -> bool:
        """Whether cards of this kind belong in a side deck."""
        return self is not CardKind.MAIN

    @property
    def can_add(self) -> bool:
        return self in (CardKind.PLUS, CardKind.PLUS_MINUS)

    @property
    def can_subtract(self) -> bool:
        return self in (CardKind.MINUS, CardKind.PLUS_MINUS)

    def __str__(self) -> str:
        return self.value


@unique
class Sign(Enum):
    """
    Enum for the sign chosen when playing a Plus/Minus card.
    """

    PLUS = "plus"
    MINUS = "minus"

    def __str__(self) -> str:
        return "+" if self is Sign.PLUS else "-"


def _new_card_id(kind: CardKind, value: int) -> str:
    return f"{kind.value}-{value}-{uuid.uuid4().hex[:9]}"


@dataclass(frozen=True)
class Card:
    """
    Class representing a Pazaak card.

    >>> Card(7)
    Card(7, CardKind.MAIN)
    >>> print(Card(3, CardKind.MINUS))
    -3
    >>> Card(4, CardKind.PLUS_MINUS).effective_value(Sign.MINUS)
    -4

    Attributes:
        value: Face value (1-10 for main cards, 1-6 for side cards)
        kind: Kind of the card
        id: Unique identifier for this card
        used: Whether a side card has been used this round
        sign: Sign the card was played with (Plus/Minus cards only)
    """

    value: int
    kind: CardKind = CardKind.MAIN
    id: str = ""
    used: bool = False
    sign: Optional[Sign] = None

    def __post_init__(self):
        if not isinstance(self.kind, CardKind):
            raise TypeError(f"Invalid card kind: {self.kind}")
        valid_values = SIDE_VALUES if self.kind.is_side else MAIN_VALUES
        if not isinstance(self.value, int) or self.value not in valid_values:
            raise ValueError(f"Invalid value {self.value!r} for a {self.kind} card")
        if not self.id:
            object.__setattr__(self, "id", _new_card_id(self.kind, self.value))

    @property
    def is_side(self) -> bool:
        return self.kind.is_side

    def effective_value(self, sign: Optional[Sign] = None) -> int:
        """
        The numeric contribution of this card to a score.

        :param sign: Sign to evaluate with. Defaults to the sign the card was
                     played with. Only Plus/Minus cards look at the sign, and
                     they count as plus unless minus was chosen.
        :return: The signed value of the card.
        """
        if self.kind is CardKind.MINUS:
            return -self.value
        if self.kind is CardKind.PLUS_MINUS:
            chosen = sign if sign is not None else self.sign
            return -self.value if chosen is Sign.MINUS else self.value
        return self.value

    def played_with(self, sign: Optional[Sign] = None) -> "Card":
        """
        Return a used copy of this card carrying the sign it is played with.

        The sign is only recorded for Plus/Minus cards.
        """
        if self.kind is not CardKind.PLUS_MINUS:
            sign = None
        return replace(self, used=True, sign=sign)

    def fresh(self) -> "Card":
        """Return an unused copy of this card with no sign attached."""
        return replace(self, used=False, sign=None)

    @property
    def label(self) -> str:
        """Short display label, e.g. ``7``, ``+3``, ``-2`` or ``±4``."""
        if self.kind is CardKind.PLUS:
            return f"+{self.value}"
        if self.kind is CardKind.MINUS:
            return f"-{self.value}"
        if self.kind is CardKind.PLUS_MINUS:
            if self.sign is None:
                return f"±{self.value}"
            return f"{self.sign}{self.value}"
        return str(self.value)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "value": self.value,
            "kind": self.kind.value,
            "used": self.used,
            "sign": self.sign.value if self.sign else None,
            "label": self.label,
        }

    def __repr__(self) -> str:
        return f"Card({self.value}, CardKind.{self.kind.name})"

    def __str__(self) -> str:
        return self.label
