"""
Cards and decks shared by the rest of the package.
"""

from pazaak.common.card import Card, CardKind, Sign
from pazaak.common.deck import DrawPile
from pazaak.common.side_deck import (
    SideDeck,
    InvalidSideDeckError,
    available_side_cards,
    default_side_deck,
    generate_opponent_side_deck,
)

__all__ = [
    "Card",
    "CardKind",
    "Sign",
    "DrawPile",
    "SideDeck",
    "InvalidSideDeckError",
    "available_side_cards",
    "default_side_deck",
    "generate_opponent_side_deck",
]
