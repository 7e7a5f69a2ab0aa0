"""Pazaak rule constants. These are fixed; the game has no rule variants."""

from pazaak.common.side_deck import SIDE_DECK_SIZE

TARGET_SCORE = 20
BOARD_SIZE = 9
ROUNDS_TO_WIN = 3

__all__ = [
    "TARGET_SCORE",
    "BOARD_SIZE",
    "ROUNDS_TO_WIN",
    "SIDE_DECK_SIZE",
]
