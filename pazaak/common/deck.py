"""
This module contains the DrawPile class, the shared main deck both players draw from.

>>> pile = DrawPile()
>>> pile.size
40
>>> pile.draw().kind
<CardKind.MAIN: 'main'>
>>> pile.size
39
"""

import logging
import random
from typing import List, Optional

from pazaak.common.card import Card, CardKind, MAIN_VALUES

COPIES_PER_VALUE = 4

logger = logging.getLogger("pazaak.deck")


class DrawPile:
    """
    The 40-card main deck: four copies of each value from 1 to 10.

    The pile is never empty from a caller's point of view. Drawing from an
    exhausted pile refills it with a fresh, shuffled set of 40 cards first.
    """

    def __init__(
        self,
        cards: Optional[List[Card]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize a DrawPile instance.

        :param cards: Optional list of cards to start with. Cards are drawn
                      from the end of the list. If not provided, a full
                      shuffled pile is built.
        :param rng: Random number generator used for shuffling.
        """
        self.rng = rng or random.Random()
        self.refills = 0
        if cards is None:
            self.cards: List[Card] = self.build_full_pile()
            self.shuffle()
        else:
            self.cards = list(cards)

    @staticmethod
    def build_full_pile() -> List[Card]:
        """
        Construct the 40 main cards in value order.

        >>> len(DrawPile.build_full_pile())
        40
        """
        return [
            Card(value, CardKind.MAIN)
            for value in MAIN_VALUES
            for _ in range(COPIES_PER_VALUE)
        ]

    def shuffle(self) -> "DrawPile":
        """Shuffle the remaining cards in place."""
        self.rng.shuffle(self.cards)
        return self

    def reset(self) -> None:
        """Replace the pile with a fresh, shuffled set of 40 cards."""
        self.cards = self.build_full_pile()
        self.shuffle()

    def draw(self) -> Card:
        """
        Remove and return the top card, refilling the pile first if empty.
        """
        if not self.cards:
            self.reset()
            self.refills += 1
            logger.info("Draw pile exhausted, reshuffled (refill #%d)", self.refills)
        return self.cards.pop()

    @property
    def size(self) -> int:
        """Number of cards left in the pile."""
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)

    def __repr__(self) -> str:
        return f"DrawPile({[card.value for card in self.cards]})"

    def __str__(self) -> str:
        return f"Draw pile of {len(self.cards)} cards"
