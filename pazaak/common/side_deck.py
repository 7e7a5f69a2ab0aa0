"""
Side decks for Pazaak.

Each player brings exactly four side cards to a match. A side card can be
played once per round; the `used` flags are cleared when a new round starts.
"""

import random
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pazaak.common.card import Card, CardKind, Sign, SIDE_VALUES

SIDE_DECK_SIZE = 4

SIDE_KINDS = (CardKind.PLUS, CardKind.MINUS, CardKind.PLUS_MINUS)


class InvalidSideDeckError(ValueError):
    """Raised when side-deck records fail validation."""


@dataclass(frozen=True)
class SideDeck:
    """
    Immutable four-card side deck.

    Attributes:
        cards: The four side cards, in the order the player chose them
    """

    cards: Tuple[Card, ...]

    def __post_init__(self):
        cards = tuple(self.cards)
        if len(cards) != SIDE_DECK_SIZE:
            raise ValueError(
                f"A side deck holds exactly {SIDE_DECK_SIZE} cards, got {len(cards)}"
            )
        for card in cards:
            if not card.is_side:
                raise ValueError(f"{card!r} is not a side card")
        object.__setattr__(self, "cards", cards)

    def get_card(self, card_id: str) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def available_cards(self) -> List[Card]:
        """Cards not yet used this round."""
        return [card for card in self.cards if not card.used]

    def has_available_cards(self) -> bool:
        return any(not card.used for card in self.cards)

    def use(
        self, card_id: str, sign: Optional[Sign] = None
    ) -> Tuple["SideDeck", Optional[Card]]:
        """
        Mark one unused card as used.

        Args:
            card_id: ID of the card to use
            sign: Sign to play a Plus/Minus card with

        Returns:
            Tuple of (new side deck, played card). The card is None and the
            deck unchanged if the id is absent or the card was already used.
        """
        for index, card in enumerate(self.cards):
            if card.id == card_id and not card.used:
                played = card.played_with(sign)
                cards = list(self.cards)
                cards[index] = played
                return replace(self, cards=tuple(cards)), played
        return self, None

    def reset(self) -> "SideDeck":
        """Return a copy of this deck with every card unused."""
        return replace(self, cards=tuple(card.fresh() for card in self.cards))

    def to_records(self) -> List[Dict[str, Any]]:
        """Serialise to the persisted ``[{kind, value}, ...]`` format."""
        return [{"kind": card.kind.value, "value": card.value} for card in self.cards]

    @classmethod
    def from_records(cls, records: Any) -> "SideDeck":
        """
        Build a side deck from persisted records.

        Raises:
            InvalidSideDeckError: If the records are not a list of exactly four
                {kind, value} mappings with a side kind and a value of 1-6
        """
        if not isinstance(records, (list, tuple)):
            raise InvalidSideDeckError("Side deck must be a list of cards")
        if len(records) != SIDE_DECK_SIZE:
            raise InvalidSideDeckError(
                f"Side deck must have {SIDE_DECK_SIZE} cards, got {len(records)}"
            )

        cards = []
        for record in records:
            if not isinstance(record, dict):
                raise InvalidSideDeckError(f"Invalid card record: {record!r}")
            try:
                kind = CardKind(record.get("kind"))
            except ValueError:
                raise InvalidSideDeckError(f"Unknown card kind: {record.get('kind')!r}")
            value = record.get("value")
            # bool is an int subclass
            if (
                kind not in SIDE_KINDS
                or isinstance(value, bool)
                or not isinstance(value, int)
                or value not in SIDE_VALUES
            ):
                raise InvalidSideDeckError(f"Invalid side card: {record!r}")
            cards.append(Card(value, kind))

        return cls(tuple(cards))

    @classmethod
    def from_cards(cls, cards: Sequence[Card]) -> "SideDeck":
        """Build a side deck from fresh copies of the given cards."""
        return cls(tuple(card.fresh() for card in cards))

    def __str__(self) -> str:
        return " ".join(card.label for card in self.cards)


def available_side_cards() -> List[Card]:
    """
    The catalogue of side cards a player may pick from: +1..+6, -1..-6, ±1..±6.
    """
    return [Card(value, kind) for kind in SIDE_KINDS for value in SIDE_VALUES]


def default_side_deck() -> SideDeck:
    """The fixed fallback deck: +3, +4, -2, ±3."""
    return SideDeck(
        (
            Card(3, CardKind.PLUS),
            Card(4, CardKind.PLUS),
            Card(2, CardKind.MINUS),
            Card(3, CardKind.PLUS_MINUS),
        )
    )


def generate_opponent_side_deck(rng: Optional[random.Random] = None) -> SideDeck:
    """
    Generate a random side deck for the computer opponent.

    The deck always holds one or two Plus cards and one or two Minus cards;
    remaining slots prefer Plus/Minus cards. It can therefore always both
    raise and reduce a score.
    """
    rng = rng or random.Random()
    catalogue = available_side_cards()
    plus_cards = [c for c in catalogue if c.kind is CardKind.PLUS]
    minus_cards = [c for c in catalogue if c.kind is CardKind.MINUS]
    plus_minus_cards = [c for c in catalogue if c.kind is CardKind.PLUS_MINUS]

    def take(pool: List[Card]) -> Card:
        return pool.pop(rng.randrange(len(pool)))

    selected: List[Card] = []
    for _ in range(rng.randint(1, 2)):
        selected.append(take(plus_cards))
    for _ in range(rng.randint(1, 2)):
        selected.append(take(minus_cards))

    while len(selected) < SIDE_DECK_SIZE:
        if plus_minus_cards and rng.random() > 0.3:
            selected.append(take(plus_minus_cards))
        else:
            pool = plus_cards + minus_cards + plus_minus_cards
            card = pool[rng.randrange(len(pool))]
            for source in (plus_cards, minus_cards, plus_minus_cards):
                if card in source:
                    source.remove(card)
            selected.append(card)

    return SideDeck(tuple(selected))
