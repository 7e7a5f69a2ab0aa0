import random

import pytest

from pazaak.common.card import Card, CardKind, Sign
from pazaak.common.side_deck import (
    InvalidSideDeckError,
    SideDeck,
    available_side_cards,
    default_side_deck,
    generate_opponent_side_deck,
)


def test_default_side_deck():
    deck = default_side_deck()
    assert [card.label for card in deck.cards] == ["+3", "+4", "-2", "±3"]
    assert str(deck) == "+3 +4 -2 ±3"


def test_catalogue_has_eighteen_cards():
    catalogue = available_side_cards()
    assert len(catalogue) == 18
    assert {card.kind for card in catalogue} == {
        CardKind.PLUS,
        CardKind.MINUS,
        CardKind.PLUS_MINUS,
    }


def test_side_deck_must_hold_four_cards():
    with pytest.raises(ValueError):
        SideDeck((Card(1, CardKind.PLUS),) * 3)


def test_side_deck_rejects_main_cards():
    with pytest.raises(ValueError):
        SideDeck(
            (
                Card(1, CardKind.PLUS),
                Card(2, CardKind.PLUS),
                Card(3, CardKind.PLUS),
                Card(4),
            )
        )


def test_use_marks_card_used(make_side_deck):
    deck = make_side_deck("+3", "-2", "±4", "+1")
    card_id = deck.cards[2].id

    new_deck, played = deck.use(card_id, Sign.MINUS)

    assert played.used
    assert played.effective_value() == -4
    assert new_deck.get_card(card_id).used
    assert not deck.get_card(card_id).used
    assert len(new_deck.available_cards()) == 3


def test_used_card_cannot_be_used_again(make_side_deck):
    deck = make_side_deck("+3", "-2", "±4", "+1")
    card_id = deck.cards[0].id
    deck, _ = deck.use(card_id)

    same_deck, played = deck.use(card_id)

    assert played is None
    assert same_deck is deck


def test_unknown_card_id(make_side_deck):
    deck = make_side_deck("+3", "-2", "±4", "+1")
    assert deck.use("missing") == (deck, None)
    assert deck.get_card("missing") is None


def test_reset_clears_used_flags(make_side_deck):
    deck = make_side_deck("+3", "-2", "±4", "+1")
    for card in deck.cards:
        deck, _ = deck.use(card.id)
    assert not deck.has_available_cards()

    deck = deck.reset()

    assert deck.has_available_cards()
    assert len(deck.available_cards()) == 4


def test_records_round_trip(make_side_deck):
    deck = make_side_deck("+3", "-2", "±4", "+1")
    records = deck.to_records()
    assert records[2] == {"kind": "plusminus", "value": 4}
    assert str(SideDeck.from_records(records)) == str(deck)


@pytest.mark.parametrize(
    "records",
    [
        "not a list",
        [],
        [{"kind": "plus", "value": 1}] * 3,
        [{"kind": "plus", "value": 1}] * 5,
        [{"kind": "main", "value": 1}] * 4,
        [{"kind": "plus", "value": 7}] * 4,
        [{"kind": "plus", "value": 0}] * 4,
        [{"kind": "plus", "value": True}] * 4,
        [{"kind": "plus", "value": "3"}] * 4,
        [{"kind": "sideways", "value": 3}] * 4,
        [["plus", 3]] * 4,
    ],
)
def test_from_records_rejects_invalid_data(records):
    with pytest.raises(InvalidSideDeckError):
        SideDeck.from_records(records)


def test_invalid_side_deck_error_is_value_error():
    assert issubclass(InvalidSideDeckError, ValueError)


def test_from_cards_copies_fresh_cards():
    cards = [c.played_with(Sign.PLUS) for c in available_side_cards()[:4]]
    deck = SideDeck.from_cards(cards)
    assert not any(card.used for card in deck.cards)


@pytest.mark.parametrize("seed", range(25))
def test_generated_opponent_deck_can_raise_and_reduce(seed):
    deck = generate_opponent_side_deck(random.Random(seed))
    kinds = [card.kind for card in deck.cards]

    assert len(deck.cards) == 4
    assert 1 <= kinds.count(CardKind.PLUS) <= 3
    assert 1 <= kinds.count(CardKind.MINUS) <= 3
    assert len({(card.kind, card.value) for card in deck.cards}) == 4
