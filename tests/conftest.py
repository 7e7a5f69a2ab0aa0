"""
Pytest configuration for tests at the root level.

This module contains pytest fixtures shared by all test packages.
"""

import random

import pytest

from pazaak.common.card import Card, CardKind
from pazaak.common.deck import DrawPile
from pazaak.common.side_deck import SideDeck
from pazaak.events import EventBus


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def stacked_pile():
    """
    Build a DrawPile that deals the given main-card values in order.
    """

    def build(*values):
        return DrawPile(cards=[Card(value) for value in reversed(values)])

    return build


@pytest.fixture
def make_side_deck():
    """
    Build a SideDeck from labels such as "+3", "-2" or "±4".
    """
    kinds = {"+": CardKind.PLUS, "-": CardKind.MINUS, "±": CardKind.PLUS_MINUS}

    def build(*labels):
        return SideDeck(tuple(Card(int(label[1:]), kinds[label[0]]) for label in labels))

    return build
