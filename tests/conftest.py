"""
Pytest configuration for the multijack test suite.

Provides a scripted deck service so deals are deterministic, and resets the
event bus singleton around every test.
"""

import asyncio
import itertools

import pytest

from multijack.common.card import Card, Rank, Suit
from multijack.deck.service import DeckError, DeckService
from multijack.events import EventBus


@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


def cards_of(*values):
    """Cards with the given face values, suits cycling so none repeat."""
    suits = itertools.cycle(Suit)
    return [Card(next(suits), Rank(value)) for value in values]


class ScriptedDeckService(DeckService):
    """
    Deck service that deals a fixed sequence of cards, front first.

    Set ``fail_fetch`` or ``fail_create`` to make calls raise ``error``, or
    ``delay`` to make them stall. Discarded handles are kept in ``discarded``.
    """

    def __init__(self, values=()):
        self.cards = cards_of(*values)
        self.fail_fetch = False
        self.fail_create = False
        self.error = DeckError("deck service unavailable")
        self.delay = 0.0
        self.created = 0
        self.fetched = 0
        self.discarded = []

    def extend(self, *values):
        self.cards.extend(cards_of(*values))

    async def create_deck(self, shuffle: bool = True) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_create:
            raise self.error
        self.created += 1
        return f"deck-{self.created}"

    async def fetch_card(self, deck_id: str) -> Card:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_fetch:
            raise self.error
        if not self.cards:
            raise DeckError(f"Deck {deck_id} is exhausted")
        self.fetched += 1
        return self.cards.pop(0)

    async def discard(self, deck_id: str) -> None:
        self.discarded.append(deck_id)


@pytest.fixture
def make_cards():
    """Factory for cards with given face values."""
    return cards_of


@pytest.fixture
def scripted_deck():
    """Factory for scripted deck services."""
    return ScriptedDeckService
