"""
Deck collaborator for the blackjack engine.

The engine never owns a deck. It asks a deck service to create one and then
draws a single card per request using the returned deck handle.
"""

import asyncio
import logging
import random
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Optional

from multijack.common.card import Card
from multijack.common.deck import Deck, DeckEmptyError

logger = logging.getLogger("multijack.deck")


class DeckError(Exception):
    """Raised by deck services when a deck cannot be created or dealt from."""


class DeckService(ABC):
    """
    Abstract base class for deck providers.
    """

    @abstractmethod
    async def create_deck(self, shuffle: bool = True) -> str:
        """
        Create a new 52-card deck.

        Args:
            shuffle: Whether the deck should be shuffled

        Returns:
            Handle identifying the deck in later fetch_card calls
        """

    @abstractmethod
    async def fetch_card(self, deck_id: str) -> Card:
        """
        Deal exactly one card from a deck.

        Args:
            deck_id: Handle returned by create_deck

        Returns:
            The dealt card

        Raises:
            DeckError: If the deck is unknown or has no cards left
        """

    async def discard(self, deck_id: str) -> None:
        """
        Release a deck that no game will draw from again.

        Unknown handles are ignored. Services that hold no per-deck state
        need not override this.
        """


class InMemoryDeckService(DeckService):
    """
    Deck service that keeps its decks in process memory.

    Access to the deck table is guarded by a lock so the service can be
    shared between threads as well as tasks.
    """

    def __init__(self, seed: Optional[int] = None):
        self._decks: Dict[str, Deck] = {}
        self._lock = threading.Lock()
        self._rng = random.Random(seed)

    async def create_deck(self, shuffle: bool = True) -> str:
        deck_id = str(uuid.uuid4())
        with self._lock:
            deck = Deck(rng=random.Random(self._rng.random()))
            if shuffle:
                deck.shuffle()
            self._decks[deck_id] = deck
        logger.debug(f"Created deck {deck_id} (shuffled={shuffle})")
        return deck_id

    async def fetch_card(self, deck_id: str) -> Card:
        with self._lock:
            deck = self._decks.get(deck_id)
            if deck is None:
                raise DeckError(f"Deck {deck_id} not found")
            try:
                return deck.deal()
            except DeckEmptyError as exc:
                raise DeckError(f"Deck {deck_id} is exhausted") from exc

    async def discard(self, deck_id: str) -> None:
        with self._lock:
            self._decks.pop(deck_id, None)


async def create_deck_with_timeout(
    service: DeckService, shuffle: bool, timeout: float
) -> str:
    """
    Create a deck, failing with DeckError if the service errors or stalls.
    """
    try:
        return await asyncio.wait_for(service.create_deck(shuffle), timeout)
    except asyncio.TimeoutError as exc:
        raise DeckError(f"Deck creation timed out after {timeout}s") from exc


async def fetch_card_with_timeout(
    service: DeckService, deck_id: str, timeout: float
) -> Card:
    """
    Fetch one card, failing with DeckError if the service errors or stalls.
    """
    try:
        card = await asyncio.wait_for(service.fetch_card(deck_id), timeout)
    except asyncio.TimeoutError as exc:
        raise DeckError(f"Fetching a card from {deck_id} timed out after {timeout}s") from exc
    if not isinstance(card, Card):
        raise DeckError(f"Deck {deck_id} returned {card!r} instead of a card")
    return card
