"""
This module contains the Deck class, which represents a deck of cards.

>>> deck = Deck()
>>> deck.size
52
>>> deck.deal()
Card(Suit.SPADES, Rank.KING)
>>> deck.size
51
"""

import random
from typing import List, Optional, Union

from multijack.common.card import Card, Rank, Suit


class DeckEmptyError(IndexError):
    """Raised when dealing from a deck with no cards left."""


class Deck:
    """
    A class representing a deck of cards.
    """

    # Precompute the default deck
    _default_deck = [Card(suit, rank) for suit in Suit for rank in Rank]

    def __init__(
        self,
        cards: Union[List[Card], None] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize a Deck instance.

        :param cards: A list of Card instances to populate the deck (optional).
                      If not provided, a default deck will be constructed.
        :param rng: Random number generator used for shuffling (optional).
        """
        if cards is None:
            self.cards: List[Card] = self.initialize_default_deck()
        else:
            self.cards = cards.copy()
        self._rng = rng or random.Random()

    def initialize_default_deck(self) -> List[Card]:
        """
        Construct a default deck with all possible combinations of suits and ranks.

        :return: A list of Card instances representing the default deck.
        """
        return self._default_deck.copy()

    def shuffle(self):
        """
        Shuffle the cards in the deck.
        """
        self._rng.shuffle(self.cards)
        return self

    def deal(self) -> Card:
        """
        Pop one card from the top of the deck.

        :return: A card instance.
        :raises DeckEmptyError: If the deck has no cards left.
        """
        if not self.cards:
            raise DeckEmptyError("Cannot deal from an empty deck")
        return self.cards.pop()

    @property
    def size(self) -> int:
        """
        Return the number of remaining cards in the deck.
        """
        return len(self.cards)

    def is_empty(self) -> bool:
        """
        Check if the deck is empty.
        """
        return len(self.cards) == 0

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.cards]})"

    def __str__(self) -> str:
        """
        Provide a human-readable representation of the deck.

        >>> str(Deck())
        'Deck of 52 cards'
        """
        return f"Deck of {len(self.cards)} cards"
