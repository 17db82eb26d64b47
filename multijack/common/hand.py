"""
This module contains classes to represent a hand of cards in a card game.

Classes:

AbstractHand: An abstract base class for an append-only hand of cards.
Hand: A concrete implementation of a hand of cards.
"""
from abc import ABC
from typing import List

from multijack.common.card import Card


class AbstractHand(ABC):
    """
    An abstract base class for a hand of cards.

    Cards are kept in the order they were dealt. Hands only ever grow;
    there is no way to give a card back.
    """

    def __init__(self, cards: List[Card] = None):
        self._cards = list(cards) if cards else []

    @property
    def cards(self) -> List[Card]:
        """Returns a copy of the cards in the hand, in dealt order."""
        return list(self._cards)

    def add_card(self, card: Card) -> None:
        """
        Adds a card to the hand.

        Args:
            card: The card to add.
        """
        if not isinstance(card, Card):
            raise TypeError(f"Expected a Card, got {type(card).__name__}")
        self._cards.append(card)

    def __len__(self) -> int:
        return len(self._cards)


class Hand(AbstractHand):
    """
    A concrete implementation of a hand of cards.
    """

    def __repr__(self) -> str:
        return f"Hand({self._cards!r})"

    def __str__(self) -> str:
        return ", ".join(str(card) for card in self._cards)
