"""
Deck-backed blackjack hand.
"""

import logging
from typing import List, Optional

from multijack.blackjack.constants import ACE_HIGH, ACE_LOW, BLACKJACK, blackjack_value
from multijack.blackjack.errors import DeckUnavailable
from multijack.common.card import Card, Rank
from multijack.common.hand import Hand
from multijack.deck.service import DeckService, fetch_card_with_timeout

logger = logging.getLogger("multijack.blackjack.hand")

DEFAULT_DECK_TIMEOUT = 2.0


def score_cards(cards: List[Card]) -> int:
    """
    Score cards with greedy, left-to-right ace resolution.

    Face cards count 10. Each ace counts 11 unless that would take the
    running total past 21, in which case it counts 1. An ace already
    counted high is never revisited, so [A, 5, 10] scores 26, not 16.

    >>> from multijack.common.card import Suit
    >>> score_cards([Card(Suit.HEARTS, Rank.ACE), Card(Suit.CLUBS, Rank.ACE), Card(Suit.SPADES, Rank.NINE)])
    21
    """
    total = 0
    for card in cards:
        if card.rank == Rank.ACE:
            total += ACE_HIGH if total + ACE_HIGH <= BLACKJACK else ACE_LOW
        else:
            total += blackjack_value(card.rank)
    return total


class BlackjackHand(Hand):
    """
    A hand that draws its cards one at a time from a remote deck.

    Attributes:
        deck_id: Handle of the deck this hand draws from
        deck_service: Deck collaborator that deals the cards
        timeout: Upper bound, in seconds, on a single card request
    """

    def __init__(
        self,
        deck_id: str,
        deck_service: DeckService,
        cards: Optional[List[Card]] = None,
        timeout: float = DEFAULT_DECK_TIMEOUT,
    ):
        if not deck_id:
            raise ValueError("deck_id is empty")
        if deck_service is None:
            raise ValueError("deck service is None")
        super().__init__(cards)
        self.deck_id = deck_id
        self.deck_service = deck_service
        self.timeout = timeout

    async def pull_card(self) -> Card:
        """
        Draw one card from the deck and append it to the hand.

        Returns:
            The card that was drawn

        Raises:
            DeckUnavailable: If the deck service fails or times out. The hand
                is left untouched.
        """
        try:
            card = await fetch_card_with_timeout(
                self.deck_service, self.deck_id, self.timeout
            )
        except Exception as exc:
            logger.warning(f"Failed to draw from deck {self.deck_id}: {exc}")
            raise DeckUnavailable(f"Failed to fetch card: {exc}") from exc
        self.add_card(card)
        return card

    def score(self) -> int:
        """Blackjack score of the hand."""
        return score_cards(self._cards)

    def clone(self) -> "BlackjackHand":
        """Copy of the hand sharing the same deck handle and service."""
        return BlackjackHand(
            self.deck_id, self.deck_service, cards=self._cards, timeout=self.timeout
        )
