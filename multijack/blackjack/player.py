"""
A seat at the table: one hand plus the score derived from it.
"""

from multijack.blackjack.constants import BLACKJACK
from multijack.blackjack.hand import BlackjackHand
from multijack.common.card import Card


class Player:
    """
    A player in the game.

    ``score`` and ``bust`` are derived from the hand and are recomputed by
    every method that changes it, so they are never stale.
    """

    def __init__(self, name: str, hand: BlackjackHand):
        self.name = name
        self.hand = hand
        self.score = 0
        self.bust = False
        self.recompute_score()

    async def pull_card(self) -> Card:
        """Draw a card into the hand and refresh the score."""
        card = await self.hand.pull_card()
        self.recompute_score()
        return card

    def recompute_score(self) -> int:
        self.score = self.hand.score()
        self.bust = self.score > BLACKJACK
        return self.score

    @property
    def has_blackjack(self) -> bool:
        return self.score == BLACKJACK

    def clone(self) -> "Player":
        return Player(self.name, self.hand.clone())

    def __repr__(self) -> str:
        return f"Player({self.name!r}, score={self.score}, bust={self.bust})"
