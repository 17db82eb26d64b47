"""
Automated play strategies.

The set of strategies is closed: each one is a member of the ``Strategy``
enum and its decision rule lives in ``Strategy.decide``. Adding a strategy
means adding a member and a branch there.
"""

from enum import Enum
from typing import Union

from multijack.blackjack.action import Action
from multijack.blackjack.constants import DEALER_STAND_ON
from multijack.blackjack.errors import UnknownStrategy


class Strategy(Enum):
    """
    Decision rules for automated players.

    DEALER: hit while the score is below 17, otherwise stand.
    GREEDY: always hit.
    """

    DEALER = "dealer"
    GREEDY = "greedy"

    @classmethod
    def from_name(cls, name: Union["Strategy", str]) -> "Strategy":
        """
        Look up a strategy by name, ignoring case.

        >>> Strategy.from_name("Greedy")
        <Strategy.GREEDY: 'greedy'>

        Raises:
            UnknownStrategy: If no strategy has that name.
        """
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            try:
                return cls(name.strip().lower())
            except ValueError:
                pass
        raise UnknownStrategy(name)

    def decide(self, hand) -> Action:
        """
        Pick the next action for a hand.

        Args:
            hand: Anything with a ``score`` attribute, typically the
                player's own HandView.
        """
        match self:
            case Strategy.DEALER:
                return Action.HIT if hand.score < DEALER_STAND_ON else Action.STAND
            case Strategy.GREEDY:
                return Action.HIT
