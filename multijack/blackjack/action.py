"""Defines the Action enum for the possible actions a player can take on their turn."""
from enum import Enum
from typing import Union

from multijack.blackjack.errors import InvalidAction


class Action(Enum):
    """Enum for the possible actions a player can take in a game of blackjack."""

    HIT = "hit"
    STAND = "stand"

    @classmethod
    def parse(cls, value: Union["Action", str]) -> "Action":
        """
        Coerce an action or its name into an Action.

        Raises:
            InvalidAction: If the value is not a recognised action.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidAction(value)
