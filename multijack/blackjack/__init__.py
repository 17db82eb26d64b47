"""
Blackjack rules engine: hands, players, the game state machine and its store.
"""

from multijack.blackjack.action import Action
from multijack.blackjack.constants import BLACKJACK, DEALER_NAME
from multijack.blackjack.errors import (
    BlackjackError,
    DeckUnavailable,
    DuplicateGame,
    InvalidAction,
    InvalidPlayers,
    NotFound,
    OutOfTurn,
    UnknownPlayer,
    UnknownStrategy,
)
from multijack.blackjack.game import Game, GameStatus
from multijack.blackjack.hand import BlackjackHand
from multijack.blackjack.player import Player
from multijack.blackjack.store import GameStore, InMemoryGameStore
from multijack.blackjack.strategy import Strategy

__all__ = [
    "Action",
    "BLACKJACK",
    "DEALER_NAME",
    "BlackjackError",
    "DeckUnavailable",
    "DuplicateGame",
    "InvalidAction",
    "InvalidPlayers",
    "NotFound",
    "OutOfTurn",
    "UnknownPlayer",
    "UnknownStrategy",
    "Game",
    "GameStatus",
    "BlackjackHand",
    "Player",
    "GameStore",
    "InMemoryGameStore",
    "Strategy",
]
