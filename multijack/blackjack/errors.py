"""
Error taxonomy for the blackjack engine.

Every error is a local, recoverable condition reported to the caller.
"""

from typing import Any, Optional


class BlackjackError(Exception):
    """Base class for all blackjack engine errors."""


class OutOfTurn(BlackjackError):
    """A turn was submitted while the game is not waiting on that player."""

    def __init__(self, player_name: str, next_player: Optional[str] = None):
        self.player_name = player_name
        self.next_player = next_player
        if next_player:
            message = f"It is not {player_name}'s turn (waiting on {next_player})"
        else:
            message = f"It is not {player_name}'s turn (game is not waiting for a player)"
        super().__init__(message)


class UnknownPlayer(BlackjackError):
    """The named player is not seated in the game."""

    def __init__(self, player_name: str):
        self.player_name = player_name
        super().__init__(f"Player {player_name!r} not found")


class InvalidAction(BlackjackError):
    """The requested action is not one of hit or stand."""

    def __init__(self, action: Any):
        self.action = action
        super().__init__(f"Unknown action: {action!r}")


class InvalidPlayers(BlackjackError):
    """The player list for a new game is empty, repeated or uses a reserved name."""


class DeckUnavailable(BlackjackError):
    """The deck collaborator failed or timed out."""


class NotFound(BlackjackError):
    """No game is stored under the given identifier."""

    def __init__(self, game_id: str):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


class DuplicateGame(BlackjackError):
    """The agent already drives a player in this game."""

    def __init__(self, game_id: str):
        self.game_id = game_id
        super().__init__(f"Game {game_id} already exists")


class UnknownStrategy(BlackjackError):
    """The strategy name does not match any known strategy."""

    def __init__(self, strategy_name: Any):
        self.strategy_name = strategy_name
        super().__init__(f"Unknown strategy: {strategy_name!r}")


class GameAlreadyStarted(BlackjackError):
    """start() was called on a game that has already been dealt."""

    def __init__(self, game_id: str):
        self.game_id = game_id
        super().__init__(f"Game {game_id} has already started")
