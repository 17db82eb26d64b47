"""
Clients the agent uses to reach the game service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

from multijack.blackjack.action import Action

if TYPE_CHECKING:
    from multijack.api.blackjack import BlackjackService
    from multijack.api.views import GameView


class GameClient(ABC):
    """
    The calls the agent makes against the remote game boundary.
    """

    @abstractmethod
    async def get_game(self, game_id: str, player_name: str) -> GameView:
        """Fetch the game as seen by player_name."""

    @abstractmethod
    async def play_turn(
        self, game_id: str, player_name: str, action: Union[Action, str]
    ) -> GameView:
        """Submit a turn for player_name."""


class LocalGameClient(GameClient):
    """
    Client for a BlackjackService running in the same process.

    Goes through exactly the same calls a remote caller would, so the agent
    sees the same redacted views and the same errors.
    """

    def __init__(self, service: BlackjackService):
        self.service = service

    async def get_game(self, game_id: str, player_name: str) -> GameView:
        return await self.service.get_game(game_id, player_name)

    async def play_turn(
        self, game_id: str, player_name: str, action: Union[Action, str]
    ) -> GameView:
        return await self.service.play_turn(game_id, player_name, action)
