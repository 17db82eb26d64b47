"""
Registration boundary for automated players.
"""

import logging

from multijack.agent.agent import Agent
from multijack.blackjack.strategy import Strategy

logger = logging.getLogger("multijack.api.autoplayer")


class AutoPlayerService:
    """
    Lets callers hand a seat over to the table agent.
    """

    def __init__(self, agent: Agent):
        if agent is None:
            raise ValueError("agent is None")
        self.agent = agent

    async def register_auto_player(
        self, game_id: str, player_name: str, strategy_name: str
    ) -> bool:
        """
        Have the agent play ``player_name`` in ``game_id``.

        Args:
            game_id: Game to play in
            player_name: Seat to play
            strategy_name: "dealer" or "greedy", case-insensitive

        Returns:
            True once the seat is registered

        Raises:
            UnknownStrategy: If the strategy name is not recognised.
            DuplicateGame: If the agent already plays in this game.
        """
        strategy = Strategy.from_name(strategy_name)
        self.agent.register(game_id, player_name, strategy)
        logger.info(
            f"Registered {player_name} in game {game_id} with {strategy.value} strategy"
        )
        return True
