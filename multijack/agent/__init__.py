"""
The table agent: plays automated seats by polling the game service.
"""

from multijack.agent.agent import Agent, AgentEntry
from multijack.agent.client import GameClient, LocalGameClient

__all__ = ["Agent", "AgentEntry", "GameClient", "LocalGameClient"]
