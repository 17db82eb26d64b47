"""
Service boundary for the multijack engine.
"""

from multijack.api.views import GameView, HandView
from multijack.api.blackjack import BlackjackService
from multijack.api.autoplayer import AutoPlayerService

__all__ = ["GameView", "HandView", "BlackjackService", "AutoPlayerService"]
