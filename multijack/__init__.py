"""
multijack: a multiplayer blackjack rules engine with an autonomous table agent.
"""

__version__ = "0.1.0"
