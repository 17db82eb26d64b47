from multijack.deck.service import DeckError, DeckService, InMemoryDeckService

__all__ = ["DeckError", "DeckService", "InMemoryDeckService"]
