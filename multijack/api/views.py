"""
Caller-specific views of a game.

A view is what a single player is allowed to see: their own hand in full,
the dealer's first card, and nothing of anybody else's cards. Bust flags
stay visible for everyone.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from multijack.blackjack.constants import DEALER_NAME
from multijack.blackjack.game import Game, GameStatus
from multijack.common.card import Card


@dataclass(frozen=True)
class HandView:
    """
    Visible part of one player's hand.

    Attributes:
        cards: Visible cards, in dealt order
        score: Score of the hand, 0 when hidden
        bust: Whether the player is bust
    """

    cards: Tuple[Card, ...] = ()
    score: int = 0
    bust: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cards": [card.to_dict() for card in self.cards],
            "score": self.score,
            "bust": self.bust,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HandView":
        return cls(
            cards=tuple(Card.from_dict(c) for c in data.get("cards", [])),
            score=int(data.get("score", 0)),
            bust=bool(data.get("bust", False)),
        )


@dataclass(frozen=True)
class GameView:
    """
    A game as seen by one caller.

    Attributes:
        game_id: Identifier of the game
        status: Game status
        next_player: Whose turn it is, "" when nobody's
        winner: Winner's name, "" until the game is finished
        hands: Redacted hand of every player, keyed by name
        viewer: Name the view was redacted for, "" for an anonymous caller
    """

    game_id: str
    status: GameStatus
    next_player: str = ""
    winner: str = ""
    hands: Dict[str, HandView] = field(default_factory=dict)
    viewer: str = ""

    @classmethod
    def for_player(cls, game: Game, viewer: Optional[str] = "") -> "GameView":
        """Build the view of ``game`` that ``viewer`` is allowed to see."""
        viewer = viewer or ""
        hands = {}
        for name, player in game.players.items():
            cards = tuple(player.hand.cards)
            if name == viewer:
                hands[name] = HandView(cards, player.score, player.bust)
            elif name == DEALER_NAME:
                hands[name] = HandView(cards[:1], 0, player.bust)
            else:
                hands[name] = HandView((), 0, player.bust)
        return cls(
            game_id=game.id,
            status=game.status,
            next_player=game.next_player,
            winner=game.winner,
            hands=hands,
            viewer=viewer,
        )

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    def hand(self, player_name: str) -> Optional[HandView]:
        return self.hands.get(player_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "status": self.status.value,
            "next_player": self.next_player,
            "winner": self.winner,
            "viewer": self.viewer,
            "hands": {name: hand.to_dict() for name, hand in self.hands.items()},
        }

    def to_json(self) -> str:
        """Canonical JSON encoding; equal views encode to identical strings."""
        return json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameView":
        return cls(
            game_id=data["game_id"],
            status=GameStatus(data["status"]),
            next_player=data.get("next_player", ""),
            winner=data.get("winner", ""),
            hands={
                name: HandView.from_dict(hand)
                for name, hand in data.get("hands", {}).items()
            },
            viewer=data.get("viewer", ""),
        )
