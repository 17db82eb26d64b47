"""
The blackjack game state machine.

A game is created with the names of the human seats. The dealer always sits
first in the turn order. ``start`` deals two cards to everyone and hands the
turn to the dealer; after that the game only changes through ``play_turn``
until somebody wins.

Turn rules, applied after every hit or stand:

1. A player whose score is exactly 21 wins outright.
2. A player over 21 is flagged bust. If only one player is left standing,
   that player wins.
3. Otherwise the turn passes to the next player in order who is not bust,
   wrapping around to the dealer.

Busted players stay in the turn order and are only skipped, so the order
never changes once the game is created.
"""

import logging
import uuid
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from multijack.blackjack.action import Action
from multijack.blackjack.constants import BLACKJACK, DEALER_NAME, INITIAL_CARDS
from multijack.blackjack.errors import (
    GameAlreadyStarted,
    InvalidPlayers,
    OutOfTurn,
    UnknownPlayer,
)
from multijack.blackjack.hand import DEFAULT_DECK_TIMEOUT, BlackjackHand
from multijack.blackjack.player import Player
from multijack.deck.service import DeckService
from multijack.events import EngineEventType, EventBus

logger = logging.getLogger("multijack.blackjack.game")


class GameStatus(Enum):
    """Lifecycle of a game. FINISHED is terminal."""

    NOT_STARTED = "not_started"
    AWAITING_PLAYER = "awaiting_player"
    FINISHED = "finished"


def validate_player_names(player_names: Iterable[str]) -> List[str]:
    """
    Check the human seat names for a new game.

    Raises:
        InvalidPlayers: If there are no names, a name is blank or repeated,
            or a name collides with the dealer.
    """
    if isinstance(player_names, str):
        raise InvalidPlayers(f"Expected a list of player names, got {player_names!r}")
    names = list(player_names or [])
    if not names:
        raise InvalidPlayers("No player names provided")
    seen = set()
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise InvalidPlayers(f"Invalid player name: {name!r}")
        if name == DEALER_NAME:
            raise InvalidPlayers(f"{DEALER_NAME!r} is reserved for the dealer")
        if name in seen:
            raise InvalidPlayers(f"Duplicate player name: {name!r}")
        seen.add(name)
    return names


class Game:
    """
    State of a single blackjack game.

    Attributes:
        id: Unique identifier for the game
        status: Current GameStatus
        players: Mapping of player name to Player, dealer included
        next_player: Name of the player whose turn it is, or "" when nobody's
        winner: Name of the winner, set only once the game is finished
        deck_id: Handle of the deck every hand in this game draws from
    """

    def __init__(
        self,
        player_names: Iterable[str],
        deck_id: str,
        deck_service: DeckService,
        game_id: Optional[str] = None,
        deck_timeout: float = DEFAULT_DECK_TIMEOUT,
    ):
        names = validate_player_names(player_names)
        self.id = game_id or str(uuid.uuid4())
        self.deck_id = deck_id
        self.deck_service = deck_service
        self.deck_timeout = deck_timeout
        self.status = GameStatus.NOT_STARTED
        self.players: Dict[str, Player] = {}
        self._turn_order: List[str] = [DEALER_NAME] + names
        self.next_player = ""
        self.winner = ""
        self.event_bus = EventBus.get_instance()

    @property
    def turn_order(self) -> Tuple[str, ...]:
        return tuple(self._turn_order)

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    def player(self, player_name: str) -> Player:
        try:
            return self.players[player_name]
        except KeyError:
            raise UnknownPlayer(player_name) from None

    def remaining_players(self) -> List[str]:
        """Names of players who are not bust, in turn order."""
        return [
            name
            for name in self._turn_order
            if name in self.players and not self.players[name].bust
        ]

    async def start(self) -> None:
        """
        Deal the opening hands and hand the turn to the dealer.

        Cards go round the table one at a time, dealer first, until everyone
        holds two.

        Raises:
            GameAlreadyStarted: If the game has already been dealt.
            DeckUnavailable: If the deck fails while dealing. The game is
                left not started, with no players seated.
        """
        if self.status != GameStatus.NOT_STARTED:
            raise GameAlreadyStarted(self.id)

        seats = {
            name: BlackjackHand(self.deck_id, self.deck_service, timeout=self.deck_timeout)
            for name in self._turn_order
        }
        for _ in range(INITIAL_CARDS):
            for name in self._turn_order:
                await seats[name].pull_card()

        self.players = {name: Player(name, hand) for name, hand in seats.items()}
        self.status = GameStatus.AWAITING_PLAYER
        self.next_player = self._turn_order[0]

        for name in self._turn_order:
            self.event_bus.emit(
                EngineEventType.CARD_DEALT,
                {
                    "game_id": self.id,
                    "player_name": name,
                    "cards": len(seats[name]),
                },
            )
        self.event_bus.emit(
            EngineEventType.GAME_STARTED,
            {
                "game_id": self.id,
                "turn_order": list(self._turn_order),
                "next_player": self.next_player,
            },
        )
        logger.info(f"Game {self.id} started with {', '.join(self._turn_order)}")

    async def play_turn(self, action: Union[Action, str], player_name: str) -> None:
        """
        Play one turn for a player.

        A name that is not seated is rejected as unknown before the turn is
        checked, since it can never be the player the game is waiting for.

        Args:
            action: Action.HIT or Action.STAND (or their names)
            player_name: Name of the player taking the turn

        Raises:
            OutOfTurn: If the game is not waiting for a player, or it is
                waiting for someone else.
            UnknownPlayer: If nobody by that name is seated.
            InvalidAction: If the action is neither hit nor stand.
            DeckUnavailable: If a hit could not draw a card. Nothing changes.
        """
        if self.status != GameStatus.AWAITING_PLAYER:
            raise OutOfTurn(player_name)
        player = self.player(player_name)
        if self.next_player != player_name:
            raise OutOfTurn(player_name, self.next_player)
        action = Action.parse(action)

        card = None
        if action == Action.HIT:
            card = await player.pull_card()
        player.recompute_score()

        self.event_bus.emit(
            EngineEventType.PLAYER_ACTION,
            {
                "game_id": self.id,
                "player_name": player_name,
                "action": action.value,
                "card": card.to_dict() if card else None,
                "score": player.score,
            },
        )
        self._resolve(player)

    def _resolve(self, player: Player) -> None:
        if player.score == BLACKJACK:
            self._finish(player.name)
            return

        if player.score > BLACKJACK:
            player.bust = True
            self.event_bus.emit(
                EngineEventType.HAND_BUSTED,
                {"game_id": self.id, "player_name": player.name, "score": player.score},
            )
            remaining = self.remaining_players()
            if len(remaining) == 1:
                self._finish(remaining[0])
                return

        self.next_player = self._next_after(player.name)

    def _next_after(self, player_name: str) -> str:
        """
        Next player in order who is not bust, wrapping around.

        Comes back to ``player_name`` itself when everyone else is bust.
        """
        start = self._turn_order.index(player_name)
        count = len(self._turn_order)
        for step in range(1, count + 1):
            candidate = self._turn_order[(start + step) % count]
            if not self.players[candidate].bust:
                return candidate
        return ""

    def _finish(self, winner: str) -> None:
        self.status = GameStatus.FINISHED
        self.winner = winner
        self.next_player = ""
        self.event_bus.emit(
            EngineEventType.GAME_ENDED, {"game_id": self.id, "winner": winner}
        )
        logger.info(f"Game {self.id} finished, winner: {winner}")

    def clone(self) -> "Game":
        """
        Independent copy of the game.

        Hands are copied, the deck handle and deck service are shared.
        """
        other = Game.__new__(Game)
        other.id = self.id
        other.deck_id = self.deck_id
        other.deck_service = self.deck_service
        other.deck_timeout = self.deck_timeout
        other.status = self.status
        other.players = {name: p.clone() for name, p in self.players.items()}
        other._turn_order = list(self._turn_order)
        other.next_player = self.next_player
        other.winner = self.winner
        other.event_bus = self.event_bus
        return other

    def __repr__(self) -> str:
        return (
            f"Game(id={self.id!r}, status={self.status.name}, "
            f"next_player={self.next_player!r}, winner={self.winner!r})"
        )
