"""
Blackjack service API.

BlackjackService is the boundary outside callers (and the table agent) use to
create games, read them and play turns. It translates between the game
engine and caller-facing GameView objects and applies hidden-information
rules on the way out.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional, Protocol, Union

from multijack.api.views import GameView
from multijack.blackjack.action import Action
from multijack.blackjack.constants import DEALER_NAME
from multijack.blackjack.errors import BlackjackError, DeckUnavailable
from multijack.blackjack.game import Game, validate_player_names
from multijack.blackjack.store import GameStore
from multijack.blackjack.strategy import Strategy
from multijack.config import DEFAULT_CONFIG, merge_config, validate_config
from multijack.deck.service import DeckService, create_deck_with_timeout
from multijack.events import EngineEventType, EventBus

logger = logging.getLogger("multijack.api.blackjack")


class AutoPlayerRegistrar(Protocol):
    async def register_auto_player(
        self, game_id: str, player_name: str, strategy_name: str
    ) -> bool: ...


class BlackjackService:
    """
    Remote game boundary.

    Example:
        ```python
        service = BlackjackService(InMemoryGameStore(), InMemoryDeckService())
        view = await service.new_game(["Alice", "Bob"])
        view = await service.get_game(view.game_id, "Alice")
        view = await service.play_turn(view.game_id, "Alice", "hit")
        ```

    Attributes:
        store: Where games live between calls
        deck_service: Deck collaborator used for every game
        registrar: Optional auto-player registration boundary; the dealer
            of every new game is registered with it
        config: Effective configuration
    """

    def __init__(
        self,
        store: GameStore,
        deck_service: DeckService,
        registrar: Optional[AutoPlayerRegistrar] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        if store is None:
            raise ValueError("store is None")
        if deck_service is None:
            raise ValueError("deck service is None")
        self.store = store
        self.deck_service = deck_service
        self.registrar = registrar
        self.config = merge_config(DEFAULT_CONFIG, config or {})
        validate_config(self.config)
        self.event_bus = EventBus.get_instance()

    async def new_game(self, player_names: Iterable[str]) -> GameView:
        """
        Create, deal and store a new game.

        The returned view is anonymous: only the dealer's first card shows.

        Raises:
            InvalidPlayers: If the player list is empty or invalid.
            DeckUnavailable: If the deck could not be created or dealt from.
                No game is stored. A deck that was created is discarded.
        """
        names = validate_player_names(player_names)
        deck_config = self.config["deck"]

        try:
            deck_id = await create_deck_with_timeout(
                self.deck_service, deck_config["shuffle"], deck_config["timeout"]
            )
        except Exception as exc:
            raise DeckUnavailable(f"Failed to create deck: {exc}") from exc

        game = Game(names, deck_id, self.deck_service, deck_timeout=deck_config["timeout"])
        try:
            await game.start()
        except DeckUnavailable:
            await self._discard_deck(deck_id)
            raise
        await self.store.put(game.id, game)

        self.event_bus.emit(
            EngineEventType.GAME_CREATED,
            {"game_id": game.id, "players": list(game.turn_order)},
        )
        logger.info(f"Created game {game.id} for {', '.join(names)}")

        if self.registrar is not None and self.config["game"]["register_dealer"]:
            await self._register_dealer(game.id)

        return GameView.for_player(game, "")

    async def _register_dealer(self, game_id: str) -> None:
        try:
            await asyncio.wait_for(
                self.registrar.register_auto_player(
                    game_id, DEALER_NAME, Strategy.DEALER.value
                ),
                self.config["game"]["timeout"],
            )
        except (BlackjackError, asyncio.TimeoutError) as exc:
            logger.warning(f"Could not register dealer for game {game_id}: {exc!r}")

    async def _discard_deck(self, deck_id: str) -> None:
        try:
            await asyncio.wait_for(
                self.deck_service.discard(deck_id), self.config["deck"]["timeout"]
            )
        except Exception as exc:
            logger.warning(f"Could not discard deck {deck_id}: {exc!r}")

    async def get_game(self, game_id: str, player_name: str = "") -> GameView:
        """
        Fetch a game as seen by ``player_name``.

        Raises:
            NotFound: If the game does not exist.
        """
        game = await self.store.get(game_id)
        return GameView.for_player(game, player_name)

    async def play_turn(
        self, game_id: str, player_name: str, action: Union[Action, str]
    ) -> GameView:
        """
        Play a turn and return the game as seen by the acting player.

        The fetch, the turn and the write-back happen under the store's
        per-game lock, so concurrent turns on one game never interleave.

        Raises:
            NotFound, OutOfTurn, UnknownPlayer, InvalidAction, DeckUnavailable
        """

        async def turn(game: Game) -> None:
            await game.play_turn(action, player_name)

        game = await self.store.update(game_id, turn)
        logger.debug(f"{player_name} played {action} in game {game_id}")
        if game.is_finished:
            await self._discard_deck(game.deck_id)
        return GameView.for_player(game, player_name)
