"""
Game storage.

Stores hand out copies: a game fetched with ``get`` can be changed freely and
nothing is visible to other callers until it is ``put`` back. Two callers
that both get, change and put the same game race, and the later put wins.
``update`` closes that gap by holding a per-game lock across the whole
read-modify-write.
"""

import asyncio
import inspect
import logging
import threading
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, List, Union

from multijack.blackjack.errors import NotFound
from multijack.blackjack.game import Game

logger = logging.getLogger("multijack.blackjack.store")

Mutator = Callable[[Game], Union[None, Awaitable[None]]]


class GameStore(ABC):
    """
    Keyed registry of games.
    """

    @abstractmethod
    async def get(self, game_id: str) -> Game:
        """
        Fetch a game.

        Raises:
            NotFound: If no game is stored under game_id.
        """

    @abstractmethod
    async def put(self, game_id: str, game: Game) -> None:
        """Store a game, replacing any previous version."""

    @abstractmethod
    async def update(self, game_id: str, mutate: Mutator) -> Game:
        """
        Atomically fetch, change and store a game.

        ``mutate`` receives the game and may be a coroutine function. If it
        raises, nothing is stored and the error propagates.

        Returns:
            The game as stored after the change

        Raises:
            NotFound: If no game is stored under game_id.
        """

    @abstractmethod
    async def delete(self, game_id: str) -> None:
        """Remove a game. Unknown ids are ignored."""


class InMemoryGameStore(GameStore):
    """
    In-process game store.

    The table itself is guarded by a short-lived lock, so reads and writes
    on different games never wait on each other beyond a dictionary
    operation. Each game also gets its own asyncio lock, used only by
    ``update``.
    """

    def __init__(self):
        self._state: Dict[str, Game] = {}
        self._state_lock = threading.RLock()
        self._update_locks: Dict[str, asyncio.Lock] = {}

    async def get(self, game_id: str) -> Game:
        with self._state_lock:
            game = self._state.get(game_id)
            if game is None:
                raise NotFound(game_id)
            return game.clone()

    async def put(self, game_id: str, game: Game) -> None:
        snapshot = game.clone()
        with self._state_lock:
            self._state[game_id] = snapshot

    async def update(self, game_id: str, mutate: Mutator) -> Game:
        async with self._lock_for(game_id):
            game = await self.get(game_id)
            result = mutate(game)
            if inspect.isawaitable(result):
                await result
            await self.put(game_id, game)
            return game

    async def delete(self, game_id: str) -> None:
        with self._state_lock:
            self._state.pop(game_id, None)
            self._update_locks.pop(game_id, None)

    def _lock_for(self, game_id: str) -> asyncio.Lock:
        with self._state_lock:
            lock = self._update_locks.get(game_id)
            if lock is None:
                lock = self._update_locks[game_id] = asyncio.Lock()
            return lock

    def game_ids(self) -> List[str]:
        with self._state_lock:
            return list(self._state)

    def __contains__(self, game_id: str) -> bool:
        with self._state_lock:
            return game_id in self._state

    def __len__(self) -> int:
        with self._state_lock:
            return len(self._state)
