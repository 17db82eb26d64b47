"""
Autonomous table agent.

The agent keeps a registry of seats it plays, one per game, each with a
strategy. On every tick it fetches each game through the game service and,
when it is that seat's turn, asks the strategy for an action and submits it.

Each entry is handled on its own: an error in one game is logged and never
affects another. Entries are dropped when their game finishes, when the
player's hand cannot be found, or after ``max_fetch_failures`` fetches in a
row have failed. A failed submission only gets logged; the entry tries
again next tick.

Registration can come from any task or thread. The registry is guarded by a
lock and ticks work on a snapshot of it.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from multijack.agent.client import GameClient
from multijack.blackjack.errors import BlackjackError, DuplicateGame
from multijack.blackjack.strategy import Strategy
from multijack.events import EngineEventType, EventBus

logger = logging.getLogger("multijack.agent")

# Errors that count as a failed call to the game service
CALL_ERRORS = (BlackjackError, asyncio.TimeoutError, OSError)


@dataclass
class AgentEntry:
    """
    A seat played by the agent.

    Attributes:
        game_id: Game the seat belongs to
        player_name: Name of the seat
        strategy: Decision rule; None means the entry is dropped on the next tick
        fetch_failures: Consecutive failed fetches
        turns_played: Turns successfully submitted
    """

    game_id: str
    player_name: str
    strategy: Optional[Strategy]
    fetch_failures: int = 0
    turns_played: int = 0


class Agent:
    """
    Polls registered games and plays automated seats.

    Attributes:
        client: Game service client
        interval: Seconds between ticks
        max_fetch_failures: Consecutive fetch failures before an entry is dropped
        request_timeout: Upper bound, in seconds, on every call to the game service
    """

    def __init__(
        self,
        client: GameClient,
        interval: float = 5.0,
        max_fetch_failures: int = 3,
        request_timeout: float = 2.0,
    ):
        if client is None:
            raise ValueError("game client is None")
        if max_fetch_failures < 1:
            raise ValueError("max_fetch_failures must be at least 1")
        self.client = client
        self.interval = interval
        self.max_fetch_failures = max_fetch_failures
        self.request_timeout = request_timeout
        self.event_bus = EventBus.get_instance()

        self._entries: Dict[str, AgentEntry] = {}
        self._registry_lock = threading.Lock()
        self._tick_lock: Optional[asyncio.Lock] = None
        self._stopping: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, client: GameClient, config: Dict[str, Any]) -> "Agent":
        return cls(
            client,
            interval=config["agent"]["interval"],
            max_fetch_failures=config["agent"]["max_fetch_failures"],
            request_timeout=config["game"]["timeout"],
        )

    # Registry

    def register(
        self, game_id: str, player_name: str, strategy: Optional[Strategy]
    ) -> AgentEntry:
        """
        Start playing ``player_name`` in ``game_id``.

        Raises:
            DuplicateGame: If the agent already has an entry for this game.
        """
        entry = AgentEntry(game_id, player_name, strategy)
        with self._registry_lock:
            if game_id in self._entries:
                raise DuplicateGame(game_id)
            self._entries[game_id] = entry
        self.event_bus.emit(
            EngineEventType.AGENT_ENTRY_ADDED,
            {
                "game_id": game_id,
                "player_name": player_name,
                "strategy": strategy.value if strategy else None,
            },
        )
        return replace(entry)

    def deregister(self, game_id: str, reason: str = "removed") -> bool:
        """Stop playing in a game. Returns False if there was no entry."""
        with self._registry_lock:
            entry = self._entries.pop(game_id, None)
        if entry is None:
            return False
        self._entry_removed(entry, reason)
        return True

    def _drop(self, entry: AgentEntry, reason: str) -> None:
        # Only remove the exact entry this tick worked on
        with self._registry_lock:
            if self._entries.get(entry.game_id) is not entry:
                return
            del self._entries[entry.game_id]
        self._entry_removed(entry, reason)

    def _entry_removed(self, entry: AgentEntry, reason: str) -> None:
        logger.info(
            f"Removed {entry.player_name} in game {entry.game_id} from loop: {reason}"
        )
        self.event_bus.emit(
            EngineEventType.AGENT_ENTRY_REMOVED,
            {"game_id": entry.game_id, "player_name": entry.player_name, "reason": reason},
        )

    def entries(self) -> List[AgentEntry]:
        """Copies of the current entries."""
        with self._registry_lock:
            return [replace(entry) for entry in self._entries.values()]

    def get_entry(self, game_id: str) -> Optional[AgentEntry]:
        with self._registry_lock:
            entry = self._entries.get(game_id)
            return replace(entry) if entry else None

    def __contains__(self, game_id: str) -> bool:
        with self._registry_lock:
            return game_id in self._entries

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)

    # Polling

    async def tick(self) -> None:
        """Visit every registered entry once."""
        if self._tick_lock is None:
            self._tick_lock = asyncio.Lock()
        async with self._tick_lock:
            with self._registry_lock:
                entries = list(self._entries.values())
            results = await asyncio.gather(
                *(self._play_entry(entry) for entry in entries),
                return_exceptions=True,
            )
        for entry, result in zip(entries, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Unexpected error playing {entry.player_name} in game {entry.game_id}: {result}",
                    exc_info=result,
                )

    async def _play_entry(self, entry: AgentEntry) -> None:
        if entry.strategy is None:
            self._drop(entry, "no strategy")
            return

        try:
            view = await asyncio.wait_for(
                self.client.get_game(entry.game_id, entry.player_name),
                self.request_timeout,
            )
        except CALL_ERRORS as exc:
            entry.fetch_failures += 1
            logger.error(
                f"Failed to get game {entry.game_id} for {entry.player_name} "
                f"({entry.fetch_failures}/{self.max_fetch_failures}): {exc!r}"
            )
            if entry.fetch_failures >= self.max_fetch_failures:
                self._drop(entry, "game unreachable")
            return
        entry.fetch_failures = 0

        if view.is_finished:
            self._drop(entry, "game is done")
            return

        if view.next_player != entry.player_name:
            logger.debug(f"Not {entry.player_name}'s turn in game {entry.game_id}")
            return

        hand = view.hand(entry.player_name)
        if hand is None:
            logger.error(f"No hand for {entry.player_name} in game {entry.game_id}")
            self._drop(entry, "player hand not found")
            return

        action = entry.strategy.decide(hand)
        self.event_bus.emit(
            EngineEventType.STRATEGY_DECISION,
            {
                "game_id": entry.game_id,
                "player_name": entry.player_name,
                "strategy": entry.strategy.value,
                "score": hand.score,
                "action": action.value,
            },
        )

        try:
            result = await asyncio.wait_for(
                self.client.play_turn(entry.game_id, entry.player_name, action),
                self.request_timeout,
            )
        except CALL_ERRORS as exc:
            logger.error(
                f"Failed to play turn for {entry.player_name} in game {entry.game_id}: {exc!r}"
            )
            return

        entry.turns_played += 1
        logger.info(
            f"{entry.player_name} played {action.value} in game {entry.game_id} "
            f"(status={result.status.value}, next={result.next_player or '-'})"
        )

    # Lifecycle

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking every ``interval`` seconds on the running event loop."""
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run())
        logger.info(f"Agent started, ticking every {self.interval}s")

    async def stop(self) -> None:
        """Stop the loop and wait for an in-flight tick to finish."""
        if not self.running:
            return
        self._stopping.set()
        await self._task
        self._task = None
        logger.info("Agent stopped")

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), self.interval)
            except asyncio.TimeoutError:
                pass
            if self._stopping.is_set():
                break
            try:
                await self.tick()
            except Exception as exc:
                logger.error(f"Agent tick failed: {exc}", exc_info=True)
