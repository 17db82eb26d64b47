"""
Engine event bus.

The engine and the table agent publish what happens at the table as named
events with a dict payload. Subscribers either listen for one event type or
for everything, which is how the JSON-lines recorder sees each event.
"""

import logging
import threading
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple, Union

logger = logging.getLogger("multijack.events")

EventType = Union[str, Enum]
Handler = Callable[[Dict[str, Any]], None]
AnyHandler = Callable[[Tuple[str, Dict[str, Any]]], None]


def event_name(event_type: EventType) -> str:
    """Enum members are published under their member name."""
    if isinstance(event_type, Enum):
        return event_type.name
    return event_type


class EventEmitter:
    """
    Synchronous publish/subscribe hub.

    Handlers run on the emitting thread, in subscription order, after the
    subscriber table lock is released. A handler that raises is logged and
    the remaining handlers still run.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._any_handlers: List[AnyHandler] = []
        self._lock = threading.Lock()

    def on(self, event_type: EventType, callback: Handler) -> Callable[[], None]:
        """
        Call ``callback(data)`` whenever ``event_type`` is emitted.

        Returns:
            A function that removes the subscription
        """
        name = event_name(event_type)
        with self._lock:
            self._handlers[name].append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._handlers[name]:
                    self._handlers[name].remove(callback)

        return unsubscribe

    def on_any(self, callback: AnyHandler) -> Callable[[], None]:
        """
        Call ``callback((event_name, data))`` for every emitted event.

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._any_handlers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._any_handlers:
                    self._any_handlers.remove(callback)

        return unsubscribe

    def emit(self, event_type: EventType, data: Dict[str, Any]) -> None:
        name = event_name(event_type)
        with self._lock:
            calls = [(cb, data) for cb in self._handlers.get(name, ())]
            calls += [(cb, (name, data)) for cb in self._any_handlers]

        for callback, payload in calls:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)


class EventBus:
    """
    Process-wide EventEmitter shared by the engine, the API and the agent.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """Events published by the game engine and the table agent."""

    # Game lifecycle
    GAME_CREATED = "game_created"
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"

    # Player and card events
    PLAYER_ACTION = "player_action"
    CARD_DEALT = "card_dealt"
    HAND_BUSTED = "hand_busted"

    # Agent events
    STRATEGY_DECISION = "strategy_decision"
    AGENT_ENTRY_ADDED = "agent_entry_added"
    AGENT_ENTRY_REMOVED = "agent_entry_removed"
