"""
JSON-lines event recorder.

Subscribes to every event on the bus and appends one JSON object per line
to a log file. Writes happen on a background task through aiofiles so a
slow disk never holds up the game.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional

import aiofiles

from multijack.events.emitter import EventBus, EventEmitter

logger = logging.getLogger("multijack.events.recorder")


class JsonlEventRecorder:
    """
    Append-only event log.

    Example:
        ```python
        recorder = JsonlEventRecorder("events.jsonl")
        await recorder.start()
        ...
        await recorder.stop()
        ```
    """

    def __init__(self, path: str, event_bus: Optional[EventEmitter] = None):
        self.path = path
        self.event_bus = event_bus or EventBus.get_instance()
        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe = None
        self.records_written = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Open the log file and begin recording events."""
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        handle = await aiofiles.open(self.path, mode="a", encoding="utf-8")
        self._task = asyncio.create_task(self._drain(handle))
        self._unsubscribe = self.event_bus.on_any(self._on_event)
        logger.info(f"Recording events to {self.path}")

    async def stop(self) -> None:
        """Stop recording and flush everything queued so far."""
        if not self.running:
            return
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self._loop.call_soon_threadsafe(self._queue.put_nowait, None)
        await self._task
        self._task = None

    def _on_event(self, payload) -> None:
        event_type, data = payload
        record: Dict[str, Any] = {
            "event": event_type,
            "timestamp": time.time(),
            "data": data,
        }
        # Handlers may be called from any thread
        self._loop.call_soon_threadsafe(self._queue.put_nowait, record)

    async def _drain(self, handle) -> None:
        try:
            while True:
                record = await self._queue.get()
                if record is None:
                    break
                await handle.write(json.dumps(record, default=str) + "\n")
                await handle.flush()
                self.records_written += 1
        finally:
            await handle.close()
