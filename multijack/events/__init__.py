"""
Event system for the multijack engine.

Game and agent activity is published on a process-wide event bus so that
loggers, recorders and front ends can follow a table without polling it.
"""

from multijack.events.emitter import EventEmitter, EventBus, EngineEventType
from multijack.events.recorder import JsonlEventRecorder

__all__ = [
    "EventEmitter",
    "EventBus",
    "EngineEventType",
    "JsonlEventRecorder",
]
