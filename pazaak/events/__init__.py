"""
Event system for the Pazaak engine.

This package provides the event emitter and global event bus used for the
event-driven parts of the architecture.
"""

from pazaak.events.emitter import (
    EventEmitter,
    EventBus,
    EventPriority,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBus", "EventPriority", "EngineEventType"]
