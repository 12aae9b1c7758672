"""
core/engine - trigger dispatch

- event_bus: document-write trigger bus (collection patterns, redelivery)

Usage:
    >>> from core.engine import trigger_bus, DocumentWriteEvent
"""

from core.engine.event_bus import (
    EventId,
    TriggerHandler,
    DocumentWriteEvent,
    PublishResult,
    TriggerBusStatistics,
    TriggerBus,
    compile_pattern,
    trigger_bus,
)

__all__ = [
    "EventId",
    "TriggerHandler",
    "DocumentWriteEvent",
    "PublishResult",
    "TriggerBusStatistics",
    "TriggerBus",
    "compile_pattern",
    "trigger_bus",
]
