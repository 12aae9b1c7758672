"""
core/engine/event_bus.py

Document-write trigger bus - in-process stand-in for onWrite triggers.

Handlers subscribe to a collection pattern such as
``hotels/{hotelUid}/catalogproducts``. Every committed document write is
published once; a failing handler is redelivered up to ``max_attempts`` times
(at-least-once delivery) and then recorded as failed. Handler errors never
reach the writer.
"""
from typing import Callable, Dict, List, Any, Optional, Protocol, Pattern, Tuple
from dataclasses import dataclass, field
from datetime import datetime
from collections import deque
import logging
import re
import threading
import uuid

logger = logging.getLogger(__name__)

EventId = str

_PARAM_RE = re.compile(r"\{(\w+)\}")


def _generate_event_id() -> EventId:
    return f"{datetime.now().strftime('%Y%m%d%H%M%S')}_{uuid.uuid4().hex[:8]}"


class TriggerHandler(Protocol):
    """Trigger handler protocol"""

    def __call__(self, event: "DocumentWriteEvent") -> Any:
        ...


@dataclass
class DocumentWriteEvent:
    """
    One document write

    Attributes:
        collection: collection path, e.g. "hotels/h1/catalogproducts"
        document_id: document key
        before: document body before the write (None on create)
        after: document body after the write (None on delete)
        params: wildcard values extracted from the matched pattern
        timestamp: publish time
        event_id: unique id, stable across redeliveries
    """

    collection: str
    document_id: str
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    params: Dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: EventId = field(default_factory=_generate_event_id)

    @property
    def exists(self) -> bool:
        """Whether the document exists after the write"""
        return self.after is not None

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.document_id}"

    def with_params(self, params: Dict[str, str]) -> "DocumentWriteEvent":
        """Copy carrying the wildcard values of one subscription"""
        return DocumentWriteEvent(
            collection=self.collection,
            document_id=self.document_id,
            before=self.before,
            after=self.after,
            params=dict(params),
            timestamp=self.timestamp,
            event_id=self.event_id,
        )


@dataclass
class PublishResult:
    """
    Outcome of one publish

    Attributes:
        path: document path
        subscriber_count: number of matching handlers
        success_count: handlers that eventually succeeded
        failure_count: handlers that failed on every attempt
        attempts: total handler invocations, redeliveries included
        errors: (handler, last exception) pairs
    """

    path: str
    subscriber_count: int
    success_count: int = 0
    failure_count: int = 0
    attempts: int = 0
    errors: List[Tuple[Callable, Exception]] = field(default_factory=list)


@dataclass
class TriggerBusStatistics:
    total_published: int = 0
    total_processed: int = 0
    total_failed: int = 0
    total_redelivered: int = 0
    subscriber_count: Dict[str, int] = field(default_factory=dict)


@dataclass
class _Subscription:
    pattern: str
    regex: Pattern
    handler: TriggerHandler


def compile_pattern(pattern: str) -> Pattern:
    """Turn ``hotels/{hotelUid}/roles`` into an anchored regex with named groups"""
    parts = []
    last = 0
    for match in _PARAM_RE.finditer(pattern):
        parts.append(re.escape(pattern[last:match.start()]))
        parts.append(f"(?P<{match.group(1)}>[^/]+)")
        last = match.end()
    parts.append(re.escape(pattern[last:]))
    return re.compile("^" + "".join(parts) + "$")


class TriggerBus:
    """
    Collection-pattern publish/subscribe with redelivery

    Example:
        >>> bus = TriggerBus(max_attempts=3)
        >>> bus.subscribe("hotels/{hotelUid}/catalogproducts", handler)
        >>> bus.publish(DocumentWriteEvent("hotels/h1/catalogproducts", "p1", after={}))
    """

    def __init__(self, max_attempts: int = 1, history_size: int = 100):
        self._subscriptions: List[_Subscription] = []
        self._subscriber_lock = threading.RLock()
        self._history: deque = deque(maxlen=history_size)
        self._failed: deque = deque(maxlen=history_size)
        self._stats = TriggerBusStatistics()
        self._stats_lock = threading.Lock()
        self.max_attempts = max(1, int(max_attempts))

    def subscribe(self, pattern: str, handler: TriggerHandler) -> None:
        """Register ``handler`` for writes under collections matching ``pattern``"""
        with self._subscriber_lock:
            for sub in self._subscriptions:
                if sub.pattern == pattern and sub.handler == handler:
                    return
            self._subscriptions.append(_Subscription(pattern, compile_pattern(pattern), handler))
        logger.info(f"Handler {_handler_name(handler)} subscribed to {pattern}")

    def unsubscribe(self, pattern: str, handler: TriggerHandler) -> None:
        with self._subscriber_lock:
            self._subscriptions = [
                sub for sub in self._subscriptions
                if not (sub.pattern == pattern and sub.handler == handler)
            ]

    def publish(self, event: DocumentWriteEvent) -> PublishResult:
        """
        Deliver one write to every matching handler

        Returns:
            PublishResult with per-handler outcome counts
        """
        self._history.append(event)

        with self._subscriber_lock:
            matches = []
            for sub in self._subscriptions:
                found = sub.regex.match(event.collection)
                if found:
                    matches.append((sub.handler, found.groupdict()))

        with self._stats_lock:
            self._stats.total_published += 1

        result = PublishResult(path=event.path, subscriber_count=len(matches))

        for handler, params in matches:
            delivered = event.with_params(params)
            error = self._deliver(handler, delivered, result)
            if error is None:
                result.success_count += 1
                with self._stats_lock:
                    self._stats.total_processed += 1
            else:
                result.failure_count += 1
                result.errors.append((handler, error))
                self._failed.append((delivered, _handler_name(handler), error))
                with self._stats_lock:
                    self._stats.total_failed += 1

        return result

    def _deliver(
        self,
        handler: TriggerHandler,
        event: DocumentWriteEvent,
        result: PublishResult,
    ) -> Optional[Exception]:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            result.attempts += 1
            if attempt > 1:
                with self._stats_lock:
                    self._stats.total_redelivered += 1
            try:
                handler(event)
                return None
            except Exception as e:
                last_error = e
                logger.error(
                    f"Trigger handler {_handler_name(handler)} failed for {event.path} "
                    f"(attempt {attempt}/{self.max_attempts}): {e}",
                    exc_info=True,
                )
        return last_error

    def get_history(self, limit: int = 50) -> List[DocumentWriteEvent]:
        """Most recent events first"""
        return list(reversed(self._history))[:limit]

    def get_failed(self, limit: int = 50) -> List[Tuple[DocumentWriteEvent, str, Exception]]:
        """Dead-lettered deliveries, most recent first"""
        return list(reversed(self._failed))[:limit]

    def get_subscribers(self) -> Dict[str, List[str]]:
        with self._subscriber_lock:
            subscribers: Dict[str, List[str]] = {}
            for sub in self._subscriptions:
                subscribers.setdefault(sub.pattern, []).append(_handler_name(sub.handler))
            return subscribers

    def get_statistics(self) -> TriggerBusStatistics:
        with self._stats_lock:
            stats = TriggerBusStatistics(
                total_published=self._stats.total_published,
                total_processed=self._stats.total_processed,
                total_failed=self._stats.total_failed,
                total_redelivered=self._stats.total_redelivered,
            )
        stats.subscriber_count = {
            pattern: len(names) for pattern, names in self.get_subscribers().items()
        }
        return stats

    def clear(self) -> None:
        """
        Drop subscriptions, history and statistics

        Warning:
            Test helper only.
        """
        with self._subscriber_lock:
            self._subscriptions.clear()
        self._history.clear()
        self._failed.clear()
        with self._stats_lock:
            self._stats = TriggerBusStatistics()


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__name__", None) or type(handler).__name__


# Process-wide bus
trigger_bus = TriggerBus()


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
