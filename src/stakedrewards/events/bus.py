"""
Pool event publication.

A pool hands each committed operation's events to an :class:`EventBus`.
Subscribers register glob patterns over event types (``pool.*``,
``pool.reward_paid``). Events describe what already happened and never
feed back into the ledger.
"""

from __future__ import annotations

import fnmatch
import itertools
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

_sequence = itertools.count(1)


@dataclass(frozen=True)
class Event:
    """Record of one committed pool state change.

    ``timestamp`` is the pool clock reading (unix seconds) when the
    operation ran, so replays under a manual clock stay deterministic.
    """

    event_type: str
    source: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: int = field(default_factory=lambda: int(time.time()))
    event_id: str = field(default_factory=lambda: f"evt-{next(_sequence)}")


EventHandler = Callable[[Event], Any]


class EventBus(ABC):
    """Destination for events published by a pool."""

    @abstractmethod
    def emit(self, event: Event) -> None:
        """Deliver *event* to every matching subscriber."""

    @abstractmethod
    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Call *handler* for events whose type matches *pattern*.

        Args:
            pattern: Glob-style pattern (e.g., ``pool.*``, ``*``).
            handler: Callable invoked with the matching Event.
        """

    @abstractmethod
    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove *handler* from every pattern it was registered for."""


class InMemoryEventBus(EventBus):
    """Synchronous bus that also records what it delivered.

    Handlers run in subscription order inside :meth:`emit`; an exception
    from a handler propagates to the publisher.

    Args:
        history_limit: Number of most recent events kept in :attr:`history`.
            ``None`` keeps everything, ``0`` keeps nothing.
    """

    def __init__(self, history_limit: Optional[int] = None) -> None:
        if history_limit is not None and history_limit < 0:
            raise ValueError("history_limit must be non-negative")
        self._subscriptions: list[tuple[str, EventHandler]] = []
        self._history: deque[Event] = deque(maxlen=history_limit)

    @property
    def history(self) -> list[Event]:
        return list(self._history)

    def emit(self, event: Event) -> None:
        self._history.append(event)
        for pattern, handler in list(self._subscriptions):
            if fnmatch.fnmatchcase(event.event_type, pattern):
                handler(event)

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        if not pattern:
            raise ValueError("pattern must not be empty")
        self._subscriptions.append((pattern, handler))

    def unsubscribe(self, handler: EventHandler) -> None:
        self._subscriptions = [
            (p, h) for p, h in self._subscriptions if h is not handler
        ]

    def events_of(self, pattern: str) -> list[Event]:
        """Recorded events whose type matches *pattern*."""
        return [e for e in self._history if fnmatch.fnmatchcase(e.event_type, pattern)]

    def clear(self) -> None:
        """Forget recorded events; subscriptions are kept."""
        self._history.clear()
