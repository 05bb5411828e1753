"""Storage and retrieval of swap events."""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from mev_relay.domain import EventSource, SwapEvent, now_seconds

log = logging.getLogger(__name__)


@dataclass
class RepositoryStats:
    """Counters describing what a repository has stored."""

    total_events_stored: int = 0
    events_by_source: Counter[str] = field(default_factory=Counter)
    events_by_protocol: Counter[str] = field(default_factory=Counter)
    last_stored_at: int | None = None
    storage_size_bytes: int = 0


class EventRepository(ABC):
    """Interface for stores of swap events."""

    @abstractmethod
    def store(self, event: SwapEvent) -> None:
        """Store a single event."""

    def store_batch(self, events: Iterable[SwapEvent]) -> None:
        """Store each of the given events."""
        count = 0
        for event in events:
            self.store(event)
            count += 1
        log.info("Stored %d events in batch", count)

    @abstractmethod
    def get_by_id(self, event_id: str) -> SwapEvent | None:
        """The event with this id, or None."""

    @abstractmethod
    def get_by_source(self, source: str | EventSource) -> list[SwapEvent]:
        """Events that came from the given source."""

    @abstractmethod
    def get_by_protocol(self, protocol: str) -> list[SwapEvent]:
        """Events whose protocol has the given name."""

    @abstractmethod
    def get_by_time_range(self, start_time: int, end_time: int) -> list[SwapEvent]:
        """Events whose block timestamp lies in the inclusive range."""

    @abstractmethod
    def stats(self) -> RepositoryStats:
        """A snapshot of the repository's counters."""


class InMemoryEventRepository(EventRepository):
    """Keeps events in a dictionary keyed by event id."""

    def __init__(self) -> None:
        self._events: dict[str, SwapEvent] = {}
        self._stats = RepositoryStats()

    def store(self, event: SwapEvent) -> None:
        self._stats.total_events_stored += 1
        self._stats.last_stored_at = now_seconds()
        self._stats.events_by_source[str(event.source)] += 1
        self._stats.events_by_protocol[event.protocol.name] += 1
        self._events[str(event.id)] = event
        log.debug("Event stored in memory repository")

    def store_batch(self, events: Iterable[SwapEvent]) -> None:
        super().store_batch(events)

    def get_by_id(self, event_id: str) -> SwapEvent | None:
        return self._events.get(event_id)

    def get_by_source(self, source: str | EventSource) -> list[SwapEvent]:
        wanted = str(source)
        return [event for event in self._events.values() if str(event.source) == wanted]

    def get_by_protocol(self, protocol: str) -> list[SwapEvent]:
        return [event for event in self._events.values() if event.protocol.name == protocol]

    def get_by_time_range(self, start_time: int, end_time: int) -> list[SwapEvent]:
        return [
            event
            for event in self._events.values()
            if start_time <= event.block_info.timestamp <= end_time
        ]

    def stats(self) -> RepositoryStats:
        return copy.deepcopy(self._stats)

    def all_events(self) -> list[SwapEvent]:
        return list(self._events.values())

    def clear(self) -> None:
        self._events.clear()
        self._stats = RepositoryStats()
        log.info("In-memory repository cleared")

    def __len__(self) -> int:
        return len(self._events)