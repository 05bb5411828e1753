import pytest

from mev_relay.domain import EventSource, SwapEvent
from mev_relay.repository import (
    EventRepository,
    InMemoryEventRepository,
    RepositoryStats,
)


def _event(source=EventSource.MEMPOOL, protocol="unknown", timestamp=0):
    event = SwapEvent.blank()
    event.source = source
    event.protocol.name = protocol
    event.block_info.timestamp = timestamp
    return event


def test_in_memory_repository():
    repo = InMemoryEventRepository()
    event = SwapEvent.blank()
    event_id = str(event.id)

    repo.store(event)
    assert len(repo) == 1

    retrieved = repo.get_by_id(event_id)
    assert retrieved is event

    assert len(repo.get_by_source("Mempool")) == 1

    repo.clear()
    assert len(repo) == 0


def test_repository_stats_default():
    stats = RepositoryStats()
    assert stats.total_events_stored == 0
    assert stats.last_stored_at is None
    assert stats.storage_size_bytes == 0


def test_get_by_id_missing_returns_none():
    repo = InMemoryEventRepository()
    repo.store(SwapEvent.blank())
    assert repo.get_by_id("no-such-id") is None


def test_get_by_source_accepts_enum_and_string():
    repo = InMemoryEventRepository()
    repo.store_batch(
        [
            _event(EventSource.MEMPOOL),
            _event(EventSource.FLASHBOTS),
            _event(EventSource.FLASHBOTS),
        ]
    )
    assert len(repo.get_by_source(EventSource.FLASHBOTS)) == 2
    assert len(repo.get_by_source("Flashbots")) == 2
    assert len(repo.get_by_source("Block")) == 0


def test_get_by_protocol():
    repo = InMemoryEventRepository()
    repo.store_batch([_event(protocol="Uniswap"), _event(protocol="SushiSwap")])
    found = repo.get_by_protocol("Uniswap")
    assert [e.protocol.name for e in found] == ["Uniswap"]


def test_get_by_time_range_is_inclusive():
    repo = InMemoryEventRepository()
    repo.store_batch([_event(timestamp=t) for t in (10, 20, 30, 40)])
    found = sorted(e.block_info.timestamp for e in repo.get_by_time_range(20, 30))
    assert found == [20, 30]


def test_stats_count_by_source_and_protocol():
    repo = InMemoryEventRepository()
    repo.store_batch(
        [
            _event(EventSource.MEMPOOL, "Uniswap"),
            _event(EventSource.FLASHBOTS, "Uniswap"),
            _event(EventSource.MEMPOOL, "SushiSwap"),
        ]
    )
    stats = repo.stats()
    assert stats.total_events_stored == 3
    assert stats.events_by_source["Mempool"] == 2
    assert stats.events_by_source["Flashbots"] == 1
    assert stats.events_by_protocol["Uniswap"] == 2
    assert stats.last_stored_at is not None and stats.last_stored_at > 0


def test_storing_same_id_replaces_but_counts_twice():
    repo = InMemoryEventRepository()
    event = SwapEvent.blank()
    repo.store(event)
    repo.store(event)
    assert len(repo) == 1
    assert repo.stats().total_events_stored == 2


def test_stats_is_a_snapshot():
    repo = InMemoryEventRepository()
    repo.store(_event())
    snapshot = repo.stats()
    snapshot.events_by_source["Mempool"] = 99
    assert repo.stats().events_by_source["Mempool"] == 1


def test_clear_resets_stats():
    repo = InMemoryEventRepository()
    repo.store(_event())
    repo.clear()
    stats = repo.stats()
    assert stats.total_events_stored == 0
    assert stats.last_stored_at is None
    assert repo.all_events() == []


def test_all_events_returns_stored_events():
    repo = InMemoryEventRepository()
    events = [_event(), _event()]
    repo.store_batch(events)
    assert {str(e.id) for e in repo.all_events()} == {str(e.id) for e in events}


def test_event_repository_is_abstract():
    with pytest.raises(TypeError):
        EventRepository()