from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import at
from socialprofile.application.use_cases import RelationshipCache
from socialprofile.application.use_cases.relationships import (
    decode_relationships,
    encode_relationships,
    relationship_generation_key,
    relationship_index_key,
)
from socialprofile.domain.entities import RelationshipRecord, RelationshipType
from socialprofile.domain.errors import CacheCorruption, InvalidFilter
from socialprofile.infrastructure.cache import InMemoryCacheBackend
from socialprofile.infrastructure.memory import InMemoryRelationshipGraph

OWNER = 1


def _ids(records) -> list[int]:
    return [record.actor_id for record in records]


@pytest.fixture()
def graph() -> InMemoryRelationshipGraph:
    graph = InMemoryRelationshipGraph()
    for friend_id in (2, 3, 4, 5):
        graph.add(OWNER, friend_id, established_at=at(friend_id))
    return graph


@pytest.fixture()
def backend() -> InMemoryCacheBackend:
    return InMemoryCacheBackend()


@pytest.fixture()
def cache(backend, graph) -> RelationshipCache:
    cache = RelationshipCache(backend, graph)
    cache.attach()
    return cache


def test_second_lookup_is_served_from_cache(cache) -> None:
    first = cache.lookup(OWNER, RelationshipType.FRIEND, 4)
    second = cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    assert first.from_cache is False
    assert second.from_cache is True
    assert _ids(second.records) == _ids(first.records) == [5, 4, 3, 2]


def test_new_friend_appears_after_invalidation(cache, graph) -> None:
    assert cache.get_relationships(OWNER, RelationshipType.FRIEND, 4) == [
        RelationshipRecord(actor_id=friend_id, established_at=at(friend_id))
        for friend_id in (5, 4, 3, 2)
    ]

    graph.add(OWNER, 6, established_at=at(6))
    lookup = cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    assert lookup.from_cache is False
    assert _ids(lookup.records) == [6, 5, 4, 3]


def test_mutation_invalidates_both_actors(cache, graph) -> None:
    cache.lookup(6, RelationshipType.FRIEND, 4)

    graph.add(OWNER, 6, established_at=at(6))

    assert _ids(cache.get_relationships(6, RelationshipType.FRIEND, 4)) == [OWNER]


def test_removal_invalidates(cache, graph) -> None:
    cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    graph.remove(OWNER, 5)

    assert _ids(cache.get_relationships(OWNER, RelationshipType.FRIEND, 4)) == [4, 3, 2]


def test_entries_are_keyed_by_count_and_type(cache, graph) -> None:
    graph.add(OWNER, 7, RelationshipType.FOE, established_at=at(7))
    cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    smaller = cache.lookup(OWNER, RelationshipType.FRIEND, 2)
    foes = cache.lookup(OWNER, RelationshipType.FOE, 4)

    assert smaller.from_cache is False
    assert _ids(smaller.records) == [5, 4]
    assert foes.from_cache is False
    assert _ids(foes.records) == [7]
    assert cache.cache_key(OWNER, RelationshipType.FRIEND, 4) != cache.cache_key(
        OWNER, RelationshipType.FRIEND, 2
    )


def test_missing_generation_token_starts_a_new_namespace(backend, graph) -> None:
    cache = RelationshipCache(backend, graph)
    cache.lookup(OWNER, RelationshipType.FRIEND, 4)
    # A mutation nobody was told about, followed by eviction of the token.
    graph.add(OWNER, 6, established_at=at(6))
    backend.delete(relationship_generation_key(OWNER))

    lookup = cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    assert lookup.from_cache is False
    assert _ids(lookup.records) == [6, 5, 4, 3]



def test_repeated_invalidation_keeps_backend_bounded(cache, backend, graph) -> None:
    cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    for _ in range(200):
        graph.add(OWNER, 99, established_at=at(99))
        cache.get_relationships(OWNER, RelationshipType.FRIEND, 4)
        graph.remove(OWNER, 99)
        cache.get_relationships(OWNER, RelationshipType.FRIEND, 4)

    owner_keys = [
        relationship_generation_key(OWNER),
        relationship_index_key(OWNER),
        cache.cache_key(OWNER, RelationshipType.FRIEND, 4),
    ]
    assert all(backend.get(key) is not None for key in owner_keys)
    # The owner's three keys plus the generation token of actor 99.
    assert len(backend) == 4


def test_invalidation_deletes_lists_of_every_type_and_count(cache, backend, graph) -> None:
    graph.add(OWNER, 7, RelationshipType.FOE, established_at=at(7))
    stale = [
        cache.cache_key(OWNER, RelationshipType.FRIEND, 4),
        cache.cache_key(OWNER, RelationshipType.FRIEND, 2),
        cache.cache_key(OWNER, RelationshipType.FOE, 4),
    ]
    cache.lookup(OWNER, RelationshipType.FRIEND, 4)
    cache.lookup(OWNER, RelationshipType.FRIEND, 2)
    cache.lookup(OWNER, RelationshipType.FOE, 4)

    cache.invalidate(OWNER)

    assert [backend.get(key) for key in stale] == [None, None, None]
    assert backend.get(relationship_index_key(OWNER)) is None


@pytest.mark.parametrize(
    "raw",
    ["not json", '{"actor_id": 2}', '[{"actor_id": "two", "established_at": "x"}]'],
)
def test_corrupt_entry_is_discarded_and_recomputed(cache, backend, caplog, raw) -> None:
    key = cache.cache_key(OWNER, RelationshipType.FRIEND, 4)
    backend.set(key, raw)

    with caplog.at_level(logging.WARNING):
        lookup = cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    assert lookup.from_cache is False
    assert _ids(lookup.records) == [5, 4, 3, 2]
    assert "corrupt" in caplog.text
    assert _ids(decode_relationships(key, backend.get(key))) == [5, 4, 3, 2]


def test_decode_rejects_malformed_values() -> None:
    with pytest.raises(CacheCorruption):
        decode_relationships("key", '[{"actor_id": 1}]')


def test_encoded_value_preserves_order_and_timestamps() -> None:
    records = [
        RelationshipRecord(actor_id=9, established_at=at(9)),
        RelationshipRecord(actor_id=3, established_at=at(3)),
    ]

    assert list(decode_relationships("key", encode_relationships(records))) == records


def test_unavailable_graph_returns_flagged_empty_result(cache, graph) -> None:
    graph.available = False

    lookup = cache.lookup(OWNER, RelationshipType.FRIEND, 4)

    assert lookup.records == ()
    assert lookup.source_unavailable is True

    graph.available = True
    recovered = cache.lookup(OWNER, RelationshipType.FRIEND, 4)
    assert recovered.from_cache is False
    assert _ids(recovered.records) == [5, 4, 3, 2]


@pytest.mark.parametrize("count", [0, -1, True])
def test_non_positive_count_is_rejected(cache, count) -> None:
    with pytest.raises(InvalidFilter):
        cache.lookup(OWNER, RelationshipType.FRIEND, count)


def test_entries_expire_after_ttl(graph) -> None:
    now = [0.0]
    backend = InMemoryCacheBackend(clock=lambda: now[0])
    cache = RelationshipCache(backend, graph, ttl=10)

    cache.lookup(OWNER, RelationshipType.FRIEND, 4)
    now[0] = 5.0
    assert cache.lookup(OWNER, RelationshipType.FRIEND, 4).from_cache is True
    now[0] = 11.0
    assert cache.lookup(OWNER, RelationshipType.FRIEND, 4).from_cache is False


def test_concurrent_reads_and_writes_end_consistent(cache, graph) -> None:
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            records = cache.get_relationships(OWNER, RelationshipType.FRIEND, 4)
            assert len(records) <= 4

    with ThreadPoolExecutor(max_workers=4) as pool:
        readers = [pool.submit(reader) for _ in range(3)]
        for friend_id in range(6, 30):
            graph.add(OWNER, friend_id, established_at=at(friend_id))
        stop.set()
        for future in readers:
            future.result()

    expected = graph.list(OWNER, RelationshipType.FRIEND, 4)
    assert cache.get_relationships(OWNER, RelationshipType.FRIEND, 4) == expected
    assert _ids(expected) == [29, 28, 27, 26]
