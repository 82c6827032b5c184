"""Use cases for reading relationship lists through an invalidation-driven cache."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, StrictInt, TypeAdapter, ValidationError

from socialprofile.domain.entities import (
    RelationshipLookup,
    RelationshipRecord,
    RelationshipType,
)
from socialprofile.domain.errors import CacheCorruption, InvalidFilter, SourceUnavailable
from socialprofile.domain.interfaces import CacheBackend, RelationshipGraph

logger = logging.getLogger(__name__)

_KEY_PREFIX = "relationship:profile:actor_id"
_GENERATION_PREFIX = "relationship:generation:actor_id"
_INDEX_PREFIX = "relationship:keys:actor_id"


class CachedRelationshipRecord(BaseModel):
    """Serialized form of :class:`RelationshipRecord` kept in the cache."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    actor_id: StrictInt
    established_at: datetime


_RECORDS_ADAPTER = TypeAdapter(list[CachedRelationshipRecord])
_KEYS_ADAPTER = TypeAdapter(list[str])


def relationship_generation_key(owner_id: int) -> str:
    return f"{_GENERATION_PREFIX}:{owner_id}"


def relationship_index_key(owner_id: int) -> str:
    return f"{_INDEX_PREFIX}:{owner_id}"


def invalidate_owner_relationships(backend: CacheBackend, owner_id: int) -> None:
    """Make every cached relationship list of ``owner_id`` unreachable.

    Entries are keyed by a per-owner generation token. Replacing the token
    retires all relationship types and page sizes at once; the entries written
    under earlier tokens are then deleted through the owner's key index.
    """

    backend.set(relationship_generation_key(owner_id), uuid4().hex)
    purged = purge_owner_entries(backend, owner_id)
    logger.debug(
        "Invalidated cached relationships for actor %s (%s entries dropped)", owner_id, purged
    )


def purge_owner_entries(backend: CacheBackend, owner_id: int) -> int:
    """Delete every cached list recorded in the key index of ``owner_id``."""

    index_key = relationship_index_key(owner_id)
    keys = _read_index(backend, owner_id)
    backend.delete(index_key)
    for key in keys:
        backend.delete(key)
    return len(keys)


def _read_index(backend: CacheBackend, owner_id: int) -> list[str]:
    raw = backend.get(relationship_index_key(owner_id))
    if raw is None:
        return []
    try:
        return _KEYS_ADAPTER.validate_json(raw)
    except ValidationError:
        logger.warning("Dropping corrupt relationship key index for actor %s", owner_id)
        return []


def _record_key(backend: CacheBackend, owner_id: int, key: str) -> None:
    keys = _read_index(backend, owner_id)
    if key in keys:
        return
    keys.append(key)
    backend.set(relationship_index_key(owner_id), _KEYS_ADAPTER.dump_json(keys).decode("utf-8"))


def encode_relationships(records: Sequence[RelationshipRecord]) -> str:
    payload = [
        CachedRelationshipRecord(actor_id=record.actor_id, established_at=record.established_at)
        for record in records
    ]
    return _RECORDS_ADAPTER.dump_json(payload).decode("utf-8")


def decode_relationships(key: str, raw: str) -> tuple[RelationshipRecord, ...]:
    """Parse a cached value, raising :class:`CacheCorruption` when malformed."""

    try:
        payload = _RECORDS_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise CacheCorruption(key, f"{exc.error_count()} validation error(s)") from exc
    return tuple(
        RelationshipRecord(actor_id=entry.actor_id, established_at=entry.established_at)
        for entry in payload
    )


class RelationshipCache:
    """Memoize relationship lists per owner, type and page size."""

    def __init__(
        self,
        backend: CacheBackend,
        graph: RelationshipGraph,
        *,
        ttl: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self._backend = backend
        self._graph = graph
        self._ttl = ttl
        self._timeout = timeout

    def attach(self) -> None:
        """Subscribe to graph mutations so they invalidate this cache."""

        self._graph.on_change(self.invalidate)

    def invalidate(self, owner_id: int) -> None:
        invalidate_owner_relationships(self._backend, owner_id)

    def cache_key(self, owner_id: int, rel_type: RelationshipType, count: int) -> str:
        """Return the key currently holding the list for ``(owner_id, rel_type, count)``."""

        generation = self._generation(owner_id)
        return f"{_KEY_PREFIX}:{owner_id}-{int(rel_type)}:{count}:{generation}"

    def get_relationships(
        self, owner_id: int, rel_type: RelationshipType, count: int
    ) -> list[RelationshipRecord]:
        """Return up to ``count`` relationships, most recently established first."""

        return list(self.lookup(owner_id, rel_type, count).records)

    def lookup(
        self,
        owner_id: int,
        rel_type: RelationshipType,
        count: int,
        *,
        timeout: float | None = None,
    ) -> RelationshipLookup:
        """Return the relationship list together with where it came from.

        A graph outage yields an empty result flagged ``source_unavailable``;
        nothing is cached in that case.
        """

        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            msg = f"Relationship count must be a positive integer, got {count!r}"
            raise InvalidFilter(msg)
        rel_type = RelationshipType(rel_type)

        key = self.cache_key(owner_id, rel_type, count)
        raw = self._backend.get(key)
        if raw is not None:
            try:
                records = decode_relationships(key, raw)
            except CacheCorruption as exc:
                logger.warning("Dropping corrupt relationship cache entry: %s", exc)
                self._backend.delete(key)
            else:
                logger.debug(
                    "Got relationship type %s for actor %s from cache",
                    rel_type.name.lower(),
                    owner_id,
                )
                return RelationshipLookup(records=records, from_cache=True)

        budget = timeout if timeout is not None else self._timeout
        try:
            records = tuple(self._graph.list(owner_id, rel_type, count, timeout=budget))
        except (SourceUnavailable, TimeoutError, ConnectionError) as exc:
            logger.warning(
                "Relationship graph unavailable for actor %s (%s): %s",
                owner_id,
                rel_type.name.lower(),
                exc,
            )
            return RelationshipLookup(records=(), source_unavailable=True)

        self._backend.set(key, encode_relationships(records), ttl=self._ttl)
        _record_key(self._backend, owner_id, key)
        return RelationshipLookup(records=records)

    def _generation(self, owner_id: int) -> str:
        generation_key = relationship_generation_key(owner_id)
        generation = self._backend.get(generation_key)
        if generation:
            return generation
        # A missing token (never set, or evicted) starts a fresh namespace so
        # entries written under an older token are never served again.
        generation = uuid4().hex
        self._backend.set(generation_key, generation)
        purge_owner_entries(self._backend, owner_id)
        return generation


__all__ = [
    "CachedRelationshipRecord",
    "RelationshipCache",
    "decode_relationships",
    "encode_relationships",
    "invalidate_owner_relationships",
    "purge_owner_entries",
    "relationship_generation_key",
    "relationship_index_key",
]
