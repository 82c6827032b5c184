"""Cache backends storing serialized relationship lists."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialprofile.domain.interfaces import CacheBackend
from socialprofile.infrastructure.models import RelationshipCacheModel
from socialprofile.utils import ensure_app_naive_datetime, now_in_app_timezone

logger = logging.getLogger(__name__)

_STRIPES = 64


class _Stripe:
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[str, tuple[str, float | None]] = {}


class InMemoryCacheBackend(CacheBackend):
    """Process-local cache with per-key locking and optional expiry.

    Keys are spread over a fixed number of stripes, each guarded by its own
    lock, so writers of unrelated keys never wait on each other.
    """

    def __init__(
        self,
        *,
        stripes: int = _STRIPES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if stripes <= 0:
            raise ValueError("stripes must be positive")
        self._stripes = [_Stripe() for _ in range(stripes)]
        self._clock = clock

    def _stripe(self, key: str) -> _Stripe:
        return self._stripes[hash(key) % len(self._stripes)]

    def get(self, key: str) -> str | None:
        stripe = self._stripe(key)
        with stripe.lock:
            entry = stripe.entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del stripe.entries[key]
                return None
            return value

    def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        expires_at = None if ttl is None else self._clock() + ttl
        stripe = self._stripe(key)
        with stripe.lock:
            stripe.entries[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        stripe = self._stripe(key)
        with stripe.lock:
            stripe.entries.pop(key, None)

    def clear(self) -> None:
        for stripe in self._stripes:
            with stripe.lock:
                stripe.entries.clear()

    def __len__(self) -> int:
        total = 0
        for stripe in self._stripes:
            with stripe.lock:
                total += len(stripe.entries)
        return total


class SqlAlchemyCacheBackend(CacheBackend):
    """Cache shared between processes through the ``relationship_cache`` table."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _now(self) -> datetime:
        return ensure_app_naive_datetime(self._clock())

    def get(self, key: str) -> str | None:
        with self._session_factory() as session:
            model = session.get(RelationshipCacheModel, key)
            if model is None:
                return None
            if model.expires_at is not None and model.expires_at <= self._now():
                session.delete(model)
                session.commit()
                return None
            return model.value

    def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        expires_at = None if ttl is None else self._now() + timedelta(seconds=ttl)
        with self._session_factory() as session:
            session.merge(RelationshipCacheModel(key=key, value=value, expires_at=expires_at))
            try:
                session.commit()
            except IntegrityError:
                # Another writer inserted the key between our read and insert.
                session.rollback()
                logger.debug("Concurrent insert of cache key %s; updating instead", key)
                session.query(RelationshipCacheModel).filter(
                    RelationshipCacheModel.key == key
                ).update({"value": value, "expires_at": expires_at})
                session.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            session.query(RelationshipCacheModel).filter(
                RelationshipCacheModel.key == key
            ).delete()
            session.commit()


__all__ = ["InMemoryCacheBackend", "SqlAlchemyCacheBackend"]
