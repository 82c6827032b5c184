"""Contracts for the collaborators the social profile core depends on.

The infrastructure layer provides concrete implementations: in-memory ones in
:mod:`socialprofile.infrastructure.memory` and SQLAlchemy-backed ones in
:mod:`socialprofile.infrastructure.repositories`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import datetime

from .entities import (
    ActivityItem,
    RelationshipRecord,
    RelationshipType,
    UserStats,
    VisibilityRule,
)

ChangeListener = Callable[[int], None]


class ActivityStore(ABC):
    """Read-only access to the host's social event log."""

    @abstractmethod
    def query(
        self,
        actor_ids: Iterable[int],
        since: datetime | None = None,
        *,
        timeout: float | None = None,
    ) -> Iterator[ActivityItem]:
        """Yield events generated by ``actor_ids``, optionally newer than ``since``.

        The returned iterator is lazy, finite and can only be consumed once.
        Implementations raise :class:`~socialprofile.domain.errors.SourceUnavailable`
        when the log cannot be read within ``timeout`` seconds.
        """


class RelationshipGraph(ABC):
    """Social graph of typed relationships between actors."""

    @abstractmethod
    def list(
        self,
        owner_id: int,
        rel_type: RelationshipType,
        count: int,
        *,
        timeout: float | None = None,
    ) -> list[RelationshipRecord]:
        """Return up to ``count`` relationships, most recently established first."""

    @abstractmethod
    def relationship_between(
        self, owner_id: int, other_id: int, *, timeout: float | None = None
    ) -> RelationshipType | None:
        """Return how ``other_id`` relates to ``owner_id``, or ``None``."""

    @abstractmethod
    def on_change(self, listener: ChangeListener) -> None:
        """Register ``listener`` to be called with an owner id after each mutation."""


class PrivacySettings(ABC):
    """Per-owner privacy rules for profile fields."""

    @abstractmethod
    def get(self, owner_id: int) -> Mapping[str, VisibilityRule]:
        """Return the explicit field rules stored for ``owner_id``."""


class StatsProvider(ABC):
    """Counters maintained by the host for each user."""

    @abstractmethod
    def get(self, owner_id: int) -> UserStats:
        """Return the current counters for ``owner_id``."""


class CacheBackend(ABC):
    """Key-value storage for serialized cache entries."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value for ``key`` or ``None`` when absent or expired."""

    @abstractmethod
    def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        """Store ``value`` under ``key``, replacing any previous value atomically."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if it exists."""


__all__ = [
    "ActivityStore",
    "CacheBackend",
    "ChangeListener",
    "PrivacySettings",
    "RelationshipGraph",
    "StatsProvider",
]
