"""FastAPI dependency utilities."""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from socialprofile.application.use_cases import (
    ActivityAggregator,
    ProfileService,
    RelationshipCache,
    VisibilityFilter,
)
from socialprofile.config import get_settings
from socialprofile.domain.entities import Viewer
from socialprofile.domain.interfaces import CacheBackend
from socialprofile.infrastructure import database
from socialprofile.infrastructure.cache import InMemoryCacheBackend, SqlAlchemyCacheBackend
from socialprofile.infrastructure.database import get_db
from socialprofile.infrastructure.repositories import (
    ActivityRepository,
    PrivacyRepository,
    RelationshipRepository,
    StatsRepository,
)


def get_viewer(
    x_viewer_id: str | None = Header(default=None),
    x_viewer_permissions: str | None = Header(default=None),
) -> Viewer:
    """Identify the viewer from request headers; no id means anonymous."""

    if x_viewer_id is None or not x_viewer_id.strip():
        return Viewer.anonymous()
    try:
        actor_id = int(x_viewer_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Viewer-Id must be an integer",
        ) from exc

    permissions = frozenset(
        permission.strip()
        for permission in (x_viewer_permissions or "").split(",")
        if permission.strip()
    )
    return Viewer(actor_id=actor_id, permissions=permissions)


@lru_cache
def get_cache_backend() -> CacheBackend:
    """Return the process-wide cache backend selected in the settings."""

    if get_settings().relationship_cache_backend == "database":
        return SqlAlchemyCacheBackend(database.SessionLocal)
    return InMemoryCacheBackend()


def reset_cache_backend() -> None:
    get_cache_backend.cache_clear()


def get_relationship_cache(
    db: Session = Depends(get_db),
    backend: CacheBackend = Depends(get_cache_backend),
) -> RelationshipCache:
    settings = get_settings()
    return RelationshipCache(
        backend,
        RelationshipRepository(db),
        ttl=settings.relationship_cache_ttl_seconds,
        timeout=settings.source_timeout_seconds,
    )


def get_visibility_filter(db: Session = Depends(get_db)) -> VisibilityFilter:
    return VisibilityFilter(
        PrivacyRepository(db),
        RelationshipRepository(db),
        timeout=get_settings().source_timeout_seconds,
    )


def get_activity_aggregator(
    db: Session = Depends(get_db),
    relationships: RelationshipCache = Depends(get_relationship_cache),
) -> ActivityAggregator:
    return ActivityAggregator(
        ActivityRepository(db),
        config=get_settings().feed_config(),
        relationships=relationships,
    )


def get_profile_service(
    db: Session = Depends(get_db),
    aggregator: ActivityAggregator = Depends(get_activity_aggregator),
    relationships: RelationshipCache = Depends(get_relationship_cache),
    visibility: VisibilityFilter = Depends(get_visibility_filter),
) -> ProfileService:
    return ProfileService(
        aggregator=aggregator,
        relationships=relationships,
        visibility=visibility,
        stats=StatsRepository(db),
        display=get_settings().display_config(),
    )


__all__ = [
    "get_activity_aggregator",
    "get_cache_backend",
    "get_profile_service",
    "get_relationship_cache",
    "get_viewer",
    "get_visibility_filter",
    "reset_cache_backend",
]
