"""Persistence layer for the social activity log."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from socialprofile.domain.entities import ActivityItem, ActivityType, TargetRef
from socialprofile.domain.errors import SourceUnavailable
from socialprofile.domain.interfaces import ActivityStore
from socialprofile.infrastructure.models import ActivityEventModel
from socialprofile.utils import ensure_app_naive_datetime, ensure_app_timezone

logger = logging.getLogger(__name__)

_BATCH_SIZE = 100


class ActivityRepository(ActivityStore):
    """Read and append :class:`ActivityItem` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def query(
        self,
        actor_ids: Iterable[int],
        since: datetime | None = None,
        *,
        timeout: float | None = None,
    ) -> Iterator[ActivityItem]:
        # SQLite has no per-statement timeout; the caller enforces its deadline
        # while consuming the iterator.
        return self._iterate(sorted(set(actor_ids)), since)

    def _iterate(self, actor_ids: list[int], since: datetime | None) -> Iterator[ActivityItem]:
        if not actor_ids:
            return
        query = self.session.query(ActivityEventModel).filter(
            ActivityEventModel.actor_id.in_(actor_ids)
        )
        if since is not None:
            query = query.filter(ActivityEventModel.created_at > ensure_app_naive_datetime(since))
        query = query.order_by(
            ActivityEventModel.created_at.desc(), ActivityEventModel.id.desc()
        )
        try:
            for model in query.yield_per(_BATCH_SIZE):
                yield self._to_entity(model)
        except SQLAlchemyError as exc:
            logger.warning("Activity query failed for actors %s: %s", actor_ids, exc)
            raise SourceUnavailable("activity store", str(exc)) from exc

    def add(self, item: ActivityItem) -> ActivityItem:
        model = ActivityEventModel(
            event_type=item.type.value,
            actor_id=item.actor_id,
            related_actor_id=item.related_actor_id,
            target_namespace=item.target.namespace if item.target else None,
            target_title=item.target.title if item.target else None,
            comment=item.comment,
            is_private=item.private,
            created_at=ensure_app_naive_datetime(item.timestamp),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ActivityEventModel) -> ActivityItem:
        target = None
        if model.target_title is not None and model.target_namespace is not None:
            target = TargetRef(namespace=model.target_namespace, title=model.target_title)
        elif model.target_title is not None or model.target_namespace is not None:
            logger.warning("Activity event %s has an incomplete target; leaving it unset", model.id)
        return ActivityItem(
            type=ActivityType(model.event_type),
            actor_id=model.actor_id,
            timestamp=ensure_app_timezone(model.created_at),
            target=target,
            comment=model.comment,
            related_actor_id=model.related_actor_id,
            private=bool(model.is_private),
            event_id=model.id,
        )
