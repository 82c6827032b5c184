"""Persistence layer for friend and foe relationships."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from socialprofile.domain.entities import RelationshipRecord, RelationshipType
from socialprofile.domain.errors import SourceUnavailable
from socialprofile.domain.interfaces import ChangeListener, RelationshipGraph
from socialprofile.infrastructure.models import UserRelationshipModel
from socialprofile.infrastructure.notifications import (
    RelationshipChangeNotifier,
    relationship_change_notifier,
)
from socialprofile.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class RelationshipRepository(RelationshipGraph):
    """Store symmetric relationships and announce every committed change."""

    def __init__(
        self,
        session: Session,
        notifier: RelationshipChangeNotifier = relationship_change_notifier,
    ) -> None:
        self.session = session
        self._notifier = notifier

    def list(
        self,
        owner_id: int,
        rel_type: RelationshipType,
        count: int,
        *,
        timeout: float | None = None,
    ) -> list[RelationshipRecord]:
        try:
            query = (
                self.session.query(UserRelationshipModel)
                .filter(UserRelationshipModel.owner_id == owner_id)
                .filter(UserRelationshipModel.rel_type == int(rel_type))
                .order_by(
                    UserRelationshipModel.created_at.desc(),
                    UserRelationshipModel.id.desc(),
                )
                .limit(count)
            )
            return [self._to_entity(model) for model in query.all()]
        except SQLAlchemyError as exc:
            raise SourceUnavailable("relationship graph", str(exc)) from exc

    def relationship_between(
        self, owner_id: int, other_id: int, *, timeout: float | None = None
    ) -> RelationshipType | None:
        try:
            rel_type = (
                self.session.query(UserRelationshipModel.rel_type)
                .filter(UserRelationshipModel.owner_id == owner_id)
                .filter(UserRelationshipModel.other_id == other_id)
                .scalar()
            )
        except SQLAlchemyError as exc:
            raise SourceUnavailable("relationship graph", str(exc)) from exc
        return RelationshipType(rel_type) if rel_type is not None else None

    def count(self, owner_id: int, rel_type: RelationshipType) -> int:
        return (
            self.session.query(func.count(UserRelationshipModel.id))
            .filter(UserRelationshipModel.owner_id == owner_id)
            .filter(UserRelationshipModel.rel_type == int(rel_type))
            .scalar()
            or 0
        )

    def on_change(self, listener: ChangeListener) -> None:
        self._notifier.subscribe(listener)

    def add_relationship(
        self,
        owner_id: int,
        other_id: int,
        rel_type: RelationshipType = RelationshipType.FRIEND,
        *,
        established_at: datetime | None = None,
    ) -> None:
        """Create or replace the relationship in both directions."""

        if owner_id == other_id:
            raise ValueError("An actor cannot have a relationship with itself")
        created_at = ensure_app_naive_datetime(established_at or now_in_app_timezone())
        for left, right in ((owner_id, other_id), (other_id, owner_id)):
            model = self._get_model(left, right)
            if model is None:
                model = UserRelationshipModel(owner_id=left, other_id=right)
            model.rel_type = int(rel_type)
            model.created_at = created_at
            self.session.add(model)
        self.session.commit()
        self._notifier.notify(owner_id)
        self._notifier.notify(other_id)

    def remove_relationship(self, owner_id: int, other_id: int) -> None:
        removed = (
            self.session.query(UserRelationshipModel)
            .filter(
                or_(
                    and_(
                        UserRelationshipModel.owner_id == owner_id,
                        UserRelationshipModel.other_id == other_id,
                    ),
                    and_(
                        UserRelationshipModel.owner_id == other_id,
                        UserRelationshipModel.other_id == owner_id,
                    ),
                )
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        if removed:
            self._notifier.notify(owner_id)
            self._notifier.notify(other_id)

    def _get_model(self, owner_id: int, other_id: int) -> UserRelationshipModel | None:
        return (
            self.session.query(UserRelationshipModel)
            .filter(UserRelationshipModel.owner_id == owner_id)
            .filter(UserRelationshipModel.other_id == other_id)
            .one_or_none()
        )

    @staticmethod
    def _to_entity(model: UserRelationshipModel) -> RelationshipRecord:
        return RelationshipRecord(
            actor_id=model.other_id,
            established_at=ensure_app_timezone(model.created_at),
        )
