"""Persistence layer for per-field privacy rules."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from socialprofile.domain.entities import PROFILE_FIELDS, VisibilityRule
from socialprofile.domain.errors import SourceUnavailable
from socialprofile.domain.interfaces import PrivacySettings
from socialprofile.infrastructure.models import ProfilePrivacyModel


class PrivacyRepository(PrivacySettings):
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, owner_id: int) -> Mapping[str, VisibilityRule | str]:
        """Return stored rules; unknown values are passed through untouched."""

        try:
            models = (
                self.session.query(ProfilePrivacyModel)
                .filter(ProfilePrivacyModel.owner_id == owner_id)
                .all()
            )
        except SQLAlchemyError as exc:
            raise SourceUnavailable("privacy settings", str(exc)) from exc
        return {model.field_name: model.rule for model in models}

    def set_rule(self, owner_id: int, field_name: str, rule: VisibilityRule) -> None:
        if field_name not in PROFILE_FIELDS:
            msg = f"Unknown profile field {field_name!r}"
            raise ValueError(msg)
        rule = VisibilityRule(rule)
        self.session.merge(
            ProfilePrivacyModel(owner_id=owner_id, field_name=field_name, rule=rule.value)
        )
        self.session.commit()
