"""Use cases deciding which profile fields and activity items a viewer may see."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from socialprofile.domain.entities import (
    ALWAYS_PUBLIC_FIELDS,
    OWNER_ONLY_FIELDS,
    PROFILE_FIELDS,
    ActivityItem,
    RelationshipType,
    Viewer,
    VisibilityRule,
    VisibleFieldSet,
)
from socialprofile.domain.errors import SourceUnavailable
from socialprofile.domain.interfaces import PrivacySettings, RelationshipGraph

logger = logging.getLogger(__name__)

ItemGate = Callable[[ActivityItem], bool]


def default_rule(field_name: str) -> VisibilityRule:
    """Return the rule applied to a field the owner never configured."""

    if field_name in ALWAYS_PUBLIC_FIELDS:
        return VisibilityRule.PUBLIC
    return VisibilityRule.REGISTERED


class VisibilityFilter:
    """Compute visible profile fields and gate feed items for a viewer."""

    def __init__(
        self,
        privacy: PrivacySettings,
        graph: RelationshipGraph | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        self._privacy = privacy
        self._graph = graph
        self._timeout = timeout

    def compute_visible_fields(self, owner_id: int, viewer: Viewer) -> VisibleFieldSet:
        """Return the visibility of every profile field of ``owner_id`` for ``viewer``.

        Precedence: the owner sees everything; otherwise an explicit rule stored
        for the field wins; otherwise the field is visible to registered viewers
        only, unless it is one of :data:`ALWAYS_PUBLIC_FIELDS`.
        """

        if viewer.is_owner_of(owner_id):
            return VisibleFieldSet(
                owner_id=owner_id,
                viewer_id=viewer.actor_id,
                fields={name: True for name in PROFILE_FIELDS},
            )

        rules = self._load_rules(owner_id)
        if rules is None:
            # Without the owner's settings nothing beyond the anonymous view is safe.
            return VisibleFieldSet(
                owner_id=owner_id,
                viewer_id=viewer.actor_id,
                fields={
                    name: name in ALWAYS_PUBLIC_FIELDS and name not in OWNER_ONLY_FIELDS
                    for name in PROFILE_FIELDS
                },
            )

        is_friend: bool | None = None
        fields: dict[str, bool] = {}
        for name in dict.fromkeys((*PROFILE_FIELDS, *rules)):
            if name in OWNER_ONLY_FIELDS:
                fields[name] = False
                continue
            rule = rules.get(name) or default_rule(name)
            if rule is VisibilityRule.FRIENDS and is_friend is None:
                is_friend = self._is_friend(owner_id, viewer)
            fields[name] = _evaluate(rule, viewer, bool(is_friend))

        return VisibleFieldSet(owner_id=owner_id, viewer_id=viewer.actor_id, fields=fields)

    def item_gate(
        self,
        owner_id: int,
        viewer: Viewer,
        visible_fields: VisibleFieldSet | None = None,
    ) -> ItemGate:
        """Return a predicate telling whether ``viewer`` may see a feed item.

        Items are judged against the field set of the actor who generated them.
        Private messages are also shown to the two actors taking part in them.
        """

        field_sets: dict[int, VisibleFieldSet] = {}
        if visible_fields is not None:
            field_sets[owner_id] = visible_fields

        def allowed(item: ActivityItem) -> bool:
            field_name = item.disclosed_field
            if field_name is None:
                return True
            if item.private and viewer.actor_id is not None:
                if viewer.actor_id in (item.actor_id, item.related_actor_id):
                    return True
            subject = field_sets.get(item.actor_id)
            if subject is None:
                subject = self.compute_visible_fields(item.actor_id, viewer)
                field_sets[item.actor_id] = subject
            return subject.is_visible(field_name)

        return allowed

    def _load_rules(self, owner_id: int) -> Mapping[str, VisibilityRule] | None:
        try:
            stored = self._privacy.get(owner_id)
        except (SourceUnavailable, TimeoutError, ConnectionError) as exc:
            logger.warning("Privacy settings unavailable for actor %s: %s", owner_id, exc)
            return None

        rules: dict[str, VisibilityRule] = {}
        for name, rule in stored.items():
            try:
                rules[name] = VisibilityRule(rule)
            except ValueError:
                logger.warning(
                    "Unknown visibility rule %r for field %s of actor %s; hiding the field",
                    rule,
                    name,
                    owner_id,
                )
                rules[name] = VisibilityRule.HIDDEN
        return rules

    def _is_friend(self, owner_id: int, viewer: Viewer) -> bool:
        if self._graph is None or viewer.actor_id is None:
            return False
        try:
            relation = self._graph.relationship_between(
                owner_id, viewer.actor_id, timeout=self._timeout
            )
        except (SourceUnavailable, TimeoutError, ConnectionError) as exc:
            logger.warning(
                "Could not resolve relationship between %s and %s: %s",
                owner_id,
                viewer.actor_id,
                exc,
            )
            return False
        return relation == RelationshipType.FRIEND


def _evaluate(rule: VisibilityRule, viewer: Viewer, is_friend: bool) -> bool:
    if rule is VisibilityRule.PUBLIC:
        return True
    if rule is VisibilityRule.REGISTERED:
        return viewer.is_registered
    if rule is VisibilityRule.FRIENDS:
        return viewer.is_registered and is_friend
    if rule is VisibilityRule.HIDDEN:
        return False
    msg = f"Unhandled visibility rule {rule!r}"
    raise ValueError(msg)


__all__ = ["ItemGate", "VisibilityFilter", "default_rule"]
