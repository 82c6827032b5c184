"""Fan-out of relationship mutations to the parties that cache them."""

from __future__ import annotations

import logging
import threading

from socialprofile.domain.interfaces import ChangeListener

logger = logging.getLogger(__name__)


class RelationshipChangeNotifier:
    """Keep the listeners interested in relationship changes of any owner."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: ChangeListener) -> None:
        """Register ``listener``; registering the same callable twice is a no-op."""

        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        """Remove ``listener`` if it is registered."""

        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify(self, owner_id: int) -> None:
        """Call every listener with ``owner_id`` once the change is committed."""

        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(owner_id)
            except Exception:
                logger.exception(
                    "Relationship change listener failed for actor %s", owner_id
                )

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()


relationship_change_notifier = RelationshipChangeNotifier()


__all__ = ["RelationshipChangeNotifier", "relationship_change_notifier"]
