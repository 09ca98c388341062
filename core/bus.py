"""ChangeBus -- synchronous change notification for the event store.

Callers that render store state subscribe here instead of relying on an
implicit refresh: after every mutation the store publishes a StoreChange
once its visible set and stats are current.
"""

from __future__ import annotations

import logging
from typing import Callable, Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ChangeKind = Literal[
    "added",
    "updated",
    "removed",
    "cleared",
    "filter_changed",
    "imported",
]


class StoreChange(BaseModel):
    """What changed in the store. `event_ids` is empty for filter changes."""

    kind: ChangeKind
    event_ids: list[str] = Field(default_factory=list)
    visible_count: int = 0
    total: int = 0


Callback = Callable[[StoreChange], None]


class ChangeBus:
    """In-process observer list.

    Usage:
        bus = ChangeBus()
        bus.subscribe(render)
        bus.publish(StoreChange(kind="added", event_ids=[...]))
    """

    def __init__(self) -> None:
        self._subscribers: list[Callback] = []

    def publish(self, change: StoreChange) -> None:
        """Deliver a change to every subscriber, in subscription order."""
        if not self._subscribers:
            logger.debug("No subscribers for change: %s", change.kind)
            return

        logger.debug(
            "Publishing %s (%d id(s)) to %d subscriber(s)",
            change.kind,
            len(change.event_ids),
            len(self._subscribers),
        )
        for cb in list(self._subscribers):
            self._safe_invoke(cb, change)

    def subscribe(self, callback: Callback) -> None:
        """Register a callback for every store change."""
        self._subscribers.append(callback)
        logger.debug("Subscribed: %s", callback)

    def unsubscribe(self, callback: Callback) -> None:
        """Remove a previously registered callback."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _safe_invoke(self, callback: Callback, change: StoreChange) -> None:
        """Invoke a callback, catching and logging any exceptions."""
        try:
            callback(change)
        except Exception:
            logger.exception("Error in change subscriber for %s", change.kind)

    def subscriber_count(self) -> int:
        return len(self._subscribers)
