"""Secondary indices -- one value -> id-set map per dimension.

Indices are derived state. They are never persisted; a snapshot import
rebuilds them by replaying on_insert for every restored event.
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Iterable

from core.models.events import DIMENSIONS, Event

logger = logging.getLogger(__name__)

Buckets = dict[Hashable, set[str]]


class EventIndex:
    """Keeps per-dimension buckets in step with the event collection.

    Invariant: every live event id sits in exactly one bucket per
    dimension (the one matching its current value) and no bucket is empty.
    """

    def __init__(self, dimensions: Iterable[str] = DIMENSIONS) -> None:
        self._dimensions = tuple(dimensions)
        self._buckets: dict[str, Buckets] = {d: {} for d in self._dimensions}

    @property
    def dimensions(self) -> tuple[str, ...]:
        return self._dimensions

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def on_insert(self, event: Event) -> None:
        for dimension in self._dimensions:
            buckets = self._buckets[dimension]
            value = event.dimension(dimension)
            if value not in buckets:
                buckets[value] = set()
            buckets[value].add(event.id)

    def on_delete(self, event: Event) -> None:
        for dimension in self._dimensions:
            buckets = self._buckets[dimension]
            value = event.dimension(dimension)
            ids = buckets.get(value)
            if ids is None:
                continue
            ids.discard(event.id)
            if not ids:
                del buckets[value]

    def on_update(self, old: Event, new: Event) -> None:
        """Re-index an event whose fields changed.

        Delete-then-insert rather than a per-dimension diff: a timestamp
        change moves the event to another time bucket.
        """
        self.on_delete(old)
        self.on_insert(new)

    def rebuild(self, events: Iterable[Event]) -> None:
        """Discard all buckets and re-index `events` from scratch."""
        self.clear()
        count = 0
        for event in events:
            self.on_insert(event)
            count += 1
        logger.debug("Rebuilt indices for %d event(s)", count)

    def clear(self) -> None:
        self._buckets = {d: {} for d in self._dimensions}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def bucket(self, dimension: str, value: Any) -> set[str] | None:
        """Ids holding `value` for `dimension`, or None if no event does.

        The returned set is live index state; callers must not mutate it.
        """
        return self._buckets[dimension].get(value)

    def values(self, dimension: str) -> list[Hashable]:
        return list(self._buckets[dimension])

    def snapshot(self) -> dict[str, dict[Hashable, frozenset[str]]]:
        """Immutable copy of every bucket, for comparison and inspection."""
        return {
            dimension: {value: frozenset(ids) for value, ids in buckets.items()}
            for dimension, buckets in self._buckets.items()
        }
