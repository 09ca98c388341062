"""EventStore -- the public surface of the indexed event store.

Every mutating call updates the collection, patches the indices, then
recomputes the visible set (and stats, unless only the filter changed)
before returning. Reads hand back that materialized state without walking
the indices again.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Union

from core.bus import Callback, ChangeBus, ChangeKind, StoreChange
from core.models.events import (
    Event,
    EventCreate,
    EventFilter,
    EventStats,
    EventType,
    EventUpdate,
    Snapshot,
)
from core.time_context import TimeContext
from eventindex.collection import EventCollection
from eventindex.filters import evaluate, sort_newest_first
from eventindex.index import EventIndex
from eventindex.snapshot import DEFAULT_SNAPSHOT_LIMIT, export_snapshot, restore
from eventindex.stats import compute_stats

logger = logging.getLogger(__name__)

Payload = Union[EventCreate, Event, Mapping[str, Any]]


class EventStore:
    """In-memory event store with secondary indices.

    Single-writer: calls are synchronous and must be serialized by the
    owner. Usage:

        store = EventStore()
        store.subscribe(on_change)
        event = store.add_event({"type": "error", "severity": "high",
                                 "title": "DB down", "source": "db"})
        store.set_filter(source="db")
        store.get_filtered_events()
    """

    def __init__(
        self,
        time_context: TimeContext | None = None,
        default_filter: EventFilter | None = None,
        snapshot_limit: int = DEFAULT_SNAPSHOT_LIMIT,
        max_events: int | None = None,
        bus: ChangeBus | None = None,
    ) -> None:
        self._clock = time_context or TimeContext.live()
        self._default_filter = default_filter or EventFilter()
        self._snapshot_limit = snapshot_limit
        self._max_events = max_events
        self._bus = bus or ChangeBus()

        self._collection = EventCollection()
        self._index = EventIndex()
        self._filter = self._default_filter.model_copy()
        self._visible: list[Event] = []
        self._stats = EventStats()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def add_event(self, payload: Payload) -> Event | None:
        """Create one event; the store assigns its id and timestamp.

        Returns None only when `max_events` evicts the new event at once.
        """
        added = self.bulk_add_events([payload])
        return added[0] if added else None

    def bulk_add_events(self, payloads: Iterable[Payload]) -> list[Event]:
        """Create several events with a single recompute.

        Equivalent to calling add_event once per payload, in order. Items
        that are already `Event` records keep their id and timestamp; a
        repeated id overwrites the earlier record.

        Every payload is validated before anything is inserted, so a batch
        with one malformed payload changes nothing. Events evicted by
        `max_events` within the same batch are not reported as added.
        """
        events = [self._materialize(p) for p in payloads]
        if not events:
            return []

        for event in events:
            previous = self._collection.insert(event)
            if previous is None:
                self._index.on_insert(event)
            else:
                self._index.on_update(previous, event)

        evicted = set(self._evict_overflow())
        self._refresh()

        added = [e for e in events if e.id not in evicted]
        logger.debug("Added %d event(s), evicted %d", len(added), len(evicted))
        self._notify("added", [e.id for e in added])
        return added

    def _materialize(self, payload: Payload) -> Event:
        if isinstance(payload, Event):
            return payload.model_copy(deep=True)
        if not isinstance(payload, EventCreate):
            payload = EventCreate.model_validate(payload)
        return payload.to_event(self._clock.current_time)

    def _evict_overflow(self) -> list[str]:
        """Drop the oldest events until the collection fits `max_events`."""
        if self._max_events is None or len(self._collection) <= self._max_events:
            return []
        overflow = len(self._collection) - self._max_events
        oldest = sorted(self._collection, key=lambda e: (e.timestamp, e.id))[:overflow]
        for event in oldest:
            self._collection.delete(event.id)
            self._index.on_delete(event)
        return [e.id for e in oldest]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update_event(
        self,
        event_id: str,
        changes: EventUpdate | Mapping[str, Any],
    ) -> Event | None:
        """Apply `changes` to an event. Unknown ids are a silent no-op."""
        if not isinstance(changes, EventUpdate):
            changes = EventUpdate.model_validate(changes)

        current = self._collection.get(event_id)
        if current is None:
            logger.debug("Update for unknown event %s ignored", event_id)
            return None

        updated = changes.apply(current)
        self._collection.replace(event_id, updated)
        self._index.on_update(current, updated)
        self._refresh()
        self._notify("updated", [event_id])
        return updated

    def acknowledge_event(self, event_id: str) -> Event | None:
        return self.update_event(event_id, EventUpdate(acknowledged=True))

    def mark_resolved(self, event_id: str) -> Event | None:
        """Alias of acknowledge_event."""
        return self.acknowledge_event(event_id)

    def acknowledge_events(self, event_ids: Iterable[str]) -> list[str]:
        """Acknowledge many events with one recompute. Returns changed ids."""
        changed: list[str] = []
        for event_id in event_ids:
            current = self._collection.get(event_id)
            if current is None or current.acknowledged:
                continue
            updated = current.model_copy(update={"acknowledged": True})
            self._collection.replace(event_id, updated)
            self._index.on_update(current, updated)
            changed.append(event_id)

        if changed:
            self._refresh()
            self._notify("updated", changed)
        return changed

    def remove_event(self, event_id: str) -> Event | None:
        """Delete an event. Unknown ids are a silent no-op."""
        removed = self._collection.delete(event_id)
        if removed is None:
            logger.debug("Remove for unknown event %s ignored", event_id)
            return None

        self._index.on_delete(removed)
        self._refresh()
        self._notify("removed", [event_id])
        return removed

    def clear_all(self) -> None:
        """Drop every event. The filter is kept."""
        removed = list(self._collection.ids())
        self._collection.clear()
        self._index.clear()
        self._refresh()
        self._notify("cleared", removed)

    # ------------------------------------------------------------------
    # Filters (stats are filter-independent and not recomputed here)
    # ------------------------------------------------------------------

    def set_filter(self, **changes: Any) -> EventFilter:
        """Merge `changes` into the active filter, e.g. set_filter(type="error").

        Passing None for a selector resets it to "any".
        """
        merged = {**self._filter.model_dump(), **changes}
        self._filter = EventFilter.model_validate(merged)
        self._refresh(stats=False)
        self._notify("filter_changed", [])
        return self._filter

    def clear_filters(self) -> EventFilter:
        """Reset to the store's default filter."""
        self._filter = self._default_filter.model_copy()
        self._refresh(stats=False)
        self._notify("filter_changed", [])
        return self._filter

    @property
    def filter(self) -> EventFilter:
        return self._filter.model_copy()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_filtered_events(self) -> list[Event]:
        """The visible set, newest first."""
        return list(self._visible)

    def get_unacknowledged_count(self) -> int:
        return self._stats.unacknowledged

    @property
    def stats(self) -> EventStats:
        return self._stats.model_copy(deep=True)

    def get_event(self, event_id: str) -> Event | None:
        return self._collection.get(event_id)

    def events_by_type(self, event_type: EventType) -> list[Event]:
        """Every event of `event_type`, ignoring the active filter."""
        ids = self._index.bucket("type", event_type) or set()
        return [self._collection.get(i) for i in sort_newest_first(self._collection, ids)]

    @property
    def index(self) -> EventIndex:
        return self._index

    def all_events(self) -> list[Event]:
        return list(self._collection)

    def __len__(self) -> int:
        return len(self._collection)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def export(self, limit: int | None = None) -> Snapshot:
        """Snapshot of the active filter and the most recent events."""
        snapshot = export_snapshot(
            self._collection,
            self._filter,
            self._snapshot_limit if limit is None else limit,
        )
        logger.info("Exported snapshot with %d event(s)", len(snapshot.events))
        return snapshot

    def import_snapshot(self, snapshot: Snapshot | Mapping[str, Any]) -> None:
        """Replace all state with the snapshot's events and filter.

        Indices and derived state are rebuilt from the restored records;
        nothing from before the import survives.
        """
        events, event_filter = restore(snapshot)

        self._collection = EventCollection()
        for event in events:
            self._collection.insert(event)
        self._index.rebuild(self._collection)
        self._filter = event_filter or self._default_filter.model_copy()
        self._evict_overflow()
        self._refresh()

        logger.info("Imported snapshot with %d event(s)", len(self._collection))
        self._notify("imported", [e.id for e in self._collection])

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callback) -> None:
        self._bus.subscribe(callback)

    def unsubscribe(self, callback: Callback) -> None:
        self._bus.unsubscribe(callback)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _refresh(self, stats: bool = True) -> None:
        """Recompute the visible set (and optionally stats)."""
        now = self._clock.current_time
        visible_ids = evaluate(self._index, self._filter, self._collection, now)
        self._visible = [self._collection.get(i) for i in visible_ids]
        if stats:
            self._stats = compute_stats(self._collection)

    def _notify(self, kind: ChangeKind, event_ids: list[str]) -> None:
        self._bus.publish(StoreChange(
            kind=kind,
            event_ids=event_ids,
            visible_count=len(self._visible),
            total=len(self._collection),
        ))
