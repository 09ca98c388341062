"""Filter evaluation -- intersect index buckets, then sort newest first."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from core.models.events import Event, EventFilter
from eventindex.collection import EventCollection
from eventindex.index import EventIndex


def intersect(a: set[str], b: set[str]) -> set[str]:
    """Intersect by walking the smaller set and probing the larger."""
    smaller, larger = (a, b) if len(a) <= len(b) else (b, a)
    return {event_id for event_id in smaller if event_id in larger}


def evaluate(
    index: EventIndex,
    event_filter: EventFilter,
    collection: EventCollection,
    now: datetime,
) -> list[str]:
    """Return the ids visible under `event_filter`, newest first."""
    candidate_sets: list[set[str]] = []

    for dimension, value in event_filter.selectors().items():
        ids = index.bucket(dimension, value)
        if ids is None:
            # No live event holds this value
            return []
        candidate_sets.append(ids)

    # Lookback is not bucketed; one scan over the collection
    if event_filter.lookback is not None:
        cutoff = now - event_filter.lookback
        recent = {event.id for event in collection if event.timestamp >= cutoff}
        if not recent:
            return []
        candidate_sets.append(recent)

    if not candidate_sets:
        result: Iterable[str] = collection.ids()
    else:
        result = candidate_sets[0]
        for other in candidate_sets[1:]:
            result = intersect(result, other)
            if not result:
                return []

    return sort_newest_first(collection, result)


def sort_newest_first(collection: EventCollection, ids: Iterable[str]) -> list[str]:
    events = [e for e in (collection.get(i) for i in ids) if e is not None]
    events.sort(key=lambda e: e.timestamp, reverse=True)
    return [e.id for e in events]


def matches(event: Event, event_filter: EventFilter, now: datetime) -> bool:
    """Brute-force predicate equivalent to the indexed path."""
    for dimension, value in event_filter.selectors().items():
        if getattr(event, dimension) != value:
            return False
    if event_filter.lookback is not None:
        return event.timestamp >= now - event_filter.lookback
    return True


def scan(
    events: Iterable[Event],
    event_filter: EventFilter,
    now: datetime,
) -> list[Event]:
    """Linear-scan evaluation, sorted newest first."""
    selected = [e for e in events if matches(e, event_filter, now)]
    selected.sort(key=lambda e: e.timestamp, reverse=True)
    return selected
