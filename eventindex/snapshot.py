"""Snapshot codec -- bounded export and defensive restore.

Export keeps the most recent `limit` events by timestamp (newest first),
not whatever prefix the collection happens to iterate in. Restore treats
unparseable entries as absent instead of failing the whole import.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from core.models.events import Event, EventFilter, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_LIMIT = 500


def export_snapshot(
    events: Iterable[Event],
    event_filter: EventFilter,
    limit: int = DEFAULT_SNAPSHOT_LIMIT,
) -> Snapshot:
    """Capture the filter and the `limit` newest events."""
    ordered = sorted(events, key=lambda e: (e.timestamp, e.id), reverse=True)
    kept = ordered[: max(limit, 0)]
    if len(ordered) > len(kept):
        logger.info(
            "Snapshot truncated: kept %d of %d event(s)", len(kept), len(ordered)
        )
    return Snapshot(
        filter=event_filter.model_copy(),
        events=[e.model_copy(deep=True) for e in kept],
    )


def restore(
    snapshot: Snapshot | Mapping[str, Any],
) -> tuple[list[Event], EventFilter | None]:
    """Parse a snapshot into (events, filter).

    The filter is None when absent or unparseable; the caller substitutes
    its default. Events with a repeated id resolve last-wins.
    """
    if isinstance(snapshot, Snapshot):
        return _dedupe([e.model_copy(deep=True) for e in snapshot.events]), snapshot.filter.model_copy()

    if not isinstance(snapshot, Mapping):
        logger.warning("Ignoring snapshot of type %s", type(snapshot).__name__)
        return [], None

    event_filter: EventFilter | None = None
    raw_filter = snapshot.get("filter")
    if raw_filter is not None:
        try:
            event_filter = EventFilter.model_validate(raw_filter)
        except ValidationError as e:
            logger.warning("Ignoring unparseable snapshot filter: %s", e)

    raw_events = snapshot.get("events") or []
    if not isinstance(raw_events, list):
        logger.warning("Ignoring snapshot events of type %s", type(raw_events).__name__)
        raw_events = []

    events: list[Event] = []
    skipped = 0
    for raw in raw_events:
        # id and timestamp are never re-assigned on restore
        if not isinstance(raw, Mapping) or raw.get("id") is None or raw.get("timestamp") is None:
            skipped += 1
            continue
        try:
            events.append(Event.model_validate(raw))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d unparseable event(s) in snapshot", skipped)

    return _dedupe(events), event_filter


def _dedupe(events: list[Event]) -> list[Event]:
    by_id: dict[str, Event] = {}
    for event in events:
        by_id[event.id] = event
    return list(by_id.values())
