"""Summary counts -- pure Python, one pass over the collection."""

from __future__ import annotations

from typing import Iterable

from core.models.events import Event, EventStats


def compute_stats(events: Iterable[Event]) -> EventStats:
    """Count events in total, per type, per severity and unacknowledged.

    Only values actually present get a key in `by_type` / `by_severity`.
    """
    total = 0
    by_type: dict[str, int] = {}
    by_severity: dict[str, int] = {}
    unacknowledged = 0

    for event in events:
        total += 1
        by_type[event.type] = by_type.get(event.type, 0) + 1
        by_severity[event.severity] = by_severity.get(event.severity, 0) + 1
        if not event.acknowledged:
            unacknowledged += 1

    return EventStats(
        total=total,
        by_type=by_type,
        by_severity=by_severity,
        unacknowledged=unacknowledged,
    )
