"""Canonical id -> Event mapping."""

from __future__ import annotations

from typing import Iterator

from core.models.events import Event


class EventCollection:
    """Owns the authoritative record for every live event.

    Replacing or deleting an unknown id is a no-op. Callers cannot tell
    "nothing happened" from "already gone".
    """

    def __init__(self) -> None:
        self._events: dict[str, Event] = {}

    def insert(self, event: Event) -> Event | None:
        """Store `event`, returning the record it replaced (if the id existed)."""
        previous = self._events.get(event.id)
        self._events[event.id] = event
        return previous

    def replace(self, event_id: str, event: Event) -> Event | None:
        """Overwrite an existing record. Returns the old record, or None."""
        previous = self._events.get(event_id)
        if previous is None:
            return None
        self._events[event_id] = event
        return previous

    def delete(self, event_id: str) -> Event | None:
        return self._events.pop(event_id, None)

    def get(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    def ids(self) -> set[str]:
        return set(self._events)

    def clear(self) -> None:
        self._events.clear()

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events.values())
