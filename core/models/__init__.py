"""Pydantic data models shared across all components."""

from core.models.events import (
    DIMENSIONS,
    EVENT_TYPES,
    SEVERITIES,
    Event,
    EventCreate,
    EventFilter,
    EventStats,
    EventUpdate,
    Snapshot,
)

__all__ = [
    "DIMENSIONS",
    "EVENT_TYPES",
    "SEVERITIES",
    "Event",
    "EventCreate",
    "EventFilter",
    "EventStats",
    "EventUpdate",
    "Snapshot",
]
