"""Event models -- the records held by the indexed event store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.duration import parse_duration

EventType = Literal["info", "warning", "error", "success"]
Severity = Literal["low", "medium", "high", "critical"]

EVENT_TYPES: tuple[str, ...] = ("info", "warning", "error", "success")
SEVERITIES: tuple[str, ...] = ("low", "medium", "high", "critical")

# Index dimensions, in the order filters are applied
DIMENSIONS: tuple[str, ...] = ("type", "severity", "source", "acknowledged", "time_bucket")

_HOUR_SECONDS = 3600


def new_event_id() -> str:
    return f"evt_{uuid4().hex[:12]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Event(BaseModel):
    """An operational event (alert, status change, audit note).

    `id` and `timestamp` are assigned by the store when the event is
    created. Only `type`, `severity`, `source`, `acknowledged` and the
    hour bucket of `timestamp` are indexed. Records are immutable; updates
    produce a new record via model_copy.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_event_id)
    type: EventType
    severity: Severity
    title: str
    description: str = ""
    source: str
    timestamp: datetime = Field(default_factory=utcnow)
    acknowledged: bool = False
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def time_bucket(self) -> int:
        """Whole hours since the Unix epoch."""
        return int(self.timestamp.timestamp() // _HOUR_SECONDS)

    def dimension(self, name: str) -> Any:
        """Return this event's value for an index dimension."""
        if name == "time_bucket":
            return self.time_bucket
        if name not in DIMENSIONS:
            raise KeyError(name)
        return getattr(self, name)


class EventCreate(BaseModel):
    """Payload a producer hands to the store.

    A producer never supplies `id` or `timestamp`; if present they are
    dropped.
    """

    model_config = ConfigDict(extra="ignore")

    type: EventType
    severity: Severity
    title: str
    description: str = ""
    source: str
    acknowledged: bool = False
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None

    def to_event(self, timestamp: datetime) -> Event:
        return Event(timestamp=timestamp, **self.model_dump())


class EventUpdate(BaseModel):
    """Fields an update may change. The event id is never among them."""

    model_config = ConfigDict(extra="forbid")

    type: EventType | None = None
    severity: Severity | None = None
    title: str | None = None
    description: str | None = None
    source: str | None = None
    acknowledged: bool | None = None
    tags: list[str] | None = None
    metadata: dict[str, Any] | None = None
    timestamp: datetime | None = None

    def apply(self, event: Event) -> Event:
        """Return a copy of `event` with the explicitly set fields applied."""
        changes = self.model_dump(exclude_unset=True)
        if changes.get("timestamp") is not None:
            changes["timestamp"] = _as_utc(changes["timestamp"])
        # Dropping a required field is not an update
        for key in [k for k, v in changes.items() if v is None and k != "metadata"]:
            del changes[key]
        return event.model_copy(update=changes)


class EventFilter(BaseModel):
    """Active filter configuration. `None` on any selector means "any"."""

    model_config = ConfigDict(extra="forbid")

    type: EventType | None = None
    severity: Severity | None = None
    source: str | None = None
    acknowledged: bool | None = None
    lookback: timedelta | None = None

    @field_validator("lookback", mode="before")
    @classmethod
    def _parse_lookback(cls, value: Any) -> Any:
        if value in ("", "all"):
            return None
        if isinstance(value, str) and not value.startswith("P"):
            return parse_duration(value)
        return value

    @field_validator("lookback")
    @classmethod
    def _positive_lookback(cls, value: timedelta | None) -> timedelta | None:
        if value is not None and value <= timedelta(0):
            return None
        return value

    def selectors(self) -> dict[str, Any]:
        """Discrete (indexed) selectors that are not "any"."""
        return {
            name: getattr(self, name)
            for name in ("type", "severity", "source", "acknowledged")
            if getattr(self, name) is not None
        }


class EventStats(BaseModel):
    """Summary counts over the whole collection (filter-independent)."""

    total: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)
    unacknowledged: int = 0


class Snapshot(BaseModel):
    """Serializable capture of a bounded subset of events plus the filter."""

    version: int = 1
    exported_at: datetime = Field(default_factory=utcnow)
    filter: EventFilter = Field(default_factory=EventFilter)
    events: list[Event] = Field(default_factory=list)
