from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from core.models.events import DIMENSIONS, EVENT_TYPES, SEVERITIES
from core.time_context import TimeContext
from eventindex.store import EventStore

T0 = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
SOURCES = ("db", "auth", "k8s", "istio")


@pytest.fixture
def clock() -> TimeContext:
    return TimeContext.at(T0)


@pytest.fixture
def store(clock: TimeContext) -> EventStore:
    return EventStore(time_context=clock)


def payload(type="info", severity="low", source="db", title="event", **extra) -> dict:
    return {"type": type, "severity": severity, "source": source, "title": title, **extra}


def random_payload(rng: random.Random) -> dict:
    data = payload(
        type=rng.choice(EVENT_TYPES),
        severity=rng.choice(SEVERITIES),
        source=rng.choice(SOURCES),
        title=f"event {rng.randrange(1000)}",
    )
    if rng.random() < 0.3:
        data["acknowledged"] = True
    return data


def add_spaced(store: EventStore, clock: TimeContext, payloads, step=timedelta(minutes=1)):
    """Add payloads one at a time, advancing the clock between them."""
    events = []
    for p in payloads:
        events.append(store.add_event(p))
        clock.advance(step)
    return events


def assert_index_consistent(store: EventStore) -> None:
    """Every live id is in exactly its own bucket per dimension; no empties."""
    snap = store.index.snapshot()
    live = {e.id: e for e in store.all_events()}
    for dimension in DIMENSIONS:
        buckets = snap[dimension]
        for value, ids in buckets.items():
            assert ids, f"empty bucket {dimension}={value!r}"
            for event_id in ids:
                assert event_id in live, f"dangling {event_id} in {dimension}={value!r}"
                assert live[event_id].dimension(dimension) == value
        for event_id, event in live.items():
            holding = [v for v, ids in buckets.items() if event_id in ids]
            assert holding == [event.dimension(dimension)]
