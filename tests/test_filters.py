from __future__ import annotations

from datetime import timedelta

from conftest import T0
from core.models.events import Event, EventFilter
from eventindex.collection import EventCollection
from eventindex.filters import evaluate, intersect, matches
from eventindex.index import EventIndex


def build(*events: Event) -> tuple[EventIndex, EventCollection]:
    index = EventIndex()
    collection = EventCollection()
    for e in events:
        collection.insert(e)
        index.on_insert(e)
    return index, collection


def make(event_id, minutes_ago=0, **fields) -> Event:
    data = {"type": "info", "severity": "low", "title": "t", "source": "db"}
    data.update(fields)
    return Event(id=event_id, timestamp=T0 - timedelta(minutes=minutes_ago), **data)


def test_intersect_is_symmetric():
    small = {"a", "b"}
    large = {"b", "c", "d", "e"}
    assert intersect(small, large) == {"b"}
    assert intersect(large, small) == {"b"}
    assert intersect(set(), large) == set()


def test_no_filter_returns_everything_newest_first():
    index, collection = build(make("old", 30), make("new", 0), make("mid", 10))
    assert evaluate(index, EventFilter(), collection, T0) == ["new", "mid", "old"]


def test_missing_bucket_short_circuits():
    index, collection = build(make("a"), make("b", type="error"))
    assert evaluate(index, EventFilter(severity="critical"), collection, T0) == []
    assert evaluate(index, EventFilter(type="error", source="nowhere"), collection, T0) == []


def test_discrete_selectors_intersect():
    index, collection = build(
        make("a", type="error", source="db"),
        make("b", type="error", source="auth"),
        make("c", type="info", source="db"),
        make("d", type="error", source="db", acknowledged=True),
    )
    result = evaluate(index, EventFilter(type="error", source="db", acknowledged=False), collection, T0)
    assert result == ["a"]


def test_lookback_cutoff_is_inclusive():
    index, collection = build(make("edge", 60), make("outside", 61), make("inside", 5))
    result = evaluate(index, EventFilter(lookback=timedelta(hours=1)), collection, T0)
    assert result == ["inside", "edge"]


def test_lookback_with_no_recent_events():
    index, collection = build(make("a", 600))
    assert evaluate(index, EventFilter(type="info", lookback="1h"), collection, T0) == []


def test_matches_agrees_with_selectors():
    event = make("a", 10, type="warning", severity="high", source="k8s")
    assert matches(event, EventFilter(type="warning", severity="high"), T0)
    assert not matches(event, EventFilter(source="db"), T0)
    assert not matches(event, EventFilter(lookback="5m"), T0)
    assert matches(event, EventFilter(lookback="15m"), T0)
