from __future__ import annotations

from datetime import timedelta

import pytest

from core.duration import format_duration, parse_duration


@pytest.mark.parametrize("text,expected", [
    ("60s", timedelta(seconds=60)),
    ("15m", timedelta(minutes=15)),
    (" 24H ", timedelta(hours=24)),
    ("7d", timedelta(days=7)),
    ("2w", timedelta(weeks=2)),
])
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "24", "h", "1.5h", "-1h", None])
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_format_duration():
    assert format_duration(None) == "unbounded"
    assert format_duration(timedelta(hours=24)) == "1d"
    assert format_duration(timedelta(minutes=90)) == "90m"
    assert format_duration(timedelta(seconds=45)) == "45s"
