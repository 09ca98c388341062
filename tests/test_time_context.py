from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import T0
from core.time_context import TimeContext


def test_frozen_clock_advances():
    clock = TimeContext.at(T0)
    assert clock.current_time == T0
    assert clock.advance(timedelta(minutes=5)) == T0 + timedelta(minutes=5)
    assert clock.is_frozen


def test_naive_datetime_is_utc():
    assert TimeContext.at(datetime(2026, 10, 19, 12, 0)).current_time == T0


def test_live_clock_cannot_advance():
    clock = TimeContext.live()
    assert clock.current_time.tzinfo is timezone.utc
    with pytest.raises(RuntimeError):
        clock.advance(timedelta(seconds=1))
