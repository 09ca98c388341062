"""TimeContext -- the clock the event store reads.

In live mode, current_time is always real 'now'.
In frozen mode, current_time is pinned and only moves when advanced, which
makes creation timestamps and lookback cutoffs deterministic.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel, Field


class TimeContext(BaseModel):
    """Source of 'now' for timestamp assignment and lookback windows."""

    frozen_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    mode: Literal["live", "frozen"] = "live"

    @classmethod
    def live(cls) -> TimeContext:
        """Create a live TimeContext that follows the wall clock."""
        return cls(mode="live")

    @classmethod
    def at(cls, dt: datetime) -> TimeContext:
        """Create a frozen TimeContext pinned at `dt`."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return cls(frozen_at=dt, mode="frozen")

    @property
    def current_time(self) -> datetime:
        if self.mode == "live":
            return datetime.now(timezone.utc)
        return self.frozen_at

    def advance(self, delta: timedelta) -> datetime:
        """Move a frozen clock forward (only valid in frozen mode)."""
        if self.mode != "frozen":
            raise RuntimeError("Cannot advance a live clock")
        self.frozen_at = self.frozen_at + delta
        return self.frozen_at

    @property
    def is_frozen(self) -> bool:
        return self.mode == "frozen"
