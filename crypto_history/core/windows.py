"""Resolve symbolic time windows into concrete millisecond ranges."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..models.history import ResolvedRange
from ..models.shared import TimeWindow


def resolve(window: TimeWindow | str, now: datetime | None = None) -> ResolvedRange:
    """Map ``window`` to ``[now - duration, now]`` with its sampling interval.

    ``end_time`` is truncated to whole seconds; ``start_time`` is not. Naive
    datetimes are interpreted as UTC.
    """

    window = TimeWindow.parse(window)
    now_ms = to_milliseconds(now or datetime.now(timezone.utc))
    duration_ms = int(window.duration.total_seconds()) * 1000
    return ResolvedRange(
        start_time=now_ms - duration_ms,
        end_time=(now_ms // 1000) * 1000,
        interval=window.interval,
    )


def to_milliseconds(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
