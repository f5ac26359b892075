"""Split a resolved range into upstream-sized chunks."""

from __future__ import annotations

from collections.abc import Iterator

from ..models.history import Chunk, ResolvedRange
from ..models.shared import SamplingInterval

DEFAULT_MAX_POINTS_PER_REQUEST = 1000


def plan(
    range_: ResolvedRange,
    max_points_per_request: int = DEFAULT_MAX_POINTS_PER_REQUEST,
) -> list[Chunk]:
    """Return the ordered chunks covering ``range_``."""

    return list(
        iter_chunks(range_.start_time, range_.end_time, range_.interval, max_points_per_request)
    )


def iter_chunks(
    start_time: int,
    end_time: int,
    interval: SamplingInterval,
    max_points_per_request: int = DEFAULT_MAX_POINTS_PER_REQUEST,
) -> Iterator[Chunk]:
    """Yield contiguous inclusive chunks from ``start_time`` to ``end_time``.

    Each chunk spans ``max_points_per_request`` intervals minus one millisecond,
    so no chunk can hold more open times than the cap. The last chunk is
    clamped to ``end_time``. An empty or inverted range yields nothing.
    """

    if max_points_per_request <= 0:
        raise ValueError("max_points_per_request must be a positive integer")
    if start_time >= end_time:
        return
    span = max_points_per_request * interval.milliseconds
    # Bounds are inclusive, so a width that is an exact multiple of the span
    # still needs a final chunk holding ``end_time``.
    count = (end_time - start_time) // span + 1
    for index in range(count):
        chunk_start = start_time + index * span
        yield Chunk(chunk_start, min(end_time, chunk_start + span - 1))
