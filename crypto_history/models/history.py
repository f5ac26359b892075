"""Data contracts for historical price series."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple, TypeAlias

from ..core.errors import EmptyResultError
from .shared import SamplingInterval, Symbol, TimeWindow

# Prices stay as the decimal text the upstream sent; callers convert when they
# need arithmetic.


class PricePoint(NamedTuple):
    """One kline, identified within a series by ``open_time`` (ms)."""

    open_time: int
    open: str
    high: str
    low: str
    close: str
    close_time: int

    @property
    def decimal_close(self) -> Decimal:
        return Decimal(self.close)


# Ascending by ``open_time`` and duplicate free.
Series: TypeAlias = tuple[PricePoint, ...]


class Chunk(NamedTuple):
    """Inclusive ``[range_start, range_end]`` sub-range requested in one call."""

    range_start: int
    range_end: int

    def points_at(self, interval: SamplingInterval) -> int:
        """Maximum number of points whose open time falls inside the chunk."""

        return (self.range_end - self.range_start) // interval.milliseconds + 1


@dataclass(frozen=True, slots=True)
class ResolvedRange:
    """Concrete millisecond range and sampling interval for a time window."""

    start_time: int
    end_time: int
    interval: SamplingInterval

    def __post_init__(self) -> None:
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be earlier than end_time")

    @property
    def width(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Outcome of one aggregation run.

    ``series`` is the best-effort union of every chunk that was fetched
    successfully; ``failed_chunks`` lists the sub-ranges that were not.
    """

    symbol: Symbol
    window: TimeWindow
    range: ResolvedRange
    series: Series = ()
    failed_chunks: tuple[Chunk, ...] = ()

    @property
    def partial(self) -> bool:
        return bool(self.failed_chunks)

    @property
    def is_empty(self) -> bool:
        return not self.series

    def require_series(self) -> Series:
        """Return the series, raising :class:`EmptyResultError` when there is none."""

        if not self.series:
            raise EmptyResultError(
                f"No data available for {self.symbol.base} over {self.window.value}"
            )
        return self.series
