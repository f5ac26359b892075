"""Stitch chunked kline fetches into one continuous price series."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from ..contracts.history.interface import HistoryFetchClient
from ..models.history import AggregationResult, Chunk, PricePoint, Series
from ..models.shared import QUOTE_CURRENCY, Symbol, TimeWindow
from .errors import MarketDataError
from .planner import DEFAULT_MAX_POINTS_PER_REQUEST, plan
from .windows import resolve

logger = logging.getLogger(__name__)

QUOTE_ASSET_PRICE = "1.0"

Clock = Callable[[], datetime]


def merge_series(existing: Iterable[PricePoint], incoming: Iterable[PricePoint]) -> Series:
    """Merge two point collections; the first point seen for an ``open_time`` wins.

    The result is sorted ascending by ``open_time``. Merging the same points
    twice leaves the series unchanged.
    """

    merged: dict[int, PricePoint] = {}
    _merge_into(merged, existing)
    _merge_into(merged, incoming)
    return _sorted_series(merged)


class HistoryAggregator:
    """Drive the chunk plan for one symbol and window and merge what succeeds.

    Every planned chunk is attempted exactly once. A failed chunk is recorded
    and skipped; it never aborts the run. Retries belong to the injected client
    (see :class:`~crypto_history.core.retry.RetryingFetchClient`).
    """

    def __init__(
        self,
        client: HistoryFetchClient,
        *,
        max_points_per_request: int = DEFAULT_MAX_POINTS_PER_REQUEST,
        quote_currency: str = QUOTE_CURRENCY,
        clock: Clock | None = None,
    ) -> None:
        if max_points_per_request <= 0:
            raise ValueError("max_points_per_request must be a positive integer")
        self._client = client
        self._max_points = max_points_per_request
        self._quote_currency = quote_currency
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def client(self) -> HistoryFetchClient:
        return self._client

    def aggregate(
        self,
        symbol: str | Symbol,
        window: TimeWindow | str,
        max_points_per_request: int | None = None,
        now: datetime | None = None,
    ) -> AggregationResult:
        symbol = self._symbol(symbol)
        window = TimeWindow.parse(window)
        range_ = resolve(window, now or self._clock())
        if max_points_per_request is None:
            max_points_per_request = self._max_points
        chunks = plan(range_, max_points_per_request)

        accumulated: dict[int, PricePoint] = {}
        failed: list[Chunk] = []
        for chunk in chunks:
            try:
                # Materialized inside the guard so a chunk contributes all of its
                # points or none of them.
                points = list(
                    self._client.fetch(
                        symbol.upstream_pair,
                        chunk.range_start,
                        chunk.range_end,
                        range_.interval,
                    )
                )
            except MarketDataError as exc:
                logger.warning(
                    "Chunk %d-%d for %s failed: %s",
                    chunk.range_start,
                    chunk.range_end,
                    symbol.upstream_pair,
                    exc,
                )
                failed.append(chunk)
                continue
            _merge_into(accumulated, points)

        series = _sorted_series(accumulated)
        if symbol.is_quote_asset:
            series = tuple(_as_quote_asset(point) for point in series)

        logger.info(
            "Aggregated %d points for %s over %s from %d chunks (%d failed)",
            len(series),
            symbol.pair,
            window.value,
            len(chunks),
            len(failed),
        )
        return AggregationResult(
            symbol=symbol,
            window=window,
            range=range_,
            series=series,
            failed_chunks=tuple(failed),
        )

    def _symbol(self, symbol: str | Symbol) -> Symbol:
        if isinstance(symbol, Symbol):
            return symbol
        return Symbol(symbol, self._quote_currency)


def _merge_into(accumulated: dict[int, PricePoint], points: Iterable[PricePoint]) -> None:
    for point in points:
        accumulated.setdefault(point.open_time, point)


def _sorted_series(points: dict[int, PricePoint]) -> Series:
    return tuple(sorted(points.values(), key=lambda point: point.open_time))


def _as_quote_asset(point: PricePoint) -> PricePoint:
    return point._replace(
        open=QUOTE_ASSET_PRICE,
        high=QUOTE_ASSET_PRICE,
        low=QUOTE_ASSET_PRICE,
        close=QUOTE_ASSET_PRICE,
    )
