from __future__ import annotations

import itertools
from datetime import datetime, timezone

import pytest

from crypto_history.core.aggregator import HistoryAggregator, merge_series
from crypto_history.core.errors import EmptyResultError, SymbolNotSupportedError
from crypto_history.core.planner import plan
from crypto_history.core.windows import resolve
from crypto_history.models.history import PricePoint
from crypto_history.models.shared import SamplingInterval, Symbol, TimeWindow
from tests.stubs import StubFetchClient, failing, in_range_points, make_points

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
HOUR = SamplingInterval.HOUR_1
MINUTE = SamplingInterval.MINUTE_1


def _open_times(series) -> list[int]:
    return [point.open_time for point in series]


def test_one_week_single_chunk_yields_full_series():
    range_ = resolve(TimeWindow.WEEK_1, NOW)
    points = make_points(range_.start_time, 168, HOUR)
    client = StubFetchClient(responses=[points])
    aggregator = HistoryAggregator(client)

    result = aggregator.aggregate("BTC", "1W", 1000, NOW)

    assert len(client.calls) == 1
    assert len(result.series) == 168
    assert _open_times(result.series) == sorted(_open_times(result.series))
    assert result.partial is False
    assert result.failed_chunks == ()
    assert result.window is TimeWindow.WEEK_1


def test_one_day_with_failed_first_chunk_is_partial():
    range_ = resolve(TimeWindow.DAY_1, NOW)
    second_start = range_.start_time + 1000 * MINUTE.milliseconds
    client = StubFetchClient(responses=[failing(), make_points(second_start, 440, MINUTE)])
    aggregator = HistoryAggregator(client)

    result = aggregator.aggregate("BTC", TimeWindow.DAY_1, 1000, NOW)

    assert result.partial is True
    assert len(result.series) == 440
    assert len(result.failed_chunks) == 1
    assert result.failed_chunks[0].range_start == range_.start_time


def test_every_chunk_is_attempted_once_in_ascending_order():
    client = StubFetchClient(responses=[failing(), failing(), failing()])
    aggregator = HistoryAggregator(client, max_points_per_request=500)

    result = aggregator.aggregate("ETH", TimeWindow.DAY_1, now=NOW)

    starts = [call.range_start for call in client.calls]
    assert len(client.calls) == 3
    assert starts == sorted(starts)
    assert all(call.interval is MINUTE for call in client.calls)
    assert result.is_empty
    assert len(result.failed_chunks) == 3


def test_empty_result_is_reported_by_require_series():
    client = StubFetchClient(responses=[[]])
    result = HistoryAggregator(client).aggregate("BTC", "1W", now=NOW)

    assert result.partial is False
    with pytest.raises(EmptyResultError):
        result.require_series()


def test_non_transient_domain_errors_are_recorded_per_chunk():
    client = StubFetchClient(responses=[SymbolNotSupportedError("Invalid symbol.")])

    result = HistoryAggregator(client).aggregate("NOPE", "1W", now=NOW)

    assert result.partial is True
    assert result.series == ()


def test_upstream_symbol_appends_quote_currency():
    client = StubFetchClient(responses=[[]])

    HistoryAggregator(client).aggregate("btc", "1W", now=NOW)

    assert client.calls[0].symbol == "BTCUSDT"


def test_quote_asset_prices_are_synthesized():
    range_ = resolve(TimeWindow.WEEK_1, NOW)
    client = StubFetchClient(responses=[make_points(range_.start_time, 5, HOUR, price="65000.12")])

    result = HistoryAggregator(client).aggregate("usdt", "1W", now=NOW)

    assert client.calls[0].symbol == "BTCUSDT"
    assert len(result.series) == 5
    for point in result.series:
        assert (point.open, point.high, point.low, point.close) == ("1.0", "1.0", "1.0", "1.0")
    assert result.series[0].open_time == range_.start_time


def test_duplicates_across_chunks_keep_first_seen_point():
    range_ = resolve(TimeWindow.DAY_1, NOW)
    first = make_points(range_.start_time, 1000, MINUTE, price="1")
    overlap = make_points(first[-1].open_time, 441, MINUTE, price="2")
    client = StubFetchClient(responses=[first, overlap])

    result = HistoryAggregator(client).aggregate(Symbol("BTC"), "24H", now=NOW)

    assert len(result.series) == 1440
    assert result.series[999].close == "1"
    assert result.series[1000].close == "2"


def test_out_of_order_points_are_sorted():
    range_ = resolve(TimeWindow.DAY_1, NOW)
    client = StubFetchClient(
        responses=[
            list(reversed(in_range_points(*plan(range_)[0], MINUTE))),
            list(reversed(in_range_points(*plan(range_)[1], MINUTE))),
        ]
    )

    result = HistoryAggregator(client).aggregate("BTC", "24H", now=NOW)

    assert _open_times(result.series) == sorted(_open_times(result.series))
    assert len(set(_open_times(result.series))) == len(result.series)


def test_chunk_that_fails_midway_contributes_nothing():
    range_ = resolve(TimeWindow.WEEK_1, NOW)

    def broken_stream(range_start, range_end, interval):
        yield from make_points(range_start, 3, interval)
        raise failing("connection reset")

    client = StubFetchClient(responses=[broken_stream])

    result = HistoryAggregator(client).aggregate("BTC", "1W", now=NOW)

    assert result.series == ()
    assert result.failed_chunks == (plan(range_)[0],)


def test_clock_supplies_now_when_not_given():
    client = StubFetchClient(responses=[[]])
    aggregator = HistoryAggregator(client, clock=lambda: NOW)

    result = aggregator.aggregate("BTC", "1W")

    assert result.range == resolve(TimeWindow.WEEK_1, NOW)


def test_merge_is_idempotent():
    points = make_points(0, 10, HOUR)

    once = merge_series((), points)
    twice = merge_series(once, points)

    assert once == twice
    assert len(once) == 10


def test_merge_is_order_independent_for_distinct_chunks():
    chunks = [make_points(index * 4 * HOUR.milliseconds, 4, HOUR) for index in range(3)]
    expected = merge_series((), [point for chunk in chunks for point in chunk])

    for permutation in itertools.permutations(chunks):
        series: tuple[PricePoint, ...] = ()
        for chunk in permutation:
            series = merge_series(series, chunk)
        assert series == expected


def test_rejects_non_positive_cap():
    with pytest.raises(ValueError):
        HistoryAggregator(StubFetchClient(), max_points_per_request=0)


def test_zero_cap_per_call_is_rejected():
    aggregator = HistoryAggregator(StubFetchClient())

    with pytest.raises(ValueError):
        aggregator.aggregate("BTC", "24H", 0, NOW)
