"""Compare an aggregated 1W series against CCXT hourly candles."""
from __future__ import annotations

from typing import Iterable

import sys

import ccxt  # type: ignore

from compare_utils import BASE_ASSET, iso_ms, iter_cases
from crypto_history.core.aggregator import HistoryAggregator
from crypto_history.models.shared import TimeWindow


def _print_series(label: str, series: list[tuple]) -> None:
    print(label)
    for ts, _open, _high, _low, close, *_rest in series[-5:]:
        print(f"  {iso_ms(ts)} close={close}")


def main(targets: Iterable[str] | None = None) -> None:
    for case in iter_cases(targets):
        print(f"\n=== {case.name} 1W history ===")
        source = case.source_factory()
        since = None
        try:
            result = HistoryAggregator(source).aggregate(BASE_ASSET, TimeWindow.WEEK_1)
            since = result.range.start_time
            print(f"points={len(result.series)} partial={result.partial}")
            _print_series("aggregator", list(result.series))
        except Exception as exc:
            print(f"aggregator error: {exc}")
        finally:
            try:
                source.close()
            except Exception:
                pass

        exchange = case.ccxt_factory({"enableRateLimit": True})
        try:
            klines = exchange.fetch_ohlcv(case.ccxt_symbol, timeframe="1h", since=since, limit=200)
            _print_series("ccxt", [tuple(k) for k in klines])
        except ccxt.BaseError as exc:
            print(f"ccxt error: {exc}")
        finally:
            try:
                exchange.close()
            except Exception:
                pass


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:] or None)
