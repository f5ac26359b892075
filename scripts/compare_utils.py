"""Shared helpers for manual aggregator-vs-CCXT comparisons."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
import sys
from typing import Callable, Iterable, Sequence

import ccxt  # type: ignore

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from crypto_history.contracts.history.interface import HistoryFetchClient
from crypto_history.exchanges.binance.klines import BINANCE_US_BASE_URL, BinanceKlineClient


@dataclass(slots=True)
class ProviderCase:
    name: str
    source_factory: Callable[[], HistoryFetchClient]
    ccxt_factory: Callable[[dict[str, object]], ccxt.Exchange]
    ccxt_symbol: str


CASES: Sequence[ProviderCase] = (
    ProviderCase(
        name="binance",
        source_factory=BinanceKlineClient,
        ccxt_factory=ccxt.binance,
        ccxt_symbol="BTC/USDT",
    ),
    ProviderCase(
        name="binance_us",
        source_factory=lambda: BinanceKlineClient(base_url=BINANCE_US_BASE_URL),
        ccxt_factory=ccxt.binanceus,
        ccxt_symbol="BTC/USDT",
    ),
)


def iter_cases(targets: Iterable[str] | None = None) -> Iterable[ProviderCase]:
    if not targets:
        yield from CASES
        return
    selected = {t.lower() for t in targets}
    for case in CASES:
        if case.name.lower() in selected:
            yield case


def iso_ms(ts_ms: int | float | None) -> str:
    if ts_ms is None:
        return "<missing>"
    return datetime.fromtimestamp(float(ts_ms) / 1000, tz=timezone.utc).isoformat()


BASE_ASSET = "BTC"
