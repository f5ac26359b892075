"""Cryptocurrency market history package.

This module exposes the public API for the chunked kline aggregation pipeline,
its fetch-client and catalog interfaces, and the bundled Binance and CoinGecko
sources.
"""

from .contracts.history.interface import HistoryFetchClient
from .contracts.markets.interface import MarketCatalogSource
from .core.aggregator import HistoryAggregator, merge_series
from .core.catalog import MarketCatalog
from .core.coordinator import MarketDataClient
from .core.errors import (
    EmptyResultError,
    IntervalNotSupportedError,
    MarketDataError,
    ResolutionError,
    SymbolNotSupportedError,
    TransientFetchError,
)
from .core.planner import iter_chunks, plan
from .core.publisher import PublishedSeries, SeriesPublisher
from .core.registry import create_history_source, register_history_source
from .core.retry import RetryingFetchClient, RetryPolicy, constant_backoff, exponential_backoff
from .core.windows import resolve
from .exchanges.binance.klines import BinanceKlineClient
from .exchanges.coingecko.markets import CoinGeckoMarketSource
from .models.history import AggregationResult, Chunk, PricePoint, ResolvedRange, Series
from .models.markets import MarketAsset
from .models.shared import HistoryProvider, SamplingInterval, Symbol, TimeWindow

__all__ = [
    "HistoryFetchClient",
    "MarketCatalogSource",
    "HistoryAggregator",
    "merge_series",
    "MarketCatalog",
    "MarketDataClient",
    "SeriesPublisher",
    "PublishedSeries",
    "RetryPolicy",
    "RetryingFetchClient",
    "constant_backoff",
    "exponential_backoff",
    "resolve",
    "plan",
    "iter_chunks",
    "register_history_source",
    "create_history_source",
    "BinanceKlineClient",
    "CoinGeckoMarketSource",
    "AggregationResult",
    "Chunk",
    "PricePoint",
    "ResolvedRange",
    "Series",
    "MarketAsset",
    "HistoryProvider",
    "SamplingInterval",
    "Symbol",
    "TimeWindow",
    "MarketDataError",
    "TransientFetchError",
    "SymbolNotSupportedError",
    "IntervalNotSupportedError",
    "ResolutionError",
    "EmptyResultError",
]
