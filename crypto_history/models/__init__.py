"""Domain models for market history and catalog data."""

from .history import AggregationResult, Chunk, PricePoint, ResolvedRange, Series
from .markets import MarketAsset
from .shared import HistoryProvider, SamplingInterval, Symbol, TimeWindow

__all__ = [
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
]
