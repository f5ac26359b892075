"""Core utilities for market history aggregation."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "MarketDataClient",
    "HistoryAggregator",
    "merge_series",
    "SeriesPublisher",
    "PublishedSeries",
    "MarketCatalog",
    "RetryPolicy",
    "RetryingFetchClient",
    "resolve",
    "plan",
    "iter_chunks",
    "register_history_source",
    "create_history_source",
    "MarketDataError",
    "TransientFetchError",
    "SymbolNotSupportedError",
    "IntervalNotSupportedError",
    "ResolutionError",
    "EmptyResultError",
]

_lazy_targets = {
    "MarketDataClient": ("coordinator", "MarketDataClient"),
    "HistoryAggregator": ("aggregator", "HistoryAggregator"),
    "merge_series": ("aggregator", "merge_series"),
    "SeriesPublisher": ("publisher", "SeriesPublisher"),
    "PublishedSeries": ("publisher", "PublishedSeries"),
    "MarketCatalog": ("catalog", "MarketCatalog"),
    "RetryPolicy": ("retry", "RetryPolicy"),
    "RetryingFetchClient": ("retry", "RetryingFetchClient"),
    "resolve": ("windows", "resolve"),
    "plan": ("planner", "plan"),
    "iter_chunks": ("planner", "iter_chunks"),
    "register_history_source": ("registry", "register_history_source"),
    "create_history_source": ("registry", "create_history_source"),
    "MarketDataError": ("errors", "MarketDataError"),
    "TransientFetchError": ("errors", "TransientFetchError"),
    "SymbolNotSupportedError": ("errors", "SymbolNotSupportedError"),
    "IntervalNotSupportedError": ("errors", "IntervalNotSupportedError"),
    "ResolutionError": ("errors", "ResolutionError"),
    "EmptyResultError": ("errors", "EmptyResultError"),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _lazy_targets[name]
    except KeyError as exc:  # pragma: no cover - defensive
        raise AttributeError(f"module 'crypto_history.core' has no attribute {name!r}") from exc
    module = import_module(f"{__name__}.{module_name}")
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
