"""Custom exception hierarchy for market data fetching and aggregation."""

from __future__ import annotations


class MarketDataError(RuntimeError):
    """Base class for all domain-specific exceptions."""


class TransientFetchError(MarketDataError):
    """A single upstream call failed (network error, rate limiting, non-2xx response)."""


class SymbolNotSupportedError(MarketDataError):
    """Raised when an upstream venue does not list the requested symbol."""


class IntervalNotSupportedError(MarketDataError):
    """Raised when an unsupported sampling interval is requested."""


class ResolutionError(MarketDataError):
    """Raised by strict time window parsing for an unrecognized token."""


class EmptyResultError(MarketDataError):
    """No data available: the upstream answered but there was nothing to show."""
