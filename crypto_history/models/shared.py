"""Shared domain models used across history and catalog components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum

from ..core.errors import ResolutionError

logger = logging.getLogger(__name__)

QUOTE_CURRENCY = "USDT"
# Base of the upstream pair fetched when the requested asset is the quote currency itself.
QUOTE_CARRIER_BASE = "BTC"


class HistoryProvider(StrEnum):
    """Upstream venues able to serve historical klines.

    Both venues speak the same klines wire format; they differ only in host and
    listed pairs.
    """

    BINANCE = "binance"
    BINANCE_US = "binance_us"


class SamplingInterval(StrEnum):
    """Sampling granularity of a price series, valued as the upstream token."""

    MINUTE_1 = "1m"
    HOUR_1 = "1h"
    DAY_1 = "1d"

    @property
    def milliseconds(self) -> int:
        return _INTERVAL_MILLISECONDS[self]


_INTERVAL_MILLISECONDS = {
    SamplingInterval.MINUTE_1: 60_000,
    SamplingInterval.HOUR_1: 3_600_000,
    SamplingInterval.DAY_1: 86_400_000,
}


class TimeWindow(StrEnum):
    """User-selectable lookback periods for a price chart."""

    DAY_1 = "24H"
    WEEK_1 = "1W"
    MONTH_1 = "1M"
    MONTH_6 = "6M"
    YEAR_1 = "1Y"
    YEAR_5 = "5Y"

    @property
    def duration(self) -> timedelta:
        """Fixed-day length of the window (months and years are not calendar aware)."""

        return _WINDOW_DURATIONS[self]

    @property
    def interval(self) -> SamplingInterval:
        """Sampling interval used to chart this window."""

        if self is TimeWindow.DAY_1:
            return SamplingInterval.MINUTE_1
        if self is TimeWindow.WEEK_1:
            return SamplingInterval.HOUR_1
        return SamplingInterval.DAY_1

    @classmethod
    def parse(cls, token: str | TimeWindow | None, *, strict: bool = False) -> TimeWindow:
        """Normalize a user token such as ``"1w"`` into a window.

        Unknown tokens fall back to :attr:`DAY_1` unless ``strict`` is set, in
        which case :class:`~crypto_history.core.errors.ResolutionError` is raised.
        """

        if isinstance(token, TimeWindow):
            return token
        normalized = (token or "").strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            if strict:
                raise ResolutionError(f"Unsupported time window {token!r}") from None
            logger.warning("Unknown time window %r, falling back to %s", token, cls.DAY_1.value)
            return cls.DAY_1


_WINDOW_DURATIONS = {
    TimeWindow.DAY_1: timedelta(days=1),
    TimeWindow.WEEK_1: timedelta(days=7),
    TimeWindow.MONTH_1: timedelta(days=30),
    TimeWindow.MONTH_6: timedelta(days=180),
    TimeWindow.YEAR_1: timedelta(days=365),
    TimeWindow.YEAR_5: timedelta(days=1825),
}


@dataclass(frozen=True, slots=True)
class Symbol:
    """Represents a spot asset priced against a quote currency."""

    base: str
    quote: str = QUOTE_CURRENCY

    def __post_init__(self) -> None:
        base = self.base.strip().upper()
        quote = self.quote.strip().upper()
        if not base or not quote:
            raise ValueError("Symbol base and quote must be non-empty strings.")
        object.__setattr__(self, "base", base)
        object.__setattr__(self, "quote", quote)

    @property
    def pair(self) -> str:
        """Return the canonical pair string (e.g., ``BTCUSDT``)."""

        return f"{self.base}{self.quote}"

    @property
    def is_quote_asset(self) -> bool:
        """True when the asset is the quote currency itself (e.g., ``USDT``)."""

        return self.base == self.quote

    @property
    def upstream_pair(self) -> str:
        """Pair actually requested upstream.

        The quote currency has no pair against itself, so its series is carried
        by the :data:`QUOTE_CARRIER_BASE` pair and re-priced by the aggregator.
        """

        if self.is_quote_asset:
            return f"{QUOTE_CARRIER_BASE}{self.quote}"
        return self.pair
