"""Protocols describing historical kline sources."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ...models.history import PricePoint
from ...models.shared import SamplingInterval


@runtime_checkable
class HistoryFetchClient(Protocol):
    """Retrieves one bounded chunk of klines.

    Implementations raise :class:`~crypto_history.core.errors.TransientFetchError`
    on transport failures or non-2xx responses. Calls must be safe to repeat for
    the same range.
    """

    def fetch(
        self,
        symbol: str,
        range_start: int,
        range_end: int,
        interval: SamplingInterval,
    ) -> Sequence[PricePoint]:
        """Return the points whose open time lies in ``[range_start, range_end]``."""
