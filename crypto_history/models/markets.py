"""Market catalog models (listings, search results, gainers and losers)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class MarketAsset:
    """Snapshot of one asset as listed by a market catalog.

    Rows scraped from gainers/losers pages arrive without an ``id``; see
    :meth:`~crypto_history.core.catalog.MarketCatalog.resolve_ids`.
    """

    id: str
    name: str
    symbol: str
    image: str = ""
    current_price: Decimal | None = None
    price_change_percentage_24h: Decimal | None = None
    last_updated: str = ""

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    def with_id(self, asset_id: str, *, last_updated: str | None = None) -> MarketAsset:
        return replace(
            self,
            id=asset_id,
            last_updated=self.last_updated if last_updated is None else last_updated,
        )
