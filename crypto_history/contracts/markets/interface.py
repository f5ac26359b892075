"""Protocols describing market catalog sources."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ...models.markets import MarketAsset


@runtime_checkable
class MarketCatalogSource(Protocol):
    """Data source serving market listings and asset search."""

    # Listings ----------------------------------------------------------
    def get_markets_page(self, page: int, per_page: int) -> Sequence[MarketAsset]:
        """Return one page of assets ordered by market capitalisation."""

    def get_markets_by_ids(self, ids: Sequence[str]) -> Sequence[MarketAsset]:
        """Return market snapshots for the given catalog ids."""

    def get_markets_by_names(self, names: Sequence[str]) -> Sequence[MarketAsset]:
        """Return market snapshots for the given display names."""

    # Search ------------------------------------------------------------
    def search(self, query: str) -> Sequence[MarketAsset]:
        """Return assets matching ``query``; results carry ids but no prices."""
