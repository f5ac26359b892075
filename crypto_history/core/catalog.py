"""Market listing, search and gainers/losers id resolution."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from ..contracts.markets.interface import MarketCatalogSource
from ..models.markets import MarketAsset
from .errors import EmptyResultError, TransientFetchError
from .retry import RetryPolicy, constant_backoff

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 250
# Listing and search calls hit a free, aggressively throttled API tier.
LISTING_POLICY = RetryPolicy(
    max_attempts=15,
    backoff=constant_backoff(3.0),
    retry_on=(TransientFetchError, EmptyResultError),
)
SEARCH_POLICY = RetryPolicy(
    max_attempts=5,
    backoff=constant_backoff(2.0),
    retry_on=(TransientFetchError, EmptyResultError),
)


class MarketCatalog:
    """Retrying facade over a :class:`MarketCatalogSource`."""

    def __init__(
        self,
        source: MarketCatalogSource,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        listing_policy: RetryPolicy = LISTING_POLICY,
        search_policy: RetryPolicy = SEARCH_POLICY,
    ) -> None:
        self._source = source
        self._page_size = page_size
        self._listing_policy = listing_policy
        self._search_policy = search_policy

    def list_page(self, page: int) -> list[MarketAsset]:
        """Return one page of the market listing (pages start at 1)."""

        return list(self._listing_policy.call(self._source.get_markets_page, page, self._page_size))

    def search(self, query: str) -> list[MarketAsset]:
        """Search by free text and return full market snapshots of the hits.

        A blank query returns no results without calling the source.
        """

        query = query.strip()
        if not query:
            return []
        return self._search_policy.call(self._search_markets, query)

    def refresh_assets(self, assets: Sequence[MarketAsset]) -> list[MarketAsset]:
        """Re-fetch current snapshots for assets that already carry ids."""

        ids = [asset.id for asset in assets if asset.has_id]
        if not ids:
            return []
        return list(self._listing_policy.call(self._source.get_markets_by_ids, ids))

    def resolve_ids(
        self, movers: Mapping[str, Sequence[MarketAsset]]
    ) -> dict[str, list[MarketAsset]]:
        """Fill in catalog ids for scraped gainers/losers rows, matched by exact name.

        All names are resolved with a single upstream call. Matched rows get
        an ISO-8601 ``last_updated`` stamp; unmatched rows are returned as-is.
        """

        names = [asset.name for rows in movers.values() for asset in rows]
        if not names:
            return {group: [] for group in movers}
        resolved = self._source.get_markets_by_names(names)
        ids_by_name = {asset.name: asset.id for asset in reversed(resolved)}
        stamp = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

        result: dict[str, list[MarketAsset]] = {}
        for group, rows in movers.items():
            updated: list[MarketAsset] = []
            for asset in rows:
                asset_id = ids_by_name.get(asset.name)
                if asset_id:
                    updated.append(asset.with_id(asset_id, last_updated=stamp))
                else:
                    logger.debug("No catalog id found for %r", asset.name)
                    updated.append(asset)
            result[group] = updated
        return result

    def _search_markets(self, query: str) -> list[MarketAsset]:
        hits = self._source.search(query)
        ids = [hit.id for hit in hits if hit.has_id]
        if not ids:
            raise EmptyResultError("No data available")
        return list(self._source.get_markets_by_ids(ids))
