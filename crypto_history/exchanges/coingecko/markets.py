"""CoinGecko implementation of :class:`MarketCatalogSource`."""

from __future__ import annotations

import logging
import os
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

import requests

from ...contracts.markets.interface import MarketCatalogSource
from ...core.errors import EmptyResultError, MarketDataError, TransientFetchError
from ...models.markets import MarketAsset

logger = logging.getLogger(__name__)

BASE_URL = "https://api.coingecko.com/api/v3"
MARKETS_ENDPOINT = "/coins/markets"
SEARCH_ENDPOINT = "/search"
API_KEY_HEADER = "x_cg_demo_api_key"
API_KEY_ENV = "COINGECKO_API_KEY"
DEFAULT_TIMEOUT = 30.0
DEFAULT_VS_CURRENCY = "usd"
MARKETS_MAX_PER_PAGE = 250


class CoinGeckoMarketSource(MarketCatalogSource):
    """Requests-backed implementation of :class:`MarketCatalogSource`."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = BASE_URL,
        api_key: str | None = None,
        vs_currency: str = DEFAULT_VS_CURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key if api_key is not None else os.environ.get(API_KEY_ENV)
        self._vs_currency = vs_currency
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Listings
    def get_markets_page(self, page: int, per_page: int = MARKETS_MAX_PER_PAGE) -> Sequence[MarketAsset]:
        if page <= 0:
            raise ValueError("page must be a positive integer")
        if not 0 < per_page <= MARKETS_MAX_PER_PAGE:
            raise ValueError(f"CoinGecko per_page cannot exceed {MARKETS_MAX_PER_PAGE} entries")
        return self._markets({"per_page": per_page, "page": page})

    def get_markets_by_ids(self, ids: Sequence[str]) -> Sequence[MarketAsset]:
        return self._markets({"ids": ",".join(ids)})

    def get_markets_by_names(self, names: Sequence[str]) -> Sequence[MarketAsset]:
        return self._markets({"names": ",".join(names)})

    # ------------------------------------------------------------------
    # Search
    def search(self, query: str) -> Sequence[MarketAsset]:
        payload = self._request(SEARCH_ENDPOINT, {"query": query})
        coins = payload.get("coins") if isinstance(payload, dict) else None
        if not coins:
            raise EmptyResultError("No data available")
        return [self._parse_search_hit(entry) for entry in coins if isinstance(entry, dict)]

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------
    # Internal helpers
    def _markets(self, params: dict[str, Any]) -> list[MarketAsset]:
        payload = self._request(MARKETS_ENDPOINT, {"vs_currency": self._vs_currency, **params})
        if not isinstance(payload, list):
            raise MarketDataError("Unexpected CoinGecko markets payload structure")
        if not payload:
            raise EmptyResultError("No data available")
        return [self._parse_market(entry) for entry in payload if isinstance(entry, dict)]

    def _request(self, path: str, params: dict[str, Any]) -> Any:
        url = f"{self._base_url}{path}"
        headers = {API_KEY_HEADER: self._api_key} if self._api_key else {}
        logger.debug("GET %s %s", url, params)
        try:
            response = self._session.get(url, params=params, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:  # pragma: no cover - network failure
            raise TransientFetchError(f"Failed to call CoinGecko endpoint {path}: {exc}") from exc
        if response.status_code >= 400:
            raise TransientFetchError(f"Api error: {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise MarketDataError("CoinGecko returned a non-JSON payload") from exc

    def _parse_market(self, raw: dict[str, Any]) -> MarketAsset:
        return MarketAsset(
            id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            symbol=str(raw.get("symbol") or ""),
            image=str(raw.get("image") or ""),
            current_price=_decimal_or_none(raw.get("current_price")),
            price_change_percentage_24h=_decimal_or_none(raw.get("price_change_percentage_24h")),
            last_updated=str(raw.get("last_updated") or ""),
        )

    def _parse_search_hit(self, raw: dict[str, Any]) -> MarketAsset:
        return MarketAsset(
            id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            symbol=str(raw.get("symbol") or ""),
            image=str(raw.get("large") or raw.get("thumb") or ""),
        )


def _decimal_or_none(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None
