"""Binance spot klines implementation of :class:`HistoryFetchClient`."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import requests

from ...contracts.history.interface import HistoryFetchClient
from ...core.errors import (
    IntervalNotSupportedError,
    MarketDataError,
    SymbolNotSupportedError,
    TransientFetchError,
)
from ...core.registry import register_history_source
from ...models.history import PricePoint
from ...models.shared import HistoryProvider, SamplingInterval

logger = logging.getLogger(__name__)

BASE_URL = "https://api.binance.com"
BINANCE_US_BASE_URL = "https://api.binance.us"
KLINES_ENDPOINT = "/api/v3/klines"
DEFAULT_TIMEOUT = 10.0
# Spot REST API caps /api/v3/klines at 1000 rows per request.
KLINES_MAX_LIMIT = 1000


class BinanceKlineClient(HistoryFetchClient):
    """Requests-backed implementation of :class:`HistoryFetchClient`."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        limit: int = KLINES_MAX_LIMIT,
    ) -> None:
        if not 0 < limit <= KLINES_MAX_LIMIT:
            raise ValueError(f"Binance klines limit must be between 1 and {KLINES_MAX_LIMIT}")
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._limit = limit

    def fetch(
        self,
        symbol: str,
        range_start: int,
        range_end: int,
        interval: SamplingInterval,
    ) -> Sequence[PricePoint]:
        params = {
            "symbol": symbol,
            "interval": interval.value,
            "startTime": range_start,
            "endTime": range_end,
            "limit": self._limit,
        }
        payload = self._request(KLINES_ENDPOINT, params)
        if not isinstance(payload, list):
            raise MarketDataError("Unexpected Binance klines payload structure")
        points = [self._parse_kline(raw) for raw in payload]
        return sorted(points, key=lambda point: point.open_time)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------
    # Internal helpers
    def _request(self, path: str, params: dict[str, Any]) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("GET %s %s", url, params)
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as exc:  # pragma: no cover - network failure
            raise TransientFetchError(f"Failed to call Binance endpoint {path}: {exc}") from exc

        payload = self._decode_response(response)
        if isinstance(payload, dict) and "code" in payload and payload["code"] not in (0, None):
            try:
                code = int(payload["code"])
            except (TypeError, ValueError) as exc:
                raise MarketDataError(f"Unexpected Binance error code {payload['code']!r}") from exc
            self._raise_api_error(code, payload.get("msg"))
        if response.status_code >= 400:
            self._raise_http_error(response.status_code, payload)
        return payload

    def _decode_response(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            if response.status_code >= 400:
                raise TransientFetchError(f"Binance returned HTTP {response.status_code}") from exc
            raise MarketDataError("Binance returned a non-JSON payload") from exc

    def _raise_http_error(self, status_code: int, payload: Any) -> None:
        message = self._extract_message(payload) or f"HTTP {status_code}"
        raise TransientFetchError(message)

    def _raise_api_error(self, code: int, message: str | None) -> None:
        msg = message or f"Binance error code {code}"
        if code == -1121:
            raise SymbolNotSupportedError(msg)
        if code == -1120:
            raise IntervalNotSupportedError(msg)
        raise TransientFetchError(msg)

    def _parse_kline(self, raw: Sequence[Any]) -> PricePoint:
        if not isinstance(raw, Sequence) or len(raw) < 7:
            raise MarketDataError("Unexpected Binance kline payload structure")
        try:
            open_time = int(raw[0])
            close_time = int(raw[6])
        except (TypeError, ValueError) as exc:
            raise MarketDataError("Unexpected Binance kline timestamps") from exc
        return PricePoint(
            open_time=open_time,
            open=str(raw[1]),
            high=str(raw[2]),
            low=str(raw[3]),
            close=str(raw[4]),
            close_time=close_time,
        )

    def _extract_message(self, payload: Any) -> str | None:
        if isinstance(payload, dict):
            msg = payload.get("msg") or payload.get("message")
            if isinstance(msg, str):
                return msg
        return None


def register(*, replace: bool = False) -> None:
    """Register the Binance and Binance US kline sources in the global registry."""

    register_history_source(HistoryProvider.BINANCE, lambda: BinanceKlineClient(), replace=replace)
    register_history_source(
        HistoryProvider.BINANCE_US,
        lambda: BinanceKlineClient(base_url=BINANCE_US_BASE_URL),
        replace=replace,
    )


register()
