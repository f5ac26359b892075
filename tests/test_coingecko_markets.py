from __future__ import annotations

from decimal import Decimal

import pytest

from crypto_history.core.errors import EmptyResultError, TransientFetchError
from crypto_history.exchanges.coingecko import markets as coingecko_module
from crypto_history.exchanges.coingecko.markets import CoinGeckoMarketSource
from tests.stubs import StubSession

BITCOIN = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "image": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
    "current_price": 65000.5,
    "price_change_percentage_24h": -1.25,
    "last_updated": "2024-03-01T12:00:00.000Z",
}


@pytest.fixture()
def session_and_source(monkeypatch):
    monkeypatch.delenv(coingecko_module.API_KEY_ENV, raising=False)
    session = StubSession()
    source = CoinGeckoMarketSource(session=session)
    return session, source


def test_markets_page_parses_assets(session_and_source):
    session, source = session_and_source
    session.queue([BITCOIN])

    assets = source.get_markets_page(2)

    assert assets[0].id == "bitcoin"
    assert assets[0].current_price == Decimal("65000.5")
    assert assets[0].price_change_percentage_24h == Decimal("-1.25")
    call = session.calls[0]
    assert call["url"] == coingecko_module.BASE_URL + coingecko_module.MARKETS_ENDPOINT
    assert call["params"] == {"vs_currency": "usd", "per_page": 250, "page": 2}
    assert call["headers"] == {}


def test_markets_by_ids_and_names_join_values(session_and_source):
    session, source = session_and_source
    session.queue([BITCOIN])
    session.queue([BITCOIN])

    source.get_markets_by_ids(["bitcoin", "ethereum"])
    source.get_markets_by_names(["Bitcoin", "Ethereum"])

    assert session.calls[0]["params"]["ids"] == "bitcoin,ethereum"
    assert session.calls[1]["params"]["names"] == "Bitcoin,Ethereum"


def test_api_key_is_sent_as_header():
    session = StubSession()
    source = CoinGeckoMarketSource(session=session, api_key="demo-key")
    session.queue([BITCOIN])

    source.get_markets_page(1)

    assert session.calls[0]["headers"] == {coingecko_module.API_KEY_HEADER: "demo-key"}


def test_api_key_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv(coingecko_module.API_KEY_ENV, "env-key")
    session = StubSession()
    source = CoinGeckoMarketSource(session=session)
    session.queue([BITCOIN])

    source.get_markets_page(1)

    assert session.calls[0]["headers"] == {coingecko_module.API_KEY_HEADER: "env-key"}


def test_empty_listing_raises_empty_result(session_and_source):
    session, source = session_and_source
    session.queue([])

    with pytest.raises(EmptyResultError):
        source.get_markets_page(99)


def test_http_errors_are_transient(session_and_source):
    session, source = session_and_source
    session.queue({"status": {"error_code": 429}}, status_code=429)

    with pytest.raises(TransientFetchError, match="429"):
        source.get_markets_page(1)


def test_search_returns_hits_without_prices(session_and_source):
    session, source = session_and_source
    session.queue({"coins": [{"id": "bitcoin", "name": "Bitcoin", "symbol": "BTC", "large": "img"}]})

    hits = source.search("bit")

    assert hits[0].id == "bitcoin"
    assert hits[0].image == "img"
    assert hits[0].current_price is None
    assert session.calls[0]["params"] == {"query": "bit"}


def test_search_without_coins_raises_empty_result(session_and_source):
    session, source = session_and_source
    session.queue({"coins": []})

    with pytest.raises(EmptyResultError):
        source.search("zzz")


@pytest.mark.parametrize(("page", "per_page"), [(0, 10), (1, 0), (1, 251)])
def test_page_arguments_are_validated(session_and_source, page, per_page):
    _, source = session_and_source

    with pytest.raises(ValueError):
        source.get_markets_page(page, per_page)
