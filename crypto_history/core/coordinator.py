"""High-level coordinator that wires history sources and the market catalog."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime

from ..contracts.history.interface import HistoryFetchClient
from ..models.history import AggregationResult
from ..models.markets import MarketAsset
from ..models.shared import HistoryProvider, Symbol, TimeWindow
from .aggregator import HistoryAggregator
from .catalog import MarketCatalog
from .planner import DEFAULT_MAX_POINTS_PER_REQUEST
from .publisher import SeriesPublisher
from .registry import create_history_source

SourceResolver = Callable[[HistoryProvider], HistoryFetchClient]


class MarketDataClient:
    """Entry point consumed by SDK/CLI callers."""

    def __init__(
        self,
        *,
        source_overrides: Mapping[HistoryProvider, HistoryFetchClient] | None = None,
        resolver: SourceResolver = create_history_source,
        catalog: MarketCatalog | None = None,
        max_points_per_request: int = DEFAULT_MAX_POINTS_PER_REQUEST,
    ) -> None:
        self._resolver = resolver
        self._catalog = catalog
        self._max_points = max_points_per_request
        self._aggregators: dict[HistoryProvider, HistoryAggregator] = {}
        if source_overrides:
            for provider, source in source_overrides.items():
                self._aggregators[provider] = self._build_aggregator(source)

    # History -----------------------------------------------------------
    def get_history(
        self,
        provider: HistoryProvider,
        symbol: Symbol | str,
        window: TimeWindow | str,
        *,
        now: datetime | None = None,
    ) -> AggregationResult:
        """Aggregate the full series for ``symbol`` over ``window``."""

        return self.aggregator(provider).aggregate(symbol, window, now=now)

    def publisher(self, provider: HistoryProvider) -> SeriesPublisher:
        """Return a fresh background publisher bound to ``provider``."""

        return SeriesPublisher(self.aggregator(provider))

    def aggregator(self, provider: HistoryProvider) -> HistoryAggregator:
        try:
            return self._aggregators[provider]
        except KeyError:
            aggregator = self._build_aggregator(self._resolver(provider))
            self._aggregators[provider] = aggregator
            return aggregator

    # Catalog -----------------------------------------------------------
    def list_markets(self, page: int) -> list[MarketAsset]:
        return self._require_catalog().list_page(page)

    def search(self, query: str) -> list[MarketAsset]:
        return self._require_catalog().search(query)

    def resolve_movers(
        self, movers: Mapping[str, Sequence[MarketAsset]]
    ) -> dict[str, list[MarketAsset]]:
        return self._require_catalog().resolve_ids(movers)

    # Internal ----------------------------------------------------------
    def _build_aggregator(self, source: HistoryFetchClient) -> HistoryAggregator:
        return HistoryAggregator(source, max_points_per_request=self._max_points)

    def _require_catalog(self) -> MarketCatalog:
        if self._catalog is None:
            raise RuntimeError("MarketDataClient was created without a market catalog")
        return self._catalog
