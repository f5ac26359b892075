"""Registry utilities for mapping history providers to fetch client factories."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import MutableMapping

from ..contracts.history.interface import HistoryFetchClient
from ..models.shared import HistoryProvider

HistorySourceFactory = Callable[[], HistoryFetchClient]


class HistorySourceRegistry:
    """In-memory registry for kline sources."""

    def __init__(self) -> None:
        self._factories: MutableMapping[HistoryProvider, HistorySourceFactory] = {}

    def register(
        self,
        provider: HistoryProvider,
        factory: HistorySourceFactory,
        *,
        replace: bool = False,
    ) -> None:
        """Register a factory for the given provider."""

        if not replace and provider in self._factories:
            raise ValueError(f"History source for {provider} already registered")
        self._factories[provider] = factory

    def create(self, provider: HistoryProvider) -> HistoryFetchClient:
        """Instantiate a source for the given provider."""

        try:
            factory = self._factories[provider]
        except KeyError as exc:
            raise ValueError(f"No history source registered for {provider}") from exc
        return factory()

    def snapshot(self) -> Mapping[HistoryProvider, HistorySourceFactory]:
        """Return a copy of registered factories."""

        return dict(self._factories)


_registry = HistorySourceRegistry()


def register_history_source(
    provider: HistoryProvider,
    factory: HistorySourceFactory,
    *,
    replace: bool = False,
) -> None:
    """Register a factory globally."""

    _registry.register(provider, factory, replace=replace)


def create_history_source(provider: HistoryProvider) -> HistoryFetchClient:
    """Create a source instance for the specified provider."""

    return _registry.create(provider)


def registered_history_sources() -> Mapping[HistoryProvider, HistorySourceFactory]:
    """Expose the underlying factory mapping (primarily for debugging/tests)."""

    return _registry.snapshot()
