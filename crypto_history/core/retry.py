"""Injectable retry policy for upstream calls."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from ..contracts.history.interface import HistoryFetchClient
from ..models.history import PricePoint
from ..models.shared import SamplingInterval
from .errors import TransientFetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

BackoffFunction = Callable[[int], float]


def constant_backoff(seconds: float) -> BackoffFunction:
    """Wait the same ``seconds`` after every failed attempt."""

    return lambda attempt: seconds


def exponential_backoff(base: float, cap: float) -> BackoffFunction:
    """Wait ``base * 2**attempt`` seconds, never more than ``cap``."""

    return lambda attempt: min(cap, base * (2 ** max(0, attempt)))


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Call a function up to ``max_attempts`` times.

    ``backoff`` receives the zero-based index of the attempt that just failed.
    Only exceptions listed in ``retry_on`` are retried; the last one is
    re-raised once attempts are exhausted.
    """

    max_attempts: int = 3
    backoff: BackoffFunction = constant_backoff(2.0)
    retry_on: tuple[type[BaseException], ...] = (TransientFetchError,)
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be a positive integer")

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        for attempt in range(self.max_attempts):
            try:
                return fn(*args, **kwargs)
            except self.retry_on as exc:
                if attempt + 1 >= self.max_attempts:
                    raise
                delay = self.backoff(attempt)
                logger.warning(
                    "Attempt %d/%d failed: %s; retrying in %.1fs",
                    attempt + 1,
                    self.max_attempts,
                    exc,
                    delay,
                )
                if delay > 0:
                    self.sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover


class RetryingFetchClient(HistoryFetchClient):
    """Wrap a :class:`HistoryFetchClient` so each chunk fetch follows ``policy``."""

    def __init__(self, client: HistoryFetchClient, policy: RetryPolicy | None = None) -> None:
        self._client = client
        self._policy = policy or RetryPolicy()

    def fetch(
        self,
        symbol: str,
        range_start: int,
        range_end: int,
        interval: SamplingInterval,
    ) -> Sequence[PricePoint]:
        return self._policy.call(self._client.fetch, symbol, range_start, range_end, interval)

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
