from __future__ import annotations

from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Any, Callable

from crypto_history.core.errors import TransientFetchError
from crypto_history.models.history import PricePoint
from crypto_history.models.shared import SamplingInterval


class StubResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class StubSession:
    def __init__(self) -> None:
        self.calls: list[dict] = []
        self._responses: list[StubResponse] = []
        self.closed = False

    def queue(self, payload, status_code: int = 200) -> None:
        self._responses.append(StubResponse(payload, status_code))

    def get(self, url, params=None, headers=None, timeout=0):
        if params is None:
            params = {}
        self.calls.append(
            {"url": url, "params": dict(params), "headers": dict(headers or {}), "timeout": timeout}
        )
        if not self._responses:
            raise AssertionError("No queued response left for stub session")
        return self._responses.pop(0)

    def close(self) -> None:
        self.closed = True


def make_points(
    start: int,
    count: int,
    interval: SamplingInterval,
    *,
    price: str = "100.0",
) -> list[PricePoint]:
    step = interval.milliseconds
    return [
        PricePoint(
            open_time=start + index * step,
            open=price,
            high=price,
            low=price,
            close=price,
            close_time=start + (index + 1) * step - 1,
        )
        for index in range(count)
    ]


@dataclass(slots=True)
class FetchCall:
    symbol: str
    range_start: int
    range_end: int
    interval: SamplingInterval


@dataclass(slots=True)
class StubFetchClient:
    """Answers chunk fetches from a queue of point lists or exceptions."""

    responses: list[Any] = field(default_factory=list)
    calls: list[FetchCall] = field(default_factory=list)

    def fetch(self, symbol, range_start, range_end, interval):
        self.calls.append(FetchCall(symbol, range_start, range_end, interval))
        if not self.responses:
            raise AssertionError("No queued response left for stub fetch client")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(range_start, range_end, interval)
        return response


def in_range_points(range_start: int, range_end: int, interval: SamplingInterval) -> list[PricePoint]:
    """Every aligned point whose open time falls inside the chunk."""

    step = interval.milliseconds
    first = -(-range_start // step) * step
    count = max(0, (range_end - first) // step + 1)
    return make_points(first, count, interval)


def failing(message: str = "boom") -> TransientFetchError:
    return TransientFetchError(message)


class ManualExecutor(Executor):
    """Executor whose submitted calls run only when the test says so."""

    def __init__(self) -> None:
        self.jobs: list[tuple[Future, Callable[..., Any], tuple, dict]] = []

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def run(self, index: int) -> Future:
        future, fn, args, kwargs = self.jobs[index]
        if future.set_running_or_notify_cancel():
            try:
                future.set_result(fn(*args, **kwargs))
            except BaseException as exc:
                future.set_exception(exc)
        return future
