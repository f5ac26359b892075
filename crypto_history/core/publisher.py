"""Run aggregations in the background and publish only the latest result."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial

from ..models.history import AggregationResult
from ..models.shared import Symbol, TimeWindow
from .aggregator import HistoryAggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PublishedSeries:
    """Immutable snapshot handed to consumers."""

    run_id: int
    result: AggregationResult


SeriesSubscriber = Callable[[PublishedSeries], None]


class SeriesPublisher:
    """Single-writer, multi-reader holder of the currently charted series.

    Every :meth:`select` starts a new run with a larger run id. A run's result
    is published only if no newer run was started meanwhile, so a late result
    can never replace a newer one and points from two windows never mix.
    Publishing swaps one immutable :class:`PublishedSeries` for another.
    """

    def __init__(
        self,
        aggregator: HistoryAggregator,
        *,
        executor: Executor | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="series-run"
        )
        self._owns_executor = executor is None
        self._lock = threading.Lock()
        self._run_id = 0
        self._pending: Future[AggregationResult] | None = None
        self._selection: tuple[Symbol | str, TimeWindow] | None = None
        self._published: PublishedSeries | None = None
        self._subscribers: list[SeriesSubscriber] = []

    # Readers -----------------------------------------------------------
    def snapshot(self) -> PublishedSeries | None:
        return self._published

    @property
    def loading(self) -> bool:
        return self._pending is not None

    @property
    def latest_run_id(self) -> int:
        return self._run_id

    def subscribe(self, callback: SeriesSubscriber) -> Callable[[], None]:
        """Call ``callback`` after every publish; returns an unsubscribe function."""

        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    # Writers -----------------------------------------------------------
    def select(self, symbol: Symbol | str, window: TimeWindow | str) -> Future[AggregationResult]:
        """Start a run for ``symbol`` over ``window``, superseding any in-flight run."""

        window = TimeWindow.parse(window)
        with self._lock:
            self._run_id += 1
            run_id = self._run_id
            previous = self._pending
            self._selection = (symbol, window)
            future = self._executor.submit(self._aggregator.aggregate, symbol, window)
            self._pending = future
        if previous is not None and previous.cancel():
            logger.debug("Cancelled queued run before run %d", run_id)
        future.add_done_callback(partial(self._on_done, run_id))
        return future

    def refresh(self) -> Future[AggregationResult]:
        """Re-run the current selection."""

        selection = self._selection
        if selection is None:
            raise RuntimeError("Nothing selected yet; call select() first")
        return self.select(*selection)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # Internal ----------------------------------------------------------
    def _on_done(self, run_id: int, future: Future[AggregationResult]) -> None:
        if future.cancelled():
            logger.debug("Aggregation run %d was cancelled", run_id)
            self._clear_pending(run_id)
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Aggregation run %d failed", run_id, exc_info=exc)
            self._clear_pending(run_id)
            return
        self._publish(run_id, future.result())

    def _clear_pending(self, run_id: int) -> None:
        with self._lock:
            if run_id == self._run_id:
                self._pending = None

    def _publish(self, run_id: int, result: AggregationResult) -> bool:
        with self._lock:
            if run_id != self._run_id:
                logger.debug("Discarding stale run %d (latest is %d)", run_id, self._run_id)
                return False
            snapshot = PublishedSeries(run_id=run_id, result=result)
            self._published = snapshot
            self._pending = None
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(snapshot)
        return True
