"""Rate-limited batch execution for provider lookups."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")
R = TypeVar("R")


class BatchScheduler(Generic[T, R]):
    """Run a callable over items in batches with bounded concurrency.

    Items inside one batch run concurrently on at most ``max_workers``
    threads; consecutive batches are separated by ``delay_seconds``.
    Results come back in input order.
    """

    def __init__(
        self,
        *,
        batch_size: int,
        max_workers: int,
        delay_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size < 1 or max_workers < 1:
            raise ValueError("batch_size and max_workers must be at least 1")
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def _batches(self, items: Sequence[T]) -> list[Sequence[T]]:
        return [items[start : start + self.batch_size] for start in range(0, len(items), self.batch_size)]

    def run(
        self,
        func: Callable[[T], R],
        items: Sequence[T],
        *,
        on_error: Callable[[T, Exception], R] | None = None,
    ) -> list[R]:
        """Apply ``func`` to every item.

        An exception raised for an item is passed to ``on_error`` when given,
        whose return value takes the item's place; otherwise it propagates.
        """

        results: list[R] = []
        batches = self._batches(items)
        for index, batch in enumerate(batches):
            workers = min(self.max_workers, len(batch))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(func, item) for item in batch]
                for item, future in zip(batch, futures):
                    try:
                        results.append(future.result())
                    except Exception as exc:
                        if on_error is None:
                            raise
                        logger.warning("Batch item failed: {}", exc)
                        results.append(on_error(item, exc))
            if index < len(batches) - 1 and self.delay_seconds:
                self._sleep(self.delay_seconds)
        return results
