from __future__ import annotations

import threading

import pytest

from app.services.scheduler import BatchScheduler


def test_results_preserve_input_order_and_delay_between_batches():
    sleeps: list[float] = []
    scheduler = BatchScheduler(batch_size=2, max_workers=2, delay_seconds=0.2, sleep=sleeps.append)

    results = scheduler.run(lambda value: value * 10, [1, 2, 3, 4, 5])

    assert results == [10, 20, 30, 40, 50]
    # Three batches, so two pauses and none after the last batch.
    assert sleeps == [0.2, 0.2]


def test_concurrency_is_bounded_by_max_workers():
    active = 0
    peak = 0
    lock = threading.Lock()

    def work(value: int) -> int:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        with lock:
            active -= 1
        return value

    scheduler = BatchScheduler(batch_size=6, max_workers=2, sleep=lambda _: None)
    scheduler.run(work, list(range(12)))

    assert peak <= 2


def test_on_error_replaces_failed_item():
    def work(value: int) -> int:
        if value == 2:
            raise RuntimeError("boom")
        return value

    scheduler = BatchScheduler(batch_size=3, max_workers=3, sleep=lambda _: None)

    results = scheduler.run(work, [1, 2, 3], on_error=lambda item, exc: -item)

    assert results == [1, -2, 3]


def test_errors_propagate_without_handler():
    scheduler = BatchScheduler(batch_size=1, max_workers=1, sleep=lambda _: None)

    with pytest.raises(RuntimeError):
        scheduler.run(lambda _: (_ for _ in ()).throw(RuntimeError("boom")), [1])


def test_empty_input_runs_nothing():
    sleeps: list[float] = []
    scheduler = BatchScheduler(batch_size=2, max_workers=2, delay_seconds=1, sleep=sleeps.append)

    assert scheduler.run(lambda value: value, []) == []
    assert sleeps == []


@pytest.mark.parametrize("kwargs", [{"batch_size": 0, "max_workers": 1}, {"batch_size": 1, "max_workers": 0}])
def test_invalid_configuration_is_rejected(kwargs):
    with pytest.raises(ValueError):
        BatchScheduler(**kwargs)
