"""Ordered, bounded-concurrency map over a thread pool.

``p_map(items, fn, concurrency=n)`` runs ``fn`` on every item with at most
``n`` calls in flight and returns the results in input order. Statement
parsing is dominated by PDF decoding, so threads are enough.

Failure handling
----------------
- ``stop_on_error=True`` (default): the first failure is re-raised as soon as
  it is observed and work that has not started yet is cancelled.
- ``stop_on_error=False``: every item runs; failures are collected and raised
  together as an ``ExceptionGroup``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
    stop_on_error: bool = True,
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with at most ``concurrency`` calls running."""

    if not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    pending = iter(enumerate(iterable))
    results: dict[int, OutT] = {}
    errors: list[Exception] = []
    in_flight: dict[Future[OutT], int] = {}

    with ThreadPoolExecutor(max_workers=concurrency) as pool:

        def fill_window() -> None:
            while len(in_flight) < concurrency:
                try:
                    index, item = next(pending)
                except StopIteration:
                    return
                in_flight[pool.submit(mapper, item)] = index

        fill_window()
        while in_flight:
            done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
            for future in done:
                index = in_flight.pop(future)
                error = future.exception()
                if error is None:
                    results[index] = future.result()
                elif stop_on_error:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise error
                else:
                    errors.append(error)  # type: ignore[arg-type]
            fill_window()

    if errors:
        raise ExceptionGroup("p_map: one or more mapper calls failed", errors)

    return [results[index] for index in sorted(results)]


__all__ = ["p_map"]
