"""
Process pool helpers for chunked, order-independent work.

Work items are independent: each chunk is processed by an isolated process,
results are collected as they complete and returned in submission order.
Nothing mutable is shared across the process boundary.
"""

from __future__ import annotations

import logging
import math
import pickle
from concurrent.futures import ProcessPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from concurrent.futures.process import BrokenProcessPool
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

from .exceptions import WorkerPoolError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def make_chunks(items: Sequence[T], n_chunks: int) -> List[List[T]]:
    """Split items into at most n_chunks contiguous chunks of near-equal size."""
    if not items:
        return []
    size = math.ceil(len(items) / max(1, n_chunks))
    return make_batches(items, size)


def make_batches(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """Split items into consecutive batches of batch_size (last one may be shorter)."""
    size = max(1, batch_size)
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def run_in_pool(
    fn: Callable[..., R],
    payloads: Sequence[Tuple[Any, ...]],
    max_workers: int,
    timeout: Optional[float] = None,
    on_result: Optional[Callable[[int, R], None]] = None,
) -> List[R]:
    """
    Run fn(*payload) for every payload in a process pool.

    Args:
        fn: Module-level (picklable) callable
        payloads: Argument tuples, one per task
        max_workers: Pool size
        timeout: Seconds to wait for all tasks before giving up
        on_result: Called in the parent as each task completes (index, result)

    Returns:
        Results in payload order

    Raises:
        WorkerPoolError: If the pool breaks, times out or a payload cannot be sent.
            Exceptions raised by fn itself propagate unchanged.
    """
    results: List[Any] = [None] * len(payloads)
    executor = ProcessPoolExecutor(max_workers=max_workers)
    try:
        futures = {executor.submit(fn, *payload): index for index, payload in enumerate(payloads)}
        for future in as_completed(futures, timeout=timeout):
            index = futures[future]
            results[index] = future.result()
            if on_result is not None:
                on_result(index, results[index])
    except FuturesTimeoutError as e:
        raise WorkerPoolError(f"Worker timeout after {timeout}s") from e
    except (BrokenProcessPool, pickle.PicklingError, OSError) as e:
        raise WorkerPoolError(f"Worker pool failed: {e}") from e
    finally:
        # pending results are discarded; running tasks finish in the background
        executor.shutdown(wait=False, cancel_futures=True)

    logger.debug(f"Process pool completed {len(payloads)} tasks with {max_workers} workers")
    return results
