"""Partitioned and per-query parallel execution.

A pool is created for each call inside a ``with`` block and torn down
before the call returns, on the success path and on the failure path.
Workers share the query and dataset read-only and never share a
threshold: each keeps its own best-set, and the results are merged only
after every worker has finished.
"""

import logging
import math
import os
from concurrent.futures import (
    FIRST_EXCEPTION,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from typing import Callable, List, Sequence, Tuple

import numpy as np

from .config import SearchConfig
from .exceptions import InvalidArgumentError, ParallelSearchError
from .results import BoundedBestSet, NeighborResult, sort_results
from .search import scan_k_nearest, scan_radius
from .stats import SearchStats

logger = logging.getLogger(__name__)

_EXECUTORS = {"thread": ThreadPoolExecutor, "process": ProcessPoolExecutor}


def resolve_n_jobs(n_jobs: int) -> int:
    """``-1`` means one worker per CPU."""
    if n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs < 1:
        raise InvalidArgumentError("n_jobs must be -1 or a positive integer")
    return n_jobs


def chunk_bounds(n_items: int, n_workers: int) -> List[Tuple[int, int]]:
    """Contiguous ``(start, stop)`` slices of ``ceil(n_items / n_workers)`` items."""
    if n_workers < 1:
        raise InvalidArgumentError("n_workers must be positive")
    if n_items == 0:
        return []
    size = math.ceil(n_items / n_workers)
    return [(start, min(start + size, n_items)) for start in range(0, n_items, size)]


def run_tasks(fn: Callable, tasks: Sequence[tuple], n_jobs: int, backend: str = "thread") -> list:
    """Run ``fn(*args)`` for every task and return the results in task order.

    If any task raises, pending tasks are cancelled, running ones are
    awaited, and a single :class:`ParallelSearchError` is raised.
    """
    if backend not in _EXECUTORS:
        raise InvalidArgumentError(f"unknown backend {backend!r}")
    workers = max(1, min(resolve_n_jobs(n_jobs), len(tasks)))

    with _EXECUTORS[backend](max_workers=workers) as executor:
        futures = [executor.submit(fn, *args) for args in tasks]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [f for f in futures if f in done and f.exception() is not None]
        if failed:
            for future in pending:
                future.cancel()
            wait(pending)
            error = failed[0].exception()
            logger.error("%d of %d workers failed: %r", len(failed), len(futures), error)
            raise ParallelSearchError(
                f"parallel search failed in {len(failed)} worker(s): {error}"
            ) from error
        return [future.result() for future in futures]


def k_nearest_parallel(
    query: np.ndarray,
    dataset: Sequence[np.ndarray],
    k: int,
    config: SearchConfig,
    n_jobs: int,
) -> Tuple[List[NeighborResult], SearchStats]:
    """Partition ``dataset``, find each chunk's local top-k, merge into the global top-k."""
    chunks = chunk_bounds(len(dataset), resolve_n_jobs(n_jobs))
    logger.debug("k-nearest over %d candidates in %d chunks", len(dataset), len(chunks))
    tasks = [
        (query, list(dataset[start:stop]), min(k, stop - start), config, start)
        for start, stop in chunks
    ]
    partials = run_tasks(scan_k_nearest, tasks, len(chunks), config.backend)

    best = BoundedBestSet(k)
    stats = SearchStats()
    for results, chunk_stats in partials:
        best.merge(results)
        stats.merge(chunk_stats)
    return best.drain(), stats


def radius_search_parallel(
    query: np.ndarray,
    dataset: Sequence[np.ndarray],
    radius: float,
    config: SearchConfig,
    n_jobs: int,
) -> Tuple[List[NeighborResult], SearchStats]:
    chunks = chunk_bounds(len(dataset), resolve_n_jobs(n_jobs))
    tasks = [(query, list(dataset[start:stop]), radius, config, start) for start, stop in chunks]
    partials = run_tasks(scan_radius, tasks, len(chunks), config.backend)

    found: List[NeighborResult] = []
    stats = SearchStats()
    for results, chunk_stats in partials:
        found.extend(results)
        stats.merge(chunk_stats)
    return sort_results(found), stats


def batch_k_nearest_parallel(
    queries: Sequence[np.ndarray],
    dataset: Sequence[np.ndarray],
    k: int,
    config: SearchConfig,
    n_jobs: int,
) -> Tuple[List[List[NeighborResult]], SearchStats]:
    """One worker per query; output keeps the order of ``queries``."""
    tasks = [(query, dataset, k, config) for query in queries]
    partials = run_tasks(scan_k_nearest, tasks, n_jobs, config.backend)

    stats = SearchStats()
    for _, query_stats in partials:
        stats.merge(query_stats)
    return [results for results, _ in partials], stats
