import logging
import math
import threading
from typing import List, Optional, Sequence

from .config import SearchConfig
from .exceptions import InvalidArgumentError
from .parallel import (
    batch_k_nearest_parallel,
    k_nearest_parallel,
    radius_search_parallel,
    resolve_n_jobs,
)
from .preprocessing import as_dataset, as_series, check_dimensions
from .results import NeighborResult
from .search import scan_k_nearest, scan_radius
from .stats import SearchStats

logger = logging.getLogger(__name__)


class DTWNeighbors:
    """k-nearest and radius search under DTW with lower-bound pruning.

    The configuration is fixed at construction. Statistics accumulate
    across calls until :meth:`reset_stats`.
    """

    def __init__(self, config: Optional[SearchConfig] = None, **options):
        if config is None:
            config = SearchConfig(**options)
        elif options:
            config = config.with_options(**options)
        self.config = config
        self._stats = SearchStats()
        self._stats_lock = threading.Lock()

    @property
    def stats(self) -> SearchStats:
        with self._stats_lock:
            return SearchStats() + self._stats

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = SearchStats()

    def _record(self, stats: SearchStats) -> None:
        with self._stats_lock:
            self._stats.merge(stats)

    def _workers(self, n_items: int) -> int:
        """Worker count for a call over ``n_items``; 1 means sequential."""
        if not self.config.parallel or n_items < 2:
            return 1
        return min(resolve_n_jobs(self.config.n_jobs), n_items)

    @staticmethod
    def _check_query(query, data):
        query = as_series(query)
        for candidate in data:
            if len(candidate):
                check_dimensions(query, candidate)
                break
        return query

    def k_nearest(self, query, dataset: Sequence, k: int) -> List[NeighborResult]:
        """The ``k`` closest candidates, ascending by distance then index."""
        if k <= 0:
            raise InvalidArgumentError("k must be positive")
        data = as_dataset(dataset)
        query = self._check_query(query, data)
        if not data:
            return []
        k = min(k, len(data))

        workers = self._workers(len(data))
        if workers > 1 and len(data) >= self.config.min_parallel_size:
            results, stats = k_nearest_parallel(query, data, k, self.config, workers)
        else:
            results, stats = scan_k_nearest(query, data, k, self.config)
        self._record(stats)
        logger.debug("k=%d over %d candidates with %d worker(s): %s", k, len(data), workers, stats)
        return results

    def radius_search(self, query, dataset: Sequence, radius: float) -> List[NeighborResult]:
        """Every candidate within ``radius`` (inclusive), ascending."""
        if math.isnan(radius) or radius < 0:
            raise InvalidArgumentError("radius must be a non-negative number")
        data = as_dataset(dataset)
        query = self._check_query(query, data)
        if not data:
            return []

        workers = self._workers(len(data))
        if workers > 1 and len(data) >= self.config.min_parallel_size:
            results, stats = radius_search_parallel(query, data, radius, self.config, workers)
        else:
            results, stats = scan_radius(query, data, radius, self.config)
        self._record(stats)
        return results

    def batch_k_nearest(
        self, queries: Sequence, dataset: Sequence, k: int
    ) -> List[List[NeighborResult]]:
        """``k_nearest`` for every query, results in the order of ``queries``."""
        if k <= 0:
            raise InvalidArgumentError("k must be positive")
        data = as_dataset(dataset)
        prepared = [self._check_query(query, data) for query in queries]
        if not data:
            return [[] for _ in prepared]
        k = min(k, len(data))

        workers = self._workers(len(prepared))
        if workers > 1:
            all_results, stats = batch_k_nearest_parallel(prepared, data, k, self.config, workers)
            self._record(stats)
            return all_results

        all_results = []
        for query in prepared:
            results, stats = scan_k_nearest(query, data, k, self.config)
            self._record(stats)
            all_results.append(results)
        return all_results


def k_nearest(query, dataset: Sequence, k: int, **options) -> List[NeighborResult]:
    return DTWNeighbors(**options).k_nearest(query, dataset, k)


def radius_search(query, dataset: Sequence, radius: float, **options) -> List[NeighborResult]:
    return DTWNeighbors(**options).radius_search(query, dataset, radius)


def batch_k_nearest(queries: Sequence, dataset: Sequence, k: int, **options) -> List[List[NeighborResult]]:
    return DTWNeighbors(**options).batch_k_nearest(queries, dataset, k)
