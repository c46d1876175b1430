"""Sequential neighbor scans.

Both scans are plain functions over an already-validated query and
dataset so the parallel layer can run them on a slice of the dataset,
in a thread or in another process. ``offset`` is added to every reported
index so a slice reports positions in the full dataset.
"""

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from .cascade import PRUNED, lb_cascade
from .config import SearchConfig
from .dtw import ABANDONED, dtw_distance
from .results import BoundedBestSet, NeighborResult, sort_results
from .stats import SearchStats

logger = logging.getLogger(__name__)


def _evaluate(
    query: np.ndarray,
    candidate: np.ndarray,
    threshold: float,
    config: SearchConfig,
    stats: SearchStats,
) -> float:
    """Distance from ``query`` to ``candidate``, or infinity when provably >= ``threshold``."""
    if config.use_lower_bounds and math.isfinite(threshold):
        radius = config.constraint.envelope_radius(len(query), len(candidate))
        if lb_cascade(query, candidate, radius, threshold, stats) == PRUNED:
            return PRUNED

    stats.dtw_calculations += 1
    abandon_at = threshold if config.early_abandon and 0 < threshold < math.inf else None
    distance = dtw_distance(query, candidate, config.constraint, threshold=abandon_at)
    if distance == ABANDONED and abandon_at is not None:
        stats.abandoned += 1
    return distance


def scan_k_nearest(
    query: np.ndarray,
    dataset: Sequence[np.ndarray],
    k: int,
    config: SearchConfig,
    offset: int = 0,
) -> Tuple[List[NeighborResult], SearchStats]:
    """k closest candidates of ``dataset`` in ascending order.

    Until ``k`` results exist every candidate is evaluated in full; after
    that the worst of the ``k`` is the pruning threshold.
    """
    stats = SearchStats()
    best = BoundedBestSet(k)
    for position, candidate in enumerate(dataset):
        stats.total += 1
        distance = _evaluate(query, candidate, best.threshold, config, stats)
        if distance == math.inf:
            continue
        best.offer(NeighborResult(offset + position, distance))
    logger.debug("k-nearest scan over %d candidates: %s", len(dataset), stats)
    return best.drain(), stats


def scan_radius(
    query: np.ndarray,
    dataset: Sequence[np.ndarray],
    radius: float,
    config: SearchConfig,
    offset: int = 0,
) -> Tuple[List[NeighborResult], SearchStats]:
    """Every candidate with ``distance <= radius``, ascending."""
    stats = SearchStats()
    # the cascade prunes at ">= threshold"; candidates exactly on the radius stay
    threshold = math.nextafter(radius, math.inf)
    found: List[NeighborResult] = []
    for position, candidate in enumerate(dataset):
        stats.total += 1
        distance = _evaluate(query, candidate, threshold, config, stats)
        if distance <= radius:
            found.append(NeighborResult(offset + position, distance))
    logger.debug("radius scan over %d candidates: %s", len(dataset), stats)
    return sort_results(found), stats
