"""Dynamic Time Warping distance.

Local cost is the squared Euclidean distance between elements, summed over
features. Every distance returned here is the square root of the
accumulated cost along the optimal path, the same scale as the lower
bounds in :mod:`dtw_neighbors.lower_bounds`.
"""

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from .constraints import GlobalConstraint, resolve_constraint
from .exceptions import InvalidArgumentError
from .preprocessing import as_series, check_dimensions

logger = logging.getLogger(__name__)

ABANDONED = float("inf")

Path = List[Tuple[int, int]]


def _degenerate(a: np.ndarray, b: np.ndarray) -> float:
    """Distance when at least one side is empty."""
    rest = a if len(a) else b
    return float(math.sqrt(float(np.sum(rest ** 2))))


def _oriented(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray, bool]:
    # rows run over the longer series so the row buffers hold the shorter one
    if len(b) > len(a):
        return b, a, True
    return a, b, False


def dtw_distance(
    a,
    b,
    constraint: Optional[GlobalConstraint] = None,
    threshold: Optional[float] = None,
) -> float:
    """Compute DTW distance keeping only two rows of the cost matrix.

    When ``threshold`` is given the computation stops as soon as the
    cheapest cell of a row already exceeds ``threshold`` and returns
    :data:`ABANDONED`.
    """
    a = as_series(a)
    b = as_series(b)
    check_dimensions(a, b)
    constraint = resolve_constraint(constraint)
    if threshold is not None and not threshold > 0:
        raise InvalidArgumentError("threshold must be positive")

    if len(a) == 0 or len(b) == 0:
        return _degenerate(a, b)

    rows, cols, _ = _oriented(a, b)
    n, m = len(rows), len(cols)
    bounds = constraint.row_bounds(n, m)
    limit = math.inf if threshold is None else threshold

    inf = math.inf
    # prev[j + 1] holds D[i - 1][j]; prev[0] is the virtual origin
    prev = [inf] * (m + 1)
    prev[0] = 0.0
    for i in range(n):
        start, end = bounds[i]
        costs = np.sum((cols[start:end + 1] - rows[i]) ** 2, axis=1).tolist()
        curr = [inf] * (m + 1)
        left = inf
        row_min = inf
        j = start
        for cost in costs:
            best = prev[j + 1]
            if prev[j] < best:
                best = prev[j]
            if left < best:
                best = left
            left = cost + best
            curr[j + 1] = left
            if left < row_min:
                row_min = left
            j += 1
        if row_min < inf and math.sqrt(row_min) > limit:
            logger.debug("early abandon at row %d of %d", i, n)
            return ABANDONED
        prev = curr

    return float(math.sqrt(prev[m]))


def _cost_matrix(
    rows: np.ndarray, cols: np.ndarray, constraint: GlobalConstraint
) -> np.ndarray:
    """Accumulated cost matrix padded with an infinite first row and column."""
    n, m = len(rows), len(cols)
    cost = np.full((n + 1, m + 1), np.inf)
    cost[0, 0] = 0.0
    for i, (start, end) in enumerate(constraint.row_bounds(n, m), start=1):
        local = np.sum((cols[start:end + 1] - rows[i - 1]) ** 2, axis=1)
        for offset, d in enumerate(local.tolist()):
            j = start + offset + 1
            cost[i, j] = d + min(cost[i - 1, j - 1], cost[i, j - 1], cost[i - 1, j])
    return cost


def _backtrack(cost: np.ndarray) -> Path:
    i = cost.shape[0] - 1
    j = cost.shape[1] - 1
    path: Path = [(i - 1, j - 1)]
    while i > 1 or j > 1:
        match = cost[i - 1, j - 1]
        horizontal = cost[i, j - 1]
        vertical = cost[i - 1, j]
        if match <= horizontal and match <= vertical:
            i -= 1
            j -= 1
        elif horizontal <= vertical:
            j -= 1
        else:
            i -= 1
        path.append((i - 1, j - 1))
    path.reverse()
    return path


def dtw_distance_with_path(
    a,
    b,
    constraint: Optional[GlobalConstraint] = None,
) -> Tuple[float, Path]:
    """DTW distance plus the optimal alignment from ``(0, 0)`` to ``(|a|-1, |b|-1)``.

    Needs the full cost matrix, so memory grows with ``|a| * |b|``.
    """
    a = as_series(a)
    b = as_series(b)
    check_dimensions(a, b)
    constraint = resolve_constraint(constraint)

    if len(a) == 0 or len(b) == 0:
        return _degenerate(a, b), []

    rows, cols, swapped = _oriented(a, b)
    cost = _cost_matrix(rows, cols, constraint)
    path = _backtrack(cost)
    if swapped:
        path = [(j, i) for i, j in path]
    return float(math.sqrt(cost[-1, -1])), path


def dtw_distance_normalized(
    a, b, constraint: Optional[GlobalConstraint] = None
) -> float:
    """DTW distance divided by the combined length, for series of different lengths."""
    total = len(as_series(a)) + len(as_series(b))
    if total == 0:
        return 0.0
    return dtw_distance(a, b, constraint) / total


def _row_task(i: int, data: List[np.ndarray], constraint: GlobalConstraint) -> Tuple[int, List[float]]:
    """Distances from ``data[i]`` to every later series (pool worker)."""
    return i, [dtw_distance(data[i], data[j], constraint) for j in range(i + 1, len(data))]


def cdist_dtw(
    dataset,
    constraint: Optional[GlobalConstraint] = None,
    n_jobs: int = 1,
    backend: str = "thread",
) -> np.ndarray:
    """Symmetric pairwise DTW distance matrix, optionally computed on a pool."""
    from .parallel import resolve_n_jobs, run_tasks
    from .preprocessing import as_dataset

    data = as_dataset(dataset)
    constraint = resolve_constraint(constraint)
    n = len(data)
    matrix = np.zeros((n, n))
    workers = resolve_n_jobs(n_jobs)

    tasks = [(i, data, constraint) for i in range(n - 1)]
    if workers == 1 or len(tasks) <= 1:
        rows = [_row_task(*task) for task in tasks]
    else:
        rows = run_tasks(_row_task, tasks, workers, backend)

    for i, dists in rows:
        for offset, dist in enumerate(dists):
            j = i + 1 + offset
            matrix[i, j] = dist
            matrix[j, i] = dist
    return matrix
