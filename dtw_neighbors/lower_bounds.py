"""Lower bounds for DTW.

Every bound here is at most the value of :func:`dtw_distance` for the same
pair under the constraint whose ``envelope_radius`` was passed as
``radius`` (``None`` stands for the unconstrained window). Bounds are
rooted like the distance itself, so they can be compared with it directly.
"""

import math
from typing import Optional, Tuple

import numpy as np
from scipy.ndimage import maximum_filter1d, minimum_filter1d

from .exceptions import InvalidArgumentError
from .preprocessing import as_series, check_dimensions, check_same_length, paa


def _window_radius(n: int, radius: Optional[int]) -> int:
    if radius is None:
        return max(n - 1, 0)
    if radius < 0:
        raise InvalidArgumentError("radius must be non-negative")
    return min(int(radius), max(n - 1, 0))


def envelope(series, radius: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Lower and upper envelope of ``series`` over ``[i - radius, i + radius]``.

    Border windows are clipped to the series, which ``mode="nearest"``
    reproduces exactly for running minima and maxima.
    """
    series = as_series(series)
    n = len(series)
    if n == 0:
        return series.copy(), series.copy()
    size = 2 * _window_radius(n, radius) + 1
    lower = minimum_filter1d(series, size=size, axis=0, mode="nearest")
    upper = maximum_filter1d(series, size=size, axis=0, mode="nearest")
    return lower, upper


def _excursion(query: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Per-element distance from ``query`` to the band ``[lower, upper]``."""
    return np.maximum(query - upper, 0.0) + np.maximum(lower - query, 0.0)


def lb_endpoint(query, candidate) -> float:
    """Bound from the first and last aligned pairs, which every warping path contains."""
    query = as_series(query)
    candidate = as_series(candidate)
    check_dimensions(query, candidate)
    if len(query) == 0 or len(candidate) == 0:
        return 0.0
    first = float(np.sum((query[0] - candidate[0]) ** 2))
    if len(query) == 1 and len(candidate) == 1:
        # first and last pair are the same cell
        return math.sqrt(first)
    last = float(np.sum((query[-1] - candidate[-1]) ** 2))
    return math.sqrt(first + last)


def lb_segment(
    query,
    candidate,
    segment_size: int,
    radius: Optional[int] = None,
    candidate_envelope: Optional[Tuple[np.ndarray, np.ndarray]] = None,
) -> float:
    """Aggregate-segment bound on segment means.

    The query's segment means are compared with the segment means of the
    candidate envelope, weighted by segment length. With ``radius=0`` the
    envelope collapses to the candidate and this is the plain difference
    of segment averages.
    """
    query = as_series(query)
    candidate = as_series(candidate)
    check_same_length(query, candidate, "the aggregate-segment bound")
    if segment_size < 1:
        raise InvalidArgumentError("segment_size must be positive")
    n = len(query)
    if n == 0:
        return 0.0

    lower, upper = candidate_envelope or envelope(candidate, radius)
    lengths = np.diff(np.append(np.arange(0, n, segment_size), n)).reshape(-1, 1)
    gap = _excursion(paa(query, segment_size), paa(lower, segment_size), paa(upper, segment_size))
    return math.sqrt(float(np.sum(lengths * gap ** 2)))


def lb_keogh(
    query,
    candidate,
    radius: Optional[int] = None,
    candidate_envelope: Optional[Tuple[np.ndarray, np.ndarray]] = None,
) -> float:
    """LB_Keogh: how far the query leaves the candidate's envelope."""
    query = as_series(query)
    candidate = as_series(candidate)
    check_same_length(query, candidate, "LB_Keogh")
    if len(query) == 0:
        return 0.0
    lower, upper = candidate_envelope or envelope(candidate, radius)
    return math.sqrt(float(np.sum(_excursion(query, lower, upper) ** 2)))


def lb_improved(query, candidate, radius: Optional[int] = None) -> float:
    """Symmetric bound: the larger LB_Keogh of both directions."""
    return max(lb_keogh(query, candidate, radius), lb_keogh(candidate, query, radius))
