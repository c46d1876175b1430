"""Cheapest-first cascade of DTW lower bounds."""

from typing import Optional

from .lower_bounds import envelope, lb_endpoint, lb_keogh, lb_segment
from .preprocessing import as_series, check_dimensions
from .stats import SearchStats

PRUNED = float("inf")


def segment_size_for(length: int) -> int:
    """Coarse segments for the cascade: about ten per series."""
    return max(1, length // 10)


def lb_cascade(
    query,
    candidate,
    radius: Optional[int],
    threshold: float,
    stats: Optional[SearchStats] = None,
) -> float:
    """Try to prove ``dtw(query, candidate) >= threshold`` without running DTW.

    Levels run in increasing cost: endpoint, aggregate-segment, envelope,
    symmetric envelope. Returns :data:`PRUNED` as soon as one level reaches
    ``threshold``, otherwise the tightest bound computed. Only the endpoint
    level applies to series of different lengths.
    """
    query = as_series(query)
    candidate = as_series(candidate)
    check_dimensions(query, candidate)

    def pruned(level: str) -> float:
        if stats is not None:
            stats.record_prune(level)
        return PRUNED

    bound = lb_endpoint(query, candidate)
    if bound >= threshold:
        return pruned("endpoint")
    if len(query) != len(candidate) or len(query) == 0:
        return bound

    cand_env = envelope(candidate, radius)
    bound = max(bound, lb_segment(
        query, candidate, segment_size_for(len(query)), candidate_envelope=cand_env
    ))
    if bound >= threshold:
        return pruned("segment")

    bound = max(bound, lb_keogh(query, candidate, candidate_envelope=cand_env))
    if bound >= threshold:
        return pruned("envelope")

    # the forward direction is already in ``bound``
    bound = max(bound, lb_keogh(candidate, query, radius))
    if bound >= threshold:
        return pruned("improved")
    return bound
