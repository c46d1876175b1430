import math
from typing import List, Optional, Sequence, Tuple

from .constraints import GlobalConstraint, resolve_constraint
from .dtw import dtw_distance
from .lower_bounds import lb_endpoint, lb_improved, lb_keogh, lb_segment
from .cascade import segment_size_for
from .preprocessing import as_dataset, as_series
from .results import NeighborResult


def results_match(
    a: Sequence[NeighborResult],
    b: Sequence[NeighborResult],
    rel_tol: float = 1e-9,
    abs_tol: float = 1e-12,
) -> bool:
    """Same indices in the same order with distances equal within tolerance."""
    if len(a) != len(b):
        return False
    for x, y in zip(a, b):
        if x.index != y.index:
            return False
        if not math.isclose(x.distance, y.distance, rel_tol=rel_tol, abs_tol=abs_tol):
            return False
    return True


def lower_bound_violations(
    query,
    dataset,
    constraint: Optional[GlobalConstraint] = None,
    tol: float = 1e-9,
) -> List[Tuple[int, str, float, float]]:
    """Every ``(index, bound, value, distance)`` where a bound exceeds the DTW distance."""
    query = as_series(query)
    constraint = resolve_constraint(constraint)
    violations = []
    for idx, candidate in enumerate(as_dataset(dataset)):
        distance = dtw_distance(query, candidate, constraint)
        bounds = {"endpoint": lb_endpoint(query, candidate)}
        if len(candidate) == len(query):
            radius = constraint.envelope_radius(len(query), len(candidate))
            size = segment_size_for(len(query))
            bounds["segment"] = lb_segment(query, candidate, size, radius)
            bounds["envelope"] = lb_keogh(query, candidate, radius)
            bounds["improved"] = lb_improved(query, candidate, radius)
        for name, value in bounds.items():
            if value > distance + tol * max(1.0, distance):
                violations.append((idx, name, value, distance))
    return violations
