"""Nearest-neighbor search over time series under Dynamic Time Warping."""

from .config import SearchConfig
from .constraints import (
    BandConstraint,
    GlobalConstraint,
    NoConstraint,
    ParallelogramConstraint,
    make_constraint,
)
from .dtw import cdist_dtw, dtw_distance, dtw_distance_normalized, dtw_distance_with_path
from .exceptions import (
    DimensionMismatchError,
    DTWSearchError,
    InvalidArgumentError,
    ParallelSearchError,
)
from .cascade import PRUNED, lb_cascade
from .lower_bounds import envelope, lb_endpoint, lb_improved, lb_keogh, lb_segment
from .neighbors import DTWNeighbors, batch_k_nearest, k_nearest, radius_search
from .results import BoundedBestSet, NeighborResult
from .stats import SearchStats

__version__ = "0.1.0"
