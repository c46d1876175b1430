from typing import List, Sequence

import numpy as np

from .exceptions import DimensionMismatchError, InvalidArgumentError


def as_series(values) -> np.ndarray:
    """Coerce a sequence to a read-only float array of shape ``(n, d)``."""
    if isinstance(values, np.ndarray) and values.dtype == np.float64 and values.ndim == 2:
        if not values.flags.writeable:
            return values
    try:
        arr = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"not a numeric sequence: {exc}") from exc
    if arr.ndim == 0:
        raise InvalidArgumentError("a sequence must be at least one-dimensional")
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    elif arr.ndim != 2:
        raise InvalidArgumentError(
            f"expected shape (n,) or (n, d), got an array of rank {arr.ndim}"
        )
    arr.setflags(write=False)
    return arr


def as_dataset(sequences: Sequence) -> List[np.ndarray]:
    """Coerce every candidate and check that the feature widths agree."""
    data = [as_series(seq) for seq in sequences]
    widths = {seq.shape[1] for seq in data if len(seq)}
    if len(widths) > 1:
        raise DimensionMismatchError(f"dataset mixes feature widths {sorted(widths)}")
    return data


def check_dimensions(a: np.ndarray, b: np.ndarray) -> None:
    if len(a) and len(b) and a.shape[1] != b.shape[1]:
        raise DimensionMismatchError(
            f"series have {a.shape[1]} and {b.shape[1]} features"
        )


def check_same_length(a: np.ndarray, b: np.ndarray, what: str) -> None:
    check_dimensions(a, b)
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"{what} needs equal-length series, got {len(a)} and {len(b)}"
        )


def paa(series: np.ndarray, segment_size: int) -> np.ndarray:
    """Piecewise Aggregate Approximation over segments of ``segment_size`` points.

    The last segment is shorter when the length is not a multiple of
    ``segment_size``. Returns one row of feature means per segment.
    """
    if segment_size < 1:
        raise InvalidArgumentError("segment_size must be positive")
    series = np.asarray(series, dtype=np.float64)
    if series.ndim == 1:
        series = series.reshape(-1, 1)
    n = len(series)
    if n == 0:
        return np.empty((0, series.shape[1]))
    starts = np.arange(0, n, segment_size)
    sums = np.add.reduceat(series, starts, axis=0)
    lengths = np.diff(np.append(starts, n)).reshape(-1, 1)
    return sums / lengths


def zscore(series) -> np.ndarray:
    """Per-feature z-normalisation; constant features become zeros."""
    arr = np.asarray(series, dtype=np.float64)
    if arr.size == 0:
        return arr.copy()
    mean = arr.mean(axis=0)
    std = arr.std(axis=0)
    safe = np.where(std == 0, 1.0, std)
    return np.where(std == 0, 0.0, (arr - mean) / safe)
