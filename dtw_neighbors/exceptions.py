"""Exception types raised by the search engine."""


class DTWSearchError(Exception):
    """Base class for all errors raised by ``dtw_neighbors``."""


class InvalidArgumentError(DTWSearchError, ValueError):
    """Bad input detected at a call boundary, before any work is done."""


class DimensionMismatchError(InvalidArgumentError):
    """Feature widths differ, or an estimator needs equal-length series."""


class ParallelSearchError(DTWSearchError, RuntimeError):
    """A worker failed; raised once all workers were cancelled or awaited."""
