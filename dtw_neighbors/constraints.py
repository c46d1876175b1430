"""Global constraints on the DTW alignment window.

Each constraint answers two questions: which columns are reachable in each
row of the cost matrix (used by the DTW recurrence) and which envelope
radius keeps the envelope lower bounds sound (used by the cascade).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .exceptions import InvalidArgumentError

Bounds = List[Tuple[int, int]]


@dataclass(frozen=True)
class NoConstraint:
    """Full cost matrix."""

    def row_bounds(self, n: int, m: int) -> Bounds:
        return [(0, m - 1)] * n

    def envelope_radius(self, n: int, m: int) -> int:
        return max(n, m, 1) - 1


@dataclass(frozen=True)
class BandConstraint:
    """Sakoe-Chiba band: only cells with ``|i - j| <= radius`` are reachable."""

    radius: int

    def __post_init__(self) -> None:
        if isinstance(self.radius, bool) or int(self.radius) != self.radius:
            raise InvalidArgumentError("band radius must be an integer")
        if self.radius < 0:
            raise InvalidArgumentError("band radius must be non-negative")
        object.__setattr__(self, "radius", int(self.radius))

    @classmethod
    def from_fraction(
        cls, length: int, fraction: float = 0.05, minimum: int = 5
    ) -> "BandConstraint":
        """Band covering ``fraction`` of a series, never narrower than ``minimum``."""
        if not 0 <= fraction <= 1:
            raise InvalidArgumentError("fraction must lie in [0, 1]")
        return cls(max(minimum, int(fraction * length)))

    def _effective(self, n: int, m: int) -> int:
        # the end cell must stay reachable for unequal lengths
        return max(self.radius, abs(n - m))

    def row_bounds(self, n: int, m: int) -> Bounds:
        r = self._effective(n, m)
        return [(max(0, i - r), min(m - 1, i + r)) for i in range(n)]

    def envelope_radius(self, n: int, m: int) -> int:
        return self._effective(n, m)


@dataclass(frozen=True)
class ParallelogramConstraint:
    """Itakura parallelogram with maximum local slope ``slope``."""

    slope: float = 2.0

    def __post_init__(self) -> None:
        if not self.slope >= 1.0 or math.isinf(self.slope):
            raise InvalidArgumentError("parallelogram slope must be finite and >= 1")

    def row_bounds(self, n: int, m: int) -> Bounds:
        if n == 0 or m == 0:
            return [(0, m - 1)] * n
        if n == 1 or m == 1:
            return [(0, m - 1)] * n

        ratio = (m - 1) / (n - 1)
        steep = ratio * self.slope
        shallow = ratio / self.slope
        last_i, last_j = n - 1, m - 1
        eps = 1e-9

        bounds: Bounds = []
        for i in range(n):
            low = max(shallow * i, last_j - steep * (last_i - i))
            high = min(steep * i, last_j - shallow * (last_i - i))
            diagonal = ratio * i
            start = min(math.ceil(low - eps), math.floor(diagonal))
            end = max(math.floor(high + eps), math.ceil(diagonal))
            bounds.append((max(0, start), min(last_j, end)))

        # consecutive rows must overlap or touch for a path to exist
        for i in range(n - 2, -1, -1):
            start, end = bounds[i]
            next_start = bounds[i + 1][0]
            if next_start > end + 1:
                bounds[i] = (start, next_start - 1)
        bounds[0] = (0, bounds[0][1])
        bounds[-1] = (bounds[-1][0], last_j)
        return bounds

    def envelope_radius(self, n: int, m: int) -> int:
        if n == 0 or m == 0:
            return 0
        return max(
            max(abs(i - start), abs(end - i))
            for i, (start, end) in enumerate(self.row_bounds(n, m))
        )


GlobalConstraint = Union[NoConstraint, BandConstraint, ParallelogramConstraint]

_KINDS = {
    "none": "none",
    "full": "none",
    "band": "band",
    "sakoe_chiba": "band",
    "sakoe-chiba": "band",
    "parallelogram": "parallelogram",
    "itakura": "parallelogram",
}


def make_constraint(
    kind: str, param: Optional[float] = None, length: Optional[int] = None
) -> GlobalConstraint:
    """Build a constraint from its name, e.g. ``make_constraint("band", 3)``.

    A band without ``param`` is sized from ``length`` with
    :meth:`BandConstraint.from_fraction`.
    """
    key = _KINDS.get(str(kind).lower())
    if key is None:
        raise InvalidArgumentError(f"unknown constraint kind: {kind!r}")
    if key == "none":
        return NoConstraint()
    if key == "band":
        if param is not None:
            return BandConstraint(int(param))
        if length is None:
            raise InvalidArgumentError("band constraint needs a radius or a series length")
        return BandConstraint.from_fraction(length)
    return ParallelogramConstraint(2.0 if param is None else float(param))


def resolve_constraint(constraint: Optional[GlobalConstraint]) -> GlobalConstraint:
    if constraint is None:
        return NoConstraint()
    if not isinstance(constraint, (NoConstraint, BandConstraint, ParallelogramConstraint)):
        raise InvalidArgumentError(f"unsupported constraint: {constraint!r}")
    return constraint
