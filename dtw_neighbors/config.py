from dataclasses import dataclass, field, replace

from .constraints import GlobalConstraint, NoConstraint, resolve_constraint
from .exceptions import InvalidArgumentError

BACKENDS = ("thread", "process")


@dataclass(frozen=True)
class SearchConfig:
    """Settings shared by every search call of a :class:`DTWNeighbors`.

    constraint: global window used by DTW and by the envelope bounds.
    use_lower_bounds: run the pruning cascade; turn off to force exhaustive DTW.
    early_abandon: let DTW stop once it cannot beat the current threshold.
    parallel: allow the partitioned / per-query parallel paths.
    n_jobs: worker count, ``-1`` for one per CPU.
    backend: ``"thread"`` or ``"process"`` pool.
    min_parallel_size: smallest dataset that is partitioned across workers.
    """

    constraint: GlobalConstraint = field(default_factory=NoConstraint)
    use_lower_bounds: bool = True
    early_abandon: bool = True
    parallel: bool = True
    n_jobs: int = -1
    backend: str = "thread"
    min_parallel_size: int = 100

    def __post_init__(self) -> None:
        # None means unconstrained
        object.__setattr__(self, "constraint", resolve_constraint(self.constraint))
        if self.n_jobs != -1 and self.n_jobs < 1:
            raise InvalidArgumentError("n_jobs must be -1 or a positive integer")
        if self.backend not in BACKENDS:
            raise InvalidArgumentError(f"backend must be one of {BACKENDS}")
        if self.min_parallel_size < 0:
            raise InvalidArgumentError("min_parallel_size must be non-negative")

    def with_options(self, **changes) -> "SearchConfig":
        return replace(self, **changes)
