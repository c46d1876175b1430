from dataclasses import asdict, dataclass, fields
from typing import Dict

LEVELS = ("endpoint", "segment", "envelope", "improved")


@dataclass
class SearchStats:
    """Counters describing how much work a search did.

    Diagnostic only. Each search call fills its own instance and the
    instances are summed once all workers have finished.
    """

    total: int = 0
    endpoint_prunes: int = 0
    segment_prunes: int = 0
    envelope_prunes: int = 0
    improved_prunes: int = 0
    dtw_calculations: int = 0
    abandoned: int = 0

    def record_prune(self, level: str) -> None:
        attr = f"{level}_prunes"
        setattr(self, attr, getattr(self, attr) + 1)

    @property
    def prunes(self) -> int:
        return sum(getattr(self, f"{level}_prunes") for level in LEVELS)

    @property
    def pruning_rate(self) -> float:
        """Share of comparisons that never needed a full DTW evaluation."""
        if self.total == 0:
            return 0.0
        return (self.total - self.dtw_calculations) / self.total

    def merge(self, other: "SearchStats") -> "SearchStats":
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        return self

    def __add__(self, other: "SearchStats") -> "SearchStats":
        return SearchStats(**asdict(self)).merge(other)

    def as_dict(self) -> Dict[str, float]:
        data: Dict[str, float] = asdict(self)
        data["prunes"] = self.prunes
        data["pruning_rate"] = self.pruning_rate
        return data

    def __str__(self) -> str:
        return (
            f"SearchStats(total={self.total}, endpoint={self.endpoint_prunes}, "
            f"segment={self.segment_prunes}, envelope={self.envelope_prunes}, "
            f"improved={self.improved_prunes}, dtw={self.dtw_calculations}, "
            f"abandoned={self.abandoned}, pruning_rate={self.pruning_rate * 100:.2f}%)"
        )
