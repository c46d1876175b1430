import heapq
from typing import Iterable, List, NamedTuple, Tuple

from .exceptions import InvalidArgumentError


class NeighborResult(NamedTuple):
    """A candidate's position in the dataset and its DTW distance to the query."""

    index: int
    distance: float

    @property
    def key(self) -> Tuple[float, int]:
        return self.distance, self.index

    def __repr__(self) -> str:
        return f"NeighborResult(index={self.index}, distance={self.distance:.6f})"


def sort_results(results: Iterable[NeighborResult]) -> List[NeighborResult]:
    """Ascending distance, ties broken by ascending index."""
    return sorted(results, key=lambda r: (r.distance, r.index))


class BoundedBestSet:
    """Keeps the ``capacity`` best results seen so far.

    Backed by a max-heap on ``(distance, index)`` so the worst accepted
    result, the live pruning threshold, sits at the root.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise InvalidArgumentError("capacity must be positive")
        self.capacity = capacity
        self._heap: List[Tuple[float, int, NeighborResult]] = []

    def __len__(self) -> int:
        return len(self._heap)

    @property
    def is_full(self) -> bool:
        return len(self._heap) >= self.capacity

    @property
    def threshold(self) -> float:
        """Worst accepted distance once full, infinity before."""
        if not self.is_full:
            return float("inf")
        return -self._heap[0][0]

    def offer(self, result: NeighborResult) -> bool:
        """Insert ``result`` if it beats the current worst; report whether it was kept."""
        entry = (-result.distance, -result.index, result)
        if not self.is_full:
            heapq.heappush(self._heap, entry)
            return True
        worst = self._heap[0]
        if (result.distance, result.index) < (-worst[0], -worst[1]):
            heapq.heapreplace(self._heap, entry)
            return True
        return False

    def merge(self, results: Iterable[NeighborResult]) -> None:
        for result in results:
            self.offer(result)

    def drain(self) -> List[NeighborResult]:
        """Empty the set and return its contents sorted ascending."""
        items = [entry[2] for entry in self._heap]
        self._heap = []
        return sort_results(items)
