import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest

from dtw_neighbors.stats import SearchStats


def test_pruning_rate():
    stats = SearchStats(total=10, dtw_calculations=4)
    assert stats.pruning_rate == pytest.approx(0.6)
    assert SearchStats().pruning_rate == 0.0


def test_record_prune_and_total_prunes():
    stats = SearchStats()
    for level in ("endpoint", "segment", "segment", "improved"):
        stats.record_prune(level)
    assert stats.segment_prunes == 2
    assert stats.prunes == 4


def test_merge_and_add():
    a = SearchStats(total=3, envelope_prunes=1, dtw_calculations=2, abandoned=1)
    b = SearchStats(total=5, endpoint_prunes=2, dtw_calculations=3)
    c = a + b
    assert c.total == 8
    assert c.prunes == 3
    assert a.total == 3
    a.merge(b)
    assert a == c


def test_as_dict_and_str():
    stats = SearchStats(total=4, dtw_calculations=1, endpoint_prunes=3)
    data = stats.as_dict()
    assert data["prunes"] == 3
    assert data["pruning_rate"] == pytest.approx(0.75)
    assert "pruning_rate=75.00%" in str(stats)
