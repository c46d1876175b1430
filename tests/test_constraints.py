import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest

from dtw_neighbors.constraints import (
    BandConstraint,
    NoConstraint,
    ParallelogramConstraint,
    make_constraint,
    resolve_constraint,
)
from dtw_neighbors.exceptions import InvalidArgumentError


def _connected(bounds, m):
    assert bounds[0][0] == 0
    assert bounds[-1][1] == m - 1
    for (s0, e0), (s1, e1) in zip(bounds, bounds[1:]):
        assert s0 <= e0 and s1 <= e1
        assert s1 <= e0 + 1


def test_no_constraint_is_full():
    assert NoConstraint().row_bounds(3, 4) == [(0, 3)] * 3
    assert NoConstraint().envelope_radius(5, 5) == 4


def test_band_rows():
    assert BandConstraint(1).row_bounds(4, 4) == [(0, 1), (0, 2), (1, 3), (2, 3)]
    assert BandConstraint(0).row_bounds(3, 3) == [(0, 0), (1, 1), (2, 2)]


def test_band_widens_to_length_difference():
    band = BandConstraint(1)
    assert band.envelope_radius(10, 4) == 6
    _connected(band.row_bounds(10, 4), 4)


def test_band_validation():
    with pytest.raises(InvalidArgumentError):
        BandConstraint(-1)
    with pytest.raises(InvalidArgumentError):
        BandConstraint(1.5)
    assert BandConstraint(2.0).radius == 2


def test_band_from_fraction():
    assert BandConstraint.from_fraction(200).radius == 10
    assert BandConstraint.from_fraction(20).radius == 5
    assert BandConstraint.from_fraction(100, 0.2, minimum=0).radius == 20
    with pytest.raises(InvalidArgumentError):
        BandConstraint.from_fraction(100, 1.5)


@pytest.mark.parametrize("n,m", [(10, 10), (9, 3), (3, 9), (20, 13), (2, 2), (1, 5)])
def test_parallelogram_rows_connected_and_contain_diagonal(n, m):
    bounds = ParallelogramConstraint().row_bounds(n, m)
    assert len(bounds) == n
    _connected(bounds, m)
    if n > 1:
        ratio = (m - 1) / (n - 1)
        for i, (start, end) in enumerate(bounds):
            assert start <= ratio * i + 1e-9
            assert end >= ratio * i - 1e-9


def test_parallelogram_narrower_than_full():
    bounds = ParallelogramConstraint(2.0).row_bounds(21, 21)
    assert bounds[0] == (0, 0)
    assert bounds[10] == (5, 15)
    assert ParallelogramConstraint(2.0).envelope_radius(21, 21) < 20


def test_parallelogram_validation():
    with pytest.raises(InvalidArgumentError):
        ParallelogramConstraint(0.5)
    with pytest.raises(InvalidArgumentError):
        ParallelogramConstraint(float("inf"))


def test_make_constraint():
    assert make_constraint("none") == NoConstraint()
    assert make_constraint("sakoe_chiba", 3) == BandConstraint(3)
    assert make_constraint("itakura") == ParallelogramConstraint(2.0)
    assert make_constraint("parallelogram", 3) == ParallelogramConstraint(3.0)
    with pytest.raises(InvalidArgumentError):
        make_constraint("band")
    with pytest.raises(InvalidArgumentError):
        make_constraint("diamond")


def test_band_without_radius_is_sized_from_length():
    assert make_constraint("band", length=200) == BandConstraint(10)
    assert make_constraint("sakoe_chiba", length=20) == BandConstraint(5)
    assert make_constraint("band", 3, length=200) == BandConstraint(3)


def test_resolve_constraint():
    assert resolve_constraint(None) == NoConstraint()
    with pytest.raises(InvalidArgumentError):
        resolve_constraint("band")
