import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from dtw_neighbors.benchmark import (
    build_parser,
    distance_heatmap,
    main,
    plot_pruning,
    random_walks,
    run_benchmark,
)
from dtw_neighbors.constraints import BandConstraint


def test_random_walks_are_normalized():
    walks = random_walks(5, 40, np.random.default_rng(0))
    assert len(walks) == 5
    for walk in walks:
        assert walk.shape == (40,)
        assert walk.mean() == pytest.approx(0.0, abs=1e-9)


def test_run_benchmark_frame():
    frame = run_benchmark(size=60, length=20, k=3, constraint=BandConstraint(2), n_jobs=2)
    assert list(frame.index) == ["exhaustive", "pruned", "parallel"]
    for column in ("seconds", "dtw_calculations", "pruning_rate", "matches_exhaustive",
                   "endpoint_prunes", "improved_prunes", "speedup"):
        assert column in frame.columns
    assert frame["matches_exhaustive"].all()
    assert frame.loc["exhaustive", "dtw_calculations"] == 60
    assert frame.loc["exhaustive", "pruning_rate"] == 0.0


def test_plots_are_written(tmp_path):
    frame = run_benchmark(size=30, length=15, k=2, n_jobs=2)
    chart = tmp_path / "plots" / "pruning.png"
    plot_pruning(frame, str(chart))
    assert chart.exists()

    heatmap = tmp_path / "heatmap.png"
    matrix = distance_heatmap(random_walks(4, 15, np.random.default_rng(1)), str(heatmap))
    assert heatmap.exists()
    assert matrix.shape == (4, 4)


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.size == 200
    assert args.constraint == "none"


def test_main_prints_summary(capsys):
    main(["--size", "20", "--length", "10", "--k", "2", "--constraint", "band", "--param", "2"])
    out = capsys.readouterr().out
    assert "DTW k-nearest benchmark" in out
    assert "exhaustive" in out


def test_main_band_defaults_to_fraction_of_length(capsys):
    main(["--size", "20", "--length", "120", "--k", "2", "--constraint", "band"])
    out = capsys.readouterr().out
    assert "BandConstraint(radius=6)" in out
