"""Compare exhaustive, pruned and parallel k-nearest search on random walks.

Run ``python -m dtw_neighbors.benchmark --help`` for the options.
"""

import argparse
import logging
import os
import time
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .config import SearchConfig
from .constraints import GlobalConstraint, NoConstraint, make_constraint
from .dtw import cdist_dtw
from .neighbors import DTWNeighbors
from .preprocessing import zscore
from .stats import LEVELS
from .validation import results_match

logger = logging.getLogger(__name__)


def random_walks(n: int, length: int, rng: np.random.Generator) -> List[np.ndarray]:
    """``n`` z-normalised Gaussian random walks of ``length`` steps."""
    steps = rng.normal(scale=0.1, size=(n, length))
    steps[:, 0] = rng.normal(size=n)
    return [zscore(walk) for walk in np.cumsum(steps, axis=1)]


def run_benchmark(
    size: int = 200,
    length: int = 50,
    k: int = 5,
    constraint: Optional[GlobalConstraint] = None,
    n_jobs: int = 4,
    seed: int = 123,
) -> pd.DataFrame:
    """Time one k-nearest query in each search mode, one row per mode."""
    rng = np.random.default_rng(seed)
    dataset = random_walks(size, length, rng)
    query = random_walks(1, length, rng)[0]
    constraint = constraint or NoConstraint()

    modes = {
        "exhaustive": SearchConfig(
            constraint, use_lower_bounds=False, early_abandon=False, parallel=False
        ),
        "pruned": SearchConfig(constraint, parallel=False),
        "parallel": SearchConfig(constraint, n_jobs=n_jobs, min_parallel_size=0),
    }

    baseline = None
    rows = []
    for mode, config in modes.items():
        searcher = DTWNeighbors(config)
        start = time.perf_counter()
        results = searcher.k_nearest(query, dataset, k)
        elapsed = time.perf_counter() - start
        if baseline is None:
            baseline = results
        stats = searcher.stats
        row = {
            "mode": mode,
            "seconds": elapsed,
            "dtw_calculations": stats.dtw_calculations,
            "abandoned": stats.abandoned,
            "pruning_rate": stats.pruning_rate,
            "matches_exhaustive": results_match(results, baseline),
        }
        for level in LEVELS:
            row[f"{level}_prunes"] = getattr(stats, f"{level}_prunes")
        rows.append(row)
        logger.info("%s: %.3fs %s", mode, elapsed, stats)

    frame = pd.DataFrame(rows).set_index("mode")
    frame["speedup"] = frame.loc["exhaustive", "seconds"] / frame["seconds"]
    return frame


def plot_pruning(frame: pd.DataFrame, output_path: str) -> None:
    """Bar chart of prunes per cascade level for each mode."""
    import matplotlib.pyplot as plt

    columns = [f"{level}_prunes" for level in LEVELS]
    ax = frame[columns].plot(kind="bar", figsize=(8, 5))
    ax.set_title("Candidates pruned per lower-bound level")
    ax.set_xlabel("Search mode")
    ax.set_ylabel("Pruned candidates")
    ax.legend(list(LEVELS))
    plt.tight_layout()
    if os.path.dirname(output_path):
        os.makedirs(os.path.dirname(output_path), exist_ok=True)
    plt.savefig(output_path)
    plt.close()


def distance_heatmap(
    dataset: Sequence,
    output_path: str,
    constraint: Optional[GlobalConstraint] = None,
    n_jobs: int = 1,
) -> np.ndarray:
    """Heatmap of pairwise DTW distances; returns the matrix."""
    import matplotlib.pyplot as plt
    import seaborn as sns

    matrix = cdist_dtw(dataset, constraint, n_jobs=n_jobs)
    labels = [f"S{i}" for i in range(len(matrix))]
    plt.figure(figsize=(10, 8))
    sns.heatmap(matrix, annot=len(matrix) <= 12, cmap="coolwarm",
                xticklabels=labels, yticklabels=labels)
    plt.title("Pairwise DTW distance")
    plt.tight_layout()
    if os.path.dirname(output_path):
        os.makedirs(os.path.dirname(output_path), exist_ok=True)
    plt.savefig(output_path)
    plt.close()
    return matrix


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DTW neighbor search benchmark")
    parser.add_argument("--size", type=int, default=200, help="Number of candidate series")
    parser.add_argument("--length", type=int, default=50, help="Length of every series")
    parser.add_argument("--k", type=int, default=5, help="Neighbors to return")
    parser.add_argument("--constraint", default="none",
                        help="none, band (sakoe_chiba) or parallelogram (itakura)")
    parser.add_argument("--param", type=float, default=None,
                        help="Band radius (default 5%% of --length, at least 5) or parallelogram slope")
    parser.add_argument("--jobs", type=int, default=4, help="Workers for the parallel mode")
    parser.add_argument("--seed", type=int, default=123)
    parser.add_argument("--plot", default=None, help="Write a pruning bar chart to this path")
    parser.add_argument("--heatmap", default=None,
                        help="Write a distance heatmap of the first 10 series to this path")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the benchmark and print a summary table."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    constraint = make_constraint(args.constraint, args.param, length=args.length)
    frame = run_benchmark(args.size, args.length, args.k, constraint, args.jobs, args.seed)

    print("=== DTW k-nearest benchmark ===")
    print(f"Dataset: {args.size} series x {args.length} points, k={args.k}, {constraint}")
    print(frame.to_string(float_format=lambda v: f"{v:.4f}"))

    if args.plot:
        plot_pruning(frame, args.plot)
        print(f"\nPruning chart written to {args.plot}")
    if args.heatmap:
        rng = np.random.default_rng(args.seed)
        distance_heatmap(random_walks(10, args.length, rng), args.heatmap, constraint)
        print(f"Distance heatmap written to {args.heatmap}")


if __name__ == "__main__":
    main()
