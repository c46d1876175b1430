import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import numpy as np
import pytest

from dtw_neighbors.benchmark import random_walks
from dtw_neighbors.config import SearchConfig
from dtw_neighbors.constraints import BandConstraint
from dtw_neighbors.exceptions import InvalidArgumentError, ParallelSearchError
from dtw_neighbors.neighbors import DTWNeighbors
from dtw_neighbors.parallel import chunk_bounds, k_nearest_parallel, resolve_n_jobs, run_tasks
from dtw_neighbors.preprocessing import as_dataset, as_series
from dtw_neighbors.validation import results_match


@pytest.fixture(scope="module")
def walks():
    rng = np.random.default_rng(31)
    return random_walks(150, 30, rng), random_walks(3, 30, rng)


def test_chunk_bounds():
    assert chunk_bounds(10, 3) == [(0, 4), (4, 8), (8, 10)]
    assert chunk_bounds(2, 4) == [(0, 1), (1, 2)]
    assert chunk_bounds(0, 4) == []
    with pytest.raises(InvalidArgumentError):
        chunk_bounds(5, 0)


def test_resolve_n_jobs():
    assert resolve_n_jobs(3) == 3
    assert resolve_n_jobs(-1) >= 1
    with pytest.raises(InvalidArgumentError):
        resolve_n_jobs(0)


@pytest.mark.parametrize("n_jobs", [2, 4, 8])
def test_partitioned_k_nearest_matches_sequential(walks, n_jobs):
    dataset, queries = walks
    config = SearchConfig(BandConstraint(3))
    sequential = DTWNeighbors(config, parallel=False).k_nearest(queries[0], dataset, 7)
    searcher = DTWNeighbors(config, n_jobs=n_jobs)
    assert results_match(searcher.k_nearest(queries[0], dataset, 7), sequential)
    assert searcher.stats.total == len(dataset)


@pytest.mark.parametrize("n_jobs", [2, 4, 8])
def test_partitioned_radius_search_matches_sequential(walks, n_jobs):
    dataset, queries = walks
    sequential = DTWNeighbors(parallel=False).radius_search(queries[1], dataset, 3.0)
    parallel = DTWNeighbors(n_jobs=n_jobs).radius_search(queries[1], dataset, 3.0)
    assert results_match(parallel, sequential)


def test_k_larger_than_a_chunk(walks):
    dataset, queries = walks
    sequential = DTWNeighbors(parallel=False).k_nearest(queries[2], dataset, 60)
    parallel = DTWNeighbors(n_jobs=8).k_nearest(queries[2], dataset, 60)
    assert len(parallel) == 60
    assert results_match(parallel, sequential)


def test_small_dataset_stays_sequential(walks):
    dataset, queries = walks
    searcher = DTWNeighbors(n_jobs=4, min_parallel_size=1000)
    assert results_match(
        searcher.k_nearest(queries[0], dataset, 3),
        DTWNeighbors(parallel=False).k_nearest(queries[0], dataset, 3),
    )


def test_process_backend(walks):
    dataset, queries = walks
    config = SearchConfig(BandConstraint(2), backend="process", n_jobs=2, min_parallel_size=0)
    data = as_dataset(dataset[:40])
    results, stats = k_nearest_parallel(as_series(queries[0]), data, 4, config, 2)
    expected = DTWNeighbors(config, parallel=False).k_nearest(queries[0], data, 4)
    assert results_match(results, expected)
    assert stats.total == 40


def _fail_on_three(value):
    if value == 3:
        raise ValueError("bad chunk")
    return value * 2


def test_run_tasks_preserves_order():
    assert run_tasks(_fail_on_three, [(1,), (2,), (4,)], 3) == [2, 4, 8]


def test_worker_failure_raises_single_error():
    with pytest.raises(ParallelSearchError) as excinfo:
        run_tasks(_fail_on_three, [(1,), (3,), (5,), (7,)], 2)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_unknown_backend():
    with pytest.raises(InvalidArgumentError):
        run_tasks(_fail_on_three, [(1,)], 1, backend="cluster")


@pytest.mark.parametrize("k", [5, 50])
@pytest.mark.parametrize("n_jobs", [2, 4, 8])
def test_tied_distances_resolve_by_index_across_chunks(k, n_jobs):
    base = np.sin(np.linspace(0, 3, 20))
    dataset = [base, base + 0.5, -base] * 40
    config = SearchConfig(BandConstraint(2), min_parallel_size=0)

    sequential = DTWNeighbors(config, parallel=False).k_nearest(base, dataset, k)
    parallel = DTWNeighbors(config, n_jobs=n_jobs).k_nearest(base, dataset, k)
    assert parallel == sequential
    assert [r.index for r in parallel[:min(k, 40)]] == list(range(0, 3 * min(k, 40), 3))
    if k > 40:
        assert [r.index for r in parallel[40:]] == list(range(1, 3 * (k - 40), 3))


@pytest.mark.parametrize("n_jobs", [2, 4, 8])
def test_tied_radius_matches_sequential(n_jobs):
    base = np.sin(np.linspace(0, 3, 20))
    dataset = [base, -base, base] * 40
    config = SearchConfig(BandConstraint(2), min_parallel_size=0)
    sequential = DTWNeighbors(config, parallel=False).radius_search(base, dataset, 0.0)
    parallel = DTWNeighbors(config, n_jobs=n_jobs).radius_search(base, dataset, 0.0)
    assert parallel == sequential
    assert len(parallel) == 80
