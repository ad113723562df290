"""
Unit tests for chunking and process pool scanning.
"""

import pytest

import src.anomaly.workers as anomaly_workers
from src.anomaly.profiles import PROFILES
from src.core.exceptions import WorkerPoolError
from src.core.workers import make_batches, make_chunks, run_in_pool
from src.data.schema import AnimalRecord
from src.stats.descriptive import mean


def _cohort(n):
    animals = []
    for i in range(n):
        values = [100.0 + i, 120.0 + i, 0.0 if i % 4 == 0 else 150.0 + i, 180.0 + i]
        animals.append(AnimalRecord(id=f"M{i}", group="A", time_points=[0, 7, 14, 21], measurements=values))
    return animals


def test_make_batches():
    assert make_batches([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert make_batches([], 3) == []


def test_make_chunks():
    chunks = make_chunks(list(range(10)), 3)
    assert [len(c) for c in chunks] == [4, 4, 2]
    assert [x for c in chunks for x in c] == list(range(10))
    assert make_chunks([], 4) == []


def test_scan_falls_back_when_pool_fails(monkeypatch):
    def broken_pool(*args, **kwargs):
        raise WorkerPoolError("Worker pool failed: simulated")

    monkeypatch.setattr(anomaly_workers, "run_in_pool", broken_pool)
    animals = _cohort(12)
    profile = PROFILES["conservative"]

    assert anomaly_workers.scan_animals(animals, profile, max_workers=2) == anomaly_workers.scan_chunk(
        animals, profile
    )


def test_small_datasets_stay_in_process(monkeypatch):
    def unexpected_pool(*args, **kwargs):
        raise AssertionError("pool should not be used")

    monkeypatch.setattr(anomaly_workers, "run_in_pool", unexpected_pool)
    flags = anomaly_workers.scan_animals(_cohort(4), PROFILES["conservative"], max_workers=4)
    assert len(flags) == 4


@pytest.mark.slow
def test_run_in_pool_preserves_order():
    completed = []
    results = run_in_pool(
        mean,
        [([1, 2, 3],), ([10, 20],), ([5],)],
        max_workers=2,
        timeout=60,
        on_result=lambda index, result: completed.append(index),
    )
    assert results == [2.0, 15.0, 5.0]
    assert sorted(completed) == [0, 1, 2]


@pytest.mark.slow
def test_parallel_scan_matches_sequential_scan():
    animals = _cohort(16)
    profile = PROFILES["conservative"]

    parallel = anomaly_workers.scan_animals(animals, profile, max_workers=2)
    assert parallel == anomaly_workers.scan_chunk(animals, profile)
