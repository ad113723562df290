"""
Unit tests for batch growth fitting.
"""

import math

import src.growth.batch as growth_batch
from src.core.exceptions import WorkerPoolError
from src.growth import fit_growth_model_batch


def _raw(animal_id, r, group="A"):
    days = [0, 7, 14, 21]
    return {
        "id": animal_id,
        "group": group,
        "timePoints": days,
        "measurements": [100 * math.exp(r * d) for d in days],
    }


def test_batch_fits_every_animal_in_order():
    animals = [_raw(f"M{i}", 0.05 + 0.01 * i) for i in range(5)]

    result = fit_growth_model_batch(animals, batch_size=2)

    assert [a.id for a in result.animals] == ["M0", "M1", "M2", "M3", "M4"]
    assert [a.index for a in result.animals] == [0, 1, 2, 3, 4]
    assert all(abs(a.model.r - (0.05 + 0.01 * i)) < 1e-9 for i, a in enumerate(result.animals))
    assert result.stats.total_animals == 5
    assert result.stats.valid_models == 5
    assert result.stats.batches_processed == 3
    assert result.stats.processing_time >= 0


def test_malformed_animal_does_not_abort_batch():
    animals = [
        _raw("M1", 0.1),
        {"id": "BAD", "group": "B", "timePoints": [0, 7], "measurements": [100]},
        42,
        _raw("M3", 0.1),
    ]

    result = fit_growth_model_batch(animals)

    assert [a.id for a in result.animals] == ["M1", "BAD", "animal_3", "M3"]
    bad = result.animals[1]
    assert bad.group == "B"
    assert bad.metrics is None
    assert bad.model.error is not None
    assert bad.model.equation == "Error in calculation"
    assert result.animals[0].metrics is not None
    assert result.stats.valid_models == 2


def test_progress_events_per_batch():
    events = []
    animals = [_raw(f"M{i}", 0.1) for i in range(5)]

    fit_growth_model_batch(animals, batch_size=2, progress_callback=events.append)

    assert [(e.batch_index, e.batch_progress, e.overall_progress) for e in events] == [
        (0, 100, 40),
        (1, 100, 80),
        (2, 100, 100),
    ]
    assert all(e.total_batches == 3 for e in events)


def test_progress_within_large_batch():
    events = []
    animals = [_raw(f"M{i}", 0.1) for i in range(25)]

    fit_growth_model_batch(animals, batch_size=25, progress_callback=events.append)

    assert [e.batch_progress for e in events] == [40, 80, 100]


def test_empty_input():
    result = fit_growth_model_batch([])
    assert result.animals == []
    assert result.stats.total_animals == 0
    assert result.stats.batches_processed == 0


def test_pool_failure_falls_back(monkeypatch):
    def broken_pool(*args, **kwargs):
        raise WorkerPoolError("Worker timeout after 30s")

    monkeypatch.setattr(growth_batch, "run_in_pool", broken_pool)
    animals = [_raw(f"M{i}", 0.1) for i in range(4)]

    result = fit_growth_model_batch(animals, batch_size=2, max_workers=2)

    assert [a.id for a in result.animals] == ["M0", "M1", "M2", "M3"]
    assert result.stats.valid_models == 4
