"""
Unit tests for exponential growth fitting.
"""

import math

import pytest

from src.core.exceptions import DataValidationError, InsufficientVariationError
from src.growth import animal_metrics, fit_growth_model, log_linear_regression


def test_perfect_exponential_series():
    days = [0, 5, 10, 15, 20]
    values = [10 * math.exp(0.1 * d) for d in days]

    model = fit_growth_model(days, values)

    assert model.error is None
    assert model.is_valid
    assert model.r2 >= 0.999
    assert abs(model.r - 0.1) < 1e-3
    assert model.a == pytest.approx(10.0)
    assert model.valid_points == 5
    assert model.equation == "y = 10.00 × e^(0.1000×t)"


def test_fewer_than_three_valid_points_is_degenerate():
    model = fit_growth_model([0, 7, 14, 21], [100, 0, None, 150])

    assert model.valid_points == 2
    assert model.error == "Less than 3 valid points"
    assert model.equation == "Insufficient data"
    assert (model.a, model.r, model.r2) == (1.0, 0.0, 0.0)


def test_identical_time_points_is_degenerate():
    model = fit_growth_model([7, 7, 7], [100, 110, 120])

    assert model.valid_points == 3
    assert model.equation == "Error in calculation"
    assert model.error is not None
    assert model.r2 == 0.0


def test_constant_series_has_zero_fit_quality():
    model = fit_growth_model([0, 7, 14], [100, 100, 100])

    assert model.r == pytest.approx(0.0)
    assert model.r2 == 0.0


def test_length_mismatch_raises():
    with pytest.raises(DataValidationError):
        fit_growth_model([0, 7], [100])


def test_log_linear_regression():
    intercept, slope, r2 = log_linear_regression([0, 1, 2], [1, 3, 5])
    assert intercept == pytest.approx(1.0)
    assert slope == pytest.approx(2.0)
    assert r2 == pytest.approx(1.0)

    with pytest.raises(InsufficientVariationError):
        log_linear_regression([3, 3, 3], [1, 2, 3])


def test_animal_metrics():
    metrics = animal_metrics([100, 0, 250, 200])

    assert metrics.initial_value == 100
    assert metrics.final_value == 200
    assert metrics.growth_ratio == 2.0
    assert metrics.max_value == 250
    assert metrics.min_value == 100


def test_animal_metrics_without_positive_values():
    metrics = animal_metrics([0, -1])
    assert metrics.growth_ratio == 0.0
    assert metrics.final_value == 0.0
