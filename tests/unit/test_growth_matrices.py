"""
Unit tests for tumor growth rate matrices.
"""

import math

import pytest

from src.data.schema import AnimalRecord
from src.growth import growth_rate_matrices, growth_rate_matrix


def _animal(animal_id, group, days, values):
    return AnimalRecord(id=animal_id, group=group, time_points=days, measurements=values)


def test_matrix_is_symmetric_mean_of_individual_rates():
    animals = [
        _animal("M1", "A", [0, 7], [100, 200]),
        _animal("M2", "A", [0, 7], [100, 400]),
    ]

    matrix = growth_rate_matrix(animals)

    assert matrix.days == [0.0, 7.0]
    assert matrix.individual_data["0-7"] == pytest.approx([math.log(2) / 7, math.log(4) / 7])
    assert matrix.values[0][1] == pytest.approx(3 * math.log(2) / 14)
    assert matrix.values[1][0] == matrix.values[0][1]
    assert matrix.values[0][0] == 0.0


def test_pairs_without_valid_values_stay_zero():
    animals = [
        _animal("M1", "A", [0, 7, 14], [100, 0, 300]),
        _animal("M2", "A", [0, 14], [100, 300]),
    ]

    matrix = growth_rate_matrix(animals)

    assert matrix.values[0][1] == 0.0
    assert "0-7" not in matrix.individual_data
    assert len(matrix.individual_data["0-14"]) == 2


def test_one_matrix_per_group():
    animals = [
        _animal("M1", "Control", [0, 7], [100, 200]),
        _animal("M2", "Treated", [0, 7, 14], [100, 110, 120]),
    ]

    matrices = growth_rate_matrices(animals)

    assert list(matrices) == ["Control", "Treated"]
    assert matrices["Control"].group == "Control"
    assert matrices["Treated"].days == [0.0, 7.0, 14.0]
    assert set(matrices["Treated"].individual_data) == {"0-7", "0-14", "7-14"}
