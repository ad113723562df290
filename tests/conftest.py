"""
Pytest configuration and shared fixtures.

Provides configuration instances and synthetic tumor cohorts for unit and
integration tests.
"""

import math
from typing import Any, Dict, List

import pytest

from src.core.config import Config
from src.data.schema import AnimalRecord


@pytest.fixture
def mock_config(tmp_path):
    """
    Fixture providing a test configuration with explicit values.

    Ensures tests run consistently regardless of TUMORQC_* environment
    variables or .env settings.
    """
    return Config(log_level="WARNING", logs_dir=tmp_path / "logs")


def make_animal(animal_id: str, group: str, days: List[float], values: List[float]) -> AnimalRecord:
    return AnimalRecord(id=animal_id, group=group, time_points=days, measurements=values)


def exponential_series(a: float, r: float, days: List[float]) -> List[float]:
    return [a * math.exp(r * d) for d in days]


@pytest.fixture
def weekly_days() -> List[float]:
    return [0.0, 7.0, 14.0, 21.0]


@pytest.fixture
def clean_group(weekly_days) -> List[AnimalRecord]:
    """Five animals growing about 20% per week from similar baselines."""
    baselines = [100, 105, 110, 95, 102]
    return [
        make_animal(f"C{i + 1}", "Control", weekly_days, [b * 1.2**w for w in range(len(weekly_days))])
        for i, b in enumerate(baselines)
    ]


@pytest.fixture
def sample_cohort_data(weekly_days) -> List[Dict[str, Any]]:
    """
    Three groups of five animals as raw camelCase mappings.

    Baseline CVs: Treatment A about 53% (poor), Control and Treatment B about
    30% (fair). Every animal grows about 20% per week.
    """
    baselines = {
        "Control": [100, 130, 160, 190, 220],
        "Treatment A": [50, 100, 150, 200, 250],
        "Treatment B": [100, 130, 160, 190, 220],
    }
    animals = []
    for group, values in baselines.items():
        for i, baseline in enumerate(values):
            animals.append(
                {
                    "id": f"{group[0]}{group[-1]}-{i + 1}",
                    "group": group,
                    "timePoints": list(weekly_days),
                    "measurements": [baseline * 1.2**w for w in range(len(weekly_days))],
                }
            )
    return animals


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
