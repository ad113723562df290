"""
Unit tests for the anomaly detection engine.
"""

import pytest

from src.anomaly import AnomalyEngine, analyze_dataset, detect_flags, rederive
from src.anomaly.profiles import PROFILES
from src.anomaly.schema import DecisionType, FilteringStrictness, FlagType
from src.core.exceptions import ConfigurationError, DataValidationError
from src.data.schema import AnimalRecord


def _animal(animal_id, values, group="A", days=None):
    days = days if days is not None else [7.0 * i for i in range(len(values))]
    return AnimalRecord(id=animal_id, group=group, time_points=days, measurements=values)


@pytest.fixture
def group_with_outlier():
    day7 = [105.0, 110.0, 95.0, 100.0, 1000.0]
    return [_animal(f"M{i}", [100.0, v]) for i, v in enumerate(day7)]


def test_empty_dataset():
    result = analyze_dataset([])

    assert result.flags == []
    assert result.decisions == []
    assert result.dual_analysis.complete.count == 0
    assert result.dual_analysis.impact.animals_excluded == 0
    assert result.summary.total_flags == 0
    assert [r.title for r in result.recommendations] == ["Data Quality"]


def test_day_zero_extreme_is_preserved():
    result = analyze_dataset([_animal("M1", [5.0, 500.0, 6.0], days=[0.0, 7.0, 14.0])], profile="moderate")

    assert all(f.day != 0 for f in result.flags)
    assert all(a.measurements[0] == 5.0 for a in result.point_filtering_analysis.animals)


def test_impossible_value_excludes_animal(clean_group):
    broken = _animal("X1", [100.0, 0.0, 150.0, 200.0], group="Control")
    result = analyze_dataset(clean_group + [broken], profile="conservative", strictness="critical")

    assert [(f.type, f.animal_id) for f in result.flags] == [(FlagType.IMPOSSIBLE_VALUE, "X1")]
    assert result.decisions[0].decision == DecisionType.EXCLUDE
    assert result.dual_analysis.impact.excluded_animal_ids == ["X1"]
    assert result.dual_analysis.filtered.count == len(clean_group)
    assert result.summary.severity_counts["critical"] == 1
    assert result.summary.config_used == PROFILES["conservative"].name


def test_annotated_animals_carry_flags(clean_group):
    broken = _animal("X1", [100.0, 0.0, 150.0, 200.0], group="Control")
    result = analyze_dataset(clean_group + [broken])

    annotated = next(a for a in result.animals if a.id == "X1")
    assert len(annotated.flags) == 1
    assert annotated.flagged_measurements[0].index == 1
    assert annotated.flagged_measurements[0].day == 7.0
    assert broken.measurements == [100.0, 0.0, 150.0, 200.0]


def test_dual_analysis_invariant_across_strictness(group_with_outlier):
    for strictness in FilteringStrictness:
        dual = analyze_dataset(group_with_outlier, profile="moderate", strictness=strictness).dual_analysis
        assert dual.complete.count - dual.filtered.count == dual.impact.animals_excluded


def test_rederive_changes_decisions_without_rescanning(group_with_outlier):
    lenient = analyze_dataset(group_with_outlier, profile="moderate", strictness="criticalAndHigh")
    assert [f.type for f in lenient.flags] == [FlagType.GROUP_OUTLIER]
    assert lenient.decisions[0].decision == DecisionType.INCLUDE
    assert lenient.dual_analysis.impact.animals_excluded == 0

    strict = rederive(lenient, "all")
    assert strict.flags == lenient.flags
    assert strict.decisions[0].decision == DecisionType.EXCLUDE
    assert strict.dual_analysis.impact.excluded_animal_ids == ["M4"]
    assert strict.summary.strictness == FilteringStrictness.ALL
    assert strict.summary.config_used == lenient.summary.config_used


def test_small_groups_skip_group_scan(group_with_outlier):
    result = analyze_dataset(group_with_outlier, profile="ultraConservative")

    assert result.flags == []
    assert result.log == ["Group A skipped (n=5)"]


def test_detect_flags_is_pure(group_with_outlier):
    first = detect_flags(group_with_outlier, PROFILES["moderate"])
    second = detect_flags(group_with_outlier, PROFILES["moderate"])
    assert first == second


def test_specific_recommendations_for_last_day_drops():
    animals = [_animal(f"M{i}", [100.0, 200.0, 50.0], group=f"G{i}") for i in range(3)]
    result = analyze_dataset(animals)

    titles = [r.title for r in result.specific_recommendations]
    assert titles == ["Last Day Drops"]
    assert result.specific_recommendations[0].affected_animals == ["M0", "M1", "M2"]


def test_record_without_time_points_is_scanned():
    result = analyze_dataset([{"id": "A1", "group": "G", "measurements": [100, 150, 220]}])

    assert result.dual_analysis.complete.count == 1
    assert result.flags == []
    assert result.dual_analysis.impact.animals_excluded == 0


def test_engine_wrapper(group_with_outlier):
    engine = AnomalyEngine(profile="moderate", strictness="all")
    result = engine.analyze_dataset(group_with_outlier, data_type="weight")

    assert result.summary.data_type == "weight"
    assert result.dual_analysis.impact.animals_excluded == 1
    assert engine.rederive(result, "critical").dual_analysis.impact.animals_excluded == 0


def test_invalid_inputs_raise():
    with pytest.raises(ConfigurationError):
        analyze_dataset([], profile="unknown")
    with pytest.raises(ConfigurationError):
        analyze_dataset([], strictness="sometimes")
    with pytest.raises(DataValidationError):
        analyze_dataset([{"id": "M1", "group": "A", "timePoints": [0, 7], "measurements": [1]}])


def test_wire_shape_is_camel_case(group_with_outlier):
    dumped = analyze_dataset(group_with_outlier, profile="moderate").model_dump(by_alias=True)

    assert {"dualAnalysis", "pointFilteringAnalysis", "specificRecommendations"} <= set(dumped)
    assert "animalsExcluded" in dumped["dualAnalysis"]["impact"]
    assert "flagCounts" in dumped["summary"]
