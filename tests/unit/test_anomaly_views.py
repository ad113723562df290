"""
Unit tests for dual and point-filtered dataset views.
"""

from src.anomaly.engine import analyze_dataset
from src.anomaly.schema import Decision, DecisionType, FlagType
from src.anomaly.views import build_dual_analysis, build_point_filtering_analysis
from src.data.schema import AnimalRecord


def _animal(animal_id, values, group="A"):
    days = [7.0 * i for i in range(len(values))]
    return AnimalRecord(id=animal_id, group=group, time_points=days, measurements=values)


def test_point_filtering_removes_only_excluded_points():
    animals = [
        _animal("M1", [100.0, 0.0, 150.0, 200.0]),
        _animal("M2", [100.0, 120.0, 140.0, 160.0]),
    ]
    result = analyze_dataset(animals, strictness="critical")
    points = result.point_filtering_analysis

    assert [a.id for a in points.animals] == ["M1", "M2"]
    m1 = points.animals[0]
    assert m1.time_points == [0.0, 14.0, 21.0]
    assert m1.measurements == [100.0, 150.0, 200.0]
    assert [(p.day, p.value, p.reason) for p in m1.excluded_points] == [(7.0, 0.0, "Automatic filtering")]
    assert points.excluded_points == 1
    assert points.total_points_original == 8
    assert points.total_points_filtered == 7


def test_point_filtering_drops_animals_left_too_short():
    result = analyze_dataset([_animal("M1", [100.0, 0.0, 150.0])], strictness="critical")

    assert result.point_filtering_analysis.animals == []
    assert result.dual_analysis.filtered.count == 0


def test_retained_animals_keep_at_least_three_points():
    animals = [
        _animal("M1", [100.0, -1.0, 0.0, 150.0, 160.0]),
        _animal("M2", [100.0, 0.0, 0.0, 150.0]),
    ]
    result = analyze_dataset(animals, strictness="all")

    for animal in result.point_filtering_analysis.animals:
        assert len(animal.time_points) == len(animal.measurements) >= 3
    assert [a.id for a in result.point_filtering_analysis.animals] == ["M1"]


def test_stale_exclusion_is_not_applied():
    animals = analyze_dataset([_animal("M1", [100.0, 200.0, 50.0])]).animals
    flags = animals[0].flags
    assert [f.type for f in flags] == [FlagType.LAST_DAY_DROP]

    stale = [Decision(flag_id=0, animal_id="M1", day=14.0, decision=DecisionType.EXCLUDE, reason="manual")]
    dual = build_dual_analysis(animals, flags, stale, "criticalAndHigh")
    points = build_point_filtering_analysis(animals, flags, stale, "criticalAndHigh")

    assert dual.impact.animals_excluded == 0
    assert points.excluded_points == 0

    dual_all = build_dual_analysis(animals, flags, stale, "all")
    assert dual_all.impact.excluded_animal_ids == ["M1"]


def test_impact_counts_measurements():
    animals = [_animal("M1", [100.0, 0.0, 150.0, 200.0]), _animal("M2", [100.0, 120.0])]
    impact = analyze_dataset(animals, strictness="critical").dual_analysis.impact

    assert impact.animals_excluded == 1
    assert impact.measurements_excluded == 4


def test_exclusion_uses_the_decisions_own_flag():
    # a medium last-day drop and a high intra-animal outlier share day 28
    animal = AnimalRecord(
        id="M1",
        group="A",
        time_points=[0.0, 7.0, 14.0, 21.0, 28.0],
        measurements=[100.0, 110.0, 120.0, 130.0, 40.0],
    )
    result = analyze_dataset([animal], profile="conservative", strictness="criticalAndHigh")

    assert [(f.type, f.day) for f in result.flags] == [
        (FlagType.LAST_DAY_DROP, 28.0),
        (FlagType.INTRA_ANIMAL_OUTLIER, 28.0),
    ]
    assert [d.decision for d in result.decisions] == [DecisionType.INCLUDE, DecisionType.EXCLUDE]

    assert result.dual_analysis.impact.excluded_animal_ids == ["M1"]
    points = result.point_filtering_analysis
    assert points.excluded_points == 1
    assert points.animals[0].time_points == [0.0, 7.0, 14.0, 21.0]
    assert [(p.day, p.value) for p in points.animals[0].excluded_points] == [(28.0, 40.0)]
