"""
Dataset views derived from decisions.

- Dual analysis: complete dataset vs. dataset with flagged animals removed.
- Point filtering: every animal kept, only its excluded points removed.

Both views are built from the same flags and decisions and never mutate the
annotated animals they receive.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from src.core.config import config

from .detectors import BASELINE_DAY
from .schema import (
    AnnotatedAnimal,
    DatasetView,
    Decision,
    DecisionType,
    DualAnalysis,
    ExcludedPoint,
    FilteringImpact,
    FilteringStrictness,
    Flag,
    PointFilteredAnimal,
    PointFilteringAnalysis,
)
from .scoring import parse_strictness, severity_of, should_exclude

EXCLUSION_REASON = "Automatic filtering"


def _first_flags(flags: Sequence[Flag]) -> Dict[Tuple[str, float], Flag]:
    """First flag raised for each (animal, day) pair."""
    first: Dict[Tuple[str, float], Flag] = {}
    for flag in flags:
        first.setdefault((flag.animal_id, flag.day), flag)
    return first


def _decision_flag(
    decision: Decision,
    flags: Sequence[Flag],
    first: Dict[Tuple[str, float], Flag],
) -> Optional[Flag]:
    """The flag a decision refers to; by (animal, day) when flag_id no longer matches."""
    if 0 <= decision.flag_id < len(flags):
        flag = flags[decision.flag_id]
        if flag.animal_id == decision.animal_id and flag.day == decision.day:
            return flag
    return first.get((decision.animal_id, decision.day))


def _confirmed_exclusions(
    flags: Sequence[Flag],
    decisions: Sequence[Decision],
    strictness: FilteringStrictness,
) -> List[Decision]:
    """
    EXCLUDE decisions whose referenced flag still meets the strictness.

    A stale decision list produced under another strictness cannot exclude
    anything the current one keeps.
    """
    first = _first_flags(flags)
    confirmed = []
    for decision in decisions:
        if decision.decision != DecisionType.EXCLUDE:
            continue
        flag = _decision_flag(decision, flags, first)
        if flag is not None and should_exclude(severity_of(flag.type), strictness):
            confirmed.append(decision)
    return confirmed


def _view(animals: List[AnnotatedAnimal]) -> DatasetView:
    return DatasetView(
        animals=animals,
        count=len(animals),
        total_measurements=sum(len(a.measurements) for a in animals),
    )


def build_dual_analysis(
    animals: Sequence[AnnotatedAnimal],
    flags: Sequence[Flag],
    decisions: Sequence[Decision],
    strictness: Union[str, FilteringStrictness, None] = None,
) -> DualAnalysis:
    level = parse_strictness(strictness)

    excluded_ids: List[str] = []
    for decision in _confirmed_exclusions(flags, decisions, level):
        if decision.animal_id not in excluded_ids:
            excluded_ids.append(decision.animal_id)

    excluded = set(excluded_ids)
    complete = _view(list(animals))
    filtered = _view([a for a in animals if a.id not in excluded])

    return DualAnalysis(
        complete=complete,
        filtered=filtered,
        impact=FilteringImpact(
            animals_excluded=complete.count - filtered.count,
            measurements_excluded=complete.total_measurements - filtered.total_measurements,
            excluded_animal_ids=excluded_ids,
        ),
    )


def build_point_filtering_analysis(
    animals: Sequence[AnnotatedAnimal],
    flags: Sequence[Flag],
    decisions: Sequence[Decision],
    strictness: Union[str, FilteringStrictness, None] = None,
) -> PointFilteringAnalysis:
    level = parse_strictness(strictness)
    min_points = config.anomaly.min_points_after_filtering

    excluded_days: Dict[str, Set[float]] = {}
    for decision in _confirmed_exclusions(flags, decisions, level):
        if decision.day != BASELINE_DAY:
            excluded_days.setdefault(decision.animal_id, set()).add(decision.day)

    retained: List[PointFilteredAnimal] = []
    for animal in animals:
        days = excluded_days.get(animal.id, set())
        # only the first occurrence of a flagged day is removed
        excluded_indices = {animal.time_points.index(d) for d in days if d in animal.time_points}

        time_points: List[float] = []
        measurements: List[float] = []
        excluded_points: List[ExcludedPoint] = []
        for i, (day, value) in enumerate(zip(animal.time_points, animal.measurements)):
            if i in excluded_indices:
                excluded_points.append(ExcludedPoint(day=day, value=value, reason=EXCLUSION_REASON))
            else:
                time_points.append(day)
                measurements.append(value)

        if len(time_points) < min_points:
            continue

        retained.append(
            PointFilteredAnimal(
                **animal.model_dump(exclude={"time_points", "measurements"}),
                time_points=time_points,
                measurements=measurements,
                excluded_points=excluded_points,
            )
        )

    return PointFilteringAnalysis(
        animals=retained,
        excluded_points=sum(len(a.excluded_points) for a in retained),
        total_points_original=sum(len(a.time_points) for a in animals),
        total_points_filtered=sum(len(a.time_points) for a in retained),
    )
