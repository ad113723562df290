"""Tumor growth rate (TGR) matrices between measurement days."""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from src.data.normalizers import normalize_animals
from src.data.schema import AnimalRecord
from src.stats.descriptive import group_by, mean, tumor_growth_rate

from .schema import GrowthRateMatrix

logger = logging.getLogger(__name__)


def _value_at(animal: AnimalRecord, day: float) -> Optional[float]:
    try:
        return animal.measurements[animal.time_points.index(day)]
    except ValueError:
        return None


def growth_rate_matrix(animals: Iterable[Any], group: Optional[str] = None) -> GrowthRateMatrix:
    """
    Build the pairwise TGR matrix for a set of animals.

    Args:
        animals: AnimalRecord instances or raw mappings
        group: Restrict to animals of this group (all animals if None)

    Returns:
        GrowthRateMatrix over the sorted union of the animals' days
    """
    records, _ = normalize_animals(animals)
    if group is not None:
        records = [a for a in records if a.group == group]

    days = sorted({t for a in records for t in a.time_points if math.isfinite(t)})
    values = [[0.0] * len(days) for _ in days]
    individual: Dict[str, List[float]] = {}

    for i, day_x in enumerate(days):
        for j in range(i + 1, len(days)):
            day_y = days[j]
            rates = []
            for animal in records:
                value_x, value_y = _value_at(animal, day_x), _value_at(animal, day_y)
                if value_x is None or value_y is None:
                    continue
                rate = tumor_growth_rate(value_x, value_y, day_x, day_y)
                if not math.isnan(rate):
                    rates.append(rate)

            if rates:
                avg = mean(rates)
                values[i][j] = avg
                values[j][i] = avg
                individual[f"{day_x:g}-{day_y:g}"] = rates

    return GrowthRateMatrix(group=group, days=days, values=values, individual_data=individual)


def growth_rate_matrices(animals: Iterable[Any]) -> Dict[str, GrowthRateMatrix]:
    """One TGR matrix per group, keyed by group name in first-seen order."""
    records, skipped = normalize_animals(animals)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed animals while building TGR matrices")

    return {
        name: growth_rate_matrix(members, group=name)
        for name, members in group_by(records, lambda a: a.group).items()
    }
