"""
Narrative recommendations for an analysis run.

Heuristic, advisory thresholds only: they summarize flag patterns for a human
reviewer and never feed back into decisions.
"""

from __future__ import annotations

from typing import List, Sequence

from .schema import DualAnalysis, Flag, FlagType, Recommendation, Severity
from .scoring import severity_of

MIN_LAST_DAY_DROPS = 3
MIN_EXTREME_GROWTH = 2
MIN_EXTREME_DECLINE = 2
MAX_QUIET_MEASUREMENTS_EXCLUDED = 5


def _affected(flags: Sequence[Flag]) -> List[str]:
    return list(dict.fromkeys(f.animal_id for f in flags))


def specific_recommendations(flags: Sequence[Flag]) -> List[Recommendation]:
    """Pattern-specific advice for last-day drops, extreme growth and extreme decline."""
    drops = [f for f in flags if f.type == FlagType.LAST_DAY_DROP]
    growth = [f for f in flags if f.type == FlagType.EXTREME_GROWTH]
    decline = [f for f in flags if f.type == FlagType.EXTREME_DECLINE]
    recs: List[Recommendation] = []

    if len(drops) >= MIN_LAST_DAY_DROPS:
        recs.append(
            Recommendation(
                type="warning",
                category="temporal",
                title="Last Day Drops",
                message=f"Detected {len(drops)} drops",
                recommendation="Review last time point",
                affected_animals=_affected(drops),
            )
        )

    if len(growth) >= MIN_EXTREME_GROWTH:
        recs.append(
            Recommendation(
                type="info",
                category="biological",
                title="Atypical Growth",
                message="Extreme growth detected",
                recommendation="Review instrument calibration",
                affected_animals=_affected(growth),
            )
        )

    if len(decline) >= MIN_EXTREME_DECLINE:
        ids = _affected(decline)
        recs.append(
            Recommendation(
                type="warning",
                category="individual" if len(ids) == 1 else "systematic",
                title="Extreme Decline",
                message=f"Extreme decline in {len(ids)} animal(s)",
                recommendation="Review experimental conditions",
                affected_animals=ids,
            )
        )

    return recs


def dataset_recommendations(flags: Sequence[Flag], dual: DualAnalysis) -> List[Recommendation]:
    """Dataset-level advice derived from the filtering impact."""
    recs: List[Recommendation] = []
    impact = dual.impact

    if impact.animals_excluded:
        recs.append(
            Recommendation(
                type="warning",
                title="Excluded Animals",
                message=f"Review {impact.animals_excluded} excluded animals.",
                affected_animals=list(impact.excluded_animal_ids),
            )
        )
    if impact.measurements_excluded > MAX_QUIET_MEASUREMENTS_EXCLUDED:
        recs.append(
            Recommendation(
                type="info",
                title="Filtering Impact",
                message=f"{impact.measurements_excluded} measurements affected.",
            )
        )
    if not any(severity_of(f.type) == Severity.CRITICAL for f in flags):
        recs.append(
            Recommendation(
                type="success",
                title="Data Quality",
                message="No critical anomalies detected.",
            )
        )

    return recs
