"""
Baseline homogeneity evaluation for tumor cohorts.

Each group's baseline (day-0 measurement, else the first measurement) is
summarized by its coefficient of variation. The CV drives a 0-100 score,
penalized for small groups, a quality label, an overall PROCEED / CAUTION /
REVIEW verdict and a list of recommendations.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from src.core.config import HomogeneityThresholds, config
from src.core.exceptions import ConfigurationError
from src.data.normalizers import normalize_animals
from src.data.schema import AnimalRecord
from src.stats.descriptive import basic_stats, group_by, validate_numeric

from .schema import (
    GroupHomogeneity,
    HomogeneityRecommendation,
    HomogeneityReport,
    OverallAssessment,
    OverallRecommendation,
    Quality,
)

logger = logging.getLogger(__name__)

BASELINE_DAY = 0


def baseline_value(animal: AnimalRecord) -> Optional[float]:
    """Measurement at day 0 if the animal has one, else its first measurement."""
    if not animal.measurements:
        return None
    if BASELINE_DAY in animal.time_points:
        return animal.measurements[animal.time_points.index(BASELINE_DAY)]
    return animal.measurements[0]


def _default_thresholds() -> HomogeneityThresholds:
    return config.homogeneity.model_copy()


@dataclass
class HomogeneityEvaluator:
    """
    Scores baseline homogeneity per group and overall.

    Stateless apart from its thresholds: evaluate() can be called any number
    of times on the same instance.
    """

    thresholds: HomogeneityThresholds = field(default_factory=_default_thresholds)

    def score(self, cv: float, n: int) -> float:
        """
        Homogeneity score in [0, 100] for a CV and group size.

        Non-increasing in cv for fixed n, and non-increasing as n drops below
        the small and very small sample sizes.
        """
        t = self.thresholds
        if cv > t.poor:
            # continues from the fair branch's value at t.poor; the literal
            # 100 - (cv - poor) * 2 would jump back up above the fair scores
            score = max(0.0, 95 - (t.poor - t.excellent) - (cv - t.poor) * 2)
        elif cv > t.excellent:
            score = 95 - (cv - t.excellent)
        else:
            score = 100.0

        if n < t.small_sample_n:
            score *= t.small_sample_factor
        if n < t.very_small_sample_n:
            score *= t.very_small_sample_factor
        return score

    def quality(self, cv: float) -> Quality:
        if cv > self.thresholds.poor:
            return Quality.POOR
        if cv > self.thresholds.good:
            return Quality.FAIR
        if cv > self.thresholds.excellent:
            return Quality.GOOD
        return Quality.EXCELLENT

    def analyze_group(self, group_name: str, animals: List[AnimalRecord]) -> GroupHomogeneity:
        n = len(animals)
        baselines = validate_numeric([baseline_value(a) for a in animals], positive_only=True)
        if not baselines:
            return GroupHomogeneity(group_name=group_name, n=n)

        stats = basic_stats(baselines)
        cv = stats.std / stats.mean * 100 if stats.mean > 0 else 0.0
        return GroupHomogeneity(
            group_name=group_name,
            n=n,
            has_baseline=True,
            baseline_values=baselines,
            mean=round(stats.mean, 2),
            std_dev=round(stats.std, 2),
            cv=round(cv, 1),
            homogeneity_score=round(self.score(cv, n)),
            quality=self.quality(cv),
        )

    def overall(self, groups: Dict[str, GroupHomogeneity]) -> OverallAssessment:
        valid = [g for g in groups.values() if g.has_baseline]
        if not valid:
            return OverallAssessment()

        average_cv = sum(g.cv for g in valid) / len(valid)
        average_score = sum(g.homogeneity_score for g in valid) / len(valid)

        if average_cv > self.thresholds.poor:
            quality, recommendation = Quality.POOR, OverallRecommendation.REVIEW
        elif average_cv > self.thresholds.good:
            quality, recommendation = Quality.FAIR, OverallRecommendation.CAUTION
        elif average_cv > self.thresholds.excellent:
            quality, recommendation = Quality.GOOD, OverallRecommendation.PROCEED
        else:
            quality, recommendation = Quality.EXCELLENT, OverallRecommendation.PROCEED

        return OverallAssessment(
            average_cv=round(average_cv, 1),
            overall_score=round(average_score),
            quality=quality,
            recommendation=recommendation,
        )

    def recommendations(
        self, groups: Dict[str, GroupHomogeneity], overall: OverallAssessment
    ) -> List[HomogeneityRecommendation]:
        recs = []

        if overall.recommendation == OverallRecommendation.REVIEW:
            recs.append(HomogeneityRecommendation(
                type="error",
                category="experimental",
                title="High Baseline Variability Detected",
                message=f"Average CV = {overall.average_cv}% across groups",
                action="Consider reviewing randomization or excluding high-variance animals",
            ))
        elif overall.recommendation == OverallRecommendation.CAUTION:
            recs.append(HomogeneityRecommendation(
                type="warning",
                category="experimental",
                title="Moderate Baseline Variability",
                message=f"Average CV = {overall.average_cv}% may affect sensitivity",
                action="Monitor closely during analysis and consider stratified analysis",
            ))

        for group in groups.values():
            if group.has_baseline and group.cv > self.thresholds.good:
                recs.append(HomogeneityRecommendation(
                    type="warning",
                    category="group",
                    title=f"High Variability in {group.group_name}",
                    message=f"CV = {group.cv}% in group {group.group_name}",
                    action="Review individual animals in this group",
                ))
            if group.n < self.thresholds.small_sample_n:
                recs.append(HomogeneityRecommendation(
                    type="info",
                    category="statistical",
                    title=f"Small Sample Size in {group.group_name}",
                    message=f"Only {group.n} animals in group {group.group_name}",
                    action="Consider increasing sample size for better statistical power",
                ))

        if not recs:
            recs.append(HomogeneityRecommendation(
                type="success",
                category="experimental",
                title="Excellent Model Homogeneity",
                message=f"Average CV = {overall.average_cv}% - Model ready for analysis",
                action="Proceed with confidence to main analysis",
            ))
        return recs

    def evaluate(self, animals: Iterable[Any]) -> HomogeneityReport:
        """
        Evaluate baseline homogeneity of a cohort.

        Args:
            animals: AnimalRecord instances or raw mappings, grouped by their group label

        Returns:
            HomogeneityReport with per-group analysis, overall assessment and recommendations
        """
        records, skipped = normalize_animals(animals)
        if skipped:
            logger.warning(f"Skipped {skipped} malformed animals in homogeneity evaluation")

        groups = {
            name: self.analyze_group(name, members)
            for name, members in group_by(records, lambda a: a.group).items()
        }
        overall = self.overall(groups)
        logger.info(
            f"Homogeneity: {len(groups)} groups, average CV {overall.average_cv}, "
            f"recommendation {overall.recommendation.value}"
        )
        return HomogeneityReport(
            total_animals=len(records),
            total_groups=len(groups),
            group_analysis=groups,
            overall_assessment=overall,
            recommendations=self.recommendations(groups, overall),
        )

    def update_thresholds(self, **changes: Any) -> HomogeneityThresholds:
        """
        Replace some thresholds, keeping the others.

        Raises:
            ConfigurationError: If the resulting thresholds are invalid
        """
        try:
            self.thresholds = HomogeneityThresholds.model_validate(
                {**self.thresholds.model_dump(), **changes}
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid homogeneity thresholds: {e}") from e
        return self.thresholds

    def get_config(self) -> Dict[str, Dict[str, float]]:
        t = self.thresholds
        return {
            "thresholds": {"excellent": t.excellent, "good": t.good, "poor": t.poor},
            "sample_size_adjustments": {"small": t.small_sample_factor, "very_small": t.very_small_sample_factor},
        }


def evaluate_homogeneity(
    animals: Iterable[Any], thresholds: Optional[HomogeneityThresholds] = None
) -> HomogeneityReport:
    """Evaluate with a fresh evaluator (config thresholds unless given)."""
    evaluator = HomogeneityEvaluator(thresholds) if thresholds is not None else HomogeneityEvaluator()
    return evaluator.evaluate(animals)
