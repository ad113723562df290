"""Baseline homogeneity evaluation of tumor cohorts."""

from .evaluator import HomogeneityEvaluator, baseline_value, evaluate_homogeneity
from .schema import (
    GroupHomogeneity,
    HomogeneityRecommendation,
    HomogeneityReport,
    OverallAssessment,
    OverallRecommendation,
    Quality,
)

__all__ = [
    "GroupHomogeneity",
    "HomogeneityEvaluator",
    "HomogeneityRecommendation",
    "HomogeneityReport",
    "OverallAssessment",
    "OverallRecommendation",
    "Quality",
    "baseline_value",
    "evaluate_homogeneity",
]
