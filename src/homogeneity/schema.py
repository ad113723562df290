"""
Schema definitions for baseline homogeneity evaluation.

Homogeneity is judged from the coefficient of variation (CV, percent) of the
baseline measurements of each group. Higher CV is worse.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from src.data.schema import CamelModel


class Quality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    INSUFFICIENT = "insufficient"


class OverallRecommendation(str, Enum):
    PROCEED = "PROCEED"
    CAUTION = "CAUTION"
    REVIEW = "REVIEW"


class GroupHomogeneity(CamelModel):
    """
    Baseline homogeneity of one group.

    mean and std_dev are rounded to 2 decimals, cv to 1 decimal. Groups
    without any positive finite baseline have has_baseline=False, cv=None,
    a zero score and quality "insufficient".
    """

    group_name: str
    n: int
    has_baseline: bool = False
    baseline_values: List[float] = Field(default_factory=list)
    mean: Optional[float] = None
    std_dev: Optional[float] = None
    cv: Optional[float] = None
    homogeneity_score: int = 0
    quality: Quality = Quality.INSUFFICIENT


class OverallAssessment(CamelModel):
    average_cv: Optional[float] = Field(None, alias="averageCV")
    overall_score: int = 0
    quality: Quality = Quality.INSUFFICIENT
    recommendation: OverallRecommendation = OverallRecommendation.REVIEW


class HomogeneityRecommendation(CamelModel):
    type: str
    category: str
    title: str
    message: str
    action: str


class HomogeneityReport(CamelModel):
    total_animals: int = 0
    total_groups: int = 0
    group_analysis: Dict[str, GroupHomogeneity] = Field(default_factory=dict)
    overall_assessment: OverallAssessment = Field(default_factory=OverallAssessment)
    recommendations: List[HomogeneityRecommendation] = Field(default_factory=list)
