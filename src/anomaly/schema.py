"""
Schema definitions for cohort outlier detection.

All outputs are deterministic and auditable. Each flag references the animal,
day and value that triggered it; each decision references its flag; dataset
views are derived from decisions without mutating the input records.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from pydantic import ConfigDict, Field

from src.data.schema import AnimalRecord, CamelModel


class FlagType(str, Enum):
    """Kinds of anomaly a measurement can be flagged with."""

    IMPOSSIBLE_VALUE = "IMPOSSIBLE_VALUE"
    EXTREME_GROWTH = "EXTREME_GROWTH"
    EXTREME_DECLINE = "EXTREME_DECLINE"
    INTRA_ANIMAL_OUTLIER = "INTRA_ANIMAL_OUTLIER"
    GROUP_OUTLIER = "GROUP_OUTLIER"
    LAST_DAY_DROP = "LAST_DAY_DROP"


class Severity(str, Enum):
    """Severity levels for flags."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FilteringStrictness(str, Enum):
    """
    Which severities turn a flag into an exclusion.

    critical ⊆ criticalAndHigh ⊆ all.
    """

    CRITICAL = "critical"
    CRITICAL_AND_HIGH = "criticalAndHigh"
    ALL = "all"


class DecisionType(str, Enum):
    INCLUDE = "INCLUDE"
    EXCLUDE = "EXCLUDE"
    REVIEW = "REVIEW"


@dataclass(frozen=True)
class FlagMetadata:
    severity: Severity
    name: str
    color: str


FLAG_METADATA: Mapping[FlagType, FlagMetadata] = MappingProxyType(
    {
        FlagType.IMPOSSIBLE_VALUE: FlagMetadata(Severity.CRITICAL, "Impossible Value", "#dc3545"),
        FlagType.EXTREME_GROWTH: FlagMetadata(Severity.CRITICAL, "Extreme Growth", "#dc3545"),
        FlagType.EXTREME_DECLINE: FlagMetadata(Severity.CRITICAL, "Extreme Decline", "#dc3545"),
        FlagType.INTRA_ANIMAL_OUTLIER: FlagMetadata(Severity.HIGH, "Intra-Animal Outlier", "#fd7e14"),
        FlagType.GROUP_OUTLIER: FlagMetadata(Severity.MEDIUM, "Group Outlier", "#ffc107"),
        FlagType.LAST_DAY_DROP: FlagMetadata(Severity.MEDIUM, "Last Day Drop", "#ffc107"),
    }
)


class Flag(CamelModel):
    """
    A single anomaly detected at one (animal, day) pair.

    Fields:
    - type: anomaly kind (severity comes from FLAG_METADATA)
    - animal_id / group: owning animal and its group
    - day / value: the flagged measurement
    - message: human-readable description
    """

    model_config = ConfigDict(frozen=True)

    type: FlagType
    animal_id: str
    group: str
    day: float
    value: float
    message: str

    @property
    def severity(self) -> Severity:
        return FLAG_METADATA[self.type].severity


class Decision(CamelModel):
    """
    INCLUDE/EXCLUDE verdict for one flag under a filtering strictness.

    The flag is referenced by its index in the analysis flag list and by
    (animal_id, day).
    """

    model_config = ConfigDict(frozen=True)

    flag_id: int
    animal_id: str
    day: float
    decision: DecisionType
    reason: str
    automatic: bool = True


class FlaggedMeasurement(CamelModel):
    index: int
    day: float
    value: float
    flags: List[Flag] = Field(default_factory=list)


class AnnotatedAnimal(AnimalRecord):
    """Copy of an input animal with the flags raised against it."""

    flags: List[Flag] = Field(default_factory=list)
    flagged_measurements: List[FlaggedMeasurement] = Field(default_factory=list)


class DatasetView(CamelModel):
    animals: List[AnnotatedAnimal] = Field(default_factory=list)
    count: int = 0
    total_measurements: int = 0


class FilteringImpact(CamelModel):
    animals_excluded: int = 0
    measurements_excluded: int = 0
    excluded_animal_ids: List[str] = Field(default_factory=list)


class DualAnalysis(CamelModel):
    """
    Complete dataset paired with the animal-filtered dataset.

    Invariant: complete.count - filtered.count == impact.animals_excluded.
    """

    complete: DatasetView
    filtered: DatasetView
    impact: FilteringImpact


class ExcludedPoint(CamelModel):
    day: float
    value: float
    reason: str


class PointFilteredAnimal(AnnotatedAnimal):
    excluded_points: List[ExcludedPoint] = Field(default_factory=list)


class PointFilteringAnalysis(CamelModel):
    """
    Dataset with individual excluded points removed.

    Fields:
    - animals: retained animals (each with >= 3 remaining points)
    - excluded_points: number of points removed from retained animals
    - total_points_original / total_points_filtered: point totals before/after
    """

    animals: List[PointFilteredAnimal] = Field(default_factory=list)
    excluded_points: int = 0
    total_points_original: int = 0
    total_points_filtered: int = 0


class Recommendation(CamelModel):
    """Advisory message produced from heuristic thresholds."""

    type: str
    title: str
    message: str
    category: Optional[str] = None
    recommendation: Optional[str] = None
    affected_animals: List[str] = Field(default_factory=list)


class AnalysisSummary(CamelModel):
    total_flags: int = 0
    flag_counts: Dict[str, int] = Field(default_factory=dict)
    severity_counts: Dict[str, int] = Field(default_factory=dict)
    decision_counts: Dict[str, int] = Field(default_factory=dict)
    config_used: str = ""
    strictness: FilteringStrictness = FilteringStrictness.CRITICAL_AND_HIGH
    data_type: str = "volume"


class DetectionResult(CamelModel):
    """Output of the flag detection phase: annotated animals, flags and notes."""

    animals: List[AnnotatedAnimal] = Field(default_factory=list)
    flags: List[Flag] = Field(default_factory=list)
    log: List[str] = Field(default_factory=list)


class AnalysisResult(CamelModel):
    """
    Complete outcome of one dataset analysis.

    Fields:
    - animals: annotated copies of the input animals
    - flags / decisions: detected anomalies and their verdicts
    - dual_analysis: complete vs animal-filtered views
    - point_filtering_analysis: view with individual points removed
    - summary: counts by type, severity and decision
    - recommendations / specific_recommendations: dataset-level and
      pattern-specific advice
    - log: notes recorded during the scan (e.g. skipped groups)
    """

    animals: List[AnnotatedAnimal] = Field(default_factory=list)
    flags: List[Flag] = Field(default_factory=list)
    decisions: List[Decision] = Field(default_factory=list)
    dual_analysis: DualAnalysis
    point_filtering_analysis: PointFilteringAnalysis
    summary: AnalysisSummary
    recommendations: List[Recommendation] = Field(default_factory=list)
    specific_recommendations: List[Recommendation] = Field(default_factory=list)
    log: List[str] = Field(default_factory=list)
