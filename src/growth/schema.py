"""
Schema definitions for exponential growth fitting.

A GrowthModel describes measurement(t) = a * e^(r * t) fitted to one animal.
Degenerate inputs never raise: they produce a model with a=1, r=0, r2=0 and
an explanatory error string.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import ConfigDict, Field

from src.data.schema import CamelModel


class GrowthModel(CamelModel):
    """
    Fitted exponential growth model.

    Fields:
    - a: amplitude exp(intercept), >= 0
    - r: instantaneous growth rate per time unit (signed)
    - r2: goodness of fit of the log-linear regression, in [0, 1]
    - valid_points: positive finite points used
    - equation: display string
    - error: reason the model is degenerate, None for a real fit
    """

    model_config = ConfigDict(frozen=True)

    a: float = 1.0
    r: float = 0.0
    r2: float = Field(0.0, ge=0.0, le=1.0)
    valid_points: int = 0
    equation: str = ""
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


class AnimalMetrics(CamelModel):
    final_value: float = 0.0
    initial_value: float = 0.0
    growth_ratio: float = 0.0
    max_value: float = 0.0
    min_value: float = 0.0


class FittedAnimal(CamelModel):
    """
    One batch item: the animal's identity and series with its model.

    Failed items keep whatever identity could be read from the raw input,
    carry model.error and have metrics=None.
    """

    index: int
    id: str
    group: Optional[str] = None
    time_points: List[float] = Field(default_factory=list)
    measurements: List[float] = Field(default_factory=list)
    model: GrowthModel
    metrics: Optional[AnimalMetrics] = None


class BatchProgress(CamelModel):
    batch_index: int
    total_batches: int
    batch_progress: int
    overall_progress: int


class BatchStats(CamelModel):
    total_animals: int = 0
    valid_models: int = 0
    processing_time: float = Field(0.0, description="Milliseconds")
    batches_processed: int = 0


class BatchFitResult(CamelModel):
    animals: List[FittedAnimal] = Field(default_factory=list)
    stats: BatchStats = Field(default_factory=BatchStats)


class GrowthRateMatrix(CamelModel):
    """
    Mean pairwise tumor growth rates between measurement days.

    values[i][j] (== values[j][i]) is the mean of ln(v_j / v_i) / (day_j - day_i)
    over animals measured on both days, 0 when no animal qualifies.
    individual_data maps "dayX-dayY" to the per-animal rates.
    """

    group: Optional[str] = None
    days: List[float] = Field(default_factory=list)
    values: List[List[float]] = Field(default_factory=list)
    individual_data: Dict[str, List[float]] = Field(default_factory=dict)
