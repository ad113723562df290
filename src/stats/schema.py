"""
Result records for the statistics library.

Every statistical helper returns one of these immutable models so downstream
code (outlier detection, homogeneity scoring, reports) reads named fields
instead of positional tuples.
"""

from __future__ import annotations

from pydantic import ConfigDict

from src.data.schema import CamelModel


class BasicStats(CamelModel):
    """
    Descriptive statistics of the finite subset of a sample.

    Fields:
    - mean, median, min, max: central tendency and range
    - std: sample standard deviation (n-1), 0 when count <= 1
    - count: number of finite values used
    """

    model_config = ConfigDict(frozen=True)

    mean: float = 0.0
    std: float = 0.0
    min: float = 0.0
    max: float = 0.0
    median: float = 0.0
    count: int = 0


class IQRBounds(CamelModel):
    """Quartiles and Tukey fences (q1 - k*iqr, q3 + k*iqr)."""

    model_config = ConfigDict(frozen=True)

    q1: float = 0.0
    q3: float = 0.0
    iqr: float = 0.0
    lower: float = 0.0
    upper: float = 0.0


class MannWhitneyResult(CamelModel):
    """
    Mann-Whitney U test outcome.

    Fields:
    - U: min(U1, U2)
    - U1, U2: per-sample U statistics
    - R1, R2: rank sums (mid-ranks for ties)
    - z: continuity-corrected, tie-corrected normal deviate
    - p: two-sided p-value, floored at 0.001
    """

    model_config = ConfigDict(frozen=True, alias_generator=None)

    U: float
    U1: float
    U2: float
    z: float
    p: float
    R1: float
    R2: float


class EffectSize(CamelModel):
    """Effect size value with its qualitative description."""

    model_config = ConfigDict(frozen=True)

    value: float
    description: str
