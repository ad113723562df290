"""
Statistics module: quantitative primitives shared by every analysis.

Descriptive statistics, percentile/IQR fences, Mann-Whitney U, Cohen's d and
the normal CDF. Pure functions, no state.
"""

from .descriptive import (
    basic_stats,
    filter_outliers,
    group_by,
    iqr_bounds,
    is_outlier,
    mean,
    median,
    percentile,
    std_dev,
    tumor_growth_rate,
    validate_numeric,
    variance,
)
from .inference import (
    asterisk_notation,
    cohens_d,
    effect_size_label,
    effect_size_label_r,
    erf,
    mann_whitney_u,
    normal_cdf,
)
from .schema import BasicStats, EffectSize, IQRBounds, MannWhitneyResult

__all__ = [
    "BasicStats",
    "EffectSize",
    "IQRBounds",
    "MannWhitneyResult",
    "basic_stats",
    "filter_outliers",
    "group_by",
    "iqr_bounds",
    "is_outlier",
    "mean",
    "median",
    "percentile",
    "std_dev",
    "tumor_growth_rate",
    "validate_numeric",
    "variance",
    "asterisk_notation",
    "cohens_d",
    "effect_size_label",
    "effect_size_label_r",
    "erf",
    "mann_whitney_u",
    "normal_cdf",
]
