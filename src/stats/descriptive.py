"""
Descriptive statistics on small biological samples.

All helpers validate their input down to finite real numbers first and return
well-defined zero results for empty input instead of raising, because empty
days and fully-missing series are routine in cohort data.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

from src.core.exceptions import DataValidationError

from .schema import BasicStats, IQRBounds

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_numeric(values: Optional[Iterable[Any]], positive_only: bool = False) -> List[float]:
    """
    Keep the finite real numbers of *values* (strictly positive ones if asked).

    Non-numeric entries, booleans, NaN and infinities are dropped.
    """
    if values is None:
        return []
    valid = [float(v) for v in values if _is_real(v) and math.isfinite(v)]
    if positive_only:
        valid = [v for v in valid if v > 0]
    return valid


def mean(values: Optional[Iterable[Any]]) -> float:
    valid = validate_numeric(values)
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


def variance(values: Optional[Iterable[Any]]) -> float:
    """Sample variance (n-1 denominator); 0 for fewer than two finite values."""
    valid = validate_numeric(values)
    if len(valid) <= 1:
        return 0.0
    m = sum(valid) / len(valid)
    return max(0.0, sum((v - m) ** 2 for v in valid) / (len(valid) - 1))


def std_dev(values: Optional[Iterable[Any]]) -> float:
    return math.sqrt(variance(values))


def median(values: Optional[Iterable[Any]]) -> float:
    valid = sorted(validate_numeric(values))
    n = len(valid)
    if n == 0:
        return 0.0
    if n % 2 == 0:
        return (valid[n // 2 - 1] + valid[n // 2]) / 2
    return valid[n // 2]


def basic_stats(values: Optional[Iterable[Any]]) -> BasicStats:
    """
    Compute mean, sample std, min, max, median and count of the finite values.

    Returns an all-zero BasicStats when no finite value is present.
    """
    valid = validate_numeric(values)
    if not valid:
        return BasicStats()

    return BasicStats(
        mean=mean(valid),
        std=std_dev(valid),
        min=min(valid),
        max=max(valid),
        median=median(valid),
        count=len(valid),
    )


def percentile(values: Optional[Iterable[Any]], p: float) -> float:
    """
    Linear-interpolation percentile between order statistics.

    Args:
        values: Sample; non-finite entries are ignored
        p: Percentile in [0, 100]

    Returns:
        Interpolated percentile, or 0.0 for an empty sample

    Raises:
        DataValidationError: If p is outside [0, 100]
    """
    if not 0 <= p <= 100:
        raise DataValidationError(f"percentile must be within [0, 100], got {p}")

    ordered = sorted(validate_numeric(values))
    if not ordered:
        return 0.0

    index = (p / 100) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return ordered[lower]
    return ordered[lower] + (ordered[upper] - ordered[lower]) * (index - lower)


def iqr_bounds(values: Optional[Iterable[Any]], multiplier: float = 1.5) -> IQRBounds:
    """Quartiles and fences at q1 - multiplier*iqr and q3 + multiplier*iqr."""
    valid = validate_numeric(values)
    if not valid:
        return IQRBounds()

    q1 = percentile(valid, 25)
    q3 = percentile(valid, 75)
    iqr = q3 - q1
    return IQRBounds(
        q1=q1,
        q3=q3,
        iqr=iqr,
        lower=q1 - multiplier * iqr,
        upper=q3 + multiplier * iqr,
    )


def is_outlier(value: float, bounds: IQRBounds) -> bool:
    return value < bounds.lower or value > bounds.upper


def filter_outliers(values: Optional[Iterable[Any]], multiplier: float = 1.5) -> List[float]:
    valid = validate_numeric(values)
    bounds = iqr_bounds(valid, multiplier)
    return [v for v in valid if not is_outlier(v, bounds)]


def group_by(items: Iterable[T], key_fn: Callable[[T], K]) -> Dict[K, List[T]]:
    """
    Group items by key, preserving first-seen key order and item order.
    """
    groups: Dict[K, List[T]] = {}
    for item in items:
        groups.setdefault(key_fn(item), []).append(item)
    return groups


def tumor_growth_rate(value_x: float, value_y: float, time_x: float, time_y: float) -> float:
    """
    Instantaneous exponential growth rate ln(value_y / value_x) / (time_y - time_x).

    Returns NaN unless both values are strictly positive and time_y > time_x.
    """
    if not (_is_real(value_x) and _is_real(value_y) and _is_real(time_x) and _is_real(time_y)):
        return math.nan
    if not (value_x > 0 and value_y > 0):
        return math.nan
    if not time_y > time_x:
        return math.nan
    return math.log(value_y / value_x) / (time_y - time_x)
