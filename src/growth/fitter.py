"""
Exponential growth model fitting.

Fits measurement(t) = a * e^(r * t) by ordinary least squares of
ln(measurement) on t, using the closed-form sums. Insufficient or degenerate
data yields a well-defined degenerate model instead of an exception.
"""

from __future__ import annotations

import logging
import math
import sys
from typing import Any, List, Optional, Sequence, Tuple

from src.core.config import config
from src.core.exceptions import DataValidationError, InsufficientVariationError
from src.data.normalizers import coerce_number

from .schema import AnimalMetrics, GrowthModel

logger = logging.getLogger(__name__)

_EPSILON = sys.float_info.epsilon


def degenerate_model(valid_points: int, equation: str, error: str) -> GrowthModel:
    return GrowthModel(a=1.0, r=0.0, r2=0.0, valid_points=valid_points, equation=equation, error=error)


def _valid_pairs(time_points: Sequence[Any], measurements: Sequence[Any]) -> List[Tuple[float, float]]:
    pairs = []
    for t, y in zip(time_points, measurements):
        x, v = coerce_number(t), coerce_number(y)
        if math.isfinite(x) and math.isfinite(v) and v > 0:
            pairs.append((x, v))
    return pairs


def log_linear_regression(xs: Sequence[float], ys: Sequence[float]) -> Tuple[float, float, float]:
    """
    OLS of ys on xs from the sums Σx, Σy, Σxy, Σx².

    Returns:
        (intercept, slope, r2) with r2 = max(0, 1 - SSres/SStot), or 0 when
        SStot is within machine epsilon of zero

    Raises:
        InsufficientVariationError: If n·Σx² − (Σx)² is within machine epsilon of 0
    """
    n = len(xs)
    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_x2 = sum(x * x for x in xs)

    denominator = n * sum_x2 - sum_x * sum_x
    if abs(denominator) <= _EPSILON:
        raise InsufficientVariationError("Cannot calculate regression: insufficient variation in X values")

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_res = sum((y - (intercept + slope * x)) ** 2 for x, y in zip(xs, ys))
    ss_tot = sum((y - y_mean) ** 2 for y in ys)
    r2 = max(0.0, 1 - ss_res / ss_tot) if ss_tot > _EPSILON else 0.0
    return intercept, slope, r2


def fit_growth_model(time_points: Optional[Sequence[Any]], measurements: Optional[Sequence[Any]]) -> GrowthModel:
    """
    Fit an exponential growth model to one animal's series.

    Args:
        time_points: Days of measurement
        measurements: Measured values; non-positive or non-finite ones are ignored

    Returns:
        GrowthModel; degenerate (a=1, r=0, r2=0, error set) when fewer than
        min_valid_points valid points remain or all time points coincide

    Raises:
        DataValidationError: If the two sequences differ in length
    """
    time_points = list(time_points or [])
    measurements = list(measurements or [])
    if len(time_points) != len(measurements):
        raise DataValidationError(
            f"time_points ({len(time_points)}) and measurements ({len(measurements)}) differ in length"
        )

    pairs = _valid_pairs(time_points, measurements)
    min_points = config.growth.min_valid_points
    if len(pairs) < min_points:
        return degenerate_model(len(pairs), "Insufficient data", f"Less than {min_points} valid points")

    xs = [x for x, _ in pairs]
    ys = [math.log(v) for _, v in pairs]
    try:
        intercept, slope, r2 = log_linear_regression(xs, ys)
    except InsufficientVariationError as e:
        logger.debug(f"Degenerate growth fit: {e}")
        return degenerate_model(len(pairs), "Error in calculation", str(e))

    try:
        a = math.exp(intercept)
    except OverflowError:
        a = math.inf
    a = a if math.isfinite(a) else 1.0
    r = slope if math.isfinite(slope) else 0.0
    r2 = min(1.0, r2) if math.isfinite(r2) else 0.0

    return GrowthModel(
        a=a,
        r=r,
        r2=r2,
        valid_points=len(pairs),
        equation=f"y = {a:.2f} × e^({r:.4f}×t)",
    )


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def animal_metrics(measurements: Sequence[Any]) -> AnimalMetrics:
    """
    Summary metrics of a raw series: first/last values, their ratio, and the
    range of the positive finite values.
    """
    values = [coerce_number(v) for v in measurements or []]
    positive = [v for v in values if math.isfinite(v) and v > 0]
    if not positive:
        return AnimalMetrics()

    final = _finite_or_zero(values[-1])
    initial = _finite_or_zero(values[0])
    return AnimalMetrics(
        final_value=final,
        initial_value=initial,
        growth_ratio=final / initial if initial > 0 else 0.0,
        max_value=max(positive),
        min_value=min(positive),
    )
