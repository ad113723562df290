"""
Detectors for anomalous tumor measurements.

Implements explainable, deterministic rules:
- Impossible (non-positive) values
- Extreme growth / decline between consecutive measurements
- Last-day drops
- Intra-animal outliers (IQR fences on log values of one animal)
- Group outliers (IQR fences on log values of one group on one day)

Day 0 is the protected baseline: it never receives an outlier flag.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.core.config import config
from src.data.schema import AnimalRecord
from src.stats import iqr_bounds, is_outlier, tumor_growth_rate

from .profiles import SensitivityProfile
from .schema import FLAG_METADATA, Flag, FlagType

logger = logging.getLogger(__name__)

BASELINE_DAY = 0


def make_flag(flag_type: FlagType, animal: AnimalRecord, day: float, value: float, detail: str) -> Flag:
    name = FLAG_METADATA[flag_type].name
    return Flag(
        type=flag_type,
        animal_id=animal.id,
        group=animal.group,
        day=day,
        value=value,
        message=f"{name} at day {day:g}: {detail}",
    )


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


@dataclass
class LogCache:
    """
    Memoized natural logarithms.

    One instance per scan call; never shared between workers.
    """

    _values: Dict[float, float] = field(default_factory=dict)

    def log(self, value: float) -> float:
        cached = self._values.get(value)
        if cached is None:
            cached = math.log(value)
            self._values[value] = cached
        return cached


@dataclass
class GrowthRateDetector:
    """
    Flags implausible exponential rates between consecutive measurements.

    Rate is |ln(value / previous)| / day gap, compared against the profile's
    natural-log-per-day limits.
    """

    max_growth_rate: float
    max_decline_rate: float

    def compute(self, previous: Optional[float], value: float, previous_day: Optional[float], day: float) -> Optional[FlagType]:
        if previous is None or previous_day is None:
            return None
        if not (_positive(previous) and _positive(value) and day - previous_day > 0):
            return None
        rate = tumor_growth_rate(previous, value, previous_day, day)
        if math.isnan(rate):
            return None
        if value > previous and abs(rate) > self.max_growth_rate:
            return FlagType.EXTREME_GROWTH
        if value < previous and abs(rate) > self.max_decline_rate:
            return FlagType.EXTREME_DECLINE
        return None


@dataclass
class AnimalScanner:
    """
    Point-level and trajectory-level scan of a single animal.

    Notes:
    - Missing values (NaN) never raise and never match a rule.
    - The intra-animal IQR scan needs at least min_points measurements and as
      many positive ones.
    """

    profile: SensitivityProfile
    cache: LogCache = field(default_factory=LogCache)

    def __post_init__(self) -> None:
        self._rate_detector = GrowthRateDetector(
            max_growth_rate=self.profile.max_growth_rate,
            max_decline_rate=self.profile.max_decline_rate,
        )
        self._drop_ratio = config.anomaly.last_day_drop_ratio
        self._min_points = config.anomaly.min_points_for_intra_iqr

    def scan(self, animal: AnimalRecord) -> List[Flag]:
        flags: List[Flag] = []
        values = animal.measurements
        days = animal.time_points
        last = len(values) - 1

        for i, (day, value) in enumerate(zip(days, values)):
            previous = values[i - 1] if i > 0 else None
            previous_day = days[i - 1] if i > 0 else None

            if value <= 0:
                flags.append(make_flag(FlagType.IMPOSSIBLE_VALUE, animal, day, value, "measurement must be positive"))

            rate_flag = self._rate_detector.compute(previous, value, previous_day, day)
            if rate_flag is not None:
                rate = abs(tumor_growth_rate(previous, value, previous_day, day))
                limit = (
                    self.profile.max_growth_rate
                    if rate_flag == FlagType.EXTREME_GROWTH
                    else self.profile.max_decline_rate
                )
                flags.append(make_flag(rate_flag, animal, day, value, f"rate {rate:.3f}/day exceeds {limit:.3f}"))

            if i == last and previous is not None and value < previous * self._drop_ratio:
                flags.append(
                    make_flag(
                        FlagType.LAST_DAY_DROP,
                        animal,
                        day,
                        value,
                        f"{value:g} is below {self._drop_ratio:.0%} of previous {previous:g}",
                    )
                )

        if len(values) >= self._min_points:
            flags.extend(self.intra_outliers(animal))

        return flags

    def intra_outliers(self, animal: AnimalRecord) -> List[Flag]:
        log_values = [self.cache.log(v) for v in animal.measurements if _positive(v)]
        if len(log_values) < self._min_points:
            return []

        bounds = iqr_bounds(log_values, self.profile.iqr_sensitivity)
        flags = []
        for day, value in zip(animal.time_points, animal.measurements):
            if not _positive(value) or day == BASELINE_DAY:
                continue
            if is_outlier(self.cache.log(value), bounds):
                flags.append(
                    make_flag(
                        FlagType.INTRA_ANIMAL_OUTLIER,
                        animal,
                        day,
                        value,
                        f"log value outside [{bounds.lower:.3f}, {bounds.upper:.3f}]",
                    )
                )
        return flags


@dataclass
class GroupScanner:
    """
    Cross-sectional scan of one group, day by day.

    For every day with enough positive values, IQR fences are computed on the
    log values of all animals measured that day; animals outside the fences
    are flagged (day 0 excepted).
    """

    profile: SensitivityProfile
    cache: LogCache = field(default_factory=LogCache)

    def __post_init__(self) -> None:
        self._min_values = config.anomaly.min_values_per_day

    def scan(self, animals: List[AnimalRecord], group: str) -> List[Flag]:
        by_day: Dict[float, List[float]] = {}
        for animal in animals:
            for day, value in zip(animal.time_points, animal.measurements):
                if math.isfinite(day) and _positive(value):
                    by_day.setdefault(day, []).append(self.cache.log(value))

        flags: List[Flag] = []
        for day in sorted(by_day):
            log_values = by_day[day]
            if len(log_values) < self._min_values or day == BASELINE_DAY:
                continue
            bounds = iqr_bounds(log_values, self.profile.iqr_sensitivity)

            for animal in animals:
                try:
                    index = animal.time_points.index(day)
                except ValueError:
                    continue
                value = animal.measurements[index]
                if _positive(value) and is_outlier(self.cache.log(value), bounds):
                    flags.append(
                        make_flag(
                            FlagType.GROUP_OUTLIER,
                            animal,
                            day,
                            value,
                            f"log value outside group {group} range [{bounds.lower:.3f}, {bounds.upper:.3f}]",
                        )
                    )

        logger.debug(f"Group {group}: {len(flags)} group outlier flags across {len(by_day)} days")
        return flags
