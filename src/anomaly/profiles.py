"""
Sensitivity profiles for outlier detection.

A profile bundles the thresholds that decide how aggressive detection is.
Named presets cover pilot, standard and large studies; callers may also
supply a custom mapping. Growth and decline limits are natural-log change
per day.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterable, Optional, Union

from pydantic import ConfigDict, Field, ValidationError

from src.core.config import config
from src.core.exceptions import ConfigurationError
from src.data.schema import AnimalRecord, CamelModel
from src.stats import group_by, median

logger = logging.getLogger(__name__)

AUTO_PROFILE = "auto"


class SensitivityProfile(CamelModel):
    """
    Thresholds controlling outlier detection.

    Fields:
    - max_growth_rate / max_decline_rate: |ln(v/prev)| per day limits
    - iqr_sensitivity: multiplier k of the IQR fences (in log space)
    - require_multiple_flags: informational, carried for reporting
    - min_group_size_for_iqr: smaller groups skip the group scan
    - biological_change_threshold: informational ln-change threshold
    """

    model_config = ConfigDict(frozen=True)

    name: str = "Custom"
    max_growth_rate: float = Field(..., gt=0.0)
    max_decline_rate: float = Field(..., gt=0.0)
    iqr_sensitivity: float = Field(..., gt=0.0)
    require_multiple_flags: bool = False
    min_group_size_for_iqr: int = Field(..., ge=1)
    biological_change_threshold: float = Field(math.log(10), gt=0.0)
    verbose: bool = False


PROFILES: Mapping[str, SensitivityProfile] = MappingProxyType(
    {
        "ultraConservative": SensitivityProfile(
            name="Ultra-Conservative (pilot studies, n=5-8)",
            max_growth_rate=math.log(50),
            max_decline_rate=math.log(10),
            iqr_sensitivity=4.0,
            require_multiple_flags=True,
            min_group_size_for_iqr=8,
            biological_change_threshold=math.log(20),
        ),
        "conservative": SensitivityProfile(
            name="Conservative (standard studies, n=8-12)",
            max_growth_rate=math.log(20),
            max_decline_rate=math.log(5),
            iqr_sensitivity=3.0,
            require_multiple_flags=True,
            min_group_size_for_iqr=5,
            biological_change_threshold=math.log(10),
        ),
        "moderate": SensitivityProfile(
            name="Moderate (large studies, n>12)",
            max_growth_rate=math.log(10),
            max_decline_rate=math.log(3),
            iqr_sensitivity=2.0,
            require_multiple_flags=False,
            min_group_size_for_iqr=4,
            biological_change_threshold=math.log(5),
        ),
    }
)


def auto_profile_name(animals: Iterable[AnimalRecord]) -> str:
    """
    Pick a preset from the median group size of the dataset.

    < 8 animals per group -> ultraConservative, <= 12 -> conservative,
    otherwise moderate.
    """
    sizes = [len(members) for members in group_by(animals, lambda a: a.group).values()]
    if not sizes:
        return config.anomaly.default_profile
    typical = median(sizes)
    if typical < 8:
        return "ultraConservative"
    if typical <= 12:
        return "conservative"
    return "moderate"


def resolve_profile(
    profile: Union[str, Mapping, SensitivityProfile, None] = None,
    animals: Optional[Iterable[AnimalRecord]] = None,
) -> SensitivityProfile:
    """
    Turn a profile name, custom mapping or instance into a SensitivityProfile.

    Raises:
        ConfigurationError: Unknown preset name or invalid custom mapping
    """
    if profile is None:
        profile = config.anomaly.default_profile

    if isinstance(profile, SensitivityProfile):
        return profile

    if isinstance(profile, Mapping):
        try:
            return SensitivityProfile.model_validate(dict(profile))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid custom profile: {e}") from e

    if profile == AUTO_PROFILE:
        chosen = auto_profile_name(animals or [])
        logger.info(f"Auto profile selected: {chosen}")
        return PROFILES[chosen]

    try:
        return PROFILES[profile]
    except KeyError:
        raise ConfigurationError(
            f"Unknown profile {profile!r}; expected one of {sorted(PROFILES)} or {AUTO_PROFILE!r}"
        ) from None
