"""
Severity mapping and INCLUDE/EXCLUDE decisions.

Decisions are a pure function of (flags, strictness). Changing the strictness
re-derives decisions in O(flags) without rescanning the animals.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from src.core.config import config
from src.core.exceptions import ConfigurationError

from .detectors import BASELINE_DAY
from .schema import FLAG_METADATA, Decision, DecisionType, FilteringStrictness, Flag, FlagType, Severity

_EXCLUDED_SEVERITIES = {
    FilteringStrictness.CRITICAL: {Severity.CRITICAL},
    FilteringStrictness.CRITICAL_AND_HIGH: {Severity.CRITICAL, Severity.HIGH},
    FilteringStrictness.ALL: set(Severity),
}


def parse_strictness(value: Union[str, FilteringStrictness, None]) -> FilteringStrictness:
    """
    Resolve a strictness setting, defaulting to the configured one.

    Raises:
        ConfigurationError: If the value is not a known strictness
    """
    if value is None:
        value = config.anomaly.filtering_strictness
    try:
        return FilteringStrictness(value)
    except ValueError:
        allowed = [s.value for s in FilteringStrictness]
        raise ConfigurationError(f"Unknown filtering strictness {value!r}; expected one of {allowed}") from None


def severity_of(flag_type: Optional[FlagType]) -> Severity:
    metadata = FLAG_METADATA.get(flag_type) if flag_type is not None else None
    return metadata.severity if metadata else Severity.LOW


def should_exclude(severity: Severity, strictness: FilteringStrictness) -> bool:
    return severity in _EXCLUDED_SEVERITIES[strictness]


def derive_decisions(flags: Iterable[Flag], strictness: Union[str, FilteringStrictness, None] = None) -> List[Decision]:
    """
    One automatic decision per flag.

    EXCLUDE iff the flag is not on day 0 and its severity is covered by the
    strictness; day-0 flags are always kept.
    """
    level = parse_strictness(strictness)
    decisions = []

    for index, flag in enumerate(flags):
        severity = severity_of(flag.type)
        decision = DecisionType.INCLUDE
        reason = "Within normal criteria"

        if flag.day == BASELINE_DAY:
            reason = "Day 0 always preserved"
        elif should_exclude(severity, level):
            decision = DecisionType.EXCLUDE
            reason = f"{severity.value} anomaly detected"

        decisions.append(
            Decision(
                flag_id=index,
                animal_id=flag.animal_id,
                day=flag.day,
                decision=decision,
                reason=reason,
            )
        )

    return decisions
