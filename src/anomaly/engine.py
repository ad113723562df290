"""
Cohort outlier detection engine.

Consumes animal records, detects point-, animal- and group-level anomalies,
derives INCLUDE/EXCLUDE decisions under a filtering strictness, and produces
the complete, animal-filtered and point-filtered dataset views.

The engine is two-phase and stateless:
- detect_flags(animals, profile) is a pure function of the data and profile.
- decisions, views, summary and recommendations are a pure function of
  (flags, strictness), so rederive() changes the strictness without rescanning.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from src.data.normalizers import normalize_animals
from src.data.schema import AnimalRecord
from src.stats import group_by

from .detectors import GroupScanner, LogCache
from .profiles import SensitivityProfile, resolve_profile
from .recommendations import dataset_recommendations, specific_recommendations
from .schema import (
    AnalysisResult,
    AnalysisSummary,
    AnnotatedAnimal,
    Decision,
    DecisionType,
    DetectionResult,
    FilteringStrictness,
    Flag,
    FlaggedMeasurement,
    FlagType,
    Severity,
)
from .scoring import derive_decisions, parse_strictness, severity_of
from .views import build_dual_analysis, build_point_filtering_analysis
from .workers import scan_animals

logger = logging.getLogger(__name__)

RECORD_FIELDS = {"id", "group", "time_points", "measurements"}

ProfileLike = Union[str, Mapping, SensitivityProfile, None]
StrictnessLike = Union[str, FilteringStrictness, None]


def _annotate(animal: AnimalRecord, flags: List[Flag]) -> AnnotatedAnimal:
    by_day: Dict[float, List[Flag]] = {}
    for flag in flags:
        by_day.setdefault(flag.day, []).append(flag)

    flagged: List[FlaggedMeasurement] = []
    seen = set()
    for index, (day, value) in enumerate(zip(animal.time_points, animal.measurements)):
        if day in by_day and day not in seen:
            seen.add(day)
            flagged.append(FlaggedMeasurement(index=index, day=day, value=value, flags=by_day[day]))

    return AnnotatedAnimal(
        **animal.model_dump(include=RECORD_FIELDS),
        flags=flags,
        flagged_measurements=flagged,
    )


def detect_flags(
    animals: Sequence[AnimalRecord],
    profile: SensitivityProfile,
    max_workers: Optional[int] = None,
) -> DetectionResult:
    """
    Run the per-animal and per-group scans.

    Args:
        animals: Normalized animal records
        profile: Sensitivity profile
        max_workers: Process pool size for the per-animal scan (1 = in-process)

    Returns:
        DetectionResult with annotated animals, flags in detection order
        (per-animal flags in input order, then group flags) and scan notes
    """
    log: List[str] = []
    flags_per_animal = scan_animals(animals, profile, max_workers)
    flags: List[Flag] = [flag for animal_flags in flags_per_animal for flag in animal_flags]

    group_scanner = GroupScanner(profile=profile, cache=LogCache())
    for group, members in group_by(animals, lambda a: a.group).items():
        if len(members) < profile.min_group_size_for_iqr:
            note = f"Group {group} skipped (n={len(members)})"
            log.append(note)
            logger.info(note)
            continue
        flags.extend(group_scanner.scan(members, group))

    flags_by_animal = group_by(flags, lambda f: f.animal_id)
    annotated = [_annotate(animal, flags_by_animal.get(animal.id, [])) for animal in animals]

    return DetectionResult(animals=annotated, flags=flags, log=log)


def summarize(
    flags: Sequence[Flag],
    decisions: Sequence[Decision],
    profile_name: str,
    strictness: FilteringStrictness,
    data_type: str = "volume",
) -> AnalysisSummary:
    flag_counts = {t.value: 0 for t in FlagType}
    severity_counts = {s.value: 0 for s in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW)}
    decision_counts = {d.value: 0 for d in DecisionType}

    for flag in flags:
        flag_counts[flag.type.value] += 1
        severity_counts[severity_of(flag.type).value] += 1
    for decision in decisions:
        decision_counts[decision.decision.value] += 1

    return AnalysisSummary(
        total_flags=len(flags),
        flag_counts=flag_counts,
        severity_counts=severity_counts,
        decision_counts=decision_counts,
        config_used=profile_name,
        strictness=strictness,
        data_type=data_type,
    )


def _assemble(
    detection: DetectionResult,
    strictness: FilteringStrictness,
    profile_name: str,
    data_type: str,
) -> AnalysisResult:
    flags = detection.flags
    decisions = derive_decisions(flags, strictness)
    dual = build_dual_analysis(detection.animals, flags, decisions, strictness)
    point_filtering = build_point_filtering_analysis(detection.animals, flags, decisions, strictness)

    return AnalysisResult(
        animals=detection.animals,
        flags=flags,
        decisions=decisions,
        dual_analysis=dual,
        point_filtering_analysis=point_filtering,
        summary=summarize(flags, decisions, profile_name, strictness, data_type),
        recommendations=dataset_recommendations(flags, dual),
        specific_recommendations=specific_recommendations(flags),
        log=detection.log,
    )


def analyze_dataset(
    animals: Iterable[Any],
    profile: ProfileLike = None,
    strictness: StrictnessLike = None,
    data_type: str = "volume",
    max_workers: Optional[int] = None,
) -> AnalysisResult:
    """
    Full analysis: detect flags, decide, and derive all dataset views.

    Args:
        animals: AnimalRecord instances or raw mappings
        profile: Preset name, "auto", custom mapping or SensitivityProfile
        strictness: "critical", "criticalAndHigh" or "all" (config default if None)
        data_type: Measurement kind, reported in the summary
        max_workers: Process pool size for the per-animal scan

    Returns:
        AnalysisResult

    Raises:
        DataValidationError: If a record has mismatched sequence lengths
        ConfigurationError: If the profile or strictness is unknown
    """
    records, skipped = normalize_animals(animals)
    level = parse_strictness(strictness)
    resolved = resolve_profile(profile, records)

    logger.info(f"Starting analysis of {len(records)} animals with profile {resolved.name!r}")
    detection = detect_flags(records, resolved, max_workers)
    if skipped:
        detection.log.append(f"{skipped} non-record entries skipped")

    result = _assemble(detection, level, resolved.name, data_type)
    logger.info(
        f"Analysis completed: {result.summary.total_flags} flags, "
        f"{result.dual_analysis.impact.animals_excluded} animals excluded"
    )
    return result


def rederive(result: AnalysisResult, strictness: StrictnessLike) -> AnalysisResult:
    """
    Recompute decisions, views, summary and recommendations for a new strictness.

    Flags and annotated animals are reused as-is; no animal is rescanned.
    """
    detection = DetectionResult(animals=result.animals, flags=result.flags, log=list(result.log))
    return _assemble(
        detection,
        parse_strictness(strictness),
        result.summary.config_used,
        result.summary.data_type,
    )


@dataclass
class AnomalyEngine:
    """
    Convenience wrapper binding a profile and a strictness.

    Notes:
    - Holds configuration only; every call returns a fresh AnalysisResult,
      so one engine can serve concurrent callers.
    - The profile is resolved per call, so "auto" adapts to each dataset.
    """

    profile: ProfileLike = None
    strictness: StrictnessLike = None
    max_workers: Optional[int] = None

    def analyze_dataset(self, animals: Iterable[Any], data_type: str = "volume") -> AnalysisResult:
        return analyze_dataset(
            animals,
            profile=self.profile,
            strictness=self.strictness,
            data_type=data_type,
            max_workers=self.max_workers,
        )

    def rederive(self, result: AnalysisResult, strictness: StrictnessLike = None) -> AnalysisResult:
        return rederive(result, strictness if strictness is not None else self.strictness)
