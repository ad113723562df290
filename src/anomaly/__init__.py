"""
Anomaly module: multi-level outlier detection for tumor growth cohorts.

Implements deterministic detectors, severity-based decisions, dual and
point-filtered dataset views, and narrative recommendations.
"""

from .detectors import AnimalScanner, GroupScanner, GrowthRateDetector, LogCache
from .engine import AnomalyEngine, analyze_dataset, detect_flags, rederive, summarize
from .profiles import PROFILES, SensitivityProfile, auto_profile_name, resolve_profile
from .recommendations import dataset_recommendations, specific_recommendations
from .schema import (
    FLAG_METADATA,
    AnalysisResult,
    AnalysisSummary,
    AnnotatedAnimal,
    Decision,
    DecisionType,
    DetectionResult,
    DualAnalysis,
    FilteringStrictness,
    Flag,
    FlagType,
    PointFilteringAnalysis,
    Recommendation,
    Severity,
)
from .scoring import derive_decisions, parse_strictness, severity_of, should_exclude
from .views import build_dual_analysis, build_point_filtering_analysis

__all__ = [
    "AnomalyEngine",
    "analyze_dataset",
    "detect_flags",
    "rederive",
    "summarize",
    "AnimalScanner",
    "GroupScanner",
    "GrowthRateDetector",
    "LogCache",
    "PROFILES",
    "SensitivityProfile",
    "auto_profile_name",
    "resolve_profile",
    "FLAG_METADATA",
    "AnalysisResult",
    "AnalysisSummary",
    "AnnotatedAnimal",
    "Decision",
    "DecisionType",
    "DetectionResult",
    "DualAnalysis",
    "FilteringStrictness",
    "Flag",
    "FlagType",
    "PointFilteringAnalysis",
    "Recommendation",
    "Severity",
    "derive_decisions",
    "parse_strictness",
    "severity_of",
    "should_exclude",
    "build_dual_analysis",
    "build_point_filtering_analysis",
    "dataset_recommendations",
    "specific_recommendations",
]
