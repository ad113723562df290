"""
Cohort QC pipeline.

Runs outlier analysis on a cohort, selects the dataset view to continue
with (complete, animal-filtered or point-filtered), then fits growth models
and evaluates baseline homogeneity on that view.

Usage:
    from src.pipeline import run_cohort_analysis
    analysis = run_cohort_analysis(animals, view="filtered", profile="auto")
"""

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional

from src.anomaly.engine import ProfileLike, StrictnessLike, analyze_dataset, rederive
from src.anomaly.schema import AnalysisResult
from src.core.exceptions import ConfigurationError
from src.core.logging_config import setup_logging
from src.data.schema import AnimalRecord, CamelModel
from src.growth.batch import ProgressCallback, fit_growth_model_batch
from src.growth.fitter import fit_growth_model
from src.growth.schema import BatchFitResult
from src.homogeneity.evaluator import evaluate_homogeneity
from src.homogeneity.schema import HomogeneityReport

logger = setup_logging()


class AnalysisView(str, Enum):
    COMPLETE = "complete"
    FILTERED = "filtered"
    POINTS = "points"


class CohortAnalysis(CamelModel):
    outliers: AnalysisResult
    view: AnalysisView
    growth: BatchFitResult
    homogeneity: HomogeneityReport


def select_view(result: AnalysisResult, view: AnalysisView) -> List[AnimalRecord]:
    """Animals of the requested dataset view."""
    if view == AnalysisView.COMPLETE:
        return list(result.dual_analysis.complete.animals)
    if view == AnalysisView.FILTERED:
        return list(result.dual_analysis.filtered.animals)
    return list(result.point_filtering_analysis.animals)


def run_cohort_analysis(
    animals: Iterable[Any],
    view: str = "complete",
    profile: ProfileLike = None,
    strictness: StrictnessLike = None,
    batch_size: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
    max_workers: Optional[int] = None,
) -> CohortAnalysis:
    """
    Run the full cohort QC flow.

    Args:
        animals: AnimalRecord instances or raw mappings
        view: "complete", "filtered" or "points"
        profile: Sensitivity profile name, "auto", mapping or SensitivityProfile
        strictness: Filtering strictness (config default if None)
        batch_size: Growth fitting batch size (config default if None)
        progress_callback: Receives growth fitting progress events
        max_workers: Process pool size for scanning and fitting

    Returns:
        CohortAnalysis

    Raises:
        ConfigurationError: If the view, profile or strictness is unknown
        DataValidationError: If a record has mismatched sequence lengths
    """
    try:
        selected = AnalysisView(view)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown view {view!r}; expected one of {[v.value for v in AnalysisView]}"
        ) from e

    outliers = analyze_dataset(animals, profile=profile, strictness=strictness, max_workers=max_workers)
    view_animals = select_view(outliers, selected)
    logger.info(f"Continuing with {selected.value} view: {len(view_animals)} animals")

    growth = fit_growth_model_batch(
        view_animals,
        batch_size=batch_size,
        progress_callback=progress_callback,
        max_workers=max_workers,
    )
    homogeneity = evaluate_homogeneity(view_animals)

    return CohortAnalysis(outliers=outliers, view=selected, growth=growth, homogeneity=homogeneity)


__all__ = [
    "AnalysisView",
    "CohortAnalysis",
    "analyze_dataset",
    "evaluate_homogeneity",
    "fit_growth_model",
    "fit_growth_model_batch",
    "rederive",
    "run_cohort_analysis",
    "select_view",
]
