"""Exponential growth model fitting for tumor measurement series."""

from .batch import fit_animal, fit_growth_model_batch
from .fitter import animal_metrics, degenerate_model, fit_growth_model, log_linear_regression
from .matrices import growth_rate_matrices, growth_rate_matrix
from .schema import (
    AnimalMetrics,
    BatchFitResult,
    BatchProgress,
    BatchStats,
    FittedAnimal,
    GrowthModel,
    GrowthRateMatrix,
)

__all__ = [
    "AnimalMetrics",
    "BatchFitResult",
    "BatchProgress",
    "BatchStats",
    "FittedAnimal",
    "GrowthModel",
    "GrowthRateMatrix",
    "animal_metrics",
    "degenerate_model",
    "fit_animal",
    "fit_growth_model",
    "fit_growth_model_batch",
    "growth_rate_matrices",
    "growth_rate_matrix",
    "log_linear_regression",
]
