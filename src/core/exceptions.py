"""
Custom exceptions for the tumor cohort quality-control core.

These exceptions provide clear error semantics across the system.
Use them to distinguish between caller contract violations, numeric
degeneracy inside the fitter, and configuration errors.
"""


class AnomalyDetectionError(Exception):
    """Raised when an outlier scan cannot be completed (e.g. worker pool failure)."""
    pass


class GrowthModelError(Exception):
    """Base exception for growth model fitting failures."""
    pass


class InsufficientVariationError(GrowthModelError):
    """Raised when all time points are identical and no slope can be fitted."""
    pass


class DataValidationError(ValueError):
    """Raised when input data violates the expected shape (empty sample, length mismatch)."""
    pass


class ConfigurationError(Exception):
    """Raised when a profile or threshold configuration is invalid or unknown."""
    pass


class WorkerPoolError(Exception):
    """Raised when a process pool fails, times out or cannot receive a task."""
    pass
