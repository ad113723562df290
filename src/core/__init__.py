"""
Core module: Configuration, logging, exception handling and worker pools.
"""

from .config import Config, config
from .exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    DataValidationError,
    GrowthModelError,
    InsufficientVariationError,
    WorkerPoolError,
)
from .logging_config import setup_logging
from .workers import make_batches, make_chunks, run_in_pool

__all__ = [
    "Config",
    "config",
    "setup_logging",
    "make_batches",
    "make_chunks",
    "run_in_pool",
    "AnomalyDetectionError",
    "GrowthModelError",
    "InsufficientVariationError",
    "DataValidationError",
    "ConfigurationError",
    "WorkerPoolError",
]
