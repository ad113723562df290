"""
Chunked per-animal scanning, in-process or across a process pool.

Per-animal scans are independent, so animals are split into contiguous chunks,
scanned by isolated workers and re-assembled in input order. Each worker owns
its own log cache. A pool failure falls back to the in-process scan.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from src.core.config import config
from src.core.exceptions import AnomalyDetectionError, WorkerPoolError
from src.core.workers import make_chunks, run_in_pool
from src.data.schema import AnimalRecord

from .detectors import AnimalScanner
from .profiles import SensitivityProfile
from .schema import Flag

logger = logging.getLogger(__name__)


def scan_chunk(animals: Sequence[AnimalRecord], profile: SensitivityProfile) -> List[List[Flag]]:
    """Scan a chunk of animals; returns one flag list per animal, in order."""
    scanner = AnimalScanner(profile=profile)
    return [scanner.scan(animal) for animal in animals]


def _scan_in_pool(animals: Sequence[AnimalRecord], profile: SensitivityProfile, workers: int) -> List[List[Flag]]:
    chunks = make_chunks(animals, min(workers, config.workers.max_chunks))
    try:
        chunk_results = run_in_pool(
            scan_chunk,
            [(chunk, profile) for chunk in chunks],
            max_workers=workers,
            timeout=config.workers.timeout_seconds,
        )
    except WorkerPoolError as e:
        raise AnomalyDetectionError(f"Parallel scan of {len(animals)} animals failed: {e}") from e

    flags_per_animal: List[List[Flag]] = []
    for result in chunk_results:
        flags_per_animal.extend(result)
    return flags_per_animal


def scan_animals(
    animals: Sequence[AnimalRecord],
    profile: SensitivityProfile,
    max_workers: Optional[int] = None,
) -> List[List[Flag]]:
    """
    Scan every animal, using a process pool for large datasets.

    The pool is used only when max_workers > 1 and the dataset has more than
    parallel_min_animals animals.
    """
    workers = max_workers or config.workers.max_workers
    if workers > 1 and len(animals) > config.workers.parallel_min_animals:
        try:
            return _scan_in_pool(animals, profile, workers)
        except AnomalyDetectionError as e:
            logger.warning(f"{e}; falling back to in-process scan")

    return scan_chunk(animals, profile)
