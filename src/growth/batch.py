"""
Batch growth fitting over many animals.

Animals are processed in fixed-size batches with advisory progress events.
A malformed animal never aborts its batch: its item records the error and
carries no metrics. Batches are independent and may run in a process pool;
results are always returned in input order.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from src.core.config import config
from src.core.exceptions import WorkerPoolError
from src.core.workers import make_batches, run_in_pool
from src.data.normalizers import normalize_animal

from .fitter import animal_metrics, degenerate_model, fit_growth_model
from .schema import BatchFitResult, BatchProgress, BatchStats, FittedAnimal

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[BatchProgress], None]


def _raw_identity(raw: Any, index: int) -> Tuple[str, Optional[str]]:
    if isinstance(raw, Mapping):
        animal_id = raw.get("id") or raw.get("animalId") or raw.get("animal_id")
        group = raw.get("group")
        return (str(animal_id) if animal_id else f"animal_{index + 1}", str(group) if group is not None else None)
    animal_id = getattr(raw, "id", None)
    return (str(animal_id) if animal_id else f"animal_{index + 1}", getattr(raw, "group", None))


def fit_animal(raw: Any, index: int) -> FittedAnimal:
    """Fit one raw animal; failures are recorded on the returned item."""
    try:
        record = normalize_animal(raw, index)
        model = fit_growth_model(record.time_points, record.measurements)
        return FittedAnimal(
            index=index,
            id=record.id,
            group=record.group,
            time_points=record.time_points,
            measurements=record.measurements,
            model=model,
            metrics=animal_metrics(record.measurements),
        )
    except Exception as e:
        animal_id, group = _raw_identity(raw, index)
        logger.warning(f"Growth fit failed for {animal_id}: {e}")
        return FittedAnimal(
            index=index,
            id=animal_id,
            group=group,
            model=degenerate_model(0, "Error in calculation", str(e)),
            metrics=None,
        )


def process_batch(
    batch: Sequence[Any],
    batch_index: int,
    total_batches: int,
    start_index: int,
    total_animals: int,
    progress_callback: Optional[ProgressCallback] = None,
) -> List[FittedAnimal]:
    """
    Fit every animal of one batch, reporting progress every progress_interval
    animals and on the last one.
    """
    interval = config.growth.progress_interval
    results = []

    for offset, raw in enumerate(batch):
        results.append(fit_animal(raw, start_index + offset))

        processed = offset + 1
        if progress_callback is not None and (processed % interval == 0 or processed == len(batch)):
            progress_callback(
                BatchProgress(
                    batch_index=batch_index,
                    total_batches=total_batches,
                    batch_progress=round(processed / len(batch) * 100),
                    overall_progress=round((start_index + processed) / total_animals * 100),
                )
            )

    return results


def _fit_in_pool(
    batches: List[List[Any]],
    starts: List[int],
    total: int,
    workers: int,
    progress_callback: Optional[ProgressCallback],
) -> List[List[FittedAnimal]]:
    done = {"animals": 0}

    def on_result(index: int, result: List[FittedAnimal]) -> None:
        done["animals"] += len(result)
        if progress_callback is not None:
            progress_callback(
                BatchProgress(
                    batch_index=index,
                    total_batches=len(batches),
                    batch_progress=100,
                    overall_progress=round(done["animals"] / total * 100),
                )
            )

    return run_in_pool(
        process_batch,
        [(batch, i, len(batches), starts[i], total) for i, batch in enumerate(batches)],
        max_workers=workers,
        timeout=config.workers.timeout_seconds * len(batches),
        on_result=on_result,
    )


def fit_growth_model_batch(
    animals: Iterable[Any],
    batch_size: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
    max_workers: Optional[int] = None,
) -> BatchFitResult:
    """
    Fit growth models for many animals.

    Args:
        animals: AnimalRecord instances or raw mappings
        batch_size: Animals per batch (config default if None)
        progress_callback: Receives BatchProgress events; advisory only
        max_workers: Process pool size (1 = in-process)

    Returns:
        BatchFitResult with one FittedAnimal per input, in input order, and stats
    """
    started = time.perf_counter()
    items = list(animals or [])
    batches = make_batches(items, batch_size or config.growth.batch_size)
    starts = [i * len(batches[0]) for i in range(len(batches))] if batches else []
    workers = max_workers or config.workers.max_workers

    batch_results: Optional[List[List[FittedAnimal]]] = None
    if workers > 1 and len(batches) > 1:
        try:
            batch_results = _fit_in_pool(batches, starts, len(items), workers, progress_callback)
        except WorkerPoolError as e:
            logger.warning(f"{e}; falling back to in-process batch fitting")

    if batch_results is None:
        batch_results = [
            process_batch(batch, i, len(batches), starts[i], len(items), progress_callback)
            for i, batch in enumerate(batches)
        ]

    fitted = [item for result in batch_results for item in result]
    stats = BatchStats(
        total_animals=len(items),
        valid_models=sum(1 for item in fitted if item.model.is_valid),
        processing_time=(time.perf_counter() - started) * 1000,
        batches_processed=len(batches),
    )
    logger.info(f"Batch fit: {stats.valid_models}/{stats.total_animals} valid models in {stats.batches_processed} batches")
    return BatchFitResult(animals=fitted, stats=stats)
